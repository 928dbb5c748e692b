from __future__ import annotations

import logging
from collections.abc import Hashable
from typing import Any, Dict, Iterator, List, Optional, Set, Tuple, Union

import networkx as nx

from graphobject.graph.graph_object import GraphObject, GraphObjectArray
from graphobject.graph.identity import graph_object_id


class GraphObjectStore:
    """
    Identity-indexed in-memory collection of graph objects.

    Each stored object is a node keyed by its identifier, so two
    responses describing the same node collapse onto one canonical
    GraphObject. Edges record which object references which, labelled
    with the key path the reference was found under.

    Identifiers are used as stored; ``123`` and ``"123"`` are different
    objects, matching is_same_graph_object.
    """

    def __init__(self, *, id_key: Optional[str] = None) -> None:
        self._graph = nx.DiGraph()
        self.id_key = id_key

    # -------------------- Objects --------------------

    def add(self, obj: Any) -> GraphObject:
        """
        Store ``obj`` and return the canonical instance for its identifier.

        When an object with the same identifier is already stored, it is
        updated in place with the incoming fields.
        """
        node = GraphObject.wrap(obj)
        object_id = graph_object_id(node, id_key=self.id_key)
        if object_id is None:
            raise ValueError("cannot store a graph object without an identifier")
        if not isinstance(object_id, Hashable):
            raise ValueError(
                f"cannot index a graph object by a {type(object_id).__name__} identifier"
            )

        existing = self.get(object_id)
        if existing is None:
            self._graph.add_node(object_id, obj=node)
            return node

        if not existing.shares_storage(node):
            existing.update(node)
            logging.getLogger("graphobject.store").debug(
                "merged %s fields into id=%s", len(node), object_id
            )
        return existing

    def add_tree(self, obj: Any) -> GraphObject:
        """
        Store ``obj`` and every nested graph object that has an identifier.

        Nested objects are linked from the closest identified ancestor.
        """
        root = GraphObject.wrap(obj)
        canonical = self.add(root)
        self._add_children(root, graph_object_id(canonical, id_key=self.id_key), "", {id(root)})
        return canonical

    def get(self, object_id: Hashable) -> Optional[GraphObject]:
        if object_id not in self._graph:
            return None
        return self._graph.nodes[object_id]["obj"]

    def remove(self, object_id: Hashable) -> None:
        if object_id in self._graph:
            self._graph.remove_node(object_id)

    def __contains__(self, object_id: object) -> bool:
        return isinstance(object_id, Hashable) and object_id in self._graph

    def __len__(self) -> int:
        return self._graph.number_of_nodes()

    def __iter__(self) -> Iterator[GraphObject]:
        for _, obj in self._graph.nodes(data="obj"):
            yield obj

    # -------------------- References --------------------

    def link(self, source_id: Hashable, target_id: Hashable, relation: str) -> None:
        for object_id in (source_id, target_id):
            if object_id not in self._graph:
                raise ValueError(f"no graph object stored with id={object_id!r}")
        self._graph.add_edge(source_id, target_id, relation=relation)

    def relation(self, source_id: Hashable, target_id: Hashable) -> Optional[str]:
        return self._graph.get_edge_data(source_id, target_id, {}).get("relation")

    def references(self, object_id: Hashable) -> Dict[Hashable, str]:
        """
        Objects ``object_id`` refers to, mapped to the key path of each reference.
        """
        if object_id not in self._graph:
            return {}
        return {
            target: relation
            for _, target, relation in self._graph.out_edges(object_id, data="relation")
        }

    def referrers(self, object_id: Hashable) -> Dict[Hashable, str]:
        """
        Objects referring to ``object_id``, mapped to the key path they use.
        """
        if object_id not in self._graph:
            return {}
        return {
            source: relation
            for source, _, relation in self._graph.in_edges(object_id, data="relation")
        }

    def links(self) -> List[Tuple[Hashable, Hashable, str]]:
        return list(self._graph.edges(data="relation"))

    def copy(self) -> "GraphObjectStore":
        """
        New index over the same graph object instances.
        """
        other = GraphObjectStore(id_key=self.id_key)
        other._graph = self._graph.copy()
        return other

    # -------------------- Internals --------------------

    def _add_children(
        self,
        value: Union[GraphObject, GraphObjectArray],
        parent_id: Hashable,
        path: str,
        seen: Set[int],
    ) -> None:
        if isinstance(value, GraphObject):
            children = [
                (f"{path}.{key}" if path else key, child)
                for key, child in value.items()
            ]
        else:
            # Array elements share the array's key path.
            children = [(path, child) for child in value]

        for child_path, child in children:
            if not isinstance(child, (GraphObject, GraphObjectArray)):
                continue
            if id(child) in seen:
                continue
            seen.add(id(child))

            next_parent, next_path = parent_id, child_path
            if isinstance(child, GraphObject):
                child_id = graph_object_id(child, id_key=self.id_key)
                if child_id is not None and isinstance(child_id, Hashable):
                    self.add(child)
                    if child_id != parent_id:
                        self.link(parent_id, child_id, child_path)
                    next_parent, next_path = child_id, ""

            self._add_children(child, next_parent, next_path, seen)
