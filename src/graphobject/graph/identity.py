from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional

from graphobject.config.settings import DEFAULT_CONFIG


def graph_object_id(obj: Any, *, id_key: Optional[str] = None) -> Any:
    """
    Identifier of a graph object, or None when it has none.

    Only a missing key or a null value counts as absent; any other
    value is returned as stored.
    """
    node = _node_of(obj)
    if node is None:
        return None

    key = id_key or getattr(node, "config", DEFAULT_CONFIG).id_key
    return node.get(key)


def is_same_graph_object(a: Any, b: Any, *, id_key: Optional[str] = None) -> bool:
    """
    True iff both objects carry an identifier and the identifiers are equal.

    Absence is never equality, not even for the same instance.
    """
    a_id = graph_object_id(a, id_key=id_key)
    b_id = graph_object_id(b, id_key=id_key)
    if a_id is None or b_id is None:
        return False
    return bool(a_id == b_id)


def _node_of(obj: Any) -> Optional[Mapping]:
    view_target = getattr(obj, "graph_object", None)
    if isinstance(view_target, Mapping):
        return view_target
    if isinstance(obj, Mapping):
        return obj
    return None
