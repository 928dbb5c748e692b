"""
Graph object subsystem for graphobject.

Defines the dual view over graph API nodes:
- GraphObject: untyped, mutable key/value container with lazy wrapping
- GraphFacade: typed, consumer-chosen views over the same storage
- identity comparison by domain identifier
- an identity-indexed store of graph objects
"""

from graphobject.graph.graph_object import GraphObject, GraphObjectArray, to_raw
from graphobject.graph.identity import graph_object_id, is_same_graph_object
from graphobject.graph.facade import GraphFacade, GraphField, view, validate_facade
from graphobject.graph.graph_store import GraphObjectStore

__all__ = [
    "GraphObject",
    "GraphObjectArray",
    "to_raw",
    "graph_object_id",
    "is_same_graph_object",
    "GraphFacade",
    "GraphField",
    "view",
    "validate_facade",
    "GraphObjectStore",
]
