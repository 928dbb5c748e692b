"""
graphobject
===========

A flexible object model for nodes of a social graph API and its
extensible open graph variant.

Core idea:
- One key/value store per node, viewed both as an untyped mapping and
  through any number of typed facades chosen at the point of use.

Public API:
- GraphObject
- GraphObjectArray
- GraphFacade
- GraphObjectStore
- is_same_graph_object
"""

from graphobject.graph.graph_object import GraphObject, GraphObjectArray
from graphobject.graph.facade import GraphFacade, view
from graphobject.graph.identity import is_same_graph_object
from graphobject.graph.graph_store import GraphObjectStore
from graphobject.config.settings import GraphObjectConfig

__all__ = [
    "GraphObject",
    "GraphObjectArray",
    "GraphFacade",
    "view",
    "is_same_graph_object",
    "GraphObjectStore",
    "GraphObjectConfig",
]

__version__ = "0.1.0"
