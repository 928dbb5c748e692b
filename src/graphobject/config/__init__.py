"""
Configuration layer for graphobject.

Configuration in graphobject is:
- Explicit (passed to wrap/create, not read from globals at call time)
- Immutable (frozen dataclasses)
- Optional (DEFAULT_CONFIG applies when none is given)
"""

from graphobject.config.settings import GraphObjectConfig, DEFAULT_CONFIG
from graphobject.config.loader import DEFAULTS, load_config

__all__ = [
    "GraphObjectConfig",
    "DEFAULT_CONFIG",
    "DEFAULTS",
    "load_config",
]
