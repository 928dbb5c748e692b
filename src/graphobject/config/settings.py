from __future__ import annotations

from dataclasses import dataclass

# ---------------------------------------------------------------------
# Graph object policy
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class GraphObjectConfig:
    """
    Controls how graph objects are wrapped, compared, and unwrapped.

    A config is attached to every GraphObject at construction time and
    is inherited by the nested objects and arrays it wraps lazily.
    """

    # Reserved key carrying the domain identifier of a node
    id_key: str = "id"

    # Reject values that are not JSON-like kinds on set
    validate_values: bool = True

    # Deepest nesting accepted when converting back to raw documents
    max_depth: int = 64


DEFAULT_CONFIG = GraphObjectConfig()
