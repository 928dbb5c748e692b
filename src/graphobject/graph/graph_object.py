from __future__ import annotations

import logging
from collections.abc import Mapping, MutableMapping, MutableSequence, Sequence
from reprlib import recursive_repr
from typing import Any, Dict, Iterator, List, Optional, Set

from graphobject.config.settings import DEFAULT_CONFIG, GraphObjectConfig
from graphobject.graph.identity import is_same_graph_object

_SCALAR_KINDS = (type(None), str, bool, int, float)


class GraphObject(MutableMapping):
    """
    Mutable key/value view over one node of a graph API response.

    The object does not copy the document it wraps: the dict passed in
    becomes the backing storage, shared by every holder of this object
    and every facade viewing it.

    Nested dicts and lists are left untouched by wrap(). They are
    converted to GraphObject / GraphObjectArray the first time they are
    read back out, and the converted value replaces the raw one in
    storage, so repeated reads return the same instance.

    Not thread-safe. Mutation (including the write-back performed by
    lazy conversion on read) assumes a single writer.
    """

    __slots__ = ("_data", "_config")

    def __init__(
        self,
        data: Optional[Dict[str, Any]] = None,
        *,
        config: Optional[GraphObjectConfig] = None,
    ) -> None:
        if data is not None and not isinstance(data, dict):
            raise TypeError(
                f"GraphObject storage must be a dict, got {type(data).__name__}"
            )
        self._data: Dict[str, Any] = {} if data is None else data
        self._config = config or DEFAULT_CONFIG

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def create(
        cls,
        *,
        config: Optional[GraphObjectConfig] = None,
        **fields: Any,
    ) -> "GraphObject":
        """
        Create a new graph object, usually to post a new object or action.
        """
        obj = cls(config=config)
        for key, value in fields.items():
            obj.set(key, value)
        return obj

    @classmethod
    def wrap(
        cls,
        raw: Any,
        *,
        config: Optional[GraphObjectConfig] = None,
    ) -> "GraphObject":
        """
        Present an existing raw document as a graph object.

        A dict is used as-is for storage; callers should use the returned
        object from then on rather than mutate the dict directly. Wrapping
        a GraphObject (or a facade over one) returns that same object and
        ignores ``config``.
        """
        if isinstance(raw, GraphObject):
            return raw

        node = _view_target(raw)
        if node is not None:
            return node

        if isinstance(raw, dict):
            return cls(raw, config=config)

        if isinstance(raw, Mapping):
            logging.getLogger("graphobject.wrap").debug(
                "copying %s into graph object storage", type(raw).__name__
            )
            return cls(dict(raw), config=config)

        raise TypeError(f"cannot wrap {type(raw).__name__} as a graph object")

    @staticmethod
    def is_same(a: Any, b: Any, *, id_key: Optional[str] = None) -> bool:
        """
        True if both objects carry the same identifier.
        """
        return is_same_graph_object(a, b, id_key=id_key)

    # ------------------------------------------------------------------
    # Mapping protocol
    # ------------------------------------------------------------------

    def __getitem__(self, key: str) -> Any:
        value = self._data[key]
        wrapped = _wrap_nested(value, self._config)
        if wrapped is not value:
            self._data[key] = wrapped
            logging.getLogger("graphobject.wrap").debug(
                "lazily wrapped key=%s as %s", key, type(wrapped).__name__
            )
        return wrapped

    def __setitem__(self, key: str, value: Any) -> None:
        if not isinstance(key, str):
            raise TypeError(
                f"graph object keys must be str, got {type(key).__name__}"
            )
        self._data[key] = _coerce_value(value, self._config)

    def __delitem__(self, key: str) -> None:
        del self._data[key]

    def __iter__(self) -> Iterator[str]:
        # Snapshot, so callers may set/remove while iterating.
        return iter(list(self._data))

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def get(self, key: str, default: Any = None) -> Any:
        if key not in self._data:
            return default
        return self[key]

    # ------------------------------------------------------------------
    # Graph object API
    # ------------------------------------------------------------------

    def set(self, key: str, value: Any) -> None:
        self[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    @property
    def config(self) -> GraphObjectConfig:
        return self._config

    @property
    def storage_id(self) -> int:
        """
        Identity of the backing dict, equal for all wrappers sharing it.
        """
        return id(self._data)

    def shares_storage(self, other: Any) -> bool:
        return isinstance(other, GraphObject) and other._data is self._data

    def to_raw(self) -> Dict[str, Any]:
        """
        Plain dict copy of this object, for handing to a JSON encoder.
        """
        return to_raw(self, max_depth=self._config.max_depth)

    @recursive_repr()
    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._data!r})"


class GraphObjectArray(MutableSequence):
    """
    Mutable sequence view over a JSON array inside a graph object.

    Elements are wrapped lazily on read, with the same write-back
    memoization as GraphObject.
    """

    __slots__ = ("_items", "_config")

    def __init__(
        self,
        items: Optional[List[Any]] = None,
        *,
        config: Optional[GraphObjectConfig] = None,
    ) -> None:
        if items is not None and not isinstance(items, list):
            raise TypeError(
                f"GraphObjectArray storage must be a list, got {type(items).__name__}"
            )
        self._items: List[Any] = [] if items is None else items
        self._config = config or DEFAULT_CONFIG

    @classmethod
    def wrap(
        cls,
        raw: Any,
        *,
        config: Optional[GraphObjectConfig] = None,
    ) -> "GraphObjectArray":
        if isinstance(raw, GraphObjectArray):
            return raw
        if isinstance(raw, list):
            return cls(raw, config=config)
        if isinstance(raw, tuple):
            return cls(list(raw), config=config)
        raise TypeError(f"cannot wrap {type(raw).__name__} as a graph object array")

    # ------------------------------------------------------------------
    # Sequence protocol
    # ------------------------------------------------------------------

    def __getitem__(self, index):
        if isinstance(index, slice):
            return [self[i] for i in range(*index.indices(len(self._items)))]

        value = self._items[index]
        wrapped = _wrap_nested(value, self._config)
        if wrapped is not value:
            self._items[index] = wrapped
        return wrapped

    def __setitem__(self, index, value) -> None:
        if isinstance(index, slice):
            self._items[index] = [_coerce_value(v, self._config) for v in value]
        else:
            self._items[index] = _coerce_value(value, self._config)

    def __delitem__(self, index) -> None:
        del self._items[index]

    def __len__(self) -> int:
        return len(self._items)

    def insert(self, index: int, value: Any) -> None:
        self._items.insert(index, _coerce_value(value, self._config))

    def __eq__(self, other: object) -> bool:
        if isinstance(other, (str, bytes)) or not isinstance(other, Sequence):
            return NotImplemented
        return len(self) == len(other) and all(a == b for a, b in zip(self, other))

    __hash__ = None  # type: ignore[assignment]

    # ------------------------------------------------------------------
    # Graph object API
    # ------------------------------------------------------------------

    @property
    def config(self) -> GraphObjectConfig:
        return self._config

    def to_raw(self) -> List[Any]:
        return to_raw(self, max_depth=self._config.max_depth)

    @recursive_repr()
    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._items!r})"


# ----------------------------------------------------------------------
# Unwrapping
# ----------------------------------------------------------------------


def to_raw(value: Any, *, max_depth: int = DEFAULT_CONFIG.max_depth) -> Any:
    """
    Deep-copy a graph value into plain dicts and lists.

    Reads storage directly, so nothing is lazily wrapped along the way.
    Raises ValueError on reference cycles and on nesting deeper than
    ``max_depth`` containers.
    """
    return _to_raw(value, max_depth, set(), 0)


def _to_raw(value: Any, max_depth: int, path: Set[int], depth: int) -> Any:
    node = _view_target(value)
    if node is not None:
        value = node

    if isinstance(value, GraphObject):
        storage: Any = value._data
    elif isinstance(value, GraphObjectArray):
        storage = value._items
    elif isinstance(value, (Mapping, list, tuple)):
        storage = value
    else:
        return value

    if depth > max_depth:
        raise ValueError(f"graph object nesting exceeds max_depth={max_depth}")

    marker = id(storage)
    if marker in path:
        raise ValueError("graph object contains a reference cycle")

    path.add(marker)
    try:
        if isinstance(storage, Mapping):
            return {
                key: _to_raw(item, max_depth, path, depth + 1)
                for key, item in storage.items()
            }
        return [_to_raw(item, max_depth, path, depth + 1) for item in storage]
    finally:
        path.discard(marker)


# ----------------------------------------------------------------------
# Helpers
# ----------------------------------------------------------------------


def _view_target(value: Any) -> Optional[GraphObject]:
    """
    The GraphObject behind a facade view, if ``value`` is one.
    """
    node = getattr(value, "graph_object", None)
    if isinstance(node, GraphObject):
        return node
    return None


def _wrap_nested(value: Any, config: GraphObjectConfig) -> Any:
    if isinstance(value, (GraphObject, GraphObjectArray)):
        return value
    if isinstance(value, dict):
        return GraphObject(value, config=config)
    if isinstance(value, Mapping):
        return GraphObject(dict(value), config=config)
    if isinstance(value, list):
        return GraphObjectArray(value, config=config)
    if isinstance(value, tuple):
        return GraphObjectArray(list(value), config=config)
    return value


def _coerce_value(
    value: Any,
    config: GraphObjectConfig,
    seen: Optional[Set[int]] = None,
) -> Any:
    """
    Prepare a value for storage.

    Facades become their graph objects and tuples become lists, at any
    depth inside plain dicts and lists. Those containers are updated in
    place; a non-dict mapping is copied into a dict first.
    """
    node = _view_target(value)
    if node is not None:
        return node

    if isinstance(value, (GraphObject, GraphObjectArray)):
        return value

    # Arrays are mutable in storage.
    if isinstance(value, tuple):
        value = list(value)
    elif isinstance(value, Mapping) and not isinstance(value, dict):
        value = dict(value)

    if isinstance(value, (dict, list)):
        seen = set() if seen is None else seen
        if id(value) in seen:
            return value
        seen.add(id(value))

        entries = list(value.items() if isinstance(value, dict) else enumerate(value))
        for key, item in entries:
            if config.validate_values and isinstance(value, dict) and not isinstance(key, str):
                raise TypeError(
                    f"graph object keys must be str, got {type(key).__name__}"
                )
            coerced = _coerce_value(item, config, seen)
            if coerced is not item:
                value[key] = coerced
        return value

    if not config.validate_values or isinstance(value, _SCALAR_KINDS):
        return value

    raise TypeError(
        f"unsupported graph object value kind: {type(value).__name__}"
    )
