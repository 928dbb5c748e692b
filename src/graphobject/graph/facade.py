from __future__ import annotations

import inspect
import logging
import sys
import types
from collections.abc import Mapping, Sequence
from typing import (
    Any,
    ClassVar,
    Dict,
    Optional,
    Tuple,
    Type,
    TypeVar,
    Union,
    get_args,
    get_origin,
    get_type_hints,
)

from graphobject.config.settings import GraphObjectConfig
from graphobject.graph.graph_object import GraphObject, GraphObjectArray

F = TypeVar("F", bound="GraphFacade")

_UNION_TYPES = (Union, types.UnionType)


# ----------------------------------------------------------------------
# Field kinds
# ----------------------------------------------------------------------


class _FieldKind:
    """
    Converts between stored values and the type a facade field declares.

    ``read`` returns None for anything that does not fit the declared type.
    """

    def read(self, value: Any) -> Any:
        return value

    def write(self, value: Any) -> Any:
        return value


class _AnyKind(_FieldKind):
    pass


class _ScalarKind(_FieldKind):
    def __init__(self, py_type: type) -> None:
        self.py_type = py_type

    def read(self, value: Any) -> Any:
        if self.py_type is bool:
            return value if isinstance(value, bool) else None
        if isinstance(value, bool):
            return None
        if self.py_type is float and isinstance(value, (int, float)):
            return float(value)
        if isinstance(value, self.py_type):
            return value
        return None


class _NodeKind(_FieldKind):
    def read(self, value: Any) -> Any:
        return value if isinstance(value, GraphObject) else None


class _FacadeKind(_FieldKind):
    def __init__(self, facade: Type["GraphFacade"]) -> None:
        self.facade = facade

    def read(self, value: Any) -> Any:
        if isinstance(value, GraphObject):
            return self.facade(value)
        return None

    def write(self, value: Any) -> Any:
        if isinstance(value, GraphFacade):
            return value.graph_object
        return value


class _ArrayKind(_FieldKind):
    def __init__(self, item: Optional[_FieldKind]) -> None:
        self.item = item

    def read(self, value: Any) -> Any:
        if not isinstance(value, GraphObjectArray):
            return None
        if self.item is None:
            return value
        return [self.item.read(v) for v in value]

    def write(self, value: Any) -> Any:
        if self.item is None or not isinstance(value, (list, tuple)):
            return value
        return [self.item.write(v) for v in value]


def _compile(hint: Any, where: str) -> _FieldKind:
    if hint is Any or hint is object:
        return _AnyKind()

    origin = get_origin(hint)

    if origin in _UNION_TYPES:
        args = [a for a in get_args(hint) if a is not type(None)]
        if len(args) == 1:
            return _compile(args[0], where)
        raise TypeError(f"{where}: union field types are not supported ({hint!r})")

    if hint in (str, int, float, bool):
        return _ScalarKind(hint)

    if hint in (GraphObject, dict, Mapping) or origin in (dict, Mapping):
        return _NodeKind()

    if isinstance(hint, type) and issubclass(hint, GraphFacade):
        return _FacadeKind(hint)

    if hint in (list, Sequence, GraphObjectArray):
        return _ArrayKind(None)

    if origin in (list, Sequence):
        args = get_args(hint)
        return _ArrayKind(_compile(args[0], where) if args else None)

    raise TypeError(f"{where}: unsupported facade field type {hint!r}")


# ----------------------------------------------------------------------
# Field descriptor
# ----------------------------------------------------------------------


class GraphField:
    """
    Data descriptor mapping one facade attribute onto one storage key.

    The declared type is resolved on first use (or by validate_facade),
    so facades may refer to facades defined later in the same module.
    """

    def __init__(self, owner: type, name: str, key: str) -> None:
        self.owner = owner
        self.name = name
        self.key = key
        self._kind: Optional[_FieldKind] = None

    def resolve(self) -> _FieldKind:
        if self._kind is None:
            hints = get_type_hints(
                self.owner,
                localns={
                    **self.owner.__dict__.get("__facade_localns__", {}),
                    self.owner.__name__: self.owner,
                },
            )
            self._kind = _compile(
                hints[self.name], f"{self.owner.__name__}.{self.name}"
            )
        return self._kind

    def _checked_kind(self) -> _FieldKind:
        try:
            return self.resolve()
        except NameError as exc:
            raise TypeError(
                f"cannot resolve type of {self.owner.__name__}.{self.name}: {exc}"
            ) from exc

    def __get__(self, view: Optional["GraphFacade"], objtype: Optional[type] = None) -> Any:
        if view is None:
            return self

        value = view.graph_object.get(self.key)
        result = self._checked_kind().read(value)

        if result is None and value is not None:
            logging.getLogger("graphobject.facade").debug(
                "ignoring off-schema value for %s.%s: %s",
                type(view).__name__,
                self.name,
                type(value).__name__,
            )
        return result

    def __set__(self, view: "GraphFacade", value: Any) -> None:
        view.graph_object.set(self.key, self._checked_kind().write(value))

    def __delete__(self, view: "GraphFacade") -> None:
        view.graph_object.remove(self.key)

    def __repr__(self) -> str:
        return f"GraphField({self.owner.__name__}.{self.name}, key={self.key!r})"


# ----------------------------------------------------------------------
# Facade base
# ----------------------------------------------------------------------


class GraphFacade:
    """
    Typed view over a GraphObject.

    Subclasses declare fields as class annotations::

        class GraphLocation(GraphFacade):
            city: str
            latitude: float

        class GraphPlace(GraphFacade):
            id: str
            name: str
            location: GraphLocation

    Any graph object can be viewed through any facade; nothing is
    checked or copied. Reading a field the object lacks, or holds in an
    unexpected shape, returns None. Writing a field sets the key on the
    shared storage. Fields a facade does not declare stay reachable
    through ``view.graph_object``.

    Field sets compose through inheritance. A trailing underscore maps
    to the bare key, so ``from_`` reads ``"from"``.
    """

    __slots__ = ("_graph_object",)

    __graph_fields__: ClassVar[Dict[str, GraphField]] = {}

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)

        fields: Dict[str, GraphField] = {}
        for base in reversed(cls.__mro__[1:]):
            fields.update(getattr(base, "__graph_fields__", {}))

        for name, annotation in inspect.get_annotations(cls).items():
            if name.startswith("_") or _is_classvar(annotation):
                continue
            key = name[:-1] if name.endswith("_") else name
            field = GraphField(cls, name, key)
            setattr(cls, name, field)
            fields[name] = field

        cls.__graph_fields__ = fields
        cls.__facade_localns__ = _defining_namespace()

        try:
            for field in fields.values():
                field.resolve()
        except NameError:
            # Forward reference; resolved on first access.
            pass

    def __init__(self, graph_object: Any) -> None:
        object.__setattr__(self, "_graph_object", GraphObject.wrap(graph_object))

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def cast(cls: Type[F], graph_object: Any) -> F:
        return cls(graph_object)

    @classmethod
    def create(
        cls: Type[F],
        *,
        config: Optional[GraphObjectConfig] = None,
        **fields: Any,
    ) -> F:
        """
        Create a new graph object and populate it through this facade.
        """
        view = cls(GraphObject.create(config=config))
        for name, value in fields.items():
            if name not in cls.__graph_fields__:
                raise TypeError(f"{cls.__name__} has no field {name!r}")
            setattr(view, name, value)
        return view

    @classmethod
    def fields(cls) -> Tuple[str, ...]:
        return tuple(cls.__graph_fields__)

    # ------------------------------------------------------------------
    # View
    # ------------------------------------------------------------------

    @property
    def graph_object(self) -> GraphObject:
        return self._graph_object

    def __setattr__(self, name: str, value: Any) -> None:
        if not hasattr(type(self), name):
            raise AttributeError(
                f"{type(self).__name__} has no field {name!r}; "
                f"use graph_object.set() for undeclared keys"
            )
        object.__setattr__(self, name, value)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, GraphFacade):
            return self._graph_object.shares_storage(other._graph_object)
        if isinstance(other, GraphObject):
            return self._graph_object.shares_storage(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._graph_object.storage_id)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._graph_object!r})"


def view(graph_object: Any, facade: Type[F]) -> F:
    """
    View ``graph_object`` through ``facade``. Always succeeds for mappings.
    """
    return facade(graph_object)


def validate_facade(facade: Type[GraphFacade]) -> None:
    """
    Resolve every field type of ``facade``, raising TypeError if any
    does not reduce to scalars, graph objects, facades or lists of them.
    """
    for field in facade.__graph_fields__.values():
        field._checked_kind()


def _is_classvar(annotation: Any) -> bool:
    if isinstance(annotation, str):
        return annotation.startswith(("ClassVar", "typing.ClassVar"))
    return annotation is ClassVar or get_origin(annotation) is ClassVar


def _defining_namespace() -> Dict[str, Any]:
    """
    Locals of the function a facade class statement runs in.

    Lets facades declared inside a function refer to facades declared
    earlier in the same function. Empty at module level.
    """
    frame = sys._getframe(1)
    while frame is not None and frame.f_code.co_name == "__init_subclass__":
        frame = frame.f_back
    if frame is None or frame.f_locals is frame.f_globals:
        return {}
    return dict(frame.f_locals)
