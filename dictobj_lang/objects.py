"""Objects built from plain mappings.

A ``DispatchObject`` is nothing more than a dict of fields plus an optional
reference to a shared ``OperationTable``. Looking a name up checks the
object's own fields first and falls back to the table; only callables found
in the table are bound to the object, so ``obj.op(x)`` means
``table.op(obj, x)``.

Two ways of building objects are supported:

* closure capture: a factory returns a table-less object whose fields are
  closures over private local state. Every instance allocates its own
  closures, which costs one callable per operation per object.
* shared table: operations are ordinary functions taking the object first,
  stored once in an ``OperationTable``; instances only carry data fields.

Prefer the shared table when many instances exist.
"""

import logging
import reprlib
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, List, Optional

from .exceptions import AttributeNotFound

logger = logging.getLogger(__name__)

INITIALIZER = "__init__"


@dataclass(frozen=True)
class BoundOperation:
    func: Callable[..., Any]
    target: "DispatchObject"

    def __call__(self, *args: Any) -> Any:
        return self.func(self.target, *args)

    def __repr__(self) -> str:
        name = getattr(self.func, "__name__", None) or getattr(self.func, "name", "?")
        return f"<bound operation {name} of {self.target!r}>"


class OperationTable:
    """Operations shared by reference between all of a table's instances.

    Attribute access on a table returns the raw callable, never a bound one.
    Names that collide with the table's own attributes (``name``, dunders such
    as ``__init__``) are reachable through :meth:`lookup`.
    """

    __slots__ = ("name", "operations")

    def __init__(self, name: str, operations: Optional[Dict[str, Any]] = None):
        self.name = name
        self.operations: Dict[str, Any] = dict(operations) if operations else {}

    def define(self, func: Optional[Callable] = None, *, name: Optional[str] = None):
        """Register ``func`` under ``name`` (default: its ``__name__``).

        Works as a plain call or as a decorator, with or without ``name``.
        """

        def register(f: Callable) -> Callable:
            key = name or f.__name__
            self.operations[key] = f
            logger.debug("table %s: defined operation %s", self.name, key)
            return f

        if func is None:
            return register
        return register(func)

    def lookup(self, name: str) -> Any:
        try:
            return self.operations[name]
        except KeyError:
            raise AttributeNotFound(name, self, type_name(self)) from None

    def __getattr__(self, name: str) -> Any:
        if name in OperationTable.__slots__:
            raise AttributeError(name)
        return self.lookup(name)

    def __call__(self, *init_args: Any) -> "DispatchObject":
        return create(self, *init_args)

    def __contains__(self, name: object) -> bool:
        return name in self.operations

    def __iter__(self) -> Iterator[str]:
        return iter(self.operations)

    def __len__(self) -> int:
        return len(self.operations)

    def __repr__(self) -> str:
        return f"<table {self.name} ({', '.join(self.operations)})>"


class DispatchObject:
    """A mutable bag of fields with an optional operation table.

    ``obj.name`` and ``obj.name = value`` are sugar for :func:`get` and
    :func:`set`. The object has no encapsulation: any holder of a reference
    may read or overwrite any field.
    """

    __slots__ = ("_fields", "_table")

    def __init__(
        self,
        table: Optional[OperationTable] = None,
        fields: Optional[Dict[str, Any]] = None,
    ):
        object.__setattr__(self, "_fields", dict(fields) if fields else {})
        object.__setattr__(self, "_table", table)

    def __getattr__(self, name: str) -> Any:
        # Slots are unset only while the object is half-built (e.g. copying).
        if name in DispatchObject.__slots__:
            raise AttributeError(name)
        return get(self, name)

    def __setattr__(self, name: str, value: Any) -> None:
        set(self, name, value)

    def __dir__(self) -> List[str]:
        names = list(self._fields)
        if self._table is not None:
            names.extend(n for n in self._table if n not in self._fields)
        return names

    @reprlib.recursive_repr()
    def __repr__(self) -> str:
        return f"{type_name(self)}{self._fields!r}"


def type_name(obj: Any) -> str:
    if isinstance(obj, DispatchObject):
        return obj._table.name if obj._table is not None else "object"
    if isinstance(obj, OperationTable):
        return f"table {obj.name}"
    return type(obj).__name__


def allocate(table: Optional[OperationTable] = None) -> DispatchObject:
    """An empty object tied to ``table``; the initializer is not run."""
    return DispatchObject(table)


def create(table: Optional[OperationTable] = None, *init_args: Any) -> DispatchObject:
    obj = allocate(table)
    if table is not None and INITIALIZER in table:
        logger.debug("create %s: running initializer with %d args", table.name, len(init_args))
        table.lookup(INITIALIZER)(obj, *init_args)
    elif init_args:
        raise TypeError(f"{type_name(obj)} takes no initialization arguments")
    return obj


def get(obj: DispatchObject, name: str) -> Any:
    fields = obj._fields
    if name in fields:
        return fields[name]
    table = obj._table
    if table is not None and name in table:
        value = table.operations[name]
        return BoundOperation(value, obj) if callable(value) else value
    raise AttributeNotFound(name, obj, type_name(obj))


def set(obj: DispatchObject, name: str, value: Any) -> None:
    obj._fields[name] = value


def call(operation: Callable[..., Any], *args: Any) -> Any:
    return operation(*args)


def has(obj: DispatchObject, name: str) -> bool:
    return name in obj._fields or (obj._table is not None and name in obj._table)


def fields_of(obj: DispatchObject) -> Dict[str, Any]:
    return dict(obj._fields)


def table_of(obj: DispatchObject) -> Optional[OperationTable]:
    return obj._table
