from typing import Any, List, Optional, TYPE_CHECKING

from . import objects
from .exceptions import ScriptError
from .models import UserFunction
from .objects import BoundOperation, DispatchObject, OperationTable

if TYPE_CHECKING:
    from .scope import Environment


def _callable_name(func: Any) -> str:
    return getattr(func, "__name__", None) or getattr(func, "name", "?")


def to_text(value: Any, nested: bool = False, _seen: frozenset = frozenset()) -> str:
    """Render a script value the way ``print`` shows it."""
    if value is True:
        return "true"
    if value is False:
        return "false"
    if value is None:
        return "none"
    if isinstance(value, str):
        return f'"{value}"' if nested else value
    if isinstance(value, (list, DispatchObject)):
        if id(value) in _seen:
            return "..."
        _seen = _seen | {id(value)}
    if isinstance(value, list):
        return "[" + ", ".join(to_text(v, True, _seen) for v in value) + "]"
    if isinstance(value, DispatchObject):
        table = objects.table_of(value)
        body = ", ".join(
            f"{k}: {to_text(v, True, _seen)}" for k, v in objects.fields_of(value).items()
        )
        return f"{table.name if table else ''}{{{body}}}"
    if isinstance(value, OperationTable):
        return f"<table {value.name}>"
    if isinstance(value, BoundOperation):
        return f"<bound operation {_callable_name(value.func)}>"
    if isinstance(value, UserFunction):
        return f"<function {value.name}>"
    if callable(value):
        return f"<builtin {_callable_name(value)}>"
    return str(value)


class StdLib:
    def register_into(self, env: "Environment"):
        env.declare("str", to_text)
        env.declare("len", self._measure)
        env.declare("append", self._append)
        env.declare("pop", self._pop)
        env.declare("fields", self._fields)
        env.declare("table_of", self._table_of)
        env.declare("has", self._has)
        env.declare("allocate", self._allocate)
        env.declare("callable", callable)

    @staticmethod
    def _measure(x: Any) -> int:
        if isinstance(x, DispatchObject):
            return len(objects.fields_of(x))
        if isinstance(x, OperationTable):
            return len(x)
        if isinstance(x, (list, str)):
            return len(x)
        raise ScriptError(f"Type Error: len() of {to_text(x)} is undefined")

    @staticmethod
    def _append(lst: List, item: Any):
        if not isinstance(lst, list):
            raise ScriptError("Type Error: append() expects a list")
        lst.append(item)
        return lst

    @staticmethod
    def _pop(lst: List):
        if not isinstance(lst, list):
            raise ScriptError("Type Error: pop() expects a list")
        return lst.pop() if lst else None

    @staticmethod
    def _fields(obj: Any) -> List[str]:
        if not isinstance(obj, DispatchObject):
            raise ScriptError("Type Error: fields() expects an object")
        return list(objects.fields_of(obj))

    @staticmethod
    def _table_of(obj: Any) -> Optional[OperationTable]:
        if not isinstance(obj, DispatchObject):
            raise ScriptError("Type Error: table_of() expects an object")
        return objects.table_of(obj)

    @staticmethod
    def _has(obj: Any, name: Any) -> bool:
        if not isinstance(obj, DispatchObject):
            raise ScriptError("Type Error: has() expects an object")
        if not isinstance(name, str):
            raise ScriptError("Type Error: has() expects a text name")
        return objects.has(obj, name)

    @staticmethod
    def _allocate(table: Any) -> DispatchObject:
        if not isinstance(table, OperationTable):
            raise ScriptError("Type Error: allocate() expects a table")
        return objects.allocate(table)
