from .grammar import TABULA_GRAMMAR, make_parser
from .exceptions import DictObjError, AttributeNotFound, ScriptError
from .interfaces import IOHandler, ConsoleIO, BufferIO
from .config import RuntimeConfig, load_config
from .objects import (
    INITIALIZER,
    BoundOperation,
    DispatchObject,
    OperationTable,
    create,
    get,
    set,
    call,
    has,
    fields_of,
    table_of,
    type_name,
    allocate,
)
from .models import Param, UserFunction, ReturnValue
from .scope import Environment
from .stdlib import StdLib, to_text
from .interpreter import TabulaInterpreter

__all__ = [
    "TABULA_GRAMMAR",
    "make_parser",
    "DictObjError",
    "AttributeNotFound",
    "ScriptError",
    "IOHandler",
    "ConsoleIO",
    "BufferIO",
    "RuntimeConfig",
    "load_config",
    "INITIALIZER",
    "BoundOperation",
    "DispatchObject",
    "OperationTable",
    "create",
    "get",
    "set",
    "call",
    "has",
    "fields_of",
    "table_of",
    "type_name",
    "allocate",
    "Param",
    "UserFunction",
    "ReturnValue",
    "Environment",
    "StdLib",
    "to_text",
    "TabulaInterpreter",
]
