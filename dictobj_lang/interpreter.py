import logging
import operator
import re
import sys
from typing import Any, Callable, List, Optional

from lark.visitors import Interpreter

from . import objects
from .config import RuntimeConfig
from .exceptions import AttributeNotFound, ScriptError
from .grammar import make_parser
from .interfaces import IOHandler, ConsoleIO
from .models import Param, ReturnValue, UserFunction
from .objects import DispatchObject, OperationTable
from .scope import Environment
from .stdlib import StdLib, to_text

logger = logging.getLogger(__name__)

_ESCAPES = {"n": "\n", "t": "\t", "\"": "\"", "\\": "\\"}
_ESCAPE_RE = re.compile(r"\\(.)")


class TabulaInterpreter(Interpreter):
    def __init__(
        self,
        config: Optional[RuntimeConfig] = None,
        io_handler: Optional[IOHandler] = None,
    ):
        self.config = config if config is not None else RuntimeConfig()
        self.io = io_handler if io_handler is not None else ConsoleIO()
        self.globals = Environment()
        self.env = self.globals
        self.stdlib = StdLib()
        self.stdlib.register_into(self.globals)
        self._depth = 0

        try:
            sys.setrecursionlimit(
                max(sys.getrecursionlimit(), self.config.max_recursion * 10 + 200)
            )
        except Exception:
            pass

    def execute(self, source: str) -> Any:
        """Parse and run a whole program; returns the last statement's value."""
        tree = make_parser("start").parse(source)
        logger.debug("executing program with %d statements", len(tree.children))
        return self.visit(tree)

    # --- Statements ---

    def start(self, tree):
        result = None
        for stmt in tree.children:
            result = self.visit(stmt)
        return result

    def let_stmt(self, tree):
        name, value_node = tree.children
        value = self.visit(value_node)
        self.env.declare(str(name), value)

    def assign_stmt(self, tree):
        target, value_node = tree.children
        value = self.visit(value_node)
        rule = getattr(target, "data", None)
        if rule == "var":
            self.env.assign(str(target.children[0]), value)
        elif rule == "get_attr":
            container = self.visit(target.children[0])
            self._set_attr(container, str(target.children[1]), value)
        elif rule == "get_item":
            container = self.visit(target.children[0])
            self._set_item(container, self.visit(target.children[1]), value)
        else:
            raise ScriptError("Syntax Error: invalid assignment target")

    def print_stmt(self, tree):
        self.io.emit(to_text(self.visit(tree.children[0])))

    def return_stmt(self, tree):
        if self._depth == 0:
            raise ScriptError("Syntax Error: 'return' outside function")
        return ReturnValue(self.visit(tree.children[0]) if tree.children else None)

    def expr_stmt(self, tree):
        return self.visit(tree.children[0])

    # --- Flow Control ---

    def block(self, tree):
        for stmt in tree.children:
            result = self.visit(stmt)
            if isinstance(result, ReturnValue):
                return result
        return None

    def if_stmt(self, tree):
        condition, body, *clauses = tree.children
        if self.visit(condition):
            return self.visit(body)
        for clause in clauses:
            if clause.data == "elif_clause":
                if self.visit(clause.children[0]):
                    return self.visit(clause.children[1])
            else:
                return self.visit(clause.children[0])
        return None

    def while_stmt(self, tree):
        condition, body = tree.children
        while self.visit(condition):
            result = self.visit(body)
            if isinstance(result, ReturnValue):
                return result
        return None

    # --- Functions & Tables ---

    def funcdef(self, tree):
        func = self._make_function(tree)
        self.env.declare(func.name, func)

    def table_def(self, tree):
        name = str(tree.children[0])
        table = OperationTable(name)
        for node in tree.children[1:]:
            func = self._make_function(node)
            table.define(func, name=func.name)
        logger.debug("defined table %s with operations %s", name, list(table))
        self.env.declare(name, table)

    def _make_function(self, tree) -> UserFunction:
        name = str(tree.children[0])
        params: List[Param] = []
        body = tree.children[-1]
        if len(tree.children) == 3:
            for p in tree.children[1].children:
                default = p.children[1] if len(p.children) > 1 else None
                if default is None and params and params[-1].default is not None:
                    raise ScriptError(
                        f"Syntax Error: in '{name}', parameter '{p.children[0]}' without default follows one with a default"
                    )
                params.append(Param(str(p.children[0]), default))
        return UserFunction(name, params, body, self.env, self)

    def invoke(self, func: UserFunction, args: List[Any]) -> Any:
        required = sum(1 for p in func.params if p.default is None)
        if not required <= len(args) <= len(func.params):
            expected = (
                str(len(func.params))
                if required == len(func.params)
                else f"{required} to {len(func.params)}"
            )
            raise ScriptError(
                f"Invocation Error: {func.name} expects {expected} args, got {len(args)}."
            )
        if self._depth >= self.config.max_recursion:
            raise ScriptError(
                f"Recursion Error: maximum depth {self.config.max_recursion} exceeded."
            )

        frame = func.closure.child()
        saved = self.env
        self.env = frame
        self._depth += 1
        try:
            for param, value in zip(func.params, args):
                frame.declare(param.name, value)
            for param in func.params[len(args):]:
                # Defaults are evaluated per call, after the earlier parameters.
                frame.declare(param.name, self.visit(param.default))
            result = self.visit(func.body)
        except RecursionError as e:
            raise ScriptError("Recursion Error: host recursion limit reached.") from e
        finally:
            self._depth -= 1
            self.env = saved
        return result.value if isinstance(result, ReturnValue) else None

    def call(self, tree):
        callee = self.visit(tree.children[0])
        args = self._args(tree.children[1] if len(tree.children) > 1 else None)
        if not callable(callee):
            raise ScriptError(f"Type Error: {to_text(callee, nested=True)} is not callable.")
        if isinstance(callee, UserFunction):
            return callee(*args)
        try:
            return callee(*args)
        except TypeError as e:
            raise ScriptError(f"Invocation Error: {e}") from e

    def new_obj(self, tree):
        name = str(tree.children[0])
        table = self.env.get(name)
        if not isinstance(table, OperationTable):
            raise ScriptError(f"Type Error: '{name}' is not a table.")
        args = self._args(tree.children[1] if len(tree.children) > 1 else None)
        return objects.create(table, *args)

    def _args(self, node) -> List[Any]:
        return [self.visit(c) for c in node.children] if node is not None else []

    # --- Data Access & Mutation ---

    def get_attr(self, tree):
        target = self.visit(tree.children[0])
        name = str(tree.children[1])
        if isinstance(target, DispatchObject):
            return objects.get(target, name)
        if isinstance(target, OperationTable):
            return target.lookup(name)
        raise ScriptError(f"Type Error: {to_text(target, nested=True)} has no attributes.")

    def _set_attr(self, target: Any, name: str, value: Any) -> None:
        if isinstance(target, DispatchObject):
            objects.set(target, name, value)
        elif isinstance(target, OperationTable):
            target.define(value, name=name)
        else:
            raise ScriptError(f"Type Error: cannot set '{name}' on {to_text(target, nested=True)}.")

    def get_item(self, tree):
        container = self.visit(tree.children[0])
        key = self.visit(tree.children[1])
        if isinstance(container, DispatchObject):
            fields = objects.fields_of(container)
            if not isinstance(key, str) or key not in fields:
                raise AttributeNotFound(str(key), container, objects.type_name(container))
            return fields[key]
        if isinstance(container, (list, str)):
            self._check_index(key)
            try:
                return container[key]
            except IndexError:
                raise ScriptError(f"Index Error: {to_text(key, nested=True)} out of bounds.") from None
        raise ScriptError(f"Type Error: {to_text(container, nested=True)} is not indexable.")

    def _set_item(self, container: Any, key: Any, value: Any) -> None:
        if isinstance(container, DispatchObject):
            if not isinstance(key, str):
                raise ScriptError("Type Error: object keys must be text.")
            objects.set(container, key, value)
        elif isinstance(container, list):
            self._check_index(key)
            try:
                container[key] = value
            except IndexError:
                raise ScriptError(f"Index Error: {to_text(key, nested=True)} out of bounds.") from None
        else:
            raise ScriptError(f"Type Error: {to_text(container, nested=True)} does not support item assignment.")

    @staticmethod
    def _check_index(key: Any) -> None:
        # bool is an int subclass; true/false are not positions.
        if not isinstance(key, int) or isinstance(key, bool):
            raise ScriptError(f"Type Error: list index must be an integer, not {to_text(key, nested=True)}.")

    # --- Expressions & Atoms ---

    def var(self, tree):
        return self.env.get(str(tree.children[0]))

    def number(self, tree):
        s = str(tree.children[0])
        return float(s) if "." in s else int(s)

    def string(self, tree):
        raw = str(tree.children[0])[1:-1]
        # One pass, so an escaped backslash never starts another escape.
        return _ESCAPE_RE.sub(lambda m: _ESCAPES.get(m.group(1), m.group(0)), raw)

    def true(self, _):
        return True

    def false(self, _):
        return False

    def none(self, _):
        return None

    def list_lit(self, tree):
        return [self.visit(c) for c in tree.children]

    def object_lit(self, tree):
        return DispatchObject(
            fields={str(entry.children[0]): self.visit(entry.children[1]) for entry in tree.children}
        )

    def or_(self, t):
        return self.visit(t.children[0]) or self.visit(t.children[1])

    def and_(self, t):
        return self.visit(t.children[0]) and self.visit(t.children[1])

    def not_(self, t):
        return not self.visit(t.children[0])

    def neg(self, t):
        return self._apply_op("-", operator.neg, self.visit(t.children[0]))

    def add(self, t):
        return self._apply_op("+", operator.add, *self._operands(t))

    def sub(self, t):
        return self._apply_op("-", operator.sub, *self._operands(t))

    def mul(self, t):
        return self._apply_op("*", operator.mul, *self._operands(t))

    def div(self, t):
        return self._apply_op("/", operator.truediv, *self._operands(t))

    def mod(self, t):
        return self._apply_op("%", operator.mod, *self._operands(t))

    def eq(self, t):
        return operator.eq(*self._operands(t))

    def ne(self, t):
        return operator.ne(*self._operands(t))

    def lt(self, t):
        return self._apply_op("<", operator.lt, *self._operands(t))

    def gt(self, t):
        return self._apply_op(">", operator.gt, *self._operands(t))

    def le(self, t):
        return self._apply_op("<=", operator.le, *self._operands(t))

    def ge(self, t):
        return self._apply_op(">=", operator.ge, *self._operands(t))

    def _operands(self, t):
        return self.visit(t.children[0]), self.visit(t.children[1])

    @staticmethod
    def _apply_op(symbol: str, func: Callable, *operands: Any) -> Any:
        try:
            return func(*operands)
        except ZeroDivisionError:
            raise ScriptError("Arithmetic Error: division by zero.") from None
        except TypeError:
            shown = ", ".join(to_text(o, nested=True) for o in operands)
            raise ScriptError(f"Type Error: unsupported operand(s) for {symbol}: {shown}") from None
