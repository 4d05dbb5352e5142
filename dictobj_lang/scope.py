from typing import Any, Dict, Optional

from .exceptions import ScriptError


class Environment:
    """One frame of lexical bindings chained to its enclosing frame."""

    def __init__(self, bindings: Optional[Dict[str, Any]] = None, parent: Optional["Environment"] = None):
        self.bindings: Dict[str, Any] = bindings if bindings is not None else {}
        self.parent = parent

    def child(self, bindings: Optional[Dict[str, Any]] = None) -> "Environment":
        return Environment(bindings, self)

    def _frame_of(self, name: str) -> Optional["Environment"]:
        env: Optional[Environment] = self
        while env is not None:
            if name in env.bindings:
                return env
            env = env.parent
        return None

    def get(self, name: str) -> Any:
        frame = self._frame_of(name)
        if frame is None:
            raise ScriptError(f"Name Error: '{name}' is not defined")
        return frame.bindings[name]

    def assign(self, name: str, value: Any) -> None:
        frame = self._frame_of(name)
        if frame is None:
            raise ScriptError(f"Name Error: cannot assign to undeclared '{name}' (use let)")
        frame.bindings[name] = value

    def declare(self, name: str, value: Any) -> None:
        self.bindings[name] = value
