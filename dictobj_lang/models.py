from dataclasses import dataclass, field
from typing import Any, List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .interpreter import TabulaInterpreter
    from .scope import Environment


@dataclass(frozen=True)
class Param:
    name: str
    default: Any = None  # unevaluated expression tree, or None


@dataclass(frozen=True, eq=False)
class UserFunction:
    """A script function: a closure over the environment it was defined in.

    Instances are ordinary Python callables, so the object model can store,
    bind and call them like any other function.
    """

    name: str
    params: List[Param]
    body: Any
    closure: "Environment" = field(repr=False)
    interpreter: "TabulaInterpreter" = field(repr=False)

    def __call__(self, *args: Any) -> Any:
        return self.interpreter.invoke(self, list(args))


@dataclass(frozen=True)
class ReturnValue:
    value: Optional[Any]
