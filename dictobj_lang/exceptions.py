from typing import Any, Optional


class DictObjError(Exception):
    """Base exception for the object model and the script runtime."""

    pass


class AttributeNotFound(DictObjError, AttributeError):
    """Raised when a name is in neither an object's fields nor its table."""

    def __init__(self, name: str, target: Any = None, owner: Optional[str] = None):
        if owner is None:
            owner = type(target).__name__ if target is not None else "object"
        super().__init__(f"'{owner}' has no field or operation '{name}'")
        # AttributeError.__init__ resets these slots, so assign afterwards.
        self.name = name
        self.target = target


class ScriptError(DictObjError):
    """Raised when a Tabula script does something the runtime forbids."""

    pass
