from abc import ABC, abstractmethod
from typing import List, Optional


class IOHandler(ABC):
    """Abstracts I/O so interpreters can be hosted in different frontends."""

    @abstractmethod
    def emit(self, message: str) -> None: ...

    @abstractmethod
    def read_input(self, prompt: str) -> str: ...


class ConsoleIO(IOHandler):
    """Console-backed I/O used by the CLI and REPL."""

    def emit(self, message: str) -> None:
        print(message)

    def read_input(self, prompt: str) -> str:
        try:
            return input(prompt)
        except EOFError:
            return "exit"


class BufferIO(IOHandler):
    """Collects output in memory and replays scripted input."""

    def __init__(self, inputs: Optional[List[str]] = None):
        self.lines: List[str] = []
        self._inputs = list(inputs or [])

    def emit(self, message: str) -> None:
        self.lines.append(message)

    def read_input(self, prompt: str) -> str:
        return self._inputs.pop(0) if self._inputs else "exit"
