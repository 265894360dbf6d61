"""Building blocks for the per-platform strategies.

Every OS fact comes from an external command. A strategy knows which command
to run and how to turn its output into a plain record; it never decides what
to do on failure. That is left to the services.
"""

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

from deskbridge.errors import ParseError, ProcessFailed
from deskbridge.models.process import ProcessResult
from deskbridge.utils.process_runner import ProcessRunner


class StrategyKind(str, Enum):
    WINDOW_PROBE = "window-probe"
    CLIPBOARD_READ = "clipboard-read"
    CLIPBOARD_WRITE = "clipboard-write"
    APP_ENUMERATION = "app-enumeration"


class Unsupported:
    """Marker returned by the strategy table when nothing is registered."""

    _instance: Optional["Unsupported"] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNSUPPORTED"


UNSUPPORTED = Unsupported()


@dataclass(frozen=True)
class Command:
    program: str
    args: Tuple[str, ...] = ()
    env: Optional[Mapping[str, str]] = None
    capture_output: bool = True

    @property
    def display(self) -> str:
        shown = [arg for arg in self.args if len(arg) <= 40 and "\n" not in arg]
        return " ".join([self.program] + shown)

    async def execute(
        self,
        runner: ProcessRunner,
        timeout: float,
        input_text: Optional[str] = None,
    ) -> ProcessResult:
        result = await runner.run(
            self.program,
            self.args,
            timeout=timeout,
            input_text=input_text,
            capture_output=self.capture_output,
            env=self.env,
        )
        if not result.ok:
            raise ProcessFailed(self.display, result)
        return result


def parse_json(stdout: str) -> Any:
    text = stdout.strip()
    if not text:
        raise ParseError("Probe produced no output")
    try:
        return json.loads(text)
    except ValueError as e:
        raise ParseError("Probe output is not valid JSON", e) from e


class WindowProbe(ABC):
    """Produces one self-describing record for the focused window."""

    default_timeout: float = 5.0

    @abstractmethod
    def command(self) -> Command:
        pass

    @abstractmethod
    def parse(self, stdout: str) -> Dict[str, Any]:
        pass

    async def __call__(self, runner: ProcessRunner, timeout: Optional[float] = None) -> Dict[str, Any]:
        result = await self.command().execute(runner, timeout or self.default_timeout)
        return self.parse(result.stdout)


class WindowEnumerator(ABC):
    """Lists top-level windows as ``AppWindowRecord``-shaped dictionaries."""

    default_timeout: float = 5.0

    @abstractmethod
    def command(self) -> Command:
        pass

    @abstractmethod
    def parse(self, stdout: str) -> List[Dict[str, Any]]:
        pass

    async def __call__(self, runner: ProcessRunner, timeout: Optional[float] = None) -> List[Dict[str, Any]]:
        result = await self.command().execute(runner, timeout or self.default_timeout)
        return self.parse(result.stdout)


class ClipboardReader:
    """One clipboard utility in a read fallback chain."""

    def __init__(self, command: Command, strip_trailing_newline: bool = False):
        self.command = command
        self.strip_trailing_newline = strip_trailing_newline

    @property
    def name(self) -> str:
        return self.command.program

    async def __call__(self, runner: ProcessRunner, timeout: float) -> str:
        result = await self.command.execute(runner, timeout)
        text = result.stdout
        if self.strip_trailing_newline:
            if text.endswith("\r\n"):
                text = text[:-2]
            elif text.endswith("\n"):
                text = text[:-1]
        return text

    def __repr__(self) -> str:
        return f"ClipboardReader({self.command.display!r})"


class ClipboardWriter:
    """One clipboard utility in a write fallback chain; text goes over stdin."""

    def __init__(self, command: Command):
        self.command = command

    @property
    def name(self) -> str:
        return self.command.program

    async def __call__(self, runner: ProcessRunner, text: str, timeout: float) -> None:
        await self.command.execute(runner, timeout, input_text=text)

    def __repr__(self) -> str:
        return f"ClipboardWriter({self.command.display!r})"
