"""Fakes shared by the service tests."""

import inspect
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from deskbridge.errors import ClipboardUnavailable, ProcessLaunchError
from deskbridge.models.process import ProcessResult


@dataclass
class Call:
    command: str
    args: Tuple[str, ...]
    timeout: Optional[float]
    input_text: Optional[str]
    capture_output: bool


class FakeRunner:
    """Stands in for ``ProcessRunner``.

    ``responses`` maps a program name to a ``ProcessResult``, an exception,
    or a callable ``(args, input_text)`` returning either (or an awaitable).
    Programs without a response behave like a missing executable.
    """

    def __init__(self, responses: Optional[Dict[str, Any]] = None):
        self.responses = dict(responses or {})
        self.calls: List[Call] = []

    async def run(self, command, args=(), timeout=None, input_text=None, capture_output=True, env=None):
        args = tuple(args)
        self.calls.append(Call(command, args, timeout, input_text, capture_output))
        if command not in self.responses:
            raise ProcessLaunchError(command, FileNotFoundError(command))

        response = self.responses[command]
        if callable(response) and not isinstance(response, ProcessResult):
            response = response(args, input_text)
            if inspect.isawaitable(response):
                response = await response
        if isinstance(response, BaseException):
            raise response
        return response

    def programs(self) -> List[str]:
        return [call.command for call in self.calls]


class FakeClock:
    def __init__(self, start: float = 100.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeClipboard:
    """Duck-typed ``ClipboardService`` for monitor tests."""

    def __init__(self, text: str = ""):
        self.text = text
        self.reads = 0
        self.fail = False

    async def read_text(self) -> str:
        self.reads += 1
        if self.fail:
            raise ClipboardUnavailable([("fake", "unavailable")])
        return self.text


def ok(stdout: str = "") -> ProcessResult:
    return ProcessResult(exit_code=0, stdout=stdout)


def failed(stderr: str = "error", exit_code: int = 1) -> ProcessResult:
    return ProcessResult(exit_code=exit_code, stderr=stderr)
