"""Exceptions raised by the desktop integration layer."""

from typing import List, Optional, Sequence, Tuple, TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from deskbridge.models.process import ProcessResult


class DesktopError(Exception):
    """Base class for every error raised by deskbridge."""

    def __init__(self, message: str, original_error: Optional[BaseException] = None):
        super().__init__(message)
        self.original_error = original_error

    def __str__(self):
        base_msg = super().__str__()
        if self.original_error:
            return f"{base_msg} (Caused by: {type(self.original_error).__name__}: {self.original_error})"
        return base_msg


class ProcessLaunchError(DesktopError):
    """The executable could not be found or spawned."""

    def __init__(self, command: str, original_error: Optional[BaseException] = None):
        super().__init__(f"Could not launch {command!r}", original_error)
        self.command = command


class ProcessTimeout(DesktopError):
    """The child outlived its deadline and was killed."""

    def __init__(self, command: str, timeout: float, result: "ProcessResult", pid: Optional[int] = None):
        super().__init__(f"{command!r} did not finish within {timeout:.2f}s")
        self.command = command
        self.timeout = timeout
        self.result = result
        self.pid = pid


class ProcessFailed(DesktopError):
    """A strategy saw a non-zero exit code."""

    def __init__(self, command: str, result: "ProcessResult"):
        detail = result.stderr.strip() or f"exit code {result.exit_code}"
        super().__init__(f"{command!r} failed: {detail}")
        self.command = command
        self.result = result


class ParseError(DesktopError):
    """Tool output did not have the expected shape."""
    pass


class ClipboardUnavailable(DesktopError):
    """Every clipboard tool in the fallback chain failed."""

    def __init__(self, attempts: Sequence[Tuple[str, str]] = ()):
        self.attempts: List[Tuple[str, str]] = list(attempts)
        if self.attempts:
            tried = "; ".join(f"{tool}: {reason}" for tool, reason in self.attempts)
            message = f"Clipboard unavailable ({tried})"
        else:
            message = "Clipboard unavailable (no clipboard tool for this platform)"
        super().__init__(message)
