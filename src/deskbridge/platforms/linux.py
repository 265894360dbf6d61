"""Linux (X11) strategies built on xdotool, wmctrl and the clipboard tools.

Process details come from ``/proc`` once a window has yielded a pid.
"""

import logging
import os
import time
from typing import Any, Dict, List, Mapping, Optional, Tuple

from deskbridge.errors import DesktopError, ParseError
from deskbridge.platforms.base import (
    ClipboardReader,
    ClipboardWriter,
    Command,
    StrategyKind,
    WindowEnumerator,
    WindowProbe,
)
from deskbridge.utils.process_runner import ProcessRunner

logger = logging.getLogger(__name__)

PROC_ROOT = "/proc"


def process_name(pid: int, proc_root: str = PROC_ROOT) -> Optional[str]:
    try:
        with open(os.path.join(proc_root, str(pid), "comm"), encoding="utf-8", errors="replace") as f:
            return f.read().strip() or None
    except OSError:
        return None


def process_path(pid: int, proc_root: str = PROC_ROOT) -> Optional[str]:
    try:
        return os.readlink(os.path.join(proc_root, str(pid), "exe"))
    except OSError:
        return None


class LinuxActiveWindowProbe(WindowProbe):
    """``xdotool`` prints the window name, then the id (last command only)."""

    default_timeout = 3.0

    def __init__(self, proc_root: str = PROC_ROOT):
        self.proc_root = proc_root

    def command(self) -> Command:
        return Command("xdotool", ("getactivewindow", "getwindowname", "getactivewindow"))

    def parse(self, stdout: str) -> Dict[str, Any]:
        lines = stdout.rstrip("\n").split("\n")
        if len(lines) < 2 or not lines[-1].strip().isdigit():
            raise ParseError(f"Unexpected xdotool output: {stdout!r}")
        return {
            "Title": "\n".join(lines[:-1]).strip(),
            "ProcessName": "Unknown",
            "WindowHandle": int(lines[-1].strip()),
        }

    async def __call__(self, runner: ProcessRunner, timeout: Optional[float] = None) -> Dict[str, Any]:
        timeout = timeout or self.default_timeout
        deadline = time.monotonic() + timeout
        record = await super().__call__(runner, timeout)

        remaining = deadline - time.monotonic()
        if remaining <= 0:
            return record
        pid_command = Command("xdotool", ("getwindowpid", str(record["WindowHandle"])))
        try:
            result = await pid_command.execute(runner, remaining)
            pid = int(result.stdout.strip())
        except (DesktopError, ValueError) as e:
            # Windows without _NET_WM_PID are common; keep the partial record.
            logger.debug(f"No pid for window {record['WindowHandle']}: {e}")
            return record

        record["ProcessId"] = pid
        record["ProcessName"] = process_name(pid, self.proc_root) or "Unknown"
        record["ProcessPath"] = process_path(pid, self.proc_root)
        return record


class LinuxWindowEnumerator(WindowEnumerator):
    """Parses ``wmctrl -lp``: id, desktop, pid, host, title."""

    default_timeout = 5.0

    def __init__(self, proc_root: str = PROC_ROOT):
        self.proc_root = proc_root

    def command(self) -> Command:
        return Command("wmctrl", ("-lp",))

    def parse(self, stdout: str) -> List[Dict[str, Any]]:
        rows: List[Dict[str, Any]] = []
        for line in stdout.splitlines():
            parts = line.split(None, 4)
            if len(parts) < 4:
                continue
            try:
                pid = int(parts[2])
            except ValueError:
                raise ParseError(f"Unexpected wmctrl line: {line!r}") from None
            title = parts[4] if len(parts) == 5 else ""
            rows.append({
                "ProcessName": process_name(pid, self.proc_root) if pid > 0 else None,
                "MainWindowTitle": title,
                "Id": pid,
                "Path": process_path(pid, self.proc_root) if pid > 0 else None,
            })
        return rows


def clipboard_readers(environ: Mapping[str, str]) -> Tuple[ClipboardReader, ...]:
    readers = []
    if environ.get("WAYLAND_DISPLAY"):
        readers.append(ClipboardReader(Command("wl-paste", ("--no-newline",))))
    readers.append(ClipboardReader(Command("xclip", ("-selection", "clipboard", "-o"))))
    readers.append(ClipboardReader(Command("xsel", ("--clipboard", "--output"))))
    return tuple(readers)


def clipboard_writers(environ: Mapping[str, str]) -> Tuple[ClipboardWriter, ...]:
    # These tools fork a selection owner that inherits stdout/stderr, so the
    # pipes must not be captured.
    writers = []
    if environ.get("WAYLAND_DISPLAY"):
        writers.append(ClipboardWriter(Command("wl-copy", capture_output=False)))
    writers.append(ClipboardWriter(
        Command("xclip", ("-selection", "clipboard"), capture_output=False)))
    writers.append(ClipboardWriter(
        Command("xsel", ("--clipboard", "--input"), capture_output=False)))
    return tuple(writers)


def build_strategies(environ: Optional[Mapping[str, str]] = None) -> Dict[StrategyKind, Any]:
    if environ is None:
        environ = os.environ
    return {
        StrategyKind.WINDOW_PROBE: LinuxActiveWindowProbe(),
        StrategyKind.APP_ENUMERATION: LinuxWindowEnumerator(),
        StrategyKind.CLIPBOARD_READ: clipboard_readers(environ),
        StrategyKind.CLIPBOARD_WRITE: clipboard_writers(environ),
    }
