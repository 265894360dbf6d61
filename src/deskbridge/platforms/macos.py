"""macOS strategies: ``osascript`` (JavaScript for Automation) and pb tools."""

from typing import Any, Dict, List

from deskbridge.errors import ParseError
from deskbridge.platforms.base import (
    ClipboardReader,
    ClipboardWriter,
    Command,
    StrategyKind,
    WindowEnumerator,
    WindowProbe,
    parse_json,
)

# pbcopy/pbpaste pick their text encoding from the locale.
UTF8_LOCALE = {"LANG": "en_US.UTF-8", "LC_CTYPE": "UTF-8"}

FRONTMOST_SCRIPT = """
var se = Application("System Events");
var proc = se.applicationProcesses.whose({frontmost: true})[0];
var title = "";
try { title = proc.windows[0].name(); } catch (e) {}
var path = "";
try { path = proc.applicationFile().posixPath(); } catch (e) {}
JSON.stringify({
    Title: title || "",
    ProcessName: proc.name(),
    ProcessPath: path,
    ProcessId: proc.unixId()
});
"""

WINDOW_LIST_SCRIPT = """
var se = Application("System Events");
var procs = se.applicationProcesses.whose({backgroundOnly: false})();
var rows = [];
procs.forEach(function (proc) {
    var titles = [];
    try { titles = proc.windows.name(); } catch (e) {}
    var name = proc.name();
    var pid = proc.unixId();
    titles.forEach(function (title) {
        if (title) { rows.push({ProcessName: name, MainWindowTitle: title, Id: pid}); }
    });
});
JSON.stringify(rows);
"""


def osascript(script: str) -> Command:
    return Command("osascript", ("-l", "JavaScript", "-e", script))


class MacOSActiveWindowProbe(WindowProbe):
    default_timeout = 5.0

    def command(self) -> Command:
        return osascript(FRONTMOST_SCRIPT)

    def parse(self, stdout: str) -> Dict[str, Any]:
        record = parse_json(stdout)
        if not isinstance(record, dict):
            raise ParseError(f"Expected a JSON object, got {type(record).__name__}")
        return record


class MacOSWindowEnumerator(WindowEnumerator):
    default_timeout = 5.0

    def command(self) -> Command:
        return osascript(WINDOW_LIST_SCRIPT)

    def parse(self, stdout: str) -> List[Dict[str, Any]]:
        records = parse_json(stdout)
        if not isinstance(records, list):
            raise ParseError(f"Expected a JSON array, got {type(records).__name__}")
        return records


def build_strategies() -> Dict[StrategyKind, Any]:
    return {
        StrategyKind.WINDOW_PROBE: MacOSActiveWindowProbe(),
        StrategyKind.APP_ENUMERATION: MacOSWindowEnumerator(),
        StrategyKind.CLIPBOARD_READ: (
            ClipboardReader(Command("pbpaste", env=UTF8_LOCALE)),
        ),
        StrategyKind.CLIPBOARD_WRITE: (
            ClipboardWriter(Command("pbcopy", env=UTF8_LOCALE)),
        ),
    }
