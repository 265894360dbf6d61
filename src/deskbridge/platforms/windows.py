"""Windows strategies: everything goes through ``powershell``."""

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

POWERSHELL = "powershell"
POWERSHELL_FLAGS = ("-NoProfile", "-NonInteractive", "-ExecutionPolicy", "Bypass", "-Command")

UTF8_CONSOLE = (
    "[Console]::OutputEncoding = [System.Text.Encoding]::UTF8; "
    "[Console]::InputEncoding = [System.Text.Encoding]::UTF8; "
)

ACTIVE_WINDOW_SCRIPT = UTF8_CONSOLE + r'''
Add-Type @"
using System;
using System.Runtime.InteropServices;
using System.Text;
public class DeskBridgeWin32 {
    [DllImport("user32.dll")]
    public static extern IntPtr GetForegroundWindow();
    [DllImport("user32.dll", CharSet=CharSet.Unicode)]
    public static extern int GetWindowText(IntPtr hWnd, StringBuilder text, int count);
    [DllImport("user32.dll", SetLastError=true)]
    public static extern uint GetWindowThreadProcessId(IntPtr hWnd, out uint lpdwProcessId);
    [DllImport("user32.dll")]
    public static extern bool GetWindowRect(IntPtr hWnd, out RECT lpRect);
    [StructLayout(LayoutKind.Sequential)]
    public struct RECT { public int Left, Top, Right, Bottom; }
}
"@
$hwnd = [DeskBridgeWin32]::GetForegroundWindow()
$title = New-Object System.Text.StringBuilder 512
[DeskBridgeWin32]::GetWindowText($hwnd, $title, $title.Capacity) | Out-Null
$processId = 0
[DeskBridgeWin32]::GetWindowThreadProcessId($hwnd, [ref]$processId) | Out-Null
$process = Get-Process -Id $processId -ErrorAction SilentlyContinue
$rect = New-Object DeskBridgeWin32+RECT
$hasRect = [DeskBridgeWin32]::GetWindowRect($hwnd, [ref]$rect)
$result = @{
    Title = $title.ToString()
    ProcessName = if ($process) { $process.ProcessName } else { "Unknown" }
    ProcessPath = if ($process) { $process.Path } else { $null }
    ProcessId = $processId
    WindowHandle = $hwnd.ToInt64()
    WindowRect = if ($hasRect) { @{
        Left = $rect.Left
        Top = $rect.Top
        Right = $rect.Right
        Bottom = $rect.Bottom
        Width = $rect.Right - $rect.Left
        Height = $rect.Bottom - $rect.Top
    } } else { $null }
}
$result | ConvertTo-Json -Depth 3 -Compress
'''

WINDOW_LIST_SCRIPT = UTF8_CONSOLE + (
    'Get-Process | Where-Object { $_.MainWindowTitle -ne "" } | '
    'Select-Object ProcessName, MainWindowTitle, Id, Path | '
    'ConvertTo-Json -Compress'
)

CLIPBOARD_READ_SCRIPT = UTF8_CONSOLE + "Get-Clipboard -Raw"

CLIPBOARD_WRITE_SCRIPT = UTF8_CONSOLE + (
    "$text = [Console]::In.ReadToEnd(); "
    "if ($text.Length -eq 0) { Add-Type -AssemblyName System.Windows.Forms; "
    "[System.Windows.Forms.Clipboard]::Clear() } "
    "else { Set-Clipboard -Value $text }"
)


def powershell(script: str) -> Command:
    return Command(POWERSHELL, POWERSHELL_FLAGS + (script,))


class WindowsActiveWindowProbe(WindowProbe):
    default_timeout = 5.0

    def command(self) -> Command:
        return powershell(ACTIVE_WINDOW_SCRIPT)

    def parse(self, stdout: str) -> Dict[str, Any]:
        record = parse_json(stdout)
        if not isinstance(record, dict):
            raise ParseError(f"Expected a JSON object, got {type(record).__name__}")
        return record


class WindowsWindowEnumerator(WindowEnumerator):
    default_timeout = 5.0

    def command(self) -> Command:
        return powershell(WINDOW_LIST_SCRIPT)

    def parse(self, stdout: str) -> List[Dict[str, Any]]:
        if not stdout.strip():
            return []
        records = parse_json(stdout)
        # ConvertTo-Json unwraps single-element arrays.
        if isinstance(records, dict):
            records = [records]
        if not isinstance(records, list):
            raise ParseError(f"Expected a JSON array, got {type(records).__name__}")
        return records


def build_strategies() -> Dict[StrategyKind, Any]:
    return {
        StrategyKind.WINDOW_PROBE: WindowsActiveWindowProbe(),
        StrategyKind.APP_ENUMERATION: WindowsWindowEnumerator(),
        StrategyKind.CLIPBOARD_READ: (
            ClipboardReader(powershell(CLIPBOARD_READ_SCRIPT), strip_trailing_newline=True),
        ),
        StrategyKind.CLIPBOARD_WRITE: (
            ClipboardWriter(powershell(CLIPBOARD_WRITE_SCRIPT)),
        ),
    }
