"""
Desktop integration through external command-line tools.

Discovers the focused window and reads/writes clipboard text on Windows,
macOS and Linux without native bindings.
"""

from deskbridge.config import DesktopConfig
from deskbridge.errors import (
    ClipboardUnavailable,
    DesktopError,
    ParseError,
    ProcessFailed,
    ProcessLaunchError,
    ProcessTimeout,
)
from deskbridge.models import AppWindow, Platform, ProcessResult, WindowInfo, WindowRect
from deskbridge.platforms import UNSUPPORTED, StrategyKind, StrategyTable, get_strategy_table
from deskbridge.services import (
    AppQueryService,
    ClipboardMonitor,
    ClipboardService,
    DesktopService,
    WindowService,
)
from deskbridge.utils import ProcessRunner

__version__ = "0.1.0"

__all__ = [
    'AppQueryService',
    'AppWindow',
    'ClipboardMonitor',
    'ClipboardService',
    'ClipboardUnavailable',
    'DesktopConfig',
    'DesktopError',
    'DesktopService',
    'ParseError',
    'Platform',
    'ProcessFailed',
    'ProcessLaunchError',
    'ProcessResult',
    'ProcessRunner',
    'ProcessTimeout',
    'StrategyKind',
    'StrategyTable',
    'UNSUPPORTED',
    'WindowInfo',
    'WindowRect',
    'WindowService',
    'get_strategy_table',
]
