"""Service layer for deskbridge."""

from deskbridge.services.app_query import AppQueryService
from deskbridge.services.clipboard_monitor import ClipboardChange, ClipboardMonitor, ListenerHandle
from deskbridge.services.clipboard_service import ClipboardService
from deskbridge.services.desktop_service import DesktopService
from deskbridge.services.window_service import WindowService

__all__ = [
    'AppQueryService',
    'ClipboardChange',
    'ClipboardMonitor',
    'ClipboardService',
    'DesktopService',
    'ListenerHandle',
    'WindowService',
]
