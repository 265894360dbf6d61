from deskbridge.models.cache import CacheEntry
from deskbridge.models.process import ProcessResult
from deskbridge.models.window import (
    UNKNOWN,
    AppWindow,
    Platform,
    WindowInfo,
    WindowRect,
    detect_platform,
)

__all__ = [
    'UNKNOWN',
    'AppWindow',
    'CacheEntry',
    'Platform',
    'ProcessResult',
    'WindowInfo',
    'WindowRect',
    'detect_platform',
]
