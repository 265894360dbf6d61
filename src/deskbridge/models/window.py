"""Window records produced by the platform probes.

Probes emit loosely shaped dictionaries (the keys PowerShell's
``ConvertTo-Json`` produces). ``WindowRecord`` and ``AppWindowRecord`` are
the strict decode step for that output; ``WindowInfo`` and ``AppWindow`` are
what callers receive.
"""

import platform as _platform
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from deskbridge.errors import ParseError

UNKNOWN = "Unknown"


class Platform(str, Enum):
    WINDOWS = "windows"
    MACOS = "macos"
    LINUX = "linux"
    OTHER = "other"


_SYSTEM_NAMES = {
    "Windows": Platform.WINDOWS,
    "Darwin": Platform.MACOS,
    "Linux": Platform.LINUX,
}


def detect_platform(system: Optional[str] = None) -> Platform:
    if system is None:
        system = _platform.system()
    return _SYSTEM_NAMES.get(system, Platform.OTHER)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _or_unknown(value: Optional[str]) -> str:
    if value is None:
        return UNKNOWN
    value = value.strip()
    return value or UNKNOWN


def _positive_or_none(value: Optional[int]) -> Optional[int]:
    if not value:
        return None
    return value


class WindowRect(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    left: int = Field(alias="Left")
    top: int = Field(alias="Top")
    right: int = Field(alias="Right")
    bottom: int = Field(alias="Bottom")
    width: int = Field(alias="Width")
    height: int = Field(alias="Height")


class WindowRecord(BaseModel):
    """Raw active-window record as emitted by a probe."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    title: str = Field(alias="Title")
    process_name: str = Field(alias="ProcessName")
    process_path: Optional[str] = Field(default=None, alias="ProcessPath")
    process_id: Optional[int] = Field(default=None, alias="ProcessId")
    window_handle: Optional[int] = Field(default=None, alias="WindowHandle")
    window_rect: Optional[WindowRect] = Field(default=None, alias="WindowRect")


class WindowInfo(BaseModel):
    """Normalised description of the focused window."""

    model_config = ConfigDict(frozen=True)

    title: str = UNKNOWN
    process_name: str = UNKNOWN
    process_path: str = UNKNOWN
    process_id: Optional[int] = None
    window_handle: Optional[int] = None
    window_rect: Optional[WindowRect] = None
    timestamp: datetime = Field(default_factory=_utcnow)
    platform: Platform

    @classmethod
    def default(cls, platform: Platform) -> "WindowInfo":
        return cls(platform=platform)

    @classmethod
    def from_record(
        cls,
        record: Any,
        platform: Platform,
        timestamp: Optional[datetime] = None,
    ) -> "WindowInfo":
        """Decode a probe record, raising ``ParseError`` if it is malformed."""
        try:
            parsed = WindowRecord.model_validate(record)
        except ValidationError as e:
            raise ParseError("Window record has an unexpected shape", e) from e

        return cls(
            title=_or_unknown(parsed.title),
            process_name=_or_unknown(parsed.process_name),
            process_path=_or_unknown(parsed.process_path),
            process_id=_positive_or_none(parsed.process_id),
            window_handle=_positive_or_none(parsed.window_handle),
            window_rect=parsed.window_rect,
            timestamp=timestamp or _utcnow(),
            platform=platform,
        )

    def is_default(self) -> bool:
        return (
            self.title == UNKNOWN
            and self.process_name == UNKNOWN
            and self.process_path == UNKNOWN
            and self.process_id is None
        )


class AppWindowRecord(BaseModel):
    """One row of a window enumeration (``Get-Process`` field names)."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    process_name: Optional[str] = Field(default=None, alias="ProcessName")
    title: Optional[str] = Field(default=None, alias="MainWindowTitle")
    process_id: Optional[int] = Field(default=None, alias="Id")
    process_path: Optional[str] = Field(default=None, alias="Path")


class AppWindow(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    process_name: str = UNKNOWN
    process_id: Optional[int] = None
    process_path: str = UNKNOWN

    @classmethod
    def from_record(cls, record: Any) -> "AppWindow":
        try:
            parsed = AppWindowRecord.model_validate(record)
        except ValidationError as e:
            raise ParseError("Window list entry has an unexpected shape", e) from e

        return cls(
            title=(parsed.title or "").strip(),
            process_name=_or_unknown(parsed.process_name),
            process_id=_positive_or_none(parsed.process_id),
            process_path=_or_unknown(parsed.process_path),
        )
