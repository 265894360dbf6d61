from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from deskbridge.models.window import Platform, detect_platform

ENV_PREFIX = "DESKBRIDGE_"


def _to_bool(value: Optional[str], default: bool = True) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _seconds(name: str, default: Optional[float]) -> Optional[float]:
    raw = os.getenv(ENV_PREFIX + name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{ENV_PREFIX}{name} must be a number of seconds, got {raw!r}") from None
    if value <= 0:
        raise ValueError(f"{ENV_PREFIX}{name} must be positive, got {raw!r}")
    return value


def _count(name: str, default: int) -> int:
    raw = os.getenv(ENV_PREFIX + name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{ENV_PREFIX}{name} must be an integer, got {raw!r}") from None
    if value < 0:
        raise ValueError(f"{ENV_PREFIX}{name} must not be negative, got {raw!r}")
    return value


def _platform(default: Platform) -> Platform:
    raw = os.getenv(ENV_PREFIX + "PLATFORM")
    if raw is None or not raw.strip():
        return default
    try:
        return Platform(raw.strip().lower())
    except ValueError:
        choices = ", ".join(p.value for p in Platform)
        raise ValueError(f"{ENV_PREFIX}PLATFORM must be one of {choices}, got {raw!r}") from None


@dataclass(frozen=True)
class DesktopConfig:
    platform: Platform = field(default_factory=detect_platform)
    window_cache_ttl: float = 5.0
    # None lets each platform probe use its own default.
    window_probe_timeout: Optional[float] = None
    clipboard_timeout: float = 5.0
    enumeration_timeout: float = 5.0
    monitor_interval: float = 1.0
    history_size: int = 50
    coalesce_probes: bool = True

    @classmethod
    def from_env(cls, *, env_path: Optional[Path] = None) -> "DesktopConfig":
        load_dotenv(env_path, override=False)

        return cls(
            platform=_platform(detect_platform()),
            window_cache_ttl=_seconds("WINDOW_CACHE_TTL", cls.window_cache_ttl),
            window_probe_timeout=_seconds("WINDOW_PROBE_TIMEOUT", cls.window_probe_timeout),
            clipboard_timeout=_seconds("CLIPBOARD_TIMEOUT", cls.clipboard_timeout),
            enumeration_timeout=_seconds("ENUM_TIMEOUT", cls.enumeration_timeout),
            monitor_interval=_seconds("MONITOR_INTERVAL", cls.monitor_interval),
            history_size=_count("HISTORY_SIZE", cls.history_size),
            coalesce_probes=_to_bool(os.getenv(ENV_PREFIX + "COALESCE_PROBES"), default=True),
        )
