"""
Platform strategy table.

The only place that knows which implementation serves which
(platform, operation) pair. Adding a platform means adding one builder here.
"""

import logging
from types import MappingProxyType
from typing import Any, Callable, Dict, Mapping, Optional, Union

from deskbridge.models.window import Platform, detect_platform
from deskbridge.platforms.base import UNSUPPORTED, StrategyKind, Unsupported

logger = logging.getLogger(__name__)


def _windows() -> Dict[StrategyKind, Any]:
    from deskbridge.platforms.windows import build_strategies
    return build_strategies()


def _macos() -> Dict[StrategyKind, Any]:
    from deskbridge.platforms.macos import build_strategies
    return build_strategies()


def _linux() -> Dict[StrategyKind, Any]:
    from deskbridge.platforms.linux import build_strategies
    return build_strategies()


BUILDERS: Mapping[Platform, Callable[[], Dict[StrategyKind, Any]]] = MappingProxyType({
    Platform.WINDOWS: _windows,
    Platform.MACOS: _macos,
    Platform.LINUX: _linux,
})


class StrategyTable:
    """Immutable mapping from ``StrategyKind`` to the strategy for one platform."""

    def __init__(self, platform: Platform, strategies: Optional[Mapping[StrategyKind, Any]] = None):
        self._platform = platform
        self._strategies = MappingProxyType(dict(strategies or {}))

    @property
    def platform(self) -> Platform:
        return self._platform

    def resolve(self, kind: StrategyKind) -> Union[Any, Unsupported]:
        strategy = self._strategies.get(StrategyKind(kind))
        if strategy is None:
            return UNSUPPORTED
        return strategy

    def supports(self, kind: StrategyKind) -> bool:
        return self.resolve(kind) is not UNSUPPORTED

    @classmethod
    def for_platform(cls, platform: Optional[Platform] = None) -> "StrategyTable":
        if platform is None:
            platform = detect_platform()
        builder = BUILDERS.get(platform)
        if builder is None:
            logger.warning(f"No desktop strategies for platform '{platform.value}'")
            return cls(platform)
        return cls(platform, builder())

    def __repr__(self) -> str:
        kinds = ", ".join(kind.value for kind in self._strategies)
        return f"StrategyTable({self._platform.value}: {kinds})"


def get_strategy_table(platform: Optional[Platform] = None) -> StrategyTable:
    return StrategyTable.for_platform(platform)
