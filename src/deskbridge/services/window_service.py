"""Active window discovery with a short-lived cache.

Window discovery is advisory: every failure resolves to
``WindowInfo.default`` so callers are never blocked by a flaky probe.
"""

import asyncio
import logging
import time
from typing import Callable, Dict, Optional

from deskbridge.errors import ParseError, ProcessFailed, ProcessLaunchError, ProcessTimeout
from deskbridge.models.cache import CacheEntry
from deskbridge.models.window import Platform, WindowInfo
from deskbridge.platforms.base import UNSUPPORTED, StrategyKind
from deskbridge.platforms.factory import StrategyTable
from deskbridge.utils.process_runner import ProcessRunner

logger = logging.getLogger(__name__)

PROBE_FAILURES = (ProcessTimeout, ProcessLaunchError, ProcessFailed, ParseError)


class WindowService:

    def __init__(
        self,
        table: StrategyTable,
        runner: Optional[ProcessRunner] = None,
        cache_ttl: float = 5.0,
        probe_timeout: Optional[float] = None,
        coalesce: bool = True,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.table = table
        self.runner = runner or ProcessRunner()
        self.cache_ttl = cache_ttl
        self.probe_timeout = probe_timeout
        self.coalesce = coalesce
        self._clock = clock
        self._cache: Dict[StrategyKind, CacheEntry[WindowInfo]] = {}
        self._inflight: Dict[StrategyKind, "asyncio.Task[WindowInfo]"] = {}

    @property
    def platform(self) -> Platform:
        return self.table.platform

    async def get_active_window(self) -> WindowInfo:
        kind = StrategyKind.WINDOW_PROBE
        cached = self._cached(kind)
        if cached is not None:
            return cached

        if not self.coalesce:
            return await self._probe()

        task = self._inflight.get(kind)
        if task is None:
            task = asyncio.ensure_future(self._probe())
            self._inflight[kind] = task
            task.add_done_callback(lambda done: self._forget(kind, done))
        # A cancelled waiter must not cancel the probe other callers share.
        return await asyncio.shield(task)

    def clear_cache(self) -> None:
        self._cache.clear()

    def _cached(self, kind: StrategyKind) -> Optional[WindowInfo]:
        entry = self._cache.get(kind)
        if entry is None:
            return None
        if entry.is_fresh(self._clock(), self.cache_ttl):
            return entry.value
        del self._cache[kind]
        return None

    def _forget(self, kind: StrategyKind, task: "asyncio.Task[WindowInfo]") -> None:
        if self._inflight.get(kind) is task:
            del self._inflight[kind]

    async def _probe(self) -> WindowInfo:
        strategy = self.table.resolve(StrategyKind.WINDOW_PROBE)
        if strategy is UNSUPPORTED:
            logger.debug(f"Window probing is not supported on {self.platform.value}")
            return WindowInfo.default(self.platform)

        try:
            record = await strategy(self.runner, self.probe_timeout)
            info = WindowInfo.from_record(record, self.platform)
        except PROBE_FAILURES as e:
            logger.warning(f"Failed to get active window: {e}")
            return WindowInfo.default(self.platform)

        self._cache[StrategyKind.WINDOW_PROBE] = CacheEntry(info, self._clock())
        return info
