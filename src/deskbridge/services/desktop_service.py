import logging
import time
from typing import Callable, List, Optional

from deskbridge.config import DesktopConfig
from deskbridge.models.window import AppWindow, WindowInfo
from deskbridge.platforms.factory import StrategyTable, get_strategy_table
from deskbridge.services.app_query import AppQueryService
from deskbridge.services.clipboard_monitor import ClipboardMonitor
from deskbridge.services.clipboard_service import ClipboardService
from deskbridge.services.window_service import WindowService
from deskbridge.utils.process_runner import ProcessRunner

logger = logging.getLogger(__name__)


class DesktopService:
    """Owns one strategy table, one runner and the services built on them.

    Instances are independent; nothing is shared through module state.
    """

    def __init__(
        self,
        config: Optional[DesktopConfig] = None,
        table: Optional[StrategyTable] = None,
        runner: Optional[ProcessRunner] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = config or DesktopConfig.from_env()
        self.table = table or get_strategy_table(self.config.platform)
        self.runner = runner or ProcessRunner(default_timeout=self.config.clipboard_timeout)

        self.windows = WindowService(
            self.table,
            self.runner,
            cache_ttl=self.config.window_cache_ttl,
            probe_timeout=self.config.window_probe_timeout,
            coalesce=self.config.coalesce_probes,
            clock=clock,
        )
        self.clipboard = ClipboardService(
            self.table, self.runner, timeout=self.config.clipboard_timeout)
        self.monitor = ClipboardMonitor(
            self.clipboard,
            interval=self.config.monitor_interval,
            history_size=self.config.history_size,
        )
        self.apps = AppQueryService(
            self.table, self.runner, timeout=self.config.enumeration_timeout)
        logger.debug(f"Desktop service ready: {self.table!r}")

    async def get_active_window(self) -> WindowInfo:
        return await self.windows.get_active_window()

    async def read_text(self) -> str:
        return await self.clipboard.read_text()

    async def write_text(self, text: str) -> bool:
        return await self.clipboard.write_text(text)

    async def is_app_running(self, name: str) -> bool:
        return await self.apps.is_app_running(name)

    async def list_windows(self) -> List[AppWindow]:
        return await self.apps.list_windows()

    def close(self) -> None:
        self.monitor.stop_monitoring()

    async def __aenter__(self) -> "DesktopService":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.close()
