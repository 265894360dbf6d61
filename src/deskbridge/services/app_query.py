"""Best-effort queries over the list of open windows."""

import logging
from typing import List, Optional

from deskbridge.errors import DesktopError
from deskbridge.models.window import UNKNOWN, AppWindow
from deskbridge.platforms.base import UNSUPPORTED, StrategyKind
from deskbridge.platforms.factory import StrategyTable
from deskbridge.utils.process_runner import ProcessRunner

logger = logging.getLogger(__name__)


class AppQueryService:

    def __init__(
        self,
        table: StrategyTable,
        runner: Optional[ProcessRunner] = None,
        timeout: float = 5.0,
    ) -> None:
        self.table = table
        self.runner = runner or ProcessRunner()
        self.timeout = timeout

    async def list_windows(self) -> List[AppWindow]:
        """Enumerate titled top-level windows; ``[]`` when that is not possible."""
        strategy = self.table.resolve(StrategyKind.APP_ENUMERATION)
        if strategy is UNSUPPORTED:
            logger.debug(f"Window enumeration is not supported on {self.table.platform.value}")
            return []

        try:
            records = await strategy(self.runner, self.timeout)
            windows = [AppWindow.from_record(record) for record in records]
        except DesktopError as e:
            logger.warning(f"Failed to list windows: {e}")
            return []

        return [window for window in windows if window.title]

    async def is_app_running(self, name: str) -> bool:
        needle = (name or "").strip().lower()
        if not needle:
            return False

        try:
            windows = await self.list_windows()
        except Exception as e:
            logger.error(f"Failed to check if {name!r} is running: {e}")
            return False

        return any(
            needle in window.process_name.lower()
            for window in windows
            if window.process_name != UNKNOWN
        )
