"""Plain-text clipboard access through external tools.

Each platform supplies an ordered chain of tools; the first one that works
wins. Nothing is cached, every call queries the OS.
"""

import logging
from typing import List, Optional, Sequence, Tuple

from deskbridge.errors import ClipboardUnavailable, ProcessFailed, ProcessLaunchError, ProcessTimeout
from deskbridge.models.window import Platform
from deskbridge.platforms.base import UNSUPPORTED, StrategyKind
from deskbridge.platforms.factory import StrategyTable
from deskbridge.utils.process_runner import ProcessRunner

logger = logging.getLogger(__name__)

TOOL_FAILURES = (ProcessLaunchError, ProcessTimeout, ProcessFailed)


class ClipboardService:

    def __init__(
        self,
        table: StrategyTable,
        runner: Optional[ProcessRunner] = None,
        timeout: float = 5.0,
    ) -> None:
        self.table = table
        self.runner = runner or ProcessRunner()
        self.timeout = timeout

    @property
    def platform(self) -> Platform:
        return self.table.platform

    async def read_text(self) -> str:
        """Return the current clipboard text.

        Raises:
            ClipboardUnavailable: every tool in the chain failed, or the
                platform has none.
        """
        attempts: List[Tuple[str, str]] = []
        for reader in self._chain(StrategyKind.CLIPBOARD_READ):
            try:
                return await reader(self.runner, self.timeout)
            except TOOL_FAILURES as e:
                logger.debug(f"Clipboard read via {reader.name} failed: {e}")
                attempts.append((reader.name, str(e)))

        error = ClipboardUnavailable(attempts)
        logger.error(f"Failed to read clipboard: {error}")
        raise error

    async def write_text(self, text: str) -> bool:
        if not isinstance(text, str):
            raise TypeError(f"Clipboard text must be str, not {type(text).__name__}")

        for writer in self._chain(StrategyKind.CLIPBOARD_WRITE):
            try:
                await writer(self.runner, text, self.timeout)
                return True
            except TOOL_FAILURES as e:
                logger.debug(f"Clipboard write via {writer.name} failed: {e}")

        logger.error("Failed to write clipboard: no clipboard tool succeeded")
        return False

    async def clear(self) -> bool:
        return await self.write_text("")

    def _chain(self, kind: StrategyKind) -> Sequence:
        chain = self.table.resolve(kind)
        if chain is UNSUPPORTED:
            return ()
        return chain
