"""Clipboard change detection by polling.

There is no portable OS hook for clipboard changes, so the monitor samples
``ClipboardService.read_text`` on a fixed interval and compares the text
with the last snapshot.
"""

import asyncio
import inspect
import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Awaitable, Callable, Deque, List, Optional, Union

from ulid import ULID

from deskbridge.errors import ClipboardUnavailable
from deskbridge.services.clipboard_service import ClipboardService

logger = logging.getLogger(__name__)

Listener = Callable[[str], Optional[Awaitable[None]]]


@dataclass(frozen=True, eq=False)
class ListenerHandle:
    callback: Listener
    handle_id: str = field(default_factory=lambda: str(ULID()))


@dataclass(frozen=True)
class ClipboardChange:
    text: str
    detected_at: datetime


class ClipboardMonitor:
    """Polls the clipboard and notifies listeners once per change.

    All state lives on the event loop that called ``start_monitoring``.
    Ticks run one after another: a read never starts before the previous
    tick's listeners have returned.
    """

    def __init__(
        self,
        clipboard: ClipboardService,
        interval: float = 1.0,
        history_size: int = 50,
    ) -> None:
        self.clipboard = clipboard
        self.interval = interval
        self._listeners: List[ListenerHandle] = []
        self._snapshot: Optional[str] = None
        self._task: Optional["asyncio.Task[None]"] = None
        self._history: Deque[ClipboardChange] = deque(maxlen=history_size)

    @property
    def is_monitoring(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def snapshot(self) -> Optional[str]:
        return self._snapshot

    @property
    def history(self) -> List[ClipboardChange]:
        return list(self._history)

    async def start_monitoring(self, interval: Optional[float] = None) -> None:
        """Take a baseline snapshot and start polling.

        Calling this while already running replaces the running loop.
        """
        interval = self.interval if interval is None else interval
        if interval <= 0:
            raise ValueError(f"Polling interval must be positive, got {interval}")

        await self._cancel_and_wait()
        try:
            self._snapshot = await self.clipboard.read_text()
        except ClipboardUnavailable as e:
            # Some tools fail on an empty clipboard; treat it as empty.
            logger.warning(f"Could not take clipboard baseline: {e}")
            self._snapshot = ""

        # A concurrent start may have finished while the baseline was read.
        await self._cancel_and_wait()
        self._task = asyncio.create_task(self._poll_loop(interval))
        logger.info(f"Clipboard monitoring started (every {interval:.2f}s)")

    def stop_monitoring(self) -> None:
        if self._cancel():
            logger.info("Clipboard monitoring stopped")

    def _cancel(self) -> bool:
        task, self._task = self._task, None
        if task is None or task.done():
            return False
        task.cancel()
        return True

    async def _cancel_and_wait(self) -> None:
        task = self._task
        if not self._cancel():
            return
        try:
            await task
        except asyncio.CancelledError:
            pass

    def add_listener(self, callback: Listener) -> ListenerHandle:
        if not callable(callback):
            raise TypeError("Clipboard listener must be callable")
        for handle in self._listeners:
            if handle.callback == callback:
                return handle
        handle = ListenerHandle(callback)
        self._listeners.append(handle)
        logger.debug(f"Clipboard listener {handle.handle_id} added")
        return handle

    def remove_listener(self, listener: Union[ListenerHandle, Listener]) -> None:
        for handle in self._listeners:
            if handle is listener or handle.callback == listener:
                self._listeners.remove(handle)
                logger.debug(f"Clipboard listener {handle.handle_id} removed")
                return

    @property
    def listeners(self) -> List[ListenerHandle]:
        return list(self._listeners)

    async def _poll_loop(self, interval: float) -> None:
        while True:
            await asyncio.sleep(interval)
            await self._tick()

    async def _tick(self) -> None:
        try:
            current = await self.clipboard.read_text()
        except ClipboardUnavailable as e:
            logger.warning(f"Clipboard monitoring error: {e}")
            return

        if current == self._snapshot:
            return

        self._snapshot = current
        self._history.append(ClipboardChange(current, datetime.now(timezone.utc)))
        logger.info(f"Clipboard copied: text ({len(current)} chars)")
        await self._notify(current)

    async def _notify(self, text: str) -> None:
        for handle in list(self._listeners):
            # Skip listeners removed earlier in this round.
            if handle not in self._listeners:
                continue
            try:
                result = handle.callback(text)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error(f"Error in clipboard listener {handle.handle_id}: {e}")
