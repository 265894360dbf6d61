"""Run short-lived external commands under a hard deadline."""

import asyncio
import logging
import os
import subprocess
import time
from typing import Mapping, Optional, Sequence, Tuple

from deskbridge.errors import ProcessLaunchError, ProcessTimeout
from deskbridge.models.process import ProcessResult

logger = logging.getLogger(__name__)

# Upper bound on waiting for a killed child to be reaped.
KILL_GRACE = 1.0

_CREATION_FLAGS = getattr(subprocess, "CREATE_NO_WINDOW", 0)


def _decode(data: Optional[bytes]) -> str:
    if not data:
        return ""
    return data.decode("utf-8", errors="replace")


class ProcessRunner:
    """Spawns one child per ``run`` call and always reaps it.

    A non-zero exit is an ordinary result. Only a missing executable
    (``ProcessLaunchError``) and an expired deadline (``ProcessTimeout``)
    raise.
    """

    def __init__(self, default_timeout: float = 5.0) -> None:
        self.default_timeout = default_timeout

    async def run(
        self,
        command: str,
        args: Sequence[str] = (),
        timeout: Optional[float] = None,
        input_text: Optional[str] = None,
        capture_output: bool = True,
        env: Optional[Mapping[str, str]] = None,
    ) -> ProcessResult:
        if timeout is None:
            timeout = self.default_timeout
        argv = [command, *args]
        output = asyncio.subprocess.PIPE if capture_output else asyncio.subprocess.DEVNULL
        stdin = asyncio.subprocess.PIPE if input_text is not None else asyncio.subprocess.DEVNULL
        child_env = {**os.environ, **env} if env else None

        started = time.monotonic()
        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdin=stdin,
                stdout=output,
                stderr=output,
                env=child_env,
                creationflags=_CREATION_FLAGS,
            )
        except OSError as e:
            logger.warning(f"Failed to launch {command}: {e}")
            raise ProcessLaunchError(command, e) from e

        payload = input_text.encode("utf-8") if input_text is not None else None
        # Shielded so a timeout leaves the reader running; it returns the
        # partial output once the killed child closes its pipes.
        communicate = asyncio.ensure_future(process.communicate(payload))
        try:
            stdout, stderr = await asyncio.wait_for(asyncio.shield(communicate), timeout)
        except asyncio.TimeoutError:
            await self._kill(process)
            stdout, stderr = await self._drain(communicate)
            exit_code = process.returncode if process.returncode is not None else -1
            logger.warning(f"{command} timed out after {timeout:.2f}s (pid {process.pid})")
            result = ProcessResult(
                exit_code=exit_code,
                stdout=_decode(stdout),
                stderr=_decode(stderr),
                timed_out=True,
            )
            raise ProcessTimeout(command, timeout, result, pid=process.pid) from None
        finally:
            # Covers cancellation of the awaiting task.
            if process.returncode is None:
                await self._kill(process)
            if not communicate.done():
                communicate.cancel()

        result = ProcessResult(
            exit_code=process.returncode,
            stdout=_decode(stdout),
            stderr=_decode(stderr),
        )
        logger.debug(
            f"{command} exited with {result.exit_code} in {time.monotonic() - started:.3f}s")
        return result

    @staticmethod
    async def _kill(process: asyncio.subprocess.Process) -> None:
        try:
            process.kill()
        except ProcessLookupError:
            pass
        try:
            await asyncio.wait_for(process.wait(), KILL_GRACE)
        except asyncio.TimeoutError:
            logger.error(f"Process {process.pid} did not exit after kill")

    @staticmethod
    async def _drain(communicate: "asyncio.Future[Tuple[bytes, bytes]]") -> Tuple[Optional[bytes], Optional[bytes]]:
        # The pipes reach EOF once the child is gone, unless a grandchild
        # still holds them open.
        try:
            return await asyncio.wait_for(communicate, KILL_GRACE)
        except asyncio.TimeoutError:
            logger.debug("Output pipes stayed open after kill; partial output dropped")
            return None, None
