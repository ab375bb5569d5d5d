"""Spawn external processes and observe their exit."""

from __future__ import annotations

import asyncio
import logging
import signal
from collections.abc import Callable
from typing import Protocol

from camdvr.commands import Invocation
from camdvr.errors import ProcessLaunchError

logger = logging.getLogger(__name__)

ExitCallback = Callable[["ProcessHandle", int], None]


class ProcessHandle(Protocol):
    @property
    def pid(self) -> int: ...

    @property
    def returncode(self) -> int | None: ...

    def is_running(self) -> bool: ...

    async def stop(self, timeout_s: float = 5.0) -> None: ...


class ProcessLauncher(Protocol):
    async def launch(
        self,
        invocation: Invocation,
        *,
        on_exit: ExitCallback | None = None,
        capture_stderr: bool = False,
    ) -> ProcessHandle: ...


class AsyncioProcessHandle:
    """Wraps an asyncio subprocess; a watcher task reports the exit code."""

    def __init__(self, process: asyncio.subprocess.Process, invocation: Invocation) -> None:
        self._process = process
        self._invocation = invocation
        self._wait_task: asyncio.Task[None] | None = None
        self._stderr_task: asyncio.Task[None] | None = None

    @property
    def pid(self) -> int:
        return self._process.pid

    @property
    def returncode(self) -> int | None:
        return self._process.returncode

    def is_running(self) -> bool:
        return self._process.returncode is None

    async def stop(self, timeout_s: float = 5.0) -> None:
        """Terminate, then kill if the process outlives ``timeout_s``."""
        process = self._process
        if process.returncode is not None:
            return
        try:
            process.send_signal(signal.SIGTERM)
            await asyncio.wait_for(process.wait(), timeout=timeout_s)
        except ProcessLookupError:
            return
        except asyncio.TimeoutError:
            logger.warning("Process did not terminate, killing (PID: %s)", process.pid)
            try:
                process.kill()
                await asyncio.wait_for(process.wait(), timeout=2.0)
            except ProcessLookupError:
                return
            except Exception:
                logger.exception("Failed to kill process (PID: %s)", process.pid)

    def _watch(self, on_exit: ExitCallback | None) -> None:
        self._wait_task = asyncio.create_task(self._wait_for_exit(on_exit))
        if self._process.stderr is not None:
            self._stderr_task = asyncio.create_task(self._drain_stderr(self._process.stderr))

    async def _wait_for_exit(self, on_exit: ExitCallback | None) -> None:
        return_code = await self._process.wait()
        if self._stderr_task is not None:
            await self._stderr_task
        logger.debug(
            "Process exited: pid=%d rc=%d cmd=%s",
            self._process.pid,
            return_code,
            self._invocation.redacted(),
        )
        if on_exit is None:
            return
        try:
            on_exit(self, return_code)
        except Exception as exc:
            logger.error("Process exit callback failed: %s", exc, exc_info=exc)

    async def _drain_stderr(self, stream: asyncio.StreamReader) -> None:
        # ffmpeg is chatty on stderr; keep the pipe empty and the lines at DEBUG.
        while True:
            line = await stream.readline()
            if not line:
                return
            logger.debug("ffmpeg[%d]: %s", self._process.pid, line.decode(errors="replace").rstrip())


class AsyncioProcessLauncher:
    """ProcessLauncher backed by ``asyncio.create_subprocess_exec``."""

    async def launch(
        self,
        invocation: Invocation,
        *,
        on_exit: ExitCallback | None = None,
        capture_stderr: bool = False,
    ) -> AsyncioProcessHandle:
        stderr = asyncio.subprocess.PIPE if capture_stderr else asyncio.subprocess.DEVNULL
        try:
            process = await asyncio.create_subprocess_exec(
                *invocation.argv,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=stderr,
            )
        except OSError as exc:
            raise ProcessLaunchError(invocation.redacted(), exc) from exc

        handle = AsyncioProcessHandle(process, invocation)
        handle._watch(on_exit)
        logger.debug("Launched pid=%d: %s", process.pid, invocation.redacted())
        return handle
