"""Recording controller: one recorder per device, driven by host ticks."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Coroutine, Iterator, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from camdvr.clock import Clock, SystemClock
from camdvr.commands import Invocation, build_capture_command
from camdvr.device_state import DeviceStateProvider
from camdvr.errors import ProcessLaunchError
from camdvr.filenames import DvrPaths, next_sequence
from camdvr.launcher import ProcessHandle, ProcessLauncher
from camdvr.models.config import DvrConfig
from camdvr.models.enums import DeviceState, RecorderState
from camdvr.retention import RetentionManager
from camdvr.scan import scan_recordings
from camdvr.thumbnails import ThumbnailScheduler

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class RecordingSession:
    """The single running capture process and how it was started."""

    process: ProcessHandle
    invocation: Invocation
    started_at: datetime
    stopping: bool = False


@dataclass(slots=True)
class SchedulerClock:
    last_eviction_check: float = 0.0
    last_thumbnail_check: float = 0.0


@dataclass(slots=True)
class _PassSlot:
    """Single-flight slot for one kind of background pass."""

    name: str
    task: asyncio.Task[Any] | None = field(default=None, repr=False)

    @property
    def busy(self) -> bool:
        return self.task is not None and not self.task.done()


class RecordingController:
    """State machine owning one device's recorder, eviction and thumbnail cadence.

    States are IDLE (no session) and RECORDING (exactly one session). A tick
    reads the external device state and transitions the recorder; while
    recording it schedules retention and thumbnail passes once per
    ``delay_s``. Passes run as background tasks so a tick never waits on a
    directory scan, and a pass is not scheduled while the previous one of the
    same kind is still running.
    """

    def __init__(
        self,
        config: DvrConfig,
        *,
        state_provider: DeviceStateProvider,
        launcher: ProcessLauncher,
        paths: DvrPaths | None = None,
        clock: Clock | None = None,
        stop_timeout_s: float = 5.0,
    ) -> None:
        self.config = config
        self._paths = paths or DvrPaths()
        self._state_provider = state_provider
        self._launcher = launcher
        self._clock = clock or SystemClock()
        self._stop_timeout_s = stop_timeout_s
        self._session: RecordingSession | None = None
        self.scheduler_clock = SchedulerClock()
        self.retention = RetentionManager(
            self._paths, device_id=config.device_id, notifier=state_provider
        )
        self.thumbnails = ThumbnailScheduler(
            self._paths, launcher, device_id=config.device_id, notifier=state_provider
        )
        self._retention_slot = _PassSlot("retention")
        self._thumbnail_slot = _PassSlot("thumbnails")
        self._flush_tasks: set[asyncio.Task[Any]] = set()

    @property
    def state(self) -> RecorderState:
        return RecorderState.RECORDING if self._session is not None else RecorderState.IDLE

    @property
    def session(self) -> RecordingSession | None:
        return self._session

    async def tick(self) -> None:
        """Apply the current device state, then run any passes that are due."""
        current = self._state_provider.get_state(self.config.device_id)
        if current is DeviceState.OFF and self._session is not None:
            await self.stop_recording()
        elif current is DeviceState.ON and self._session is None:
            await self.start_recording()

        # Disk usage only matters while something is being written.
        if self._session is None:
            return

        now = self._clock.now()
        clock = self.scheduler_clock
        if now - clock.last_eviction_check >= self.config.delay_s:
            if self._schedule(self._retention_slot, self._run_retention()):
                clock.last_eviction_check = now

        if now - clock.last_thumbnail_check >= self.config.delay_s:
            threshold = self.config.thumbnail_threshold_bytes
            if self._schedule(
                self._thumbnail_slot, self.thumbnails.build_missing_thumbnails(threshold)
            ):
                clock.last_thumbnail_check = now

    async def start_recording(self) -> bool:
        if self._session is not None:
            return False

        await asyncio.to_thread(self._paths.ensure)
        started_at = datetime.now()
        scan = await scan_recordings(self._paths)
        invocation = build_capture_command(
            self.config,
            self.config.segment_length_s,
            paths=self._paths,
            now=started_at,
            start_number=next_sequence((s.name for s in scan.segments), started_at),
        )
        try:
            process = await self._launcher.launch(
                invocation, on_exit=self._on_recorder_exit, capture_stderr=True
            )
        except ProcessLaunchError as exc:
            logger.error("DVR failed to start: %s", exc, exc_info=exc)
            return False

        self._session = RecordingSession(
            process=process, invocation=invocation, started_at=started_at
        )
        logger.info("DVR started", extra={"pid": process.pid})
        return True

    async def stop_recording(self) -> bool:
        session = self._session
        if session is None:
            return False

        session.stopping = True
        self._session = None
        await session.process.stop(self._stop_timeout_s)
        logger.info("DVR stopped", extra={"pid": session.process.pid})

        # Recording is over, so every segment written so far can get thumbnails.
        self._flush_thumbnails()
        self.scheduler_clock.last_thumbnail_check = self._clock.now()
        return True

    async def wait_for_pending(self) -> None:
        """Wait for in-flight retention and thumbnail passes to finish."""
        tasks = [
            slot.task
            for slot in (self._retention_slot, self._thumbnail_slot)
            if slot.task is not None
        ]
        tasks.extend(self._flush_tasks)
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    async def shutdown(self) -> None:
        await self.stop_recording()
        await self.wait_for_pending()

    def _on_recorder_exit(self, process: ProcessHandle, return_code: int) -> None:
        session = self._session
        if session is None or session.process is not process or session.stopping:
            return

        # Exited on its own: the session is gone even though nobody asked.
        self._session = None
        logger.warning(
            "DVR process exited unexpectedly (exit code: %s)",
            return_code,
            extra={"pid": process.pid},
        )
        self._flush_thumbnails()
        self.scheduler_clock.last_thumbnail_check = self._clock.now()

    def _flush_thumbnails(self) -> None:
        task = asyncio.create_task(self.thumbnails.build_missing_thumbnails(0))
        self._flush_tasks.add(task)
        task.add_done_callback(self._flush_tasks.discard)
        task.add_done_callback(self._log_pass_exception)

    def _schedule(self, slot: _PassSlot, coro: Coroutine[Any, Any, Any]) -> bool:
        if slot.busy:
            logger.debug("Skipping %s pass; previous pass still running", slot.name)
            coro.close()
            return False
        slot.task = asyncio.create_task(coro)
        slot.task.add_done_callback(self._log_pass_exception)
        return True

    async def _run_retention(self) -> None:
        evicted = await self.retention.enforce_capacity(self.config.byte_limit)
        if evicted is not None:
            self.thumbnails.forget(evicted)

    @staticmethod
    def _log_pass_exception(task: asyncio.Task[Any]) -> None:
        try:
            exc = task.exception()
        except asyncio.CancelledError:
            return
        if exc is not None:
            logger.error("DVR background pass failed: %s", exc, exc_info=exc)


class ControllerRegistry(Mapping[str, RecordingController]):
    """Per-device controllers held by the host across ticks."""

    def __init__(
        self,
        *,
        state_provider: DeviceStateProvider,
        launcher: ProcessLauncher,
        paths: DvrPaths | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._state_provider = state_provider
        self._launcher = launcher
        self._paths = paths or DvrPaths()
        self._clock = clock
        self._controllers: dict[str, RecordingController] = {}

    def __getitem__(self, device_id: str) -> RecordingController:
        return self._controllers[device_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._controllers)

    def __len__(self) -> int:
        return len(self._controllers)

    def get_or_create(self, device_id: str, config: DvrConfig) -> RecordingController:
        controller = self._controllers.get(device_id)
        if controller is None:
            controller = RecordingController(
                config,
                state_provider=self._state_provider,
                launcher=self._launcher,
                paths=self._paths,
                clock=self._clock,
            )
            self._controllers[device_id] = controller
        return controller

    async def shutdown(self) -> None:
        for device_id, controller in self._controllers.items():
            try:
                await controller.shutdown()
            except Exception as exc:
                logger.error("Failed to shut down DVR %s: %s", device_id, exc, exc_info=exc)


async def tick(
    device_id: str,
    command: str | None,
    controllers: ControllerRegistry,
    values: Mapping[str, Any] | None,
    config: DvrConfig,
) -> None:
    """Host entry point: run one tick for ``device_id``.

    ``command`` and ``values`` are part of the host calling convention and are
    not used by the recorder.
    """
    _ = command, values
    controller = controllers.get_or_create(device_id, config)
    try:
        await controller.tick()
    except Exception as exc:
        logger.error("DVR tick failed for %s: %s", device_id, exc, exc_info=exc)
