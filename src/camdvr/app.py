"""Host scheduler: load config, build the controller registry, tick on a cadence."""

from __future__ import annotations

import asyncio
import logging
import signal
from pathlib import Path

from camdvr.commands import Invocation
from camdvr.config import load_config
from camdvr.controller import ControllerRegistry, tick
from camdvr.device_state import DeviceStateProvider, create_device_state_provider
from camdvr.filenames import DvrPaths, SegmentName
from camdvr.launcher import AsyncioProcessLauncher, ExitCallback, ProcessHandle, ProcessLauncher
from camdvr.models.config import BYTES_PER_MB, Config
from camdvr.retention import RetentionManager
from camdvr.thumbnails import ThumbnailScheduler

logger = logging.getLogger(__name__)


class Application:
    """Runs the DVR for the configured device until SIGINT/SIGTERM.

    Stands in for an external host scheduler: every ``host.tick_interval_s``
    it calls the ``tick`` entry point, and on shutdown it stops the recorder
    and waits for outstanding passes.
    """

    def __init__(
        self,
        config_path: Path,
        *,
        launcher: ProcessLauncher | None = None,
        state_provider: DeviceStateProvider | None = None,
    ) -> None:
        self._config_path = config_path
        self._config: Config | None = None
        self._launcher = launcher
        self._state_provider = state_provider
        self._registry: ControllerRegistry | None = None
        self._shutdown_event = asyncio.Event()
        self._shutdown_started = False

    @property
    def config(self) -> Config:
        if self._config is None:
            raise RuntimeError("Config not loaded")
        return self._config

    @property
    def registry(self) -> ControllerRegistry:
        if self._registry is None:
            raise RuntimeError("Application not started")
        return self._registry

    async def run(self) -> None:
        """Run ticks until a shutdown signal arrives."""
        logger.info("Starting camdvr...")
        self._config = load_config(self._config_path)
        logger.info("Config loaded from %s", self._config_path)

        self._registry = self._create_registry(self._config)
        self._setup_signal_handlers()

        dvr = self._config.dvr
        interval = self._config.host.tick_interval_s
        while not self._shutdown_event.is_set():
            await tick(dvr.device_id, None, self._registry, None, dvr)
            try:
                await asyncio.wait_for(self._shutdown_event.wait(), timeout=interval)
            except asyncio.TimeoutError:
                pass  # Normal - next tick is due

        await self.shutdown()

    def request_shutdown(self) -> None:
        self._shutdown_event.set()

    async def shutdown(self) -> None:
        logger.info("Shutting down camdvr...")
        if self._registry is not None:
            await self._registry.shutdown()
        logger.info("Shutdown complete")

    def _create_registry(self, config: Config) -> ControllerRegistry:
        return ControllerRegistry(
            state_provider=self._state_provider or create_device_state_provider(config.state),
            launcher=self._launcher or AsyncioProcessLauncher(),
            paths=DvrPaths(Path(config.host.root_dir)),
        )

    def _setup_signal_handlers(self) -> None:
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, self._handle_signal, sig)

    def _handle_signal(self, sig: signal.Signals) -> None:
        if self._shutdown_started:
            logger.warning("Shutdown already in progress, ignoring signal")
            return
        logger.info("Received signal %s, initiating shutdown...", sig.name)
        self._shutdown_started = True
        self._shutdown_event.set()


async def run_prune(config: Config) -> SegmentName | None:
    """Run one retention pass outside the host loop."""
    dvr = config.dvr
    state_provider = create_device_state_provider(config.state)
    manager = RetentionManager(
        DvrPaths(Path(config.host.root_dir)), device_id=dvr.device_id, notifier=state_provider
    )
    return await manager.enforce_capacity(dvr.byte_limit)


async def run_thumbnails(config: Config, threshold_mb: float = 0.0) -> list[SegmentName]:
    """Run one thumbnail pass and wait for the extraction processes to finish."""
    dvr = config.dvr
    launcher = _WaitingLauncher(AsyncioProcessLauncher())
    scheduler = ThumbnailScheduler(
        DvrPaths(Path(config.host.root_dir)),
        launcher,
        device_id=dvr.device_id,
        notifier=create_device_state_provider(config.state),
    )
    launched = await scheduler.build_missing_thumbnails(int(threshold_mb * BYTES_PER_MB))
    await launcher.wait_all()
    return launched


class _WaitingLauncher:
    """Launcher that remembers its children so a one-shot command can wait on them."""

    def __init__(self, inner: AsyncioProcessLauncher) -> None:
        self._inner = inner
        self._exited: list[asyncio.Future[int]] = []

    async def launch(
        self,
        invocation: Invocation,
        *,
        on_exit: ExitCallback | None = None,
        capture_stderr: bool = False,
    ) -> ProcessHandle:
        loop = asyncio.get_running_loop()
        done: asyncio.Future[int] = loop.create_future()

        def _exit(handle: ProcessHandle, return_code: int) -> None:
            if on_exit is not None:
                on_exit(handle, return_code)
            if not done.done():
                done.set_result(return_code)

        handle = await self._inner.launch(invocation, on_exit=_exit, capture_stderr=capture_stderr)
        self._exited.append(done)
        return handle

    async def wait_all(self) -> None:
        if self._exited:
            await asyncio.gather(*self._exited)
