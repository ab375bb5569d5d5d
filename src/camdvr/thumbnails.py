"""Threshold-gated thumbnail generation for recorded segments."""

from __future__ import annotations

import logging

from anyio import Path as AsyncPath

from camdvr.commands import build_animated_thumbnail_command, build_still_thumbnail_command
from camdvr.device_state import DeviceStateProvider
from camdvr.errors import ProcessLaunchError
from camdvr.filenames import DvrPaths, SegmentName
from camdvr.launcher import ProcessLauncher
from camdvr.models.segment import ThumbnailSet, VideoSegment
from camdvr.retention import LIST_COMMAND
from camdvr.scan import scan_recordings

logger = logging.getLogger(__name__)


class ThumbnailScheduler:
    """Builds a still and an animated preview for segments worth previewing.

    A segment qualifies once its size reaches the threshold and it has no
    still thumbnail yet. Each segment is attempted at most once per scheduler:
    a segment whose extraction fails (for example one shorter than the still
    seek offset) is not retried every pass.
    """

    def __init__(
        self,
        paths: DvrPaths,
        launcher: ProcessLauncher,
        *,
        device_id: str,
        notifier: DeviceStateProvider | None = None,
    ) -> None:
        self._paths = paths
        self._launcher = launcher
        self._device_id = device_id
        self._notifier = notifier
        self._attempted: set[SegmentName] = set()

    async def build_missing_thumbnails(self, size_threshold: int) -> list[SegmentName]:
        """Launch thumbnail extraction for qualifying segments.

        Args:
            size_threshold: Minimum segment size in bytes. Zero flushes every
                segment still lacking thumbnails.

        Returns:
            Segments for which generation was launched.
        """
        scan = await scan_recordings(self._paths)
        launched: list[SegmentName] = []
        for segment in scan.segments:
            if segment.size < size_threshold:
                continue
            thumbnails = ThumbnailSet.for_segment(self._paths, segment.base_name)
            if await AsyncPath(thumbnails.still).exists():
                continue
            # Checked after the last await so overlapping passes cannot both claim it.
            if segment.name in self._attempted:
                continue
            if await self._build(segment):
                launched.append(segment.name)
        return launched

    def forget(self, name: SegmentName) -> None:
        """Drop an evicted segment from the attempted set."""
        self._attempted.discard(name)

    async def _build(self, segment: VideoSegment) -> bool:
        self._attempted.add(segment.name)
        logger.info("Creating DVR thumbnails for %s", segment.base_name)
        await AsyncPath(self._paths.thumb_dir).mkdir(parents=True, exist_ok=True)

        still = build_still_thumbnail_command(segment.base_name, paths=self._paths)
        animated = build_animated_thumbnail_command(segment.base_name, paths=self._paths)
        started = False
        for invocation in (still, animated):
            try:
                await self._launcher.launch(invocation)
                started = True
            except ProcessLaunchError as exc:
                logger.error("Thumbnail extraction failed to start: %s", exc, exc_info=exc)

        if started and self._notifier is not None:
            try:
                await self._notifier.notify(self._device_id, LIST_COMMAND)
            except Exception as exc:
                logger.warning("Thumbnail notification failed: %s", exc, exc_info=True)
        return started
