"""Disk-capacity enforcement: evict the oldest segment once the limit is reached."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from anyio import Path as AsyncPath

from camdvr.device_state import DeviceStateProvider
from camdvr.filenames import DvrPaths, SegmentName
from camdvr.models.segment import ThumbnailSet, VideoSegment
from camdvr.scan import scan_recordings

logger = logging.getLogger(__name__)

LIST_COMMAND = "list"


class RetentionManager:
    """Keeps the recordings directory under a byte limit.

    Eviction is strictly oldest-first by parsed capture time and sequence,
    never by size, and removes at most one segment per call. Callers invoke it
    periodically, so a directory far over the limit shrinks one segment per
    pass.
    """

    def __init__(
        self,
        paths: DvrPaths,
        *,
        device_id: str,
        notifier: DeviceStateProvider | None = None,
    ) -> None:
        self._paths = paths
        self._device_id = device_id
        self._notifier = notifier

    async def enforce_capacity(self, byte_limit: int) -> SegmentName | None:
        """Evict the oldest segment if the directory holds ``byte_limit`` bytes or more.

        Returns:
            The evicted segment name, or None when nothing was deleted.
        """
        scan = await scan_recordings(self._paths)
        if scan.total_bytes < byte_limit:
            logger.debug(
                "Recordings within capacity: total=%d limit=%d", scan.total_bytes, byte_limit
            )
            return None

        oldest = scan.oldest()
        if oldest is None:
            logger.warning(
                "Recordings over capacity but no segment to evict: total=%d limit=%d",
                scan.total_bytes,
                byte_limit,
            )
            return None

        await self._delete_segment(oldest)
        if self._notifier is not None:
            try:
                await self._notifier.notify(self._device_id, LIST_COMMAND)
            except Exception as exc:
                logger.warning("Eviction notification failed: %s", exc, exc_info=True)

        logger.info(
            "DVR files for %s deleted",
            oldest.base_name,
            extra={"freed_bytes": oldest.size, "total_bytes": scan.total_bytes},
        )
        return oldest.name

    async def _delete_segment(self, segment: VideoSegment) -> None:
        thumbnails = ThumbnailSet.for_segment(self._paths, segment.base_name)
        targets = (self._paths.container_path(segment.base_name), *thumbnails.files())
        await asyncio.gather(*(self._unlink(path) for path in targets))

    async def _unlink(self, path: Path) -> None:
        try:
            await AsyncPath(path).unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("Failed to delete %s: %s", path, exc, exc_info=True)
