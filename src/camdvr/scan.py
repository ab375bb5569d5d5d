"""Non-blocking scan of the recordings directory."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from anyio import Path as AsyncPath

from camdvr.filenames import DvrPaths, parse_segment_file
from camdvr.models.segment import RecordingScan, VideoSegment

logger = logging.getLogger(__name__)


async def _entry_size(entry: AsyncPath) -> int | None:
    try:
        stat_info = await entry.stat()
    except OSError as exc:
        # Entry vanished or is unreadable; leave it out of this pass.
        logger.warning("Failed to stat %s: %s", Path(entry), exc, exc_info=True)
        return None
    return stat_info.st_size


async def scan_recordings(paths: DvrPaths) -> RecordingScan:
    """List every entry, stat all of them, then classify.

    Sizes of all entries count toward ``total_bytes``; only recognized
    container files become segments.
    """
    entries: list[AsyncPath] = []
    try:
        async for entry in AsyncPath(paths.dvr_dir).iterdir():
            entries.append(entry)
    except FileNotFoundError:
        logger.debug("Recordings directory missing: %s", paths.dvr_dir)
        return RecordingScan(total_bytes=0, segments=())
    except OSError as exc:
        logger.warning("Failed to list %s: %s", paths.dvr_dir, exc, exc_info=True)
        return RecordingScan(total_bytes=0, segments=())

    sizes = await asyncio.gather(*(_entry_size(entry) for entry in entries))

    total_bytes = 0
    segments: list[VideoSegment] = []
    for entry, size in zip(entries, sizes):
        if size is None:
            continue
        total_bytes += size
        name = parse_segment_file(entry.name)
        if name is None:
            continue
        segments.append(VideoSegment(name=name, base_name=entry.stem, size=size))

    segments.sort(key=lambda segment: segment.name)
    return RecordingScan(total_bytes=total_bytes, segments=tuple(segments))
