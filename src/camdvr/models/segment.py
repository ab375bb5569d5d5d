"""Recorded segment and thumbnail models."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from camdvr.filenames import DvrPaths, SegmentName


@dataclass(frozen=True)
class VideoSegment:
    """One container file found in the recordings directory.

    ``base_name`` is the stem as it exists on disk, which may be a legacy
    non-padded form of ``name``. Always address files through ``base_name``.
    """

    name: SegmentName
    base_name: str
    size: int


@dataclass(frozen=True)
class ThumbnailSet:
    """Still and animated previews belonging to one segment."""

    still: Path
    animated: Path

    @classmethod
    def for_segment(cls, paths: DvrPaths, base_name: str) -> ThumbnailSet:
        return cls(still=paths.still_path(base_name), animated=paths.animated_path(base_name))

    def files(self) -> tuple[Path, Path]:
        return self.still, self.animated


@dataclass(frozen=True)
class RecordingScan:
    """Result of listing and stat-ing the recordings directory."""

    total_bytes: int
    segments: tuple[VideoSegment, ...]

    def oldest(self) -> VideoSegment | None:
        if not self.segments:
            return None
        return min(self.segments, key=lambda segment: segment.name)
