"""Naming conventions for DVR segments and their thumbnails."""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

CONTAINER_EXT = "mkv"
STILL_EXT = "jpg"
ANIMATED_EXT = "gif"
RECOGNIZED_EXTS = frozenset({STILL_EXT, ANIMATED_EXT, CONTAINER_EXT})

DEFAULT_ROOT = Path("images/foscam")

_SEGMENT_RE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})-(\d{1,2})-(\d{1,2})-(\d+)$")


@dataclass(frozen=True)
class DvrPaths:
    """Fixed directory layout: recordings and thumbnails side by side under one root."""

    root: Path = DEFAULT_ROOT

    @property
    def dvr_dir(self) -> Path:
        return self.root / "dvr"

    @property
    def thumb_dir(self) -> Path:
        return self.root / "thumb"

    def container_path(self, base_name: str) -> Path:
        return self.dvr_dir / f"{base_name}.{CONTAINER_EXT}"

    def still_path(self, base_name: str) -> Path:
        return self.thumb_dir / f"{base_name}.{STILL_EXT}"

    def animated_path(self, base_name: str) -> Path:
        return self.thumb_dir / f"{base_name}.{ANIMATED_EXT}"

    def ensure(self) -> None:
        self.dvr_dir.mkdir(parents=True, exist_ok=True)
        self.thumb_dir.mkdir(parents=True, exist_ok=True)


@dataclass(frozen=True, order=True)
class SegmentName:
    """Capture timestamp plus segment index, ordered chronologically.

    Field order drives comparison, so two names compare by year, month, day,
    hour, minute and then sequence. Parsing accepts legacy names whose fields
    were not zero-padded; ``str()`` always renders the padded form.
    """

    year: int
    month: int
    day: int
    hour: int
    minute: int
    sequence: int

    @classmethod
    def parse(cls, base_name: str) -> SegmentName | None:
        match = _SEGMENT_RE.match(base_name)
        if match is None:
            return None
        year, month, day, hour, minute, sequence = (int(part) for part in match.groups())
        if not (1 <= month <= 12 and 1 <= day <= 31 and hour <= 23 and minute <= 59):
            return None
        return cls(year, month, day, hour, minute, sequence)

    @classmethod
    def from_timestamp(cls, timestamp: datetime, sequence: int) -> SegmentName:
        return cls(
            timestamp.year,
            timestamp.month,
            timestamp.day,
            timestamp.hour,
            timestamp.minute,
            sequence,
        )

    @property
    def prefix(self) -> str:
        return _timestamp_prefix(self.year, self.month, self.day, self.hour, self.minute)

    def __str__(self) -> str:
        return f"{self.prefix}-{self.sequence:03d}"


def _timestamp_prefix(year: int, month: int, day: int, hour: int, minute: int) -> str:
    return f"{year:04d}-{month:02d}-{day:02d}-{hour:02d}-{minute:02d}"


def parse_base_name(name: str) -> str | None:
    """Return the stem of a DVR artifact, or None for anything else."""
    if "." not in name:
        return None
    stem, extension = name.rsplit(".", 1)
    if extension not in RECOGNIZED_EXTS or not stem:
        return None
    return stem


def parse_segment_file(name: str) -> SegmentName | None:
    """Parse a recordings-directory entry into a SegmentName.

    Only container files count; stray thumbnails or temp files return None.
    """
    stem = parse_base_name(name)
    if stem is None or not name.endswith(f".{CONTAINER_EXT}"):
        return None
    return SegmentName.parse(stem)


def format_segment_path(paths: DvrPaths, timestamp: datetime, sequence: int) -> Path:
    return paths.container_path(str(SegmentName.from_timestamp(timestamp, sequence)))


def segment_output_pattern(paths: DvrPaths, timestamp: datetime) -> Path:
    """Segment path with ffmpeg's ``%03d`` placeholder for the sequence."""
    prefix = _timestamp_prefix(
        timestamp.year, timestamp.month, timestamp.day, timestamp.hour, timestamp.minute
    )
    return paths.dvr_dir / f"{prefix}-%03d.{CONTAINER_EXT}"


def next_sequence(existing: Iterable[SegmentName], timestamp: datetime) -> int:
    """First sequence number free for a capture starting in ``timestamp``'s minute."""
    prefix = SegmentName.from_timestamp(timestamp, 0).prefix
    used = [name.sequence for name in existing if name.prefix == prefix]
    return max(used) + 1 if used else 0
