"""Tests for segment naming and artifact recognition."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pytest

from camdvr.filenames import (
    DvrPaths,
    SegmentName,
    format_segment_path,
    parse_base_name,
    next_sequence,
    parse_segment_file,
    segment_output_pattern,
)


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("2024-01-02-03-04-000.mkv", "2024-01-02-03-04-000"),
        ("2024-01-02-03-04-000.jpg", "2024-01-02-03-04-000"),
        ("2024-01-02-03-04-000.gif", "2024-01-02-03-04-000"),
        (".DS_Store", None),
        ("notes.txt", None),
        ("no_extension", None),
        (".mkv", None),
    ],
)
def test_parse_base_name_filters_non_artifacts(name: str, expected: str | None) -> None:
    """Only jpg/gif/mkv entries yield a base name."""
    assert parse_base_name(name) == expected


def test_segment_name_orders_chronologically_not_lexically() -> None:
    """Legacy unpadded names still order by capture time."""
    # Given two legacy names where lexical order disagrees with time order
    february = SegmentName.parse("2024-2-1-0-0-000")
    october = SegmentName.parse("2024-10-1-0-0-000")
    assert "2024-10-1-0-0-000" < "2024-2-1-0-0-000"

    # When comparing parsed values
    # Then February sorts first
    assert february is not None and october is not None
    assert february < october


def test_segment_name_sequence_breaks_ties() -> None:
    """Segments from one capture order by sequence index."""
    first = SegmentName.parse("2024-01-02-03-04-001")
    second = SegmentName.parse("2024-01-02-03-04-010")

    assert first is not None and second is not None
    assert first < second


def test_segment_name_renders_zero_padded() -> None:
    """String form is always zero-padded."""
    name = SegmentName.parse("2024-1-2-3-4-7")

    assert str(name) == "2024-01-02-03-04-007"


@pytest.mark.parametrize(
    "stem",
    ["garbage", "2024-13-01-00-00-000", "2024-01-01-24-00-000", "2024-01-01-00-00"],
)
def test_segment_name_rejects_invalid(stem: str) -> None:
    assert SegmentName.parse(stem) is None


def test_parse_segment_file_requires_container() -> None:
    """Thumbnails in the recordings directory are not segments."""
    assert parse_segment_file("2024-01-02-03-04-000.mkv") == SegmentName(2024, 1, 2, 3, 4, 0)
    assert parse_segment_file("2024-01-02-03-04-000.jpg") is None


def test_format_segment_path() -> None:
    """Segment paths are zero-padded and live in the recordings directory."""
    # Given a fixed layout and timestamp
    paths = DvrPaths(Path("/data"))
    timestamp = datetime(2024, 3, 5, 7, 9)

    # When formatting sequence 12
    path = format_segment_path(paths, timestamp, 12)

    # Then the path encodes the timestamp and a 3-digit sequence
    assert path == Path("/data/dvr/2024-03-05-07-09-012.mkv")


def test_segment_output_pattern_uses_ffmpeg_placeholder() -> None:
    paths = DvrPaths(Path("/data"))

    pattern = segment_output_pattern(paths, datetime(2024, 12, 25, 23, 59))

    assert pattern == Path("/data/dvr/2024-12-25-23-59-%03d.mkv")


def test_dvr_paths_layout() -> None:
    """Recordings and thumbnails are sibling directories sharing base names."""
    paths = DvrPaths(Path("/root"))

    assert paths.container_path("x") == Path("/root/dvr/x.mkv")
    assert paths.still_path("x") == Path("/root/thumb/x.jpg")
    assert paths.animated_path("x") == Path("/root/thumb/x.gif")


def test_next_sequence_only_counts_the_same_minute() -> None:
    """Sequences continue within a minute and restart at zero for a new one."""
    existing = [
        SegmentName(2024, 3, 5, 7, 9, 0),
        SegmentName(2024, 3, 5, 7, 9, 4),
        SegmentName(2024, 3, 5, 7, 8, 11),
    ]

    assert next_sequence(existing, datetime(2024, 3, 5, 7, 9, 30)) == 5
    assert next_sequence(existing, datetime(2024, 3, 5, 7, 10)) == 0
    assert next_sequence([], datetime(2024, 3, 5, 7, 9)) == 0
