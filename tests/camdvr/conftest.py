"""Shared pytest fixtures for camdvr tests."""

from __future__ import annotations

import sys
from collections.abc import Callable
from pathlib import Path

# Add src to sys.path for imports
src_path = Path(__file__).parent.parent.parent / "src"
if str(src_path.resolve()) not in sys.path:
    sys.path.insert(0, str(src_path.resolve()))

import pytest

from camdvr.filenames import DvrPaths
from camdvr.models.config import DvrConfig
from tests.camdvr.mocks import FakeClock, FakeLauncher, MockDeviceState

SegmentWriter = Callable[..., Path]


@pytest.fixture
def paths(tmp_path: Path) -> DvrPaths:
    layout = DvrPaths(tmp_path / "foscam")
    layout.ensure()
    return layout


@pytest.fixture
def write_segment(paths: DvrPaths) -> SegmentWriter:
    """Create a segment file of the given size, optionally with thumbnails."""

    def _write(base_name: str, size: int = 10, *, thumbnails: bool = False) -> Path:
        container = paths.container_path(base_name)
        container.write_bytes(b"\0" * size)
        if thumbnails:
            paths.still_path(base_name).write_bytes(b"jpg")
            paths.animated_path(base_name).write_bytes(b"gif")
        return container

    return _write


@pytest.fixture
def dvr_config() -> DvrConfig:
    return DvrConfig(
        device_id="foscam",
        title="Front Door",
        device_ip="10.0.0.5",
        username="u",
        password="p",
        delay_s=300,
        segment_length_s=600,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def launcher() -> FakeLauncher:
    return FakeLauncher()


@pytest.fixture
def device_state() -> MockDeviceState:
    return MockDeviceState()
