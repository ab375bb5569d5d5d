"""camdvr data models."""

from camdvr.models.config import (
    BYTES_PER_MB,
    ROUGH_MB_PER_MINUTE,
    Config,
    DeviceStateConfig,
    DvrConfig,
    HostConfig,
)
from camdvr.models.enums import DeviceState, RecorderState
from camdvr.models.segment import RecordingScan, ThumbnailSet, VideoSegment

__all__ = [
    "BYTES_PER_MB",
    "Config",
    "DeviceState",
    "DeviceStateConfig",
    "DvrConfig",
    "HostConfig",
    "ROUGH_MB_PER_MINUTE",
    "RecorderState",
    "RecordingScan",
    "ThumbnailSet",
    "VideoSegment",
]
