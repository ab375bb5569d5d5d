"""Continuous camera DVR with bounded storage and lazy thumbnails."""

__version__ = "0.1.0"

from camdvr.controller import ControllerRegistry, RecordingController, tick
from camdvr.errors import DvrError, ProcessLaunchError
from camdvr.models.config import DvrConfig

__all__ = [
    "ControllerRegistry",
    "DvrConfig",
    "DvrError",
    "ProcessLaunchError",
    "RecordingController",
    "__version__",
    "tick",
]
