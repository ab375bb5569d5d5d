"""Device-state providers: where the on/off signal comes from."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol

from camdvr.models.config import DeviceStateConfig
from camdvr.models.enums import DeviceState

logger = logging.getLogger(__name__)


class DeviceStateProvider(Protocol):
    def get_state(self, device_id: str) -> DeviceState | None:
        """Return the current state, or None when it is unknown."""
        ...

    async def notify(self, device_id: str, command: str) -> None:
        """Tell the state owner that the device's artifacts changed."""
        ...


class StaticDeviceState:
    """Reports one fixed state for every device."""

    def __init__(self, value: DeviceState = DeviceState.ON) -> None:
        self.value = value

    def get_state(self, device_id: str) -> DeviceState | None:
        _ = device_id
        return self.value

    async def notify(self, device_id: str, command: str) -> None:
        logger.debug("Device notification: device=%s command=%s", device_id, command)


class FileDeviceState:
    """Reads ``on``/``off`` from a text file on every lookup.

    A missing or unreadable file means the state is unknown, which leaves the
    recorder as it is.
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def get_state(self, device_id: str) -> DeviceState | None:
        try:
            raw = self.path.read_text()
        except FileNotFoundError:
            return None
        except OSError as exc:
            logger.warning("Failed to read device state for %s: %s", device_id, exc, exc_info=True)
            return None
        try:
            return DeviceState.from_string(raw)
        except ValueError as exc:
            logger.warning("Ignoring device state for %s: %s", device_id, exc)
            return None

    async def notify(self, device_id: str, command: str) -> None:
        logger.debug("Device notification: device=%s command=%s", device_id, command)


def create_device_state_provider(config: DeviceStateConfig) -> DeviceStateProvider:
    if config.source == "file":
        assert config.path is not None
        return FileDeviceState(Path(config.path))
    return StaticDeviceState(config.value)
