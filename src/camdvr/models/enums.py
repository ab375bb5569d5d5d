"""Centralized enums for device and recorder state."""

from enum import StrEnum


class DeviceState(StrEnum):
    """External on/off signal for a camera."""

    ON = "on"
    OFF = "off"

    @classmethod
    def from_string(cls, value: str) -> "DeviceState":
        normalized = value.strip().lower()
        try:
            return cls(normalized)
        except ValueError:
            raise ValueError(f"Invalid device state: {value!r} (expected 'on' or 'off')") from None


class RecorderState(StrEnum):
    """Recording controller state."""

    IDLE = "idle"
    RECORDING = "recording"
