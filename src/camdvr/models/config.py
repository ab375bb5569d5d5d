"""Configuration models for the DVR and its host loop."""

from __future__ import annotations

import os
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from camdvr.models.enums import DeviceState

BYTES_PER_MB = 1048576

# Measured capture rate for an MJPEG camera stream with audio.
ROUGH_MB_PER_MINUTE = 15


class DvrConfig(BaseModel):
    """Per-device recording configuration.

    Immutable for the life of a controller. Derived values (byte limits and the
    default thumbnail threshold) are exposed as properties so every consumer
    applies the same rule.
    """

    model_config = {"extra": "forbid", "frozen": True}

    device_id: str = Field(
        default="foscam",
        min_length=1,
        description="Identifier used to look up device state and send notifications.",
    )
    title: str | None = Field(
        default=None,
        description="Human-friendly name used in log lines (defaults to device_id).",
    )
    device_ip: str = Field(
        default="127.0.0.1",
        min_length=1,
        description="Camera network address (host or host:port).",
    )
    username: str = Field(default="", description="Camera username.")
    password: str | None = Field(default=None, description="Camera password.")
    password_env: str | None = Field(
        default=None,
        description="Environment variable containing the camera password.",
    )
    delay_s: float = Field(
        default=300.0,
        ge=0.0,
        description="Seconds between disk-capacity checks and between thumbnail checks.",
    )
    segment_length_s: int = Field(
        default=600,
        gt=0,
        description="Length of each recorded segment in seconds.",
    )
    capacity_mb: float = Field(
        default=5120.0,
        gt=0.0,
        description="Total recordings size (MB) before the oldest segment is evicted.",
    )
    thumbnail_threshold_mb: float | None = Field(
        default=None,
        ge=0.0,
        description=(
            "Minimum segment size (MB) before thumbnails are built while recording. "
            "Defaults to ROUGH_MB_PER_MINUTE times the segment length in minutes."
        ),
    )

    @property
    def display_title(self) -> str:
        return self.title or self.device_id

    @property
    def byte_limit(self) -> int:
        return int(self.capacity_mb * BYTES_PER_MB)

    @property
    def effective_thumbnail_threshold_mb(self) -> float:
        if self.thumbnail_threshold_mb is not None:
            return self.thumbnail_threshold_mb
        return ROUGH_MB_PER_MINUTE * (self.segment_length_s / 60)

    @property
    def thumbnail_threshold_bytes(self) -> int:
        return int(self.effective_thumbnail_threshold_mb * BYTES_PER_MB)

    def resolved_password(self) -> str:
        """Return the password, preferring the env var when it is set."""
        if self.password_env:
            env_value = os.getenv(self.password_env)
            if env_value:
                return env_value
        return self.password or ""


class DeviceStateConfig(BaseModel):
    """Where the host reads the on/off signal from."""

    model_config = {"extra": "forbid"}

    source: Literal["static", "file"] = "static"
    value: DeviceState = DeviceState.ON
    path: str | None = Field(
        default=None,
        description="Text file containing 'on' or 'off' (file source only).",
    )

    @field_validator("value", mode="before")
    @classmethod
    def _normalize_value(cls, value: Any) -> Any:
        # YAML 1.1 turns bare on/off into booleans.
        if isinstance(value, bool):
            return DeviceState.ON if value else DeviceState.OFF
        if isinstance(value, str):
            return DeviceState.from_string(value)
        return value

    @model_validator(mode="after")
    def _require_path_for_file(self) -> DeviceStateConfig:
        if self.source == "file" and not self.path:
            raise ValueError("state.path is required when state.source is 'file'")
        return self


class HostConfig(BaseModel):
    """Host scheduler settings."""

    model_config = {"extra": "forbid"}

    tick_interval_s: float = Field(
        default=5.0,
        gt=0.0,
        description="Seconds between controller ticks.",
    )
    root_dir: str = Field(
        default="images/foscam",
        description="Root holding the dvr/ and thumb/ directories.",
    )


class Config(BaseModel):
    """Root configuration file."""

    model_config = {"extra": "forbid"}

    version: int = 1
    dvr: DvrConfig = Field(default_factory=DvrConfig)
    state: DeviceStateConfig = Field(default_factory=DeviceStateConfig)
    host: HostConfig = Field(default_factory=HostConfig)

    @field_validator("version")
    @classmethod
    def _check_version(cls, value: int) -> int:
        if value != 1:
            raise ValueError(f"Unsupported config version: {value}")
        return value
