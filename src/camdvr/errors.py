"""Error hierarchy for the DVR engine."""

from __future__ import annotations


class DvrError(Exception):
    """Base exception for DVR errors. Preserves stack traces via exception chaining."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.cause = cause
        self.__cause__ = cause


class ProcessLaunchError(DvrError):
    """External process could not be spawned."""

    def __init__(self, command_line: str, cause: Exception) -> None:
        super().__init__(f"Failed to launch: {command_line}", cause=cause)
        self.command_line = command_line
