from __future__ import annotations

import time
from typing import Protocol


class Clock(Protocol):
    def now(self) -> float: ...


class SystemClock:
    """Wall-clock seconds; scheduler clocks start at zero so the first check runs immediately."""

    def now(self) -> float:
        return time.time()
