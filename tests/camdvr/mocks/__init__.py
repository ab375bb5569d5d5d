"""Fakes for testing."""

from tests.camdvr.mocks.clock import FakeClock
from tests.camdvr.mocks.device_state import MockDeviceState
from tests.camdvr.mocks.launcher import FakeLauncher, FakeProcess

__all__ = [
    "FakeClock",
    "FakeLauncher",
    "FakeProcess",
    "MockDeviceState",
]
