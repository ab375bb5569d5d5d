"""Tests for the asyncio process launcher against real child processes."""

from __future__ import annotations

import asyncio
import sys

import pytest

from camdvr.commands import Invocation
from camdvr.errors import ProcessLaunchError
from camdvr.launcher import AsyncioProcessLauncher, ProcessHandle


def _python(code: str) -> Invocation:
    return Invocation(sys.executable, ("-c", code))


@pytest.mark.asyncio
async def test_exit_callback_receives_return_code() -> None:
    """The exit observer fires when the process ends on its own."""
    # Given a process that exits with code 3
    exited: asyncio.Future[int] = asyncio.get_running_loop().create_future()

    def _on_exit(handle: ProcessHandle, return_code: int) -> None:
        exited.set_result(return_code)

    # When it is launched
    handle = await AsyncioProcessLauncher().launch(_python("raise SystemExit(3)"), on_exit=_on_exit)

    # Then the callback sees the exit code
    assert await asyncio.wait_for(exited, timeout=10) == 3
    assert not handle.is_running()


@pytest.mark.asyncio
async def test_stop_terminates_running_process() -> None:
    handle = await AsyncioProcessLauncher().launch(_python("import time; time.sleep(60)"))
    assert handle.is_running()

    await handle.stop(timeout_s=5)

    assert not handle.is_running()
    assert handle.returncode is not None


@pytest.mark.asyncio
async def test_stderr_is_drained(caplog: pytest.LogCaptureFixture) -> None:
    """Captured stderr lines are logged at DEBUG."""
    caplog.set_level("DEBUG", logger="camdvr.launcher")
    exited: asyncio.Future[int] = asyncio.get_running_loop().create_future()

    await AsyncioProcessLauncher().launch(
        _python("import sys; sys.stderr.write('frame=1\\n')"),
        on_exit=lambda _handle, rc: exited.set_result(rc),
        capture_stderr=True,
    )
    await asyncio.wait_for(exited, timeout=10)

    assert "frame=1" in caplog.text


@pytest.mark.asyncio
async def test_missing_executable_raises_launch_error() -> None:
    invocation = Invocation("camdvr-no-such-binary", ("-x",))

    with pytest.raises(ProcessLaunchError) as exc_info:
        await AsyncioProcessLauncher().launch(invocation)

    assert "camdvr-no-such-binary" in exc_info.value.command_line
    assert isinstance(exc_info.value.__cause__, OSError)
    assert exc_info.value.cause is exc_info.value.__cause__
