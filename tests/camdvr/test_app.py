"""Tests for the host loop and one-shot commands."""

from __future__ import annotations

import asyncio
import os
from pathlib import Path

import pytest
import yaml

from camdvr.app import Application, run_prune
from camdvr.cli import CamDvr
from camdvr.config import load_config_from_dict
from camdvr.filenames import DvrPaths
from camdvr.models.enums import DeviceState, RecorderState
from tests.camdvr.mocks import FakeLauncher, MockDeviceState


def _write_config(path: Path, root: Path, **dvr: object) -> None:
    data = {
        "version": 1,
        "dvr": {"device_id": "foscam", "device_ip": "10.0.0.5", "password": "p", **dvr},
        "host": {"tick_interval_s": 0.01, "root_dir": str(root)},
    }
    path.write_text(yaml.safe_dump(data))
    os.chmod(path, 0o600)


@pytest.mark.asyncio
async def test_application_ticks_until_shutdown(tmp_path: Path) -> None:
    """The host loop starts the recorder and stops it on shutdown."""
    # Given a config and fake collaborators
    config_path = tmp_path / "camdvr.yaml"
    _write_config(config_path, tmp_path / "root")
    launcher = FakeLauncher()
    app = Application(
        config_path, launcher=launcher, state_provider=MockDeviceState(DeviceState.ON)
    )

    # When the loop runs for a few ticks
    task = asyncio.create_task(app.run())
    for _ in range(200):
        await asyncio.sleep(0.01)
        if launcher.captures():
            break
    assert app.registry["foscam"].state is RecorderState.RECORDING
    app.request_shutdown()
    await asyncio.wait_for(task, timeout=5)

    # Then exactly one recorder was started and then stopped
    assert len(launcher.captures()) == 1
    assert launcher.captures()[0].stop_calls == 1
    assert app.registry["foscam"].state is RecorderState.IDLE


@pytest.mark.asyncio
async def test_run_prune_evicts_oldest(tmp_path: Path) -> None:
    paths = DvrPaths(tmp_path / "root")
    paths.ensure()
    paths.container_path("2024-01-01-00-00-000").write_bytes(b"x" * 100)
    paths.container_path("2024-01-01-00-10-000").write_bytes(b"x" * 100)
    config = load_config_from_dict(
        {"dvr": {"capacity_mb": 0.0001}, "host": {"root_dir": str(paths.root)}}
    )

    evicted = await run_prune(config)

    assert str(evicted) == "2024-01-01-00-00-000"


def test_cli_validate_prints_summary(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    config_path = tmp_path / "camdvr.yaml"
    _write_config(config_path, tmp_path / "root", title="Porch")

    CamDvr().validate(str(config_path))

    out = capsys.readouterr().out
    assert "Config valid" in out
    assert "foscam (Porch) at 10.0.0.5" in out
    assert "Thumbnail threshold: 150.0 MB" in out


def test_cli_validate_invalid_exits(tmp_path: Path) -> None:
    config_path = tmp_path / "bad.yaml"
    config_path.write_text("dvr: [1, 2]\n")

    with pytest.raises(SystemExit) as exc_info:
        CamDvr().validate(str(config_path))

    assert exc_info.value.code == 1
