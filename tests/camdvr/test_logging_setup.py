"""Tests for logging setup module."""

from __future__ import annotations

import logging

import pytest

from camdvr.logging_setup import (
    _DeviceTitleFilter,
    _JsonExtraFormatter,
    configure_logging,
    set_device_title,
)


@pytest.fixture(autouse=True)
def reset_logging_root() -> None:
    """Restore root logger handlers/levels after each test."""
    import camdvr.logging_setup as module

    root = logging.getLogger()
    original_handlers = list(root.handlers)
    original_level = root.level
    original_title = module._CURRENT_DEVICE_TITLE

    yield

    for handler in list(root.handlers):
        root.removeHandler(handler)
    for handler in original_handlers:
        root.addHandler(handler)
    root.setLevel(original_level)
    logging.captureWarnings(False)
    module._CURRENT_DEVICE_TITLE = original_title


def _record(**extra: object) -> logging.LogRecord:
    record = logging.LogRecord("camdvr.test", logging.INFO, __file__, 1, "DVR started", None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_device_title_injected() -> None:
    """Records without a title get the configured one."""
    set_device_title("Front Door")
    record = _record()

    _DeviceTitleFilter().filter(record)

    assert record.device_title == "Front Door"


def test_explicit_device_title_preserved() -> None:
    set_device_title("Front Door")
    record = _record(device_title="Garage")

    _DeviceTitleFilter().filter(record)

    assert record.device_title == "Garage"


def test_extras_rendered_as_json() -> None:
    formatter = _JsonExtraFormatter("%(message)s")
    record = _record(pid=42, device_title="x")

    assert formatter.format(record) == 'DVR started {"pid": 42}'


def test_configure_logging_installs_filter(capsys: pytest.CaptureFixture[str]) -> None:
    configure_logging(log_level="INFO", title="Porch")

    logging.getLogger("camdvr.test").info("hello")

    assert "[Porch]" in capsys.readouterr().out
