from __future__ import annotations

import json
import logging
import logging.config
import os

_CURRENT_DEVICE_TITLE = "-"
_STANDARD_LOGRECORD_ATTRS = {
    "name",
    "msg",
    "message",
    "asctime",
    "args",
    "levelname",
    "levelno",
    "pathname",
    "filename",
    "module",
    "exc_info",
    "exc_text",
    "stack_info",
    "lineno",
    "funcName",
    "created",
    "msecs",
    "relativeCreated",
    "thread",
    "threadName",
    "processName",
    "process",
    "taskName",
}


class _DeviceTitleFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "device_title") or getattr(record, "device_title") in (None, ""):
            record.device_title = _CURRENT_DEVICE_TITLE
        return True


class _JsonExtraFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)
        extras = _extract_extras(record)
        if not extras:
            return base
        extras_json = json.dumps(extras, default=str, sort_keys=True)
        return f"{base} {extras_json}"


def _extract_extras(record: logging.LogRecord) -> dict[str, object]:
    extras: dict[str, object] = {}
    for key, value in record.__dict__.items():
        if key in _STANDARD_LOGRECORD_ATTRS:
            continue
        if key == "device_title":
            continue
        extras[key] = value
    return extras


def set_device_title(title: str | None) -> None:
    """Set the `device_title` value injected into log records."""
    global _CURRENT_DEVICE_TITLE
    _CURRENT_DEVICE_TITLE = title or "-"


def _install_device_filter() -> None:
    root = logging.getLogger()
    for handler in root.handlers:
        if any(isinstance(f, _DeviceTitleFilter) for f in handler.filters):
            continue
        handler.addFilter(_DeviceTitleFilter())


def configure_logging(*, log_level: str = "INFO", title: str | None = None) -> None:
    """Configure root logging with a consistent format.

    Every line carries the device title, standing in for the colored title
    prefix of console-only DVR output.
    """
    console_level_name = str(log_level).upper()
    default_console_fmt = "%(asctime)s %(levelname)s [%(device_title)s] %(name)s: %(message)s"
    console_fmt = os.getenv("CONSOLE_LOG_FORMAT", default_console_fmt)

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "()": "camdvr.logging_setup._JsonExtraFormatter",
                    "format": console_fmt,
                }
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "level": console_level_name,
                    "formatter": "default",
                    "stream": "ext://sys.stdout",
                }
            },
            "root": {"level": "DEBUG", "handlers": ["console"]},
        }
    )

    _install_device_filter()
    set_device_title(title)
    logging.captureWarnings(True)

    # asyncio logs slow callbacks at DEBUG when debug mode is on.
    logging.getLogger("asyncio").setLevel(logging.WARNING)
