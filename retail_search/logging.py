"""Logging setup for the retail-search CLI.

Request and response diagnostics are ordinary INFO records whose message
carries the rendered JSON; identifying fields (placement, query, total size)
travel as ``extra=`` attributes so both output formats can show them.
"""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from typing import Any, Literal, TextIO

LogFormat = Literal["text", "json"]
LogDestination = Literal["auto", "stdout", "stderr"]

# Attributes every LogRecord carries; anything else arrived through `extra=`.
_STANDARD_ATTRIBUTES = frozenset(logging.makeLogRecord({}).__dict__) | {"message", "asctime"}

_TRANSPORT_LOGGERS = ("google.auth", "google.api_core", "grpc", "urllib3")

_TEXT_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

_LevelCheck = Callable[[int], bool]
_Route = tuple[Callable[[], TextIO], _LevelCheck]

_ROUTES: Mapping[str, tuple[_Route, ...]] = {
    "stdout": ((lambda: sys.stdout, lambda levelno: True),),
    "stderr": ((lambda: sys.stderr, lambda levelno: True),),
    "auto": (
        (lambda: sys.stdout, lambda levelno: levelno <= logging.INFO),
        (lambda: sys.stderr, lambda levelno: levelno >= logging.WARNING),
    ),
}


def extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    """Return the attributes attached to ``record`` through ``extra=``."""

    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _STANDARD_ATTRIBUTES and not key.startswith("_")
    }


class JsonFormatter(logging.Formatter):
    """One JSON object per record, with ``extra=`` fields at the top level."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **extra_fields(record),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        if record.stack_info:
            payload["stack"] = self.formatStack(record.stack_info)
        return json.dumps(payload, default=str, ensure_ascii=False)


class TextFormatter(logging.Formatter):
    """Pipe-separated lines; ``extra=`` fields follow the message as ``key=value``."""

    def __init__(self) -> None:
        super().__init__(_TEXT_FORMAT)

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        line = super().format(record)
        extras = extra_fields(record)
        if not extras:
            return line
        head, sep, tail = line.partition("\n")
        rendered = " ".join(f"{key}={value}" for key, value in extras.items())
        return f"{head} [{rendered}]{sep}{tail}"


def configure_logging(
    *,
    level: str | int = "INFO",
    fmt: LogFormat = "text",
    destination: LogDestination = "auto",
) -> logging.Logger:
    """Install handlers on the root logger and quiet the Google transport loggers.

    The transport loggers stay at WARNING unless DEBUG output was requested,
    so request/response diagnostics are not buried under auth refresh noise.
    """

    resolved_level = _resolve_level(level)
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(resolved_level)

    formatter: logging.Formatter = JsonFormatter() if fmt == "json" else TextFormatter()
    for stream, accepts in _ROUTES[destination]:
        handler = logging.StreamHandler(stream())
        handler.addFilter(lambda record, accepts=accepts: accepts(record.levelno))
        handler.setFormatter(formatter)
        root.addHandler(handler)

    transport_level = logging.NOTSET if resolved_level <= logging.DEBUG else logging.WARNING
    for name in _TRANSPORT_LOGGERS:
        logging.getLogger(name).setLevel(transport_level)

    logging.captureWarnings(True)
    return root


def _resolve_level(value: str | int) -> int:
    if isinstance(value, int):
        return value
    resolved = logging.getLevelName(value.upper())
    if not isinstance(resolved, int):  # getLevelName echoes unknown names back
        raise ValueError(f"Unknown log level: {value}")
    return resolved


__all__ = [
    "JsonFormatter",
    "LogDestination",
    "LogFormat",
    "TextFormatter",
    "configure_logging",
    "extra_fields",
]
