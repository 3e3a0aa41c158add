"""Logging setup for command-line execution."""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from typing import Any

from .redaction import sanitize_text


class JsonConsoleFormatter(logging.Formatter):
    """One JSON object per record on stderr.

    Provider clients attach `provider` via `extra`; it is emitted as its own
    field so lines can be filtered by weather source. Messages and tracebacks
    pass through `sanitize_text` so request URLs never leak API keys.
    """

    extra_fields = ("provider",)

    def format(self, record: logging.LogRecord) -> str:
        event: dict[str, Any] = {
            "ts": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": sanitize_text(record.getMessage()),
        }
        for field in self.extra_fields:
            value = getattr(record, field, None)
            if value is not None:
                event[field] = str(value)
        if record.exc_info:
            event["exception"] = sanitize_text(self.formatException(record.exc_info))
        return json.dumps(event, default=str)


def setup_logger(name: str = "weather_fetch", level: int | str = logging.WARNING) -> logging.Logger:
    """Create and configure a process-wide logger writing JSON lines to stderr."""
    logger = logging.getLogger(name)
    logger.setLevel(level.upper() if isinstance(level, str) else level)
    logger.propagate = False
    if logger.handlers:
        return logger

    handler = logging.StreamHandler()
    handler.setFormatter(JsonConsoleFormatter())
    logger.addHandler(handler)
    return logger
