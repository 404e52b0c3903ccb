"""Logging setup for command-line execution."""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any

from .redaction import sanitize_for_logging, sanitize_text

CONSOLE_HANDLER_NAME = "wapp-console"

# Attributes callers may attach with `extra=` that are copied into the JSON event.
_CONTEXT_FIELDS = ("provider", "city", "data_kind", "status_code", "path", "params")


class JsonConsoleFormatter(logging.Formatter):
    """JSON-lines formatter; secrets are redacted from messages and context fields."""

    def format(self, record: logging.LogRecord) -> str:
        event: dict[str, Any] = {
            "ts": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": sanitize_text(record.getMessage()),
        }
        for field in _CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                event[field] = sanitize_for_logging(value)
        if record.exc_info:
            event["exception"] = sanitize_text(self.formatException(record.exc_info))
        return json.dumps(event, default=str)


def _console_handler(logger: logging.Logger) -> logging.StreamHandler | None:
    for handler in logger.handlers:
        if handler.get_name() == CONSOLE_HANDLER_NAME and isinstance(
            handler, logging.StreamHandler
        ):
            return handler
    return None


def setup_logger(name: str = "wapp", level: int | str = logging.WARNING) -> logging.Logger:
    """Configure the process-wide logger writing JSON lines to stderr.

    Only the console handler installed here is touched on repeated calls; it is
    pointed at the current `sys.stderr`, which may have been swapped since the
    first call. Other handlers on the logger are left alone.
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = False

    handler = _console_handler(logger)
    if handler is not None:
        # The previous stream may be closed; setStream() would flush it.
        handler.stream = sys.stderr
        return logger

    handler = logging.StreamHandler(sys.stderr)
    handler.set_name(CONSOLE_HANDLER_NAME)
    handler.setFormatter(JsonConsoleFormatter())
    logger.addHandler(handler)
    return logger
