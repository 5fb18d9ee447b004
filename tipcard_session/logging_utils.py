"""
Logging setup for the tipping session core.

Plain text logging is the default. Hosts that ship stdout to a log
pipeline can switch to one JSON object per line with ``log_format: json``.
Fields passed through ``extra`` (or a ContextLoggerAdapter) become
top-level JSON keys; credential-like fields are masked before output.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any

PACKAGE_LOGGER = "tipcard_session"

# LogRecord attributes that are not caller-supplied context
_RECORD_ATTRS = set(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {
    "message",
    "asctime",
    "taskName",
}

_MASKED_FIELDS = {
    "password",
    "confirmPassword",
    "id_token",
    "refresh_token",
    "secret_key",
    "client_secret",
}


def _masked(key: str, value: Any) -> Any:
    if key in _MASKED_FIELDS and value:
        return "***"
    return value


class StructuredJsonFormatter(logging.Formatter):
    """One JSON object per record.

    Keys: ``timestamp`` (UTC, ISO 8601), ``level``, ``logger``, ``message``,
    ``exception`` when present, plus any context fields.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key in _RECORD_ATTRS or key.startswith("_"):
                continue
            entry[key] = _masked(key, value)

        return json.dumps(entry, default=str)


def configure_logging(
    level: int = logging.INFO,
    log_format: str = "text",
    logger_name: str = PACKAGE_LOGGER,
) -> logging.Logger:
    """Set the package log level and, for JSON output, its handler.

    Text output is left to the host application's handlers. JSON output
    gets a dedicated stdout handler; calling again replaces it.

    Args:
        level: Logging level for the package logger
        log_format: ``text`` or ``json``
        logger_name: Logger to configure

    Returns:
        The configured logger
    """
    logger = logging.getLogger(logger_name)
    logger.setLevel(level)
    if log_format != "json":
        return logger

    logger.handlers.clear()
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(StructuredJsonFormatter())
    logger.addHandler(handler)
    # Records would otherwise print twice when the root logger has a handler
    logger.propagate = False
    return logger


class ContextLoggerAdapter(logging.LoggerAdapter):
    """Adds fixed context (record key, org id) to every record."""

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        kwargs["extra"] = {**self.extra, **kwargs.get("extra", {})}
        return msg, kwargs
