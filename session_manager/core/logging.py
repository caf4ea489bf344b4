# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Structured logging: one JSON object per line on stdout.

Context travels through ``extra=``; only the keys in CONTEXT_FIELDS are
copied into the record, everything else stays in the message.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from session_manager.core.config import settings

CONTEXT_FIELDS: tuple[str, ...] = ("request_id", "backend", "trigger", "member_id")


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "service": settings.SERVICE_NAME,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in CONTEXT_FIELDS:
            value = getattr(record, key, None)
            if value is not None:
                entry[key] = value
        if record.exc_info and record.exc_info[1]:
            exc = record.exc_info[1]
            entry["error"] = str(exc)
            entry["error_type"] = type(exc).__name__
        return json.dumps(entry, default=str)


def get_logger(name: str | None = None) -> logging.Logger:
    """Logger with the JSON handler attached once; does not bubble to root."""
    logger = logging.getLogger(name or settings.SERVICE_NAME)
    if logger.handlers:
        return logger
    logger.setLevel(getattr(logging, settings.LOG_LEVEL, logging.INFO))
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())
    logger.addHandler(handler)
    logger.propagate = False
    return logger
