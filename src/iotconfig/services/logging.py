"""Logging setup for the CLI and library callers."""

from __future__ import annotations

import json
import logging
import sys
from typing import Optional, TextIO

__all__ = ["setup_logging", "JsonFormatter", "ROOT_LOGGER"]

ROOT_LOGGER = "iotconfig"
_PLAIN_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _json_payload(record: logging.LogRecord, formatter: logging.Formatter) -> str:
    base = {
        "time": formatter.formatTime(record),
        "level": record.levelname,
        "logger": record.name,
        "msg": record.getMessage(),
    }
    if record.exc_info:
        base["exc"] = formatter.formatException(record.exc_info)
    return json.dumps(base, ensure_ascii=False)


class JsonFormatter(logging.Formatter):
    """One JSON object per log line."""

    def format(self, record: logging.LogRecord) -> str:
        return _json_payload(record, self)


def setup_logging(level: Optional[str] = None, *, json_output: bool = False, stream: TextIO | None = None) -> logging.Logger:
    """Attach a single stderr handler to the ``iotconfig`` logger."""

    logger = logging.getLogger(ROOT_LOGGER)
    numeric_level = getattr(logging, (level or "INFO").upper(), logging.INFO)
    logger.setLevel(numeric_level)
    logger.handlers.clear()
    logger.propagate = False

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(JsonFormatter() if json_output else logging.Formatter(_PLAIN_FORMAT))
    logger.addHandler(handler)
    return logger
