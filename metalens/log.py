"""Logging helpers shared by the analyzers and the HTTP surface."""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from logging import Logger
from typing import Optional

ROOT_LOGGER_NAME = "metalens"


class UtcFormatter(logging.Formatter):
    """Formatter that renders timestamps in UTC using ISO-8601."""

    converter = time.gmtime

    def formatTime(self, record: logging.LogRecord, datefmt: Optional[str] = None) -> str:
        dt = datetime.fromtimestamp(record.created, tz=timezone.utc)
        if datefmt:
            return dt.strftime(datefmt)
        return dt.isoformat(timespec="seconds")


def configure_logging(level: int = logging.INFO) -> Logger:
    """Attach a console handler to the package logger and return it."""
    formatter = UtcFormatter(
        fmt="%(asctime)sZ %(levelname)s %(name)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
    )

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    root_logger.debug("Logging configured at level %s", logging.getLevelName(level))
    return root_logger


def get_logger(name: Optional[str] = None) -> Logger:
    """Return a child logger under the package namespace."""
    base = logging.getLogger(ROOT_LOGGER_NAME)
    if name:
        return base.getChild(name)
    return base
