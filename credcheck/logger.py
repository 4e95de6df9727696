#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2025-present John Mille <john@ews-network.net>

from __future__ import annotations

import json
import logging as logthings

from . import __version__
from .settings import LOG_LEVEL


class SimpleJsonFormatter(logthings.Formatter):
    """Simple JSON formatter that always includes essential fields."""

    def format(self, record: logthings.LogRecord) -> str:
        from credcheck.sanitizer import sanitize_string

        data = {
            "timestamp": record.created,
            "levelname": record.levelname,
            "message": sanitize_string(record.getMessage()),
            "name": record.name.split(".")[0],
        }

        if record.levelname == "INFO" and __version__:
            data["credcheck.version"] = __version__

        # AWS context set through the `extra` argument of LOG calls
        if hasattr(record, "profile") and record.profile:
            data["profile"] = record.profile
        if hasattr(record, "check") and record.check:
            data["check"] = record.check

        if record.exc_info:
            data["exception"] = sanitize_string(self.formatException(record.exc_info))
        elif record.exc_text:
            data["exception"] = sanitize_string(record.exc_text)

        return json.dumps(data, separators=(",", ":"), default=str)


def setup_logging():
    """Setup simple JSON logging on stderr."""
    formatter = SimpleJsonFormatter()

    handler = logthings.StreamHandler()
    handler.setFormatter(formatter)

    logger = logthings.getLogger("credcheck")
    logger.handlers = []
    logger.addHandler(handler)
    logger.setLevel(getattr(logthings, LOG_LEVEL.upper(), logthings.WARNING))
    logger.propagate = False

    return logger


def set_log_level(log_level: str) -> None:
    """Update the credcheck logger and its handlers to the given level name."""
    level = getattr(logthings, log_level.upper())
    LOG.setLevel(level)
    for handler in LOG.handlers:
        handler.setLevel(level)


# Create logger instance
LOG = setup_logging()
