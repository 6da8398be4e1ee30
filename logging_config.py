#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Logging configuration for mediaquery.

Provides a structured logger that carries keyword context fields, a JSON
formatter that emits them, and the handler setup used by the server.
"""

import logging
import logging.handlers
import json
import sys
from typing import Dict, Any, Optional

LOG_FILE = "mediaquery.log"


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging.

    This formatter converts log records into JSON objects with standardized fields,
    making logs easier to parse and analyze with log management tools.
    Context fields never replace the standard ones.
    """

    def format(self, record):
        """Format the log record as a JSON object."""
        log_data = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "name": record.name,
            "file": record.filename,
            "line": record.lineno,
            "message": record.getMessage(),
        }

        if record.exc_info and record.exc_info[0] is not None:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": self.formatException(record.exc_info)
            }

        extra_data = getattr(record, "data", None)
        if isinstance(extra_data, dict):
            for key, value in extra_data.items():
                log_data.setdefault(key, value)

        return json.dumps(log_data, default=str)


class StructuredLogger:
    """Logger wrapper that attaches keyword arguments as structured context.

    Usage:
        logger = StructuredLogger(__name__)
        logger.info("Fetched page", playlist_id="PL123", page=2)
    """

    def __init__(self, name: str, extra: Optional[Dict[str, Any]] = None):
        self.logger = logging.getLogger(name)
        self.extra = extra or {}

    def _log(self, level: int, message: str, exc_info=None, **kwargs):
        extra_data = {**self.extra}
        if kwargs:
            extra_data.update(kwargs)
        self.logger.log(level, message, exc_info=exc_info, extra={"data": extra_data})

    def bind(self, **kwargs) -> "StructuredLogger":
        """Return a logger that adds the given fields to every record."""
        return StructuredLogger(self.logger.name, {**self.extra, **kwargs})

    def debug(self, message: str, **kwargs):
        self._log(logging.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs):
        self._log(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs):
        self._log(logging.WARNING, message, **kwargs)

    def error(self, message: str, exc_info=False, **kwargs):
        self._log(logging.ERROR, message, exc_info=exc_info, **kwargs)

    def critical(self, message: str, exc_info=False, **kwargs):
        self._log(logging.CRITICAL, message, exc_info=exc_info, **kwargs)


def setup_logging(log_level_console=logging.INFO, log_level_file=logging.DEBUG,
                  structured=True, log_file: Optional[str] = LOG_FILE):
    """Configure logging to the console and, if log_file is set, a rotating file."""
    root_logger = logging.getLogger()

    # Drop handlers from earlier calls (and from logging.basicConfig)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    formatter = JSONFormatter() if structured else logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s:%(lineno)d - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    if log_file:
        try:
            file_handler = logging.handlers.RotatingFileHandler(
                log_file, maxBytes=5 * 1024 * 1024, backupCount=3, encoding="utf-8"
            )
            file_handler.setFormatter(formatter)
            file_handler.setLevel(log_level_file)
            root_logger.addHandler(file_handler)
        except OSError as e:
            print(f"Warning: Could not create log file '{log_file}': {e}", file=sys.stderr)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(log_level_console)
    root_logger.addHandler(console_handler)

    root_logger.setLevel(min(log_level_console, log_level_file))

    logging.getLogger(__name__).info("Logging setup complete.")
