"""Logging configuration for the Sales Insights application."""

from __future__ import annotations

import logging
import sys
import time
from typing import Any, TextIO

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(funcName)s:%(lineno)d | %(message)s"


def setup_logging(level: int | str = logging.INFO, stream: TextIO | None = None) -> logging.Logger:
    """Configure and return the application logger.

    Args:
        level: Level name ("INFO") or number for the logger and its handler
        stream: Handler stream; stdout by default. The CLI passes stderr so
            command output stays machine-readable.
    """
    logger = logging.getLogger("sales_insights")

    if logger.handlers:
        return logger

    logger.setLevel(level)

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))

    logger.addHandler(handler)
    logger.propagate = False

    return logger


def get_logger(name: str = "sales_insights") -> logging.Logger:
    """Get a logger instance with the given name."""
    return logging.getLogger(name)


class LogContext:
    """Logs the start, completion (with duration) or failure of an operation.

    Keyword context is attached to every record via `extra`.
    """

    def __init__(self, logger: logging.Logger, operation: str, **context: Any) -> None:
        self.logger = logger
        self.operation = operation
        self.context = context
        self.started = 0.0

    def __enter__(self) -> "LogContext":
        self.started = time.perf_counter()
        self.logger.debug(f"Starting {self.operation}", extra=self.context)
        return self

    def __exit__(self, exc_type: type | None, exc_val: Exception | None, exc_tb: Any) -> bool:
        elapsed_ms = (time.perf_counter() - self.started) * 1000
        if exc_type is not None:
            self.logger.error(
                f"Failed {self.operation} after {elapsed_ms:.1f} ms: {exc_val}",
                extra=self.context,
            )
        else:
            self.logger.info(f"Completed {self.operation} in {elapsed_ms:.1f} ms", extra=self.context)
        return False
