"""
Centralized logging configuration for the ladder package.

Every module logs through ``logging.getLogger(__name__)``; this module wires
the ``ladder`` parent logger to its handlers and provides small helpers for
timing sync cycles.
"""

from __future__ import annotations

import logging
import sys
import time
from contextlib import contextmanager
from pathlib import Path
from typing import TextIO

ROOT_LOGGER_NAME = "ladder"


def setup_logging(
    level: str | int = logging.INFO,
    log_file: str | Path | None = None,
    format_style: str = "detailed",
    include_timestamp: bool = True,
    stream: TextIO | None = None,
) -> logging.Logger:
    """Set up logging for the ladder package.

    Args:
        level: Logging level name or number. Defaults to logging.INFO.
        log_file: Optional file to also write logs to. Defaults to None.
        format_style: "simple", "detailed" or "json". Defaults to "detailed".
        include_timestamp: Whether detailed records carry a timestamp.
        stream: Console stream. Defaults to stdout.

    Returns:
        The configured ``ladder`` logger.
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper())

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(level)
    logger.handlers.clear()

    if format_style == "simple":
        format_string = "%(levelname)s: %(message)s"
    elif format_style == "json":
        format_string = (
            '{"timestamp": "%(asctime)s", "level": "%(levelname)s", '
            '"module": "%(name)s", "message": "%(message)s"}'
        )
    elif include_timestamp:
        format_string = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    else:
        format_string = "%(name)s - %(levelname)s - %(message)s"

    formatter = logging.Formatter(format_string)

    console_handler = logging.StreamHandler(stream or sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger


def get_logger(name: str) -> logging.Logger:
    """Return a child of the ``ladder`` logger."""
    if name == ROOT_LOGGER_NAME or name.startswith(f"{ROOT_LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


@contextmanager
def log_timing(
    logger: logging.Logger, operation: str, level: int = logging.INFO
):
    """Log start, completion and failure of an operation with elapsed time.

    Examples:
        >>> logger = get_logger(__name__)
        >>> with log_timing(logger, "sync cycle"):
        ...     engine.run_cycle()
    """
    start_time = time.time()
    logger.log(level, f"Starting {operation}")
    try:
        yield
    except Exception as exception:
        elapsed_time = time.time() - start_time
        logger.error(f"Failed {operation} after {elapsed_time:.2f}s: {exception}")
        raise
    elapsed_time = time.time() - start_time
    logger.log(level, f"Completed {operation} in {elapsed_time:.2f}s")
