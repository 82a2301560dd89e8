"""Verbose logging configuration and debug output helpers."""

from __future__ import annotations

import inspect
import logging
import sys
from pathlib import Path
from typing import TextIO


def setup_logger(
    debug_file: Path, verbose: bool = False, logger_name: str = "shouldkit"
) -> logging.Logger:
    """
    Configure and return a logger for debug output.

    Always writes to debug_file. Optionally also writes to stderr if verbose=True.

    Args:
        debug_file: Path to debug log file (always created)
        verbose: If True, also log to stderr. If False, only log to file.
        logger_name: Name of the logger instance. Must be unique per run so
            suites never write into each other's debug.log.

    Returns:
        Configured logger instance.

    Raises:
        RuntimeError: If a logger with this name is already configured.
    """
    existing = logging.Logger.manager.loggerDict.get(logger_name)
    if isinstance(existing, logging.Logger) and existing.handlers:
        raise RuntimeError(
            f"Logger '{logger_name}' already exists with handlers attached; "
            "use a unique logger name per suite"
        )

    logger = logging.getLogger(logger_name)
    logger.handlers.clear()
    logger.disabled = False
    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    formatter = logging.Formatter(
        fmt="[%(asctime)s] %(message)s", datefmt="%Y-%m-%dT%H:%M:%S"
    )

    debug_file.parent.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(debug_file, mode="a")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    if verbose:
        stderr_handler = logging.StreamHandler(sys.stderr)
        stderr_handler.setLevel(logging.DEBUG)
        stderr_handler.setFormatter(formatter)
        logger.addHandler(stderr_handler)

    return logger


def report(msg: str = "", *, stream: TextIO | None = None, _depth: int = 1) -> str:
    """Print msg tagged with the caller's location and return the line.

    >>> report("got here")   # prints "tests/test_posts.py:12:in `test_x': got here"
    """
    frame = inspect.stack()[_depth]
    line = f"{frame.filename}:{frame.lineno}:in `{frame.function}': {msg}"
    print(line, file=stream or sys.stdout)
    return line


def close_logger(logger: logging.Logger) -> None:
    """Flush and detach every handler so the name can be configured again."""
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
