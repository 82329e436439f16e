"""
Logging configuration for the ``arraybag`` command line.

Library modules only do ``logger = logging.getLogger(__name__)`` and
never configure anything.  The CLI calls ``setup_logging`` once, which
attaches handlers to the ``arraybag`` package logger and leaves the root
logger (and any host application's handlers) alone.

Level precedence: CLI flag > ARRAYBAG_LOG_LEVEL > WARNING.
"""

from __future__ import annotations

import logging
import sys

PACKAGE_LOGGER = "arraybag"

_FMT = "%(message)s"
_FMT_DETAILED = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s"


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
) -> logging.Logger:
    """Route ``arraybag`` log records to stderr and, optionally, a file.

    Calling it again replaces the handlers from the previous call.

    Args:
        level: Console level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Optional path to a log file, always in detailed format.
        log_file_level: Level for the log file (default: ``level``).

    Returns:
        The configured package logger.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_level = parse_level(level)
    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    # Debug output needs to say where it came from
    console.setFormatter(logging.Formatter(
        _FMT_DETAILED if console_level <= logging.DEBUG else _FMT
    ))
    logger.addHandler(console)

    effective = console_level
    if log_file:
        file_level = parse_level(log_file_level) if log_file_level else console_level
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(file_level)
        fh.setFormatter(logging.Formatter(_FMT_DETAILED))
        logger.addHandler(fh)
        effective = min(effective, file_level)

    logger.setLevel(effective)
    logger.propagate = False
    return logger


def parse_level(level: str | None) -> int:
    """Convert a level name to its numeric constant (WARNING if unknown)."""
    numeric = getattr(logging, (level or "").upper(), None)
    return numeric if isinstance(numeric, int) else logging.WARNING
