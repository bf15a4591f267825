"""Logging for the ``ouilookup`` namespace.

Library modules only call :func:`get_logger`; the CLI decides where
records go and how chatty they are.
"""
from __future__ import annotations

import logging
import sys
from typing import Optional, TextIO

ROOT_LOGGER = "ouilookup"
LOG_FORMAT = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# -v count -> level
VERBOSITY_LEVELS = (logging.WARNING, logging.INFO, logging.DEBUG)


def level_for(verbosity: int) -> int:
    verbosity = max(0, min(verbosity, len(VERBOSITY_LEVELS) - 1))
    return VERBOSITY_LEVELS[verbosity]


def setup_logging(verbosity: int = 0, stream: Optional[TextIO] = None) -> logging.Logger:
    """Send ``ouilookup`` records to ``stream`` (stderr by default).

    Repeated calls change the level but keep a single handler.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level_for(verbosity))
    if any(handler.get_name() == ROOT_LOGGER for handler in logger.handlers):
        return logger
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.set_name(ROOT_LOGGER)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False
    return logger


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(ROOT_LOGGER).getChild(name)
