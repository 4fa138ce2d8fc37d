"""
Console logging setup for the `pageturner` logger hierarchy.
"""

from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%H:%M:%S"

_HANDLER_NAME = "pageturner-console"


def configure_logging(level: str | int = "INFO") -> logging.Logger:
    """
    Attach a single stdout handler to the package logger.

    Safe to call repeatedly; the handler is installed once and only the level changes.
    """
    logger = logging.getLogger("pageturner")
    logger.setLevel(level if isinstance(level, int) else level.upper())

    if not any(handler.get_name() == _HANDLER_NAME for handler in logger.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.set_name(_HANDLER_NAME)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(handler)

    return logger
