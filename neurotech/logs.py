"""Logging setup for the ``neurotech`` logger hierarchy."""

from __future__ import annotations

import logging
from typing import Union

LOGGER_NAME = "neurotech"

DETAILED_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(module)s:%(funcName)s:%(lineno)d - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: Union[str, int] = logging.INFO) -> logging.Logger:
    """Install a single console handler on the ``neurotech`` logger.

    Safe to call repeatedly; previous handlers are replaced.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.handlers.clear()

    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt=DETAILED_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False

    logger.debug("neurotech logging initialized at %s", logging.getLevelName(level))
    return logger
