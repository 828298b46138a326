"""Logging configuration.

stdout carries the CLI's JSON results, so log records always go to stderr.
"""

import logging
import os
import sys
from typing import Optional, Union

LOGGER_NAME = "venvkit"
LOG_LEVEL_ENV = "VENVKIT_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def configure_logging(level: Optional[Union[str, int]] = None) -> logging.Logger:
    """Attach a stderr handler to the package logger.

    Args:
        level: Log level name or number. Defaults to $VENVKIT_LOG_LEVEL,
            then WARNING.

    Returns:
        The configured package logger.
    """
    if level is None:
        level = os.environ.get(LOG_LEVEL_ENV, "WARNING")
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.WARNING

    app_logger = logging.getLogger(LOGGER_NAME)

    if not app_logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        app_logger.addHandler(handler)
        app_logger.propagate = False

    app_logger.setLevel(level)
    return app_logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger below the package logger."""
    if name.startswith(LOGGER_NAME + ".") or name == LOGGER_NAME:
        return logging.getLogger(name)
    return logging.getLogger(f"{LOGGER_NAME}.{name}")
