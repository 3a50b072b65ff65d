# karaoke/core/logging.py
"""Logging setup for the command-line entry point."""

from __future__ import annotations
import logging
from typing import Union

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: Union[int, str] = logging.INFO) -> logging.Logger:
    """Attach one stream handler to the package logger."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            raise ValueError(f"Unknown log level: {level}")

    logger = logging.getLogger("karaoke")
    logger.setLevel(level)
    if not any(getattr(h, "_karaoke", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._karaoke = True
        logger.addHandler(handler)
    return logger
