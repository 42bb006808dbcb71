"""Logging setup for the ``atelier`` logger tree."""
from __future__ import annotations
import logging
from typing import Optional, Union

LOGGER_NAME = 'atelier'
LOG_FORMAT = '%(asctime)s %(levelname)s %(name)s: %(message)s'


def configure_logging(level: Optional[Union[str, int]] = None) -> logging.Logger:
    """Attach a single stream handler to the package logger. Safe to call twice."""
    logger = logging.getLogger(LOGGER_NAME)
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logger.setLevel(level or logging.INFO)
    if not any(getattr(h, '_atelier', False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._atelier = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
    return logger

__all__ = ['configure_logging', 'LOGGER_NAME']
