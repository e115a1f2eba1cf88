"""
Logging setup for the Matchday entry points.

Library modules only ever call ``logging.getLogger(__name__)``; the
process entry point (``run_web.py``) calls :func:`configure_logging` once.
"""
import logging
import os
from typing import Optional

LOG_LEVEL_ENV = "MATCHDAY_LOG_LEVEL"
LOG_FILE_ENV = "MATCHDAY_LOG_FILE"
DEFAULT_LOGGER_NAME = "matchday"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _parse_level(value: Optional[str]) -> Optional[int]:
    """Map 'DEBUG'/'info' style names to a logging constant, None if unknown."""
    if not value:
        return None
    level = getattr(logging, value.strip().upper(), None)
    return level if isinstance(level, int) else None


def configure_logging(level: Optional[int] = None, *, force: bool = False) -> logging.Logger:
    """
    Initialize root logging and return the package logger.

    Args:
        level: Explicit level; falls back to ``MATCHDAY_LOG_LEVEL``, then INFO
        force: Replace handlers installed by an earlier call

    Returns:
        The ``matchday`` logger
    """
    if level is None:
        level = _parse_level(os.getenv(LOG_LEVEL_ENV)) or logging.INFO

    handlers = [logging.StreamHandler()]
    log_file = os.getenv(LOG_FILE_ENV)
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers, force=force)
    return logging.getLogger(DEFAULT_LOGGER_NAME)
