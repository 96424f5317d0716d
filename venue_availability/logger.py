"""Logging setup shared by every module."""

from __future__ import annotations

import logging
import sys

from venue_availability.config import get_settings


_LOGGER_INITIALIZED = False


def configure_logging(level: str | None = None) -> None:
    """Configure process-wide logging once."""
    global _LOGGER_INITIALIZED
    if _LOGGER_INITIALIZED:
        return

    resolved_level = (level or get_settings().log_level).upper()
    logging.basicConfig(
        level=resolved_level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        stream=sys.stdout,
    )
    _LOGGER_INITIALIZED = True


def get_logger(name: str) -> logging.Logger:
    configure_logging()
    return logging.getLogger(name)
