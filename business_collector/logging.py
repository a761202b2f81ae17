"""Logging configuration for the collector (loguru)."""

from __future__ import annotations

import sys
from typing import Optional

from loguru import logger

from .config import collector_settings


def setup_logging(level: Optional[str] = None) -> None:
    """Replace loguru's default sink with a single stderr sink at ``level``."""

    level = (level or collector_settings.log_level).upper()

    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan> - <level>{message}</level>",
        colorize=True,
    )
    logger.debug("Logging configured: level={}", level)
