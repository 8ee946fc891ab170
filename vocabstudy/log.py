"""Loguru configuration shared by the CLI and API entry points."""

from __future__ import annotations

import sys
from pathlib import Path

from loguru import logger

from config import Settings, get_settings


def configure_logging(settings: Settings | None = None, level: str | None = None) -> None:
    """
    Replace loguru's default sink with the configured ones.

    Args:
        settings: Application settings (log_level, log_file)
        level: Override for the stderr sink level
    """
    settings = settings or get_settings()

    logger.remove()
    logger.add(
        sys.stderr,
        level=level or settings.log_level,
        format="<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | {message}",
    )

    if settings.log_file:
        Path(settings.log_file).parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            settings.log_file,
            level=settings.log_level,
            rotation="5 MB",
            retention=3,
            encoding="utf-8",
        )
