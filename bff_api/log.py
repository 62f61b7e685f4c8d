"""Logging setup - console plus structured file sinks."""

import sys
from pathlib import Path

from loguru import logger

from .config import Settings

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)


def configure_logging(settings: Settings) -> None:
    """Configure logging - should be called at startup, not import time.

    Console output is human-readable in development and JSON in production.

    Sinks are enqueued so a slow or failing sink never blocks request handling.
    """
    logger.remove()
    logger.add(
        sys.stderr,
        format=CONSOLE_FORMAT,
        level=settings.log_level,
        serialize=settings.is_production,
        enqueue=True,
    )

    log_dir = Path(settings.log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    logger.add(
        log_dir / "combined.log",
        rotation="10 MB",
        retention="7 days",
        level=settings.log_level,
        serialize=True,
        enqueue=True,
    )
    logger.add(
        log_dir / "error.log",
        rotation="10 MB",
        retention="7 days",
        level="ERROR",
        serialize=True,
        enqueue=True,
    )
