"""Loguru configuration for the Kindle command line."""

import sys
from pathlib import Path

from loguru import logger

from kindle.core.config import Settings, get_settings

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)


def configure_logging(settings: Settings | None = None) -> None:
    """Configure loguru based on settings.

    Replaces the default handler with a stderr sink and, when
    ``kindle_log_dir`` is set, a daily rotating file sink.

    Args:
        settings: Optional settings override. Uses default if not provided.
    """
    settings = settings or get_settings()

    logger.remove()  # Remove default handler

    if settings.kindle_log_dir:
        logs_dir = Path(settings.kindle_log_dir)
        logs_dir.mkdir(parents=True, exist_ok=True)

        logger.add(
            str(logs_dir / "kindle_{time:YYYY-MM-DD}.log"),
            rotation="1 day",
            retention="7 days",
            level=settings.kindle_log_level,
            format=LOG_FORMAT,
        )

    logger.add(
        lambda msg: print(msg, end="", file=sys.stderr),
        level="DEBUG" if settings.kindle_debug else settings.kindle_log_level,
        format=LOG_FORMAT,
        colorize=True,
    )
