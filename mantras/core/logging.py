"""Loguru sink configuration for the CLI and API entry points."""

import sys
from pathlib import Path

from loguru import logger

from mantras.core.config import Settings, get_settings

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)


def configure_logging(settings: Settings | None = None) -> None:
    """Configure loguru based on settings.

    Replaces the default handler with a colorized stderr sink and, when
    ``mantras_log_dir`` is set, a daily-rotated log file.

    Args:
        settings: Optional settings override. Uses default if not provided.
    """
    settings = settings or get_settings()
    level = settings.effective_log_level

    logger.remove()  # Remove default handler

    logger.add(
        sys.stderr,
        level=level,
        format=LOG_FORMAT,
        colorize=True,
    )

    if settings.mantras_log_dir:
        logs_dir = Path(settings.mantras_log_dir)
        logs_dir.mkdir(parents=True, exist_ok=True)

        logger.add(
            str(logs_dir / "mantras_{time:YYYY-MM-DD}.log"),
            rotation="1 day",
            retention="7 days",
            level=level,
            format=LOG_FORMAT,
        )

    logger.debug(f"Logging configured at {level}")
