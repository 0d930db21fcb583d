from __future__ import annotations

import sys

from loguru import logger

from .config import LOG_DIR, LOG_LEVEL


def setup_logging(level: str = LOG_LEVEL, log_file: str = "picklist.log") -> None:
    """
    Replace loguru's default sink with a formatted stderr sink and a rotating
    file sink under LOG_DIR.
    """
    logger.remove()
    logger.add(
        sys.stderr,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <level>{message}</level>",
        level=level,
    )
    LOG_DIR.mkdir(parents=True, exist_ok=True)
    logger.add(
        LOG_DIR / log_file,
        rotation="10 MB",
        retention="30 days",
        level=level,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}",
    )
    logger.debug("Logging initialized at {}", level)
