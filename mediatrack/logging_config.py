"""
Application logging through loguru.

A single console handler with a human readable format; the level comes from
the LOG_LEVEL environment variable.
"""

import sys

from loguru import logger


def configure_logging(log_level: str = "INFO") -> None:
    """Replace loguru's default handler with the application one.

    Args:
        log_level: minimum level written to stderr (DEBUG, INFO, WARNING, ERROR)
    """
    logger.remove()

    logger.add(
        sys.stderr,
        level=log_level,
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
            "<level>{message}</level>"
        ),
        colorize=True,
    )

    logger.debug("Logging configured at level {}", log_level)
