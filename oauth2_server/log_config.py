"""
Loguru sink setup for the token service.
"""

import sys

from loguru import logger


LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)


def configure_logging(level: str = "INFO") -> None:
    """Replace loguru's default sink with a stderr sink at the given level"""
    logger.remove()
    logger.add(sys.stderr, level=level.upper(), format=LOG_FORMAT)
    logger.debug(f"Logging configured at level {level.upper()}")


def mask(value: str, visible: int = 6) -> str:
    """Shorten a secret value for log output"""
    if not value:
        return "<empty>"
    return f"{value[:visible]}..."
