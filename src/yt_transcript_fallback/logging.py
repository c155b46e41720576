"""Logging configuration for yt-transcript-fallback."""

import sys

from loguru import logger

# Remove default handler
logger.remove()

_info_format = "<level>{level: <7}</level> | {message}"
_debug_format = "<dim>{time:HH:mm:ss}</dim> | <level>{level: <7}</level> | {name}:{line} | {message}"


def configure_logging(verbose: bool = False) -> None:
    """Configure logging based on verbosity.

    Args:
        verbose: If True, show DEBUG level (every sub-approach the strategies
            try) with timestamps. If False, show INFO and above.
    """
    logger.remove()
    if verbose:
        logger.add(sys.stderr, format=_debug_format, level="DEBUG")
    else:
        logger.add(sys.stderr, format=_info_format, level="INFO")


__all__ = ["logger", "configure_logging"]
