"""Utility functions for Schema Intel."""

import sys
from pathlib import Path

from loguru import logger


LOG_FORMAT = "<level>{level: <8}</level> | <cyan>{name}</cyan> - {message}"


def setup_logging(level: str = "INFO", log_file: str | Path | None = None) -> None:
    """Configure loguru for command-line use.

    Replaces the default sink with a stderr sink at the given level, and
    optionally adds a rotating log file. Library code never calls this.

    Args:
        level: Minimum level name, e.g. "DEBUG" or "WARNING".
        log_file: Optional path for a rotating log file.
    """
    level = level.upper()
    logger.remove()
    logger.add(sys.stderr, level=level, format=LOG_FORMAT, colorize=True)

    if log_file is not None:
        log_path = Path(log_file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_path,
            level=level,
            rotation="10 MB",
            retention="10 days",
            backtrace=True,
            diagnose=False,
            enqueue=True,
        )

    logger.debug(f"Logging configured at {level}")
