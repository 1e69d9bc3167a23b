"""
Logging configuration for the tracking client.

The library only creates loggers; handlers are attached by the host
application, or by `setup_logging` for scripts and debugging sessions.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union

PACKAGE_LOGGER = "universal_analytics"


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[Union[str, Path]] = None,
) -> logging.Logger:
    """
    Set up console logging, and file logging when a path is given.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional path of a rotating log file

    Returns:
        The package logger
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(getattr(logging, log_level.upper()))

    # Remove any existing handlers
    logger.handlers.clear()

    console_formatter = logging.Formatter("UA %(message)s")

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.DEBUG)
    console_handler.setFormatter(console_formatter)
    logger.addHandler(console_handler)

    if log_file is not None:
        log_path = Path(log_file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_formatter = logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        # Rotating log file (max 10MB, keep 5 backups)
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(file_formatter)
        logger.addHandler(file_handler)

    # Quiet noisy third-party loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    logger.debug(f"Logging initialized at level {log_level.upper()}")

    return logger


def enable_debug(enabled: bool = True) -> None:
    """Switch the package logger to DEBUG, which also turns on parameter checks."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(logging.DEBUG if enabled else logging.NOTSET)


def debug_enabled() -> bool:
    return logging.getLogger(PACKAGE_LOGGER).isEnabledFor(logging.DEBUG)

