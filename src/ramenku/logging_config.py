"""
Logging configuration for ramenku.

All loggers live under the "ramenku" namespace so one call to
setup_logging() configures the API server, the CLI and the library.

Log Format:
    2026-10-19 10:15:30 [INFO    ] ramenku.checkout - Order 1a2b3c4d recorded

Usage:
    from ramenku.logging_config import setup_logging, get_logger

    setup_logging(log_level=logging.DEBUG)
    logger = get_logger(__name__)
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

APP_NAME = "ramenku"


def setup_logging(
    log_level: int = logging.INFO,
    log_dir: Path | None = None,
    stream=None,
) -> logging.Logger:
    """
    Configure the ramenku logger.

    Args:
        log_level: Minimum log level.
        log_dir: If given, also write a rotating log file there.
        stream: Console stream (default: stderr, so CLI stdout stays clean).

    Returns:
        The configured "ramenku" logger.
    """
    logger = logging.getLogger(APP_NAME)
    logger.setLevel(log_level)
    logger.propagate = False

    # Allows re-configuration
    logger.handlers.clear()

    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)-8s] %(name)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console_handler = logging.StreamHandler(stream or sys.stderr)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            filename=log_dir / f"{APP_NAME}.log",
            maxBytes=10 * 1024 * 1024,  # 10 MB per file
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.debug("Logging configured at level %s", logging.getLevelName(log_level))
    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger under the ramenku namespace.

    Module names already start with "ramenku." and are returned as-is;
    anything else is nested under it.
    """
    if name == APP_NAME or name.startswith(APP_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{APP_NAME}.{name}")
