"""
Package-wide logging configuration for ctrl_trajectories
Sets up colored logging once, on first use, without explicit setup by callers
"""

import logging
import os
from typing import Optional

from .colored_logging import LOGGER_NAME, setup_colored_logging

_UNIVERSAL_LOGGER_INITIALIZED = False
_DEFAULT_LOG_LEVEL = "INFO"
_DEFAULT_LOG_FILE = None


def get_default_log_level() -> str:
    """Log level from ``CTRL_TRAJECTORIES_LOG_LEVEL``, default INFO"""
    return os.environ.get("CTRL_TRAJECTORIES_LOG_LEVEL", _DEFAULT_LOG_LEVEL)


def get_default_log_file() -> Optional[str]:
    """Log file from ``CTRL_TRAJECTORIES_LOG_FILE``, default none"""
    return os.environ.get("CTRL_TRAJECTORIES_LOG_FILE", _DEFAULT_LOG_FILE)


def initialize_universal_logging() -> logging.Logger:
    """
    Initialize the package logger if this has not happened yet

    Environment Variables:
        CTRL_TRAJECTORIES_LOG_LEVEL: logging level (DEBUG, INFO, WARNING, ERROR)
        CTRL_TRAJECTORIES_LOG_FILE: optional log file path

    Returns:
        Configured logger instance
    """
    global _UNIVERSAL_LOGGER_INITIALIZED

    if _UNIVERSAL_LOGGER_INITIALIZED:
        return logging.getLogger(LOGGER_NAME)

    log_level = get_default_log_level()
    log_file = get_default_log_file()

    logger = setup_colored_logging(level=log_level, log_file=log_file)
    _UNIVERSAL_LOGGER_INITIALIZED = True

    logger.debug(f"ctrl_trajectories logging initialized with level: {log_level}")
    if log_file:
        logger.debug(f"ctrl_trajectories logging to file: {log_file}")

    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a logger that writes through the package handlers

    Args:
        name: Child logger name below ``ctrl_trajectories`` (optional)

    Returns:
        Configured logger instance
    """
    initialize_universal_logging()

    if name is None or name == LOGGER_NAME:
        return logging.getLogger(LOGGER_NAME)
    if name.startswith(LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{LOGGER_NAME}.{name}")
