"""
Colored logging utilities for ctrl_trajectories
Console output is color-coded by log level; colors come from a YAML file
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

LOGGER_NAME = "ctrl_trajectories"

_DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / "config" / "logging_colors.yaml"

_FALLBACK_COLORS = {
    "colors": {
        "DEBUG": {"color": "cyan", "style": "dim"},
        "INFO": {"color": "white", "style": "normal"},
        "WARNING": {"color": "yellow", "style": "bold"},
        "ERROR": {"color": "red", "style": "bold"},
        "CRITICAL": {"color": "magenta", "style": "bold"},
    },
    "console": {"enable_colors": True},
    "file": {"enable_colors": False},
}


def load_color_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """Read the color configuration, falling back to built-in colors."""
    if config_path is None:
        config_path = _DEFAULT_CONFIG_PATH

    try:
        with open(config_path, "r") as f:
            config = yaml.safe_load(f)
    except (FileNotFoundError, yaml.YAMLError):
        return _FALLBACK_COLORS
    return config or _FALLBACK_COLORS


class ColoredFormatter(logging.Formatter):
    """
    Logging formatter that wraps each message in ANSI color codes
    chosen by the record's level
    """

    COLORS = {
        "black": "\033[30m",
        "red": "\033[31m",
        "green": "\033[32m",
        "yellow": "\033[33m",
        "blue": "\033[34m",
        "magenta": "\033[35m",
        "cyan": "\033[36m",
        "white": "\033[37m",
    }

    STYLES = {
        "normal": "\033[0m",
        "bold": "\033[1m",
        "dim": "\033[2m",
        "underline": "\033[4m",
    }

    RESET = "\033[0m"

    def __init__(
        self,
        fmt: Optional[str] = None,
        config_path: Optional[str] = None,
        enable_colors: bool = True,
    ):
        """
        Args:
            fmt: Log message format string
            config_path: Path to color configuration YAML file
            enable_colors: Whether to emit color codes (off for file output)
        """
        super().__init__(fmt)
        self.enable_colors = enable_colors
        self.color_config = load_color_config(config_path)

    def _get_color_code(self, level_name: str) -> str:
        if not self.enable_colors:
            return ""

        level_config = self.color_config.get("colors", {}).get(level_name, {})
        color = level_config.get("color", "white")
        style = level_config.get("style", "normal")

        color_code = self.COLORS.get(color, self.COLORS["white"])
        style_code = self.STYLES.get(style, self.STYLES["normal"])

        return f"{style_code}{color_code}"

    def format(self, record: logging.LogRecord) -> str:
        # INFO shows the bare message, WARNING/ERROR get a level prefix,
        # everything else uses the full format
        if record.levelname == "INFO":
            formatted_message = record.getMessage()
        elif record.levelname in ["ERROR", "WARNING"]:
            formatted_message = f"{record.levelname} - {record.getMessage()}"
        else:
            formatted_message = super().format(record)

        if not self.enable_colors:
            return formatted_message

        return f"{self._get_color_code(record.levelname)}{formatted_message}{self.RESET}"


def setup_colored_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    config_path: Optional[str] = None,
) -> logging.Logger:
    """
    Configure the package logger with a colored console handler

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional file path to write logs to
        config_path: Path to color configuration YAML file

    Returns:
        The configured ``ctrl_trajectories`` logger
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, level.upper()))

    # Replace handlers so repeated setup does not duplicate output
    logger.handlers.clear()
    logger.propagate = False

    config = load_color_config(config_path)
    formatter_string = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(
        ColoredFormatter(
            fmt=formatter_string,
            config_path=config_path,
            enable_colors=config.get("console", {}).get("enable_colors", True),
        )
    )
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(
            ColoredFormatter(
                fmt=formatter_string,
                config_path=config_path,
                enable_colors=config.get("file", {}).get("enable_colors", False),
            )
        )
        logger.addHandler(file_handler)

    return logger
