"""Logging utilities for consistent logging across the library.

Provides centralized logging setup for all label-vision components. The
package configures itself at WARNING on import; applications raise or lower
the level through ``label_vision.configure_logging`` or ``setup_logging``.

Examples
--------
    from label_vision.utils.logging import setup_logging, setup_logger

    # Setup library-wide logging
    setup_logging(level="DEBUG", log_file="label_vision.log")

    # Get logger for a specific component
    logger = setup_logger("TextDetector")
    logger.info("Detection started")
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Union

PACKAGE_LOGGER = "label_vision"


def _to_level(level: Union[str, int]) -> int:
    if isinstance(level, str):
        return getattr(logging, level.upper(), logging.INFO)
    return level


def setup_logging(level: Union[str, int] = "INFO",
                  log_file: Optional[str] = None,
                  name: str = PACKAGE_LOGGER) -> None:
    """Set up logging configuration for the entire library."""
    numeric_level = _to_level(level)

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    root_logger = logging.getLogger(name)
    root_logger.setLevel(numeric_level)

    # Clear existing handlers to avoid duplicates
    if root_logger.hasHandlers():
        for handler in list(root_logger.handlers):
            root_logger.removeHandler(handler)
            handler.close()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        try:
            log_path = Path(log_file)
            log_path.parent.mkdir(parents=True, exist_ok=True)

            file_handler = logging.FileHandler(str(log_path), encoding='utf-8')
            file_handler.setLevel(numeric_level)
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)
        except OSError as e:
            root_logger.warning(f"Failed to setup file logging to {log_file}: {e}")

    root_logger.propagate = False


def setup_logger(name: str, level: Optional[Union[str, int]] = None) -> logging.Logger:
    """Get a component logger under the package namespace.

    Without an explicit level the logger inherits the package level.
    """
    logger = logging.getLogger(f"{PACKAGE_LOGGER}.{name}")
    if level is not None:
        logger.setLevel(_to_level(level))

    if not logging.getLogger(PACKAGE_LOGGER).handlers:
        setup_logging(level="WARNING")

    return logger


def get_logger(name: str = PACKAGE_LOGGER) -> logging.Logger:
    """Get a logger instance."""
    return logging.getLogger(name)


__all__ = [
    "setup_logging",
    "setup_logger",
    "get_logger",
]
