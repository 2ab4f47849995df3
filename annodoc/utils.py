"""
Utility functions for annodoc.
"""

import os
import logging
from pathlib import Path
from typing import Dict, Any, Union
import colorama
from rich.logging import RichHandler

# Initialize colorama for cross-platform color support
colorama.init()


# Configure logging with Rich handler
def setup_logger(name: str = "annodoc", level: str = "INFO") -> logging.Logger:
    """Set up a logger with Rich formatting."""
    logger = logging.getLogger(name)

    # Clear existing handlers
    logger.handlers = []

    handler = RichHandler(
        show_time=True,
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))

    logger.addHandler(handler)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    return logger


# Global logger instance
logger = setup_logger()


def set_log_level(level: str):
    """Change the level of the package logger."""
    logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))


def merge_dicts(base: Dict[str, Any], update: Dict[str, Any]) -> Dict[str, Any]:
    """Deep merge two dictionaries.

    Values from `update` replace values from `base` leaf by leaf; nested
    dictionaries are merged recursively instead of being replaced.
    """
    result = base.copy()

    for key, value in update.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = merge_dicts(result[key], value)
        else:
            result[key] = value

    return result


def notify(msg: str):
    """Surface a message to the operator."""
    logger.info(f"(annodoc) {msg}")


def full_path(path: Union[str, Path]) -> str:
    """Absolute path with symlinks resolved."""
    return os.path.realpath(os.path.abspath(os.path.expanduser(str(path))))
