"""Logging utilities for mokkun.

Grid operations never raise on malformed input; they normalize it and
leave a debug trail here instead.
"""

from __future__ import annotations

import logging
import sys


class _LoggerHolder:
    """Holder for the global logger instance."""

    instance: logging.Logger | None = None


def get_logger() -> logging.Logger:
    """Get the mokkun logger instance.

    Returns
    -------
    logging.Logger
        The mokkun logger configured with a stream handler.
    """
    if _LoggerHolder.instance is None:
        logger = logging.getLogger("mokkun")
        logger.setLevel(logging.WARNING)

        # Only add handler if none exists
        if not logger.handlers:
            handler = logging.StreamHandler(sys.stderr)
            handler.setLevel(logging.DEBUG)
            formatter = logging.Formatter("%(name)s - %(levelname)s - %(message)s")
            handler.setFormatter(formatter)
            logger.addHandler(handler)

        _LoggerHolder.instance = logger

    return _LoggerHolder.instance


def debug(msg: str) -> None:
    """Log a debug message.

    Parameters
    ----------
    msg : str
        The message to log.
    """
    get_logger().debug(msg)


def warn(msg: str) -> None:
    """Log a warning message. Never raises exceptions.

    Parameters
    ----------
    msg : str
        The warning message to log.
    """
    get_logger().warning(msg)


def set_level(level: int | str) -> None:
    """Set the logging level.

    Parameters
    ----------
    level : int or str
        The logging level (e.g., logging.DEBUG, "DEBUG").
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper())
    get_logger().setLevel(level)


def set_format(fmt: str) -> None:
    """Replace the formatter on every handler of the mokkun logger."""
    formatter = logging.Formatter(fmt)
    for handler in get_logger().handlers:
        handler.setFormatter(formatter)


def log_callback_error(event_type: str, grid_id: str, exc: BaseException) -> None:
    """Log a listener error with standardized format.

    Parameters
    ----------
    event_type : str
        The grid event the listener was subscribed to.
    grid_id : str
        The grid instance that emitted the event.
    exc : BaseException
        The exception that was raised.
    """
    get_logger().exception(f"Listener error for '{event_type}' on grid '{grid_id}': {exc}")


def enable_debug() -> None:
    """Enable debug mode for verbose intent and pipeline logging.

    This will show all debug messages including:
    - Intent dispatch and routing
    - Filter/sort/paginate normalizations
    - Resize drag transitions
    """
    set_level(logging.DEBUG)
