"""Package-wide logging for netlayout.

Every module obtains its logger through :func:`get_logger`. All loggers hang
off a single ``netlayout`` root that owns exactly one handler, so the layout
engine, the loader and the CLI share one format and one level switch.

The initial level can be taken from the ``NETLAYOUT_LOG_LEVEL`` environment
variable (``DEBUG``, ``INFO``, ``WARNING`` ...); the CLI flags override it.
"""

import logging
import os
import sys
from contextlib import contextmanager
from typing import IO, Iterator, Optional

ROOT_LOGGER_NAME = "netlayout"
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_ROOT_LOGGER_CONFIGURED = False


def _level_from_env(default: int) -> int:
    raw = os.environ.get("NETLAYOUT_LOG_LEVEL", "").strip().upper()
    if not raw:
        return default
    level = logging.getLevelName(raw)
    # getLevelName returns "Level X" strings for unknown names
    return level if isinstance(level, int) else default


def setup_root_logger(
    level: Optional[int] = None,
    format_string: Optional[str] = None,
    handler: Optional[logging.Handler] = None,
) -> None:
    """Attach the single handler to the ``netlayout`` root logger.

    Calling this more than once is a no-op until :func:`reset_logging` runs.

    Args:
        level: Logging level. Defaults to ``NETLAYOUT_LOG_LEVEL`` or INFO.
        format_string: Custom format string (optional).
        handler: Custom handler (optional, defaults to a stdout StreamHandler).
    """
    global _ROOT_LOGGER_CONFIGURED

    if _ROOT_LOGGER_CONFIGURED:
        return

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(level if level is not None else _level_from_env(logging.INFO))
    root_logger.handlers.clear()

    if handler is None:
        handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(format_string or DEFAULT_FORMAT))
    root_logger.addHandler(handler)

    # pytest's caplog hooks the stdlib root logger
    root_logger.propagate = True

    _ROOT_LOGGER_CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    """Return a child logger of the ``netlayout`` root.

    Args:
        name: Logger name, normally ``__name__`` of the calling module.

    Returns:
        Logger whose level is inherited from the package root.
    """
    setup_root_logger()
    logger = logging.getLogger(name)
    logger.setLevel(logging.NOTSET)
    return logger


def set_global_log_level(level: int) -> None:
    """Set the level of the package root logger and of its handlers."""
    setup_root_logger()
    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(level)
    for handler in root_logger.handlers:
        handler.setLevel(level)


def enable_debug_logging() -> None:
    """Log every emission and resolution decision of the layout engine."""
    set_global_log_level(logging.DEBUG)


def disable_debug_logging() -> None:
    """Return to INFO level."""
    set_global_log_level(logging.INFO)


@contextmanager
def redirect_log_stream(stream: IO[str]) -> Iterator[None]:
    """Send the package handler's output to ``stream`` until the block exits.

    Used by ``netlayout render --stdout`` so that stdout carries only JSON.
    """
    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    swapped = []
    for handler in root_logger.handlers:
        if isinstance(handler, logging.StreamHandler) and not isinstance(
            handler, logging.FileHandler
        ):
            previous = handler.setStream(stream)
            if previous is not None:
                swapped.append((handler, previous))
    try:
        yield
    finally:
        for handler, previous in swapped:
            handler.setStream(previous)


def reset_logging() -> None:
    """Drop the handler and forget the configuration (used by tests)."""
    global _ROOT_LOGGER_CONFIGURED
    _ROOT_LOGGER_CONFIGURED = False

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.handlers.clear()
    root_logger.setLevel(logging.NOTSET)


setup_root_logger()
