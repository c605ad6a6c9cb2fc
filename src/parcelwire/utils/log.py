"""Logging helpers for parcelwire.

All parcelwire loggers live under the ``parcelwire`` namespace so that
applications can tune generation and resolution output independently.

Example:
    >>> import logging
    >>> from parcelwire.utils.log import configure_logging, get_logger
    >>> configure_logging(level=logging.DEBUG)
    >>> get_logger("resolver").debug("resolving fields")
"""

from __future__ import annotations

import logging

ROOT_LOGGER = "parcelwire"

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def get_logger(name: str = "") -> logging.Logger:
    """Get a logger for a parcelwire component.

    Args:
        name: Component name (e.g. 'resolver', 'processor').
            If empty, returns the root parcelwire logger.

    Returns:
        Logger instance for the component
    """
    if name:
        return logging.getLogger(f"{ROOT_LOGGER}.{name}")
    return logging.getLogger(ROOT_LOGGER)


def configure_logging(
    level: int = logging.INFO,
    format_string: str = DEFAULT_FORMAT,
    handler: logging.Handler | None = None,
) -> logging.Logger:
    """Configure the root parcelwire logger.

    A handler is only attached once; calling this again just adjusts the level.

    Args:
        level: Logging level (e.g. logging.DEBUG)
        format_string: Format string for log records
        handler: Optional custom handler, a StreamHandler is used otherwise

    Returns:
        The configured root logger
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)

    if not logger.handlers:
        if handler is None:
            handler = logging.StreamHandler()
        handler.setLevel(level)
        handler.setFormatter(logging.Formatter(format_string))
        logger.addHandler(handler)
    else:
        for existing in logger.handlers:
            existing.setLevel(level)

    return logger
