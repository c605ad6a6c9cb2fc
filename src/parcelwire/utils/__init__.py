"""Utility functions for parcelwire.

This module provides logging setup and other helpers.
"""

from __future__ import annotations

from .log import configure_logging, get_logger

__all__ = [
    "configure_logging",
    "get_logger",
]
