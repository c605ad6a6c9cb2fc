"""Pydantic declarations for parcelwire.

This module provides the Parcelled base class, the field annotations and the
marker types used to declare parcelable records.
"""

from __future__ import annotations

from .base import Parcelled
from .fields import UseAdapter, Versioned
from .types import (
    BoolArray,
    Char,
    CharArray,
    Float32,
    Int8,
    Int16,
    Int64,
    IntArray,
    LongArray,
    StringArray,
)

__all__ = [
    "BoolArray",
    "Char",
    "CharArray",
    "Float32",
    "Int16",
    "Int64",
    "Int8",
    "IntArray",
    "LongArray",
    "Parcelled",
    "StringArray",
    "UseAdapter",
    "Versioned",
]
