"""Exception hierarchy for parcelwire.

This module defines all custom exceptions used throughout the package.
All exceptions inherit from ParcelwireError for easy catching of any parcelwire-specific error.
"""

from __future__ import annotations

from typing import Any


class ParcelwireError(Exception):
    """Base exception for all parcelwire errors."""

    pass


class SchemaError(ParcelwireError):
    """Raised when a record schema is invalid and cannot be generated.

    Only the schema being processed is aborted; other schemas of the same
    batch are unaffected.

    Examples:
        - All fields of the declaration are private
        - The declaration extends another parcelled declaration
        - A nested declaration is private or not static
        - The declaration is not a record type at all

    Attributes:
        element: The offending field or type, if known
    """

    def __init__(self, message: str, element: Any = None) -> None:
        super().__init__(message)
        self.element = element


class EncodeError(ParcelwireError):
    """Raised when encoding a record fails.

    Examples:
        - Value does not fit the field's wire width
        - Value type cannot be written as a dynamic value
    """

    pass


class DecodeError(ParcelwireError):
    """Raised when decoding binary data fails.

    Examples:
        - Truncated data (insufficient bytes)
        - Unknown enum member name or dynamic value tag
        - Unknown record name for a nested parcelable
    """

    pass
