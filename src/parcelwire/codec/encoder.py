"""Top-level encoder.

This module provides the encode() function that writes a generated record,
or a Parcelled declaration instance, into a fresh parcel.
"""

from __future__ import annotations

from typing import Any

from ..exceptions import EncodeError
from ..runtime import Parcelable
from .parcel import Parcel


def encode(record: Parcelable, flags: int = 0) -> bytes:
    """Encode a record to its wire format.

    The output is the record's version tag followed by every field in
    declaration order. Encoding the same record twice gives identical bytes.

    Args:
        record: Generated record or Parcelled declaration instance
        flags: Flags passed on to nested records

    Returns:
        Encoded bytes

    Raises:
        SchemaError: If the declaration cannot be generated
        EncodeError: If a field value does not fit its wire representation

    Examples:
        ```python
        from parcelwire import Parcelled, encode, decode

        class Person(Parcelled):
            name: str
            age: int

        data = encode(Person(name="Ada", age=36))
        record = decode(Person, data)
        ```
    """
    if not isinstance(record, Parcelable):
        raise EncodeError(f"Cannot encode {type(record).__name__}: not a parcelable record")

    parcel = Parcel()
    record.write_to_parcel(parcel, flags)
    return parcel.marshall()


def encoded_size(record: Any) -> int:
    """Return the number of bytes :func:`encode` produces for ``record``."""
    return len(encode(record))
