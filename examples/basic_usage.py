#!/usr/bin/env python3
"""Basic usage example for parcelwire.

This example demonstrates:
1. Declaring a record with Pydantic
2. Encoding to a little-endian parcel
3. Decoding back to a Pydantic model
4. Reading an older buffer with a versioned field
"""

from __future__ import annotations

import struct
from datetime import date
from typing import Annotated, ClassVar, List, Optional

from pydantic import Field

from parcelwire import (
    Int16,
    Parcel,
    Parcelled,
    ParcelTypeAdapter,
    UseAdapter,
    Versioned,
    decode,
    encode,
    encoded_size,
    generate,
)


class DateAdapter(ParcelTypeAdapter[date]):
    """Writes dates as their ordinal."""

    def from_parcel(self, parcel: Parcel) -> date:
        return date.fromordinal(parcel.read_int())

    def to_parcel(self, value: date, parcel: Parcel) -> None:
        parcel.write_int(value.toordinal())


# Declare a record class
class Person(Parcelled):
    """Contact card.

    ``nickname`` was added in version 2, so version 1 buffers do not carry it.
    """

    name: str
    age: Int16
    email: Optional[str] = None
    birthday: Annotated[date, UseAdapter(DateAdapter)]
    tags: List[str] = Field(default_factory=list)
    nickname: Annotated[Optional[str], Versioned(after=2)] = None

    parcel_version: ClassVar[int] = 2


def main() -> None:
    """Run the basic usage example."""
    print("=" * 60)
    print("parcelwire Basic Usage Example")
    print("=" * 60)
    print()

    # Create a record instance
    print("1. Creating a person...")
    ada = Person(
        name="Ada",
        age=36,
        birthday=date(1815, 12, 10),
        tags=["math"],
        nickname="Countess",
    )
    print(f"   {ada!r}")
    print()

    # Inspect the generated record
    print("2. Inspecting the generated record...")
    record_cls = generate(Person)
    print(f"   Record: {record_cls.__name__}")
    print(f"   Fields: {', '.join(record_cls.FIELDS)}")
    print(f"   Adapter: {type(record_cls.DATE_ADAPTER).__name__}")
    print()

    # Encode the record
    print("3. Encoding to a parcel...")
    data = encode(ada)
    print(f"   Encoded size: {encoded_size(ada)} bytes")
    print(f"   Hex: {data.hex()}")
    print()

    # Decode the record
    print("4. Decoding from the parcel...")
    decoded = decode(Person, data)
    print(f"   {decoded!r}")
    if decoded == ada:
        print("   ✓ Round-trip successful! Records match.")
    else:
        print("   ✗ Round-trip failed! Records don't match.")
    print()

    # Decode a buffer written by version 1
    print("5. Decoding a version 1 buffer...")
    old = Parcel()
    old.write_int(1)
    old.write_string("Grace")
    old.write_int(40)
    old.write_int(1)  # email is null
    old.write_int(date(1906, 12, 9).toordinal())
    old.write_list([])
    old.write_int(0)  # nickname present but not read for version 1
    old.write_string("Amazing Grace")
    grace = decode(Person, old.marshall())
    print(f"   name={grace.name} nickname={grace.nickname}")
    print()

    # Compare to JSON
    print("6. Comparing to JSON encoding...")
    json_bytes = ada.model_dump_json().encode("utf-8")
    print(f"   parcel size: {len(data)} bytes")
    print(f"   JSON size: {len(json_bytes)} bytes")
    print(f"   Version tag: {struct.unpack_from('<i', data)[0]}")
    print()

    print("=" * 60)
    print("Example complete!")
    print("=" * 60)


if __name__ == "__main__":
    main()
