"""Unit tests for encoding/decoding."""

from __future__ import annotations

import enum
import struct
from typing import Annotated, Any, ClassVar, Dict, List, Optional

import pytest
from pydantic import ValidationError

from parcelwire import (
    BoolArray,
    Char,
    CharArray,
    DecodeError,
    EncodeError,
    Float32,
    Int8,
    Int16,
    Int64,
    IntArray,
    LongArray,
    Parcelled,
    SchemaError,
    StringArray,
    Versioned,
    decode,
    encode,
    encoded_size,
    generate,
)


class Priority(enum.Enum):
    """Test enum."""

    LOW = 1
    MEDIUM = 2
    HIGH = 3


class SimpleMessage(Parcelled):
    """Simple test record."""

    vehicle_id: int
    active: bool


class WidthMessage(Parcelled):
    """Record using every fixed-width marker."""

    tiny: Int8
    short: Int16
    letter: Char
    big: Int64
    ratio: Float32
    exact: float


class ArrayMessage(Parcelled):
    """Record with array kinds."""

    payload: bytes
    flags: BoolArray
    letters: CharArray
    counts: IntArray
    stamps: LongArray
    words: StringArray


class CollectionMessage(Parcelled):
    """Record with dynamic collections."""

    items: List[Any]
    index: Dict[str, int]


class EnumMessage(Parcelled):
    """Record with an enum field."""

    priority: Priority
    fallback: Optional[Priority] = None


class Address(Parcelled):
    """Nested record."""

    street: str
    number: int


class Customer(Parcelled):
    """Record holding a nested record."""

    name: str
    address: Optional[Address] = None


class Upgraded(Parcelled):
    """Version 2 record with a field added in version 2."""

    name: str
    nickname: Annotated[Optional[str], Versioned(after=2)] = None

    parcel_version: ClassVar[int] = 2


class Opaque:
    """Type with no wire representation."""


class Untyped(Parcelled):
    """Record with a field falling back to dynamic values."""

    blob: Opaque


class TestEncodeDecode:
    """Test basic encode/decode functionality."""

    def test_simple_message(self) -> None:
        """Test simple record encoding."""
        msg = SimpleMessage(vehicle_id=42, active=True)
        data = encode(msg)

        # version + int + boolean-as-int
        assert data == struct.pack("<iii", 1, 42, 1)

        decoded = decode(SimpleMessage, data)
        assert decoded.vehicle_id == 42
        assert decoded.active is True

    def test_decode_to_record(self) -> None:
        """Test decoding with the generated record class."""
        data = encode(SimpleMessage(vehicle_id=3, active=False))
        record = decode(generate(SimpleMessage), data)
        assert type(record).__name__ == "Parcelled_SimpleMessage"
        assert (record.vehicle_id, record.active) == (3, False)

    def test_widths(self) -> None:
        """Test marker types select wire widths."""
        msg = WidthMessage(tiny=-3, short=1000, letter="z", big=2**40, ratio=0.5, exact=0.1)
        data = encode(msg)
        assert len(data) == 4 + 1 + 4 + 4 + 8 + 4 + 8
        assert encoded_size(msg) == len(data)

        decoded = decode(WidthMessage, data)
        assert decoded == msg
        assert isinstance(decoded.tiny, Int8)

    def test_marker_range_validated(self) -> None:
        """Test marker types reject values wider than their wire width."""
        with pytest.raises(ValidationError):
            WidthMessage(tiny=300, short=0, letter="a", big=0, ratio=0.0, exact=0.0)

    def test_arrays(self) -> None:
        """Test array kinds."""
        msg = ArrayMessage(
            payload=b"\x00\xff",
            flags=[True, False],
            letters=["a", "b"],
            counts=[1, 2, 3],
            stamps=[2**50],
            words=["x", None],
        )
        assert decode(ArrayMessage, encode(msg)) == msg

    def test_collections(self) -> None:
        """Test lists and maps of dynamic values."""
        msg = CollectionMessage(items=[1, "two", 3.0, None, [4]], index={"a": 1})
        assert decode(CollectionMessage, encode(msg)) == msg

    def test_enum(self) -> None:
        """Test enums travel by member name."""
        msg = EnumMessage(priority=Priority.HIGH)
        data = encode(msg)
        assert b"HIGH" in data
        assert decode(EnumMessage, data) == msg

    def test_nested_record(self) -> None:
        """Test a nested declaration is written as a parcelable."""
        msg = Customer(name="Ada", address=Address(street="Main", number=12))
        decoded = decode(Customer, encode(msg))
        assert decoded == msg

    def test_nested_null(self) -> None:
        """Test a null nested record."""
        msg = Customer(name="Ada")
        assert decode(Customer, encode(msg)).address is None

    def test_deterministic(self) -> None:
        """Test encoding is deterministic."""
        msg = Customer(name="Ada", address=Address(street="Main", number=12))
        assert encode(msg) == encode(msg)


class TestVersioning:
    """Test decoding buffers of other versions."""

    def test_older_buffer_skips_new_field(self) -> None:
        """Test a version 1 buffer does not carry the version 2 field."""
        data = struct.pack("<i", 1) + struct.pack("<i", 3) + b"Ada"
        decoded = decode(Upgraded, data)
        assert decoded.name == "Ada"
        assert decoded.nickname is None

    def test_current_buffer_reads_new_field(self) -> None:
        """Test the current version reads every field."""
        msg = Upgraded(name="Ada", nickname="Countess")
        assert decode(Upgraded, encode(msg)).nickname == "Countess"

    def test_encode_writes_gated_fields(self) -> None:
        """Test encode always writes every field."""
        record_cls = generate(Upgraded)
        record = record_cls("Ada", "Countess")
        assert b"Countess" in encode(record)


class TestErrors:
    """Test error handling."""

    def test_truncated(self) -> None:
        """Test truncated data."""
        data = encode(SimpleMessage(vehicle_id=1, active=True))
        with pytest.raises(DecodeError, match="Truncated"):
            decode(SimpleMessage, data[:-2])

    def test_trailing_bytes_strict(self) -> None:
        """Test trailing bytes are only rejected in strict mode."""
        data = encode(SimpleMessage(vehicle_id=1, active=True)) + b"\x00"
        assert decode(SimpleMessage, data).vehicle_id == 1
        with pytest.raises(DecodeError, match="trailing"):
            decode(SimpleMessage, data, strict=True)

    def test_unknown_enum_name(self) -> None:
        """Test an enum name the declaration does not know."""
        data = struct.pack("<ii", 1, 3) + b"LOL" + struct.pack("<i", 1)
        with pytest.raises(DecodeError, match="LOL"):
            decode(EnumMessage, data)

    def test_out_of_range_value(self) -> None:
        """Test values that do not fit the wire primitive."""
        record = generate(SimpleMessage)(2**40, True)
        with pytest.raises(EncodeError):
            encode(record)

    def test_not_parcelable(self) -> None:
        """Test encoding something that is not a record."""
        with pytest.raises(EncodeError):
            encode(object())  # type: ignore[arg-type]

    def test_invalid_declaration(self) -> None:
        """Test generation errors surface as SchemaError."""
        with pytest.raises(SchemaError):
            generate(int)

    def test_dynamic_fallback_rejects_unknown_values(self) -> None:
        """Test the dynamic fallback cannot write arbitrary objects."""
        with pytest.raises(EncodeError, match="Opaque"):
            encode(Untyped(blob=Opaque()))
