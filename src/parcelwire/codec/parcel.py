"""Sequential binary wire buffer.

This module provides the Parcel, the buffer that generated records encode
into and decode from. Writes always append; reads consume from a separate
read position. All values are little-endian. There is no random access from
the record's point of view: the buffer is self-describing only through field
order and the leading version tag.
"""

from __future__ import annotations

import enum
import struct
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Sized, TypeVar

from ..exceptions import DecodeError, EncodeError
from ..runtime import Parcelable, lookup_record

_BYTE = struct.Struct("<b")
_INT = struct.Struct("<i")
_LONG = struct.Struct("<q")
_FLOAT = struct.Struct("<f")
_DOUBLE = struct.Struct("<d")

NULL_LENGTH = -1

E = TypeVar("E", bound=enum.Enum)


class ValueTag(enum.IntEnum):
    """Type tags written in front of dynamic values."""

    NULL = -1
    STRING = 0
    INTEGER = 1
    MAP = 2
    PARCELABLE = 4
    LONG = 6
    DOUBLE = 8
    BOOLEAN = 9
    LIST = 11
    BYTE_ARRAY = 13


def _map_key(value: Any) -> Any:
    if isinstance(value, list):
        return tuple(_map_key(item) for item in value)
    return value


class Parcel:
    """In-memory sequential buffer with typed primitives.

    A parcel is not thread-safe; a given instance must only be used by one
    encode or decode at a time.

    Example:
        >>> parcel = Parcel()
        >>> parcel.write_int(1)
        >>> parcel.write_string("hello")
        >>> reader = Parcel(parcel.marshall())
        >>> reader.read_int(), reader.read_string()
        (1, 'hello')
    """

    def __init__(self, data: bytes = b"") -> None:
        """Initialize a parcel, optionally over existing data.

        Args:
            data: Bytes to read from
        """
        self._buffer = bytearray(data)
        self._position = 0

    # ------------------------------------------------------------------
    # buffer state

    def marshall(self) -> bytes:
        """Return the raw bytes written so far."""
        return bytes(self._buffer)

    def data_size(self) -> int:
        """Return the total number of bytes in the buffer."""
        return len(self._buffer)

    def data_position(self) -> int:
        """Return the current read position in bytes."""
        return self._position

    def set_data_position(self, position: int) -> None:
        """Move the read position.

        Raises:
            ValueError: If position is outside the buffer
        """
        if position < 0 or position > len(self._buffer):
            raise ValueError(f"Position {position} outside buffer of {len(self._buffer)} bytes")
        self._position = position

    def data_avail(self) -> int:
        """Return the number of unread bytes."""
        return len(self._buffer) - self._position

    # ------------------------------------------------------------------
    # fixed-width primitives

    def _pack(self, fmt: struct.Struct, value: Any, what: str) -> None:
        try:
            self._buffer += fmt.pack(value)
        except struct.error as e:
            raise EncodeError(f"Cannot write {value!r} as {what}: {e}") from e

    def _unpack(self, fmt: struct.Struct, what: str) -> Any:
        end = self._position + fmt.size
        if end > len(self._buffer):
            raise DecodeError(
                f"Truncated parcel reading {what}: need {fmt.size} bytes, "
                f"have {self.data_avail()}"
            )
        (value,) = fmt.unpack_from(self._buffer, self._position)
        self._position = end
        return value

    def write_byte(self, value: int) -> None:
        self._pack(_BYTE, value, "byte")

    def read_byte(self) -> int:
        return self._unpack(_BYTE, "byte")

    def write_int(self, value: int) -> None:
        """Write a signed 32-bit integer."""
        self._pack(_INT, value, "int")

    def read_int(self) -> int:
        """Read a signed 32-bit integer."""
        return self._unpack(_INT, "int")

    def write_long(self, value: int) -> None:
        """Write a signed 64-bit integer."""
        self._pack(_LONG, value, "long")

    def read_long(self) -> int:
        """Read a signed 64-bit integer."""
        return self._unpack(_LONG, "long")

    def write_float(self, value: float) -> None:
        self._pack(_FLOAT, value, "float")

    def read_float(self) -> float:
        return self._unpack(_FLOAT, "float")

    def write_double(self, value: float) -> None:
        self._pack(_DOUBLE, value, "double")

    def read_double(self) -> float:
        return self._unpack(_DOUBLE, "double")

    def write_boolean(self, value: bool) -> None:
        """Write a boolean as an int32 (1 or 0)."""
        self.write_int(1 if value else 0)

    def read_boolean(self) -> bool:
        return self.read_int() != 0

    def write_char(self, value: str) -> None:
        """Write a single character as its int32 code point."""
        if not isinstance(value, str) or len(value) != 1:
            raise EncodeError(f"Cannot write {value!r} as char")
        self.write_int(ord(value))

    def read_char(self) -> str:
        code = self.read_int()
        try:
            return chr(code)
        except (ValueError, OverflowError) as e:
            raise DecodeError(f"Invalid char code point {code}") from e

    # ------------------------------------------------------------------
    # length-prefixed values

    def _write_length(self, values: Optional[Sized]) -> bool:
        if values is None:
            self.write_int(NULL_LENGTH)
            return False
        self.write_int(len(values))
        return True

    def _read_length(self, what: str) -> int:
        length = self.read_int()
        if length < NULL_LENGTH:
            raise DecodeError(f"Invalid {what} length {length}")
        return length

    def write_string(self, value: Optional[str]) -> None:
        """Write a UTF-8 string prefixed by its byte length (-1 for None)."""
        if value is None:
            self.write_int(NULL_LENGTH)
            return
        if not isinstance(value, str):
            raise EncodeError(f"Expected str, got {type(value).__name__}")
        encoded = value.encode("utf-8")
        self.write_int(len(encoded))
        self._buffer += encoded

    def read_string(self) -> Optional[str]:
        length = self._read_length("string")
        if length == NULL_LENGTH:
            return None
        raw = self._read_raw(length, "string")
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecodeError(f"Invalid UTF-8 string: {e}") from e

    def _read_raw(self, num_bytes: int, what: str) -> bytes:
        end = self._position + num_bytes
        if end > len(self._buffer):
            raise DecodeError(
                f"Truncated parcel reading {what}: need {num_bytes} bytes, "
                f"have {self.data_avail()}"
            )
        raw = bytes(self._buffer[self._position : end])
        self._position = end
        return raw

    def write_byte_array(self, value: Optional[bytes]) -> None:
        if self._write_length(value):
            self._buffer += bytes(value)  # type: ignore[arg-type]

    def read_byte_array(self) -> Optional[bytes]:
        length = self._read_length("byte array")
        if length == NULL_LENGTH:
            return None
        return self._read_raw(length, "byte array")

    def _write_array(self, values: Optional[Sequence[Any]], write: Callable[[Any], None]) -> None:
        if self._write_length(values):
            for item in values:  # type: ignore[union-attr]
                write(item)

    def _read_array(self, read: Callable[[], Any], what: str) -> Optional[List[Any]]:
        length = self._read_length(what)
        if length == NULL_LENGTH:
            return None
        return [read() for _ in range(length)]

    def write_boolean_array(self, values: Optional[Sequence[bool]]) -> None:
        self._write_array(values, self.write_boolean)

    def read_boolean_array(self) -> Optional[List[bool]]:
        return self._read_array(self.read_boolean, "boolean array")

    def write_char_array(self, values: Optional[Sequence[str]]) -> None:
        self._write_array(values, self.write_char)

    def read_char_array(self) -> Optional[List[str]]:
        return self._read_array(self.read_char, "char array")

    def write_int_array(self, values: Optional[Sequence[int]]) -> None:
        self._write_array(values, self.write_int)

    def read_int_array(self) -> Optional[List[int]]:
        return self._read_array(self.read_int, "int array")

    def write_long_array(self, values: Optional[Sequence[int]]) -> None:
        self._write_array(values, self.write_long)

    def read_long_array(self) -> Optional[List[int]]:
        return self._read_array(self.read_long, "long array")

    def write_string_array(self, values: Optional[Sequence[Optional[str]]]) -> None:
        self._write_array(values, self.write_string)

    def read_string_array(self) -> Optional[List[Optional[str]]]:
        return self._read_array(self.read_string, "string array")

    # ------------------------------------------------------------------
    # records, collections and dynamic values

    def write_enum(self, value: Optional[enum.Enum]) -> None:
        """Write an enum member by name."""
        if value is not None and not isinstance(value, enum.Enum):
            raise EncodeError(f"Expected enum member, got {type(value).__name__}")
        self.write_string(None if value is None else value.name)

    def read_enum(self, enum_type: type[E]) -> Optional[E]:
        """Read an enum member of ``enum_type`` written by :meth:`write_enum`.

        Raises:
            DecodeError: If the name is not a member of ``enum_type``
        """
        name = self.read_string()
        if name is None:
            return None
        try:
            return enum_type[name]
        except KeyError as e:
            raise DecodeError(f"{name!r} is not a member of {enum_type.__name__}") from e

    def write_parcelable(self, value: Optional[Parcelable], flags: int = 0) -> None:
        """Write a nested record: its parcel name followed by its contents.

        Declarations (see :class:`parcelwire.models.Parcelled`) are written as
        their generated record.
        """
        if value is None:
            self.write_string(None)
            return
        name = getattr(type(value), "PARCEL_NAME", None)
        if name is None and callable(getattr(value, "to_record", None)):
            value = value.to_record()  # type: ignore[union-attr]
            name = getattr(type(value), "PARCEL_NAME", None)
        if name is None:
            raise EncodeError(
                f"{type(value).__name__} is not a generated record (no PARCEL_NAME)"
            )
        self.write_string(name)
        value.write_to_parcel(self, flags)

    def read_parcelable(self) -> Optional[Parcelable]:
        name = self.read_string()
        if name is None:
            return None
        record_class = lookup_record(name)
        return record_class.CREATOR.create_from_parcel(self)

    def write_list(self, values: Optional[Iterable[Any]]) -> None:
        """Write a list whose items are written as dynamic values."""
        if values is not None and not isinstance(values, (list, tuple)):
            values = list(values)
        self._write_array(values, self.write_value)  # type: ignore[arg-type]

    def read_list(self) -> Optional[List[Any]]:
        return self._read_array(self.read_value, "list")

    def write_map(self, values: Optional[Dict[Any, Any]]) -> None:
        """Write a mapping as count followed by dynamic key/value pairs."""
        if self._write_length(values):
            for key, item in values.items():  # type: ignore[union-attr]
                self.write_value(key)
                self.write_value(item)

    def read_map(self) -> Optional[Dict[Any, Any]]:
        """Read a map written by :meth:`write_map`.

        Keys written as tuples travel as lists and come back as tuples.

        Raises:
            DecodeError: If a key cannot be used as a dict key
        """
        length = self._read_length("map")
        if length == NULL_LENGTH:
            return None
        result: Dict[Any, Any] = {}
        for _ in range(length):
            key = _map_key(self.read_value())
            try:
                hash(key)
            except TypeError as e:
                raise DecodeError(f"Unhashable map key of type {type(key).__name__}") from e
            result[key] = self.read_value()
        return result

    def write_value(self, value: Any) -> None:
        """Write a value of any supported type behind a type tag.

        Raises:
            EncodeError: If the value's type has no dynamic representation
        """
        if value is None:
            self.write_int(ValueTag.NULL)
        elif isinstance(value, str):
            self.write_int(ValueTag.STRING)
            self.write_string(value)
        elif isinstance(value, bool):
            self.write_int(ValueTag.BOOLEAN)
            self.write_boolean(value)
        elif isinstance(value, int):
            if -(2**31) <= value < 2**31:
                self.write_int(ValueTag.INTEGER)
                self.write_int(value)
            else:
                self.write_int(ValueTag.LONG)
                self.write_long(value)
        elif isinstance(value, float):
            self.write_int(ValueTag.DOUBLE)
            self.write_double(value)
        elif isinstance(value, (bytes, bytearray)):
            self.write_int(ValueTag.BYTE_ARRAY)
            self.write_byte_array(value)
        elif isinstance(value, Parcelable):
            self.write_int(ValueTag.PARCELABLE)
            self.write_parcelable(value)
        elif isinstance(value, dict):
            self.write_int(ValueTag.MAP)
            self.write_map(value)
        elif isinstance(value, (list, tuple)):
            self.write_int(ValueTag.LIST)
            self.write_list(value)
        else:
            raise EncodeError(f"Cannot write value of type {type(value).__name__}")

    def read_value(self) -> Any:
        """Read a value written by :meth:`write_value`.

        Raises:
            DecodeError: If the type tag is unknown
        """
        tag = self.read_int()
        try:
            tag = ValueTag(tag)
        except ValueError as e:
            raise DecodeError(f"Unknown value tag {tag}") from e

        if tag is ValueTag.NULL:
            return None
        if tag is ValueTag.STRING:
            return self.read_string()
        if tag is ValueTag.BOOLEAN:
            return self.read_boolean()
        if tag is ValueTag.INTEGER:
            return self.read_int()
        if tag is ValueTag.LONG:
            return self.read_long()
        if tag is ValueTag.DOUBLE:
            return self.read_double()
        if tag is ValueTag.BYTE_ARRAY:
            return self.read_byte_array()
        if tag is ValueTag.PARCELABLE:
            return self.read_parcelable()
        if tag is ValueTag.MAP:
            return self.read_map()
        return self.read_list()

    def __repr__(self) -> str:
        return f"Parcel(size={len(self._buffer)}, position={self._position})"
