"""Wire marker types.

Python has a single ``int``, ``float`` and ``list``. These subclasses let a
declaration pick a specific fixed-width wire representation:

    >>> class Sample(Parcelled):
    ...     flags: Int8
    ...     timestamp_ms: Int64
    ...     readings: IntArray

Plain ``int`` is written as a 32-bit integer and plain ``float`` as a 64-bit
double. The markers behave exactly like their base type at runtime; pydantic
validates plain values into them, range-checked against the wire width.
"""

from __future__ import annotations

from typing import Any, ClassVar

from pydantic import GetCoreSchemaHandler
from pydantic_core import CoreSchema, core_schema

INT8_MIN, INT8_MAX = -(2**7), 2**7 - 1
INT16_MIN, INT16_MAX = -(2**15), 2**15 - 1
INT32_MIN, INT32_MAX = -(2**31), 2**31 - 1
INT64_MIN, INT64_MAX = -(2**63), 2**63 - 1


class _WireMarker:
    """Mixin turning ``_core`` into a pydantic schema that builds the marker."""

    _core: ClassVar[CoreSchema]

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> CoreSchema:
        return core_schema.no_info_after_validator_function(cls, cls._core)


class Int8(_WireMarker, int):
    """Signed 8-bit integer (wire kind BYTE)."""

    _core = core_schema.int_schema(ge=INT8_MIN, le=INT8_MAX)


class Int16(_WireMarker, int):
    """Signed 16-bit integer, carried as int32 on the wire (wire kind SHORT)."""

    _core = core_schema.int_schema(ge=INT16_MIN, le=INT16_MAX)


class Int64(_WireMarker, int):
    """Signed 64-bit integer (wire kind LONG)."""

    _core = core_schema.int_schema(ge=INT64_MIN, le=INT64_MAX)


class Float32(_WireMarker, float):
    """Single precision float (wire kind FLOAT)."""

    _core = core_schema.float_schema()


class Char(_WireMarker, str):
    """A single character, carried as its int32 code point (wire kind CHAR)."""

    _core = core_schema.str_schema(min_length=1, max_length=1)


class BoolArray(_WireMarker, list):
    """Array of booleans (wire kind BOOLEAN_ARRAY)."""

    _core = core_schema.list_schema(core_schema.bool_schema())


class CharArray(_WireMarker, list):
    """Array of single characters (wire kind CHAR_ARRAY)."""

    _core = core_schema.list_schema(core_schema.str_schema(min_length=1, max_length=1))


class IntArray(_WireMarker, list):
    """Array of 32-bit integers (wire kind INT_ARRAY)."""

    _core = core_schema.list_schema(core_schema.int_schema(ge=INT32_MIN, le=INT32_MAX))


class LongArray(_WireMarker, list):
    """Array of 64-bit integers (wire kind LONG_ARRAY)."""

    _core = core_schema.list_schema(core_schema.int_schema(ge=INT64_MIN, le=INT64_MAX))


class StringArray(_WireMarker, list):
    """Array of strings, entries may be None (wire kind STRING_ARRAY)."""

    _core = core_schema.list_schema(core_schema.nullable_schema(core_schema.str_schema()))
