"""Catalog of canonical wire representations.

Every field of a record is written with exactly one WireKind. The catalog
maps Python types (and the marker types from :mod:`parcelwire.models.types`)
to their kind; anything outside it is resolved through the type hierarchy
by :mod:`parcelwire.codec.resolver`.
"""

from __future__ import annotations

import collections.abc
import enum
from typing import Any, Dict, Optional

from ..models.types import (
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
from ..runtime import Parcelable


class WireKind(enum.Enum):
    """Closed set of wire representations."""

    # fixed-width primitives
    BOOLEAN = "boolean"
    BYTE = "byte"
    SHORT = "short"
    CHAR = "char"
    INT = "int"
    LONG = "long"
    FLOAT = "float"
    DOUBLE = "double"

    # length-prefixed
    STRING = "string"
    BOOLEAN_ARRAY = "boolean[]"
    BYTE_ARRAY = "byte[]"
    CHAR_ARRAY = "char[]"
    INT_ARRAY = "int[]"
    LONG_ARRAY = "long[]"
    STRING_ARRAY = "string[]"

    # references and collections
    PARCELABLE = "parcelable"
    LIST = "list"
    MAP = "map"

    # special arms
    ENUM = "enum"
    ADAPTER = "adapter"
    VALUE = "value"

    @property
    def is_primitive(self) -> bool:
        return self in _PRIMITIVE_KINDS

    @property
    def wire_size(self) -> Optional[int]:
        """Encoded size in bytes, None for variable-length kinds."""
        return _WIRE_SIZES.get(self)

    def zero_value(self) -> Any:
        """Value a field of this kind holds when decode skips it."""
        if self is WireKind.BOOLEAN:
            return False
        if self is WireKind.CHAR:
            return "\0"
        if self in (WireKind.FLOAT, WireKind.DOUBLE):
            return 0.0
        if self in _PRIMITIVE_KINDS:
            return 0
        return None


_PRIMITIVE_KINDS = frozenset(
    {
        WireKind.BOOLEAN,
        WireKind.BYTE,
        WireKind.SHORT,
        WireKind.CHAR,
        WireKind.INT,
        WireKind.LONG,
        WireKind.FLOAT,
        WireKind.DOUBLE,
    }
)

# SHORT, CHAR and BOOLEAN travel as int32
_WIRE_SIZES = {
    WireKind.BOOLEAN: 4,
    WireKind.BYTE: 1,
    WireKind.SHORT: 4,
    WireKind.CHAR: 4,
    WireKind.INT: 4,
    WireKind.LONG: 8,
    WireKind.FLOAT: 4,
    WireKind.DOUBLE: 8,
}

# bool must be looked up by identity, it is an int subclass
PRIMITIVES: Dict[type, WireKind] = {
    bool: WireKind.BOOLEAN,
    Int8: WireKind.BYTE,
    Int16: WireKind.SHORT,
    Char: WireKind.CHAR,
    int: WireKind.INT,
    Int64: WireKind.LONG,
    Float32: WireKind.FLOAT,
    float: WireKind.DOUBLE,
}

CATALOG: Dict[type, WireKind] = {
    str: WireKind.STRING,
    bytes: WireKind.BYTE_ARRAY,
    bytearray: WireKind.BYTE_ARRAY,
    BoolArray: WireKind.BOOLEAN_ARRAY,
    CharArray: WireKind.CHAR_ARRAY,
    IntArray: WireKind.INT_ARRAY,
    LongArray: WireKind.LONG_ARRAY,
    StringArray: WireKind.STRING_ARRAY,
    Parcelable: WireKind.PARCELABLE,
    list: WireKind.LIST,
    tuple: WireKind.LIST,
    collections.abc.Sequence: WireKind.LIST,
    collections.abc.MutableSequence: WireKind.LIST,
    dict: WireKind.MAP,
    collections.abc.Mapping: WireKind.MAP,
    collections.abc.MutableMapping: WireKind.MAP,
}


def is_primitive(tp: Any) -> bool:
    """Return True if ``tp`` is a primitive or marker-primitive type."""
    try:
        return tp in PRIMITIVES
    except TypeError:
        return False


def is_catalog_type(tp: Any) -> bool:
    """Return True if ``tp`` itself is a catalog member (not via its bases)."""
    try:
        return tp in CATALOG
    except TypeError:
        return False


def catalog_kind(tp: Any) -> Optional[WireKind]:
    """Return the WireKind for a primitive or catalog type, or None."""
    if is_primitive(tp):
        return PRIMITIVES[tp]
    if is_catalog_type(tp):
        return CATALOG[tp]
    return None
