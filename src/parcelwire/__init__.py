"""parcelwire: Versioned Parcelable Records

A Python library that generates parcelable record classes from declarative
Pydantic schemas. Each generated record writes itself into a sequential
binary buffer and reads itself back, with per-field version gating, presence
flags for nullable fields and pluggable type adapters.

Key Features:
- Pydantic-based record declarations
- Wire type resolved from the declared type hierarchy
- Per-field version windows for backward-compatible decoding
- Generated records can be loaded in-process or written out as modules

Quick Start:
    >>> from typing import Optional
    >>> from parcelwire import Parcelled, encode, decode
    >>>
    >>> class Person(Parcelled):
    ...     name: str
    ...     age: int
    ...     email: Optional[str] = None
    >>>
    >>> data = encode(Person(name="Ada", age=36))
    >>> decoded = decode(Person, data)
"""

from __future__ import annotations

from .codec import (
    CollectingDiagnostics,
    FieldSpec,
    FileArtifactWriter,
    LoggingDiagnostics,
    Parcel,
    RecordProcessor,
    Schema,
    VersionRange,
    WireKind,
    WireTypeResolver,
    build_schema,
    decode,
    encode,
    encoded_size,
    generate,
    process_batch,
)
from .config import DEFAULT_CONFIG, GeneratorConfig
from .exceptions import DecodeError, EncodeError, ParcelwireError, SchemaError
from .models import (
    BoolArray,
    Char,
    CharArray,
    Float32,
    Int8,
    Int16,
    Int64,
    IntArray,
    LongArray,
    Parcelled,
    StringArray,
    UseAdapter,
    Versioned,
)
from .runtime import Constant, Creator, Parcelable, ParcelTypeAdapter
from .utils import configure_logging, get_logger

__version__ = "0.1.0"

__all__ = [
    # Core API
    "Parcelled",
    "encode",
    "decode",
    "generate",
    "process_batch",
    "encoded_size",
    # Field annotations
    "Versioned",
    "UseAdapter",
    # Marker types
    "Int8",
    "Int16",
    "Int64",
    "Float32",
    "Char",
    "BoolArray",
    "CharArray",
    "IntArray",
    "LongArray",
    "StringArray",
    # Runtime
    "Parcel",
    "Parcelable",
    "ParcelTypeAdapter",
    "Creator",
    "Constant",
    # Schema and generation
    "Schema",
    "FieldSpec",
    "VersionRange",
    "WireKind",
    "WireTypeResolver",
    "build_schema",
    "RecordProcessor",
    "LoggingDiagnostics",
    "CollectingDiagnostics",
    "FileArtifactWriter",
    "GeneratorConfig",
    "DEFAULT_CONFIG",
    # Exceptions
    "ParcelwireError",
    "SchemaError",
    "EncodeError",
    "DecodeError",
    # Logging
    "configure_logging",
    "get_logger",
    # Version
    "__version__",
]
