"""Record generation and wire codec for parcelwire.

This module provides schema validation, wire-type resolution, codec
synthesis and output assembly, plus the Parcel wire buffer and the top-level
encode/decode functions.
"""

from __future__ import annotations

from .assembler import GeneratedArtifact, GeneratedRecord, NameAllocator, RecordAssembler, assemble, materialize
from .decoder import decode
from .encoder import encode, encoded_size
from .introspect import build_schema
from .parcel import Parcel, ValueTag
from .processor import (
    CollectingDiagnostics,
    DiagnosticsSink,
    FileArtifactWriter,
    LoggingDiagnostics,
    RecordProcessor,
    generate,
    generated_record,
    process_batch,
)
from .resolver import ClassHierarchy, TypeHierarchy, WireTypeResolver
from .schema import FieldSpec, Schema, VersionRange, validate_schema
from .version_gate import gate_condition, is_active
from .wire_kinds import WireKind

__all__ = [
    "encode",
    "decode",
    "encoded_size",
    "generate",
    "generated_record",
    "process_batch",
    "build_schema",
    "Parcel",
    "ValueTag",
    "Schema",
    "FieldSpec",
    "VersionRange",
    "validate_schema",
    "WireKind",
    "WireTypeResolver",
    "TypeHierarchy",
    "ClassHierarchy",
    "is_active",
    "gate_condition",
    "RecordAssembler",
    "NameAllocator",
    "GeneratedArtifact",
    "GeneratedRecord",
    "assemble",
    "materialize",
    "RecordProcessor",
    "DiagnosticsSink",
    "LoggingDiagnostics",
    "CollectingDiagnostics",
    "FileArtifactWriter",
]
