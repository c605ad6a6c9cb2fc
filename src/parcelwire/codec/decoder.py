"""Top-level decoder.

This module provides the decode() function that reads one record back from
its wire format.
"""

from __future__ import annotations

from typing import Any, Dict

from pydantic import ValidationError

from ..exceptions import DecodeError
from ..models.base import Parcelled
from .parcel import Parcel
from .processor import generate, generated_record
from .version_gate import is_active


def decode(record_cls: type, data: bytes, strict: bool = False) -> Any:
    """Decode a record from its wire format.

    Fields outside their version window for the version tag in ``data`` are
    not read; they keep their wire kind's zero value.

    Args:
        record_cls: Generated record class, or a Parcelled declaration
        data: Bytes written by :func:`encode`
        strict: Reject trailing bytes after the record

    Returns:
        A generated record instance, or a declaration instance when
        ``record_cls`` is a Parcelled declaration

    Raises:
        SchemaError: If the declaration cannot be generated
        DecodeError: If data is truncated, corrupted, or doesn't match the record
    """
    declaration = None
    if isinstance(record_cls, type) and issubclass(record_cls, Parcelled):
        declaration = record_cls
        record_cls = generate(declaration)

    creator = getattr(record_cls, "CREATOR", None)
    if creator is None:
        raise DecodeError(f"{getattr(record_cls, '__name__', record_cls)!r} has no CREATOR")

    parcel = Parcel(data)
    record = creator.create_from_parcel(parcel)
    if strict and parcel.data_avail():
        raise DecodeError(f"{parcel.data_avail()} trailing bytes after {record_cls.__name__}")

    if declaration is None:
        return record
    return _to_declaration(declaration, record)


def _to_declaration(declaration: type[Parcelled], record: Any) -> Parcelled:
    """Build a declaration instance from a decoded record.

    Fields skipped by the version gate are left out so the declaration's own
    defaults apply. A skipped field without a default keeps the zero value the
    record decoded it as.
    """
    values: Dict[str, Any] = {}
    model_fields = declaration.model_fields
    for resolved in generated_record(declaration).fields:
        active = is_active(resolved.versions, record.parcel_version)
        if active or model_fields[resolved.name].is_required():
            values[resolved.name] = getattr(record, resolved.name)
    try:
        return declaration.model_validate(values, from_attributes=True)
    except ValidationError as e:
        raise DecodeError(f"Failed to construct {declaration.__name__}: {e}") from e
