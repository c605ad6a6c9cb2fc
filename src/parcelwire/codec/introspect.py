"""Schema extraction from Parcelled declarations.

This module introspects a Pydantic model and builds the Schema the generator
consumes. Declarations that break the structural rules still produce a
Schema; :func:`parcelwire.codec.schema.validate_schema` rejects them.
"""

from __future__ import annotations

import types
from typing import Annotated, Any, List, Optional, Tuple, Union, get_args, get_origin

from pydantic.fields import FieldInfo
from pydantic_core import PydanticUndefined

from ..models.base import Parcelled
from ..models.fields import UseAdapter, Versioned
from ..runtime import Constant
from .schema import FieldSpec, Schema, VersionRange

_UNION_TYPES = (Union, types.UnionType)


def unwrap_optional(annotation: Any) -> Tuple[Any, bool]:
    """Split ``Optional[T]`` into ``(T, True)``; other types give ``(T, False)``.

    A union of several non-None members stays a union and is resolved as a
    dynamic value.
    """
    if get_origin(annotation) not in _UNION_TYPES:
        return annotation, False
    args = get_args(annotation)
    non_none = [arg for arg in args if arg is not type(None)]
    if len(non_none) == len(args):
        return annotation, False
    if len(non_none) == 1:
        return non_none[0], True
    return Union[tuple(non_none)], True


def _strip_annotated(annotation: Any) -> Tuple[Any, List[Any]]:
    if get_origin(annotation) is Annotated:
        base, *metadata = get_args(annotation)
        return base, metadata
    return annotation, []


def _default_provider(field_info: FieldInfo) -> Optional[Any]:
    if field_info.default_factory is not None:
        return field_info.default_factory
    if field_info.default is not PydanticUndefined:
        return Constant(field_info.default)
    return None


def extract_field(name: str, field_info: FieldInfo) -> FieldSpec:
    """Build the FieldSpec of one pydantic field.

    Args:
        name: Field name
        field_info: Pydantic FieldInfo object

    Returns:
        FieldSpec with nullability, version window, adapter and default
    """
    annotation, metadata = _strip_annotated(field_info.annotation)
    metadata = list(field_info.metadata) + metadata

    declared_type, nullable = unwrap_optional(annotation)
    # Optional[Annotated[T, ...]] keeps its markers inside the union
    declared_type, inner = _strip_annotated(declared_type)
    metadata.extend(inner)

    versions = None
    adapter = None
    for marker in metadata:
        if isinstance(marker, Versioned):
            versions = VersionRange(after=marker.after, before=marker.before)
        elif isinstance(marker, UseAdapter):
            adapter = marker.adapter

    return FieldSpec(
        name=name,
        declared_type=declared_type,
        nullable=nullable,
        versions=versions,
        default=_default_provider(field_info),
        adapter=adapter,
    )


def _extends(model_cls: type) -> Optional[str]:
    for base in model_cls.__mro__[1:]:
        if base is not Parcelled and isinstance(base, type) and issubclass(base, Parcelled):
            return base.__qualname__
    return None


def build_schema(model_cls: Any) -> Schema:
    """Create a Schema from a Parcelled declaration.

    Args:
        model_cls: Parcelled subclass

    Returns:
        Schema describing the declaration

    Example:
        >>> schema = build_schema(Person)
        >>> [field.name for field in schema.fields]
        ['name', 'age', 'email']
    """
    if not (isinstance(model_cls, type) and issubclass(model_cls, Parcelled)) or model_cls is Parcelled:
        return Schema(
            name=getattr(model_cls, "__name__", repr(model_cls)),
            module=getattr(model_cls, "__module__", None) or "__main__",
            fields=(),
            is_record=False,
        )

    outer, _, name = model_cls.__qualname__.rpartition(".")

    fields = [extract_field(field_name, info) for field_name, info in model_cls.model_fields.items()]
    annotations = getattr(model_cls, "__annotations__", {})
    for private_name in model_cls.__private_attributes__:
        fields.append(
            FieldSpec(
                name=private_name,
                declared_type=annotations.get(private_name, Any),
                private=True,
            )
        )

    return Schema(
        name=name,
        module=model_cls.__module__,
        version=model_cls.parcel_version,
        fields=tuple(fields),
        enclosing=outer or None,
        is_private=name.startswith("_"),
        is_static="<locals>" not in outer,
        extends=_extends(model_cls),
    )
