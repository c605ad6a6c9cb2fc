"""Record schema model.

A Schema is the ordered list of FieldSpecs of one record plus the schema
version. It is what the declaration front-end hands to the generator and
what every later stage (resolution, synthesis, assembly) consumes. Field
order is significant: it fixes the order of fields on the wire.
"""

from __future__ import annotations

import keyword
from typing import Any, Callable, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..exceptions import SchemaError
from ..runtime import ParcelTypeAdapter

# Members of generated records, plus the receivers of the methods that take
# one parameter per field
RESERVED_NAMES = frozenset(
    {
        "CREATOR",
        "FIELDS",
        "PARCEL_NAME",
        "SCHEMA_VERSION",
        "cls",
        "describe_contents",
        "from_parcel",
        "parcel_version",
        "self",
        "set_values",
        "with_defaults",
        "write_to_parcel",
    }
)


class VersionRange(BaseModel):
    """Window of schema versions for which a field is read back.

    Attributes:
        after: Lowest version (inclusive) the field is read for, None for unbounded
        before: Highest version (inclusive) the field is read for, None for unbounded
    """

    model_config = ConfigDict(frozen=True)

    after: Optional[int] = Field(default=None, ge=1)
    before: Optional[int] = Field(default=None, ge=1)

    @model_validator(mode="after")
    def _check_window(self) -> VersionRange:
        if self.after is not None and self.before is not None and self.after > self.before:
            raise ValueError(
                f"empty version window: after={self.after} > before={self.before}"
            )
        return self

    @property
    def is_bounded(self) -> bool:
        return self.after is not None or self.before is not None

    def __str__(self) -> str:
        low = "*" if self.after is None else str(self.after)
        high = "*" if self.before is None else str(self.before)
        return f"[{low}..{high}]"


class FieldSpec(BaseModel):
    """Schema information for a single field.

    Attributes:
        name: Field name, unique within the schema
        declared_type: Python type of the field (nullability stripped)
        nullable: Whether None is a legal value (adds a presence flag on the wire)
        versions: Optional version window gating decode
        default: Zero-argument provider used by the defaulted constructor
        adapter: Optional ParcelTypeAdapter subclass overriding the wire encoding
        private: Restricted field, excluded from the codec
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str
    declared_type: Any
    nullable: bool = False
    versions: Optional[VersionRange] = None
    default: Optional[Callable[[], Any]] = None
    adapter: Optional[type[ParcelTypeAdapter]] = None
    private: bool = False

    def __str__(self) -> str:
        return self.name


class Schema(BaseModel):
    """Schema information for an entire record.

    Besides the fields, the schema carries facts about the declaration the
    front-end found it on; they only matter for validation.

    Attributes:
        name: Simple name of the declaration
        module: Dotted module the declaration lives in
        version: Schema version written in front of every encoded record
        fields: Ordered field specs (wire order)
        enclosing: Qualified name of the enclosing type for nested declarations
        is_private: Whether the declaration is private
        is_static: Whether a nested declaration is reachable without an instance
        extends: Name of a parcelled ancestor, if the declaration has one
        is_record: Whether the declaration is a record type at all
    """

    model_config = ConfigDict(frozen=True)

    name: str
    module: str = "__main__"
    version: int = Field(default=1, ge=1)
    fields: Tuple[FieldSpec, ...]
    enclosing: Optional[str] = None
    is_private: bool = False
    is_static: bool = True
    extends: Optional[str] = None
    is_record: bool = True

    @property
    def qualified_name(self) -> str:
        if self.enclosing:
            return f"{self.module}.{self.enclosing}.{self.name}"
        return f"{self.module}.{self.name}"

    @property
    def flat_name(self) -> str:
        """Name with enclosing types joined by underscores (``Outer_Inner``)."""
        if self.enclosing:
            return "_".join(self.enclosing.split(".") + [self.name])
        return self.name

    def __str__(self) -> str:
        return self.qualified_name


def validate_schema(schema: Schema) -> Tuple[FieldSpec, ...]:
    """Check the structural rules of a schema.

    Args:
        schema: Schema to check

    Returns:
        The ordered non-private fields, which all later stages consume

    Raises:
        SchemaError: If the schema cannot be generated
    """
    if not schema.is_record:
        raise SchemaError(f"{schema.name}: only record classes can be parcelled", schema)

    if schema.extends is not None:
        raise SchemaError(
            f"{schema.name}: one parcelled class shall not extend another ({schema.extends})",
            schema,
        )

    if schema.enclosing is not None:
        if schema.is_private:
            raise SchemaError(f"{schema.name}: parcelled class must not be private", schema)
        if not schema.is_static:
            raise SchemaError(f"{schema.name}: nested parcelled class must be static", schema)

    fields = tuple(field for field in schema.fields if not field.private)
    if not fields:
        if schema.fields:
            raise SchemaError(f"{schema.name}: all fields are declared private", schema)
        raise SchemaError(f"{schema.name}: record declares no fields", schema)

    seen: set[str] = set()
    for field in fields:
        if not field.name.isidentifier() or keyword.iskeyword(field.name):
            raise SchemaError(
                f"{schema.name}.{field.name}: field name is not a valid identifier", field
            )
        if field.name.startswith("_") or field.name in RESERVED_NAMES:
            raise SchemaError(
                f"{schema.name}.{field.name}: field name clashes with a generated member", field
            )
        if field.name in seen:
            raise SchemaError(f"{schema.name}.{field.name}: duplicate field name", field)
        seen.add(field.name)

    return fields
