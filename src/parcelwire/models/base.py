"""Base declaration class and parcelwire-specific Pydantic configuration.

This module provides the Parcelled class that every parcelable declaration
inherits from.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar

from pydantic import BaseModel, ConfigDict

from ..runtime import Parcelable

if TYPE_CHECKING:
    from ..codec.parcel import Parcel


class Parcelled(BaseModel, Parcelable):
    """Base class for all parcelable declarations.

    Fields are ordinary annotations; their order is the wire order. The
    generated record for a declaration is built on first use (see
    :func:`parcelwire.generate`).

    Per-declaration options are ClassVar attributes:

    Example:
        >>> from typing import ClassVar, Optional
        >>> class Person(Parcelled):
        ...     name: str
        ...     age: int
        ...     email: Optional[str] = None
        ...
        ...     parcel_version: ClassVar[int] = 2

    Attributes:
        parcel_version: Schema version written in front of every record
    """

    model_config = ConfigDict(
        # Wire types such as enums and adapter-backed values
        arbitrary_types_allowed=True,
        validate_assignment=True,
        extra="forbid",
    )

    parcel_version: ClassVar[int] = 1

    def to_record(self) -> Any:
        """Return the generated record holding this declaration's field values."""
        from ..codec.processor import generate

        record_cls = generate(type(self))
        return record_cls(*(getattr(self, name) for name in record_cls.FIELDS))

    def write_to_parcel(self, dest: Parcel, flags: int = 0) -> None:
        self.to_record().write_to_parcel(dest, flags)

    def describe_contents(self) -> int:
        return 0
