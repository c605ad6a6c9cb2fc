"""Field annotations for parcelled declarations.

These markers go inside ``typing.Annotated`` next to the field type:

    >>> class Person(Parcelled):
    ...     name: str
    ...     nickname: Annotated[Optional[str], Versioned(after=2)]
    ...     birthday: Annotated[date, UseAdapter(DateAdapter)]

They carry no validation of their own; the schema front-end reads them from
the pydantic field metadata.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..runtime import ParcelTypeAdapter


@dataclass(frozen=True)
class Versioned:
    """Version window gating how a field is decoded.

    The field is read back only from buffers whose version tag ``v``
    satisfies ``after <= v <= before``; either bound may be omitted. Encode
    always writes the field.

    Args:
        after: Lowest version (inclusive) carrying the field
        before: Highest version (inclusive) carrying the field
    """

    after: Optional[int] = None
    before: Optional[int] = None


@dataclass(frozen=True)
class UseAdapter:
    """Encode a field with a custom ParcelTypeAdapter.

    Args:
        adapter: ParcelTypeAdapter subclass, instantiated once per record class
    """

    adapter: type[ParcelTypeAdapter]

    def __post_init__(self) -> None:
        if not (isinstance(self.adapter, type) and issubclass(self.adapter, ParcelTypeAdapter)):
            raise TypeError(f"UseAdapter expects a ParcelTypeAdapter subclass, got {self.adapter!r}")
