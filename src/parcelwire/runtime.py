"""Runtime support shared by generated records.

Generated modules import everything they need from here: the
:class:`Parcelable` contract, the :class:`Creator` factory, the
:class:`ParcelTypeAdapter` base for custom codecs and the :class:`Constant`
default provider. The record registry lets nested parcelables and dynamic
values be decoded by name.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Dict, Generic, List, Optional, TypeVar

from .exceptions import DecodeError

if TYPE_CHECKING:
    from .codec.parcel import Parcel

T = TypeVar("T")


class Parcelable(ABC):
    """Contract of every record that can be written to a parcel."""

    @abstractmethod
    def write_to_parcel(self, dest: "Parcel", flags: int = 0) -> None:
        """Write this record into ``dest``."""

    @abstractmethod
    def describe_contents(self) -> int:
        """Describe special objects contained in this record (always 0)."""


class ParcelTypeAdapter(ABC, Generic[T]):
    """Custom codec for a single field type.

    One instance is shared by every field of a record that names the same
    adapter class, and by every encode/decode call, so implementations must be
    stateless or thread-safe.

    Example:
        >>> class DateAdapter(ParcelTypeAdapter[date]):
        ...     def from_parcel(self, parcel):
        ...         return date.fromordinal(parcel.read_int())
        ...     def to_parcel(self, value, parcel):
        ...         parcel.write_int(value.toordinal())
    """

    @abstractmethod
    def from_parcel(self, parcel: "Parcel") -> T:
        """Create a new value from the contents of ``parcel``."""

    @abstractmethod
    def to_parcel(self, value: T, parcel: "Parcel") -> None:
        """Write ``value`` into ``parcel``."""


class Creator(Generic[T]):
    """Factory attached to a generated record class as ``CREATOR``."""

    def __init__(self, record_class: type) -> None:
        self.record_class = record_class

    def create_from_parcel(self, parcel: "Parcel") -> T:
        """Decode one record from ``parcel``."""
        return self.record_class.from_parcel(parcel)

    def new_array(self, size: int) -> List[Optional[T]]:
        """Return an array of ``size`` empty record slots."""
        if size < 0:
            raise ValueError(f"new_array size must be non-negative, got {size}")
        return [None] * size

    def __repr__(self) -> str:
        return f"Creator({self.record_class.__name__})"


class Constant:
    """Default provider that always returns the same value.

    Mutable values are handed out as-is, use a factory function for those.
    """

    def __init__(self, value: Any) -> None:
        self.value = value

    def __call__(self) -> Any:
        return self.value

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Constant) and other.value == self.value

    def __hash__(self) -> int:
        return hash(repr(self.value))

    def __repr__(self) -> str:
        return f"Constant({self.value!r})"


_registry: Dict[str, type] = {}
_registry_lock = threading.Lock()


def register_record(name: str, record_class: type) -> None:
    """Register a generated record class under its parcel name."""
    with _registry_lock:
        _registry[name] = record_class


def lookup_record(name: str) -> type:
    """Find a record class by parcel name.

    Only registered records are found; nothing is imported on behalf of a
    buffer. Written record modules register themselves when imported.

    Raises:
        DecodeError: If no record is registered under that name
    """
    with _registry_lock:
        record_class = _registry.get(name)
    if record_class is None:
        raise DecodeError(f"Unknown parcelable record {name!r}")
    return record_class
