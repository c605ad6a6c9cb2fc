"""Wire-type resolution.

Maps a field's declared type to the WireKind used to encode it. Types that
are not primitives or catalog members are resolved by walking their type
hierarchy depth-first: the type itself, then its directly declared
interfaces in declaration order, then its superclass, and so on up the
chain.

The hierarchy is read through a TypeHierarchy oracle so the search itself
does not depend on how classes are introspected. ClassHierarchy answers for
ordinary Python classes.
"""

from __future__ import annotations

import abc
import enum
import threading
from typing import Any, Dict, Optional, Protocol, Sequence, get_origin

from ..exceptions import SchemaError
from ..utils.log import get_logger
from .schema import FieldSpec
from .wire_kinds import WireKind, catalog_kind

logger = get_logger("resolver")


class TypeHierarchy(Protocol):
    """Oracle answering type-hierarchy questions for the resolver."""

    def erase(self, tp: Any) -> Any:
        """Strip type parameters (``list[int]`` -> ``list``)."""
        ...

    def interfaces(self, tp: Any) -> Sequence[Any]:
        """Directly declared interfaces of ``tp`` in declaration order."""
        ...

    def superclass(self, tp: Any) -> Optional[Any]:
        """Superclass of ``tp``, or None at the top of the chain."""
        ...

    def is_enum(self, tp: Any) -> bool:
        """Whether ``tp`` is an enumeration type."""
        ...


class ClassHierarchy:
    """TypeHierarchy over Python classes.

    Direct bases created by ``abc.ABCMeta`` (ABCs, Protocols, pydantic models)
    count as interfaces; the first remaining direct base other than
    ``object`` is the superclass.
    """

    def erase(self, tp: Any) -> Any:
        origin = get_origin(tp)
        return origin if origin is not None else tp

    def interfaces(self, tp: Any) -> Sequence[Any]:
        if not isinstance(tp, type):
            return ()
        return tuple(base for base in tp.__bases__ if isinstance(base, abc.ABCMeta))

    def superclass(self, tp: Any) -> Optional[Any]:
        if not isinstance(tp, type):
            return None
        for base in tp.__bases__:
            if base is not object and not isinstance(base, abc.ABCMeta):
                return base
        return None

    def is_enum(self, tp: Any) -> bool:
        return isinstance(tp, type) and issubclass(tp, enum.Enum)


class WireTypeResolver:
    """Resolve declared types to WireKinds.

    Results are cached per declared type. The resolver never mutates the
    oracle, so one instance can serve a whole batch.

    Example:
        >>> resolver = WireTypeResolver()
        >>> resolver.resolve(str)
        <WireKind.STRING: 'string'>

    Args:
        hierarchy: Type-hierarchy oracle (defaults to ClassHierarchy)
        strict: Raise SchemaError instead of falling back to WireKind.VALUE
    """

    def __init__(self, hierarchy: Optional[TypeHierarchy] = None, strict: bool = False) -> None:
        self.hierarchy: TypeHierarchy = hierarchy if hierarchy is not None else ClassHierarchy()
        self.strict = strict
        self._cache: Dict[Any, WireKind] = {}
        self._lock = threading.Lock()

    def resolve_field(self, field: FieldSpec) -> WireKind:
        """Resolve the WireKind of one field.

        Fields with a type adapter are always adapter-delegated.

        Raises:
            SchemaError: If resolution fails under strict mode
        """
        if field.adapter is not None:
            return WireKind.ADAPTER
        try:
            return self.resolve(field.declared_type)
        except SchemaError as e:
            raise SchemaError(f"Field {field.name}: {e}", field) from e

    def resolve(self, declared_type: Any) -> WireKind:
        """Resolve the WireKind of a declared type.

        Raises:
            SchemaError: If nothing matches and the resolver is strict
        """
        try:
            with self._lock:
                cached = self._cache.get(declared_type)
        except TypeError:
            cached = None
        if cached is not None:
            return cached

        kind = self._resolve_uncached(declared_type)

        try:
            with self._lock:
                self._cache[declared_type] = kind
        except TypeError:
            pass
        return kind

    def _resolve_uncached(self, declared_type: Any) -> WireKind:
        tp = self.hierarchy.erase(declared_type)
        kind = self._search(tp, set())

        # enums go by name unless they are records themselves
        if self.hierarchy.is_enum(tp) and kind is not WireKind.PARCELABLE:
            logger.debug("%r resolved to %s", declared_type, WireKind.ENUM)
            return WireKind.ENUM

        if kind is None:
            if self.strict:
                raise SchemaError(f"no wire representation for type {declared_type!r}", declared_type)
            logger.warning(
                "No wire representation for %r, falling back to dynamic values", declared_type
            )
            return WireKind.VALUE

        logger.debug("%r resolved to %s", declared_type, kind)
        return kind

    def _search(self, tp: Any, visited: set[int]) -> Optional[WireKind]:
        """Depth-first search: the type, its interfaces in order, then its superclass."""
        while tp is not None:
            if id(tp) in visited:
                return None
            visited.add(id(tp))

            kind = catalog_kind(tp)
            if kind is not None:
                return kind

            for iface in self.hierarchy.interfaces(tp):
                kind = self._search(iface, visited)
                if kind is not None:
                    return kind

            tp = self.hierarchy.superclass(tp)
        return None
