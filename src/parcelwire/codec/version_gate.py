"""Per-field version gating.

A field's VersionRange decides whether the field is read back when decoding
a buffer carrying a given version tag. Gating only applies to decode: encode
always writes every declared field, so a buffer written by the current schema
carries the newest shape and only the interpretation of older (or newer)
buffers is gated.
"""

from __future__ import annotations

from typing import Optional

from .schema import VersionRange


def is_active(versions: Optional[VersionRange], runtime_version: int) -> bool:
    """Return True if a field with ``versions`` is read for ``runtime_version``.

    Args:
        versions: The field's version window, None for always active
        runtime_version: Version tag read from the buffer

    Returns:
        Whether the field's payload is present for that version
    """
    if versions is None:
        return True
    if versions.after is not None and runtime_version < versions.after:
        return False
    if versions.before is not None and runtime_version > versions.before:
        return False
    return True


def gate_condition(versions: Optional[VersionRange], subject: str) -> Optional[str]:
    """Render the gate of ``versions`` as a Python expression over ``subject``.

    Returns None when the field is not gated at all.

    Example:
        >>> gate_condition(VersionRange(after=2, before=4), "self._version")
        'self._version >= 2 and self._version <= 4'
    """
    if versions is None:
        return None
    terms = []
    if versions.after is not None:
        terms.append(f"{subject} >= {versions.after}")
    if versions.before is not None:
        terms.append(f"{subject} <= {versions.before}")
    if not terms:
        return None
    return " and ".join(terms)
