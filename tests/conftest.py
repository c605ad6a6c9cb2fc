"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import pytest

from parcelwire import CollectingDiagnostics, Parcel, WireTypeResolver


@pytest.fixture
def diagnostics() -> CollectingDiagnostics:
    """Diagnostics sink that records every report."""
    return CollectingDiagnostics()


@pytest.fixture
def resolver() -> WireTypeResolver:
    """Fresh resolver with an empty cache."""
    return WireTypeResolver()


@pytest.fixture
def parcel() -> Parcel:
    """Empty parcel to write into."""
    return Parcel()
