"""Property-based tests using hypothesis."""

from __future__ import annotations

from typing import Annotated, ClassVar, List, Optional

from hypothesis import given
from hypothesis import strategies as st

from parcelwire import Int64, Parcel, Parcelled, Versioned, decode, encode, generate
from parcelwire.codec.schema import VersionRange
from parcelwire.codec.version_gate import gate_condition, is_active

INT32 = st.integers(min_value=-(2**31), max_value=2**31 - 1)
TEXT = st.text(max_size=50)


class BoundedMessage(Parcelled):
    """Record for property testing."""

    value: int
    flag: bool
    label: Optional[str] = None
    stamp: Int64 = 0
    counts: List[int] = []


class Evolving(Parcelled):
    """Record whose trailing field is gated."""

    name: str
    added: Annotated[Optional[str], Versioned(after=2)] = None

    parcel_version: ClassVar[int] = 3


class TestCodecProperties:
    """Property-based tests for codec."""

    @given(
        value=INT32,
        flag=st.booleans(),
        label=st.none() | TEXT,
        stamp=st.integers(min_value=-(2**63), max_value=2**63 - 1),
        counts=st.lists(INT32, max_size=10),
    )
    def test_encode_decode_roundtrip(
        self, value: int, flag: bool, label: Optional[str], stamp: int, counts: List[int]
    ) -> None:
        """Test decode(encode(r)) gives r back."""
        msg = BoundedMessage(value=value, flag=flag, label=label, stamp=stamp, counts=counts)
        assert decode(BoundedMessage, encode(msg)) == msg

    @given(value=INT32, flag=st.booleans(), label=st.none() | TEXT)
    def test_encode_deterministic(self, value: int, flag: bool, label: Optional[str]) -> None:
        """Test encoding is deterministic."""
        first = BoundedMessage(value=value, flag=flag, label=label)
        second = BoundedMessage(value=value, flag=flag, label=label)
        assert encode(first) == encode(second)

    @given(label=st.none() | TEXT)
    def test_presence_flag(self, label: Optional[str]) -> None:
        """Test the flag is 1 for null and 0 for present values."""
        data = encode(BoundedMessage(value=0, flag=False, label=label))
        reader = Parcel(data)
        reader.read_int()  # version
        reader.read_int()  # value
        reader.read_int()  # flag
        assert reader.read_int() == (1 if label is None else 0)

    @given(version=st.integers(min_value=1, max_value=5), name=TEXT, added=st.none() | TEXT)
    def test_gated_trailing_field(self, version: int, name: str, added: Optional[str]) -> None:
        """Test the gated field is read only inside its window."""
        record_cls = generate(Evolving)
        parcel = Parcel()
        parcel.write_int(version)
        parcel.write_string(name)
        if added is None:
            parcel.write_int(1)
        else:
            parcel.write_int(0)
            parcel.write_string(added)

        decoded = record_cls.from_parcel(Parcel(parcel.marshall()))
        assert decoded.name == name
        assert decoded.added == (added if version >= 2 else None)


class TestVersionGateProperties:
    """Property-based tests for version windows."""

    @given(
        after=st.none() | st.integers(min_value=1, max_value=10),
        before=st.none() | st.integers(min_value=1, max_value=10),
        version=st.integers(min_value=1, max_value=12),
    )
    def test_condition_matches_predicate(
        self, after: Optional[int], before: Optional[int], version: int
    ) -> None:
        """Test the rendered condition agrees with is_active."""
        if after is not None and before is not None and after > before:
            return
        versions = VersionRange(after=after, before=before)
        condition = gate_condition(versions, "v")
        expected = is_active(versions, version)
        if condition is None:
            assert expected
        else:
            assert eval(condition, {}, {"v": version}) is expected
