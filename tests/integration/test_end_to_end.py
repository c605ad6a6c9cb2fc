"""End-to-end integration tests."""

from __future__ import annotations

import enum
import struct
from datetime import date
from typing import Annotated, ClassVar, List, Optional

import pytest
from pydantic import Field

from parcelwire import (
    FieldSpec,
    Int16,
    Parcel,
    Parcelled,
    ParcelTypeAdapter,
    Schema,
    UseAdapter,
    Versioned,
    decode,
    encode,
    encoded_size,
    generate,
)
from parcelwire.codec import assemble, generated_record, materialize
from parcelwire.runtime import lookup_record


class DateAdapter(ParcelTypeAdapter[date]):
    """Dates travel as their proleptic ordinal."""

    def from_parcel(self, parcel: Parcel) -> date:
        return date.fromordinal(parcel.read_int())

    def to_parcel(self, value: date, parcel: Parcel) -> None:
        parcel.write_int(value.toordinal())


class Role(enum.Enum):
    """Staff role."""

    ENGINEER = "engineer"
    MANAGER = "manager"


class Person(Parcelled):
    """Contact record used by the demo."""

    name: str
    age: Int16
    email: Optional[str] = None
    role: Role = Role.ENGINEER
    birthday: Annotated[date, UseAdapter(DateAdapter)]
    hired: Annotated[Optional[date], UseAdapter(DateAdapter)] = None
    tags: List[str] = Field(default_factory=list)
    nickname: Annotated[Optional[str], Versioned(after=2)] = None

    parcel_version: ClassVar[int] = 2


class Team(Parcelled):
    """Record nesting other records."""

    title: str
    lead: Person
    deputy: Optional[Person] = None
    members: List[Person] = Field(default_factory=list)


class Retired(Parcelled):
    """Version 2 record whose trailing field was read only up to version 1."""

    name: str
    legacy_code: Annotated[int, Versioned(before=1)] = 5

    parcel_version: ClassVar[int] = 2


class Grown(Parcelled):
    """Version 2 record whose added field has no default."""

    kept: int
    added: Annotated[int, Versioned(after=2)]

    parcel_version: ClassVar[int] = 2


class Badge(Parcelled):
    """Declaration only reachable through a list."""

    code: str


class Roster(Parcelled):
    """Record listing badges."""

    badges: List[Badge] = Field(default_factory=list)


class Counter(Parcelled):
    label: Optional[str] = None
    count: int


ADA = Person(
    name="Ada",
    age=36,
    email="ada@example.org",
    birthday=date(1815, 12, 10),
    tags=["math", "engines"],
    nickname="Countess",
)


class TestEndToEndWorkflow:
    """Test complete end-to-end workflows."""

    def test_person_workflow(self) -> None:
        """Test complete person workflow."""
        # 1. Encode
        data = encode(ADA)
        assert len(data) == encoded_size(ADA)

        # 2. Version tag leads the buffer
        assert Parcel(data).read_int() == 2

        # 3. Decode back to the declaration
        decoded = decode(Person, data)
        assert decoded == ADA
        assert isinstance(decoded, Person)

    def test_person_record(self) -> None:
        """Test the generated record mirrors the declaration."""
        record_cls = generate(Person)
        assert record_cls.__name__ == "Parcelled_Person"
        assert record_cls.FIELDS == (
            "name",
            "age",
            "email",
            "role",
            "birthday",
            "hired",
            "tags",
            "nickname",
        )

        record = record_cls.CREATOR.create_from_parcel(Parcel(encode(ADA)))
        assert record.birthday == date(1815, 12, 10)
        assert record.role is Role.ENGINEER
        assert record.hired is None

    def test_defaulted_constructor(self) -> None:
        """Test the defaulted constructor applies providers."""
        record_cls = generate(Person)
        record = record_cls.with_defaults(name="Grace", age=40, birthday=date(1906, 12, 9))
        assert record.email is None
        assert record.role is Role.ENGINEER
        assert record.tags == []
        other = record_cls.with_defaults(name="Alan", age=41, birthday=date(1912, 6, 23))
        assert record.tags is not other.tags

        decoded = decode(record_cls, encode(record))
        assert decoded == record

    def test_shared_adapter_instance(self) -> None:
        """Test two fields using one adapter share a single instance."""
        generated = generated_record(Person)
        assert list(generated.adapters) == [DateAdapter]
        assert generated.record.body.count("DateAdapter()") == 1

    def test_listed_records_registered(self) -> None:
        """Test declarations inside a list are registered with their holder."""
        generate(Roster)
        badge_cls = lookup_record(f"{Badge.__module__}.Parcelled_Badge")
        assert badge_cls is generate(Badge)

        data = encode(generate(Roster)([badge_cls("A1")]))
        assert decode(Roster, data) == Roster(badges=[Badge(code="A1")])

    def test_nested_records(self) -> None:
        """Test records nested directly and inside lists."""
        grace = Person(name="Grace", age=40, birthday=date(1906, 12, 9))
        team = Team(title="Compilers", lead=grace, members=[grace, ADA])
        decoded = decode(Team, encode(team))
        assert decoded == team
        assert decoded.deputy is None
        assert decoded.members[1].nickname == "Countess"


class TestWireScenarios:
    """Test exact wire layouts."""

    def test_label_count_buffer(self) -> None:
        """Test a null label and a count encode as [1][1][7]."""
        schema = Schema(
            name="Tally",
            module="tests.integration.tally",
            version=1,
            fields=(
                FieldSpec(name="label", declared_type=str, nullable=True),
                FieldSpec(name="count", declared_type=int),
            ),
        )
        record_cls = materialize(assemble(schema))

        data = encode(record_cls(None, 7))
        assert data == struct.pack("<iii", 1, 1, 7)

        decoded = decode(record_cls, data, strict=True)
        assert decoded.label is None
        assert decoded.count == 7

    def test_label_present(self) -> None:
        """Test a present label writes flag 0 and its payload."""
        data = encode(Counter(label="hi", count=7))
        assert data == struct.pack("<iii", 1, 0, 2) + b"hi" + struct.pack("<i", 7)

    def test_field_gated_before_current_version(self) -> None:
        """Test a before=1 field is written but skipped when reading version 2."""
        data = encode(Retired(name="Ada", legacy_code=9))
        assert data.endswith(struct.pack("<i", 9))

        record = decode(generate(Retired), data)
        assert record.legacy_code == 0

        declaration = decode(Retired, data)
        assert declaration.legacy_code == 5

    def test_field_read_for_old_buffer(self) -> None:
        """Test a version 1 buffer still carries the retired field."""
        data = struct.pack("<ii", 1, 3) + b"Ada" + struct.pack("<i", 9)
        assert decode(Retired, data, strict=True).legacy_code == 9

    def test_added_field_without_default(self) -> None:
        """Test a version 1 buffer decodes when the added field has no default."""
        decoded = decode(Grown, struct.pack("<ii", 1, 5), strict=True)
        assert decoded == Grown(kept=5, added=0)

        assert decode(Grown, encode(Grown(kept=5, added=7))).added == 7

    @pytest.mark.parametrize("version", [1, 3])
    def test_newer_field_skipped_outside_window(self, version: int) -> None:
        """Test nickname is read only from version 2 on."""
        data = struct.pack("<i", version) + encode(ADA)[4:]

        decoded = decode(generate(Person), data)
        assert decoded.parcel_version == version
        if version >= 2:
            assert decoded.nickname == "Countess"
        else:
            assert decoded.nickname is None
