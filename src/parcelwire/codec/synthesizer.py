"""Codec synthesis.

Emits, for each field in declaration order, the Python statements that write
the field into a parcel and the statements that read it back. Nullable fields
carry a presence flag (0 = present, 1 = null) in front of the payload; reads
are wrapped in the field's version gate, writes never are.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional

from .schema import FieldSpec
from .version_gate import gate_condition
from .wire_kinds import WireKind

INDENT = "    "

PRESENT = 0
NULL = 1

# {out}: destination parcel, {v}: value expression
WRITE_TEMPLATES: Dict[WireKind, str] = {
    WireKind.BOOLEAN: "{out}.write_boolean({v})",
    WireKind.BYTE: "{out}.write_byte({v})",
    WireKind.SHORT: "{out}.write_int({v})",
    WireKind.CHAR: "{out}.write_char({v})",
    WireKind.INT: "{out}.write_int({v})",
    WireKind.LONG: "{out}.write_long({v})",
    WireKind.FLOAT: "{out}.write_float({v})",
    WireKind.DOUBLE: "{out}.write_double({v})",
    WireKind.STRING: "{out}.write_string({v})",
    WireKind.BOOLEAN_ARRAY: "{out}.write_boolean_array({v})",
    WireKind.BYTE_ARRAY: "{out}.write_byte_array({v})",
    WireKind.CHAR_ARRAY: "{out}.write_char_array({v})",
    WireKind.INT_ARRAY: "{out}.write_int_array({v})",
    WireKind.LONG_ARRAY: "{out}.write_long_array({v})",
    WireKind.STRING_ARRAY: "{out}.write_string_array({v})",
    WireKind.PARCELABLE: "{out}.write_parcelable({v}, flags)",
    WireKind.LIST: "{out}.write_list({v})",
    WireKind.MAP: "{out}.write_map({v})",
    WireKind.ENUM: "{out}.write_enum({v})",
    WireKind.VALUE: "{out}.write_value({v})",
}

# {inp}: source parcel
READ_TEMPLATES: Dict[WireKind, str] = {
    WireKind.BOOLEAN: "{inp}.read_boolean()",
    WireKind.BYTE: "{inp}.read_byte()",
    WireKind.SHORT: "{inp}.read_int()",
    WireKind.CHAR: "{inp}.read_char()",
    WireKind.INT: "{inp}.read_int()",
    WireKind.LONG: "{inp}.read_long()",
    WireKind.FLOAT: "{inp}.read_float()",
    WireKind.DOUBLE: "{inp}.read_double()",
    WireKind.STRING: "{inp}.read_string()",
    WireKind.BOOLEAN_ARRAY: "{inp}.read_boolean_array()",
    WireKind.BYTE_ARRAY: "{inp}.read_byte_array()",
    WireKind.CHAR_ARRAY: "{inp}.read_char_array()",
    WireKind.INT_ARRAY: "{inp}.read_int_array()",
    WireKind.LONG_ARRAY: "{inp}.read_long_array()",
    WireKind.STRING_ARRAY: "{inp}.read_string_array()",
    WireKind.PARCELABLE: "{inp}.read_parcelable()",
    WireKind.LIST: "{inp}.read_list()",
    WireKind.MAP: "{inp}.read_map()",
    WireKind.ENUM: "{inp}.read_enum({enum})",
    WireKind.VALUE: "{inp}.read_value()",
}


class CodeBlock:
    """Indentation-aware list of source lines.

    Example:
        >>> block = CodeBlock()
        >>> block.begin_control_flow("if x is None")
        >>> block.add("dest.write_int(1)")
        >>> block.end_control_flow()
        >>> str(block)
        'if x is None:\\n    dest.write_int(1)'
    """

    def __init__(self, level: int = 0) -> None:
        self._lines: List[str] = []
        self._level = level

    def add(self, line: str = "") -> None:
        """Add one line at the current indentation (empty for a blank line)."""
        self._lines.append(INDENT * self._level + line if line else "")

    def begin_control_flow(self, header: str) -> None:
        self.add(f"{header}:")
        self._level += 1

    def next_control_flow(self, header: str) -> None:
        self._level -= 1
        self.add(f"{header}:")
        self._level += 1

    def end_control_flow(self) -> None:
        if self._level == 0:
            raise ValueError("end_control_flow without matching begin_control_flow")
        self._level -= 1

    def indent(self) -> None:
        self._level += 1

    def dedent(self) -> None:
        self._level -= 1

    def lines(self) -> List[str]:
        return list(self._lines)

    def __str__(self) -> str:
        return "\n".join(self._lines)


@dataclass(frozen=True)
class FieldCodec:
    """Everything the synthesizer needs to render one field.

    Attributes:
        field: The field spec
        kind: Resolved wire kind
        adapter_attr: Record attribute holding the field's adapter instance
        enum_alias: Module-level name bound to the field's enum type
    """

    field: FieldSpec
    kind: WireKind
    adapter_attr: Optional[str] = None
    enum_alias: Optional[str] = None

    def __post_init__(self) -> None:
        if self.kind is WireKind.ADAPTER and self.adapter_attr is None:
            raise ValueError(f"Field {self.field.name}: adapter kind needs an adapter attribute")
        if self.kind is WireKind.ENUM and self.enum_alias is None:
            raise ValueError(f"Field {self.field.name}: enum kind needs an enum alias")


def write_expression(codec: FieldCodec, value: str, out: str = "dest", owner: str = "self") -> str:
    """Return the statement writing ``value``'s payload (no presence flag)."""
    if codec.kind is WireKind.ADAPTER:
        return f"{owner}.{codec.adapter_attr}.to_parcel({value}, {out})"
    return WRITE_TEMPLATES[codec.kind].format(out=out, v=value)


def read_expression(codec: FieldCodec, inp: str = "parcel", owner: str = "cls") -> str:
    """Return the expression reading one payload (no presence flag)."""
    if codec.kind is WireKind.ADAPTER:
        return f"{owner}.{codec.adapter_attr}.from_parcel({inp})"
    return READ_TEMPLATES[codec.kind].format(inp=inp, enum=codec.enum_alias)


def emit_write_version(block: CodeBlock, version: int, out: str = "dest") -> None:
    """Emit the leading schema-version tag."""
    block.add(f"{out}.write_int({version})  # version")


def emit_write(
    block: CodeBlock, codec: FieldCodec, value: str, out: str = "dest", owner: str = "self"
) -> None:
    """Emit the write of one field. Never version-gated.

    Args:
        block: Block to append to
        codec: Field to write
        value: Expression holding the field value
        out: Name of the destination parcel
        owner: Expression owning the adapter attributes
    """
    payload = write_expression(codec, value, out, owner)
    if not codec.field.nullable:
        block.add(payload)
        return

    block.begin_control_flow(f"if {value} is None")
    block.add(f"{out}.write_int({NULL})")
    block.next_control_flow("else")
    block.add(f"{out}.write_int({PRESENT})")
    block.add(payload)
    block.end_control_flow()


def emit_read(
    block: CodeBlock,
    codec: FieldCodec,
    target: str,
    inp: str = "parcel",
    owner: str = "cls",
    version: str = "version",
) -> None:
    """Emit the gated read of one field into ``target``.

    A field outside its version window is set to its wire kind's zero value.

    Args:
        block: Block to append to
        codec: Field to read
        target: Assignment target for the value
        inp: Name of the source parcel
        owner: Expression owning the adapter attributes
        version: Expression holding the version tag read from the parcel
    """
    expression = read_expression(codec, inp, owner)
    if codec.field.nullable:
        # the flag is evaluated before the payload
        expression = f"{expression} if {inp}.read_int() == {PRESENT} else None"

    condition = gate_condition(codec.field.versions, version)
    if condition is None:
        block.add(f"{target} = {expression}")
        return

    block.begin_control_flow(f"if {condition}")
    block.add(f"{target} = {expression}")
    block.next_control_flow("else")
    block.add(f"{target} = {codec.kind.zero_value()!r}")
    block.end_control_flow()
