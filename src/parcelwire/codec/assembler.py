"""Output assembly.

Turns a validated schema into two Python modules: the setter interface
(``IParcelled_<Name>``) and the concrete record (``Parcelled_<Name>``) with
its three constructors, ``set_values``, ``write_to_parcel``,
``describe_contents`` and ``CREATOR``. Both modules are placed next to the
declaring module, in the same package.

Artifacts can be written out as source text or materialized into live classes
in this process. Materializing compiles and execs the class body in a fresh
namespace holding only the artifact's own bindings (runtime helpers, enum and
adapter classes, default providers); nothing else from this process is
visible to the generated code.
"""

from __future__ import annotations

import enum
import math
import re
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..config import DEFAULT_CONFIG, GeneratorConfig
from ..exceptions import SchemaError
from ..runtime import Constant, Creator, Parcelable, register_record
from ..utils.log import get_logger
from .resolver import WireTypeResolver
from .schema import RESERVED_NAMES, FieldSpec, Schema, VersionRange, validate_schema
from .synthesizer import CodeBlock, FieldCodec, emit_read, emit_write, emit_write_version
from .wire_kinds import WireKind

logger = get_logger("assembler")

RUNTIME_MODULE = "parcelwire.runtime"

# literal types whose repr() evaluates back to an equal value
_LITERAL_TYPES = (type(None), bool, int, float, str, bytes)


class NameAllocator:
    """Hands out unique identifiers within one scope.

    The same tag always gets the same name back; a new tag asking for a taken
    name gets a numeric suffix. Safe to share between threads.
    """

    def __init__(self, reserved: Optional[set[str]] = None) -> None:
        self._taken: set[str] = set(reserved or ())
        self._by_tag: Dict[Any, str] = {}
        self._lock = threading.Lock()

    def new_name(self, suggestion: str, tag: Any = None) -> str:
        with self._lock:
            if tag is not None and tag in self._by_tag:
                return self._by_tag[tag]
            name = suggestion
            counter = 2
            while name in self._taken:
                name = f"{suggestion}_{counter}"
                counter += 1
            self._taken.add(name)
            if tag is not None:
                self._by_tag[tag] = name
            return name


def constant_case(name: str) -> str:
    """``DateTypeAdapter`` -> ``DATE_TYPE_ADAPTER``."""
    return re.sub(r"(?<=[a-z0-9])(?=[A-Z])", "_", name).upper()


@dataclass(frozen=True)
class ResolvedField:
    """One field with its resolved wire kind."""

    spec: FieldSpec
    kind: WireKind

    @property
    def name(self) -> str:
        return self.spec.name

    @property
    def versions(self) -> Optional[VersionRange]:
        return self.spec.versions


@dataclass(frozen=True)
class Reference:
    """An external object a generated module refers to by ``alias``."""

    alias: str
    target: Any


def _object_source(target: Any, alias: str) -> Optional[List[str]]:
    """Lines importing a module-level class or function as ``alias``."""
    module = getattr(target, "__module__", None)
    qualname = getattr(target, "__qualname__", None)
    if not module or not qualname or "<" in qualname or module == "__main__":
        return None
    root, _, rest = qualname.partition(".")
    if not rest:
        if root == alias:
            return [f"from {module} import {root}"]
        return [f"from {module} import {root} as {alias}"]
    return [f"from {module} import {root} as {alias}", f"{alias} = {alias}.{rest}"]


class _ValueRenderer:
    """Renders default values as Python expressions.

    Names of imported helper objects come from ``names``; their import lines
    collect in ``imports``.
    """

    def __init__(self, names: NameAllocator, imports: List[str]) -> None:
        self.names = names
        self.imports = imports

    def render(self, value: Any) -> Optional[str]:
        if isinstance(value, float) and not math.isfinite(value):
            return f"float({str(value)!r})"
        if isinstance(value, _LITERAL_TYPES):
            return repr(value)
        if isinstance(value, enum.Enum):
            owner = self._import(type(value), type(value).__name__)
            return None if owner is None else f"{owner}.{value.name}"
        if isinstance(value, (list, tuple, set, frozenset)):
            items = [self.render(item) for item in value]
            if any(item is None for item in items):
                return None
            if isinstance(value, list):
                return f"[{', '.join(items)}]"  # type: ignore[arg-type]
            if isinstance(value, tuple):
                return _tuple_source(items) if items else "()"  # type: ignore[arg-type]
            inner = f"{{{', '.join(items)}}}" if items else ""  # type: ignore[arg-type]
            return f"{type(value).__name__}({inner})"
        if isinstance(value, dict):
            pairs = [(self.render(k), self.render(v)) for k, v in value.items()]
            if any(k is None or v is None for k, v in pairs):
                return None
            return "{" + ", ".join(f"{k}: {v}" for k, v in pairs) + "}"
        # datetime and friends repr as module.Class(...)
        cls = type(value)
        text = repr(value)
        if "<" not in cls.__qualname__ and text.startswith(f"{cls.__module__}.{cls.__qualname__}("):
            root = cls.__module__.split(".")[0]
            alias = self.names.new_name(root, tag=("module", root))
            line = f"import {root}" if alias == root else f"import {root} as {alias}"
            if line not in self.imports:
                self.imports.append(line)
            return alias + text[len(root):]
        return None

    def _import(self, target: Any, suggestion: str) -> Optional[str]:
        alias = self.names.new_name(f"_{suggestion}", tag=("import", id(target)))
        lines = _object_source(target, alias)
        if lines is None:
            return None
        self.imports.extend(line for line in lines if line not in self.imports)
        return alias


@dataclass(frozen=True)
class GeneratedArtifact:
    """One generated module.

    Attributes:
        qualified_name: Dotted name of the module (and of the class it defines)
        class_name: Name of the class defined by the module
        imports: Import/binding lines, only used by the written text
        body: Class definitions
        bindings: Objects the body refers to, used when materializing
        header: Optional comment line in front of the module
        unwritable: Descriptions of bindings with no source form
    """

    qualified_name: str
    class_name: str
    imports: Tuple[str, ...]
    body: str
    bindings: Mapping[str, Any]
    header: Optional[str] = None
    unwritable: Tuple[str, ...] = ()

    @property
    def source(self) -> str:
        """Full module text.

        Raises:
            SchemaError: If an object the module needs cannot be written as source
        """
        if self.unwritable:
            raise SchemaError(
                f"{self.qualified_name}: cannot write {', '.join(self.unwritable)} as source; "
                "use module-level enums, adapters and default factories",
                self.qualified_name,
            )
        parts = []
        if self.header:
            parts.append(self.header)
        if self.imports:
            parts.append("\n".join(self.imports))
        parts.append(self.body)
        return "\n\n\n".join(parts) + "\n"


@dataclass(frozen=True)
class GeneratedRecord:
    """Design of one generated record and its two artifacts.

    Attributes:
        schema: Source schema
        version: Schema version written in front of every record
        fields: Ordered resolved fields
        adapters: Adapter class -> record attribute holding its single instance
        interface: Setter-interface artifact
        record: Record artifact
    """

    schema: Schema
    version: int
    fields: Tuple[ResolvedField, ...]
    adapters: Mapping[type, str]
    interface: GeneratedArtifact
    record: GeneratedArtifact

    @property
    def record_name(self) -> str:
        return self.record.class_name

    @property
    def interface_name(self) -> str:
        return self.interface.class_name

    @property
    def artifacts(self) -> Tuple[GeneratedArtifact, GeneratedArtifact]:
        return (self.interface, self.record)


@dataclass
class _References:
    """Allocates module-level aliases for external objects."""

    names: NameAllocator
    entries: Dict[int, Reference] = field(default_factory=dict)

    def alias(self, target: Any, suggestion: str) -> str:
        key = id(target)
        if key not in self.entries:
            self.entries[key] = Reference(self.names.new_name(suggestion, tag=key), target)
        return self.entries[key].alias

    def bindings(self) -> Dict[str, Any]:
        return {ref.alias: ref.target for ref in self.entries.values()}

    def source_lines(self) -> Tuple[List[str], List[str]]:
        """Import and binding lines for every reference.

        Returns:
            The lines, and descriptions of the references that have no
            source form
        """
        lines: List[str] = []
        unwritable: List[str] = []
        renderer = _ValueRenderer(self.names, lines)
        for ref in self.entries.values():
            target = ref.target
            if isinstance(target, Constant):
                expression = renderer.render(target.value)
                if expression is not None:
                    lines.append(f"{ref.alias} = Constant({expression})")
                    continue
            else:
                imported = _object_source(target, ref.alias)
                if imported is not None:
                    lines.extend(line for line in imported if line not in lines)
                    continue
            unwritable.append(f"{ref.alias} ({target!r})")
        return lines, unwritable


def _sibling(module: str, name: str) -> str:
    """Dotted name of module ``name`` in the same package as ``module``."""
    package = module.rpartition(".")[0]
    return f"{package}.{name}" if package else name


def _type_label(tp: Any) -> str:
    return getattr(tp, "__name__", None) or repr(tp)


def _tuple_source(items: List[str]) -> str:
    if len(items) == 1:
        return f"({items[0]},)"
    return f"({', '.join(items)})"


class RecordAssembler:
    """Assemble schemas into generated records.

    Args:
        config: Generator configuration
        resolver: Wire-type resolver, shared across a batch
        names: Batch-wide allocator for generated class names
    """

    def __init__(
        self,
        config: GeneratorConfig = DEFAULT_CONFIG,
        resolver: Optional[WireTypeResolver] = None,
        names: Optional[NameAllocator] = None,
    ) -> None:
        self.config = config
        self.resolver = resolver or WireTypeResolver(strict=config.strict_resolution)
        self.names = names or NameAllocator()

    def assemble(self, schema: Schema) -> GeneratedRecord:
        """Validate, resolve and synthesize one schema.

        Raises:
            SchemaError: If the schema is invalid or, under strict resolution,
                a field type cannot be resolved
        """
        fields = validate_schema(schema)
        resolved = tuple(ResolvedField(spec, self.resolver.resolve_field(spec)) for spec in fields)

        interface_name = self.names.new_name(
            self.config.interface_prefix + schema.flat_name,
            tag=("interface", schema.qualified_name),
        )
        record_name = self.names.new_name(
            self.config.record_prefix + schema.flat_name,
            tag=("record", schema.qualified_name),
        )

        # per-schema scope: field names and generated members are taken
        members = NameAllocator(set(RESERVED_NAMES) | {f.name for f in fields})
        adapters: Dict[type, str] = {}
        for rf in resolved:
            adapter = rf.spec.adapter
            if adapter is not None and adapter not in adapters:
                adapters[adapter] = members.new_name(constant_case(adapter.__name__))

        module_names = NameAllocator(
            {"abc", "Constant", "Creator", "Parcelable", "register_record", interface_name, record_name}
        )
        references = _References(module_names)

        codecs = []
        for rf in resolved:
            enum_alias = None
            if rf.kind is WireKind.ENUM:
                enum_alias = references.alias(rf.spec.declared_type, _type_label(rf.spec.declared_type))
            codecs.append(
                FieldCodec(
                    field=rf.spec,
                    kind=rf.kind,
                    adapter_attr=adapters.get(rf.spec.adapter) if rf.spec.adapter else None,
                    enum_alias=enum_alias,
                )
            )
        adapter_aliases = {
            adapter: references.alias(adapter, adapter.__name__) for adapter in adapters
        }
        default_aliases = {
            rf.name: references.alias(rf.spec.default, f"_default_{rf.name}")
            for rf in resolved
            if rf.spec.default is not None
        }

        interface = self._interface_artifact(schema, interface_name, resolved)
        record = self._record_artifact(
            schema,
            record_name,
            interface_name,
            codecs,
            adapters,
            adapter_aliases,
            default_aliases,
            references,
        )
        logger.debug(
            "Assembled %s: %d fields, %d adapters", record.qualified_name, len(resolved), len(adapters)
        )
        return GeneratedRecord(
            schema=schema,
            version=schema.version,
            fields=resolved,
            adapters=adapters,
            interface=interface,
            record=record,
        )

    def _header(self, schema: Schema) -> Optional[str]:
        if not self.config.write_header:
            return None
        return f"# Generated by parcelwire from {schema.qualified_name}. Do not edit."

    def _interface_artifact(
        self, schema: Schema, name: str, fields: Tuple[ResolvedField, ...]
    ) -> GeneratedArtifact:
        params = ", ".join(["self"] + [rf.name for rf in fields])
        block = CodeBlock()
        block.begin_control_flow(f"class {name}(abc.ABC)")
        block.add(f'"""Values setter contract of {schema.qualified_name}."""')
        block.add()
        block.add("@abc.abstractmethod")
        block.begin_control_flow(f"def set_values({params})")
        block.add('"""Assign every field.')
        block.add()
        block.add("Args:")
        for rf in fields:
            block.add(f"    {rf.name}: {_type_label(rf.spec.declared_type)}")
        block.add('"""')
        block.end_control_flow()
        block.end_control_flow()

        return GeneratedArtifact(
            qualified_name=_sibling(schema.module, name),
            class_name=name,
            imports=("import abc",),
            body=str(block),
            bindings={},
            header=self._header(schema),
        )

    def _record_artifact(
        self,
        schema: Schema,
        name: str,
        interface_name: str,
        codecs: List[FieldCodec],
        adapters: Mapping[type, str],
        adapter_aliases: Mapping[type, str],
        default_aliases: Mapping[str, str],
        references: _References,
    ) -> GeneratedArtifact:
        names = [codec.field.name for codec in codecs]
        parcel_name = f"{schema.module}.{name}"

        block = CodeBlock()
        block.begin_control_flow(f"class {name}(Parcelable, {interface_name})")
        block.add(f'"""Parcelable record generated from {schema.qualified_name}."""')
        block.add()
        block.add(f"PARCEL_NAME = {parcel_name!r}")
        block.add(f"SCHEMA_VERSION = {schema.version}")
        block.add(f"FIELDS = {_tuple_source([repr(n) for n in names])}")
        for adapter, attr in adapters.items():
            block.add(f"{attr} = {adapter_aliases[adapter]}()")
        block.add()

        # raw constructor
        block.begin_control_flow(f"def __init__({', '.join(['self'] + names)})")
        block.add(f"self.parcel_version = {schema.version}")
        for n in names:
            block.add(f"self.{n} = {n}")
        block.end_control_flow()
        block.add()

        # defaulted constructor
        block.add("@classmethod")
        optional_params = ", ".join(["cls"] + [f"{n}=None" for n in names])
        block.begin_control_flow(f"def with_defaults({optional_params})")
        block.add("self = cls.__new__(cls)")
        block.add(f"self.parcel_version = {schema.version}")
        for n in names:
            if n in default_aliases:
                block.add(f"self.{n} = {default_aliases[n]}()")
            else:
                block.add(f"self.{n} = {n}")
        block.add("return self")
        block.end_control_flow()
        block.add()

        # decode constructor
        block.add("@classmethod")
        block.begin_control_flow("def from_parcel(cls, parcel)")
        block.add("self = cls.__new__(cls)")
        block.add("version = parcel.read_int()")
        block.add("self.parcel_version = version")
        for codec in codecs:
            emit_read(block, codec, f"self.{codec.field.name}", inp="parcel", owner="cls")
        block.add("return self")
        block.end_control_flow()
        block.add()

        # mutator
        block.begin_control_flow(f"def set_values({', '.join(['self'] + names)})")
        for n in names:
            block.add(f"self.{n} = {n}")
        block.end_control_flow()
        block.add()

        block.begin_control_flow("def describe_contents(self)")
        block.add("return 0")
        block.end_control_flow()
        block.add()

        # encode: version first, then every field
        block.begin_control_flow("def write_to_parcel(self, dest, flags=0)")
        emit_write_version(block, schema.version, out="dest")
        for codec in codecs:
            emit_write(block, codec, f"self.{codec.field.name}", out="dest", owner="self")
        block.end_control_flow()
        block.add()

        block.begin_control_flow("def __eq__(self, other)")
        block.begin_control_flow("if type(other) is not type(self)")
        block.add("return NotImplemented")
        block.end_control_flow()
        mine = _tuple_source([f"self.{n}" for n in names])
        theirs = _tuple_source([f"other.{n}" for n in names])
        block.add(f"return {mine} == {theirs}")
        block.end_control_flow()
        block.add()
        block.add("__hash__ = None")
        block.add()

        block.begin_control_flow("def __repr__(self)")
        shown = ", ".join(f"{n}={{self.{n}!r}}" for n in names)
        block.add(f'return f"{name}({shown})"')
        block.end_control_flow()
        block.end_control_flow()
        block.add()
        block.add()
        block.add(f"{name}.CREATOR = Creator({name})")
        block.add(f"register_record({name}.PARCEL_NAME, {name})")

        imports = [
            f"from {RUNTIME_MODULE} import Constant, Creator, Parcelable, register_record",
            f"from {_sibling(schema.module, interface_name)} import {interface_name}",
        ]
        reference_lines, unwritable = references.source_lines()
        imports.extend(reference_lines)

        bindings: Dict[str, Any] = {
            "Constant": Constant,
            "Creator": Creator,
            "Parcelable": Parcelable,
            "register_record": register_record,
        }
        bindings.update(references.bindings())

        return GeneratedArtifact(
            qualified_name=_sibling(schema.module, name),
            class_name=name,
            imports=tuple(imports),
            body=str(block),
            bindings=bindings,
            header=self._header(schema),
            unwritable=tuple(unwritable),
        )


def _load(artifact: GeneratedArtifact, extra: Optional[Mapping[str, Any]] = None) -> type:
    namespace: Dict[str, Any] = {"__name__": artifact.qualified_name}
    namespace.update(artifact.bindings)
    if extra:
        namespace.update(extra)
    code = compile(artifact.body, f"<parcelwire {artifact.qualified_name}>", "exec")
    exec(code, namespace)
    return namespace[artifact.class_name]


def materialize(generated: GeneratedRecord) -> type:
    """Load a generated record into this process and register it.

    Returns:
        The generated record class
    """
    import abc

    interface_cls = _load(generated.interface, {"abc": abc})
    record_cls = _load(generated.record, {generated.interface_name: interface_cls})
    logger.debug("Materialized %s", record_cls.PARCEL_NAME)
    return record_cls


def assemble(
    schema: Schema,
    config: GeneratorConfig = DEFAULT_CONFIG,
    resolver: Optional[WireTypeResolver] = None,
) -> GeneratedRecord:
    """Assemble a single schema with a fresh name scope."""
    return RecordAssembler(config, resolver).assemble(schema)
