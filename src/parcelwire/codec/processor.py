"""Batch generation.

The processor runs every declaration of a batch through the pipeline:
schema extraction, validation, wire-type resolution, codec synthesis and
output assembly. A schema error aborts only the schema it belongs to; it is
reported to the diagnostics sink and the rest of the batch proceeds.
"""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import (
    Any,
    Dict,
    Iterable,
    Iterator,
    List,
    Optional,
    Protocol,
    Tuple,
    Union,
    get_args,
    get_origin,
)

from pydantic import ValidationError

from ..config import DEFAULT_CONFIG, GeneratorConfig
from ..exceptions import SchemaError
from ..models.base import Parcelled
from ..utils.log import get_logger
from .assembler import GeneratedRecord, NameAllocator, RecordAssembler, materialize
from .introspect import build_schema
from .resolver import WireTypeResolver
from .schema import Schema

logger = get_logger("processor")

Declaration = Union[type, Schema]


class DiagnosticsSink(Protocol):
    """Receives schema errors found during a batch."""

    def report(self, message: str, element: Any = None) -> None: ...


class LoggingDiagnostics:
    """Diagnostics sink that logs every report at ERROR level."""

    def __init__(self, name: str = "diagnostics") -> None:
        self.logger = get_logger(name)

    def report(self, message: str, element: Any = None) -> None:
        self.logger.error("%s", message)


class CollectingDiagnostics:
    """Diagnostics sink that keeps ``(message, element)`` pairs."""

    def __init__(self) -> None:
        self.messages: List[Tuple[str, Any]] = []
        self._lock = threading.Lock()

    def report(self, message: str, element: Any = None) -> None:
        with self._lock:
            self.messages.append((message, element))

    def __len__(self) -> int:
        return len(self.messages)

    def __bool__(self) -> bool:
        return bool(self.messages)


class ArtifactWriter(Protocol):
    """Persists generated module text."""

    def write(self, qualified_name: str, text: str) -> None: ...


class FileArtifactWriter:
    """Write each artifact as ``<out_dir>/<dotted/path>.py``.

    Args:
        out_dir: Root output directory, created on demand
    """

    def __init__(self, out_dir: Union[str, Path]) -> None:
        self.out_dir = Path(out_dir)
        self.written: List[Path] = []

    def path_for(self, qualified_name: str) -> Path:
        *packages, module = qualified_name.split(".")
        return self.out_dir.joinpath(*packages, f"{module}.py")

    def write(self, qualified_name: str, text: str) -> None:
        path = self.path_for(qualified_name)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        self.written.append(path)
        logger.info("Wrote %s", path)


def _label(declaration: Any) -> str:
    if isinstance(declaration, Schema):
        return declaration.qualified_name
    return getattr(declaration, "__qualname__", repr(declaration))


class RecordProcessor:
    """Generate a batch of declarations.

    The batch shares one resolver cache and one name allocator. With
    ``config.max_workers > 1`` schemas are assembled on a thread pool.

    Example:
        >>> sink = CollectingDiagnostics()
        >>> processor = RecordProcessor(sink)
        >>> records = processor.process([Person, Address])
        >>> sorted(records)
        ['app.models.Address', 'app.models.Person']

    Args:
        diagnostics: Sink receiving schema errors (defaults to logging them)
        writer: Optional writer persisting the generated module text
        config: Generator configuration
    """

    def __init__(
        self,
        diagnostics: Optional[DiagnosticsSink] = None,
        writer: Optional[ArtifactWriter] = None,
        config: GeneratorConfig = DEFAULT_CONFIG,
    ) -> None:
        self.diagnostics: DiagnosticsSink = diagnostics if diagnostics is not None else LoggingDiagnostics()
        self.writer = writer
        self.config = config
        self.resolver = WireTypeResolver(strict=config.strict_resolution)
        self.names = NameAllocator()
        self.assembler = RecordAssembler(config, self.resolver, self.names)

    def process(self, declarations: Iterable[Declaration]) -> Dict[str, GeneratedRecord]:
        """Generate every declaration that passes validation.

        Returns:
            Generated records keyed by the qualified name of their schema
        """
        items = list(declarations)
        if self.config.max_workers > 1 and len(items) > 1:
            with ThreadPoolExecutor(max_workers=self.config.max_workers) as pool:
                results = list(pool.map(self.process_one, items))
        else:
            results = [self.process_one(item) for item in items]

        generated = {g.schema.qualified_name: g for g in results if g is not None}
        logger.debug("Generated %d of %d declarations", len(generated), len(items))
        return generated

    def process_one(self, declaration: Declaration) -> Optional[GeneratedRecord]:
        """Generate one declaration, reporting instead of raising schema errors."""
        try:
            schema = declaration if isinstance(declaration, Schema) else build_schema(declaration)
            generated = self.assembler.assemble(schema)
            sources = [(a.qualified_name, a.source) for a in generated.artifacts]
        except SchemaError as e:
            self.diagnostics.report(str(e), e.element)
            return None
        except ValidationError as e:
            self.diagnostics.report(f"{_label(declaration)}: invalid schema: {e}", declaration)
            return None

        if self.writer is not None:
            for module_name, source in sources:
                self.writer.write(module_name, source)
        return generated


def process_batch(
    declarations: Iterable[Declaration],
    config: GeneratorConfig = DEFAULT_CONFIG,
    diagnostics: Optional[DiagnosticsSink] = None,
    writer: Optional[ArtifactWriter] = None,
) -> Dict[str, GeneratedRecord]:
    """Generate a batch of declarations with a fresh processor."""
    return RecordProcessor(diagnostics, writer, config).process(declarations)


_generated: Dict[Tuple[Any, GeneratorConfig], Tuple[GeneratedRecord, type]] = {}
_generated_lock = threading.RLock()


def _generate(declaration: Declaration, config: Optional[GeneratorConfig]) -> Tuple[GeneratedRecord, type]:
    config = config or DEFAULT_CONFIG
    key = (declaration, config)
    with _generated_lock:
        cached = _generated.get(key)
        if cached is not None:
            return cached

        try:
            schema = declaration if isinstance(declaration, Schema) else build_schema(declaration)
        except ValidationError as e:
            raise SchemaError(f"{_label(declaration)}: invalid schema: {e}", declaration) from e
        generated = RecordAssembler(config).assemble(schema)
        record_cls = materialize(generated)
        _generated[key] = (generated, record_cls)

        # nested declarations must be registered before a decode needs them
        for resolved in generated.fields:
            for nested in _declarations_in(resolved.spec.declared_type):
                if nested is not declaration:
                    _generate(nested, config)
        return generated, record_cls


def _declarations_in(tp: Any) -> Iterator[type]:
    """Parcelled declarations named by ``tp``, including inside List[...] and the like."""
    if get_origin(tp) is None and isinstance(tp, type) and issubclass(tp, Parcelled):
        yield tp
    for arg in get_args(tp):
        yield from _declarations_in(arg)


def generate(declaration: Declaration, config: Optional[GeneratorConfig] = None) -> type:
    """Return the generated record class of a declaration.

    The record is assembled and loaded on first use and cached afterwards.

    Args:
        declaration: Parcelled subclass or Schema
        config: Generator configuration (defaults to DEFAULT_CONFIG)

    Returns:
        The generated ``Parcelled_<Name>`` class

    Raises:
        SchemaError: If the declaration cannot be generated
    """
    return _generate(declaration, config)[1]


def generated_record(declaration: Declaration, config: Optional[GeneratorConfig] = None) -> GeneratedRecord:
    """Return the design (resolved fields, artifacts) behind :func:`generate`."""
    return _generate(declaration, config)[0]
