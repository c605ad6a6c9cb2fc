"""Declaration loading and analysis CLI commands."""

from __future__ import annotations

import importlib.util
import inspect
import sys
from pathlib import Path
from typing import List

from ..codec.assembler import GeneratedRecord
from ..codec.processor import CollectingDiagnostics, FileArtifactWriter, RecordProcessor
from ..config import GeneratorConfig
from ..models.base import Parcelled


def load_declarations(file_path: Path) -> List[type[Parcelled]]:
    """Import a Python file and return the Parcelled classes defined in it.

    Nested declarations are included after their enclosing class.

    Args:
        file_path: Path to Python file containing declarations
    """
    module_name = file_path.stem
    spec = importlib.util.spec_from_file_location(module_name, file_path)
    if spec is None or spec.loader is None:
        raise ValueError(f"Could not load module from {file_path}")

    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    spec.loader.exec_module(module)

    declarations: List[type[Parcelled]] = []

    def collect(namespace: object) -> None:
        for obj in list(vars(namespace).values()):
            if not inspect.isclass(obj) or obj is Parcelled or not issubclass(obj, Parcelled):
                continue
            # Only classes defined in this file (not imported)
            if obj.__module__ != module_name or obj in declarations:
                continue
            declarations.append(obj)
            collect(obj)

    collect(module)
    return declarations


def analyze_file(file_path: Path, config: GeneratorConfig) -> int:
    """Print the wire layout of every declaration in a Python file.

    Returns:
        Number of declarations that failed to generate
    """
    declarations = load_declarations(file_path)
    if not declarations:
        print(f"No Parcelled classes found in {file_path}")
        return 0

    print("|" * 7, "parcelwire: Versioned Parcelable Records", "|" * 7)
    print(f"{len(declarations)} record{'s' if len(declarations) != 1 else ''} loaded.")
    print("Sizes are in bytes; variable-length fields are marked '*'.")
    print()

    diagnostics = CollectingDiagnostics()
    records = RecordProcessor(diagnostics, config=config).process(declarations)
    for generated in records.values():
        analyze_record(generated)

    for message, _element in diagnostics.messages:
        print(f"Error: {message}", file=sys.stderr)
    return len(diagnostics)


def analyze_record(generated: GeneratedRecord) -> None:
    """Print a detailed breakdown of one generated record."""
    schema = generated.schema
    print(f"{'=' * 19} {schema.qualified_name} (version {generated.version}) {'=' * 19}")
    print(f"record: {generated.record_name}    interface: {generated.interface_name}")

    fixed = 4  # version tag
    variable = False
    for resolved in generated.fields:
        size = resolved.kind.wire_size
        flag = 4 if resolved.spec.nullable else 0
        if size is None:
            variable = True
            size_text = "*"
        else:
            fixed += size + flag
            size_text = str(size + flag)

        notes = []
        if resolved.spec.nullable:
            notes.append("nullable")
        if resolved.versions is not None:
            notes.append(f"versions {resolved.versions}")
        if resolved.spec.adapter is not None:
            notes.append(f"adapter {resolved.spec.adapter.__name__}")
        if resolved.spec.default is not None:
            notes.append("default")
        detail = f" ({', '.join(notes)})" if notes else ""

        label = f"{resolved.name} [{resolved.kind.value}]"
        print(f"  {label}{'.' * max(1, 40 - len(label))}{size_text}{detail}")

    total = f"{fixed}+" if variable else str(fixed)
    print(f"Encoded size: {total} bytes")
    print()


def generate_file(file_path: Path, out_dir: Path, config: GeneratorConfig) -> int:
    """Write the interface and record modules of every declaration in a file.

    Returns:
        Number of declarations that failed to generate
    """
    declarations = load_declarations(file_path)
    diagnostics = CollectingDiagnostics()
    writer = FileArtifactWriter(out_dir)
    records = RecordProcessor(diagnostics, writer, config).process(declarations)

    for path in writer.written:
        print(f"Wrote {path}")
    for message, _element in diagnostics.messages:
        print(f"Error: {message}", file=sys.stderr)
    print(f"{len(records)} of {len(declarations)} records generated.")
    return len(diagnostics)
