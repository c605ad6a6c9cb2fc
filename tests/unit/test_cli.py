"""Tests for CLI tool."""

from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path

import pytest

from parcelwire.cli.analyze import load_declarations
from parcelwire.cli.main import main

SRC_DIR = Path(__file__).resolve().parents[2] / "src"

DECLARATIONS = '''
from typing import Annotated, ClassVar, Optional

from parcelwire import Int64, Parcelled, Versioned


class StatusReport(Parcelled):
    """Status report."""

    vehicle_id: int
    label: Optional[str] = None
    stamp: Int64 = 0

    class Position(Parcelled):
        """Nested declaration."""

        lat: float
        lon: float


class CommandMessage(Parcelled):
    command: str
    reason: Annotated[Optional[str], Versioned(after=2)] = None

    parcel_version: ClassVar[int] = 2
'''


@pytest.fixture
def declarations_file(tmp_path: Path, request: pytest.FixtureRequest) -> Path:
    """Python file with a few declarations, named uniquely per test."""
    path = tmp_path / f"cli_models_{request.node.name}.py"
    path.write_text(DECLARATIONS, encoding="utf-8")
    return path


def test_cli_help() -> None:
    """Test CLI --help flag."""
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(SRC_DIR), env.get("PYTHONPATH")]))
    result = subprocess.run(
        [sys.executable, "-m", "parcelwire.cli.main", "--help"],
        capture_output=True,
        text=True,
        env=env,
    )
    assert result.returncode == 0
    assert "parcelwire: Versioned Parcelable Records" in result.stdout
    assert "--analyze" in result.stdout


def test_cli_version(capsys: pytest.CaptureFixture[str]) -> None:
    """Test CLI --version flag."""
    with pytest.raises(SystemExit) as exc_info:
        main(["--version"])
    assert exc_info.value.code == 0
    assert "parcelwire 0.1.0" in capsys.readouterr().out


def test_cli_no_args(capsys: pytest.CaptureFixture[str]) -> None:
    """Test CLI with no arguments (should show help)."""
    assert main([]) == 0
    assert "parcelwire: Versioned Parcelable Records" in capsys.readouterr().out


def test_cli_analyze(declarations_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """Test CLI --analyze with a declarations file."""
    assert main(["--analyze", str(declarations_file)]) == 0
    out = capsys.readouterr().out
    assert "parcelwire: Versioned Parcelable Records" in out
    assert "3 records loaded." in out
    assert "StatusReport" in out
    assert "Parcelled_StatusReport_Position" in out
    assert "versions [2..*]" in out
    assert "Encoded size:" in out


def test_cli_analyze_missing_file(capsys: pytest.CaptureFixture[str]) -> None:
    """Test CLI --analyze with missing file."""
    assert main(["--analyze", "nonexistent.py"]) == 1
    assert "not found" in capsys.readouterr().err.lower()


def test_cli_analyze_broken_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """Test a file that fails to import."""
    path = tmp_path / "cli_broken.py"
    path.write_text("raise RuntimeError('boom')\n", encoding="utf-8")
    assert main(["--analyze", str(path)]) == 1
    assert "Error processing file" in capsys.readouterr().err


def test_cli_analyze_empty_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """Test a file without declarations."""
    path = tmp_path / "cli_empty.py"
    path.write_text("VALUE = 1\n", encoding="utf-8")
    assert main(["--analyze", str(path)]) == 0
    assert "No Parcelled classes found" in capsys.readouterr().out


def test_cli_generate(
    declarations_file: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    """Test CLI --generate writes record and interface modules."""
    out_dir = tmp_path / "generated"
    assert main(["--generate", str(declarations_file), "--out", str(out_dir)]) == 0

    written = sorted(path.name for path in out_dir.glob("*.py"))
    assert written == [
        "IParcelled_CommandMessage.py",
        "IParcelled_StatusReport.py",
        "IParcelled_StatusReport_Position.py",
        "Parcelled_CommandMessage.py",
        "Parcelled_StatusReport.py",
        "Parcelled_StatusReport_Position.py",
    ]
    source = (out_dir / "Parcelled_CommandMessage.py").read_text(encoding="utf-8")
    assert "def from_parcel" in source
    assert "3 of 3 records generated." in capsys.readouterr().out


def test_load_declarations_includes_nested(declarations_file: Path) -> None:
    """Test nested declarations follow their enclosing class."""
    names = [cls.__qualname__ for cls in load_declarations(declarations_file)]
    assert names == ["StatusReport", "StatusReport.Position", "CommandMessage"]
