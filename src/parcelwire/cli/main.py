"""Main CLI entry point for parcelwire."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .. import __version__
from ..config import GeneratorConfig
from ..utils.log import configure_logging
from .analyze import analyze_file, generate_file


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="parcelwire",
        description="parcelwire: Versioned Parcelable Records",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  parcelwire --analyze models.py                  Show wire layout of each record
  parcelwire --generate models.py --out build/    Write generated record modules
  parcelwire --version                            Show version
        """,
    )

    action = parser.add_mutually_exclusive_group()
    action.add_argument(
        "--analyze",
        metavar="FILE",
        type=str,
        help="Analyze Parcelled declarations and show field wire kinds",
    )
    action.add_argument(
        "--generate",
        metavar="FILE",
        type=str,
        help="Generate record and interface modules for Parcelled declarations",
    )

    parser.add_argument(
        "--out",
        metavar="DIR",
        type=str,
        default="generated",
        help="Output directory for --generate (default: generated)",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail on field types without a wire representation",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"parcelwire {__version__}",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the parcelwire CLI.

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(level=logging.DEBUG if args.verbose else logging.WARNING)
    config = GeneratorConfig(strict_resolution=args.strict)

    target = args.analyze or args.generate
    if not target:
        # If no command specified, show help
        parser.print_help()
        return 0

    file_path = Path(target)
    if not file_path.exists():
        print(f"Error: File not found: {file_path}", file=sys.stderr)
        return 1

    try:
        if args.analyze:
            failures = analyze_file(file_path, config)
        else:
            failures = generate_file(file_path, Path(args.out), config)
    except Exception as e:
        print(f"Error processing file: {e}", file=sys.stderr)
        return 1

    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
