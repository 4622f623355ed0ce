"""Main CLI entry point for wirecodec."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional

from .. import __version__
from ..codec.schema import TypeRegistry, load_schema
from ..conformance.harness import HarnessConfig, verify_file
from ..conformance.vectors import CODEC_NAMES
from ..exceptions import HarnessError, SchemaError
from .layout import print_layout

EXIT_OK = 0
EXIT_VECTORS_FAILED = 1
EXIT_LOAD_ERROR = 2


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wirecodec",
        description="wirecodec: Deterministic Binary Codec Conformance",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  wirecodec verify vectors.json                      Run all vectors
  wirecodec verify vectors.json --codec tagged       Run only borsh-style vectors
  wirecodec verify vectors.json --schema types.json  Resolve named record types
  wirecodec layout "option<[u8; 32]>"                Show encoded layout of a type
  wirecodec --version                                Show version

Exit codes: 0 all vectors passed, 1 one or more vectors failed, 2 load error.
        """,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"wirecodec {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command")

    verify = subparsers.add_parser("verify", help="Verify codecs against a vector file")
    verify.add_argument("vectors", metavar="VECTORS", help="Path to a JSON vector file")
    verify.add_argument(
        "--codec",
        choices=[*CODEC_NAMES, "all"],
        default="all",
        help="Only run vectors for this codec (default: all)",
    )
    verify.add_argument(
        "--schema",
        metavar="FILE",
        help="JSON schema file defining named record/union types",
    )
    verify.add_argument(
        "--jobs",
        type=int,
        default=1,
        metavar="N",
        help="Number of worker threads (default: 1)",
    )
    verify.add_argument(
        "--format",
        choices=["text", "json"],
        default="text",
        help="Report format on standard output (default: text)",
    )
    verify.add_argument("-v", "--verbose", action="store_true", help="Log every vector")

    layout = subparsers.add_parser("layout", help="Show the encoded layout of a type")
    layout.add_argument("type_tag", metavar="TYPE_TAG", help='Type tag, e.g. "vec<u32>"')
    layout.add_argument(
        "--schema",
        metavar="FILE",
        help="JSON schema file defining named record/union types",
    )
    layout.add_argument(
        "--codec",
        choices=["fixed", "tagged"],
        default="fixed",
        help="Binary format (default: fixed)",
    )

    return parser


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _load_registry(path: Optional[str]) -> Optional[TypeRegistry]:
    if path is None:
        return None
    return load_schema(path)


def _verify(args: argparse.Namespace) -> int:
    _configure_logging(args.verbose)

    codecs = frozenset(CODEC_NAMES) if args.codec == "all" else frozenset([args.codec])
    try:
        config = HarnessConfig(
            codecs=codecs, jobs=args.jobs, registry=_load_registry(args.schema)
        )
        report = verify_file(args.vectors, config)
    except (HarnessError, SchemaError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_LOAD_ERROR

    if args.format == "json":
        print(json.dumps(report.to_dict(), indent=2))
    else:
        print(report.summary())
        for line in report.diagnostics():
            print(line)

    return EXIT_OK if report.ok else EXIT_VECTORS_FAILED


def _layout(args: argparse.Namespace) -> int:
    try:
        print_layout(args.type_tag, _load_registry(args.schema), args.codec)
    except SchemaError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_LOAD_ERROR
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the wirecodec CLI.

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command == "verify":
        return _verify(args)
    if args.command == "layout":
        return _layout(args)

    # If no command specified, show help
    parser.print_help()
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
