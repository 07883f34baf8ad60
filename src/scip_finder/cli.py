"""Command-line interface: ``scip-finder <symbol> [options]``."""

from __future__ import annotations

import argparse
import logging
import sys
from enum import IntEnum
from typing import Optional

from scip_finder import __version__
from scip_finder.formatter import OUTPUT_FORMATS, format_results
from scip_finder.models import QueryOptions, SymbolKind
from scip_finder.query_engine import QueryEngine, find_with_fallback
from scip_finder.query_syntax import detect_query_syntax, normalize_query
from scip_finder.scip_loader import ScipLoadError, find_scip_file, load_scip_index
from scip_finder.symbol_indexer import build_symbol_index

EPILOG = """\
Examples:
  $ scip-finder MyFunction
  $ scip-finder MyThing.myProp
  $ scip-finder MyThing.method()
  $ scip-finder --scip ./index.scip SymbolName
  $ scip-finder --from lib/main.ts SymbolName
  $ scip-finder --folder src/ SymbolName
  $ scip-finder --format json SymbolName

Property/method search auto-detects syntax:
  - "Thing.prop" searches properties only
  - "Thing.method()" searches methods only
  - "Thing" searches all symbol types
"""


class ExitCode(IntEnum):
    SUCCESS = 0
    ERROR = 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="scip-finder",
        description="Search for symbols in SCIP code intelligence indexes",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("symbol", help="Symbol name to search for (case-sensitive exact match)")
    parser.add_argument("--scip", help="Path to SCIP index file (auto-discovers if not provided)")
    parser.add_argument(
        "--from",
        dest="defining_file",
        metavar="FILE",
        help="Filter to symbols defined in specific file",
    )
    parser.add_argument("--folder", help="Filter occurrences to files within folder")
    parser.add_argument(
        "--format",
        choices=OUTPUT_FORMATS,
        default="text",
        help="Output format (default: text)",
    )
    parser.add_argument(
        "--kind",
        choices=[k.value for k in SymbolKind],
        help="Only this symbol kind (default: inferred from the query)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging on stderr")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    scip_path = find_scip_file(args.scip)
    if scip_path is None:
        if args.scip:
            print(f"SCIP file not found: {args.scip}", file=sys.stderr)
        else:
            print(
                "No SCIP file found. Please specify a SCIP file using --scip option, "
                "or run from a directory containing index.scip\n"
                "Run with --help for usage information.",
                file=sys.stderr,
            )
        return ExitCode.ERROR

    try:
        scip_index = load_scip_index(scip_path)
    except ScipLoadError as e:
        print(f"Error: {e}", file=sys.stderr)
        return ExitCode.ERROR

    engine = QueryEngine(build_symbol_index(scip_index.documents))

    query = normalize_query(args.symbol)
    kind = SymbolKind(args.kind) if args.kind else detect_query_syntax(query)
    options = QueryOptions(defining_file=args.defining_file, folder=args.folder, kind=kind)

    results, warning = find_with_fallback(engine, query, options, args.format)
    if warning:
        print(warning + "\n")
    print(format_results(args.symbol, results, args.format))
    return ExitCode.SUCCESS


def main_sync() -> None:
    """Entry point for console_scripts."""
    sys.exit(main())


if __name__ == "__main__":
    main_sync()
