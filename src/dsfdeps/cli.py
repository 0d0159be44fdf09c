"""Command-line interface for dsfdeps."""

from __future__ import annotations

import argparse
import logging
import sys
from functools import partial
from pathlib import Path

from dsfdeps import __version__
from dsfdeps.batch import (
    MODE_CHECK,
    MODE_COPY,
    TileOutcome,
    check_tile,
    copy_tile,
    run_tiles,
    unique_tile_paths,
)
from dsfdeps.errors import ConfigurationError
from dsfdeps.logging_utils import LogOptions, configure_logging
from dsfdeps.reporting import build_report, write_report
from dsfdeps.tools.config import load_tool_paths
from dsfdeps.tools.dsftool import DsfTool, find_dsftool

DSF_SUFFIX = ".dsf"
LOGGER = logging.getLogger("dsfdeps.cli")

DESCRIPTION = "Check or copy X-Plane DSF tiles together with their terrain and texture files."
EPILOG = """\
All input files must be DSF tiles inside a scenery package
(<package>/Earth nav data/<bucket>/<tile>.dsf).

Laminar Research's DSFTool program is required. Unless --dsftool is given,
it is taken from the tool paths config, else looked up next to this program,
else on PATH.

With --check (the default), the result for each tile (good/bad) is written
to standard output and missing files, if any, to standard error.
"""


def _positive_float(value: str) -> float:
    number = float(value)
    if number <= 0:
        raise argparse.ArgumentTypeError("must be greater than zero")
    return number


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError("must be at least 1")
    return number


def build_parser() -> argparse.ArgumentParser:
    """Return the dsfdeps argument parser."""
    parser = argparse.ArgumentParser(
        prog="dsfdeps",
        usage="%(prog)s [options] <file1.dsf> [additional files]",
        description=DESCRIPTION,
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=__version__)
    parser.add_argument(
        "--check",
        action="store_true",
        help="Verify that all files required by each tile exist (default).",
    )
    parser.add_argument(
        "--copy",
        metavar="PATH",
        help="Copy each tile and its dependencies into the scenery package at PATH.",
    )
    parser.add_argument(
        "--dsftool",
        metavar="PATH",
        help="Path to the DSFTool executable.",
    )
    parser.add_argument(
        "--tool-paths",
        metavar="PATH",
        help="JSON file mapping tool names (e.g. dsftool) to paths.",
    )
    parser.add_argument(
        "--timeout",
        type=_positive_float,
        metavar="SECONDS",
        help="Abort a DSFTool conversion after this many seconds (default: no limit).",
    )
    parser.add_argument(
        "--jobs",
        type=_positive_int,
        default=1,
        help="Number of tiles to process in parallel.",
    )
    parser.add_argument(
        "--atomic-copy",
        action="store_true",
        help="With --copy, undo a tile's partial copy when one of its files fails.",
    )
    parser.add_argument(
        "--report",
        metavar="PATH",
        help="Write a JSON report of every tile outcome.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase log verbosity (repeatable).",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Reduce log output to warnings and errors.",
    )
    parser.add_argument(
        "--log-json",
        action="store_true",
        help="Emit logs as JSON on stderr.",
    )
    parser.add_argument(
        "--log-file",
        help="Optional path for JSON log output.",
    )
    parser.add_argument("tiles", nargs="*", metavar="TILE.dsf", help=argparse.SUPPRESS)
    return parser


def _print_outcome(outcome: TileOutcome) -> None:
    print(outcome.message, flush=True)


def main(argv: list[str] | None = None) -> int:
    """Run the CLI entrypoint and return an exit code."""
    parser = build_parser()
    raw_args = sys.argv[1:] if argv is None else list(argv)
    if not raw_args:
        parser.print_help()
        return 1
    args = parser.parse_intermixed_args(raw_args)
    for value in args.tiles:
        if not value.endswith(DSF_SUFFIX):
            parser.error(f"illegal option: {value}")

    configure_logging(
        LogOptions(
            verbose=args.verbose or 0,
            quiet=bool(args.quiet),
            log_file=Path(args.log_file) if args.log_file else None,
            json_console=bool(args.log_json),
        )
    )

    tiles = unique_tile_paths(args.tiles)
    if not tiles:
        LOGGER.error("no tiles!")
        return 1

    try:
        tool_paths = load_tool_paths(Path(args.tool_paths) if args.tool_paths else None)
        executable = find_dsftool(
            Path(args.dsftool) if args.dsftool else None,
            tool_paths=tool_paths,
        )
    except ConfigurationError as exc:
        LOGGER.error("%s", exc)
        return 1
    LOGGER.debug("Using DSFTool at %s", executable)
    converter = DsfTool(executable, timeout=args.timeout)

    destination = Path(args.copy) if args.copy else None
    if destination is not None:
        mode = MODE_COPY
        operation = partial(
            copy_tile,
            destination=destination,
            converter=converter,
            atomic=args.atomic_copy,
        )
    else:
        mode = MODE_CHECK
        operation = partial(check_tile, converter=converter)

    try:
        result = run_tiles(
            tiles,
            operation,
            mode=mode,
            jobs=args.jobs,
            on_outcome=_print_outcome,
        )
    except ConfigurationError as exc:
        LOGGER.error("%s", exc)
        return 1

    if args.report:
        report_path = Path(args.report)
        write_report(report_path, build_report(result, destination=destination))
        LOGGER.info("Report written to %s", report_path)

    failed = result.failed
    if failed:
        LOGGER.debug("%s of %s tile(s) failed.", len(failed), len(result.outcomes))
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
