"""Command-line front door for symbolsort.

Parses input/difference listings and report options, loads and resolves the
symbols, then writes the text report to stdout or ``--out``.
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

from . import config
from .collate.folders import PathReplacementError, compile_path_replacements
from .engine.extents import ExtentInvariantError
from .engine.range_index import RangeIndex
from .ingest.loader import (
    INPUT_AUTO,
    INPUT_BSD,
    INPUT_COMDAT,
    INPUT_SYSV,
    RESOLVE_EXACT,
    RESOLVE_FAST,
    RESOLVE_NONE,
    InputFile,
    InputFormatError,
    LoadOptions,
    load_symbol_set,
    read_text,
)
from .ingest.sections import parse_section_table
from .report.writer import DEFAULT_MAX_COUNT, ReportOptions, write_report

logger = logging.getLogger(__name__)


class _AppendInputFile(argparse.Action):
    """Append ``InputFile(path, kind)`` to a list shared by several options."""

    def __init__(self, option_strings, dest, kind: str = INPUT_AUTO, **kwargs) -> None:
        self.kind = kind
        super().__init__(option_strings, dest, **kwargs)

    def __call__(self, parser, namespace, values, option_string=None) -> None:
        items = list(getattr(namespace, self.dest, None) or [])
        items.append(InputFile(Path(values), self.kind))
        setattr(namespace, self.dest, items)


def _positive_int(value: str) -> int:
    """argparse type for positive integer values."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be >= 1")
    return parsed


def _stderr_progress(stage: str, done: int, total: int) -> None:
    """Render a single-line percentage on stderr for interactive runs."""
    percent = 100 if total == 0 else (100 * done) // total
    sys.stderr.write(f"\r{stage}... {percent:3d}% complete")
    if done >= total:
        sys.stderr.write("\n")
    sys.stderr.flush()


def _configure_logging(verbose: bool, quiet: bool) -> None:
    level = logging.INFO
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(message)s", stream=sys.stderr)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="symbolsort",
        description="Summarize symbol sizes from nm or dumpbin listings, optionally as a difference.",
    )
    parser.set_defaults(inputs=[], differences=[])
    for flag, kind, label in (
        ("", INPUT_AUTO, "format detected from contents"),
        ("-bsd", INPUT_BSD, "nm --format=bsd --print-size"),
        ("-sysv", INPUT_SYSV, "nm --format=sysv"),
        ("-comdat", INPUT_COMDAT, "dumpbin /headers"),
    ):
        parser.add_argument(
            f"--in{flag}",
            dest="inputs",
            action=_AppendInputFile,
            kind=kind,
            metavar="FILE",
            help=f"Input symbol listing ({label}). Repeatable.",
        )
        parser.add_argument(
            f"--diff{flag}",
            dest="differences",
            action=_AppendInputFile,
            kind=kind,
            metavar="FILE",
            help=f"Basis listing for a differences report ({label}). Repeatable.",
        )
    parser.add_argument("--out", metavar="FILE", help="Write the report to FILE instead of stdout.")
    parser.add_argument(
        "--count",
        type=_positive_int,
        default=None,
        help=f"Limit rows per listing (default: config value or {DEFAULT_MAX_COUNT}).",
    )
    parser.add_argument(
        "--exclude",
        action="append",
        default=[],
        metavar="SUBSTRING",
        help="Exclude symbols whose name contains SUBSTRING. Repeatable.",
    )
    parser.add_argument(
        "--path-replace",
        nargs=2,
        action="append",
        default=[],
        metavar=("PATTERN", "REPLACEMENT"),
        help="Regex substitution applied to source paths before folder rollup. Repeatable.",
    )
    parser.add_argument(
        "--sections",
        metavar="FILE",
        help="readelf -S -W section table used to classify symbols by address.",
    )
    parser.add_argument(
        "--include-sections",
        action="store_true",
        help="Add sections from --sections as low-priority symbols to expose padding.",
    )
    parser.add_argument(
        "--complete",
        action="store_true",
        help="Fill unattributed address ranges and list all symbols by address.",
    )
    resolve_group = parser.add_mutually_exclusive_group()
    resolve_group.add_argument(
        "--fast-fill",
        action="store_true",
        help="Only add unmapped fillers for gaps instead of removing overlap.",
    )
    resolve_group.add_argument(
        "--keep-redundant-symbols",
        action="store_true",
        help="Do not remove overlapping or redundant symbols.",
    )
    parser.add_argument("--progress", action="store_true", help="Show percentage progress on stderr.")
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Log debug details.")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Only log warnings and errors.")
    return parser


def _resolve_mode(args: argparse.Namespace) -> str:
    if args.keep_redundant_symbols:
        return RESOLVE_NONE
    if args.fast_fill:
        return RESOLVE_FAST
    return RESOLVE_EXACT


def _check_inputs_exist(inputs: list[InputFile], label: str) -> None:
    for input_file in inputs:
        if not input_file.path.is_file():
            raise SystemExit(f"{label} file {input_file.path} does not exist!")


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments, load all listings and write the report.

    Config values supply defaults: ``count`` when ``--count`` is absent, and
    exclusions and path replacements that command-line values extend.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose, args.quiet)

    if not args.inputs:
        parser.error("at least one input file must be specified")
    if args.include_sections and args.sections is None:
        parser.error("--include-sections requires --sections")
    _check_inputs_exist(args.inputs, "Input")
    _check_inputs_exist(args.differences, "Difference")

    max_count = args.count or config.load_max_count() or DEFAULT_MAX_COUNT
    exclusions = config.load_exclusions() + list(args.exclude)
    pairs = config.load_path_replacements() + [(pattern, replacement) for pattern, replacement in args.path_replace]
    try:
        replacements = compile_path_replacements(pairs)
    except PathReplacementError as exc:
        raise SystemExit(str(exc)) from exc

    progress = _stderr_progress if args.progress else None
    start_time = time.monotonic()

    sections: RangeIndex | None = None
    if args.sections is not None:
        section_path = Path(args.sections)
        if not section_path.is_file():
            raise SystemExit(f"Section table {section_path} does not exist!")
        logger.info("Reading section info...")
        sections = RangeIndex.build(parse_section_table(read_text(section_path).splitlines()), progress=progress)

    options = LoadOptions(
        resolve_mode=_resolve_mode(args),
        fill_gaps=args.complete,
        sections=sections,
        include_sections=args.include_sections,
    )
    try:
        symbols = load_symbol_set(args.inputs, args.differences, options, exclusions, progress=progress)
    except (InputFormatError, ExtentInvariantError) as exc:
        raise SystemExit(str(exc)) from exc

    report_options = ReportOptions(
        max_count=max_count,
        show_differences=bool(args.differences),
        complete=args.complete,
        path_replacements=tuple(replacements),
    )
    try:
        if args.out is not None:
            with open(args.out, "w", encoding="utf-8") as handle:
                write_report(handle, symbols, report_options, progress=progress)
        else:
            write_report(sys.stdout, symbols, report_options, progress=progress)
    except OSError as exc:
        raise SystemExit(str(exc)) from exc

    logger.info("Elapsed Time: %.2fs", time.monotonic() - start_time)


if __name__ == "__main__":
    main()
