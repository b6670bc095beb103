"""
Emit a JSON report of the manufacturers and device models declared by a
Windows driver INF.

Devices listed verbatim under several architecture-qualified models sections
(`[Vendor]`, `[Vendor.NTamd64]`, ...) are merged into one entry whose
`architectures` list records every section they were seen in (`""` is the
undecorated base section).

Exit codes:
  0  success
  1  invalid arguments or configuration
  2  the INF (or ISO image) could not be read
  3  unexpected error
  4  out of memory
  5  [Manufacturer] section missing
  6  a models-section line has no install section
  7  a string cannot be represented as UTF-8
  8  --check: output file is out of date
"""

from __future__ import annotations

import argparse
import difflib
import json
import sys
from pathlib import Path
from typing import Sequence

from .config import load_settings
from .errors import ExitCode, InfReportError, ResourceExhaustionError, UnclassifiedError
from .iso import read_iso_file
from .reader import InfFile
from .render import render_report
from .report import select_report_data


def _note(message: str) -> None:
    print(f"note: {message}", file=sys.stderr)


def _emit_error(message: str, kind: str) -> None:
    print(json.dumps({"error": message, "kind": kind}, indent=2), file=sys.stderr)


def _unified_diff(a: str, b: str, *, fromfile: str, tofile: str) -> str:
    return "".join(
        difflib.unified_diff(
            a.splitlines(keepends=True),
            b.splitlines(keepends=True),
            fromfile=fromfile,
            tofile=tofile,
        )
    )


def _write_text(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8", newline="\n") as f:
        f.write(content)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="inf-to-json",
        description=__doc__,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        allow_abbrev=False,
    )
    parser.add_argument("inf", help="Path to the INF file (a path inside the image when --iso is given).")
    parser.add_argument("--config", type=Path, default=None, help="TOML settings file.")
    parser.add_argument("--indent", type=int, default=None, help="JSON indentation (default: 2).")
    parser.add_argument(
        "--strings-locale",
        default=None,
        help="Overlay [Strings.<LCID>] on [Strings] when expanding %%tokens%% (e.g. 0409).",
    )
    parser.add_argument(
        "--ensure-ascii",
        action="store_true",
        default=None,
        help="Escape non-ASCII characters in the JSON output.",
    )
    parser.add_argument("--iso", type=Path, default=None, help="Read the INF from inside this ISO image.")
    parser.add_argument("--output", type=Path, default=None, help="Write the report here instead of stdout.")
    parser.add_argument(
        "--check",
        action="store_true",
        help="Check whether --output is up-to-date (do not write).",
    )
    parser.add_argument("--verbose", action="store_true", help="Print progress notes to stderr.")
    return parser


def _load_inf(args: argparse.Namespace, strings_locale: str | None) -> InfFile:
    if args.iso is not None:
        data = read_iso_file(args.iso, args.inf)
        return InfFile.from_bytes(data, source=f"{args.iso.as_posix()}:{args.inf}", strings_locale=strings_locale)
    return InfFile.load(Path(args.inf), strings_locale=strings_locale)


def _run(args: argparse.Namespace) -> int:
    settings = load_settings(args.config).with_overrides(
        indent=args.indent,
        strings_locale=args.strings_locale,
        ensure_ascii=args.ensure_ascii,
    )

    inf = _load_inf(args, settings.strings_locale)
    report = select_report_data(inf)
    rendered = render_report(report, indent=settings.indent, ensure_ascii=settings.ensure_ascii)

    if args.verbose:
        model_count = sum(len(m.devices) for m in report)
        _note(
            f"{inf.source}: {len(inf.enumerate_sections())} sections, "
            f"{len(report)} manufacturers, {model_count} models"
        )

    if args.check:
        existing = ""
        if args.output.exists():
            existing = args.output.read_text(encoding="utf-8", errors="replace")
        if existing != rendered:
            diff = _unified_diff(existing, rendered, fromfile=args.output.as_posix(), tofile="(generated)")
            sys.stderr.write(diff if diff else "report file is out of date\n")
            return ExitCode.OUT_OF_DATE
        return ExitCode.SUCCESS

    if args.output is not None:
        _write_text(args.output, rendered)
        if args.verbose:
            _note(f"wrote {args.output.as_posix()}")
    else:
        sys.stdout.write(rendered)
    return ExitCode.SUCCESS


def _run_classified(args: argparse.Namespace) -> int:
    """Run `_run`, re-raising anything outside the error taxonomy as UnclassifiedError."""

    try:
        return _run(args)
    except (MemoryError, InfReportError):
        raise
    except Exception as e:
        raise UnclassifiedError("Unexpected error") from e


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    try:
        args = parser.parse_args(None if argv is None else list(argv))
    except SystemExit as e:
        # argparse exits 0 for --help and 2 for usage errors.
        return ExitCode.SUCCESS if e.code in (0, None) else ExitCode.INVALID_ARGUMENTS

    if args.check and args.output is None:
        print("error: --check requires --output", file=sys.stderr)
        return ExitCode.INVALID_ARGUMENTS
    if args.indent is not None and args.indent < 0:
        print("error: --indent must be >= 0", file=sys.stderr)
        return ExitCode.INVALID_ARGUMENTS

    try:
        return _run_classified(args)
    except (MemoryError, ResourceExhaustionError):
        # Report nothing: formatting a message may itself fail.
        return ExitCode.OUT_OF_MEMORY
    except InfReportError as e:
        try:
            _emit_error(str(e), e.kind)
        except Exception:
            return ExitCode.UNSPECIFIED_ERROR
        return e.exit_code
