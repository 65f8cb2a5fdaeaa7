"""Command line interface for pagediff."""
from __future__ import annotations

import argparse
import logging
import sys
from typing import Iterable, Optional

from dotenv import find_dotenv, load_dotenv

from .errors import PageDiffError
from .pipeline import run
from .presets import DiffParams, get_preset, params_from_env
from .report import write_json_report

logger = logging.getLogger("pagediff")

_LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pagediff",
        description="A tool for comparing PDF documents by generating visual diffs.",
    )
    parser.add_argument("-o", "--old", dest="old_pdf", help="Path to the old PDF file")
    parser.add_argument("-n", "--new", dest="new_pdf", help="Path to the new PDF file")
    parser.add_argument(
        "-d",
        "--output-dir",
        help="Directory to save diff images (default: output)",
    )
    parser.add_argument("--dpi", type=float, help="DPI for PDF rendering (default: 300)")
    parser.add_argument(
        "--sensitivity",
        type=float,
        help="Diff sensitivity threshold, 0.0-1.0, lower = more sensitive (default: 0.12)",
    )
    parser.add_argument(
        "--tolerance",
        type=int,
        help="Near-white tolerance (0-255) used when cropping to content (default: 10)",
    )
    parser.add_argument("--preset", default="balanced", help="Preset name (strict|balanced|loose)")
    parser.add_argument("--json", dest="json_report", help="Optional path for a JSON page report")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose output")
    parser.add_argument("--version", action="store_true", help="Print version and exit")
    return parser


def _override_params(base: DiffParams, args: argparse.Namespace) -> DiffParams:
    overrides = {}
    for field_name, arg_name in (
        ("dpi", "dpi"),
        ("sensitivity", "sensitivity"),
        ("background_tolerance", "tolerance"),
        ("output_dir", "output_dir"),
    ):
        value = getattr(args, arg_name)
        if value is not None:
            overrides[field_name] = value
    return base.copy(**overrides)


def main(argv: Optional[Iterable[str]] = None) -> int:
    load_dotenv(find_dotenv(usecwd=True))
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        from . import __version__

        print(__version__)
        return 0

    if not args.old_pdf or not args.new_pdf:
        parser.error("the following arguments are required: -o/--old, -n/--new")

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format=_LOG_FORMAT)

    try:
        preset = get_preset(args.preset)
        params = _override_params(params_from_env(preset.params), args).validate()
    except (KeyError, ValueError) as exc:
        parser.error(str(exc.args[0]) if exc.args else str(exc))
        return 2

    logger.debug("Old PDF: %s", args.old_pdf)
    logger.debug("New PDF: %s", args.new_pdf)
    logger.debug("Parameters: %s", params.to_dict())

    try:
        result = run(args.old_pdf, args.new_pdf, params)
        if args.json_report:
            write_json_report(result, args.json_report)
    except PageDiffError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print(f"Diff images saved to '{params.output_dir}'")
    return 0


if __name__ == "__main__":
    sys.exit(main())
