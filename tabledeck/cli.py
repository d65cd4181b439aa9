"""CLI entry point for Table Deck Builder.

Orchestrates the full pipeline: config loading, spreadsheet reading,
chunking, table rendering, PPTX assembly, and QA validation.

Usage::

    # Build a deck from the first worksheet
    python -m tabledeck.cli generate data/data.xlsx -o output/tables.pptx

    # Fewer rows per slide, another worksheet, custom font
    python -m tabledeck.cli generate data/data.xlsx -o output/tables.pptx \\
        --sheet "Q1" --rows-per-slide 20 --font "DejaVu Sans"

    # Use a YAML config file
    python -m tabledeck.cli generate data/data.csv -o out.pptx --config deck.yaml

    # Validate an existing deck
    python -m tabledeck.cli validate --pptx output/tables.pptx

    # Show columns, row count and the slide plan for a source
    python -m tabledeck.cli inspect data/data.xlsx

    # Write the default config to YAML for editing
    python -m tabledeck.cli config -o deck.yaml
"""

import argparse
import logging
import sys
from pathlib import Path

from tabledeck.errors import ConfigError, TableDeckError
from tabledeck.generator.pptx_builder import write_atomic
from tabledeck.pipeline import run
from tabledeck.processor.chunking import RowChunker
from tabledeck.processor.ingestion import read_rows, split_header
from tabledeck.qa.validator import PackageValidator
from tabledeck.schema.loader import load_config, save_config
from tabledeck.schema.models import DeckConfig


# ---------------------------------------------------------------------------
# Config loading
# ---------------------------------------------------------------------------

def _load_config(args):
    """Build a validated DeckConfig from --config plus CLI overrides."""
    try:
        if getattr(args, "config", None):
            config = load_config(args.config)
        else:
            config = DeckConfig()
        config = config.with_overrides(
            rows_per_slide=getattr(args, "rows_per_slide", None),
            margin=getattr(args, "margin", None),
            font_family=getattr(args, "font", None),
            font_size=getattr(args, "font_size", None),
        )
        config.validate()
    except ConfigError as exc:
        _error(exc.describe())
    return config


def _sheet(args):
    """--sheet as an index when numeric, else a worksheet name."""
    sheet = getattr(args, "sheet", None)
    if sheet is not None and sheet.isdigit():
        return int(sheet)
    return sheet


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

def cmd_generate(args):
    """Generate a PPTX deck from a spreadsheet."""
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    config = _load_config(args)
    _info(f"Reading {args.input}")

    report = run(args.input, config, sheet=_sheet(args))
    for stage in report.stages:
        if stage.ok:
            _info(stage.detail)

    if not report.ok:
        _error(report.failure_message())

    # QA validation
    if not args.skip_qa:
        _info("Running QA validation...")
        qa_result = PackageValidator(config).validate(
            report.pptx_bytes, expected_slides=len(report.chunk_sizes),
        )
        if qa_result.passed:
            _info(qa_result.summary())
            for issue in qa_result.warnings:
                _warn(str(issue))
        else:
            if args.verbose:
                print(qa_result.report(), file=sys.stderr)
            _error(qa_result.summary())
    else:
        _info("QA validation skipped (--skip-qa)")

    # Write output
    try:
        output = write_atomic(args.output, report.pptx_bytes)
    except TableDeckError as exc:
        _error(exc.describe())
    _info(f"Success! Presentation saved to: {output.resolve()}")


def cmd_validate(args):
    """Validate an existing PPTX deck."""
    config = _load_config(args)
    pptx_path = Path(args.pptx)
    if not pptx_path.exists():
        _error(f"PPTX file not found: {pptx_path}")

    _info(f"Validating {pptx_path}")
    qa_result = PackageValidator(config).validate(
        pptx_path.read_bytes(), expected_slides=args.slides,
    )

    print(qa_result.report())
    sys.exit(0 if qa_result.passed else 1)


def cmd_inspect(args):
    """Show the columns, data rows and slide plan of a source file."""
    config = _load_config(args)
    try:
        header, data = split_header(read_rows(args.input, _sheet(args)))
    except TableDeckError as exc:
        _error(exc.describe())

    plan = RowChunker(config.rows_per_slide).plan(len(data))

    print(f"Source:      {args.input}")
    print(f"Columns:     {len(header)}")
    print(f"Data rows:   {len(data)}")
    print(f"Slides:      {len(plan)} ({config.rows_per_slide} rows/slide)")

    if args.verbose:
        print()
        for index, title in enumerate(header):
            print(f"  [{index:2d}] {title}")
        print()
        start = 1
        for index, size in enumerate(plan):
            print(f"  slide {index + 1:3d}: rows {start}-{start + size - 1}")
            start += size


def cmd_config(args):
    """Write the effective config to YAML."""
    config = _load_config(args)
    save_config(config, args.output)
    _info(f"Written: {args.output}")


# ---------------------------------------------------------------------------
# Output helpers
# ---------------------------------------------------------------------------

def _info(msg):
    print(f"  {msg}", file=sys.stderr)


def _warn(msg):
    print(f"  WARNING: {msg}", file=sys.stderr)


def _error(msg):
    print(f"  ERROR: {msg}", file=sys.stderr)
    sys.exit(1)


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------

def build_parser():
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="tabledeck",
        description="Render spreadsheet rows as table images on PowerPoint slides.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # ---- generate ----
    gen = subparsers.add_parser(
        "generate",
        help="Generate a PPTX deck from a spreadsheet.",
    )
    _add_source_args(gen)
    _add_config_args(gen)
    _add_style_args(gen)
    gen.add_argument(
        "-o", "--output",
        required=True,
        help="Output PPTX file path.",
    )
    gen.add_argument(
        "--skip-qa",
        action="store_true",
        default=False,
        help="Skip QA validation after generation.",
    )
    gen.add_argument(
        "-v", "--verbose",
        action="store_true",
        default=False,
        help="Show debug logging and the full QA report on failure.",
    )
    gen.set_defaults(func=cmd_generate)

    # ---- validate ----
    val = subparsers.add_parser(
        "validate",
        help="Validate the structure of an existing PPTX deck.",
    )
    _add_config_args(val)
    val.add_argument(
        "--pptx",
        required=True,
        help="Path to the PPTX file to validate.",
    )
    val.add_argument(
        "--slides",
        type=int,
        default=None,
        help="Expected slide count.",
    )
    val.set_defaults(func=cmd_validate)

    # ---- inspect ----
    insp = subparsers.add_parser(
        "inspect",
        help="Show columns, row count and slide plan for a source.",
    )
    _add_source_args(insp)
    _add_config_args(insp)
    insp.add_argument(
        "-v", "--verbose",
        action="store_true",
        default=False,
        help="List column names and per-slide row ranges.",
    )
    insp.set_defaults(func=cmd_inspect)

    # ---- config ----
    cfg = subparsers.add_parser(
        "config",
        help="Write the effective configuration to a YAML file.",
    )
    _add_config_args(cfg)
    _add_style_args(cfg)
    cfg.add_argument(
        "-o", "--output",
        required=True,
        help="Output YAML file path.",
    )
    cfg.set_defaults(func=cmd_config)

    return parser


def _add_source_args(parser):
    """Add the input path and --sheet args to a subparser."""
    parser.add_argument(
        "input",
        help="Source spreadsheet (.xlsx, .xlsm or .csv); first row is the header.",
    )
    parser.add_argument(
        "--sheet",
        default=None,
        help="Worksheet name or 0-based index (default: first sheet).",
    )


def _add_config_args(parser):
    """Add --config / --rows-per-slide / --margin args to a subparser."""
    parser.add_argument(
        "--config",
        help="Path to a YAML config file.",
    )
    parser.add_argument(
        "--rows-per-slide",
        dest="rows_per_slide",
        type=int,
        default=None,
        help="Data rows per slide (default: 30).",
    )
    parser.add_argument(
        "--margin",
        type=int,
        default=None,
        help="Empty border around the table image in EMU (default: 400000).",
    )


def _add_style_args(parser):
    """Add font args to a subparser."""
    style = parser.add_argument_group("table style")
    style.add_argument(
        "--font",
        default=None,
        help="Font family or .ttf path (default: Arial, with fallbacks).",
    )
    style.add_argument(
        "--font-size",
        dest="font_size",
        type=int,
        default=None,
        help="Font size in pixels (default: 20).",
    )


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main(argv=None):
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    args.func(args)


if __name__ == "__main__":
    main()
