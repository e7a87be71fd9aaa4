"""CLI entry point for the Wrapped report builder.

Walks the upload → mapping → preview → bulk workflow from the terminal.

Usage::

    # Show columns and the automatic mapping of a customer file
    wrapped-builder inspect customers.csv

    # Preview the first customer's report and export its slides
    wrapped-builder sample customers.csv \\
        --business-name "Acme Gym" --business-type Gym \\
        --theme Ocean --output-dir out/sample --pptx out/sample.pptx

    # Generate a report for every row
    wrapped-builder bulk customers.xlsx \\
        --business-name "Acme Gym" --business-type Gym \\
        --map "Member=name" --map "Notes=ignore" \\
        --output-dir out/bulk

    # List themes, run the HTTP API
    wrapped-builder themes
    wrapped-builder serve --port 8000
"""

import argparse
import json
import logging
import re
import sys
from pathlib import Path

from PIL import Image

from wrapped_builder.config import Settings
from wrapped_builder.errors import ConfigurationError, GenerationError, IngestionError
from wrapped_builder.generator.client import ReportGenerator
from wrapped_builder.generator.pptx_builder import build_presentation
from wrapped_builder.generator.prompt import ReportRequest
from wrapped_builder.generator.slideshow import Slideshow, load_slides
from wrapped_builder.processor.bulk import BulkJob, BulkOrchestrator
from wrapped_builder.processor.ingestion import ingest
from wrapped_builder.processor.mapper import auto_map, find_column, mapping_summary, update_mapping
from wrapped_builder.processor.transform import build_customer
from wrapped_builder.qa.validator import DeckValidator
from wrapped_builder.schema.loader import theme_catalog
from wrapped_builder.schema.models import MappedTo
from wrapped_builder.schema.session import BusinessProfile, SessionState
from wrapped_builder.schema.themes import custom_theme, get_theme


# ---------------------------------------------------------------------------
# Session setup
# ---------------------------------------------------------------------------

def _parse_overrides(pairs):
    """``["Member=name", ...]`` -> ``[("Member", MappedTo.NAME), ...]``."""
    overrides = []
    for pair in pairs or []:
        column, sep, role = pair.rpartition("=")
        if not sep or not column:
            _error(f"Invalid --map value {pair!r}. Use COLUMN=ROLE.")
        try:
            overrides.append((column, MappedTo(role.strip().lower())))
        except ValueError:
            roles = ", ".join(m.value for m in MappedTo)
            _error(f"Unknown role {role!r} for column {column!r}. Use one of: {roles}.")
    return overrides


def _resolve_theme(args, settings):
    if args.primary or args.accent:
        if not (args.primary and args.accent):
            _error("--primary and --accent must be given together.")
        try:
            return custom_theme(args.primary, args.accent)
        except ValueError as exc:
            _error(str(exc))
    try:
        return get_theme(args.theme, theme_catalog(settings.themes_file))
    except KeyError as exc:
        _error(exc.args[0])


def _load_session(args, settings) -> SessionState:
    """Ingest the file, apply mapping overrides, and attach business + theme."""
    path = Path(args.file)
    if not path.exists():
        _error(f"Data file not found: {path}")
    try:
        upload = ingest(path)
    except IngestionError as exc:
        _error(str(exc))
    if not upload.rows:
        _error(f"No customer rows found in {path}")
    _info(f"Ingested {len(upload.rows)} row(s), {len(upload.columns)} column(s) from {path}")

    mappings = auto_map(upload.columns)
    for column, role in _parse_overrides(getattr(args, "map", None)):
        try:
            mappings = update_mapping(mappings, find_column(mappings, column), role)
        except KeyError as exc:
            _error(exc.args[0])

    state = SessionState().with_upload(upload, mappings)
    state = state.with_business(BusinessProfile(
        name=args.business_name,
        type=args.business_type,
        context=args.context or "",
        url=args.url or "",
    ))
    return state.with_theme(_resolve_theme(args, settings))


def _job(state: SessionState, args) -> BulkJob:
    return BulkJob(
        business_name=state.business.name,
        business_type=state.business.type,
        business_context=state.business.context,
        business_url=state.business.url,
        theme=state.theme,
        month=args.month,
        year=args.year,
    )


def _load_logo(args):
    if not args.logo:
        return None
    path = Path(args.logo)
    if not path.exists():
        _error(f"Logo file not found: {path}")
    return Image.open(path)


def _slug(name: str) -> str:
    return re.sub(r"[^\w.-]+", "_", name).strip("_") or "customer"


def _export(slides, customer_name, state, args, settings, directory, pptx_path=None):
    """Write PNG slides (and optionally a deck) for one customer."""
    parsed = load_slides(slides)
    if not parsed:
        _warn(f"No renderable slides for {customer_name}")
        return
    show = Slideshow(
        parsed,
        customer_name=customer_name,
        business_name=state.business.name,
        theme=state.theme,
        logo=_load_logo(args),
        settle_delay=settings.settle_delay,
    )
    paths = show.save_all(directory)
    _info(f"Wrote {len(paths)} slide image(s) to {directory}")
    if pptx_path:
        pptx_path = Path(pptx_path)
        pptx_path.parent.mkdir(parents=True, exist_ok=True)
        pptx_path.write_bytes(build_presentation(parsed, state.theme, state.business.name))
        _info(f"Written: {pptx_path}")


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

def cmd_inspect(args):
    """Show columns, automatic mapping, and row count."""
    path = Path(args.file)
    if not path.exists():
        _error(f"Data file not found: {path}")
    try:
        upload = ingest(path)
    except IngestionError as exc:
        _error(str(exc))

    mappings = auto_map(upload.columns)
    print(f"File:     {path}")
    print(f"Rows:     {len(upload.rows)}")
    print(f"Columns:  {len(upload.columns)}")
    print()
    for m in mappings:
        role = m.mapped_to.value
        if m.sub_type:
            role += f" ({m.sub_type.value})"
        print(f"  {m.original_name:<30} {role}")
    print()
    counts = mapping_summary(mappings)
    print("  " + ", ".join(f"{role}: {n}" for role, n in counts.items() if n))


def cmd_sample(args):
    """Generate the first customer's report as a preview."""
    settings = Settings.from_env()
    state = _load_session(args, settings)
    if not state.can_generate_sample:
        _error("A business name and type are required.")

    customer = build_customer(state.upload.rows[0], list(state.mappings))
    _info(f"Generating sample report for {customer.name}...")
    request = _job(state, args).request_for(customer)
    result = _generate(ReportGenerator(settings), request)
    state = state.with_sample(result.report, result.slides)

    if state.sample_slides is None:
        _warn("Response was not a slide list; printing raw text.")
        print(state.sample_report)
        return

    qa = DeckValidator(state.theme).validate(list(state.sample_slides))
    (_info if qa.passed else _warn)(qa.summary())
    if args.verbose:
        print(qa.report(), file=sys.stderr)

    if args.output_dir:
        _export(list(state.sample_slides), customer.name, state, args, settings,
                Path(args.output_dir), pptx_path=args.pptx)
    else:
        print(json.dumps(list(state.sample_slides), indent=2, ensure_ascii=False))


def cmd_bulk(args):
    """Generate a report for every row, one after another."""
    settings = Settings.from_env()
    state = _load_session(args, settings)
    if not state.business.complete:
        _error("A business name and type are required.")
    try:
        settings.require_api_key()
    except ConfigurationError as exc:
        _error(f"{exc}: {exc.details}")

    # Bulk runs start from the preview step.
    state = state.with_sample("", None).start_bulk()

    def progress(done, total):
        nonlocal state
        state = state.with_progress(done, total)
        _info(f"Generated {done}/{total}")

    orchestrator = BulkOrchestrator(
        ReportGenerator(settings).generate,
        delay=settings.bulk_delay,
        on_progress=progress,
    )
    result = orchestrator.run(list(state.upload.rows), list(state.mappings), _job(state, args))
    state = state.with_bulk_result(result.reports)
    _info(result.summary())
    for failure in result.failures:
        _warn(f"Row {failure.index + 1} ({failure.customer_name}): {failure.message}")

    if args.output_dir:
        out = Path(args.output_dir)
        out.mkdir(parents=True, exist_ok=True)
        for report in state.reports:
            if report.slides is None:
                _warn(f"No slides for {report.customer.name}")
                continue
            folder = out / _slug(report.customer.name)
            deck = folder / "deck.pptx" if args.pptx else None
            _export(report.slides, report.customer.name, state, args, settings, folder, deck)
        summary = out / "summary.json"
        summary.write_text(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
        _info(f"Written: {summary}")
    else:
        print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))

    if result.failures and not result.reports:
        sys.exit(1)


def cmd_themes(args):
    """List the available themes."""
    settings = Settings.from_env()
    for theme in theme_catalog(settings.themes_file):
        print(f"  {theme.name:<12} {theme.primary_color}  {theme.accent_color}")
        if args.verbose:
            for g in theme.gradients:
                print(f"      {g}")


def cmd_serve(args):
    """Run the HTTP API with uvicorn."""
    import uvicorn

    uvicorn.run("wrapped_builder.api.server:app", host=args.host, port=args.port)


def _generate(generator, request):
    try:
        return generator.generate(request)
    except ConfigurationError as exc:
        _error(f"{exc}: {exc.details}")
    except GenerationError as exc:
        _error(f"{exc}: {exc.details}")


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
        prog="wrapped-builder",
        description="Generate personalised year-in-review slide decks from customer files.",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        default=False,
        help="Show detailed output and INFO logging.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # ---- inspect ----
    insp = subparsers.add_parser(
        "inspect",
        help="Show columns and their automatic mapping.",
    )
    insp.add_argument("file", help="Customer file (.csv, .xlsx, .xls).")
    insp.set_defaults(func=cmd_inspect)

    # ---- sample ----
    sample = subparsers.add_parser(
        "sample",
        help="Generate a preview report for the first customer.",
    )
    _add_generation_args(sample)
    sample.add_argument(
        "--pptx",
        help="Also write the preview deck to this .pptx path.",
    )
    sample.set_defaults(func=cmd_sample)

    # ---- bulk ----
    bulk = subparsers.add_parser(
        "bulk",
        help="Generate a report for every customer row.",
    )
    _add_generation_args(bulk)
    bulk.add_argument(
        "--pptx",
        action="store_true",
        default=False,
        help="Also write a deck.pptx per customer.",
    )
    bulk.set_defaults(func=cmd_bulk)

    # ---- themes ----
    themes = subparsers.add_parser("themes", help="List available themes.")
    themes.set_defaults(func=cmd_themes)

    # ---- serve ----
    serve = subparsers.add_parser("serve", help="Run the HTTP API.")
    serve.add_argument("--host", default="127.0.0.1", help="Bind address (default: 127.0.0.1).")
    serve.add_argument("--port", type=int, default=8000, help="Port (default: 8000).")
    serve.set_defaults(func=cmd_serve)

    return parser


def _add_generation_args(parser):
    """Add file, business, theme, mapping, and output args to a subparser."""
    parser.add_argument("file", help="Customer file (.csv, .xlsx, .xls).")

    business = parser.add_argument_group("business")
    business.add_argument("--business-name", dest="business_name", required=True,
                          help="Business name shown on the slides.")
    business.add_argument("--business-type", dest="business_type", required=True,
                          help="Kind of business, e.g. Gym or Cafe.")
    business.add_argument("--context", help="Free-text business context for the prompt.")
    business.add_argument("--url", help="Business website to pull extra context from.")
    business.add_argument("--logo", help="Logo image to watermark exported slides.")

    look = parser.add_argument_group("theme")
    look.add_argument("--theme", default="Vibrant", help="Preset theme name (default: Vibrant).")
    look.add_argument("--primary", help="Custom theme primary color (#RRGGBB).")
    look.add_argument("--accent", help="Custom theme accent color (#RRGGBB).")

    parser.add_argument(
        "--map",
        action="append",
        metavar="COLUMN=ROLE",
        help="Override a column's role (name, email, phone, transaction, "
             "metadata, ignore). Repeatable.",
    )
    parser.add_argument("-o", "--output-dir", dest="output_dir",
                        help="Directory for exported slide images.")
    _add_period_args(parser)


def _add_period_args(parser):
    """Add --month / --year args to a subparser."""
    import datetime
    now = datetime.date.today()
    parser.add_argument(
        "--month",
        type=int,
        choices=range(1, 13),
        metavar="1-12",
        default=now.month,
        help=f"Report month (default: {now.month}).",
    )
    parser.add_argument(
        "--year",
        type=int,
        default=now.year,
        help=f"Report year (default: {now.year}).",
    )


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main(argv=None):
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    args.func(args)


if __name__ == "__main__":
    main()
