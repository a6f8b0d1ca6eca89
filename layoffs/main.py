"""
Layoff Cleaner - Command-line entry point

Loads the raw layoff dataset, runs the cleaning pipeline and prints the
aggregate report.

Usage:
    layoffs load [CSV]
    layoffs clean [--input CSV] [--output [CSV]] [--no-db] [--null-dates] [--synonyms FILE]
    layoffs duplicates [--input CSV] [--narrow]
    layoffs report [--top N] [--per-year N]
    layoffs runs [--limit N]

Examples:
    # Load the Kaggle CSV into the raw table, then clean it:
    layoffs load data/layoffs.csv
    layoffs clean --output

    # Clean a CSV without touching the database:
    layoffs clean --input data/layoffs.csv --output out.csv --no-db

    # Inspect candidate duplicates on the narrow key (nothing is deleted):
    layoffs duplicates --narrow

Exit Codes:
    0: Success
    1: Data error (unreadable dataset, malformed date, bad synonym file)
    2: Fatal error (database connection, etc.)
"""

import argparse
import sys
from typing import Any

from tabulate import tabulate

from layoffs.analysis.report import show_cleaning_report, show_report
from layoffs.cleaning.deduplicator import find_duplicates
from layoffs.cleaning.pipeline import create_layoff_pipeline
from layoffs.cleaning.schema import FULL_KEY_FIELDS, LAYOFF_FIELDS, NARROW_KEY_FIELDS
from layoffs.core.config import MalformedDatePolicy, Settings, settings
from layoffs.core.exceptions import LayoffPipelineError
from layoffs.core.job import CleaningJob
from layoffs.database.connection import dispose_engine, get_db_context, init_db
from layoffs.database.repository import CleaningRunRepository, RawLayoffRepository
from layoffs.ingestion.csv_source import read_raw_csv, write_cleaned_csv
from layoffs.monitoring.logger import get_logger, setup_logging

logger = get_logger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        prog="layoffs",
        description="Clean and summarize the company layoffs dataset",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    commands = parser.add_subparsers(dest="command", required=True)

    load = commands.add_parser("load", help="Append a raw CSV to the raw table")
    load.add_argument(
        "csv", nargs="?", default=settings.raw_csv_path, help="Raw dataset CSV (default: RAW_CSV_PATH)"
    )

    clean = commands.add_parser("clean", help="Run the cleaning pipeline")
    clean.add_argument("--input", help="Clean this CSV instead of the raw table")
    clean.add_argument(
        "--output",
        nargs="?",
        const=settings.cleaned_csv_path,
        help="Also write the cleaned dataset to this CSV (bare flag: CLEANED_CSV_PATH)",
    )
    clean.add_argument(
        "--no-db", action="store_true", help="Do not record the run or publish to the database"
    )
    clean.add_argument(
        "--null-dates",
        action="store_true",
        help="Replace unparsable dates with NULL instead of aborting",
    )
    clean.add_argument("--synonyms", help="JSON file of industry synonyms")

    duplicates = commands.add_parser("duplicates", help="List duplicate groups")
    duplicates.add_argument("--input", help="Inspect this CSV instead of the raw table")
    duplicates.add_argument(
        "--narrow",
        action="store_true",
        help="Group on company, industry, total_laid_off and date only",
    )

    report = commands.add_parser("report", help="Print aggregates of the cleaned table")
    report.add_argument("--top", type=int, default=10, help="Rows per ranking")
    report.add_argument("--per-year", type=int, default=3, help="Companies ranked per year")

    runs = commands.add_parser("runs", help="Show recent cleaning runs")
    runs.add_argument("--limit", type=int, default=10, help="Number of runs")

    return parser.parse_args(argv)


def _pipeline_settings(args: argparse.Namespace) -> Settings:
    update: dict[str, Any] = {}
    if args.null_dates:
        update["malformed_date_policy"] = MalformedDatePolicy.NULL
    if args.synonyms:
        update["industry_synonyms_file"] = args.synonyms
    return settings.model_copy(update=update)


def cmd_load(args: argparse.Namespace) -> int:
    records = read_raw_csv(args.csv, null_token=settings.null_token)
    init_db()
    CleaningJob().load_raw(records)
    print(f"Loaded {len(records)} raw records from {args.csv}")
    return 0


def cmd_clean(args: argparse.Namespace) -> int:
    pipeline = create_layoff_pipeline(_pipeline_settings(args))
    raw_records = read_raw_csv(args.input, null_token=settings.null_token) if args.input else None

    if args.no_db:
        if raw_records is None:
            logger.error("--no-db needs --input")
            return 1
        result = pipeline.run(raw_records)
        if args.output:
            write_cleaned_csv(result.records, args.output, null_token=pipeline.null_token)
    else:
        init_db()
        result = CleaningJob(pipeline=pipeline).run(
            raw_records=raw_records,
            source=args.input or "database",
            output_csv=args.output,
        )

    show_cleaning_report(result.report, out=sys.stdout)
    return 0


def cmd_duplicates(args: argparse.Namespace) -> int:
    if args.input:
        records = read_raw_csv(args.input, null_token=settings.null_token)
    else:
        init_db()
        with get_db_context() as db:
            records = RawLayoffRepository(db).all_records()

    key_fields = NARROW_KEY_FIELDS if args.narrow else FULL_KEY_FIELDS
    groups = find_duplicates(records, key_fields=key_fields)

    rows = []
    for number, group in enumerate(groups, start=1):
        for record in group:
            rows.append([number] + [record[field] for field in LAYOFF_FIELDS])

    if rows:
        print(tabulate(rows, headers=["Group", *LAYOFF_FIELDS], tablefmt="grid", missingval="NULL"))
    key_name = "narrow" if args.narrow else "full"
    print(f"\n{len(groups)} duplicate groups on the {key_name} key ({len(rows)} rows)")
    return 0


def cmd_report(args: argparse.Namespace) -> int:
    init_db()
    with get_db_context() as db:
        show_report(db, top=args.top, per_year=args.per_year, out=sys.stdout)
    return 0


def cmd_runs(args: argparse.Namespace) -> int:
    init_db()
    with get_db_context() as db:
        runs = CleaningRunRepository(db).latest(limit=args.limit)
        rows = [
            [
                run.id[:8] + "...",
                run.status,
                run.source,
                run.input_rows,
                run.output_rows,
                str(run.started_at)[:19] if run.started_at else "-",
                run.error_message or "",
            ]
            for run in runs
        ]

    if not rows:
        print("  (no runs)")
        return 0
    print(
        tabulate(
            rows,
            headers=["ID", "Status", "Source", "Input", "Output", "Started", "Error"],
            tablefmt="grid",
        )
    )
    return 0


COMMANDS = {
    "load": cmd_load,
    "clean": cmd_clean,
    "duplicates": cmd_duplicates,
    "report": cmd_report,
    "runs": cmd_runs,
}


def main(argv: list[str] | None = None) -> int:
    """
    Main entry point.

    Returns:
        Exit code
    """
    args = parse_args(argv)
    setup_logging()

    try:
        return COMMANDS[args.command](args)
    except LayoffPipelineError as e:
        logger.error(f"{args.command} failed: {e}")
        return 1
    except Exception as e:
        logger.exception(f"Fatal error in {args.command}: {e}")
        return 2
    finally:
        dispose_engine()


if __name__ == "__main__":
    sys.exit(main())
