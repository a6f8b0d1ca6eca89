"""Layoff report - prints the aggregate views of the cleaned table.

Usage:
    layoffs report
"""

import sys
from typing import Any, TextIO

from sqlalchemy.orm import Session
from tabulate import tabulate

from layoffs.cleaning.pipeline import CleaningReport

from . import queries


def print_separator(title: str = "", out: TextIO = sys.stdout) -> None:
    """Print a visual separator."""
    if title:
        print(f"\n{'=' * 70}", file=out)
        print(f"  {title}", file=out)
        print(f"{'=' * 70}", file=out)
    else:
        print("-" * 70, file=out)


def _table(rows: list[Any], headers: list[str], out: TextIO) -> None:
    if not rows:
        print("  (empty)", file=out)
        return
    print(tabulate(rows, headers=headers, tablefmt="grid", missingval="-"), file=out)


def show_overview(db: Session, out: TextIO = sys.stdout) -> None:
    """Show largest layoff and percentage range."""
    print_separator("OVERVIEW", out)
    highest, lowest = queries.percentage_range(db)
    rows = [
        ["Largest single layoff", queries.max_total_laid_off(db)],
        ["Highest percentage laid off", highest],
        ["Lowest percentage laid off", lowest],
    ]
    print(tabulate(rows, tablefmt="grid", missingval="-"), file=out)


def show_full_shutdowns(db: Session, top: int, out: TextIO = sys.stdout) -> None:
    """Show companies that laid off their whole workforce."""
    print_separator("100% LAYOFFS BY FUNDS RAISED", out)
    records = queries.full_shutdowns(db)
    rows = [
        [r["company"], r["location"], r["industry"], r["funds_raised_millions"], r["date"]]
        for r in records[:top]
    ]
    _table(rows, ["Company", "Location", "Industry", "Funds ($M)", "Date"], out)
    if records:
        print(f"\n  Showing {len(rows)} of {len(records)} companies", file=out)


def show_totals(db: Session, top: int, out: TextIO = sys.stdout) -> None:
    """Show summed layoffs per dimension."""
    print_separator("LARGEST SINGLE LAYOFFS", out)
    _table(queries.largest_single_layoffs(db, limit=top), ["Company", "Laid off"], out)

    for dimension in ("company", "location", "country", "industry", "stage"):
        print_separator(f"TOTAL BY {dimension.upper()}", out)
        _table(
            queries.total_by(db, dimension, limit=top),
            [dimension.capitalize(), "Laid off"],
            out,
        )

    print_separator("TOTAL BY YEAR", out)
    _table(queries.total_by_year(db), ["Year", "Laid off"], out)


def show_rankings(db: Session, top: int, out: TextIO = sys.stdout) -> None:
    """Show top companies per year and rolling monthly totals."""
    print_separator(f"TOP {top} COMPANIES PER YEAR", out)
    rows = [
        [r["year"], r["ranking"], r["company"], r["total_laid_off"]]
        for r in queries.top_companies_per_year(db, top_n=top)
    ]
    _table(rows, ["Year", "Rank", "Company", "Laid off"], out)

    print_separator("ROLLING MONTHLY TOTAL", out)
    rows = [
        [r["month"], r["total_laid_off"], r["rolling_total"]]
        for r in queries.rolling_monthly_totals(db)
    ]
    _table(rows, ["Month", "Laid off", "Rolling total"], out)


def show_cleaning_report(report: CleaningReport, out: TextIO = sys.stdout) -> None:
    """Show what a cleaning run changed."""
    print_separator("CLEANING REPORT", out)
    rows = [[name.replace("_", " "), value] for name, value in report.counters().items()]
    rows.append(["duration", f"{report.duration:.2f}s"])
    print(tabulate(rows, headers=["Counter", "Value"], tablefmt="grid"), file=out)

    if report.ambiguities:
        print_separator("AMBIGUOUS INDUSTRY BACKFILLS", out)
        rows = [
            [note.company, ", ".join(note.candidates), note.chosen]
            for note in report.ambiguities
        ]
        print(tabulate(rows, headers=["Company", "Candidates", "Chosen"], tablefmt="grid"), file=out)


def show_report(
    db: Session, top: int = 10, per_year: int = 3, out: TextIO = sys.stdout
) -> None:
    """Print every aggregate view of the cleaned table.

    Args:
        db: Database session
        top: Rows per ranking
        per_year: Companies ranked per year
        out: Output stream
    """
    show_overview(db, out)
    show_full_shutdowns(db, top, out)
    show_totals(db, top, out)
    show_rankings(db, per_year, out)
