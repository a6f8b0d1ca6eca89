"""Analysis module - Aggregate views over the cleaned table."""

from .queries import (
    full_shutdowns,
    largest_single_layoffs,
    max_total_laid_off,
    monthly_totals,
    percentage_range,
    rolling_monthly_totals,
    top_companies_per_year,
    total_by,
    total_by_year,
)
from .report import show_report

__all__ = [
    "max_total_laid_off",
    "percentage_range",
    "full_shutdowns",
    "largest_single_layoffs",
    "total_by",
    "total_by_year",
    "top_companies_per_year",
    "monthly_totals",
    "rolling_monthly_totals",
    "show_report",
]
