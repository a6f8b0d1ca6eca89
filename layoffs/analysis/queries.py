"""Read-only aggregate queries over the cleaned layoff table."""

from typing import Any

from sqlalchemy import Float, cast, extract, func, select
from sqlalchemy.orm import Session

from layoffs.database.models import CleanedLayoff

DIMENSIONS = {
    "company": CleanedLayoff.company,
    "location": CleanedLayoff.location,
    "country": CleanedLayoff.country,
    "industry": CleanedLayoff.industry,
    "stage": CleanedLayoff.stage,
}

_total = func.sum(CleanedLayoff.total_laid_off)
_percentage = cast(CleanedLayoff.percentage_laid_off, Float)
_year = extract("year", CleanedLayoff.date)
_month = extract("month", CleanedLayoff.date)


def _as_int(value: Any) -> int | None:
    # Postgres returns Decimal for SUM and EXTRACT
    return None if value is None else int(value)


def max_total_laid_off(db: Session) -> int | None:
    """Largest single layoff count."""
    return _as_int(db.scalar(select(func.max(CleanedLayoff.total_laid_off))))


def percentage_range(db: Session) -> tuple[float | None, float | None]:
    """Highest and lowest layoff percentage.

    Args:
        db: Database session

    Returns:
        Tuple of (max, min); both None for an empty table
    """
    stmt = select(func.max(_percentage), func.min(_percentage)).where(
        CleanedLayoff.percentage_laid_off.isnot(None)
    )
    highest, lowest = db.execute(stmt).one()
    return highest, lowest


def full_shutdowns(db: Session, order_by_funds: bool = True) -> list[dict[str, Any]]:
    """Events where the whole workforce was laid off.

    Args:
        db: Database session
        order_by_funds: Order by funds raised, largest first

    Returns:
        List of layoff records
    """
    stmt = select(CleanedLayoff).where(_percentage == 1.0)
    if order_by_funds:
        stmt = stmt.order_by(CleanedLayoff.funds_raised_millions.desc(), CleanedLayoff.id)
    else:
        stmt = stmt.order_by(CleanedLayoff.id)
    return [row.to_record() for row in db.scalars(stmt).all()]


def largest_single_layoffs(db: Session, limit: int = 5) -> list[tuple[str, int]]:
    """Companies with the largest single layoff events.

    Args:
        db: Database session
        limit: Number of events

    Returns:
        List of (company, total_laid_off), largest first
    """
    stmt = (
        select(CleanedLayoff.company, CleanedLayoff.total_laid_off)
        .where(CleanedLayoff.total_laid_off.isnot(None))
        .order_by(CleanedLayoff.total_laid_off.desc(), CleanedLayoff.company)
        .limit(limit)
    )
    return [(company, _as_int(total)) for company, total in db.execute(stmt).all()]


def total_by(db: Session, dimension: str, limit: int | None = None) -> list[tuple[Any, int | None]]:
    """Sum of layoffs grouped by one column.

    Args:
        db: Database session
        dimension: One of company, location, country, industry, stage
        limit: Keep only the top groups

    Returns:
        List of (value, total), largest total first

    Raises:
        ValueError: If the dimension is unknown
    """
    if dimension not in DIMENSIONS:
        raise ValueError(f"unknown dimension {dimension!r}; expected one of {sorted(DIMENSIONS)}")

    column = DIMENSIONS[dimension]
    total = _total.label("total")
    stmt = (
        select(column, total)
        .group_by(column)
        .order_by(total.desc(), column)
    )
    if limit is not None:
        stmt = stmt.limit(limit)
    return [(value, _as_int(amount)) for value, amount in db.execute(stmt).all()]


def total_by_year(db: Session) -> list[tuple[int | None, int | None]]:
    """Sum of layoffs per calendar year, undated events under None."""
    year = _year.label("year")
    stmt = select(year, _total).group_by(year).order_by(year)
    rows = [(_as_int(y), _as_int(amount)) for y, amount in db.execute(stmt).all()]
    # Undated last regardless of how the backend sorts NULL
    return [r for r in rows if r[0] is not None] + [r for r in rows if r[0] is None]


def top_companies_per_year(db: Session, top_n: int = 3) -> list[dict[str, Any]]:
    """Companies with the most layoffs in each year.

    Companies are ranked per year by their summed layoffs with DENSE_RANK,
    so ties share a rank and more than top_n rows per year may come back.

    Args:
        db: Database session
        top_n: Highest rank to keep

    Returns:
        List of dicts with company, year, total_laid_off and ranking,
        ordered by year then total descending
    """
    year = _year.label("year")
    company_year = (
        select(CleanedLayoff.company, year, _total.label("yearly_total"))
        .where(CleanedLayoff.date.isnot(None), CleanedLayoff.total_laid_off.isnot(None))
        .group_by(CleanedLayoff.company, year)
        .subquery()
    )
    ranking = (
        func.dense_rank()
        .over(partition_by=company_year.c.year, order_by=company_year.c.yearly_total.desc())
        .label("ranking")
    )
    ranked = select(company_year, ranking).subquery()
    stmt = (
        select(ranked)
        .where(ranked.c.ranking <= top_n)
        .order_by(ranked.c.year, ranked.c.yearly_total.desc(), ranked.c.company)
    )
    return [
        {
            "company": row.company,
            "year": _as_int(row.year),
            "total_laid_off": _as_int(row.yearly_total),
            "ranking": _as_int(row.ranking),
        }
        for row in db.execute(stmt).all()
    ]


def rolling_monthly_totals(db: Session) -> list[dict[str, Any]]:
    """Layoffs per month with a running total over months.

    Args:
        db: Database session

    Returns:
        List of dicts with month ("YYYY-MM"), total_laid_off and rolling_total,
        in month order
    """
    monthly = (
        select(_year.label("year"), _month.label("month"), _total.label("monthly_total"))
        .where(CleanedLayoff.date.isnot(None))
        .group_by(_year, _month)
        .subquery()
    )
    rolling = (
        func.sum(monthly.c.monthly_total)
        .over(order_by=[monthly.c.year, monthly.c.month])
        .label("rolling_total")
    )
    stmt = select(monthly, rolling).order_by(monthly.c.year, monthly.c.month)
    return [
        {
            "month": f"{int(row.year):04d}-{int(row.month):02d}",
            "total_laid_off": _as_int(row.monthly_total),
            "rolling_total": _as_int(row.rolling_total),
        }
        for row in db.execute(stmt).all()
    ]


def monthly_totals(db: Session) -> list[tuple[str, int | None]]:
    """Layoffs per month as (month, total), in month order."""
    return [(row["month"], row["total_laid_off"]) for row in rolling_monthly_totals(db)]
