"""Column layout of the layoff dataset."""

# Column order of the source table and of the published cleaned table
LAYOFF_FIELDS: tuple[str, ...] = (
    "company",
    "location",
    "industry",
    "total_laid_off",
    "percentage_laid_off",
    "date",
    "stage",
    "country",
    "funds_raised_millions",
)

# Every descriptive column; two rows equal on all of them are duplicates
FULL_KEY_FIELDS: tuple[str, ...] = LAYOFF_FIELDS

# Too narrow to delete by: same company and date may still differ in location or stage
NARROW_KEY_FIELDS: tuple[str, ...] = ("company", "industry", "total_laid_off", "date")

INTEGER_FIELDS: frozenset[str] = frozenset({"total_laid_off", "funds_raised_millions"})

MEASURE_FIELDS: tuple[str, ...] = ("total_laid_off", "percentage_laid_off")


def has_measure(record: dict) -> bool:
    """Check that a record carries at least one layoff magnitude.

    Args:
        record: Layoff record

    Returns:
        True if total_laid_off or percentage_laid_off is present
    """
    return any(record.get(field) is not None for field in MEASURE_FIELDS)


def project(record: dict) -> dict:
    """Restrict a record to the published columns, in table order."""
    return {field: record.get(field) for field in LAYOFF_FIELDS}
