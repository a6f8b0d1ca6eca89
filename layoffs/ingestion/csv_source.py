"""CSV source and sink for layoff records."""

import csv
from datetime import date
from pathlib import Path
from typing import Any

from layoffs.cleaning.normalizer import IntegerNormalizer, NullTokenNormalizer
from layoffs.cleaning.schema import INTEGER_FIELDS, LAYOFF_FIELDS
from layoffs.core.exceptions import IngestionFailure
from layoffs.monitoring.logger import get_logger

logger = get_logger(__name__)


def read_raw_csv(path: str | Path, null_token: str | None = "NULL") -> list[dict[str, Any]]:
    """Read the raw dataset from a CSV file.

    Integer columns are parsed (empty or null-token cells become None); text
    columns only have the null token replaced by None.

    Args:
        path: CSV file with a header row naming the layoff columns
        null_token: Text marker for missing values

    Returns:
        List of raw records in file order

    Raises:
        IngestionFailure: If the file is unreadable, lacks a column, or holds
            a non-integer in an integer column
    """
    path = Path(path)
    to_int = IntegerNormalizer(null_token=null_token)
    to_text = NullTokenNormalizer(null_token=null_token)
    records = []

    try:
        with open(path, "r", newline="", encoding="utf-8-sig") as f:
            reader = csv.DictReader(f)
            header = reader.fieldnames or []
            missing = [field for field in LAYOFF_FIELDS if field not in header]
            if missing:
                raise IngestionFailure(f"{path} is missing columns {missing}")

            for index, row in enumerate(reader):
                record = {}
                for field in LAYOFF_FIELDS:
                    value = row[field]
                    if field in INTEGER_FIELDS:
                        try:
                            record[field] = to_int(value)
                        except ValueError as e:
                            raise IngestionFailure(f"{field}: {e}", row_index=index) from e
                    else:
                        record[field] = to_text(value)
                records.append(record)
    except OSError as e:
        raise IngestionFailure(f"cannot read {path}: {e}") from e
    except csv.Error as e:
        raise IngestionFailure(f"malformed CSV {path}: {e}") from e

    logger.info(f"Read raw CSV | path={path} | rows={len(records)}")
    return records


def write_cleaned_csv(
    records: list[dict[str, Any]], path: str | Path, null_token: str | None = "NULL"
) -> int:
    """Write cleaned records to a CSV file.

    Dates are written in ISO format and missing values as the null token, so
    read_raw_csv gives back None for them. Without a null token they are empty
    cells.

    Args:
        records: Cleaned records
        path: Output path (parent directories are created)
        null_token: Text marker for missing values

    Returns:
        Number of rows written
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    null_cell = "" if null_token is None else null_token

    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(LAYOFF_FIELDS)
        for record in records:
            row = []
            for field in LAYOFF_FIELDS:
                value = record.get(field)
                if isinstance(value, date):
                    value = value.isoformat()
                row.append(null_cell if value is None else value)
            writer.writerow(row)

    logger.info(f"Wrote cleaned CSV | path={path} | rows={len(records)}")
    return len(records)
