"""Working copy of the raw dataset."""

import copy
from typing import Any, Iterable

from layoffs.cleaning.schema import LAYOFF_FIELDS
from layoffs.core.exceptions import IngestionFailure
from layoffs.monitoring.logger import get_logger

logger = get_logger(__name__)


def stage_records(records: Iterable[dict[str, Any]]) -> list[dict[str, Any]]:
    """Copy every raw record into a working set.

    Nothing is filtered or transformed; the caller's records are never
    touched by later stages because each one is deep-copied here.

    Args:
        records: Raw records

    Returns:
        List of independent copies in input order

    Raises:
        IngestionFailure: If the source cannot be iterated or a record lacks a column
    """
    staged = []
    try:
        for index, record in enumerate(records):
            if not isinstance(record, dict):
                raise IngestionFailure(
                    f"expected a mapping, got {type(record).__name__}", row_index=index
                )
            missing = [field for field in LAYOFF_FIELDS if field not in record]
            if missing:
                raise IngestionFailure(f"missing columns {missing}", row_index=index)
            staged.append(copy.deepcopy(record))
    except IngestionFailure:
        raise
    except Exception as e:
        raise IngestionFailure(f"raw dataset could not be copied: {e}") from e

    logger.debug(f"Staged raw records | rows={len(staged)}")
    return staged
