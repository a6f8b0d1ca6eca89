"""Fill missing categorical values from sibling records of the same entity."""

from typing import Any

from layoffs.core.exceptions import AmbiguousBackfill
from layoffs.monitoring.logger import get_logger, log_quality_note

logger = get_logger(__name__)


class Backfiller:
    """Copies a field's value between records that share an entity key.

    When the entity's records carry several distinct non-null values, the
    first one in input order wins and an AmbiguousBackfill note is recorded.
    """

    def __init__(self, field: str = "industry", entity_field: str = "company") -> None:
        """Initialize backfiller.

        Args:
            field: Field to fill when it is None
            entity_field: Field whose equal values group sibling records
        """
        self.field = field
        self.entity_field = entity_field
        self.ambiguities: list[AmbiguousBackfill] = []

    def resolve(self, records: list[dict[str, Any]]) -> dict[Any, Any]:
        """Pick the fill value for every entity that has one.

        Args:
            records: List of data dictionaries

        Returns:
            Mapping of entity value to chosen fill value
        """
        candidates: dict[Any, list[Any]] = {}
        for record in records:
            value = record.get(self.field)
            if value is None:
                continue
            seen = candidates.setdefault(record.get(self.entity_field), [])
            if value not in seen:
                seen.append(value)

        self.ambiguities = []
        for entity, values in candidates.items():
            if len(values) > 1:
                note = AmbiguousBackfill(
                    company=entity, candidates=tuple(values), chosen=values[0]
                )
                self.ambiguities.append(note)
                log_quality_note(
                    "ambiguous_backfill",
                    f"Ambiguous backfill | {self.entity_field}={entity} | "
                    f"candidates={list(values)} | chosen={values[0]!r}",
                    field=self.field,
                )

        return {entity: values[0] for entity, values in candidates.items()}

    def backfill(self, records: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Fill missing values in place of None.

        Records are copied, never mutated; order and length are preserved.

        Args:
            records: List of data dictionaries

        Returns:
            New list with missing values filled where a sibling has one
        """
        fills = self.resolve(records)
        results = []
        filled = 0

        for record in records:
            record = dict(record)
            if record.get(self.field) is None:
                value = fills.get(record.get(self.entity_field))
                if value is not None:
                    record[self.field] = value
                    filled += 1
            results.append(record)

        logger.debug(
            f"Backfill complete | field={self.field} | filled={filled} | "
            f"ambiguous={len(self.ambiguities)}"
        )
        return results

    def __call__(self, records: list[dict[str, Any]]) -> list[dict[str, Any]]:
        return self.backfill(records)
