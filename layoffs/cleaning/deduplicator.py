"""Record deduplication by row ranking."""

from typing import Any, Hashable, Iterable

from layoffs.monitoring.logger import get_logger

from .schema import FULL_KEY_FIELDS

logger = get_logger(__name__)


class Deduplicator:
    """Ranks records within groups of equal key and keeps the first of each.

    Key values are compared exactly: case-sensitive, None equal to None and
    distinct from the empty string.
    """

    def __init__(self, key_fields: Iterable[str] | None = None) -> None:
        """Initialize deduplicator.

        Args:
            key_fields: Fields that make up the key (default: every column)
        """
        self.key_fields: tuple[str, ...] = tuple(key_fields or FULL_KEY_FIELDS)

    def generate_key(self, record: dict[str, Any]) -> tuple[Hashable, ...]:
        """Build the partition key for a record.

        Args:
            record: Data dictionary

        Returns:
            Tuple of key values in key_fields order
        """
        # Tag each value with its type so 1 and "1" never collide
        return tuple((type(record.get(k)).__name__, record.get(k)) for k in self.key_fields)

    def rank(self, records: list[dict[str, Any]]) -> list[tuple[int, dict[str, Any]]]:
        """Assign a duplication rank to every record.

        Rank starts at 1 for the first occurrence of a key in input order and
        increments for each repeat. The rank is returned alongside the record,
        never written into it.

        Args:
            records: List of data dictionaries

        Returns:
            List of (rank, record) pairs in input order
        """
        counts: dict[tuple[Hashable, ...], int] = {}
        ranked = []
        for record in records:
            key = self.generate_key(record)
            counts[key] = counts.get(key, 0) + 1
            ranked.append((counts[key], record))
        return ranked

    def deduplicate(
        self,
        records: list[dict[str, Any]],
        keep: str = "first",
    ) -> list[dict[str, Any]]:
        """Remove duplicates, keeping rank-1 rows in input order.

        Args:
            records: List of data dictionaries
            keep: Which duplicate to keep ("first" or "last")

        Returns:
            Deduplicated list
        """
        if keep not in ("first", "last"):
            raise ValueError(f"keep must be 'first' or 'last', got {keep!r}")

        ordered = list(reversed(records)) if keep == "last" else records
        results = [record for rank, record in self.rank(ordered) if rank == 1]
        if keep == "last":
            results.reverse()

        duplicates = len(records) - len(results)
        logger.info(
            f"Deduplication complete | input={len(records)} | "
            f"duplicates={duplicates} | output={len(results)}"
        )
        return results

    def __call__(self, records: list[dict[str, Any]]) -> list[dict[str, Any]]:
        return self.deduplicate(records)


def find_duplicates(
    records: list[dict[str, Any]],
    key_fields: Iterable[str] | None = None,
) -> list[list[dict[str, Any]]]:
    """Find groups of records sharing a key, without removing anything.

    Args:
        records: List of data dictionaries
        key_fields: Fields to use for comparison (default: every column)

    Returns:
        List of duplicate groups, in order of first appearance
    """
    dedup = Deduplicator(key_fields=key_fields)
    groups: dict[tuple[Hashable, ...], list[dict[str, Any]]] = {}

    for record in records:
        groups.setdefault(dedup.generate_key(record), []).append(record)

    # Return only groups with duplicates
    return [group for group in groups.values() if len(group) > 1]
