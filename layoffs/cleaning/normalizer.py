"""Field normalizers for layoff records."""

import json
from abc import ABC, abstractmethod
from datetime import date, datetime
from pathlib import Path
from typing import Any, Iterable, Mapping

from layoffs.core.config import MalformedDatePolicy
from layoffs.core.exceptions import MalformedDateError, SynonymConfigError
from layoffs.monitoring.logger import get_logger, log_quality_note

logger = get_logger(__name__)


class BaseNormalizer(ABC):
    """Base class for normalizers."""

    @abstractmethod
    def normalize(self, value: Any) -> Any:
        """Normalize value.

        Args:
            value: Value to normalize

        Returns:
            Normalized value
        """
        pass

    def __call__(self, value: Any) -> Any:
        """Allow normalizer to be called directly.

        Args:
            value: Value to normalize

        Returns:
            Normalized value
        """
        return self.normalize(value)


class NullTokenNormalizer(BaseNormalizer):
    """Turns the dataset's textual null marker into None."""

    def __init__(self, null_token: str | None = "NULL") -> None:
        self.null_token = null_token

    def normalize(self, value: Any) -> Any:
        if value is None:
            return None
        if self.null_token is not None and value == self.null_token:
            return None
        return value


class IntegerNormalizer(BaseNormalizer):
    """Parser for integer columns read from text sources."""

    def __init__(self, null_token: str | None = "NULL") -> None:
        """Initialize integer normalizer.

        Args:
            null_token: Text marker that means "missing"
        """
        self.null_token = null_token

    def normalize(self, value: Any) -> int | None:
        """Parse integer value.

        Args:
            value: Cell value

        Returns:
            Integer or None for empty/null cells

        Raises:
            ValueError: If the text is not an integer
        """
        if value is None:
            return None

        if isinstance(value, bool):
            raise ValueError(f"not an integer: {value!r}")
        if isinstance(value, int):
            return value
        if isinstance(value, float):
            if not value.is_integer():
                raise ValueError(f"not an integer: {value!r}")
            return int(value)

        text = str(value).strip()
        if not text or text == self.null_token:
            return None

        try:
            return int(text)
        except ValueError:
            # Spreadsheet exports write counts as "120.0"
            number = float(text)
            if not number.is_integer():
                raise ValueError(f"not an integer: {value!r}") from None
            return int(number)


class EmptyToNullNormalizer(BaseNormalizer):
    """Unifies empty strings with None."""

    def normalize(self, value: Any) -> Any:
        if value == "":
            return None
        return value


class TrailingCharsNormalizer(BaseNormalizer):
    """Strips every trailing occurrence of the given characters."""

    def __init__(self, chars: str = ".") -> None:
        """Initialize trailing character normalizer.

        Args:
            chars: Characters to strip from the end of the value
        """
        self.chars = chars

    def normalize(self, value: Any) -> Any:
        if not isinstance(value, str):
            return value
        return value.rstrip(self.chars)


class SynonymTable:
    """Allow-list of textual variants and the canonical label each maps to.

    Lookup is exact and case-sensitive; anything not listed is left alone.
    """

    DEFAULT_INDUSTRY_SYNONYMS: dict[str, list[str]] = {
        "Crypto": ["Crypto Currency", "CryptoCurrency"],
    }

    def __init__(self, groups: Mapping[str, Iterable[str]] | None = None) -> None:
        """Initialize synonym table.

        Args:
            groups: Mapping of canonical label to its variants

        Raises:
            SynonymConfigError: If a variant is claimed by two labels or a
                label is both a variant and a canonical
        """
        self._variants: dict[str, str] = {}
        for canonical, variants in (groups or {}).items():
            for variant in variants:
                self.add(variant, canonical)

    def add(self, variant: str, canonical: str) -> None:
        """Register a variant.

        Args:
            variant: Text as it appears in the raw data
            canonical: Label to replace it with

        Raises:
            SynonymConfigError: If the variant already maps elsewhere, or the
                pair would chain one label into another
        """
        existing = self._variants.get(variant)
        if existing is not None and existing != canonical:
            raise SynonymConfigError(
                f"variant {variant!r} maps to both {existing!r} and {canonical!r}"
            )
        # Lookup resolves one step, so no label may be both a variant and a canonical
        if canonical in self._variants:
            raise SynonymConfigError(
                f"label {canonical!r} is already a variant of {self._variants[canonical]!r}"
            )
        if variant == canonical:
            return
        if variant in self.canonical_labels:
            raise SynonymConfigError(f"variant {variant!r} is already a canonical label")
        self._variants[variant] = canonical

    def lookup(self, value: Any) -> Any:
        """Return the canonical label for value, or value itself."""
        if not isinstance(value, str):
            return value
        return self._variants.get(value, value)

    def __contains__(self, value: object) -> bool:
        return value in self._variants

    def __len__(self) -> int:
        return len(self._variants)

    @property
    def canonical_labels(self) -> set[str]:
        """Get all canonical labels.

        Returns:
            Set of labels that variants map to
        """
        return set(self._variants.values())

    @classmethod
    def default(cls) -> "SynonymTable":
        """Build the table of known industry variants."""
        return cls(cls.DEFAULT_INDUSTRY_SYNONYMS)

    @classmethod
    def from_file(cls, path: str | Path) -> "SynonymTable":
        """Load a table from a JSON file.

        The file holds an object of ``canonical: [variant, ...]``.

        Args:
            path: Path to the JSON file

        Returns:
            Loaded SynonymTable

        Raises:
            SynonymConfigError: If the file is missing or malformed
        """
        path = Path(path)
        try:
            with open(path, "r", encoding="utf-8") as f:
                groups = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise SynonymConfigError(f"cannot read synonym file {path}: {e}") from e

        if not isinstance(groups, dict) or not all(
            isinstance(k, str) and isinstance(v, list) and all(isinstance(x, str) for x in v)
            for k, v in groups.items()
        ):
            raise SynonymConfigError(
                f"synonym file {path} must map each canonical label to a list of variants"
            )

        table = cls(groups)
        logger.info(f"Loaded synonym table | path={path} | variants={len(table)}")
        return table


class SynonymNormalizer(BaseNormalizer):
    """Replaces known variants with their canonical label."""

    def __init__(self, table: SynonymTable | None = None) -> None:
        self.table = table if table is not None else SynonymTable.default()

    def normalize(self, value: Any) -> Any:
        return self.table.lookup(value)


class DateNormalizer(BaseNormalizer):
    """Parser for free-text dates in one fixed format."""

    def __init__(
        self,
        date_format: str = "%m/%d/%Y",
        policy: MalformedDatePolicy = MalformedDatePolicy.FAIL,
        null_token: str | None = "NULL",
    ) -> None:
        """Initialize date normalizer.

        Args:
            date_format: strptime format every date string must match
            policy: Raise on malformed dates, or replace them with None
            null_token: Text marker that means "no date"
        """
        self.date_format = date_format
        self.policy = MalformedDatePolicy(policy)
        self.null_token = null_token
        self.parsed = 0
        self.rejected: list[str] = []

    def reset(self) -> None:
        """Reset parse counters."""
        self.parsed = 0
        self.rejected = []

    def normalize(self, value: Any) -> date | None:
        """Normalize date value.

        Args:
            value: Date text, or an already parsed date

        Returns:
            Calendar date, or None when there is no date

        Raises:
            MalformedDateError: If the text does not match and policy is FAIL
        """
        if value is None:
            return None

        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value

        text = str(value).strip()
        if not text or text == self.null_token:
            return None

        try:
            parsed = datetime.strptime(text, self.date_format).date()
        except ValueError:
            if self.policy == MalformedDatePolicy.FAIL:
                raise MalformedDateError(value, self.date_format) from None
            self.rejected.append(text)
            log_quality_note("date_nulled", f"Unparsable date replaced with NULL | value={text!r}")
            return None

        self.parsed += 1
        return parsed
