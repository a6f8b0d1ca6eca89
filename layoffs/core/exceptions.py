"""Exception hierarchy and non-fatal notes for the cleaning job."""

from dataclasses import dataclass
from typing import Any


class LayoffPipelineError(Exception):
    """Base class for errors that abort a cleaning run."""


class IngestionFailure(LayoffPipelineError):
    """Raw dataset could not be read or copied completely."""

    def __init__(self, message: str, row_index: int | None = None) -> None:
        """Initialize ingestion failure.

        Args:
            message: What went wrong
            row_index: Zero-based index of the offending row, if any
        """
        self.row_index = row_index
        if row_index is not None:
            message = f"row {row_index}: {message}"
        super().__init__(message)


class MalformedDateError(LayoffPipelineError, ValueError):
    """Date text does not match the configured format."""

    def __init__(self, value: Any, date_format: str, row_index: int | None = None) -> None:
        """Initialize malformed date error.

        Args:
            value: The offending date value
            date_format: Expected strptime format
            row_index: Zero-based index of the offending row, if known
        """
        self.value = value
        self.date_format = date_format
        self.row_index = row_index
        location = f"row {row_index}: " if row_index is not None else ""
        super().__init__(f"{location}date {value!r} does not match format {date_format!r}")


class SynonymConfigError(LayoffPipelineError):
    """Synonym table file is unreadable or inconsistent."""


@dataclass(frozen=True)
class AmbiguousBackfill:
    """A company whose records disagree on a non-null industry.

    Not an error: the backfill proceeds with ``chosen`` and the note is
    logged and reported.
    """

    company: str
    candidates: tuple[str, ...]
    chosen: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "company": self.company,
            "candidates": list(self.candidates),
            "chosen": self.chosen,
        }
