"""Data cleaning pipeline."""

import time
from dataclasses import dataclass, field
from typing import Any, Callable

from layoffs.core.config import MalformedDatePolicy, Settings, settings
from layoffs.core.exceptions import AmbiguousBackfill, MalformedDateError
from layoffs.ingestion.staging import stage_records
from layoffs.monitoring.logger import get_logger, log_stage_complete, log_stage_start

from .backfill import Backfiller
from .deduplicator import Deduplicator
from .normalizer import (
    BaseNormalizer,
    DateNormalizer,
    EmptyToNullNormalizer,
    SynonymNormalizer,
    SynonymTable,
    TrailingCharsNormalizer,
)
from .schema import FULL_KEY_FIELDS, has_measure, project

logger = get_logger(__name__)

Record = dict[str, Any]


@dataclass
class CleaningStep:
    """Single step in cleaning pipeline.

    Record-level steps (field normalizer, transform, filter) see one record
    at a time. A table step sees the whole working set and may drop, merge
    or fill rows across records.
    """

    name: str
    field: str | None = None
    normalizer: BaseNormalizer | Callable[[Any], Any] | None = None
    transform: Callable[[Record], Record] | None = None
    filter_func: Callable[[Record], bool] | None = None
    table_transform: Callable[[list[Record]], list[Record]] | None = None

    @property
    def is_table_step(self) -> bool:
        """Check if step operates on the whole working set."""
        return self.table_transform is not None

    def apply(self, data: Record) -> Record | None:
        """Apply cleaning step to data.

        Args:
            data: Data dictionary (modified in place)

        Returns:
            Cleaned data or None if filtered out
        """
        # Apply filter
        if self.filter_func and not self.filter_func(data):
            return None

        # Apply transform (whole record)
        if self.transform:
            data = self.transform(data)

        # Missing values are left for other steps to decide on
        if self.field and self.normalizer:
            value = data.get(self.field)
            if value is not None:
                data[self.field] = self.normalizer(value)

        return data


@dataclass
class StepStats:
    """Row counts of one step execution."""

    name: str
    rows_in: int = 0
    rows_out: int = 0
    changed: int = 0
    errors: int = 0
    duration: float = 0.0

    @property
    def removed(self) -> int:
        """Rows that entered the step but did not leave it."""
        return self.rows_in - self.rows_out


class CleaningPipeline:
    """Ordered sequence of cleaning steps over a batch of records."""

    def __init__(self, name: str = "default", stop_on_error: bool = False) -> None:
        """Initialize cleaning pipeline.

        Args:
            name: Pipeline name for logging
            stop_on_error: Re-raise the first record error instead of dropping the record
        """
        self.name = name
        self.stop_on_error = stop_on_error
        self._steps: list[CleaningStep] = []
        self.last_stats: list[StepStats] = []

    @property
    def steps(self) -> list[CleaningStep]:
        """Get configured steps in execution order."""
        return list(self._steps)

    def add_step(self, step: CleaningStep) -> "CleaningPipeline":
        """Add cleaning step to pipeline.

        Args:
            step: CleaningStep to add

        Returns:
            Self for chaining
        """
        self._steps.append(step)
        return self

    def add_normalizer(
        self,
        field: str,
        normalizer: BaseNormalizer | Callable[[Any], Any],
        name: str | None = None,
    ) -> "CleaningPipeline":
        """Add field normalizer.

        Args:
            field: Field name
            normalizer: Normalizer or callable
            name: Step name (default: normalize_<field>)

        Returns:
            Self for chaining
        """
        step = CleaningStep(name=name or f"normalize_{field}", field=field, normalizer=normalizer)
        return self.add_step(step)

    def add_transform(
        self,
        transform: Callable[[Record], Record],
        name: str = "transform",
    ) -> "CleaningPipeline":
        """Add record transform function.

        Args:
            transform: Transform function
            name: Transform name

        Returns:
            Self for chaining
        """
        return self.add_step(CleaningStep(name=name, transform=transform))

    def add_filter(
        self,
        filter_func: Callable[[Record], bool],
        name: str = "filter",
    ) -> "CleaningPipeline":
        """Add filter function.

        Args:
            filter_func: Filter function (return True to keep)
            name: Filter name

        Returns:
            Self for chaining
        """
        return self.add_step(CleaningStep(name=name, filter_func=filter_func))

    def add_table_transform(
        self,
        table_transform: Callable[[list[Record]], list[Record]],
        name: str = "table_transform",
    ) -> "CleaningPipeline":
        """Add a step that rewrites the whole working set.

        Args:
            table_transform: Function from record list to record list
            name: Step name

        Returns:
            Self for chaining
        """
        return self.add_step(CleaningStep(name=name, table_transform=table_transform))

    def clean(self, data: Record) -> Record | None:
        """Clean single data record.

        Args:
            data: Data dictionary

        Returns:
            Cleaned data or None if filtered out
        """
        results = self.clean_batch([data], stop_on_error=True)
        return results[0] if results else None

    def clean_batch(
        self,
        data: list[Record],
        stop_on_error: bool | None = None,
    ) -> list[Record]:
        """Clean batch of data records.

        Steps run one after another over the whole batch. Per-step counts
        are kept in ``last_stats``; ``changed`` counts rows modified by a
        record step, or by a table step that keeps the row count.

        Args:
            data: List of data dictionaries (never modified)
            stop_on_error: Stop processing on first error (default: pipeline setting)

        Returns:
            List of cleaned data (filtered records excluded)
        """
        if stop_on_error is None:
            stop_on_error = self.stop_on_error

        self.last_stats = []
        rows = list(data)

        for step in self._steps:
            stats = StepStats(name=step.name, rows_in=len(rows))
            log_stage_start(self.name, step.name, len(rows))
            start = time.perf_counter()

            if step.is_table_step:
                result = step.table_transform(rows)
                if len(result) == len(rows):
                    stats.changed = sum(1 for old, new in zip(rows, result) if old != new)
            else:
                result = self._apply_record_step(step, rows, stats, stop_on_error)

            stats.rows_out = len(result)
            stats.duration = time.perf_counter() - start
            self.last_stats.append(stats)
            log_stage_complete(
                self.name, step.name, stats.rows_in, stats.rows_out, stats.duration,
                changed=stats.changed,
            )
            rows = result

        errors = sum(s.errors for s in self.last_stats)
        logger.info(
            f"Pipeline '{self.name}' completed | "
            f"input={len(data)} | output={len(rows)} | "
            f"filtered={len(data) - len(rows) - errors} | errors={errors}"
        )

        return rows

    def _apply_record_step(
        self,
        step: CleaningStep,
        rows: list[Record],
        stats: StepStats,
        stop_on_error: bool,
    ) -> list[Record]:
        results = []
        for i, record in enumerate(rows):
            try:
                cleaned = step.apply(dict(record))
            except Exception as e:
                stats.errors += 1
                logger.warning(
                    f"Cleaning error at step '{step.name}' index {i} | "
                    f"company={record.get('company')!r} | {e}"
                )
                if stop_on_error:
                    if isinstance(e, MalformedDateError) and e.row_index is None:
                        raise MalformedDateError(e.value, e.date_format, row_index=i) from e
                    raise
                continue

            if cleaned is None:
                logger.debug(f"Record filtered out at step: {step.name}")
                continue
            if cleaned != record:
                stats.changed += 1
            results.append(cleaned)
        return results

    def __call__(self, data: Record | list[Record]) -> Any:
        """Allow pipeline to be called directly.

        Args:
            data: Single record or list of records

        Returns:
            Cleaned data
        """
        if isinstance(data, list):
            return self.clean_batch(data)
        return self.clean(data)


@dataclass
class CleaningReport:
    """What a layoff cleaning run did to the dataset."""

    input_rows: int = 0
    duplicates_removed: int = 0
    duplicates_after_normalization: int = 0
    industries_nulled: int = 0
    industries_canonicalized: int = 0
    industries_backfilled: int = 0
    countries_trimmed: int = 0
    dates_parsed: int = 0
    dates_nulled: int = 0
    rows_pruned: int = 0
    output_rows: int = 0
    ambiguities: list[AmbiguousBackfill] = field(default_factory=list)
    duration: float = 0.0

    @property
    def values_changed(self) -> int:
        """Total count of field values rewritten."""
        return (
            self.industries_nulled
            + self.industries_canonicalized
            + self.industries_backfilled
            + self.countries_trimmed
            + self.dates_parsed
            + self.dates_nulled
        )

    @property
    def rows_removed(self) -> int:
        """Total count of rows dropped."""
        return self.input_rows - self.output_rows

    def counters(self) -> dict[str, int]:
        """Get the integer counters only."""
        return {
            "input_rows": self.input_rows,
            "duplicates_removed": self.duplicates_removed,
            "duplicates_after_normalization": self.duplicates_after_normalization,
            "industries_nulled": self.industries_nulled,
            "industries_canonicalized": self.industries_canonicalized,
            "industries_backfilled": self.industries_backfilled,
            "countries_trimmed": self.countries_trimmed,
            "dates_parsed": self.dates_parsed,
            "dates_nulled": self.dates_nulled,
            "rows_pruned": self.rows_pruned,
            "output_rows": self.output_rows,
        }

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            **self.counters(),
            "ambiguities": [note.to_dict() for note in self.ambiguities],
            "duration": round(self.duration, 3),
        }


@dataclass
class CleaningResult:
    """Cleaned records together with the run report."""

    records: list[Record]
    report: CleaningReport


class LayoffCleaningPipeline(CleaningPipeline):
    """Normalizer for the layoff dataset.

    Stages, in order: staging copy, full-key deduplication, industry
    empty-to-null, industry synonyms, same-company industry backfill,
    country trailing-period trim, date parsing, a second deduplication for
    rows that normalization made equal, and pruning of rows with no
    layoff measure. Running it on its own output changes nothing.
    """

    def __init__(
        self,
        synonyms: SynonymTable | None = None,
        date_format: str = "%m/%d/%Y",
        malformed_date_policy: MalformedDatePolicy = MalformedDatePolicy.FAIL,
        null_token: str | None = "NULL",
    ) -> None:
        """Initialize layoff pipeline.

        Args:
            synonyms: Industry synonym table (default: built-in variants)
            date_format: strptime format of raw dates
            malformed_date_policy: Abort on unparsable dates, or null them out
            null_token: Text marker for a missing value
        """
        super().__init__(name="layoffs", stop_on_error=True)
        self.null_token = null_token
        self.synonyms = synonyms if synonyms is not None else SynonymTable.default()
        self.deduplicator = Deduplicator(key_fields=FULL_KEY_FIELDS)
        self.backfiller = Backfiller(field="industry", entity_field="company")
        self.date_normalizer = DateNormalizer(
            date_format=date_format, policy=malformed_date_policy, null_token=null_token
        )

        self.add_table_transform(stage_records, name="ingest")
        self.add_table_transform(self.deduplicator.deduplicate, name="deduplicate")
        self.add_normalizer("industry", EmptyToNullNormalizer(), name="industry_empty_to_null")
        self.add_normalizer("industry", SynonymNormalizer(self.synonyms), name="industry_synonyms")
        self.add_table_transform(self.backfiller.backfill, name="industry_backfill")
        self.add_normalizer("country", TrailingCharsNormalizer("."), name="country_trim")
        self.add_normalizer("date", self.date_normalizer, name="date_coercion")
        self.add_table_transform(self.deduplicator.deduplicate, name="settle_duplicates")
        self.add_filter(has_measure, name="prune")
        self.add_transform(project, name="publish")

    def run(self, raw_records: list[Record]) -> CleaningResult:
        """Clean the raw dataset.

        Args:
            raw_records: Raw layoff records (left untouched)

        Returns:
            CleaningResult with cleaned records and report

        Raises:
            IngestionFailure: If the raw records cannot be staged
            MalformedDateError: If a date does not parse and the policy is FAIL
        """
        start = time.perf_counter()
        self.date_normalizer.reset()

        records = self.clean_batch(raw_records)
        stats = {s.name: s for s in self.last_stats}

        report = CleaningReport(
            input_rows=len(raw_records),
            duplicates_removed=stats["deduplicate"].removed,
            duplicates_after_normalization=stats["settle_duplicates"].removed,
            industries_nulled=stats["industry_empty_to_null"].changed,
            industries_canonicalized=stats["industry_synonyms"].changed,
            industries_backfilled=stats["industry_backfill"].changed,
            countries_trimmed=stats["country_trim"].changed,
            dates_parsed=self.date_normalizer.parsed,
            dates_nulled=len(self.date_normalizer.rejected),
            rows_pruned=stats["prune"].removed,
            output_rows=len(records),
            ambiguities=list(self.backfiller.ambiguities),
            duration=time.perf_counter() - start,
        )
        return CleaningResult(records=records, report=report)


def create_layoff_pipeline(config: Settings | None = None) -> LayoffCleaningPipeline:
    """Create the layoff pipeline from settings.

    Args:
        config: Settings to use (default: global settings)

    Returns:
        Configured LayoffCleaningPipeline
    """
    config = config or settings

    if config.industry_synonyms_file:
        synonyms = SynonymTable.from_file(config.industry_synonyms_file)
    else:
        synonyms = SynonymTable.default()

    return LayoffCleaningPipeline(
        synonyms=synonyms,
        date_format=config.date_format,
        malformed_date_policy=config.malformed_date_policy,
        null_token=config.null_token,
    )
