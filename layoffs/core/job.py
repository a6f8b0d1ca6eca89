"""Cleaning job - runs the pipeline between the raw and cleaned tables."""

import time
from contextlib import AbstractContextManager
from pathlib import Path
from typing import Any, Callable

from sqlalchemy.orm import Session

from layoffs.cleaning.pipeline import CleaningResult, LayoffCleaningPipeline, create_layoff_pipeline
from layoffs.database.connection import get_db_context
from layoffs.database.repository import (
    CleanedLayoffRepository,
    CleaningRunRepository,
    RawLayoffRepository,
)
from layoffs.ingestion.csv_source import write_cleaned_csv
from layoffs.monitoring.logger import get_logger, log_run_complete

logger = get_logger(__name__)

SessionScope = Callable[[], AbstractContextManager[Session]]


class CleaningJob:
    """One-shot batch job: read raw rows, clean them, publish the result.

    The cleaned table is replaced inside a single transaction, so a failed
    run leaves the previously published table as it was.
    """

    def __init__(
        self,
        pipeline: LayoffCleaningPipeline | None = None,
        session_scope: SessionScope = get_db_context,
    ) -> None:
        """Initialize cleaning job.

        Args:
            pipeline: Pipeline to run (default: built from settings)
            session_scope: Factory of commit-or-rollback session contexts
        """
        self.pipeline = pipeline or create_layoff_pipeline()
        self.session_scope = session_scope

    def load_raw(self, records: list[dict[str, Any]]) -> int:
        """Append records to the raw table.

        Args:
            records: Raw layoff records

        Returns:
            Number of rows loaded
        """
        with self.session_scope() as db:
            count = RawLayoffRepository(db).bulk_insert(records)
        logger.info(f"Raw records loaded | rows={count}")
        return count

    def run(
        self,
        raw_records: list[dict[str, Any]] | None = None,
        source: str = "database",
        publish: bool = True,
        output_csv: str | Path | None = None,
    ) -> CleaningResult:
        """Run the cleaning job.

        Args:
            raw_records: Records to clean (default: the raw table)
            source: Label of the record source for run history
            publish: Replace the cleaned table with the result
            output_csv: Also write the result to this CSV file

        Returns:
            CleaningResult of the pipeline

        Raises:
            LayoffPipelineError: If ingestion or date coercion fails; nothing is published
        """
        with self.session_scope() as db:
            run_id = CleaningRunRepository(db).start_run(source=source).id

        logger.info(f"Cleaning run started | id={run_id} | source={source}")
        start = time.perf_counter()

        try:
            with self.session_scope() as db:
                if raw_records is None:
                    raw_records = RawLayoffRepository(db).all_records()

                result = self.pipeline.run(raw_records)

                if publish:
                    CleanedLayoffRepository(db).replace_all(result.records)
                if output_csv is not None:
                    write_cleaned_csv(
                        result.records, output_csv, null_token=self.pipeline.null_token
                    )

                CleaningRunRepository(db).complete_run(
                    run_id, success=True, counters=result.report.to_dict()
                )
        except Exception as e:
            with self.session_scope() as db:
                CleaningRunRepository(db).complete_run(run_id, success=False, error=str(e))
            log_run_complete(run_id, time.perf_counter() - start, success=False, error=str(e))
            raise

        log_run_complete(
            run_id, time.perf_counter() - start, success=True, **result.report.counters()
        )
        return result
