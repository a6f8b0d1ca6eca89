"""Repository pattern for database operations."""

from datetime import datetime
from typing import Any, Generic, Iterable, TypeVar

from sqlalchemy import delete, func, insert, select
from sqlalchemy.orm import Session

from layoffs.cleaning.schema import LAYOFF_FIELDS

from .models import Base, CleanedLayoff, CleaningRun, RawLayoff, RunStatus

T = TypeVar("T", bound=Base)


class BaseRepository(Generic[T]):
    """Base repository with common operations."""

    def __init__(self, db: Session, model: type[T]) -> None:
        """Initialize repository.

        Args:
            db: Database session
            model: SQLAlchemy model class
        """
        self.db = db
        self.model = model

    def get(self, id: Any) -> T | None:
        """Get record by ID.

        Args:
            id: Record ID

        Returns:
            Record or None if not found
        """
        return self.db.get(self.model, id)

    def count(self) -> int:
        """Count total records.

        Returns:
            Total count
        """
        stmt = select(func.count()).select_from(self.model)
        return self.db.scalar(stmt) or 0


class LayoffRepository(BaseRepository[T]):
    """Shared operations of the raw and cleaned layoff tables."""

    def all_records(self) -> list[dict[str, Any]]:
        """Read the whole table as layoff records, in load order.

        Returns:
            List of record dictionaries
        """
        stmt = select(self.model).order_by(self.model.id)
        return [row.to_record() for row in self.db.scalars(stmt).all()]

    def bulk_insert(self, records: Iterable[dict[str, Any]]) -> int:
        """Insert records without committing.

        Args:
            records: Layoff records

        Returns:
            Number of rows inserted
        """
        rows = [{field: record.get(field) for field in LAYOFF_FIELDS} for record in records]
        if rows:
            self.db.execute(insert(self.model), rows)
        return len(rows)


class RawLayoffRepository(LayoffRepository[RawLayoff]):
    """Repository for the raw table. Rows are only ever appended."""

    def __init__(self, db: Session) -> None:
        super().__init__(db, RawLayoff)


class CleanedLayoffRepository(LayoffRepository[CleanedLayoff]):
    """Repository for the published cleaned table."""

    def __init__(self, db: Session) -> None:
        super().__init__(db, CleanedLayoff)

    def replace_all(self, records: list[dict[str, Any]]) -> int:
        """Swap the table contents for a new cleaned dataset.

        Nothing is committed here; the caller's transaction decides whether
        readers ever see the new contents.

        Args:
            records: Cleaned records

        Returns:
            Number of rows written
        """
        self.db.execute(delete(CleanedLayoff))
        return self.bulk_insert(records)


class CleaningRunRepository(BaseRepository[CleaningRun]):
    """Repository for cleaning run history."""

    def __init__(self, db: Session) -> None:
        super().__init__(db, CleaningRun)

    def start_run(self, source: str) -> CleaningRun:
        """Record a run as started and commit it.

        Args:
            source: Where the raw records come from

        Returns:
            Created run
        """
        run = CleaningRun(source=source, status=RunStatus.RUNNING.value)
        self.db.add(run)
        self.db.commit()
        self.db.refresh(run)
        return run

    def complete_run(
        self,
        run_id: str,
        success: bool = True,
        counters: dict[str, Any] | None = None,
        error: str | None = None,
    ) -> CleaningRun | None:
        """Mark run as completed, without committing.

        Args:
            run_id: Run ID
            success: Whether the run succeeded
            counters: Report counters
            error: Error message if failed

        Returns:
            Updated run or None
        """
        run = self.get(run_id)
        if run is None:
            return None

        run.status = RunStatus.SUCCESS.value if success else RunStatus.FAILED.value
        run.completed_at = datetime.utcnow()
        run.error_message = error
        if counters is not None:
            run.counters = counters
            run.input_rows = counters.get("input_rows", 0)
            run.output_rows = counters.get("output_rows", 0)
        self.db.flush()
        return run

    def latest(self, limit: int = 10) -> list[CleaningRun]:
        """Get most recent runs.

        Args:
            limit: Maximum number of runs

        Returns:
            List of runs, newest first
        """
        stmt = select(CleaningRun).order_by(CleaningRun.started_at.desc()).limit(limit)
        return list(self.db.scalars(stmt).all())
