"""SQLAlchemy ORM models for the layoff dataset."""

import datetime as dt
from enum import Enum
from typing import Any
from uuid import uuid4

from sqlalchemy import JSON, Date, DateTime, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from layoffs.cleaning.schema import LAYOFF_FIELDS


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class RunStatus(str, Enum):
    """Cleaning run status."""

    RUNNING = "running"
    SUCCESS = "success"
    FAILED = "failed"


class LayoffColumns:
    """Columns shared by the raw and the cleaned table."""

    company: Mapped[str | None] = mapped_column(Text, nullable=True, index=True)
    location: Mapped[str | None] = mapped_column(Text, nullable=True)
    industry: Mapped[str | None] = mapped_column(Text, nullable=True)
    total_laid_off: Mapped[int | None] = mapped_column(Integer, nullable=True)
    percentage_laid_off: Mapped[str | None] = mapped_column(Text, nullable=True)
    stage: Mapped[str | None] = mapped_column(Text, nullable=True)
    country: Mapped[str | None] = mapped_column(Text, nullable=True)
    funds_raised_millions: Mapped[int | None] = mapped_column(Integer, nullable=True)

    def to_record(self) -> dict[str, Any]:
        """Convert to a layoff record (published columns only)."""
        return {field: getattr(self, field) for field in LAYOFF_FIELDS}


class RawLayoff(LayoffColumns, Base):
    """Raw layoff event exactly as loaded; the pipeline only reads it."""

    __tablename__ = "layoffs"

    # Surrogate key only preserves load order; it is not part of the record
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    date: Mapped[str | None] = mapped_column(Text, nullable=True)


class CleanedLayoff(LayoffColumns, Base):
    """Deduplicated, normalized layoff event."""

    __tablename__ = "layoffs_cleaned"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    date: Mapped[dt.date | None] = mapped_column(Date, nullable=True, index=True)


class CleaningRun(Base):
    """One execution of the cleaning job."""

    __tablename__ = "cleaning_runs"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    status: Mapped[str] = mapped_column(String(20), default=RunStatus.RUNNING.value, index=True)
    source: Mapped[str] = mapped_column(String(255), default="database")

    # Timing
    started_at: Mapped[dt.datetime] = mapped_column(DateTime, default=dt.datetime.utcnow)
    completed_at: Mapped[dt.datetime | None] = mapped_column(DateTime, nullable=True)

    # Results
    input_rows: Mapped[int] = mapped_column(Integer, default=0)
    output_rows: Mapped[int] = mapped_column(Integer, default=0)
    counters: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)

    @property
    def duration(self) -> float | None:
        """Calculate run duration in seconds."""
        if self.started_at and self.completed_at:
            return (self.completed_at - self.started_at).total_seconds()
        return None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "status": self.status,
            "source": self.source,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "duration": self.duration,
            "input_rows": self.input_rows,
            "output_rows": self.output_rows,
            "counters": self.counters,
            "error_message": self.error_message,
        }
