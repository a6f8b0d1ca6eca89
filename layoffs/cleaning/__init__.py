"""Cleaning module - Deduplication, normalization and the layoff pipeline."""

from .schema import FULL_KEY_FIELDS, LAYOFF_FIELDS, NARROW_KEY_FIELDS
from .normalizer import (
    DateNormalizer,
    EmptyToNullNormalizer,
    SynonymNormalizer,
    SynonymTable,
    TrailingCharsNormalizer,
)
from .deduplicator import Deduplicator, find_duplicates
from .backfill import Backfiller
from .pipeline import (
    CleaningPipeline,
    CleaningReport,
    CleaningResult,
    CleaningStep,
    LayoffCleaningPipeline,
    create_layoff_pipeline,
)

__all__ = [
    "LAYOFF_FIELDS",
    "FULL_KEY_FIELDS",
    "NARROW_KEY_FIELDS",
    "DateNormalizer",
    "EmptyToNullNormalizer",
    "SynonymNormalizer",
    "SynonymTable",
    "TrailingCharsNormalizer",
    "Deduplicator",
    "find_duplicates",
    "Backfiller",
    "CleaningPipeline",
    "CleaningStep",
    "CleaningReport",
    "CleaningResult",
    "LayoffCleaningPipeline",
    "create_layoff_pipeline",
]
