"""Ingestion module - Raw dataset sources and staging."""

from .csv_source import read_raw_csv, write_cleaned_csv
from .staging import stage_records

__all__ = ["read_raw_csv", "write_cleaned_csv", "stage_records"]
