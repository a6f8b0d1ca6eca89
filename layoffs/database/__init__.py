"""Database module - Models, Repository, Connection management."""

from .connection import dispose_engine, get_db_context, get_engine, init_db
from .models import Base, CleanedLayoff, CleaningRun, RawLayoff, RunStatus

__all__ = [
    "Base",
    "RawLayoff",
    "CleanedLayoff",
    "CleaningRun",
    "RunStatus",
    "get_engine",
    "get_db_context",
    "init_db",
    "dispose_engine",
]
