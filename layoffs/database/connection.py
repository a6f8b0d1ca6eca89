"""Engine and session handling for the layoff database."""

from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path

from sqlalchemy import create_engine, inspect
from sqlalchemy.engine import URL, Engine, make_url
from sqlalchemy.orm import Session, sessionmaker

from layoffs.core.config import settings
from layoffs.monitoring.logger import get_logger

from .models import Base

logger = get_logger(__name__)

_engine: Engine | None = None
_SessionLocal: sessionmaker | None = None


def _sqlite_file(url: URL) -> Path | None:
    if url.get_backend_name() != "sqlite":
        return None
    if not url.database or url.database == ":memory:":
        return None
    return Path(url.database)


def get_engine() -> Engine:
    """Get or create the engine for DATABASE_URL.

    A SQLite file gets its directory created first. Server databases get a
    small pool that pings connections before handing them out.

    Returns:
        SQLAlchemy Engine instance
    """
    global _engine

    if _engine is not None:
        return _engine

    url = make_url(settings.database_url)
    echo = settings.debug and settings.log_level == "DEBUG"

    db_file = _sqlite_file(url)
    if db_file is not None:
        db_file.parent.mkdir(parents=True, exist_ok=True)

    if settings.is_sqlite:
        _engine = create_engine(url, echo=echo)
    else:
        _engine = create_engine(url, pool_size=5, max_overflow=10, pool_pre_ping=True, echo=echo)

    logger.info(f"Database engine created | url={url.render_as_string(hide_password=True)}")
    return _engine


def get_session_factory() -> sessionmaker:
    """Get or create the session factory bound to the engine."""
    global _SessionLocal

    if _SessionLocal is None:
        # Run rows are read after their session commits
        _SessionLocal = sessionmaker(bind=get_engine(), autoflush=False, expire_on_commit=False)

    return _SessionLocal


@contextmanager
def get_db_context() -> Generator[Session, None, None]:
    """Open one unit of work.

    Everything done in the block is committed together when it exits
    normally, and rolled back together when it raises.

    Yields:
        Database session
    """
    db = get_session_factory()()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def init_db() -> None:
    """Create the raw, cleaned and run history tables if they are missing."""
    engine = get_engine()
    Base.metadata.create_all(bind=engine)
    logger.debug(f"Tables ready | tables={sorted(inspect(engine).get_table_names())}")


def dispose_engine() -> None:
    """Close pooled connections and forget the engine.

    The next get_engine() call builds a fresh engine from the settings.
    """
    global _engine, _SessionLocal

    if _engine is not None:
        _engine.dispose()
    _engine = None
    _SessionLocal = None
