"""Pytest configuration and fixtures."""

import os
import sys
from contextlib import contextmanager
from pathlib import Path

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Set test environment before settings are first imported
os.environ["APP_ENV"] = "development"
os.environ["DEBUG"] = "false"
os.environ["LOG_TO_FILES"] = "false"
os.environ["DATABASE_URL"] = f"sqlite:///{project_root / 'test_data' / 'test.db'}"
os.environ.pop("INDUSTRY_SYNONYMS_FILE", None)
os.environ.pop("MALFORMED_DATE_POLICY", None)

from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from layoffs.database.models import Base  # noqa: E402


def layoff_record(**fields):
    """Build a raw layoff record with sensible defaults."""
    record = {
        "company": "Acme",
        "location": "SF Bay Area",
        "industry": "Retail",
        "total_laid_off": 100,
        "percentage_laid_off": "0.1",
        "date": "03/04/2022",
        "stage": "Post-IPO",
        "country": "United States",
        "funds_raised_millions": 50,
    }
    record.update(fields)
    return record


@pytest.fixture(scope="session", autouse=True)
def setup_test_environment():
    """Setup test environment."""
    test_data_dir = project_root / "test_data"
    test_data_dir.mkdir(exist_ok=True)

    yield

    # Cleanup
    import shutil
    if test_data_dir.exists():
        shutil.rmtree(test_data_dir)


@pytest.fixture
def make_record():
    """Factory for raw layoff records."""
    return layoff_record


@pytest.fixture
def sample_raw_records():
    """Raw records covering every cleaning rule."""
    return [
        layoff_record(company="Oda", location="Oslo", country="United States."),
        layoff_record(company="Oda", location="Oslo", country="United States."),
        layoff_record(company="Coinbase", industry=None, total_laid_off=1100,
                      percentage_laid_off="0.18", date="06/14/2022"),
        layoff_record(company="Coinbase", industry="Crypto Currency", total_laid_off=950,
                      percentage_laid_off="0.2", date="01/10/2023"),
        layoff_record(company="Juul", industry="", total_laid_off=400,
                      percentage_laid_off=None, date="11/10/2022"),
        layoff_record(company="Juul", industry="Consumer", total_laid_off=None,
                      percentage_laid_off="0.3", date="05/03/2022"),
        layoff_record(company="Bally's Interactive", industry=None, total_laid_off=None,
                      percentage_laid_off=None, date="01/18/2023"),
        layoff_record(company="Airbnb", industry="Travel", total_laid_off=1900,
                      percentage_laid_off="0.25", date="05/05/2020", country="United States"),
        layoff_record(company="Fast", industry="Finance", total_laid_off=None,
                      percentage_laid_off="1", date="04/05/2022", funds_raised_millions=124),
    ]


@pytest.fixture
def db_engine():
    """In-memory SQLite engine with all tables created."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_scope(db_engine):
    """Commit-or-rollback session context factory bound to the test engine."""
    factory = sessionmaker(bind=db_engine, autoflush=False, expire_on_commit=False)

    @contextmanager
    def scope():
        db = factory()
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    return scope


@pytest.fixture
def db_session(session_scope):
    """Database session on the in-memory engine."""
    with session_scope() as db:
        yield db
