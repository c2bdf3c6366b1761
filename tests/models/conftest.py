"""Shared fixtures for model tests."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest
import sqlalchemy
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

# Add project root to path
PROJECT_ROOT = str(Path(__file__).resolve().parent.parent.parent)
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from models.base import Base


@pytest.fixture
def test_db():
    """Create in-memory test database with schema.

    Each test gets a fresh database to avoid conflicts.
    """
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=None
    )

    # Enable foreign key constraints
    @sqlalchemy.event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(engine)

    Session = sessionmaker(bind=engine)
    session = Session()

    yield session

    session.close()
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def sample_run(test_db):
    """Create a sample CrosscheckRun for testing."""
    from models import CrosscheckRun

    run = CrosscheckRun(
        data_type="READGROUP",
        lod_threshold=-5.0,
        loss_of_het_rate=0.5,
        engine="stub_engine:create_engine",
        unexpected_count=0,
    )
    test_db.add(run)
    test_db.commit()
    test_db.refresh(run)
    return run
