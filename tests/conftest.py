"""
Shared fixtures.

Every test gets its own in-memory SQLite database; the app's get_db
dependency is overridden so API tests never touch ~/HouseholdLedger.
"""

import os

# Must be set before household_ledger.database is imported
os.environ.setdefault("HOUSEHOLD_LEDGER_DATABASE_URL", "sqlite://")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from household_ledger import models  # noqa: F401 - register tables
from household_ledger.database import Base, get_db
from household_ledger.services.ingestion.records import OwnerScope
from household_ledger.services.repository import LedgerRepository


class FakeRepository:
    """In-memory stand-in for LedgerRepository used by pipeline tests."""

    def __init__(self, existing=None):
        self.stored = list(existing or [])
        self.snapshots = 0
        self.commits = 0

    def list_for(self, schema_kind, scope):
        self.snapshots += 1
        return [
            r for r in self.stored
            if r.kind == schema_kind
            and r.owner_scope == scope.kind
            and r.owner_id == scope.owner_id
        ]

    def put(self, record):
        self.stored.append(record)

    def commit(self):
        self.commits += 1


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def repo(db):
    return LedgerRepository(db)


@pytest.fixture
def fake_repo():
    return FakeRepository()


@pytest.fixture
def household():
    return OwnerScope(kind="household", owner_id="house-1")


@pytest.fixture
def personal():
    return OwnerScope(kind="personal", owner_id="user-1")


@pytest.fixture
def client(session_factory):
    from fastapi.testclient import TestClient
    from household_ledger.main import app

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()
