"""
Database setup and session management for SQLite.
The database file lives at ~/HouseholdLedger/ledger.db by default;
set HOUSEHOLD_LEDGER_DATABASE_URL to point somewhere else.
"""

import os
from pathlib import Path
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, declarative_base

DATABASE_URL = os.environ.get("HOUSEHOLD_LEDGER_DATABASE_URL")

if not DATABASE_URL:
    # Default location: ~/HouseholdLedger/ledger.db
    DB_DIR = Path.home() / "HouseholdLedger"
    DB_DIR.mkdir(exist_ok=True)
    DATABASE_URL = f"sqlite:///{DB_DIR / 'ledger.db'}"

engine = create_engine(
    DATABASE_URL,
    connect_args={"check_same_thread": False},  # Required for SQLite + FastAPI
    echo=False,
)


@event.listens_for(engine, "connect")
def set_sqlite_pragma(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """FastAPI dependency that provides a database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    """Create all tables if they don't exist."""
    from . import models  # noqa: F401 - import to register models
    Base.metadata.create_all(bind=engine)
