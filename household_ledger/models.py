"""
SQLAlchemy models for the Household Ledger.

Tables:
- transactions: Ingested bank transactions, partitioned by owner scope
- holdings: Ingested asset holdings, partitioned by owner scope
- mapping_templates: Saved column mappings for recurring upload formats
- app_settings: Key/value settings that override .env values
"""

from datetime import datetime, timezone
from sqlalchemy import (
    Column, Integer, String, Float, Date, DateTime, Text, JSON, Index
)
from .database import Base


def _utcnow():
    return datetime.now(timezone.utc)


class Transaction(Base):
    __tablename__ = "transactions"

    id = Column(String(36), primary_key=True)  # uuid4
    owner_scope = Column(String(20), nullable=False)  # "household" or "personal"
    owner_id = Column(String(100), nullable=False)  # household id or user id
    date = Column(Date, nullable=False)
    description = Column(Text, nullable=False)
    amount = Column(Float, nullable=False)  # Always positive, sign lives in type
    type = Column(String(10), nullable=False)  # "income" or "expense"
    category = Column(String(100), nullable=False, default="Uncategorized")
    source = Column(String(20), default="csv_import", nullable=False)
    created_at = Column(DateTime, default=_utcnow)

    __table_args__ = (
        Index("idx_transactions_owner", "owner_scope", "owner_id"),
        Index("idx_transactions_owner_date", "owner_scope", "owner_id", "date"),
    )

    def __repr__(self):
        return f"<Transaction {self.date} {self.description[:30]} {self.type} ${self.amount}>"


class Holding(Base):
    __tablename__ = "holdings"

    id = Column(String(36), primary_key=True)
    owner_scope = Column(String(20), nullable=False)
    owner_id = Column(String(100), nullable=False)
    name = Column(String(300), nullable=False)
    type = Column(String(50), nullable=False, default="Other")  # asset class label
    value = Column(Float, nullable=False)
    quantity = Column(Float, nullable=True)
    source = Column(String(20), default="csv_import", nullable=False)
    created_at = Column(DateTime, default=_utcnow)

    __table_args__ = (
        Index("idx_holdings_owner", "owner_scope", "owner_id"),
    )

    def __repr__(self):
        return f"<Holding {self.name} ({self.type}) ${self.value}>"


class MappingTemplate(Base):
    __tablename__ = "mapping_templates"

    id = Column(String(36), primary_key=True)
    owner_id = Column(String(100), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    schema_kind = Column(String(20), nullable=False)  # "transaction" or "holding"
    mapping = Column(JSON, nullable=False)  # field -> column index or name
    skip_rows = Column(Integer, nullable=True)  # header line; NULL = detect, 0 = no header
    created_at = Column(DateTime, default=_utcnow)

    def __repr__(self):
        return f"<MappingTemplate {self.name} ({self.schema_kind})>"


class AppSetting(Base):
    __tablename__ = "app_settings"

    key = Column(String(100), primary_key=True)
    value = Column(Text, nullable=True)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)

    def __repr__(self):
        return f"<AppSetting {self.key}>"
