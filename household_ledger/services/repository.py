"""
Ledger repository: typed access to stored transactions, holdings and
mapping templates.

The ingestion pipeline only talks to this class. It reads a scope's records
for duplicate checks and appends new ones; it never updates or deletes.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional, Union

from sqlalchemy.orm import Session

from ..models import Holding, MappingTemplate, Transaction
from .ingestion.records import HoldingRecord, OwnerScope, TransactionRecord

logger = logging.getLogger(__name__)


def _to_transaction_record(row: Transaction) -> TransactionRecord:
    return TransactionRecord(
        id=row.id,
        date=row.date,
        description=row.description,
        amount=row.amount,
        type=row.type,
        category=row.category,
        owner_scope=row.owner_scope,
        owner_id=row.owner_id,
        created_at=row.created_at,
    )


def _to_holding_record(row: Holding) -> HoldingRecord:
    return HoldingRecord(
        id=row.id,
        name=row.name,
        type=row.type,
        value=row.value,
        quantity=row.quantity,
        owner_scope=row.owner_scope,
        owner_id=row.owner_id,
        created_at=row.created_at,
    )


class LedgerRepository:
    def __init__(self, db: Session):
        self.db = db

    # ── Transactions ──

    def list_transactions(
        self,
        scope: OwnerScope,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> list[TransactionRecord]:
        query = (
            self.db.query(Transaction)
            .filter(
                Transaction.owner_scope == scope.kind,
                Transaction.owner_id == scope.owner_id,
            )
            .order_by(Transaction.date.desc(), Transaction.created_at.desc())
        )
        if offset:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)
        return [_to_transaction_record(row) for row in query.all()]

    def put_transaction(self, record: TransactionRecord) -> None:
        self.db.add(Transaction(
            id=record.id,
            owner_scope=record.owner_scope,
            owner_id=record.owner_id,
            date=record.date,
            description=record.description,
            amount=record.amount,
            type=record.type,
            category=record.category,
            created_at=record.created_at,
        ))

    # ── Holdings ──

    def list_holdings(
        self,
        scope: OwnerScope,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> list[HoldingRecord]:
        query = (
            self.db.query(Holding)
            .filter(
                Holding.owner_scope == scope.kind,
                Holding.owner_id == scope.owner_id,
            )
            .order_by(Holding.name)
        )
        if offset:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)
        return [_to_holding_record(row) for row in query.all()]

    def put_holding(self, record: HoldingRecord) -> None:
        self.db.add(Holding(
            id=record.id,
            owner_scope=record.owner_scope,
            owner_id=record.owner_id,
            name=record.name,
            type=record.type,
            value=record.value,
            quantity=record.quantity,
            created_at=record.created_at,
        ))

    def put(self, record: Union[TransactionRecord, HoldingRecord]) -> None:
        if isinstance(record, TransactionRecord):
            self.put_transaction(record)
        elif isinstance(record, HoldingRecord):
            self.put_holding(record)
        else:
            raise TypeError(f"Unsupported record type: {type(record).__name__}")

    def list_for(self, schema_kind: str, scope: OwnerScope) -> list[Union[TransactionRecord, HoldingRecord]]:
        if schema_kind == "transaction":
            return self.list_transactions(scope)
        if schema_kind == "holding":
            return self.list_holdings(scope)
        raise ValueError(f"Unknown schema kind: {schema_kind}")

    # ── Mapping templates ──

    def create_template(
        self,
        owner_id: str,
        name: str,
        schema_kind: str,
        mapping: dict,
        skip_rows: Optional[int] = None,
    ) -> MappingTemplate:
        template = MappingTemplate(
            id=str(uuid.uuid4()),
            owner_id=owner_id,
            name=name,
            schema_kind=schema_kind,
            mapping=mapping,
            skip_rows=skip_rows,
            created_at=datetime.now(timezone.utc),
        )
        self.db.add(template)
        self.db.commit()
        logger.info(f"Saved {schema_kind} mapping template '{name}' for {owner_id}")
        return template

    def list_templates(self, owner_id: str, schema_kind: Optional[str] = None) -> list[MappingTemplate]:
        query = self.db.query(MappingTemplate).filter(MappingTemplate.owner_id == owner_id)
        if schema_kind:
            query = query.filter(MappingTemplate.schema_kind == schema_kind)
        return query.order_by(MappingTemplate.name).all()

    def get_template(self, template_id: str) -> Optional[MappingTemplate]:
        return self.db.query(MappingTemplate).filter(MappingTemplate.id == template_id).first()

    def delete_template(self, template_id: str) -> bool:
        template = self.get_template(template_id)
        if not template:
            return False
        self.db.delete(template)
        self.db.commit()
        return True

    # ── Unit of work ──

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()
