"""
Transaction listing endpoints.
Read-only views over ingested transactions for one owner scope.
"""

import logging
from typing import Literal
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..database import get_db
from ..services.ingestion.records import OwnerScope
from ..services.repository import LedgerRepository

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/")
def list_transactions(
    owner_id: str = Query(..., min_length=1),
    owner_scope: Literal["household", "personal"] = "household",
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    """Transactions for a household or personal view, newest first."""
    scope = OwnerScope(kind=owner_scope, owner_id=owner_id)
    records = LedgerRepository(db).list_transactions(scope, limit=limit, offset=offset)
    return {
        "transactions": [r.model_dump(mode="json", by_alias=True) for r in records],
        "count": len(records),
    }


@router.get("/summary")
def transaction_summary(
    owner_id: str = Query(..., min_length=1),
    owner_scope: Literal["household", "personal"] = "household",
    db: Session = Depends(get_db),
):
    """
    Income vs expense totals for the scope.
    Amounts in different currencies are added together as-is.
    """
    scope = OwnerScope(kind=owner_scope, owner_id=owner_id)
    records = LedgerRepository(db).list_transactions(scope)

    income = sum(r.amount for r in records if r.type == "income")
    expenses = sum(r.amount for r in records if r.type == "expense")

    by_category = {}
    for r in records:
        if r.type == "expense":
            by_category[r.category] = by_category.get(r.category, 0) + r.amount

    return {
        "income": round(income, 2),
        "expenses": round(expenses, 2),
        "net": round(income - expenses, 2),
        "expenses_by_category": {k: round(v, 2) for k, v in sorted(by_category.items())},
        "count": len(records),
    }
