"""
Holdings listing endpoints.
Read-only views over ingested asset holdings for one owner scope.
"""

from typing import Literal
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..database import get_db
from ..services.ingestion.records import OwnerScope
from ..services.repository import LedgerRepository

router = APIRouter()


@router.get("/")
def list_holdings(
    owner_id: str = Query(..., min_length=1),
    owner_scope: Literal["household", "personal"] = "household",
    db: Session = Depends(get_db),
):
    """
    All holdings for the scope with total value and per-type weight %.
    Values are summed as one currency; there is no FX conversion.
    """
    scope = OwnerScope(kind=owner_scope, owner_id=owner_id)
    records = LedgerRepository(db).list_holdings(scope)

    total_value = sum(r.value for r in records)
    by_type = {}
    for r in records:
        by_type[r.type] = by_type.get(r.type, 0) + r.value

    allocation = [
        {
            "type": asset_type,
            "value": round(value, 2),
            "weight_pct": round(value / total_value * 100, 2) if total_value > 0 else 0,
        }
        for asset_type, value in sorted(by_type.items(), key=lambda kv: -kv[1])
    ]

    return {
        "holdings": [r.model_dump(mode="json", by_alias=True) for r in records],
        "total_value": round(total_value, 2),
        "allocation": allocation,
    }
