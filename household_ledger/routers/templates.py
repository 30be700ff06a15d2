"""
Column mapping templates.
A template remembers the mapping and header position for a bank export the
user uploads regularly, so the next upload can just pass `template_id`.
"""

from datetime import datetime
from typing import Literal, Optional, Union
from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from ..database import get_db
from ..services.repository import LedgerRepository
from ..services.ingestion.schema import get_schema

router = APIRouter()


class TemplateIn(BaseModel):
    owner_id: str = Field(min_length=1)
    name: str = Field(min_length=1, max_length=100)
    schema_kind: Literal["transaction", "holding"] = "transaction"
    mapping: dict[str, Union[int, str, None]]
    skip_rows: Optional[int] = Field(default=None, ge=0)  # None = detect the header


class TemplateOut(BaseModel):
    id: str
    owner_id: str
    name: str
    schema_kind: str
    mapping: dict[str, Union[int, str, None]]
    skip_rows: Optional[int] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


@router.post("/", response_model=TemplateOut)
def create_template(req: TemplateIn, db: Session = Depends(get_db)):
    """Save a column mapping under a name."""
    schema = get_schema(req.schema_kind)
    unknown = [key for key in req.mapping if schema.get(key) is None]
    if unknown:
        raise HTTPException(
            status_code=400,
            detail=f"Unknown {schema.kind} fields: {', '.join(unknown)}. "
                   f"Expected: {', '.join(schema.field_names)}",
        )
    return LedgerRepository(db).create_template(
        owner_id=req.owner_id,
        name=req.name,
        schema_kind=req.schema_kind,
        mapping=req.mapping,
        skip_rows=req.skip_rows,
    )


@router.get("/", response_model=list[TemplateOut])
def list_templates(
    owner_id: str = Query(...),
    schema_kind: Optional[str] = None,
    db: Session = Depends(get_db),
):
    """All templates saved by a user."""
    return LedgerRepository(db).list_templates(owner_id, schema_kind=schema_kind)


@router.delete("/{template_id}")
def delete_template(template_id: str, db: Session = Depends(get_db)):
    if not LedgerRepository(db).delete_template(template_id):
        raise HTTPException(status_code=404, detail="Template not found")
    return {"status": "deleted", "id": template_id}
