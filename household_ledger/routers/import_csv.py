"""
File import endpoints.
Handles statement and holdings uploads with unknown column layouts and
runs them through the ingestion pipeline.

Upload flow (two-step dialog in the UI):
1. POST /preview  - detect header row, propose a column mapping
2. POST /transactions or /holdings - ingest with the confirmed mapping
   (or no mapping at all for smart upload)
"""

import json
import logging
from typing import Optional
from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from pydantic import ValidationError
from sqlalchemy.orm import Session

from ..database import get_db
from .settings import get_int_setting, get_setting
from ..services.ingestion.decoder import decode, decode_bytes
from ..services.ingestion.errors import IngestionError, MappingIncomplete
from ..services.ingestion.mapper import auto_map, describe_mapping, validate_mapping
from ..services.ingestion.pipeline import ingest
from ..services.ingestion.records import OwnerScope
from ..services.ingestion.schema import get_schema
from ..services.repository import LedgerRepository

logger = logging.getLogger(__name__)

router = APIRouter()

PREVIEW_SAMPLE_ROWS = 5


def _fatal(error: IngestionError) -> HTTPException:
    """Fatal pipeline errors become a single 400 with no partial results."""
    detail = {"error": error.code, "message": str(error)}
    if isinstance(error, MappingIncomplete):
        detail["missingFields"] = error.missing_fields
    return HTTPException(status_code=400, detail=detail)


async def _read_upload(file: UploadFile, db: Session) -> str:
    content = await file.read()
    max_mb = get_int_setting("max_upload_mb", db)
    if len(content) > max_mb * 1024 * 1024:
        raise HTTPException(
            status_code=413,
            detail=f"File too large: limit is {max_mb} MB",
        )
    return decode_bytes(content)


def _parse_scope(owner_scope: str, owner_id: str) -> OwnerScope:
    try:
        return OwnerScope(kind=owner_scope, owner_id=owner_id)
    except ValidationError:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid owner scope: {owner_scope!r} / {owner_id!r}. "
                   f"Scope must be 'household' or 'personal' with a non-empty owner_id",
        )


def _parse_mapping(raw: Optional[str]) -> Optional[dict]:
    if raw is None or not raw.strip():
        return None
    try:
        mapping = json.loads(raw)
    except json.JSONDecodeError as e:
        raise HTTPException(status_code=400, detail=f"Column mapping is not valid JSON: {e}")
    if not isinstance(mapping, dict):
        raise HTTPException(status_code=400, detail="Column mapping must be a JSON object")
    return mapping


async def _run_upload(
    schema_kind: str,
    file: UploadFile,
    owner_scope: str,
    owner_id: str,
    mapping: Optional[str],
    skip_rows: Optional[int],
    template_id: Optional[str],
    db: Session,
) -> dict:
    scope = _parse_scope(owner_scope, owner_id)
    explicit = _parse_mapping(mapping)
    repo = LedgerRepository(db)

    if template_id:
        template = repo.get_template(template_id)
        if not template:
            raise HTTPException(status_code=404, detail=f"Template not found: {template_id}")
        if template.schema_kind != schema_kind:
            raise HTTPException(
                status_code=400,
                detail=f"Template '{template.name}' is for {template.schema_kind} uploads",
            )
        # An explicit mapping/skip_rows sent with the upload wins over the template
        explicit = explicit or template.mapping
        if skip_rows is None:
            skip_rows = template.skip_rows

    if skip_rows is not None and skip_rows < 0:
        raise HTTPException(status_code=400, detail="skip_rows cannot be negative")

    text = await _read_upload(file, db)

    try:
        result = ingest(
            text,
            schema_kind,
            scope,
            repo,
            mapping=explicit,
            skip_rows=skip_rows,
            default_category=get_setting("default_category", db),
        )
    except IngestionError as e:
        logger.warning(f"Upload of {file.filename} failed: {e}")
        raise _fatal(e)

    return {
        "success": True,
        "file": file.filename,
        "successCount": result.success_count,
        "failureCount": result.failure_count,
        "accepted": [r.model_dump(mode="json", by_alias=True) for r in result.accepted],
        "failedRows": [r.model_dump(mode="json", by_alias=True) for r in result.rejected],
        "columnMapping": result.mapping,
        "headerLineNumber": result.header_line_number,
    }


@router.post("/transactions")
async def upload_transactions(
    file: UploadFile = File(...),
    owner_scope: str = Form("household"),
    owner_id: str = Form(...),
    mapping: Optional[str] = Form(None),
    skip_rows: Optional[int] = Form(None),
    template_id: Optional[str] = Form(None),
    db: Session = Depends(get_db),
):
    """Import a bank statement export. Omit `mapping` for smart upload."""
    return await _run_upload(
        "transaction", file, owner_scope, owner_id, mapping, skip_rows, template_id, db,
    )


@router.post("/holdings")
async def upload_holdings(
    file: UploadFile = File(...),
    owner_scope: str = Form("household"),
    owner_id: str = Form(...),
    mapping: Optional[str] = Form(None),
    skip_rows: Optional[int] = Form(None),
    template_id: Optional[str] = Form(None),
    db: Session = Depends(get_db),
):
    """Import a brokerage holdings export. Omit `mapping` for smart upload."""
    return await _run_upload(
        "holding", file, owner_scope, owner_id, mapping, skip_rows, template_id, db,
    )


@router.post("/preview")
async def preview_upload(
    file: UploadFile = File(...),
    schema_kind: str = Form("transaction"),
    skip_rows: Optional[int] = Form(None),
    db: Session = Depends(get_db),
):
    """
    Detect the header row and propose a column mapping without storing anything.
    The UI shows this to the user to confirm or override before uploading.
    """
    text = await _read_upload(file, db)

    try:
        schema = get_schema(schema_kind)
        grid = decode(text, schema, skip_rows=skip_rows)
    except IngestionError as e:
        raise _fatal(e)

    proposed = auto_map(grid.header_row, schema)
    try:
        validate_mapping(proposed, schema, width=len(grid.header_row) or None)
        missing = []
    except MappingIncomplete as e:
        missing = e.missing_fields

    samples = [row.cells for row in grid.data_rows if not row.is_blank()][:PREVIEW_SAMPLE_ROWS]

    return {
        "file": file.filename,
        "schemaKind": schema.kind,
        "delimiter": "tab" if grid.delimiter == "\t" else "comma",
        "headerLineNumber": grid.header_line_number,
        "headers": grid.header_row,
        "proposedMapping": describe_mapping(proposed, grid.header_row),
        "missingFields": missing,
        "sampleRows": samples,
    }
