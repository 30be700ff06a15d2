"""
Ingestion pipeline: upload text -> accepted records + rejected rows.

    decode (header row) -> map columns -> snapshot existing records
        -> per row: normalize -> duplicate check -> persist

One parameterized pipeline serves both transaction statements and holdings
exports; `schema_kind` picks the schema and the row normalizer.

Decoder and mapper failures abort the call before anything is stored.
Row failures are collected and never abort the batch.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Optional

from ..categorize import DEFAULT_CATEGORY
from .decoder import GridRow, decode
from .dedup import DuplicateChecker
from .errors import RowRejected
from .mapper import ColumnMapping, ExplicitMapping, resolve_mapping
from .normalizer import normalize_holding, normalize_transaction
from .records import IngestionResult, OwnerScope, RejectedRow
from .schema import get_schema

logger = logging.getLogger(__name__)

# One lock per owner scope: covers snapshot -> commit so that two uploads to
# the same scope in this process can't both insert the same record.
# scope -> [lock, uploads holding or waiting]; dropped when the count hits 0.
_scope_locks: dict[OwnerScope, list] = {}
_scope_locks_guard = threading.Lock()


@contextmanager
def _scope_lock(scope: OwnerScope):
    with _scope_locks_guard:
        entry = _scope_locks.setdefault(scope, [threading.Lock(), 0])
        entry[1] += 1
    try:
        with entry[0]:
            yield
    finally:
        with _scope_locks_guard:
            entry[1] -= 1
            if entry[1] == 0:
                del _scope_locks[scope]


def _normalize_row(
    schema_kind: str,
    row: GridRow,
    mapping: ColumnMapping,
    scope: OwnerScope,
    default_category: str,
):
    if schema_kind == "transaction":
        return normalize_transaction(row, mapping, scope, default_category=default_category)
    if schema_kind == "holding":
        return normalize_holding(row, mapping, scope)
    raise ValueError(f"Unknown schema kind: {schema_kind}")


def ingest(
    file_text: str,
    schema_kind: str,
    owner_scope: OwnerScope,
    repository,
    mapping: Optional[ExplicitMapping] = None,
    skip_rows: Optional[int] = None,
    default_category: str = DEFAULT_CATEGORY,
) -> IngestionResult:
    """
    Ingest one uploaded file into the owner's ledger.

    Args:
        file_text: Decoded file contents (comma- or tab-delimited)
        schema_kind: "transaction" or "holding"
        owner_scope: Household or personal scope the records belong to
        repository: Storage with list_for(), put() and commit()
        mapping: Explicit field -> column mapping; None or empty = auto-detect
        skip_rows: Header line number to use instead of detecting it
        default_category: Category for transactions no rule matches

    Returns:
        IngestionResult with accepted records and line-numbered rejections

    Raises:
        HeaderNotFound, MappingIncomplete, UnknownSchema: nothing was stored
    """
    schema = get_schema(schema_kind)
    grid = decode(file_text, schema, skip_rows=skip_rows)
    column_mapping = resolve_mapping(grid.header_row, schema, mapping)

    result = IngestionResult(
        mapping=column_mapping,
        header_line_number=grid.header_line_number,
    )

    with _scope_lock(owner_scope):
        checker = DuplicateChecker(repository.list_for(schema.kind, owner_scope))
        logger.info(
            f"Ingesting {len(grid.data_rows)} line(s) as {schema.kind} for {owner_scope} "
            f"({len(checker)} existing record(s))"
        )

        for row in grid.data_rows:
            if row.is_blank():
                continue
            try:
                record = _normalize_row(schema.kind, row, column_mapping, owner_scope, default_category)
                checker.check(record)
            except RowRejected as e:
                logger.debug(f"Line {row.line_number} rejected: {e.reason}")
                result.rejected.append(RejectedRow(
                    line_number=row.line_number,
                    raw_line=row.raw_line.strip(),
                    reason=e.reason,
                    code=e.code,
                ))
                continue

            repository.put(record)
            result.accepted.append(record)

        repository.commit()

    logger.info(
        f"{schema.kind} upload for {owner_scope}: "
        f"{result.success_count} accepted, {result.failure_count} rejected"
    )
    return result
