"""
Row normalizer: one decoded data row -> one typed record.

Raises a RowRejected subclass with a user-facing reason when the row
can't be turned into a valid record. Never touches storage.

Business rules:
- Amounts are stored as positive magnitudes; income/expense carries the sign
- Single signed amount column: negative = expense, positive = income
- Withdrawal/deposit columns: a non-zero withdrawal makes it an expense and
  the deposit is ignored
- Numeric cells keep only digits, "." and "-" before parsing ("$1,234.56")
"""

import math
import re
import uuid
from datetime import date, datetime, timezone
from typing import Optional

from ..categorize import DEFAULT_CATEGORY, categorize_transaction
from .decoder import GridRow
from .errors import InvalidAmount, InvalidDate, InvalidValue, MissingName
from .mapper import ColumnMapping
from .records import HoldingRecord, OwnerScope, TransactionRecord

_NON_NUMERIC = re.compile(r"[^0-9.\-]")

# US month-first before day-first, matching what most bank exports use
_DATE_FORMATS = (
    "%Y/%m/%d",
    "%m/%d/%Y",
    "%m/%d/%y",
    "%m-%d-%Y",
    "%d/%m/%Y",
    "%d.%m.%Y",
    "%d-%m-%Y",
    "%d-%b-%Y",
    "%d %b %Y",
    "%b %d, %Y",
    "%B %d, %Y",
    "%b %d %Y",
)


def parse_number(raw: str) -> Optional[float]:
    """
    Parse a money-ish cell. Returns None for an empty cell and raises
    ValueError when something is left that still isn't a finite number.
    """
    cleaned = _NON_NUMERIC.sub("", raw or "")
    if not cleaned:
        return None
    value = float(cleaned)
    if not math.isfinite(value):
        raise ValueError("Number out of range")
    return value


def parse_date(raw: str) -> Optional[date]:
    """Try ISO 8601 first, then the common bank formats."""
    raw = (raw or "").strip()
    if not raw:
        return None
    try:
        return datetime.fromisoformat(raw).date()
    except ValueError:
        pass
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(raw, fmt).date()
        except ValueError:
            continue
    return None


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _transaction_amount(row: GridRow, mapping: ColumnMapping) -> tuple[float, str]:
    """(amount, type) for a transaction row."""
    try:
        if mapping.get("amount") is not None:
            signed = parse_number(row.cell(mapping["amount"]))
            if not signed:
                raise InvalidAmount()
            return abs(signed), "expense" if signed < 0 else "income"

        withdrawal = abs(parse_number(row.cell(mapping.get("withdrawal"))) or 0)
        deposit = abs(parse_number(row.cell(mapping.get("deposit"))) or 0)
    except ValueError:
        raise InvalidAmount()

    if withdrawal > 0:
        return withdrawal, "expense"
    if deposit > 0:
        return deposit, "income"
    raise InvalidAmount()


def normalize_transaction(
    row: GridRow,
    mapping: ColumnMapping,
    scope: OwnerScope,
    default_category: str = DEFAULT_CATEGORY,
) -> TransactionRecord:
    txn_date = parse_date(row.cell(mapping.get("date")))
    if txn_date is None:
        raise InvalidDate()

    description = row.cell(mapping.get("description"))
    amount, txn_type = _transaction_amount(row, mapping)

    return TransactionRecord(
        id=str(uuid.uuid4()),
        date=txn_date,
        description=description,
        amount=amount,
        type=txn_type,
        category=categorize_transaction(description, default=default_category),
        owner_scope=scope.kind,
        owner_id=scope.owner_id,
        created_at=_now(),
    )


def normalize_holding(row: GridRow, mapping: ColumnMapping, scope: OwnerScope) -> HoldingRecord:
    name = row.cell(mapping.get("name"))
    if not name:
        raise MissingName()

    try:
        value = parse_number(row.cell(mapping.get("value")))
    except ValueError:
        value = None
    if value is None:
        raise InvalidValue()

    quantity = None
    if mapping.get("quantity") is not None:
        try:
            quantity = parse_number(row.cell(mapping["quantity"]))
        except ValueError:
            raise InvalidValue("Invalid quantity")

    return HoldingRecord(
        id=str(uuid.uuid4()),
        name=name,
        type=row.cell(mapping.get("type")) or "Other",
        value=value,
        quantity=quantity,
        owner_scope=scope.kind,
        owner_id=scope.owner_id,
        created_at=_now(),
    )
