"""
Duplicate suppression against records that were already persisted.

The checker works on a snapshot taken once at the start of an upload. Rows
accepted earlier in the same file are NOT added to it, so two identical rows
in one file are both accepted.
"""

from typing import Iterable, Union

from .errors import DuplicateDetected
from .records import HoldingRecord, TransactionRecord

AMOUNT_TOLERANCE = 0.01  # dollars
VALUE_TOLERANCE_PCT = 0.01  # 1% of the incoming holding value


def is_duplicate_transaction(candidate: TransactionRecord, existing: TransactionRecord) -> bool:
    return (
        candidate.date == existing.date
        and candidate.description == existing.description
        and abs(candidate.amount - existing.amount) < AMOUNT_TOLERANCE
    )


def is_duplicate_holding(candidate: HoldingRecord, existing: HoldingRecord) -> bool:
    return (
        candidate.name.lower() == existing.name.lower()
        and abs(candidate.value - existing.value) < abs(candidate.value) * VALUE_TOLERANCE_PCT
    )


class DuplicateChecker:
    def __init__(self, snapshot: Iterable[Union[TransactionRecord, HoldingRecord]]):
        self._snapshot = list(snapshot)

    def __len__(self):
        return len(self._snapshot)

    def check(self, candidate: Union[TransactionRecord, HoldingRecord]) -> None:
        """Raise DuplicateDetected if the candidate matches a snapshot record."""
        if isinstance(candidate, TransactionRecord):
            if any(
                isinstance(existing, TransactionRecord) and is_duplicate_transaction(candidate, existing)
                for existing in self._snapshot
            ):
                raise DuplicateDetected("Duplicate transaction detected")
        elif isinstance(candidate, HoldingRecord):
            if any(
                isinstance(existing, HoldingRecord) and is_duplicate_holding(candidate, existing)
                for existing in self._snapshot
            ):
                raise DuplicateDetected("Duplicate holding detected (same name and value)")
        else:
            raise TypeError(f"Unsupported record type: {type(candidate).__name__}")
