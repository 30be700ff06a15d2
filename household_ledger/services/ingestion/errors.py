"""
Ingestion error taxonomy.

Two families:
- IngestionError: fatal. Raised by the decoder or the mapper, aborts the
  whole upload before anything is persisted.
- RowRejected: per row. Collected into the result's rejected list and never
  aborts the batch.
"""


class IngestionError(Exception):
    """Base class for errors that abort an entire upload."""

    code = "IngestionError"


class HeaderNotFound(IngestionError):
    code = "HeaderNotFound"


class MappingIncomplete(IngestionError):
    """Required fields could not be resolved to a column."""

    code = "MappingIncomplete"

    def __init__(self, missing_fields: list[str]):
        self.missing_fields = list(missing_fields)
        super().__init__(
            f"Required columns missing from mapping: {', '.join(self.missing_fields)}"
        )


class UnknownSchema(IngestionError):
    code = "UnknownSchema"


class RowRejected(Exception):
    """A single data row failed validation. The message is shown to the user."""

    code = "RowRejected"
    default_reason = "Failed to parse row"

    def __init__(self, reason: str = None):
        self.reason = reason or self.default_reason
        super().__init__(self.reason)


class InvalidDate(RowRejected):
    code = "InvalidDate"
    default_reason = "Invalid date format"


class InvalidAmount(RowRejected):
    code = "InvalidAmount"
    default_reason = "Invalid or zero amount"


class InvalidValue(RowRejected):
    code = "InvalidValue"
    default_reason = "Invalid value"


class MissingName(RowRejected):
    code = "MissingName"
    default_reason = "Missing asset name"


class DuplicateDetected(RowRejected):
    code = "DuplicateDetected"
    default_reason = "Duplicate record detected"
