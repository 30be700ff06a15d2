"""
Target record schemas for ingestion.

Each schema lists its logical fields with the header keywords used to find
them, plus the keyword groups a line must satisfy to count as the header row.
Matching is substring-based on lowercased header cells.
"""

from dataclasses import dataclass, field
from typing import Optional

from .errors import UnknownSchema


@dataclass(frozen=True)
class FieldSpec:
    name: str
    keywords: tuple[str, ...]
    excludes: tuple[str, ...] = ()
    required: bool = False
    numeric: bool = False
    aliases: tuple[str, ...] = ()

    def matches(self, cell: str) -> bool:
        """True if a lowercased header cell looks like this field."""
        return (
            any(k in cell for k in self.keywords)
            and not any(x in cell for x in self.excludes)
        )


@dataclass(frozen=True)
class FieldSchema:
    kind: str
    fields: tuple[FieldSpec, ...]
    # Every group must be hit by at least one cell for a line to be the header
    header_groups: tuple[tuple[str, ...], ...]
    # At least one of these fields must be mapped (empty = no such rule)
    one_of: tuple[str, ...] = field(default=())

    @property
    def field_names(self) -> list[str]:
        return [f.name for f in self.fields]

    @property
    def required_fields(self) -> list[str]:
        return [f.name for f in self.fields if f.required]

    def get(self, name: str) -> Optional[FieldSpec]:
        """Look up a field by name or alias."""
        for spec in self.fields:
            if name == spec.name or name in spec.aliases:
                return spec
        return None

    def is_header(self, cells: list[str]) -> bool:
        lowered = [c.lower() for c in cells]
        return all(
            any(any(k in cell for k in group) for cell in lowered)
            for group in self.header_groups
        )


TRANSACTION_SCHEMA = FieldSchema(
    kind="transaction",
    fields=(
        # "Value Date" columns are the settlement date, not the booking date
        FieldSpec("date", ("date",), excludes=("value",), required=True),
        FieldSpec(
            "description",
            ("description", "memo", "payee", "merchant", "remarks"),
            required=True,
        ),
        FieldSpec(
            "amount",
            ("amount",),
            excludes=("withdrawal", "deposit", "debit", "credit"),
            numeric=True,
            aliases=("amountSingle", "amount_single"),
        ),
        FieldSpec("withdrawal", ("withdrawal", "debit", "payment"), numeric=True),
        FieldSpec("deposit", ("deposit", "credit"), numeric=True),
    ),
    header_groups=(
        ("date",),
        ("description", "memo", "payee", "remarks", "merchant"),
        ("amount", "deposit", "withdrawal", "debit", "credit"),
    ),
    one_of=("amount", "withdrawal", "deposit"),
)

HOLDING_SCHEMA = FieldSchema(
    kind="holding",
    fields=(
        FieldSpec(
            "name",
            ("name", "asset", "holding", "symbol"),
            excludes=("type", "class", "category"),
            required=True,
        ),
        FieldSpec("type", ("type", "category", "class")),
        FieldSpec("value", ("value", "amount", "balance"), required=True, numeric=True),
        FieldSpec("quantity", ("quantity", "qty", "shares", "units"), numeric=True),
    ),
    header_groups=(
        ("name", "asset", "holding", "symbol"),
        ("value", "amount", "balance"),
    ),
)

SCHEMAS = {
    TRANSACTION_SCHEMA.kind: TRANSACTION_SCHEMA,
    HOLDING_SCHEMA.kind: HOLDING_SCHEMA,
}


def get_schema(kind: str) -> FieldSchema:
    try:
        return SCHEMAS[kind]
    except KeyError:
        raise UnknownSchema(
            f"Unknown schema: {kind}. Must be one of: {', '.join(SCHEMAS)}"
        )
