"""
Typed records produced by the ingestion pipeline.

NormalizedRecord is a tagged union on `kind`, so consumers branch on the
record type instead of probing loosely-typed dicts.
"""

from datetime import date, datetime
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

SCOPE_KINDS = ("household", "personal")


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class OwnerScope(BaseModel):
    """Who a record belongs to: a shared household or one person's view."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["household", "personal"]
    owner_id: str = Field(min_length=1)

    def __str__(self):
        return f"{self.kind}:{self.owner_id}"


class TransactionRecord(_CamelModel):
    kind: Literal["transaction"] = "transaction"
    id: str
    date: date
    description: str
    amount: float = Field(gt=0)  # magnitude only, sign is carried by type
    type: Literal["income", "expense"]
    category: str = "Uncategorized"
    owner_scope: Literal["household", "personal"]
    owner_id: str
    created_at: datetime


class HoldingRecord(_CamelModel):
    kind: Literal["holding"] = "holding"
    id: str
    name: str
    type: str = "Other"
    value: float
    quantity: Optional[float] = None
    owner_scope: Literal["household", "personal"]
    owner_id: str
    created_at: datetime


NormalizedRecord = Annotated[
    Union[TransactionRecord, HoldingRecord],
    Field(discriminator="kind"),
]


class RejectedRow(_CamelModel):
    line_number: int
    raw_line: str
    reason: str
    code: str


class IngestionResult(_CamelModel):
    accepted: list[NormalizedRecord] = Field(default_factory=list)
    rejected: list[RejectedRow] = Field(default_factory=list)
    mapping: dict[str, Optional[int]] = Field(default_factory=dict)
    header_line_number: int = 0

    @property
    def success_count(self) -> int:
        return len(self.accepted)

    @property
    def failure_count(self) -> int:
        return len(self.rejected)
