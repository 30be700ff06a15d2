"""
Field mapper: header row -> column index per schema field.

Two modes:
- Automatic ("smart upload"): first header cell matching a field's keywords wins
- Manual: the caller already previewed the file and picked columns, given as
  an index, a digit string, or a column name

Either way the result is validated before any row is touched.
"""

import logging
from typing import Optional, Union

from .errors import MappingIncomplete
from .schema import FieldSchema

logger = logging.getLogger(__name__)

ColumnMapping = dict[str, Optional[int]]
ExplicitMapping = dict[str, Union[int, str, None]]


def auto_map(header_row: list[str], schema: FieldSchema) -> ColumnMapping:
    """Propose a column for every schema field from header keywords."""
    lowered = [cell.strip().lower() for cell in header_row]
    mapping: ColumnMapping = {}
    for spec in schema.fields:
        mapping[spec.name] = next(
            (idx for idx, cell in enumerate(lowered) if spec.matches(cell)),
            None,
        )
    return mapping


def _resolve_column(value, header_row: list[str]) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= 0 else None

    text = str(value).strip()
    if not text:
        return None
    if text.isdigit():
        return int(text)

    wanted = text.lower()
    for idx, cell in enumerate(header_row):
        if cell.strip().lower() == wanted:
            return idx
    return None


def manual_map(explicit: ExplicitMapping, header_row: list[str], schema: FieldSchema) -> ColumnMapping:
    """Resolve a user-supplied mapping without any keyword inference."""
    mapping: ColumnMapping = {name: None for name in schema.field_names}
    for key, value in explicit.items():
        spec = schema.get(key)
        if spec is None:
            logger.warning(f"Ignoring unknown {schema.kind} mapping field: {key}")
            continue
        mapping[spec.name] = _resolve_column(value, header_row)
    return mapping


def is_empty_mapping(explicit: Optional[ExplicitMapping]) -> bool:
    """An absent or all-blank mapping means "detect columns automatically"."""
    if not explicit:
        return True
    return all(v is None or (isinstance(v, str) and not v.strip()) for v in explicit.values())


def validate_mapping(mapping: ColumnMapping, schema: FieldSchema, width: Optional[int] = None) -> None:
    """
    Raise MappingIncomplete unless every required field has a usable column.

    width is the header row length; indices at or past it are treated as
    unmapped. Pass None when the file has no header to check against.
    """

    def usable(name: str) -> bool:
        idx = mapping.get(name)
        if idx is None or idx < 0:
            return False
        return width is None or idx < width

    missing = [name for name in schema.required_fields if not usable(name)]
    if schema.one_of and not any(usable(name) for name in schema.one_of):
        missing.append(" or ".join(schema.one_of))

    if missing:
        raise MappingIncomplete(missing)


def resolve_mapping(
    header_row: list[str],
    schema: FieldSchema,
    explicit: Optional[ExplicitMapping] = None,
) -> ColumnMapping:
    """Pick auto or manual mode, then validate."""
    if is_empty_mapping(explicit):
        mapping = auto_map(header_row, schema)
        mode = "auto"
    else:
        mapping = manual_map(explicit, header_row, schema)
        mode = "manual"

    width = len(header_row) if header_row else None
    if width is not None:
        mapping = {
            name: idx if idx is not None and idx < width else None
            for name, idx in mapping.items()
        }

    validate_mapping(mapping, schema, width=width)
    logger.info(f"{schema.kind} column mapping ({mode}): {mapping}")
    return mapping


def describe_mapping(mapping: ColumnMapping, header_row: list[str]) -> dict:
    """field -> {index, column} so the caller can show what was chosen."""
    described = {}
    for name, idx in mapping.items():
        column = header_row[idx] if idx is not None and 0 <= idx < len(header_row) else None
        described[name] = {"index": idx, "column": column}
    return described
