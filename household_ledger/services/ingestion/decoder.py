"""
Tabular decoder: raw upload text -> header row + data rows.

Handles tab- or comma-delimited exports with an unknown number of preamble
lines (account details, export dates, etc.) above the real header.

Notes:
- The delimiter is decided once, from the first non-empty line
- Quoted cells may contain the delimiter; escaped quotes ("") are NOT handled
- Line numbers are 1-based physical lines, so users can find the row in
  their source file
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from .errors import HeaderNotFound
from .schema import FieldSchema

logger = logging.getLogger(__name__)


@dataclass
class GridRow:
    line_number: int
    raw_line: str
    cells: list[str]

    def cell(self, index: Optional[int]) -> str:
        """Cell at index, or "" when unmapped or past the end of a short row."""
        if index is None or index < 0 or index >= len(self.cells):
            return ""
        return self.cells[index]

    def is_blank(self) -> bool:
        return not any(c.strip() for c in self.cells)


@dataclass
class DecodedGrid:
    delimiter: str
    header_row: list[str]
    header_line_number: int  # 0 when the file has no header row
    data_rows: list[GridRow] = field(default_factory=list)


def decode_bytes(data: bytes) -> str:
    """Decode an uploaded file, tolerating a UTF-8 BOM and legacy encodings."""
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError:
        logger.info("Upload is not valid UTF-8, falling back to latin-1")
        return data.decode("latin-1")


def split_lines(text: str) -> list[str]:
    return [line.rstrip("\r") for line in text.split("\n")]


def sniff_delimiter(lines: list[str]) -> str:
    """Tab if the first non-empty line contains one, else comma."""
    for line in lines:
        if line.strip():
            return "\t" if "\t" in line else ","
    return ","


def _clean_cell(cell: str) -> str:
    cell = cell.strip()
    if cell.startswith('"'):
        cell = cell[1:]
    if cell.endswith('"'):
        cell = cell[:-1]
    return cell.strip()


def split_line(line: str, delimiter: str) -> list[str]:
    """Split one line on the delimiter, ignoring delimiters inside quotes."""
    cells = []
    current = []
    in_quotes = False

    for ch in line:
        if ch == '"':
            in_quotes = not in_quotes
            current.append(ch)
        elif ch == delimiter and not in_quotes:
            cells.append(_clean_cell("".join(current)))
            current = []
        else:
            current.append(ch)

    cells.append(_clean_cell("".join(current)))
    return cells


def find_header_row(lines: list[str], schema: FieldSchema, delimiter: str) -> int:
    """Index of the first line that has a cell for every header keyword group."""
    for idx, line in enumerate(lines):
        if not line.strip():
            continue
        if schema.is_header(split_line(line, delimiter)):
            return idx

    groups = " / ".join("|".join(g) for g in schema.header_groups)
    raise HeaderNotFound(
        f"Could not auto-detect a {schema.kind} header row with columns matching: {groups}"
    )


def decode(text: str, schema: FieldSchema, skip_rows: Optional[int] = None) -> DecodedGrid:
    """
    Turn upload text into a DecodedGrid.

    skip_rows bypasses header detection: line `skip_rows` (1-based) is taken as
    the header and data starts right after it. skip_rows=0 means the file has
    no header row at all.
    """
    lines = split_lines(text)
    delimiter = sniff_delimiter(lines)

    if skip_rows is None:
        header_idx = find_header_row(lines, schema, delimiter)
        header_row = split_line(lines[header_idx], delimiter)
        header_line_number = header_idx + 1
        logger.info(f"{schema.kind} header found at line {header_line_number}: {header_row}")
    elif skip_rows == 0:
        header_row = []
        header_line_number = 0
    else:
        if skip_rows < 0 or skip_rows > len(lines) or not lines[skip_rows - 1].strip():
            raise HeaderNotFound(f"No header row at line {skip_rows}")
        header_row = split_line(lines[skip_rows - 1], delimiter)
        header_line_number = skip_rows

    data_rows = [
        GridRow(line_number=idx + 1, raw_line=line, cells=split_line(line, delimiter))
        for idx, line in enumerate(lines)
        if idx >= header_line_number
    ]

    return DecodedGrid(
        delimiter=delimiter,
        header_row=header_row,
        header_line_number=header_line_number,
        data_rows=data_rows,
    )
