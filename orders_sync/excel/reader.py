from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import pandas as pd

from orders_sync.models.record import normalize_string
from orders_sync.models.source_row import SourceRow

from .columns import build_column_map, missing_required_columns

"""Source sheet reader.

Row 1 of the source sheet is the header, rows 2.. are data rows. Headers are
canonicalized (see columns.py) and unknown columns are dropped. Only blank
cells become NaN: literal strings such as "NA" or "N/A" are kept as text so
they are never mistaken for empty invoices.
"""


class SheetNotFoundError(Exception):
    """Raised when the workbook or the requested sheet does not exist."""

class MissingColumnsError(Exception):
    """Raised when required columns are missing in the sheet header."""


@dataclass
class SourceSheet:
    sheet_name: str
    headers: list[str]
    column_map: dict[str, int]  # canonical name -> 1-based column
    rows: list[SourceRow] = field(default_factory=list)


def read_sheet(path: Path, sheet_name: str) -> pd.DataFrame:
    """Read one sheet without header inference (row 1 stays in the frame)."""
    if not path.exists():
        raise SheetNotFoundError(f"workbook not found: {path}")
    with pd.ExcelFile(path) as xls:
        if sheet_name not in [str(n) for n in xls.sheet_names]:
            raise SheetNotFoundError(f"sheet '{sheet_name}' not found in {path.name}")
        return xls.parse(sheet_name, header=None, keep_default_na=False, na_values=[""])


def _row_to_source_row(row_number: int, values: list[object], column_map: dict[str, int]) -> SourceRow:
    mapped = {}
    for canon, col in column_map.items():
        mapped[canon] = values[col - 1] if col - 1 < len(values) else None
    return SourceRow(row_number=row_number, values=mapped)


def header_of(df: pd.DataFrame) -> list[str]:
    if df.shape[0] < 1:
        return []
    return [normalize_string(v) for v in df.iloc[0].tolist()]


def normalize_source_sheet(
    df: pd.DataFrame, sheet_name: str, require_columns: bool = True
) -> SourceSheet:
    """Turn a raw frame into canonical SourceRows.

    Steps:
    1. Header from row 1, canonical column map
    2. Validate required columns (when require_columns)
    3. Rows 2.. become SourceRows; trailing fully blank rows are dropped,
       blank rows between data rows are kept (they fail validation later)
    """
    headers = header_of(df)
    column_map = build_column_map(headers)
    if require_columns:
        missing = missing_required_columns(column_map)
        if missing:
            raise MissingColumnsError(
                f"Missing required columns in '{sheet_name}': {', '.join(missing)}"
            )

    last = df.shape[0] - 1
    while last >= 1 and df.iloc[last].isna().all():
        last -= 1
    rows = [
        _row_to_source_row(pos + 1, df.iloc[pos].tolist(), column_map) for pos in range(1, last + 1)
    ]
    return SourceSheet(sheet_name=sheet_name, headers=headers, column_map=column_map, rows=rows)


def read_source_sheet(path: Path, sheet_name: str, require_columns: bool = True) -> SourceSheet:
    return normalize_source_sheet(read_sheet(path, sheet_name), sheet_name, require_columns)


def read_source_row(
    path: Path, sheet_name: str, row_number: int, require_columns: bool = True
) -> tuple[SourceSheet, SourceRow]:
    """Read a single data row (row_number >= 2) together with the sheet header.

    A row past the end of the sheet comes back with blank values.
    """
    if row_number < 2:
        raise ValueError(f"row {row_number} is not a data row")
    df = read_sheet(path, sheet_name)
    sheet = normalize_source_sheet(df.iloc[:1], sheet_name, require_columns)
    if row_number - 1 < df.shape[0]:
        values = df.iloc[row_number - 1].tolist()
    else:
        values = []
    row = _row_to_source_row(row_number, values, sheet.column_map)
    sheet.rows = [row]
    return sheet, row
