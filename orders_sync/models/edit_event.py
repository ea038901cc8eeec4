from __future__ import annotations

from dataclasses import dataclass

"""EditEvent: a change notification for a rectangular range of a sheet.

Rows and columns are 1-based sheet coordinates; row 1 is the header row.
"""

__all__ = [
    "EditEvent",
]


@dataclass(frozen=True)
class EditEvent:
    sheet_name: str
    row: int  # first edited row
    column: int  # first edited column
    num_rows: int = 1
    num_columns: int = 1

    @property
    def last_column(self) -> int:
        return self.column + self.num_columns - 1

    @property
    def touches_header(self) -> bool:
        return self.row == 1

    def intersects_columns(self, columns: list[int]) -> bool:
        return any(self.column <= c <= self.last_column for c in columns)
