from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

"""SourceRow model for the Orders Database sync tool.

SourceRow represents a single data row of the source sheet after header
canonicalization. The row_number refers to the original sheet row number
(row 1 = header, row 2 = first data row).
"""

__all__ = [
    "SourceRow",
]


@dataclass(frozen=True)
class SourceRow:
    """Raw source row keyed by canonical column name."""
    row_number: int  # Sheet row number (2 = first data row)
    values: dict[str, Any] = field(default_factory=dict)  # Canonical column -> raw cell value

    def get(self, column: str) -> Any:
        return self.values.get(column)
