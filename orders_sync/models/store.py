from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol

"""Target store contract shared by the Excel and PostgreSQL backends.

A store holds the six target columns in fixed order (see
orders_sync/excel/columns.py TARGET_HEADERS). Persistence is always a full
replace of the data body.
"""

__all__ = [
    "TargetStore",
    "TargetStoreError",
]


class TargetStoreError(Exception):
    """Raised when the target dataset cannot be read or replaced."""


class TargetStore(Protocol):
    def read_rows(self) -> list[list[Any]]:
        """Stored data rows (header excluded) in stored order."""
        ...

    def write_rows(self, rows: Sequence[Sequence[Any]]) -> int:
        """Replace the whole data body with rows; returns rows written."""
        ...

    def describe(self) -> str:
        ...
