from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for the row-level error log.

Every skipped source row (missing fields, invalid date, invoice conflict)
becomes one ErrorRecord. Sheet-level errors use row=-1 where the specific
row cannot be determined.
"""

__all__ = [
    "ErrorRecord",
    "MISSING_FIELDS",
    "INVALID_DATE",
    "INVOICE_CONFLICT",
]

MISSING_FIELDS = "MISSING_FIELDS"
INVALID_DATE = "INVALID_DATE"
INVOICE_CONFLICT = "INVOICE_CONFLICT"


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        sheet: Source sheet name
        row: Sheet row number (1-based). Use -1 when the row is unknown
        error_type: Error classification in UPPER_SNAKE_CASE format
        message: Human readable description
    """
    timestamp: str  # ISO8601 UTC
    sheet: str
    row: int
    error_type: str  # UPPER_SNAKE
    message: str

    @staticmethod
    def create(sheet: str, row: int, error_type: str, message: str) -> ErrorRecord:
        """Create a new ErrorRecord stamped with the current UTC time."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            sheet=sheet,
            row=row,
            error_type=error_type,
            message=message,
        )

    def to_json_line(self) -> str:
        """Serialize to one JSON line with exactly the dataclass keys."""
        return json.dumps(asdict(self), ensure_ascii=False)
