from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path

"""Sync result models for the Orders Database sync tool.

SyncMetrics is the mutable counter set owned by one sync invocation.
SyncResult is the frozen end-of-run aggregate used for the SUMMARY line and
the CLI exit code.
"""


class SyncMode(Enum):
    """Which entry path produced a SyncResult.

    - FULL: whole source sheet reconciled into the target
    - INCREMENTAL: a single edited source row applied to the target
    """
    FULL = "full"
    INCREMENTAL = "incremental"


@dataclass
class SyncMetrics:
    """Counters for one sync run. Created once per invocation."""
    scanned_rows: int = 0
    eligible_rows: int = 0
    inserted: int = 0
    updated: int = 0
    skipped_missing_fields: int = 0
    skipped_invalid_date: int = 0
    invoice_conflicts: int = 0

    @property
    def skipped(self) -> int:
        return self.skipped_missing_fields + self.skipped_invalid_date

    def as_dict(self) -> dict[str, int]:
        return asdict(self)


@dataclass(frozen=True)
class SyncResult:
    """Aggregated result of a full or incremental sync."""
    mode: SyncMode
    metrics: SyncMetrics
    total_written: int  # records persisted (0 when nothing was written)
    written: bool  # False when an incremental row was rejected before persistence
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    error_log_path: Path | None = None  # JSON Lines log of skipped rows, if any

    @property
    def has_conflicts(self) -> bool:
        return self.metrics.invoice_conflicts > 0
