from __future__ import annotations

import logging
from collections.abc import Iterable

from ..logging.error_log import ErrorLogBuffer
from ..models.config_models import SyncConfig
from ..models.error_record import INVOICE_CONFLICT, ErrorRecord
from ..models.record import Record
from ..models.source_row import SourceRow
from ..models.sync_result import SyncMetrics
from ..models.target_index import TargetIndex, UpsertOutcome
from .normalizer import build_record
from .progress import ProgressTracker

"""Upsert engine: fold source rows into the TargetIndex.

The fold is left to right and deterministic. For each row:

1. normalize (rejected rows are counted and skipped)
2. invoice ownership check; a conflicting invoice is counted, logged and
   skipped before the composite key is even looked up
3. insert a new key, or merge into the existing record (counted as updated
   only when a field actually changed)
4. refresh the invoice owner
"""

logger = logging.getLogger(__name__)


def upsert_record(
    record: Record,
    index: TargetIndex,
    metrics: SyncMetrics,
    config: SyncConfig,
    row_number: int = -1,
    error_log: ErrorLogBuffer | None = None,
) -> UpsertOutcome:
    """Apply one validated record to the index and count the outcome."""
    owner_before = index.owner_of(record.invoice)
    outcome = index.upsert(record)
    if outcome is UpsertOutcome.CONFLICT:
        metrics.invoice_conflicts += 1
        message = (
            f'invoice "{record.invoice}" tied to order "{record.order_id}" '
            f'but already mapped to "{owner_before}"'
        )
        logger.warning("row=%d conflict: %s; skipping", row_number, message)
        if error_log is not None:
            error_log.append(
                ErrorRecord.create(
                    sheet=config.source.sheet,
                    row=row_number,
                    error_type=INVOICE_CONFLICT,
                    message=message,
                )
            )
    elif outcome is UpsertOutcome.INSERTED:
        metrics.inserted += 1
    elif outcome is UpsertOutcome.UPDATED:
        metrics.updated += 1
    return outcome


def upsert_row(
    row: SourceRow,
    index: TargetIndex,
    metrics: SyncMetrics,
    config: SyncConfig,
    error_log: ErrorLogBuffer | None = None,
) -> UpsertOutcome | None:
    """Normalize and apply one source row. Returns None when the row was rejected."""
    metrics.scanned_rows += 1
    record = build_record(row, config, metrics, error_log)
    if record is None:
        return None
    metrics.eligible_rows += 1
    return upsert_record(record, index, metrics, config, row.row_number, error_log)


def upsert_rows(
    rows: Iterable[SourceRow],
    index: TargetIndex,
    config: SyncConfig,
    metrics: SyncMetrics | None = None,
    error_log: ErrorLogBuffer | None = None,
    progress: ProgressTracker | None = None,
) -> tuple[TargetIndex, SyncMetrics]:
    """Merge a batch of source rows into a copy of index.

    The given index is never mutated; the merged copy is returned with the
    run metrics.
    """
    metrics = metrics if metrics is not None else SyncMetrics()
    work = index.copy()
    for row in rows:
        upsert_row(row, work, metrics, config, error_log)
        if progress is not None:
            progress.advance()
    if progress is not None:
        progress.set_postfix(
            inserted=metrics.inserted,
            updated=metrics.updated,
            conflicts=metrics.invoice_conflicts,
        )
    return work, metrics
