from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager, nullcontext
from datetime import UTC, datetime
from pathlib import Path

from ..db.target_table import PostgresTargetStore, db_cursor
from ..excel.columns import build_column_map, tracked_column_indexes
from ..excel.reader import (
    MissingColumnsError,
    SheetNotFoundError,
    header_of,
    read_sheet,
    read_source_row,
    read_source_sheet,
)
from ..excel.target_sheet import ExcelTargetStore
from ..logging.error_log import ErrorLogBuffer
from ..models.config_models import SyncConfig
from ..models.edit_event import EditEvent
from ..models.store import TargetStore, TargetStoreError
from ..models.sync_result import SyncMetrics, SyncMode, SyncResult
from ..models.target_index import UpsertOutcome
from .progress import ProgressTracker
from .target_reader import load_target_index
from .upsert import upsert_row, upsert_rows
from .writer import write_target

"""Sync orchestration for the Orders Database.

Entry points:
- full_sync(): whole source sheet -> full sorted rewrite of the target
- incremental_sync(): one source row -> full sorted rewrite of the target
- handle_edit(): decides whether an edit needs a sync, and which one

Every run reloads the target from its store, merges in memory, and only
then writes. Schema errors abort before the target is touched.
"""

logger = logging.getLogger(__name__)


class SyncError(Exception):
    """Fatal error: the run stopped and the target was not rewritten."""
    pass


@contextmanager
def open_target_store(config: SyncConfig) -> Iterator[TargetStore]:
    """Yield the configured target store backend."""
    if config.target.backend == "postgres":
        with db_cursor(config.database) as cur:
            yield PostgresTargetStore(cur, config.target.table)
    else:
        yield ExcelTargetStore(Path(config.target_workbook), config.target.sheet)


def _store_context(config: SyncConfig, store: TargetStore | None):
    return nullcontext(store) if store is not None else open_target_store(config)


def _flush_error_log(error_log: ErrorLogBuffer) -> Path | None:
    try:
        return error_log.flush()
    except OSError as e:
        # row log loss does not fail the run
        logger.warning("could not write error log: %s", e)
        return None


def _result(
    mode: SyncMode,
    metrics: SyncMetrics,
    total_written: int,
    written: bool,
    start_time: datetime,
    error_log: ErrorLogBuffer,
) -> SyncResult:
    log_path = _flush_error_log(error_log)
    end_time = datetime.now(UTC)
    return SyncResult(
        mode=mode,
        metrics=metrics,
        total_written=total_written,
        written=written,
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=(end_time - start_time).total_seconds(),
        error_log_path=log_path,
    )


def full_sync(
    config: SyncConfig,
    store: TargetStore | None = None,
    *,
    progress: bool | None = None,
    now: datetime | None = None,
) -> SyncResult:
    """Reconcile every source row into the target and rewrite it in full.

    Args:
        config: Sync configuration
        store: Target store (None = open the configured backend)
        progress: Force the progress bar on/off (None = TTY only)
        now: Capture time for Last Synced (None = current time)

    Raises:
        SyncError: source sheet or required columns missing, or target I/O failed
    """
    start_time = datetime.now(UTC)
    error_log = ErrorLogBuffer(config.error_log_dir)
    try:
        sheet = read_source_sheet(Path(config.source.workbook), config.source.sheet)
    except (SheetNotFoundError, MissingColumnsError) as e:
        raise SyncError(str(e)) from e
    logger.info("full sync: %d source rows from '%s'", len(sheet.rows), config.source.sheet)

    try:
        with _store_context(config, store) as target:
            index = load_target_index(target)
            logger.debug("loaded %d records from %s", len(index), target.describe())
            with ProgressTracker(len(sheet.rows), enabled=progress) as bar:
                merged, metrics = upsert_rows(
                    sheet.rows, index, config, error_log=error_log, progress=bar
                )
            total_written = write_target(target, merged, config, now)
    except TargetStoreError as e:
        raise SyncError(str(e)) from e

    return _result(SyncMode.FULL, metrics, total_written, True, start_time, error_log)


def incremental_sync(
    config: SyncConfig,
    row_number: int,
    store: TargetStore | None = None,
    *,
    now: datetime | None = None,
) -> SyncResult:
    """Apply a single source row to the freshly loaded target.

    Other source rows are not re-validated. An ineligible or conflicting row
    ends the run without writing (result.written is False).
    """
    start_time = datetime.now(UTC)
    error_log = ErrorLogBuffer(config.error_log_dir)
    try:
        _, row = read_source_row(Path(config.source.workbook), config.source.sheet, row_number)
    except (SheetNotFoundError, MissingColumnsError, ValueError) as e:
        raise SyncError(str(e)) from e

    metrics = SyncMetrics()
    try:
        with _store_context(config, store) as target:
            index = load_target_index(target)
            outcome = upsert_row(row, index, metrics, config, error_log)
            if outcome is None:
                logger.info("incremental row %d not eligible", row_number)
                return _result(SyncMode.INCREMENTAL, metrics, 0, False, start_time, error_log)
            if outcome is UpsertOutcome.CONFLICT:
                logger.info("incremental row %d rejected (invoice conflict)", row_number)
                return _result(SyncMode.INCREMENTAL, metrics, 0, False, start_time, error_log)
            total_written = write_target(target, index, config, now)
    except TargetStoreError as e:
        raise SyncError(str(e)) from e

    logger.info(
        "incremental sync row %d done: ins=%d upd=%d",
        row_number,
        metrics.inserted,
        metrics.updated,
    )
    return _result(SyncMode.INCREMENTAL, metrics, total_written, True, start_time, error_log)


def handle_edit(
    config: SyncConfig,
    event: EditEvent,
    store: TargetStore | None = None,
    *,
    now: datetime | None = None,
) -> SyncResult | None:
    """Run the sync an edit calls for, if any.

    - edits outside the source sheet, or not touching a tracked column: None
    - header row edits: full sync (the column layout may have changed)
    - tracked edits: full sync when full_sync_on_edit, else incremental sync
      of the edited row (multi-row edits always run a full sync)
    """
    if event.sheet_name != config.source.sheet:
        return None
    try:
        if event.touches_header:
            logger.info("edit header change -> full sync")
            return full_sync(config, store, progress=False, now=now)

        try:
            df = read_sheet(Path(config.source.workbook), config.source.sheet)
        except SheetNotFoundError as e:
            raise SyncError(str(e)) from e
        tracked = tracked_column_indexes(build_column_map(header_of(df)))
        if not event.intersects_columns(tracked):
            logger.debug(
                "edit at row=%d cols=%d..%d ignored (untracked)",
                event.row,
                event.column,
                event.last_column,
            )
            return None

        if config.full_sync_on_edit or event.num_rows > 1:
            logger.info("edit tracked change -> full sync")
            return full_sync(config, store, progress=False, now=now)
        return incremental_sync(config, event.row, store, now=now)
    except SyncError as e:
        logger.error("edit handling failed: %s", e)
        raise
