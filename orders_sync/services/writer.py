from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Any
from zoneinfo import ZoneInfo

from ..models.config_models import SyncConfig
from ..models.record import Record
from ..models.store import TargetStore
from ..models.target_index import TargetIndex

"""Sorted writer: TargetIndex -> ordered target rows.

Records are ordered by (uppercased order id, uppercased invoice), so the
persisted output does not depend on source row order. One Last Synced
timestamp, captured at write time, is shared by every row of the batch.
"""


def sort_key(record: Record) -> tuple[str, str]:
    return (record.order_key, record.invoice_key)


def sorted_records(records: TargetIndex | Iterable[Record]) -> list[Record]:
    return sorted(records, key=sort_key)


def format_timestamp(config: SyncConfig, now: datetime | None = None) -> str:
    """Capture time formatted in the configured timezone and pattern."""
    moment = now if now is not None else datetime.now(UTC)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return moment.astimezone(ZoneInfo(config.timezone)).strftime(config.timestamp_fmt)


def to_target_rows(records: Iterable[Record], timestamp: str) -> list[list[Any]]:
    return [
        [r.order_id, r.invoice, r.order_date, r.ship_date, r.reseller_po, timestamp]
        for r in records
    ]


def write_target(
    store: TargetStore, index: TargetIndex, config: SyncConfig, now: datetime | None = None
) -> int:
    """Full replace of the store body with the sorted index."""
    rows = to_target_rows(sorted_records(index), format_timestamp(config, now))
    return store.write_rows(rows)
