from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

from ..models.record import Record, normalize_string
from ..models.store import TargetStore
from ..models.target_index import TargetIndex
from .normalizer import normalize_date

"""Target store reader: stored rows -> TargetIndex.

Stored rows are trusted: no field validation and no conflict detection.
Duplicate composite keys are last-one-wins, invoice ownership goes to the
first stored row carrying the invoice.
"""


def record_from_target_row(row: Sequence[Any]) -> Record:
    values = list(row) + [None] * (5 - len(row))
    return Record(
        order_id=normalize_string(values[0]),
        invoice=normalize_string(values[1]),
        order_date=normalize_date(values[2]),
        ship_date=normalize_date(values[3]),
        reseller_po=normalize_string(values[4]),
    )


def build_target_index(rows: Iterable[Sequence[Any]]) -> TargetIndex:
    index = TargetIndex()
    for row in rows:
        if not any(normalize_string(v) for v in row):
            continue  # fully blank row
        index.load(record_from_target_row(row))
    return index


def load_target_index(store: TargetStore) -> TargetIndex:
    return build_target_index(store.read_rows())
