from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum

from .record import Record

"""TargetIndex: the in-memory Orders Database.

Two mappings are kept side by side and are only mutated through load() and
upsert(), so they never diverge:

- records: composite key -> Record
- invoice_owners: uppercased invoice -> uppercased order id owning it
"""

__all__ = [
    "TargetIndex",
    "UpsertOutcome",
    "merge_record_into_existing",
]


class UpsertOutcome(Enum):
    """Result of applying one record to the index."""
    INSERTED = "inserted"
    UPDATED = "updated"
    UNCHANGED = "unchanged"
    CONFLICT = "conflict"


def merge_record_into_existing(existing: Record, incoming: Record) -> bool:
    """Merge incoming fields into existing in place.

    Dates are overwritten when the incoming value is set and differs.
    Reseller PO is overwritten only by a non-empty, different value, so a
    field never regresses to empty.

    Returns:
        True if any field changed
    """
    changed = False
    if incoming.order_date is not None and existing.order_date != incoming.order_date:
        existing.order_date = incoming.order_date
        changed = True
    if incoming.ship_date is not None and existing.ship_date != incoming.ship_date:
        existing.ship_date = incoming.ship_date
        changed = True
    if incoming.reseller_po != "" and existing.reseller_po != incoming.reseller_po:
        existing.reseller_po = incoming.reseller_po
        changed = True
    return changed


@dataclass
class TargetIndex:
    records: dict[str, Record] = field(default_factory=dict)
    invoice_owners: dict[str, str] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[Record]:
        return iter(self.records.values())

    def __contains__(self, key: object) -> bool:
        return key in self.records

    def get(self, key: str) -> Record | None:
        return self.records.get(key)

    def owner_of(self, invoice: str) -> str | None:
        """Order key currently owning the invoice (lookup is case-insensitive)."""
        return self.invoice_owners.get(invoice.strip().upper())

    def load(self, record: Record) -> None:
        """Add a stored record without conflict detection.

        Duplicate composite keys are last-one-wins. The first stored row
        carrying an invoice claims its ownership.
        """
        self.records[record.key] = record
        inv_key = record.invoice_key
        if inv_key and inv_key not in self.invoice_owners:
            self.invoice_owners[inv_key] = record.order_key

    def upsert(self, record: Record) -> UpsertOutcome:
        """Insert or merge a validated record, enforcing invoice ownership.

        A conflicting invoice is rejected before the key lookup and leaves
        both mappings untouched.
        """
        inv_key = record.invoice_key
        ord_key = record.order_key
        owner = self.invoice_owners.get(inv_key)
        # an empty owner (order id not required) never blocks a claim
        if owner and owner != ord_key:
            return UpsertOutcome.CONFLICT

        existing = self.records.get(record.key)
        if existing is None:
            self.records[record.key] = record
            outcome = UpsertOutcome.INSERTED
        elif merge_record_into_existing(existing, record):
            outcome = UpsertOutcome.UPDATED
        else:
            outcome = UpsertOutcome.UNCHANGED

        if inv_key:
            self.invoice_owners[inv_key] = ord_key
        return outcome

    def copy(self) -> TargetIndex:
        """Deep enough copy for a merge pass: records are copied, keys are strings."""
        return TargetIndex(
            records={k: r.copy() for k, r in self.records.items()},
            invoice_owners=dict(self.invoice_owners),
        )
