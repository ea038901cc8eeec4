from __future__ import annotations

import re
from collections.abc import Iterable

from orders_sync.models.record import normalize_string

"""Canonical column names and header matching.

Source headers are matched case- and punctuation-insensitively against a
list of known synonyms. Column indexes are 1-based sheet columns.
"""

ORDER_ID = "Order ID"
INVOICE = "Invoice #"
ORDER_DATE = "Hardware Order Date"
SHIP_DATE = "Hardware Ship Date"
RESELLER_PO = "Reseller PO"
LAST_SYNCED = "Last Synced"

# Target sheet layout (fixed order)
TARGET_HEADERS = [ORDER_ID, INVOICE, ORDER_DATE, SHIP_DATE, RESELLER_PO, LAST_SYNCED]

# Source columns that must exist for a full sync
REQUIRED_SOURCE_COLUMNS = [ORDER_ID, INVOICE, ORDER_DATE, SHIP_DATE]

# Source columns whose edits trigger a sync
TRACKED_SOURCE_COLUMNS = [ORDER_ID, INVOICE, ORDER_DATE, SHIP_DATE, RESELLER_PO]

_SYNONYMS: dict[str, set[str]] = {
    ORDER_ID: {"orderid", "order", "ordernumber", "orderno"},
    INVOICE: {"invoice", "invoiceno", "invoicenumber", "invoiceid"},
    ORDER_DATE: {"hardwareorderdate", "orderdate", "hworderdate"},
    SHIP_DATE: {"hardwareshipdate", "shipdate", "hwshipdate", "shippingdate"},
    RESELLER_PO: {"resellerpo", "po", "purchaseorder", "resellerpurchaseorder"},
    LAST_SYNCED: {"lastsynced", "synced", "lastupdate", "lastupdated"},
}

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def canonicalize_header(header: object) -> str | None:
    """Map a raw header cell to its canonical column name (None if unknown)."""
    norm = _NON_ALNUM.sub("", normalize_string(header).lower())
    if not norm:
        return None
    for canon, synonyms in _SYNONYMS.items():
        if norm in synonyms:
            return canon
    return None


def build_column_map(headers: Iterable[object]) -> dict[str, int]:
    """Canonical column name -> 1-based column index.

    When two headers map to the same canonical name the rightmost wins.
    """
    column_map: dict[str, int] = {}
    for idx, header in enumerate(headers, start=1):
        canon = canonicalize_header(header)
        if canon:
            column_map[canon] = idx
    return column_map


def missing_required_columns(column_map: dict[str, int]) -> list[str]:
    return [c for c in REQUIRED_SOURCE_COLUMNS if c not in column_map]


def tracked_column_indexes(column_map: dict[str, int]) -> list[int]:
    return [column_map[c] for c in TRACKED_SOURCE_COLUMNS if c in column_map]
