from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime

import pandas as pd
from pandas.api.types import is_scalar

"""Record model: the validated unit of reconciliation.

A Record is identified by its composite key (order id, invoice), both
trimmed and uppercased. Two records with the same key are the same logical
entity: later data merges into the earlier one.
"""

__all__ = [
    "KEY_SEPARATOR",
    "Record",
    "composite_key",
    "normalize_key",
    "normalize_string",
]

KEY_SEPARATOR = "::"


def normalize_string(value: object) -> str:
    """Stringify and trim a cell value; None and NaN/NaT become ''."""
    if value is None:
        return ""
    # NaN / NaT / pd.NA from pandas-read blank cells
    if not isinstance(value, str) and is_scalar(value) and pd.isna(value):
        return ""
    return str(value).strip()


def normalize_key(value: object) -> str:
    return normalize_string(value).upper()


def composite_key(order_id: object, invoice: object) -> str:
    return normalize_key(order_id) + KEY_SEPARATOR + normalize_key(invoice)


@dataclass
class Record:
    """One reconciled Orders Database entry.

    Records built from the source always carry both dates. Records loaded
    from the target store are not validated and may have None dates.
    """
    order_id: str
    invoice: str
    order_date: datetime | None
    ship_date: datetime | None
    reseller_po: str = ""

    @property
    def key(self) -> str:
        return composite_key(self.order_id, self.invoice)

    @property
    def order_key(self) -> str:
        return normalize_key(self.order_id)

    @property
    def invoice_key(self) -> str:
        return normalize_key(self.invoice)

    def copy(self) -> Record:
        return replace(self)
