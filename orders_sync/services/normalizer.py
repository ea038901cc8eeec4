from __future__ import annotations

import logging
import numbers
from datetime import date, datetime

import pandas as pd

from ..excel.columns import INVOICE, ORDER_DATE, ORDER_ID, RESELLER_PO, SHIP_DATE
from ..logging.error_log import ErrorLogBuffer
from ..models.config_models import SyncConfig
from ..models.error_record import INVALID_DATE, MISSING_FIELDS, ErrorRecord
from ..models.record import Record, normalize_string
from ..models.source_row import SourceRow
from ..models.sync_result import SyncMetrics

"""Record normalizer: SourceRow -> validated Record or None.

A rejected row increments exactly one metrics counter
(skipped_missing_fields or skipped_invalid_date) and is appended to the
error log when one is given. Nothing else is touched.
"""

logger = logging.getLogger(__name__)

# pandas resolves these against the clock; a stored date must not move between runs
RELATIVE_DATE_WORDS = frozenset({"now", "today", "tomorrow", "yesterday"})


def normalize_date(value: object) -> datetime | None:
    """Parse a cell into a naive datetime.

    Date-like values (datetime, date, pandas Timestamp) are accepted as is;
    strings go through pandas.to_datetime. Blank, unparseable, boolean and
    bare numeric cells are not dates, and neither are relative words such
    as "today" or "now".
    """
    if isinstance(value, numbers.Number):
        return None
    if isinstance(value, pd.Timestamp):
        ts = value
    elif isinstance(value, datetime):
        ts = pd.Timestamp(value)
    elif isinstance(value, date):
        ts = pd.Timestamp(datetime(value.year, value.month, value.day))
    else:
        text = normalize_string(value)
        if not text or text.lower() in RELATIVE_DATE_WORDS:
            return None
        try:
            ts = pd.to_datetime(text, errors="coerce")
        except (ValueError, OverflowError):
            return None
    if ts is pd.NaT or pd.isna(ts):
        return None
    if ts.tzinfo is not None:
        ts = ts.tz_convert("UTC").tz_localize(None)
    return ts.to_pydatetime()


def build_record(
    row: SourceRow,
    config: SyncConfig,
    metrics: SyncMetrics,
    error_log: ErrorLogBuffer | None = None,
) -> Record | None:
    order_id = normalize_string(row.get(ORDER_ID))
    invoice = normalize_string(row.get(INVOICE))
    reseller_po = normalize_string(row.get(RESELLER_PO))

    missing = [] if invoice else [INVOICE]
    if config.require_order_id and not order_id:
        missing.append(ORDER_ID)
    if missing:
        metrics.skipped_missing_fields += 1
        _reject(row, config, error_log, MISSING_FIELDS, f"missing {', '.join(missing)}")
        return None

    order_date = normalize_date(row.get(ORDER_DATE))
    ship_date = normalize_date(row.get(SHIP_DATE))
    if order_date is None or ship_date is None:
        metrics.skipped_invalid_date += 1
        bad = [
            f"{name}={normalize_string(row.get(name))!r}"
            for name, v in ((ORDER_DATE, order_date), (SHIP_DATE, ship_date))
            if v is None
        ]
        _reject(row, config, error_log, INVALID_DATE, f"invalid date {', '.join(bad)}")
        return None

    return Record(
        order_id=order_id,
        invoice=invoice,
        order_date=order_date,
        ship_date=ship_date,
        reseller_po=reseller_po,
    )


def _reject(
    row: SourceRow,
    config: SyncConfig,
    error_log: ErrorLogBuffer | None,
    error_type: str,
    message: str,
) -> None:
    logger.debug("row=%d skipped %s: %s", row.row_number, error_type, message)
    if error_log is not None:
        error_log.append(
            ErrorRecord.create(
                sheet=config.source.sheet,
                row=row.row_number,
                error_type=error_type,
                message=message,
            )
        )
