from __future__ import annotations

from ..models.sync_result import SyncResult

"""SUMMARY line rendering.

Format:
SUMMARY mode={full|incremental} scanned={n} eligible={n} inserted={n}
updated={n} skipped_missing={n} skipped_invalid_date={n}
invoice_conflicts={n} total_written={n} elapsed_sec={x}
"""


def _format_seconds(value: float) -> str:
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        # Avoid scientific notation for very small numbers
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return f"{value:.3f}".rstrip("0").rstrip(".")


def render_summary_line(result: SyncResult) -> str:
    """Render the end-of-run SUMMARY line.

    Examples:
        >>> from datetime import datetime, timezone
        >>> from orders_sync.models.sync_result import SyncMetrics, SyncMode
        >>> t = datetime(2025, 7, 17, tzinfo=timezone.utc)
        >>> result = SyncResult(
        ...     mode=SyncMode.FULL, metrics=SyncMetrics(scanned_rows=4, eligible_rows=3, inserted=2),
        ...     total_written=2, written=True, start_time=t, end_time=t, elapsed_seconds=0.5,
        ... )
        >>> render_summary_line(result)  # doctest: +ELLIPSIS
        'SUMMARY mode=full scanned=4 eligible=3 inserted=2 updated=0 ... elapsed_sec=0.5'
    """
    m = result.metrics
    return (
        f"SUMMARY mode={result.mode.value} "
        f"scanned={m.scanned_rows} "
        f"eligible={m.eligible_rows} "
        f"inserted={m.inserted} "
        f"updated={m.updated} "
        f"skipped_missing={m.skipped_missing_fields} "
        f"skipped_invalid_date={m.skipped_invalid_date} "
        f"invoice_conflicts={m.invoice_conflicts} "
        f"total_written={result.total_written} "
        f"elapsed_sec={_format_seconds(result.elapsed_seconds)}"
    )
