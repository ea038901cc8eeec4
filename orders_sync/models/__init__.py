"""Domain models for the Orders Database sync tool.

This package contains the configuration values, the reconciliation record
and its index, and the per-run metrics and results.
"""

from .config_models import DatabaseConfig, SourceConfig, SyncConfig, TargetConfig
from .error_record import ErrorRecord
from .record import Record, composite_key, normalize_key, normalize_string
from .source_row import SourceRow
from .sync_result import SyncMetrics, SyncMode, SyncResult
from .target_index import TargetIndex, UpsertOutcome, merge_record_into_existing

__all__ = [
    # Configuration models
    "DatabaseConfig",
    "SourceConfig",
    "SyncConfig",
    "TargetConfig",
    # Reconciliation models
    "Record",
    "SourceRow",
    "TargetIndex",
    "UpsertOutcome",
    "composite_key",
    "merge_record_into_existing",
    "normalize_key",
    "normalize_string",
    # Run results
    "ErrorRecord",
    "SyncMetrics",
    "SyncMode",
    "SyncResult",
]
