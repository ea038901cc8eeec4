from __future__ import annotations

from dataclasses import dataclass

"""Config dataclasses for the Orders Database sync tool.

These are the immutable configuration values passed to the orchestrator,
normalizer and target stores at call time. The YAML loading and schema
validation live in orders_sync/config/loader.py.
"""

DEFAULT_SOURCE_SHEET = "DEP Data"
DEFAULT_TARGET_SHEET = "Orders Database"
DEFAULT_TARGET_TABLE = "orders_database"
DEFAULT_TIMESTAMP_FMT = "%Y-%m-%dT%H:%M:%S"


@dataclass(frozen=True)
class DatabaseConfig:
    """Database connection configuration for the postgres target backend.

    Used as fallback when environment variables are not set.
    Environment variables take precedence over these values.
    """
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    database: str | None = None
    dsn: str | None = None


@dataclass(frozen=True)
class SourceConfig:
    """Location of the source sheet (read-only for the sync)."""
    workbook: str  # Excel workbook path
    sheet: str = DEFAULT_SOURCE_SHEET


@dataclass(frozen=True)
class TargetConfig:
    """Location of the reconciled Orders Database."""
    backend: str = "excel"  # excel | postgres
    workbook: str | None = None  # excel backend; None -> source workbook
    sheet: str = DEFAULT_TARGET_SHEET
    table: str = DEFAULT_TARGET_TABLE  # postgres backend


@dataclass(frozen=True)
class SyncConfig:
    """Root configuration object for a sync run."""
    source: SourceConfig
    target: TargetConfig
    require_order_id: bool = True  # rows without an Order ID are skipped
    full_sync_on_edit: bool = True  # edit trigger runs a full sync instead of incremental
    timezone: str = "UTC"  # timezone for the Last Synced column
    timestamp_fmt: str = DEFAULT_TIMESTAMP_FMT
    error_log_dir: str = "./logs"
    database: DatabaseConfig = DatabaseConfig()

    @property
    def target_workbook(self) -> str:
        """Workbook holding the target sheet (defaults to the source workbook)."""
        return self.target.workbook or self.source.workbook
