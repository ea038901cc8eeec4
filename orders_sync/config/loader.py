from __future__ import annotations

import json
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from orders_sync.models.config_models import (
    DEFAULT_SOURCE_SHEET,
    DEFAULT_TARGET_SHEET,
    DEFAULT_TARGET_TABLE,
    DEFAULT_TIMESTAMP_FMT,
    DatabaseConfig,
    SourceConfig,
    SyncConfig,
    TargetConfig,
)

"""Config loader.

Responsibilities:
- Load YAML config (default config/sync.yml)
- Validate against the bundled JSON schema (config_schema.json)
- Apply defaults (timezone=UTC, require_order_id=true, full_sync_on_edit=true)
"""

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")
DEFAULT_CONFIG_PATH = Path("config/sync.yml")


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: schema file missing or invalid, or the data fails validation
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def _validate_timezone(tz: str) -> None:
    try:
        ZoneInfo(tz)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ConfigError(f"unknown timezone: {tz}") from e


def load_config(path: Path = DEFAULT_CONFIG_PATH) -> SyncConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError("config root must be a mapping")

    _validate_config_schema(data)

    tz = data.get("timezone", "UTC")
    _validate_timezone(tz)

    src_raw = data["source"]
    tgt_raw = data.get("target") or {}
    db_raw = data.get("database") or {}
    return SyncConfig(
        source=SourceConfig(
            workbook=src_raw["workbook"],
            sheet=src_raw.get("sheet", DEFAULT_SOURCE_SHEET),
        ),
        target=TargetConfig(
            backend=tgt_raw.get("backend", "excel"),
            workbook=tgt_raw.get("workbook"),
            sheet=tgt_raw.get("sheet", DEFAULT_TARGET_SHEET),
            table=tgt_raw.get("table", DEFAULT_TARGET_TABLE),
        ),
        require_order_id=data.get("require_order_id", True),
        full_sync_on_edit=data.get("full_sync_on_edit", True),
        timezone=tz,
        timestamp_fmt=data.get("timestamp_fmt", DEFAULT_TIMESTAMP_FMT),
        error_log_dir=data.get("error_log_dir", "./logs"),
        database=DatabaseConfig(
            host=db_raw.get("host"),
            port=db_raw.get("port"),
            user=db_raw.get("user"),
            password=db_raw.get("password"),
            database=db_raw.get("database"),
            dsn=db_raw.get("dsn"),
        ),
    )
