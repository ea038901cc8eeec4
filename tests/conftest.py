# Shared pytest fixtures
from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from pathlib import Path
from typing import Any

import pandas as pd
import pytest

from orders_sync.logging.init import reset_logging
from orders_sync.models.config_models import SourceConfig, SyncConfig, TargetConfig
from orders_sync.models.source_row import SourceRow

SOURCE_HEADER = ["Order ID", "Invoice #", "Hardware Order Date", "Hardware Ship Date", "Reseller PO", "Notes"]

D1 = datetime(2025, 7, 1, 9, 0, 0)
D2 = datetime(2025, 7, 2, 9, 0, 0)
D3 = datetime(2025, 7, 3, 9, 0, 0)


class MemoryTargetStore:
    """Target store kept in a list; counts writes."""

    def __init__(self, rows: Sequence[Sequence[Any]] | None = None) -> None:
        self.rows: list[list[Any]] = [list(r) for r in rows or []]
        self.writes = 0

    def describe(self) -> str:
        return "memory"

    def read_rows(self) -> list[list[Any]]:
        return [list(r) for r in self.rows]

    def write_rows(self, rows: Sequence[Sequence[Any]]) -> int:
        self.rows = [list(r) for r in rows]
        self.writes += 1
        return len(self.rows)


def make_workbook(path: Path, sheets: dict[str, list[list[object]]]) -> Path:
    """Write sheets as raw rows (first row is whatever the test puts there)."""
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        for sheet_name, rows in sheets.items():
            pd.DataFrame(rows).to_excel(writer, sheet_name=sheet_name, header=False, index=False)
    return path


def source_row(
    row_number: int,
    order_id: object = "",
    invoice: object = "",
    order_date: object = None,
    ship_date: object = None,
    reseller_po: object = "",
) -> SourceRow:
    return SourceRow(
        row_number=row_number,
        values={
            "Order ID": order_id,
            "Invoice #": invoice,
            "Hardware Order Date": order_date,
            "Hardware Ship Date": ship_date,
            "Reseller PO": reseller_po,
        },
    )


@pytest.fixture(autouse=True)
def _fresh_logging():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def temp_workdir(tmp_path: Path, monkeypatch) -> Path:
    (tmp_path / "config").mkdir()
    (tmp_path / "data").mkdir()
    (tmp_path / "logs").mkdir()
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture()
def make_config(tmp_path: Path):
    def _make(**overrides: Any) -> SyncConfig:
        workbook = overrides.pop("workbook", str(tmp_path / "data" / "dep.xlsx"))
        target = overrides.pop("target", TargetConfig())
        return SyncConfig(
            source=SourceConfig(workbook=workbook),
            target=target,
            error_log_dir=overrides.pop("error_log_dir", str(tmp_path / "logs")),
            **overrides,
        )
    return _make


@pytest.fixture()
def config(make_config) -> SyncConfig:
    return make_config()


@pytest.fixture()
def dep_workbook(temp_workdir: Path) -> Path:
    """Workbook with the scenario rows: two valid, one missing order, one conflict."""
    return make_workbook(
        temp_workdir / "data" / "dep.xlsx",
        {
            "DEP Data": [
                SOURCE_HEADER,
                ["TEST-1", "INV-1", D1, D2, "PO-1", "first"],
                ["TEST-1", "INV-2", D1, D3, "PO-2", None],
                [None, "INV-NO-ORDER", D1, D2, None, None],
                ["TEST-2", "INV-1", D1, D3, None, "conflict"],
            ]
        },
    )


@pytest.fixture()
def sample_config_yaml() -> str:
    return """source:
  workbook: ./data/dep.xlsx
  sheet: DEP Data
target:
  backend: excel
  sheet: Orders Database
require_order_id: true
full_sync_on_edit: true
timezone: America/Sao_Paulo
timestamp_fmt: "%Y-%m-%dT%H:%M:%S"
error_log_dir: ./logs
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "sync.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg
