from __future__ import annotations

from pathlib import Path

import pandas as pd
import pytest

from orders_sync.excel.columns import TARGET_HEADERS
from orders_sync.excel.target_sheet import ExcelTargetStore
from orders_sync.models.store import TargetStoreError

from conftest import D1, D2, make_workbook


def test_missing_workbook_or_sheet_reads_empty(dep_workbook: Path, temp_workdir: Path):
    assert ExcelTargetStore(temp_workdir / "nope.xlsx", "Orders Database").read_rows() == []
    assert ExcelTargetStore(dep_workbook, "Orders Database").read_rows() == []


def test_write_then_read_keeps_other_sheets(dep_workbook: Path):
    store = ExcelTargetStore(dep_workbook, "Orders Database")
    written = store.write_rows([["TEST-1", "INV-1", D1, D2, "PO-1", "2025-07-17T12:00:00"]])
    assert written == 1

    xls = pd.ExcelFile(dep_workbook)
    assert set(xls.sheet_names) == {"DEP Data", "Orders Database"}
    header = xls.parse("Orders Database", header=None).iloc[0].tolist()
    assert header == TARGET_HEADERS

    rows = store.read_rows()
    assert len(rows) == 1
    assert rows[0][0:2] == ["TEST-1", "INV-1"]
    assert pd.Timestamp(rows[0][2]) == pd.Timestamp(D1)
    assert rows[0][5] == "2025-07-17T12:00:00"
    assert not store.staging_path.exists()


def test_rewrite_replaces_whole_body(dep_workbook: Path):
    store = ExcelTargetStore(dep_workbook, "Orders Database")
    store.write_rows([[f"T-{i}", f"INV-{i}", D1, D2, "", "ts"] for i in range(5)])
    store.write_rows([["T-9", "INV-9", D1, D2, "", "ts"]])
    rows = store.read_rows()
    assert [r[0] for r in rows] == ["T-9"]


def test_write_empty_keeps_header(dep_workbook: Path):
    store = ExcelTargetStore(dep_workbook, "Orders Database")
    store.write_rows([["T-1", "INV-1", D1, D2, "", "ts"]])
    assert store.write_rows([]) == 0
    assert store.read_rows() == []
    header = pd.ExcelFile(dep_workbook).parse("Orders Database", header=None).iloc[0].tolist()
    assert header == TARGET_HEADERS


def test_write_creates_new_workbook(temp_workdir: Path):
    store = ExcelTargetStore(temp_workdir / "out" / "orders.xlsx", "Orders Database")
    store.write_rows([["T-1", "INV-1", D1, D2, "", "ts"]])
    assert (temp_workdir / "out" / "orders.xlsx").exists()
    assert len(store.read_rows()) == 1


def test_short_stored_rows_are_padded(temp_workdir: Path):
    wb = make_workbook(
        temp_workdir / "data" / "short.xlsx",
        {"Orders Database": [["Order ID", "Invoice #"], ["T-1", "INV-1"]]},
    )
    rows = ExcelTargetStore(wb, "Orders Database").read_rows()
    assert len(rows[0]) == len(TARGET_HEADERS)
    assert rows[0][:2] == ["T-1", "INV-1"]


def test_failed_write_leaves_original_untouched(dep_workbook: Path, monkeypatch):
    store = ExcelTargetStore(dep_workbook, "Orders Database")
    store.write_rows([["T-1", "INV-1", D1, D2, "", "ts"]])

    def boom(*args, **kwargs):
        raise OSError("disk full")

    monkeypatch.setattr("orders_sync.excel.target_sheet.os.replace", boom)
    with pytest.raises(TargetStoreError, match="disk full"):
        store.write_rows([])
    assert [r[0] for r in store.read_rows()] == ["T-1"]
    assert not store.staging_path.exists()


def test_corrupt_workbook_raises_store_error(temp_workdir: Path):
    bad = temp_workdir / "data" / "corrupt.xlsx"
    bad.write_bytes(b"not a zip")
    with pytest.raises(TargetStoreError):
        ExcelTargetStore(bad, "Orders Database").read_rows()
