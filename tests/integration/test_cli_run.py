from __future__ import annotations

import re
from pathlib import Path

import pytest

from orders_sync.cli.__main__ import EXIT_CONFLICTS, EXIT_FATAL, EXIT_SUCCESS, main
from orders_sync.excel.target_sheet import ExcelTargetStore

from conftest import make_workbook

TS_RE = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}$")


def test_full_run_reports_conflicts(write_config: Path, dep_workbook: Path, capsys):
    code = main(["--no-progress"])
    out = capsys.readouterr().out

    assert code == EXIT_CONFLICTS
    assert (
        "SUMMARY mode=full scanned=4 eligible=3 inserted=2 updated=0 skipped_missing=1 "
        "skipped_invalid_date=0 invoice_conflicts=1 total_written=2 elapsed_sec="
    ) in out
    assert "WARN" in out and "INV-1" in out
    assert "row issues written to" in out

    rows = ExcelTargetStore(dep_workbook, "Orders Database").read_rows()
    assert [r[:2] for r in rows] == [["TEST-1", "INV-1"], ["TEST-1", "INV-2"]]
    assert all(TS_RE.match(str(r[5])) for r in rows)
    assert len(list((write_config.parent.parent / "logs").glob("errors-*.log"))) == 1


def test_clean_run_exits_zero(write_config: Path, temp_workdir: Path, capsys):
    make_workbook(
        temp_workdir / "data" / "dep.xlsx",
        {"DEP Data": [["Order ID", "Invoice #", "Order Date", "Ship Date"], ["A-1", "I-1", "2025-07-01", "2025-07-02"]]},
    )
    assert main(["--no-progress"]) == EXIT_SUCCESS
    out = capsys.readouterr().out
    assert "inserted=1" in out
    assert not list((temp_workdir / "logs").glob("errors-*.log"))


def test_missing_config_is_fatal(temp_workdir: Path, capsys):
    assert main(["--config", "config/absent.yml"]) == EXIT_FATAL
    assert "ERROR config:" in capsys.readouterr().out


def test_missing_required_columns_is_fatal(write_config: Path, temp_workdir: Path, capsys):
    make_workbook(temp_workdir / "data" / "dep.xlsx", {"DEP Data": [["Order ID"], ["A-1"]]})
    assert main(["--no-progress"]) == EXIT_FATAL
    out = capsys.readouterr().out
    assert "ERROR sync: Missing required columns in 'DEP Data'" in out
    assert "SUMMARY" not in out


def test_row_mode_runs_incremental(write_config: Path, dep_workbook: Path, capsys):
    assert main(["--row", "3"]) == EXIT_SUCCESS
    out = capsys.readouterr().out
    assert "SUMMARY mode=incremental scanned=1 eligible=1 inserted=1" in out
    rows = ExcelTargetStore(dep_workbook, "Orders Database").read_rows()
    assert [r[:2] for r in rows] == [["TEST-1", "INV-2"]]


def test_row_mode_rejects_header_row(write_config: Path, dep_workbook: Path, capsys):
    assert main(["--row", "1"]) == EXIT_FATAL
    assert "ERROR sync:" in capsys.readouterr().out


def test_untracked_edit_is_ignored(write_config: Path, dep_workbook: Path, capsys):
    assert main(["--edit-row", "2", "--edit-col", "6"]) == EXIT_SUCCESS
    out = capsys.readouterr().out
    assert "edit ignored" in out
    assert "SUMMARY" not in out


def test_tracked_edit_runs_full_sync(write_config: Path, dep_workbook: Path, capsys):
    assert main(["--edit-row", "3", "--edit-col", "2"]) == EXIT_CONFLICTS
    assert "SUMMARY mode=full" in capsys.readouterr().out


def test_edit_row_requires_col(write_config: Path):
    with pytest.raises(SystemExit):
        main(["--edit-row", "2"])


def test_inspect_data(write_config: Path, dep_workbook: Path, capsys):
    assert main(["--inspect-data"]) == EXIT_SUCCESS
    out = capsys.readouterr().out
    assert "SHEET: DEP Data" in out
    assert "row 2:" in out
