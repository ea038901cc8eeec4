from __future__ import annotations

import json
import re
from pathlib import Path

from orders_sync.models.error_record import INVALID_DATE, INVOICE_CONFLICT, MISSING_FIELDS
from orders_sync.services.orchestrator import full_sync

from conftest import D1, SOURCE_HEADER, MemoryTargetStore, make_workbook

REQUIRED_KEYS = {"timestamp", "sheet", "row", "error_type", "message"}
TS_RE = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d+)?Z$")
UPPER_SNAKE = re.compile(r"^[A-Z]+(_[A-Z]+)*$")


def test_error_log_lines_follow_schema(temp_workdir: Path, config):
    make_workbook(
        temp_workdir / "data" / "dep.xlsx",
        {
            "DEP Data": [
                SOURCE_HEADER,
                ["A-1", "I-1", D1, D1, None, None],
                ["A-2", None, D1, D1, None, None],
                ["A-3", "I-3", "not a date", D1, None, None],
                ["A-4", "I-1", D1, D1, None, None],
            ]
        },
    )
    result = full_sync(config, MemoryTargetStore(), progress=False)
    assert result.error_log_path is not None
    assert re.match(r"^errors-\d{8}-\d{6}\.log$", result.error_log_path.name)

    entries = [json.loads(line) for line in result.error_log_path.read_text(encoding="utf-8").splitlines()]
    assert [e["error_type"] for e in entries] == [MISSING_FIELDS, INVALID_DATE, INVOICE_CONFLICT]
    for e in entries:
        assert set(e) == REQUIRED_KEYS
        assert TS_RE.match(e["timestamp"])
        assert e["sheet"] == "DEP Data"
        assert isinstance(e["row"], int) and e["row"] >= 2
        assert UPPER_SNAKE.match(e["error_type"])
        assert e["message"]
