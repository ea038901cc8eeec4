from __future__ import annotations

import logging
import os
import shutil
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import pandas as pd

from orders_sync.models.store import TargetStoreError

from .columns import TARGET_HEADERS

"""Orders Database stored as a sheet of an Excel workbook.

Writes never clear the live sheet in place: the workbook is copied to a
staging file next to it, the target sheet is replaced in the copy, and the
copy is swapped over the original with os.replace. A failure before the
swap leaves the original workbook untouched.
"""

logger = logging.getLogger(__name__)


class ExcelTargetStore:
    def __init__(self, path: Path | str, sheet_name: str) -> None:
        self.path = Path(path)
        self.sheet_name = sheet_name

    def describe(self) -> str:
        return f"{self.path.name}[{self.sheet_name}]"

    @property
    def staging_path(self) -> Path:
        return self.path.with_name(f".{self.path.stem}.staging{self.path.suffix}")

    def read_rows(self) -> list[list[Any]]:
        """Data rows below the header, padded/truncated to the target width.

        A missing workbook or sheet is an empty dataset.
        """
        if not self.path.exists():
            return []
        try:
            with pd.ExcelFile(self.path) as xls:
                if self.sheet_name not in [str(n) for n in xls.sheet_names]:
                    return []
                df = xls.parse(
                    self.sheet_name, header=None, keep_default_na=False, na_values=[""]
                )
        except Exception as e:
            raise TargetStoreError(f"cannot read {self.describe()}: {e}") from e

        width = len(TARGET_HEADERS)
        rows: list[list[Any]] = []
        for pos in range(1, df.shape[0]):
            values = df.iloc[pos].tolist()[:width]
            values += [None] * (width - len(values))
            rows.append(values)
        return rows

    def write_rows(self, rows: Sequence[Sequence[Any]]) -> int:
        df = pd.DataFrame([list(r) for r in rows], columns=TARGET_HEADERS)
        staging = self.staging_path
        try:
            if self.path.exists():
                shutil.copy2(self.path, staging)
                writer = pd.ExcelWriter(
                    staging, engine="openpyxl", mode="a", if_sheet_exists="replace"
                )
            else:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                writer = pd.ExcelWriter(staging, engine="openpyxl", mode="w")
            with writer:
                df.to_excel(writer, sheet_name=self.sheet_name, index=False)
            os.replace(staging, self.path)
        except Exception as e:
            staging.unlink(missing_ok=True)
            raise TargetStoreError(f"cannot write {self.describe()}: {e}") from e
        logger.debug("wrote %d rows to %s", len(df), self.describe())
        return len(df)
