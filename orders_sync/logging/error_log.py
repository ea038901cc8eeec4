from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

from orders_sync.models.error_record import ErrorRecord

"""Row-level error log buffering.

Skipped rows are buffered in memory during a sync and written once at the
end of the run as JSON Lines to `<dir>/errors-YYYYMMDD-HHMMSS.log` (UTC).
No file is created for a run without row-level issues.
"""

__all__ = [
    "ErrorRecord",
    "ErrorLogBuffer",
]

LOGS_DIR = Path("./logs")
TIMESTAMP_FMT = "%Y%m%d-%H%M%S"


class ErrorLogBuffer:
    """In-memory buffer for error records. flush() appends JSON Lines.

    - file path is decided on first flush
    - serial use only (one buffer per sync run)
    """
    def __init__(self, directory: Path | str | None = None) -> None:
        self._records: list[ErrorRecord] = []
        self._directory = Path(directory) if directory is not None else LOGS_DIR
        self._file_path: Path | None = None

    @property
    def file_path(self) -> Path:
        if self._file_path is None:
            self._directory.mkdir(parents=True, exist_ok=True)
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            self._file_path = self._directory / f"errors-{stamp}.log"
        return self._file_path

    @property
    def records(self) -> list[ErrorRecord]:
        return list(self._records)

    def append(self, record: ErrorRecord) -> None:
        self._records.append(record)

    def __len__(self) -> int:  # pragma: no cover (trivial)
        return len(self._records)

    def flush(self) -> Path | None:
        """Write buffered records and clear the buffer.

        Returns:
            The log file path, or None when there was nothing to write
        """
        if not self._records:
            return self._file_path
        fp = self.file_path
        with fp.open("a", encoding="utf-8") as f:
            for r in self._records:
                f.write(r.to_json_line() + "\n")
        self._records.clear()
        return fp
