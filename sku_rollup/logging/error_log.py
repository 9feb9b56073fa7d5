from __future__ import annotations

import threading
from datetime import UTC, datetime
from pathlib import Path

from ..models.error_record import ErrorRecord

"""Error log buffering.

Failed decode/encode/type-check operations are collected as ErrorRecord
entries and appended as JSON Lines to ``logs/errors-YYYYMMDD-HHMMSS.log``
(UTC stamp fixed at the first flush of the buffer).
"""

__all__ = [
    "ErrorRecord",
    "ErrorLogBuffer",
]

LOGS_DIR = Path("./logs")
TIMESTAMP_FMT = "%Y%m%d-%H%M%S"


class ErrorLogBuffer:
    """In-memory buffer for error records. Flush writes JSON Lines.

    One instance is shared by all request threads of the web server; every
    access holds the lock.
    """

    def __init__(self, logs_dir: Path | None = None) -> None:
        self._records: list[ErrorRecord] = []
        self._logs_dir = logs_dir or LOGS_DIR
        self._file_path: Path | None = None
        self._lock = threading.RLock()

    @property
    def file_path(self) -> Path:
        with self._lock:
            if self._file_path is None:
                self._logs_dir.mkdir(parents=True, exist_ok=True)
                stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
                self._file_path = self._logs_dir / f"errors-{stamp}.log"
            return self._file_path

    def append(self, record: ErrorRecord) -> None:
        with self._lock:
            self._records.append(record)

    def record(self, file: str, operation: str, error: Exception) -> ErrorRecord:
        """Append a record built from an exception (error_type from its class)."""
        rec = ErrorRecord.create(
            file=file,
            operation=operation,
            error_type=_error_type(error),
            message=str(error),
        )
        self.append(rec)
        return rec

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def flush(self) -> Path | None:
        """Write pending records; returns the log path, or None if nothing was pending."""
        with self._lock:
            if not self._records:
                return None
            fp = self.file_path
            with fp.open("a", encoding="utf-8") as f:
                for r in self._records:
                    f.write(r.to_json_line() + "\n")
            self._records.clear()
            return fp


def _error_type(error: Exception) -> str:
    # DecodeError -> DECODE_ERROR, OSError -> OS_ERROR
    name = type(error).__name__
    out = []
    for i, ch in enumerate(name):
        boundary = not name[i - 1].isupper() or (i + 1 < len(name) and name[i + 1].islower())
        if ch.isupper() and i > 0 and boundary:
            out.append("_")
        out.append(ch.upper())
    return "".join(out)
