from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

"""Batch run result models for the command line surface.

The web surface works on one ViewState at a time; the CLI processes a list
of files and reports per-file statistics plus one aggregated SUMMARY line.
"""


@dataclass(frozen=True)
class FileStat:
    """Per-file statistics."""
    file_name: str
    status: str  # success/failed
    input_rows: int
    groups: int
    skipped_rows: int
    exported_rows: int
    elapsed_seconds: float
    output_path: str | None = None
    error: str | None = None


@dataclass(frozen=True)
class ProcessingResult:
    """Aggregated results for one CLI run (feeds the SUMMARY line)."""
    success_files: int
    failed_files: int
    total_input_rows: int
    total_groups: int
    total_skipped_rows: int
    total_exported_rows: int
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    file_stats: list[FileStat] | None = None

    @property
    def total_files(self) -> int:
        return self.success_files + self.failed_files
