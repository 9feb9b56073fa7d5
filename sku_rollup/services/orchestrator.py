from __future__ import annotations

import logging
from collections.abc import Collection, Sequence
from datetime import UTC, datetime
from pathlib import Path

from ..excel.reader import DecodeError, UnsupportedFileTypeError
from ..excel.writer import EXPORT_FILE_NAME, EncodeError
from ..logging.error_log import ErrorLogBuffer
from ..models.processing_result import FileStat, ProcessingResult
from ..models.view_state import RowCount
from .progress import ProgressTracker
from .projection import ALL_ROWS
from .session import ViewSession
from .view import visible_rows

logger = logging.getLogger(__name__)

"""Batch orchestration for the command line.

Each file goes through the same steps a browser user performs: load, click
the requested headers in order, pick the row count, export. A failing file
is recorded and the run continues with the next one.
"""


def export_path(output_dir: Path, source: Path) -> Path:
    """<output_dir>/<source stem>/table_data.xlsx"""
    return output_dir / source.stem / EXPORT_FILE_NAME


def _print_view(path: Path, columns: Sequence[str], rows: list[dict]) -> None:
    print(f"FILE: {path.name}")
    print(f"  columns={list(columns)}")
    for idx, row in enumerate(rows, start=1):
        print(f"  {idx}: {row}")


def process_file(
    path: Path,
    *,
    sort_columns: Sequence[str] = (),
    row_count: RowCount = ALL_ROWS,
    output_dir: Path,
    locked_columns: Collection[str] = (),
    inspect: bool = False,
    error_log: ErrorLogBuffer | None = None,
) -> FileStat:
    """Run one file through load -> sort -> project -> export (or print)."""
    start = datetime.now(UTC)
    session = ViewSession(default_rows=row_count, locked_columns=locked_columns, error_log=error_log)

    def _failed(error: Exception) -> FileStat:
        state = session.state
        return FileStat(
            file_name=path.name,
            status="failed",
            input_rows=state.input_rows if state.loaded else 0,
            groups=len(state.groups) if state.loaded else 0,
            skipped_rows=state.skipped_rows if state.loaded else 0,
            exported_rows=0,
            elapsed_seconds=(datetime.now(UTC) - start).total_seconds(),
            error=str(error),
        )

    try:
        session.load(path.name, path.read_bytes)
    except (UnsupportedFileTypeError, DecodeError) as e:
        return _failed(e)
    except OSError as e:
        logger.error("read failed file=%s: %s", path, e)
        if error_log is not None:
            error_log.record(path.name, "read", e)
        return _failed(e)

    for column in sort_columns:
        state = session.sort(column)
        if column not in state.columns:
            logger.warning("file=%s sort column not found: %s", path.name, column)
        elif column in session.locked_columns:
            logger.warning("file=%s sort column is locked: %s", path.name, column)

    state = session.state
    rows = visible_rows(state)
    out_path: Path | None = None
    if inspect:
        _print_view(path, state.columns, rows)
    else:
        try:
            data = session.export()
        except EncodeError as e:
            return _failed(e)
        out_path = export_path(output_dir, path)
        try:
            out_path.parent.mkdir(parents=True, exist_ok=True)
            out_path.write_bytes(data)
        except OSError as e:
            logger.error("write failed path=%s: %s", out_path, e)
            if error_log is not None:
                error_log.record(path.name, "write", e)
            return _failed(e)
        logger.info("exported file=%s rows=%d -> %s", path.name, len(rows), out_path)

    return FileStat(
        file_name=path.name,
        status="success",
        input_rows=state.input_rows,
        groups=len(state.groups),
        skipped_rows=state.skipped_rows,
        exported_rows=len(rows),
        elapsed_seconds=(datetime.now(UTC) - start).total_seconds(),
        output_path=str(out_path) if out_path is not None else None,
    )


def process_files(
    paths: Sequence[Path],
    *,
    sort_columns: Sequence[str] = (),
    row_count: RowCount = ALL_ROWS,
    output_dir: Path,
    locked_columns: Collection[str] = (),
    inspect: bool = False,
    error_log: ErrorLogBuffer | None = None,
) -> ProcessingResult:
    """Process every path in order and aggregate the statistics."""
    start_time = datetime.now(UTC)
    file_stats: list[FileStat] = []

    with ProgressTracker(len(paths)) as progress:
        for path in paths:
            progress.start_file(path)
            stat = process_file(
                path,
                sort_columns=sort_columns,
                row_count=row_count,
                output_dir=output_dir,
                locked_columns=locked_columns,
                inspect=inspect,
                error_log=error_log,
            )
            file_stats.append(stat)
            progress.finish_file(groups=stat.groups, status=stat.status)

    if error_log is not None:
        try:
            error_log.flush()
        except OSError as e:
            logger.warning("error log flush failed: %s", e)

    end_time = datetime.now(UTC)
    ok = [s for s in file_stats if s.status == "success"]
    return ProcessingResult(
        success_files=len(ok),
        failed_files=len(file_stats) - len(ok),
        total_input_rows=sum(s.input_rows for s in ok),
        total_groups=sum(s.groups for s in ok),
        total_skipped_rows=sum(s.skipped_rows for s in ok),
        total_exported_rows=sum(s.exported_rows for s in ok),
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=(end_time - start_time).total_seconds(),
        file_stats=file_stats,
    )
