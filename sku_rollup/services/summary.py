from __future__ import annotations

from ..models.processing_result import ProcessingResult

"""SUMMARY line rendering for the command line surface."""


def _format_seconds(value: float) -> str:
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        # Avoid scientific notation for very small numbers
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return f"{value:.3f}".rstrip("0").rstrip(".")


def render_summary_fields(result: ProcessingResult) -> str:
    """Key=value part of the SUMMARY line (log_summary adds the label)."""
    total = result.total_files
    return (
        f"files={total}/{total} "
        f"success={result.success_files} "
        f"failed={result.failed_files} "
        f"rows={result.total_input_rows} "
        f"groups={result.total_groups} "
        f"skipped_rows={result.total_skipped_rows} "
        f"exported={result.total_exported_rows} "
        f"elapsed_sec={_format_seconds(result.elapsed_seconds)}"
    )


def render_summary_line(result: ProcessingResult) -> str:
    """Render the SUMMARY line for a CLI run.

    Format:
    SUMMARY files={total}/{total} success={success} failed={failed} rows={rows}
    groups={groups} skipped_rows={skipped} exported={exported} elapsed_sec={elapsed}

    Examples:
        >>> from datetime import datetime, timezone
        >>> start = datetime(2024, 1, 1, 10, 0, 0, tzinfo=timezone.utc)
        >>> end = datetime(2024, 1, 1, 10, 0, 2, tzinfo=timezone.utc)
        >>> result = ProcessingResult(
        ...     success_files=1, failed_files=0, total_input_rows=30, total_groups=4,
        ...     total_skipped_rows=1, total_exported_rows=4, start_time=start, end_time=end,
        ...     elapsed_seconds=2.0,
        ... )
        >>> render_summary_line(result)
        'SUMMARY files=1/1 success=1 failed=0 rows=30 groups=4 skipped_rows=1 exported=4 elapsed_sec=2'
    """
    return f"SUMMARY {render_summary_fields(result)}"
