from __future__ import annotations

from collections.abc import Sequence
from typing import Any, TypeVar

from ..models.view_state import RowCount

"""Display/filter projection: how many aggregated rows are shown/exported."""

__all__ = [
    "ALL_ROWS",
    "ROW_COUNT_OPTIONS",
    "InvalidRowCountError",
    "parse_row_count",
    "project",
    "row_count_label",
]

ALL_ROWS = "all"
ROW_COUNT_OPTIONS: tuple[RowCount, ...] = (ALL_ROWS, 10, 20, 50, 100, 200)

T = TypeVar("T")


class InvalidRowCountError(ValueError):
    """Raised for a row-count selector value outside ROW_COUNT_OPTIONS."""


def parse_row_count(raw: Any) -> RowCount:
    """Convert a selector value ("all", "50", 50 ...) to a RowCount."""
    if isinstance(raw, str):
        text = raw.strip().lower()
        if text == ALL_ROWS:
            return ALL_ROWS
        try:
            raw = int(text)
        except ValueError:
            raise InvalidRowCountError(f"invalid row count: {raw!r}") from None
    if isinstance(raw, bool) or not isinstance(raw, int) or raw not in ROW_COUNT_OPTIONS:
        raise InvalidRowCountError(
            f"invalid row count: {raw!r} (options: {', '.join(str(o) for o in ROW_COUNT_OPTIONS)})"
        )
    return raw


def row_count_label(option: RowCount) -> str:
    return "Show all" if option == ALL_ROWS else f"Show {option}"


def project(rows: Sequence[T], row_count: RowCount) -> list[T]:
    if row_count == ALL_ROWS:
        return list(rows)
    return list(rows[: int(row_count)])
