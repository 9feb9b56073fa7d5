from __future__ import annotations

import logging
from collections.abc import Collection
from dataclasses import replace

from ..excel.reader import SheetData
from ..models.cell import Row
from ..models.view_state import RowCount, ViewState
from .aggregation import KEY_COLUMN, aggregate_rows
from .projection import ALL_ROWS, project
from .sorting import next_sort_state, sort_rows

"""Pure ViewState transitions.

Each user event (file loaded, header clicked, row count chosen) maps the
current ViewState to a new one. Sorting and projection are recomputed from
the state on every render; nothing here keeps hidden state.
"""

__all__ = [
    "empty_view",
    "load_view",
    "ordered_rows",
    "select_row_count",
    "select_sort",
    "visible_rows",
    "with_message",
]

logger = logging.getLogger(__name__)


def empty_view(row_count: RowCount = ALL_ROWS) -> ViewState:
    return ViewState(row_count=row_count)


def load_view(source_name: str, sheet: SheetData, row_count: RowCount = ALL_ROWS) -> ViewState:
    """Aggregate a freshly decoded sheet. Sort state is reset."""
    if sheet.rows and KEY_COLUMN not in sheet.columns:
        logger.warning("file=%s has no '%s' column; no rows can be grouped", source_name, KEY_COLUMN)
    result = aggregate_rows(sheet.rows)
    logger.info(
        "loaded file=%s rows=%d groups=%d skipped_rows=%d",
        source_name,
        result.input_rows,
        result.groups,
        result.skipped_rows,
    )
    return ViewState(
        source_name=source_name,
        columns=tuple(sheet.columns),
        groups=tuple(result.rows),
        input_rows=result.input_rows,
        skipped_rows=result.skipped_rows,
        sort_state=None,
        row_count=row_count,
        message=None,
    )


def select_sort(state: ViewState, column: str, locked_columns: Collection[str] = ()) -> ViewState:
    return replace(state, sort_state=next_sort_state(state.sort_state, column, locked_columns), message=None)


def select_row_count(state: ViewState, row_count: RowCount) -> ViewState:
    return replace(state, row_count=row_count, message=None)


def with_message(state: ViewState, message: str | None) -> ViewState:
    return replace(state, message=message)


def ordered_rows(state: ViewState) -> list[Row]:
    return sort_rows(state.groups, state.sort_state)


def visible_rows(state: ViewState) -> list[Row]:
    return project(ordered_rows(state), state.row_count)
