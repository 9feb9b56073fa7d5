from __future__ import annotations

from collections.abc import Collection, Sequence

from ..models.cell import Cell, CellKind, Row, cell_kind
from ..models.sort_state import SortDirection, SortState

"""Sort controller.

Ordering is an explicit total order rather than whatever comparison the
cell types happen to support:

- numbers compare by value, text by code point
- numbers sort before text
- empty cells (and rows without the column) are placed last in both
  directions

Descending reverses the number/text part only.
"""

__all__ = [
    "is_sortable",
    "next_sort_state",
    "sort_key",
    "sort_rows",
]


def is_sortable(column: str, locked_columns: Collection[str] = ()) -> bool:
    return column not in locked_columns


def next_sort_state(
    prior: SortState | None, column: str, locked_columns: Collection[str] = ()
) -> SortState | None:
    """SortState after a click on ``column``.

    Same column flips the direction, any other column starts ascending.
    A click on a locked column leaves the state untouched.
    """
    if not is_sortable(column, locked_columns):
        return prior
    if prior is not None and prior.column == column and prior.direction is SortDirection.ASCENDING:
        return SortState(column, SortDirection.DESCENDING)
    return SortState(column, SortDirection.ASCENDING)


def sort_key(value: Cell) -> tuple[int, float, str]:
    """Key for a non-empty cell: (rank, number, text)."""
    if cell_kind(value) is CellKind.NUMBER:
        return (0, value, "")  # type: ignore[return-value]
    return (1, 0.0, str(value))


def sort_rows(rows: Sequence[Row], state: SortState | None) -> list[Row]:
    if state is None:
        return list(rows)
    present: list[Row] = []
    blank: list[Row] = []
    for row in rows:
        if cell_kind(row.get(state.column)) is CellKind.EMPTY:
            blank.append(row)
        else:
            present.append(row)
    present.sort(key=lambda r: sort_key(r[state.column]), reverse=state.descending)
    return present + blank
