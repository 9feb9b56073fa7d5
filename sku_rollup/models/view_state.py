from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from .cell import Row
from .sort_state import SortState

"""ViewState model.

Everything the page (or the CLI export) needs to render one view of an
uploaded file. Instances are never mutated: each user event produces a new
ViewState through the pure functions in services.view.
"""

__all__ = [
    "RowCount",
    "ViewState",
]

RowCount = Union[str, int]  # "all" or one of projection.ROW_COUNT_OPTIONS


@dataclass(frozen=True)
class ViewState:
    source_name: str | None = None      # Uploaded file name, None before first load
    columns: tuple[str, ...] = ()       # Header of the decoded sheet (display order)
    groups: tuple[Row, ...] = ()        # Aggregated rows, first-seen key order
    input_rows: int = 0                 # Decoded data rows
    skipped_rows: int = 0               # Rows dropped for an empty/missing key
    sort_state: SortState | None = None
    row_count: RowCount = "all"
    message: str | None = None          # User-visible error from the last event

    @property
    def loaded(self) -> bool:
        return self.source_name is not None
