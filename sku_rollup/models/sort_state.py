from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

"""SortState model: which column the aggregated table is ordered by."""

__all__ = [
    "SortDirection",
    "SortState",
]


class SortDirection(Enum):
    ASCENDING = "ascending"
    DESCENDING = "descending"

    @property
    def arrow(self) -> str:
        return "▲" if self is SortDirection.ASCENDING else "▼"


@dataclass(frozen=True)
class SortState:
    """Active sort column and direction.

    Re-selecting the same column flips the direction; selecting any other
    column starts again at ASCENDING (see services.sorting.next_sort_state).
    """
    column: str
    direction: SortDirection = SortDirection.ASCENDING

    @property
    def descending(self) -> bool:
        return self.direction is SortDirection.DESCENDING
