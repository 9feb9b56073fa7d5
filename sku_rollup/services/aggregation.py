from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from ..models.cell import CellKind, Row, cell_kind, cell_to_text

"""Grouping / aggregation of decoded rows.

Rows are partitioned by the first KEY_LENGTH characters of the seller SKU
column. The first row seen for a key seeds the group: its numeric fields are
reset to 0, its text fields are kept as the group's representative values,
and the SKU field is replaced by the truncated key. Every row of the group
(the seeding row included) then adds its numeric fields into the fields
that were numeric at seeding time.
"""

__all__ = [
    "KEY_COLUMN",
    "KEY_LENGTH",
    "NAME_COLUMN",
    "AggregationResult",
    "aggregate_rows",
    "group_key",
]

KEY_COLUMN = "Артикул продавца"  # seller SKU
NAME_COLUMN = "Наименование товара"  # product name
KEY_LENGTH = 5

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AggregationResult:
    rows: list[Row] = field(default_factory=list)  # one per group, first-seen key order
    input_rows: int = 0
    skipped_rows: int = 0  # missing / empty key

    @property
    def groups(self) -> int:
        return len(self.rows)


def group_key(row: Row, key_column: str = KEY_COLUMN) -> str | None:
    """Truncated group key for a row, or None when the row has no key."""
    value = row.get(key_column)
    if cell_kind(value) is CellKind.EMPTY:
        return None
    key = cell_to_text(value)[:KEY_LENGTH]
    return key or None


def aggregate_rows(rows: Iterable[Row], key_column: str = KEY_COLUMN) -> AggregationResult:
    grouped: dict[str, Row] = {}  # insertion order == first-seen order
    summed: dict[str, set[str]] = {}  # key -> columns seeded as NUMBER
    input_rows = 0
    skipped = 0

    for row in rows:
        input_rows += 1
        key = group_key(row, key_column)
        if key is None:
            skipped += 1
            logger.debug("row %d skipped: empty %s", input_rows, key_column)
            continue

        if key not in grouped:
            seed = dict(row)
            numeric = {col for col, value in row.items() if cell_kind(value) is CellKind.NUMBER}
            for col in numeric:
                seed[col] = 0
            seed[key_column] = key
            numeric.discard(key_column)
            grouped[key] = seed
            summed[key] = numeric

        target = grouped[key]
        for col in summed[key]:
            value = row.get(col)
            if cell_kind(value) is CellKind.NUMBER:
                target[col] += value

    if skipped:
        logger.debug("aggregation skipped_rows=%d of %d", skipped, input_rows)
    return AggregationResult(rows=list(grouped.values()), input_rows=input_rows, skipped_rows=skipped)
