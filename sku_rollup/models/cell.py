from __future__ import annotations

import math
from datetime import date, datetime, time
from enum import Enum
from typing import Any, Union

import numpy as np
import pandas as pd

"""Cell value model.

Spreadsheet cells are reduced to three variants before any grouping or
sorting happens:

- TEXT: ``str``
- NUMBER: ``int`` / ``float`` (never ``bool``, never NaN)
- EMPTY: ``None``

``normalize_cell`` performs the reduction for raw values coming out of
pandas/openpyxl, ``cell_kind`` dispatches on the result.
"""

__all__ = [
    "Cell",
    "CellKind",
    "Row",
    "cell_kind",
    "normalize_cell",
    "cell_to_text",
]

Cell = Union[str, int, float, None]
Row = dict[str, Cell]


class CellKind(Enum):
    """Declared variant of a normalized cell."""
    TEXT = "text"
    NUMBER = "number"
    EMPTY = "empty"


def cell_kind(value: Any) -> CellKind:
    if value is None:
        return CellKind.EMPTY
    if isinstance(value, bool):
        return CellKind.TEXT
    if isinstance(value, (int, float)):
        return CellKind.NUMBER
    return CellKind.TEXT


def normalize_cell(value: Any) -> Cell:
    """Reduce a raw spreadsheet value to the Cell variant set.

    - NaN / NaT / None -> None
    - numpy scalars -> their Python equivalent
    - integral floats -> int (openpyxl hands back 3.0 for a cell showing 3)
    - booleans -> "TRUE" / "FALSE" as Excel displays them
    - dates and times -> ISO-8601 text
    """
    if value is None:
        return None
    if isinstance(value, np.generic):
        value = value.item()
    if isinstance(value, (pd.Timestamp, datetime, date, time)):
        if pd.isna(value):
            return None
        return value.isoformat()
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, float):
        if math.isnan(value):
            return None
        if value.is_integer():
            return int(value)
        return value
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        return value
    return str(value)


def cell_to_text(value: Cell) -> str:
    """String coercion used for group keys and header names."""
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
