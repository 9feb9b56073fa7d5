from __future__ import annotations

import io
import logging
from dataclasses import dataclass, field
from pathlib import PurePath
from typing import Any

import pandas as pd

from ..models.cell import Row, cell_to_text, normalize_cell

"""Spreadsheet decoder.

The first sheet of the workbook is used unconditionally. Its first row is
the header; every following row that is not entirely blank becomes a Row
keyed by header name. Cell values are reduced to the Cell variants
(models.cell) so later stages never probe raw pandas/openpyxl types.

.xlsx is read through openpyxl, legacy .xls through xlrd (pandas picks the
engine from the payload).
"""

__all__ = [
    "ACCEPTED_EXTENSIONS",
    "DecodeError",
    "SheetData",
    "UnsupportedFileTypeError",
    "check_file_type",
    "decode_workbook",
    "normalize_sheet",
]

ACCEPTED_EXTENSIONS = (".xlsx", ".xls")
# pandas reads empty cells as "", so that is the only NA sentinel
BLANK_NA_VALUES = [""]

logger = logging.getLogger(__name__)


class DecodeError(Exception):
    """Raised when the payload cannot be parsed as a spreadsheet workbook."""


class UnsupportedFileTypeError(Exception):
    """Raised for uploads whose extension is not .xlsx/.xls (before decoding)."""


@dataclass
class SheetData:
    sheet_name: str
    columns: list[str] = field(default_factory=list)
    rows: list[Row] = field(default_factory=list)  # column name -> normalized cell


def check_file_type(file_name: str) -> None:
    suffix = PurePath(file_name).suffix.lower()
    if suffix not in ACCEPTED_EXTENSIONS:
        raise UnsupportedFileTypeError(
            f"unsupported file type '{suffix or file_name}': expected one of {', '.join(ACCEPTED_EXTENSIONS)}"
        )


def _header_names(raw_header: list[Any]) -> list[str]:
    """Header cells -> unique column names.

    Blank header cells become ``Unnamed: <index>``; repeated names get a
    ``.1``, ``.2`` ... suffix in order of appearance.
    """
    columns: list[str] = []
    seen: dict[str, int] = {}
    for idx, raw in enumerate(raw_header):
        name = cell_to_text(normalize_cell(raw)).strip()
        if not name:
            name = f"Unnamed: {idx}"
        if name in seen:
            seen[name] += 1
            candidate = f"{name}.{seen[name]}"
            while candidate in seen:
                seen[name] += 1
                candidate = f"{name}.{seen[name]}"
            name = candidate
        seen.setdefault(name, 0)
        columns.append(name)
    return columns


def normalize_sheet(df: pd.DataFrame, sheet_name: str) -> SheetData:
    """Apply the first row as header to a headerless DataFrame.

    Steps:
    1. Empty frame -> empty SheetData (not an error)
    2. Row 0 -> column names
    3. Rows 1.. -> Row dicts, skipping rows where every cell is blank
    """
    if df.shape[0] == 0:
        return SheetData(sheet_name=sheet_name)

    columns = _header_names(df.iloc[0].tolist())
    rows: list[Row] = []
    for raw in df.iloc[1:].itertuples(index=False, name=None):
        values = [normalize_cell(v) for v in raw]
        if all(v is None for v in values):
            continue
        rows.append(dict(zip(columns, values, strict=False)))
    return SheetData(sheet_name=sheet_name, columns=columns, rows=rows)


def decode_workbook(payload: bytes) -> SheetData:
    """Decode spreadsheet bytes into the first sheet's rows.

    A zero-byte payload decodes to an empty SheetData. Anything pandas cannot
    open raises DecodeError; no partial result is returned.
    """
    if not payload:
        return SheetData(sheet_name="")
    try:
        xls = pd.ExcelFile(io.BytesIO(payload))
        if not xls.sheet_names:
            return SheetData(sheet_name="")
        sheet_name = str(xls.sheet_names[0])
        # Only truly blank cells become NaN; "NA", "None", "N/A" ... stay text
        df = xls.parse(xls.sheet_names[0], header=None, keep_default_na=False, na_values=BLANK_NA_VALUES)
    except Exception as e:
        raise DecodeError(f"cannot read spreadsheet: {e}") from e

    sheet = normalize_sheet(df, sheet_name)
    logger.debug(
        "decoded sheet=%s columns=%d rows=%d", sheet.sheet_name, len(sheet.columns), len(sheet.rows)
    )
    return sheet
