from __future__ import annotations

import io
import logging
from collections.abc import Sequence

import pandas as pd
from openpyxl.worksheet.worksheet import Worksheet

from ..models.cell import Row

"""Spreadsheet encoder for the export button / CLI export.

Writes exactly the rows it is given (the current projection) into a single
sheet and returns the workbook bytes. Failures surface as EncodeError before
any bytes leave this module.
"""

__all__ = [
    "EXPORT_FILE_NAME",
    "EXPORT_SHEET_NAME",
    "XLSX_MIMETYPE",
    "EncodeError",
    "encode_rows",
]

EXPORT_FILE_NAME = "table_data.xlsx"
EXPORT_SHEET_NAME = "Данные"
XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

logger = logging.getLogger(__name__)


class EncodeError(Exception):
    """Raised when the rows cannot be serialized into a workbook."""


def _store_formulas_as_text(worksheet: Worksheet) -> None:
    """Text starting with "=" is data here, never a formula."""
    for row in worksheet.iter_rows():
        for cell in row:
            if cell.data_type == "f":
                cell.data_type = "s"


def encode_rows(
    rows: Sequence[Row],
    columns: Sequence[str] | None = None,
    sheet_name: str = EXPORT_SHEET_NAME,
) -> bytes:
    """Serialize rows to .xlsx bytes (openpyxl engine).

    Parameters
    ----------
    rows: row dicts in display order
    columns: column order; defaults to the keys of the first row
    sheet_name: name of the single worksheet
    """
    if columns is None:
        columns = list(rows[0].keys()) if rows else []
    output = io.BytesIO()
    try:
        df = pd.DataFrame(list(rows), columns=list(columns))
        with pd.ExcelWriter(output, engine="openpyxl") as writer:
            df.to_excel(writer, sheet_name=sheet_name, index=False)
            _store_formulas_as_text(writer.sheets[sheet_name])
    except Exception as e:
        raise EncodeError(f"cannot write spreadsheet: {e}") from e
    data = output.getvalue()
    logger.debug("encoded rows=%d columns=%d bytes=%d", len(rows), len(columns), len(data))
    return data
