# Shared pytest fixtures
from __future__ import annotations

import io
import tempfile
from collections.abc import Callable
from pathlib import Path

import pandas as pd
import pytest

from sku_rollup.logging.init import reset_logging
from sku_rollup.services.aggregation import KEY_COLUMN, NAME_COLUMN

QTY = "Количество"
PRICE = "Цена"


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture(autouse=True)
def _clean_logging():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def sample_config_yaml() -> str:
    return """server:
  host: 127.0.0.1
  port: 3443
  certfile: server.cert
  keyfile: server.key
  max_upload_mb: 2
display:
  default_rows: all
  locked_columns: []
output_directory: ./out
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "app.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


def write_workbook(path: Path | io.BytesIO, rows: list[list[object]], sheet: str = "Sheet1", extra_sheets: dict | None = None) -> Path | io.BytesIO:
    """Write ``rows`` (first row = header) as a real .xlsx file."""
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        pd.DataFrame(rows).to_excel(writer, sheet_name=sheet, header=False, index=False)
        for name, extra in (extra_sheets or {}).items():
            pd.DataFrame(extra).to_excel(writer, sheet_name=name, header=False, index=False)
    return path


@pytest.fixture()
def workbook_bytes() -> Callable[..., bytes]:
    """In-memory variant of write_workbook."""

    def _build(rows: list[list[object]], **kwargs) -> bytes:
        buf = io.BytesIO()
        write_workbook(buf, rows, **kwargs)
        return buf.getvalue()

    return _build


@pytest.fixture()
def make_workbook(temp_workdir: Path) -> Callable[..., Path]:
    def _make(name: str, rows: list[list[object]], **kwargs) -> Path:
        return write_workbook(temp_workdir / "data" / name, rows, **kwargs)

    return _make


@pytest.fixture()
def sales_rows() -> list[list[object]]:
    """Marketplace report: three SKUs sharing the ABCDE prefix, one FGHIJ."""
    return [
        [KEY_COLUMN, NAME_COLUMN, QTY, PRICE],
        ["ABCDE1", "Кружка синяя", 3, 100],
        ["FGHIJ9", "Ложка", 2, 50],
        ["ABCDE2", "Кружка красная", 5, 120],
        [None, "Без артикула", 7, 10],
        ["ABCDE3", "Кружка белая", 1, 90],
    ]


@pytest.fixture()
def sales_workbook(make_workbook, sales_rows) -> Path:
    return make_workbook("sales.xlsx", sales_rows)
