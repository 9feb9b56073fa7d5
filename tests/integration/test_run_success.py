from __future__ import annotations

from pathlib import Path

from sku_rollup.cli import main
from sku_rollup.excel.reader import decode_workbook
from sku_rollup.services.aggregation import KEY_COLUMN, NAME_COLUMN


def test_end_to_end_multiple_files(make_workbook, sales_workbook: Path, temp_workdir: Path, capsys):
    second = make_workbook(
        "week2.xlsx",
        [
            [KEY_COLUMN, NAME_COLUMN, "Продажи", "Остаток"],
            ["QWERT-01", "Чайник", 4, "нет"],
            ["QWERT-02", "Чайник", 6, 12],
            ["ZXCVB-01", "Тарелка", 1.5, 3],
            [None, None, None, None],
            ["ZXCVB-02", "Тарелка", 2, 4],
        ],
    )
    code = main([str(sales_workbook), str(second), "--sort", "Продажи"])
    out = capsys.readouterr().out
    assert code == 0
    assert "SUMMARY files=2/2 success=2 failed=0 rows=9 groups=4 skipped_rows=1 exported=4" in out

    rows = decode_workbook((temp_workdir / "out" / "week2" / "table_data.xlsx").read_bytes()).rows
    assert rows == [
        {KEY_COLUMN: "ZXCVB", NAME_COLUMN: "Тарелка", "Продажи": 3.5, "Остаток": 7},
        {KEY_COLUMN: "QWERT", NAME_COLUMN: "Чайник", "Продажи": 10, "Остаток": "нет"},
    ]
    assert (temp_workdir / "out" / "sales" / "table_data.xlsx").exists()
