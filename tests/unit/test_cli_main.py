from __future__ import annotations

from pathlib import Path

from sku_rollup.cli import main
from sku_rollup.excel.reader import decode_workbook
from sku_rollup.services.aggregation import KEY_COLUMN


def test_main_no_files_prints_summary(temp_workdir: Path, capsys):
    code = main([])
    out = capsys.readouterr().out
    assert code == 0
    assert "SUMMARY files=0/0 success=0 failed=0 rows=0 groups=0" in out


def test_main_exports_file(sales_workbook: Path, temp_workdir: Path, capsys):
    code = main([str(sales_workbook), "--sort", "Количество", "--sort", "Количество"])
    out = capsys.readouterr().out
    assert code == 0
    exported = temp_workdir / "out" / "sales" / "table_data.xlsx"
    assert exported.exists()
    rows = decode_workbook(exported.read_bytes()).rows
    assert [r[KEY_COLUMN] for r in rows] == ["ABCDE", "FGHIJ"]
    assert "SUMMARY files=1/1 success=1 failed=0 rows=5 groups=2 skipped_rows=1 exported=2" in out


def test_main_output_dir_and_rows(make_workbook, temp_workdir: Path, capsys):
    path = make_workbook("many.xlsx", [[KEY_COLUMN, "Qty"]] + [[f"S{i:04d}", i] for i in range(30)])
    code = main([str(path), "--rows", "20", "--output-dir", "exports"])
    assert code == 0
    exported = temp_workdir / "exports" / "many" / "table_data.xlsx"
    assert len(decode_workbook(exported.read_bytes()).rows) == 20
    assert "exported=20" in capsys.readouterr().out


def test_main_uses_config_defaults(write_config: Path, sales_workbook: Path, temp_workdir: Path):
    write_config.write_text(
        write_config.read_text(encoding="utf-8").replace("output_directory: ./out", "output_directory: ./from-config"),
        encoding="utf-8",
    )
    assert main([str(sales_workbook)]) == 0
    assert (temp_workdir / "from-config" / "sales" / "table_data.xlsx").exists()


def test_main_invalid_rows_is_fatal(temp_workdir: Path, capsys):
    code = main(["--rows", "15"])
    assert code == 1
    assert "ERROR rows: invalid row count" in capsys.readouterr().out


def test_main_missing_named_config_is_fatal(temp_workdir: Path, capsys):
    code = main(["--config", "config/missing.yml"])
    assert code == 1
    assert "ERROR config: config file not found" in capsys.readouterr().out


def test_main_partial_failure_exit_code(sales_workbook: Path, temp_workdir: Path, capsys):
    bad = temp_workdir / "data" / "notes.txt"
    bad.write_text("x", encoding="utf-8")
    code = main([str(sales_workbook), str(bad)])
    out = capsys.readouterr().out
    assert code == 2
    assert "ERROR file=notes.txt failed: unsupported file type" in out
    assert "SUMMARY files=2/2 success=1 failed=1" in out


def test_main_inspect_data(sales_workbook: Path, temp_workdir: Path, capsys):
    code = main([str(sales_workbook), "--inspect-data"])
    out = capsys.readouterr().out
    assert code == 0
    assert "FILE: sales.xlsx" in out
    assert "columns=['Артикул продавца', 'Наименование товара', 'Количество', 'Цена']" in out
    assert not (temp_workdir / "out").exists()


def test_main_debug_mode(sales_workbook: Path, temp_workdir: Path, capsys):
    code = main([str(sales_workbook), "--debug", "--inspect-data"])
    out = capsys.readouterr().out
    assert code == 0
    assert "DEBUG debug mode enabled" in out
    assert "DEBUG decoded sheet=Sheet1" in out
