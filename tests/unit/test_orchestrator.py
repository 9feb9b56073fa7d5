from __future__ import annotations

import json
from pathlib import Path

from sku_rollup.excel.reader import decode_workbook
from sku_rollup.logging.error_log import ErrorLogBuffer
from sku_rollup.services.aggregation import KEY_COLUMN
from sku_rollup.services.orchestrator import export_path, process_file, process_files


def test_export_path(tmp_path: Path):
    assert export_path(tmp_path, Path("data/sales.xlsx")) == tmp_path / "sales" / "table_data.xlsx"


def test_process_file_exports(sales_workbook: Path, temp_workdir: Path):
    out_dir = temp_workdir / "out"
    stat = process_file(sales_workbook, sort_columns=["Количество"], output_dir=out_dir)
    assert stat.status == "success"
    assert stat.input_rows == 5
    assert stat.groups == 2
    assert stat.skipped_rows == 1
    assert stat.exported_rows == 2
    exported = decode_workbook(Path(stat.output_path).read_bytes())
    assert [r[KEY_COLUMN] for r in exported.rows] == ["FGHIJ", "ABCDE"]


def test_process_file_row_count(make_workbook, temp_workdir: Path):
    path = make_workbook("many.xlsx", [[KEY_COLUMN, "Qty"]] + [[f"S{i:04d}", 1] for i in range(15)])
    stat = process_file(path, row_count=10, output_dir=temp_workdir / "out")
    assert stat.groups == 15
    assert stat.exported_rows == 10
    assert len(decode_workbook(Path(stat.output_path).read_bytes()).rows) == 10


def test_process_file_inspect_prints_rows(sales_workbook: Path, temp_workdir: Path, capsys):
    stat = process_file(sales_workbook, output_dir=temp_workdir / "out", inspect=True)
    out = capsys.readouterr().out
    assert "FILE: sales.xlsx" in out
    assert "  1: {" in out
    assert "'ABCDE'" in out
    assert stat.output_path is None
    assert not (temp_workdir / "out").exists()


def test_process_file_unknown_and_locked_sort_columns_warn(sales_workbook: Path, temp_workdir: Path, caplog):
    stat = process_file(
        sales_workbook,
        sort_columns=["Nope", KEY_COLUMN],
        locked_columns={KEY_COLUMN},
        output_dir=temp_workdir / "out",
    )
    assert stat.status == "success"
    messages = [r.getMessage() for r in caplog.records]
    assert any("sort column not found: Nope" in m for m in messages)
    assert any(f"sort column is locked: {KEY_COLUMN}" in m for m in messages)


def test_process_file_missing_file_records_read_error(temp_workdir: Path):
    log = ErrorLogBuffer()
    stat = process_file(temp_workdir / "data" / "missing.xlsx", output_dir=temp_workdir / "out", error_log=log)
    assert stat.status == "failed"
    assert stat.error
    path = log.flush()
    record = json.loads(path.read_text(encoding="utf-8").splitlines()[0])
    assert record["operation"] == "read"


def test_process_files_counts_only_successful(sales_workbook: Path, temp_workdir: Path):
    bad = temp_workdir / "data" / "broken.xlsx"
    bad.write_bytes(b"not a workbook")
    csv = temp_workdir / "data" / "report.csv"
    csv.write_text("a,b\n", encoding="utf-8")
    log = ErrorLogBuffer()

    result = process_files([sales_workbook, bad, csv], output_dir=temp_workdir / "out", error_log=log)

    assert result.total_files == 3
    assert result.success_files == 1
    assert result.failed_files == 2
    assert result.total_input_rows == 5
    assert result.total_groups == 2
    assert result.total_exported_rows == 2
    assert [s.status for s in result.file_stats] == ["success", "failed", "failed"]
    logs = list((temp_workdir / "logs").glob("errors-*.log"))
    assert len(logs) == 1
    types = [json.loads(x)["error_type"] for x in logs[0].read_text(encoding="utf-8").splitlines()]
    assert types == ["DECODE_ERROR", "UNSUPPORTED_FILE_TYPE_ERROR"]
