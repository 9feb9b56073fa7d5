from __future__ import annotations

import json
import re
import threading
from pathlib import Path

from sku_rollup.excel.reader import DecodeError, UnsupportedFileTypeError
from sku_rollup.logging.error_log import ErrorLogBuffer
from sku_rollup.models.error_record import ErrorRecord

FIELDS = {"timestamp", "file", "operation", "error_type", "message"}


def test_error_record_creation_and_json_line():
    rec = ErrorRecord.create(file="файл.xlsx", operation="decode", error_type="DECODE_ERROR", message="bad zip")
    data = json.loads(rec.to_json_line())
    assert data["file"] == "файл.xlsx"
    assert data["operation"] == "decode"
    assert data["timestamp"].endswith("Z")
    assert set(data.keys()) == FIELDS
    # non-ASCII kept readable
    assert "файл" in rec.to_json_line()


def test_error_log_buffer_flush(temp_workdir: Path):
    buf = ErrorLogBuffer()
    buf.append(ErrorRecord.create("f1.xlsx", "decode", "DECODE_ERROR", "bad"))
    buf.append(ErrorRecord.create("f1.csv", "upload", "UNSUPPORTED_FILE_TYPE_ERROR", "csv"))
    path = buf.flush()
    assert path.exists()
    assert path.parent == Path("logs")
    assert re.fullmatch(r"errors-\d{8}-\d{6}\.log", path.name)
    lines = path.read_text(encoding="utf-8").strip().splitlines()
    assert len(lines) == 2
    for raw in lines:
        assert set(json.loads(raw).keys()) == FIELDS
    assert len(buf) == 0


def test_error_log_buffer_multiple_flushes_append(tmp_path: Path):
    buf = ErrorLogBuffer(tmp_path)
    buf.append(ErrorRecord.create("f.xlsx", "decode", "DECODE_ERROR", "one"))
    path = buf.flush()
    size1 = path.stat().st_size
    buf.append(ErrorRecord.create("f.xlsx", "export", "ENCODE_ERROR", "two"))
    path2 = buf.flush()
    assert path == path2
    assert path2.stat().st_size > size1


def test_flush_empty_returns_none(tmp_path: Path):
    buf = ErrorLogBuffer(tmp_path / "logs")
    assert buf.flush() is None
    assert not (tmp_path / "logs").exists()


def test_record_derives_error_type(tmp_path: Path):
    buf = ErrorLogBuffer(tmp_path)
    assert buf.record("a.xlsx", "decode", DecodeError("x")).error_type == "DECODE_ERROR"
    assert buf.record("a.txt", "upload", UnsupportedFileTypeError("y")).error_type == "UNSUPPORTED_FILE_TYPE_ERROR"
    assert buf.record("a.xlsx", "read", OSError("z")).error_type == "OS_ERROR"
    assert len(buf) == 3


def test_concurrent_record_and_flush_loses_nothing(tmp_path: Path):
    buf = ErrorLogBuffer(tmp_path)

    def _worker(n: int) -> None:
        for i in range(50):
            buf.record(f"f{n}-{i}.xlsx", "decode", DecodeError("bad"))
            buf.flush()

    threads = [threading.Thread(target=_worker, args=(n,)) for n in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    buf.flush()

    lines = buf.file_path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 8 * 50
    assert len({json.loads(x)["file"] for x in lines}) == 8 * 50
    assert list(tmp_path.glob("errors-*.log")) == [buf.file_path]
