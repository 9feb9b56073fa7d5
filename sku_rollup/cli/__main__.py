from __future__ import annotations

import argparse
import sys
from pathlib import Path

from sku_rollup.config.loader import DEFAULT_CONFIG_PATH, ConfigError, load_config
from sku_rollup.logging.error_log import ErrorLogBuffer
from sku_rollup.logging.init import enable_debug, log_summary, setup_logging
from sku_rollup.models.config_models import DisplayConfig
from sku_rollup.services.orchestrator import process_files
from sku_rollup.services.projection import InvalidRowCountError, parse_row_count
from sku_rollup.services.summary import render_summary_fields

"""CLI entrypoint.

Batch flavour of the browser flow:
- Load config (optional unless --config is given)
- For every FILE: decode, group by SKU prefix, apply --sort clicks in
  order, keep --rows rows, export <output-dir>/<stem>/table_data.xlsx
- Print a SUMMARY line; exit code reflects the outcome
"""

EXIT_SUCCESS_ALL = 0
EXIT_FATAL = 1
EXIT_PARTIAL_FAILURE = 2


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="sku_rollup", description="Group spreadsheet rows by seller SKU prefix and sum numeric columns"
    )
    p.add_argument("files", nargs="*", type=Path, help=".xlsx/.xls files to process")
    p.add_argument("--config", type=Path, default=None, help=f"YAML config (default: {DEFAULT_CONFIG_PATH} if present)")
    p.add_argument(
        "--sort",
        action="append",
        default=[],
        metavar="COLUMN",
        help="Click a column header; repeat the same column to sort descending",
    )
    p.add_argument("--rows", default=None, help="Rows to keep: all, 10, 20, 50, 100 or 200")
    p.add_argument("--output-dir", type=Path, default=None, help="Export directory (overrides config)")
    p.add_argument("--inspect-data", action="store_true", help="Print the resulting rows instead of exporting")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    return p.parse_args(argv)


def _load_settings(config_path: Path | None) -> tuple[DisplayConfig, Path]:
    """Display settings and output directory; config file only required when named."""
    path = config_path or DEFAULT_CONFIG_PATH
    if config_path is None and not path.exists():
        return DisplayConfig(), Path("./out")
    cfg = load_config(path)
    return cfg.display, Path(cfg.output_directory)


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # Only fall back to sys.argv for None: tests call main([])
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)

    if args.debug:
        enable_debug()

    try:
        display, output_dir = _load_settings(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    try:
        row_count = parse_row_count(args.rows if args.rows is not None else display.default_rows)
    except InvalidRowCountError as e:
        logger.error(f"rows: {e}")
        return EXIT_FATAL

    if args.output_dir is not None:
        output_dir = args.output_dir

    logger.info(f"Processing {len(args.files)} file(s) -> {output_dir}")

    error_log = ErrorLogBuffer()
    result = process_files(
        args.files,
        sort_columns=args.sort,
        row_count=row_count,
        output_dir=output_dir,
        locked_columns=display.locked_columns,
        inspect=args.inspect_data,
        error_log=error_log,
    )

    for stat in result.file_stats or []:
        if stat.status != "success":
            logger.error(f"file={stat.file_name} failed: {stat.error}")

    log_summary(render_summary_fields(result))

    if result.failed_files > 0:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
