from __future__ import annotations

import argparse
import sys
from pathlib import Path

from dotenv import load_dotenv

from sku_rollup.config.loader import DEFAULT_CONFIG_PATH, ConfigError, apply_env_overrides, load_config
from sku_rollup.logging.init import enable_debug, setup_logging
from sku_rollup.web.app import serve

"""HTTPS server entrypoint.

Settings precedence for the server section:
    1. SKU_ROLLUP_* variables from `.env` (loaded with override=True)
    2. SKU_ROLLUP_* variables already in the process environment
    3. the YAML config file
"""

EXIT_FATAL = 1


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="sku_rollup.web", description="Serve the SKU rollup page over HTTPS")
    p.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="YAML config file")
    p.add_argument("--env-file", type=Path, default=Path(".env"), help="dotenv file with SKU_ROLLUP_* overrides")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    return p.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    if args.debug:
        enable_debug()

    if args.env_file.exists():
        load_dotenv(dotenv_path=args.env_file, override=True)

    try:
        cfg = apply_env_overrides(load_config(args.config))
        serve(cfg)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
