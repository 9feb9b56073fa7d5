from __future__ import annotations

import json
import os
from collections.abc import Mapping
from dataclasses import replace
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.config_models import AppConfig, DisplayConfig, ServerConfig

"""Config loader.

Responsibilities:
- Load the YAML config (default config/app.yml)
- Validate against config_schema.json (shipped next to this module)
- Apply defaults for optional keys
- Apply SKU_ROLLUP_* environment overrides for the server section
"""

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "SCHEMA_PATH",
    "ConfigError",
    "apply_env_overrides",
    "load_config",
]

DEFAULT_CONFIG_PATH = Path("config/app.yml")
SCHEMA_PATH = Path(__file__).with_name("config_schema.json")

ENV_PREFIX = "SKU_ROLLUP_"


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: schema file missing or invalid, or data fails validation
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")
    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def load_config(path: Path = DEFAULT_CONFIG_PATH) -> AppConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping, got {type(data).__name__}")

    _validate_config_schema(data)

    srv = data["server"]
    server = ServerConfig(
        certfile=srv["certfile"],
        keyfile=srv["keyfile"],
        host=srv.get("host", ServerConfig.host),
        port=srv.get("port", ServerConfig.port),
        max_upload_mb=srv.get("max_upload_mb", ServerConfig.max_upload_mb),
        secret_key=srv.get("secret_key"),
        max_sessions=srv.get("max_sessions", ServerConfig.max_sessions),
    )
    disp = data.get("display") or {}
    display = DisplayConfig(
        default_rows=disp.get("default_rows", "all"),
        locked_columns=frozenset(disp.get("locked_columns") or ()),
    )
    return AppConfig(
        server=server,
        display=display,
        output_directory=data.get("output_directory", "./out"),
    )


def apply_env_overrides(cfg: AppConfig, environ: Mapping[str, str] | None = None) -> AppConfig:
    """Server settings from SKU_ROLLUP_* variables win over the YAML values.

    Call after python-dotenv has loaded ``.env`` so its values are included.
    """
    env = os.environ if environ is None else environ
    overrides: dict[str, Any] = {}
    for field_name in ("host", "certfile", "keyfile", "secret_key"):
        value = env.get(ENV_PREFIX + field_name.upper())
        if value:
            overrides[field_name] = value
    port = env.get(ENV_PREFIX + "PORT")
    if port:
        try:
            overrides["port"] = int(port)
        except ValueError as e:
            raise ConfigError(f"invalid {ENV_PREFIX}PORT: {port!r}") from e
    if not overrides:
        return cfg
    return replace(cfg, server=replace(cfg.server, **overrides))
