from __future__ import annotations

from dataclasses import dataclass, field

"""Config dataclasses.

Built by config.loader from the validated YAML document; every field has
the default documented in config/app.yml.
"""

__all__ = [
    "AppConfig",
    "DisplayConfig",
    "ServerConfig",
]

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 3000
DEFAULT_MAX_UPLOAD_MB = 16
DEFAULT_MAX_SESSIONS = 256


@dataclass(frozen=True)
class ServerConfig:
    """HTTPS server settings.

    certfile/keyfile are read once at startup; environment variables
    (SKU_ROLLUP_*) take precedence over the YAML values.
    """
    certfile: str
    keyfile: str
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    max_upload_mb: int = DEFAULT_MAX_UPLOAD_MB
    secret_key: str | None = None  # None -> random per process
    max_sessions: int = DEFAULT_MAX_SESSIONS  # browser views kept in memory (LRU)

    @property
    def max_content_length(self) -> int:
        return self.max_upload_mb * 1024 * 1024


@dataclass(frozen=True)
class DisplayConfig:
    default_rows: str | int = "all"
    # Columns whose header click is ignored (e.g. SKU and product name)
    locked_columns: frozenset[str] = field(default_factory=frozenset)


@dataclass(frozen=True)
class AppConfig:
    """Root configuration object."""
    server: ServerConfig
    display: DisplayConfig
    output_directory: str = "./out"
