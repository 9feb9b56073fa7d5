"""Flask browser surface served over HTTPS (``python -m sku_rollup.web``)."""

from .app import create_app, serve, tls_context

__all__ = ["create_app", "serve", "tls_context"]
