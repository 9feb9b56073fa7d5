"""Command line entrypoint (``python -m sku_rollup.cli``)."""

from .__main__ import main

__all__ = ["main"]
