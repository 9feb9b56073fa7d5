"""SKU rollup: group spreadsheet rows by a truncated seller SKU and sum them."""

__version__ = "0.1.0"
