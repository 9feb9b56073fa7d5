"""Spreadsheet decode/encode (pandas + openpyxl/xlrd)."""
