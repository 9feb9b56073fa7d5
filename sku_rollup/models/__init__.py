"""Domain models for the SKU rollup application.

Cells and rows as decoded from the spreadsheet, the sort and view state that
drive rendering, run statistics for the command line, and configuration.
"""

from .cell import Cell, CellKind, Row, cell_kind, normalize_cell
from .config_models import AppConfig, DisplayConfig, ServerConfig
from .sort_state import SortDirection, SortState
from .view_state import RowCount, ViewState

__all__ = [
    # Cell / row model
    "Cell",
    "CellKind",
    "Row",
    "cell_kind",
    "normalize_cell",
    # View models
    "RowCount",
    "SortDirection",
    "SortState",
    "ViewState",
    # Configuration models
    "AppConfig",
    "DisplayConfig",
    "ServerConfig",
]
