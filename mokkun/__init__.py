"""mokkun - data table engine for YAML-defined screen mockups.

This package turns a ``data_table`` field of a screen definition into an
interactive grid: filtering, sorting, grouping, pagination, selection,
cell merging and column resizing, driven by typed intents and projected
into render-ready views.
"""

from .config import FormatSettings, GridSettings, LogSettings, MokkunSettings, get_settings
from .exceptions import IntentError, MokkunException, TableDefinitionError
from .grid import (
    GridController,
    GridState,
    GridView,
    RenderAdapter,
    build_view,
    parse_intent,
)
from .loader import load_table_definition, load_table_definitions
from .models import Column, DataTableConfig


__version__ = "0.1.0"

__all__ = [
    "Column",
    "DataTableConfig",
    "FormatSettings",
    "GridController",
    "GridSettings",
    "GridState",
    "GridView",
    "IntentError",
    "LogSettings",
    "MokkunException",
    "MokkunSettings",
    "RenderAdapter",
    "TableDefinitionError",
    "__version__",
    "build_view",
    "get_settings",
    "load_table_definition",
    "load_table_definitions",
    "parse_intent",
]
