"""Data table engine: pipeline, state snapshots, intents and views."""

from .controller import GridController
from .intents import (
    CollapseAllGroups,
    ExpandAllGroups,
    FilterApply,
    FilterReset,
    GridIntent,
    GroupToggle,
    PageChange,
    PageSizeChange,
    ResizeCancel,
    ResizeEnd,
    ResizeMove,
    ResizeStart,
    RowActionRequest,
    SelectAll,
    SelectRow,
    SetColumnWidth,
    SetData,
    SetLoading,
    SortRequest,
    parse_intent,
)
from .state import GridState, create_state
from .view import GridView, RenderAdapter, TextRenderAdapter, build_view, render_text


__all__ = [
    "CollapseAllGroups",
    "ExpandAllGroups",
    "FilterApply",
    "FilterReset",
    "GridController",
    "GridIntent",
    "GridState",
    "GridView",
    "GroupToggle",
    "PageChange",
    "PageSizeChange",
    "RenderAdapter",
    "ResizeCancel",
    "ResizeEnd",
    "ResizeMove",
    "ResizeStart",
    "RowActionRequest",
    "SelectAll",
    "SelectRow",
    "SetColumnWidth",
    "SetData",
    "SetLoading",
    "SortRequest",
    "TextRenderAdapter",
    "build_view",
    "create_state",
    "parse_intent",
    "render_text",
]
