"""Render-ready projection of a grid snapshot.

``build_view`` turns a ``GridState`` into a ``GridView``: header cells,
body items (group headers and data rows with formatted, merge-resolved
cells), selection, pagination and empty-state information plus the CSS
classes of the table. Render adapters consume a ``GridView`` and send
user gestures back as intents; they never look at ``GridState``.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Literal, Protocol, TextIO, runtime_checkable

from pydantic import BaseModel, Field

from ..config import MokkunSettings, get_settings
from ..formatting import format_cell_value, status_badge_class
from ..models import (
    Column,
    ConfirmConfig,
    DataTableConfig,
    EmptyStateAction,
    Row,
    RowId,
    SelectionMode,
    SortDirection,
)
from .cell_merge import header_span, resolve_row_cells
from .grouping import group_key, group_rows
from .layout import effective_width
from .pipeline import filter_rows, page_count
from .selection import is_all_selected
from .state import GridState, visible_rows


DEFAULT_EMPTY_TITLE = "データがありません"
DEFAULT_EMPTY_ICON = "📭"

SORT_INDICATORS: dict[str, str] = {"asc": "↑", "desc": "↓"}


# --- View models ---


class HeaderCell(BaseModel):
    """One column header."""

    column_id: str
    label: str
    sortable: bool = True
    sorted: SortDirection | None = None
    sort_indicator: str = ""
    next_direction: SortDirection = "asc"
    width: int | float | str | None = None
    resizable: bool = False
    colspan: int = 1
    rowspan: int = 1
    align: str | None = None
    fixed: str | None = None
    classes: list[str] = Field(default_factory=list)


class CellView(BaseModel):
    """One visible body cell."""

    column_id: str
    value: Any = None
    text: str = ""
    badge_class: str = ""
    colspan: int = 1
    rowspan: int = 1
    align: str | None = None


class RowActionView(BaseModel):
    """Action button of one row."""

    action_id: str
    label: str
    icon: str | None = None
    style_class: str = "btn-link"
    confirm: ConfirmConfig | None = None


class RowItem(BaseModel):
    """A data row."""

    kind: Literal["row"] = "row"
    row_id: RowId
    index: int
    selected: bool = False
    cells: list[CellView] = Field(default_factory=list)
    actions: list[RowActionView] = Field(default_factory=list)


class GroupHeaderItem(BaseModel):
    """Header row of a group.

    ``count`` is the number of the group's rows on the current page and
    ``total_count`` the number across every page.
    """

    kind: Literal["group"] = "group"
    name: str
    count: int
    total_count: int
    collapsed: bool = False
    collapsible: bool = True
    renderer: str | None = None


class SelectionHeader(BaseModel):
    """State of the selection column header."""

    mode: SelectionMode = "none"
    all_selected: bool = False
    selected_count: int = 0


class FilterFieldView(BaseModel):
    """One filter input with its current value."""

    filter_id: str
    label: str
    type: str
    value: Any = None
    placeholder: str = ""
    options: list[dict[str, Any]] = Field(default_factory=list)


class PaginationView(BaseModel):
    """Pager state. ``range_start``/``range_end`` are 1-based and inclusive."""

    page: int
    page_size: int
    total_count: int
    total_pages: int
    range_start: int
    range_end: int
    has_prev: bool
    has_next: bool
    page_size_options: list[int] = Field(default_factory=list)


class EmptyStateView(BaseModel):
    """Content of the empty table."""

    title: str = DEFAULT_EMPTY_TITLE
    description: str = ""
    icon: str = DEFAULT_EMPTY_ICON
    action: EmptyStateAction | None = None


class GridView(BaseModel):
    """Everything an adapter needs to draw a grid."""

    grid_id: str
    label: str = ""
    description: str | None = None
    classes: list[str] = Field(default_factory=list)
    height: str | None = None
    fixed_header_offset: int | None = None
    column_count: int = 0
    header: list[HeaderCell] = Field(default_factory=list)
    items: list[RowItem | GroupHeaderItem] = Field(default_factory=list)
    selection: SelectionHeader = Field(default_factory=SelectionHeader)
    filters: list[FilterFieldView] = Field(default_factory=list)
    filter_layout: str = "inline"
    pagination: PaginationView | None = None
    empty_state: EmptyStateView | None = None
    is_loading: bool = False
    is_resizing: bool = False

    @property
    def rows(self) -> list[RowItem]:
        """Data rows only, in display order."""
        return [item for item in self.items if isinstance(item, RowItem)]

    @property
    def groups(self) -> list[GroupHeaderItem]:
        """Group headers only, in display order."""
        return [item for item in self.items if isinstance(item, GroupHeaderItem)]


@runtime_checkable
class RenderAdapter(Protocol):
    """Protocol for anything that draws a grid.

    An adapter is bound to a dispatch callable (usually
    ``GridController.dispatch``) and receives every new ``GridView``.

    Examples
    --------
    >>> grid = GridController(config)
    >>> adapter.bind(grid.dispatch)
    >>> grid.on("grid:render", lambda data: adapter.render(data["view"]))
    """

    def bind(self, dispatch: Callable[[Any], Any]) -> None:
        """Receive the callable user gestures are dispatched through."""
        ...  # pylint: disable=unnecessary-ellipsis

    def render(self, view: GridView) -> None:
        """Draw a view."""
        ...  # pylint: disable=unnecessary-ellipsis


# --- Projection ---


def table_classes(config: DataTableConfig) -> list[str]:
    """CSS classes of the table container."""
    classes = ["mokkun-data-table"]
    if config.striped:
        classes.append("striped")
    if config.hoverable:
        classes.append("hoverable")
    if config.bordered:
        classes.append("bordered")
    if config.compact:
        classes.append("compact")
    if config.responsive:
        classes.append("responsive")
    if config.resolved_fixed_header().enabled:
        classes.append("fixed-header")
    if config.resolved_resize().enabled:
        classes.append("resizable-columns")
    if config.grouping_enabled:
        classes.append("grouped")
    if config.layout == "fixed":
        classes.append("layout-fixed")
    return classes


def _header_cell(
    column: Column,
    state: GridState,
    resize_enabled: bool,
) -> HeaderCell:
    is_sorted = state.sort is not None and state.sort.column == column.id
    direction = state.sort.direction if is_sorted and state.sort else None
    span = header_span(column)

    classes = ["data-table-th"]
    if column.sortable:
        classes.append("sortable")
    if direction:
        classes.extend(["sorted", f"sorted-{direction}"])
    if column.align:
        classes.append(f"align-{column.align}")
    if column.fixed:
        classes.append(f"fixed-{column.fixed}")

    return HeaderCell(
        column_id=column.id,
        label=column.label,
        sortable=column.sortable,
        sorted=direction,
        sort_indicator=SORT_INDICATORS.get(direction or "", ""),
        next_direction="desc" if direction == "asc" else "asc",
        width=effective_width(column, state.column_widths, state.resize),
        resizable=resize_enabled and column.resizable,
        colspan=span.colspan,
        rowspan=span.rowspan,
        align=column.align,
        fixed=column.fixed,
        classes=classes,
    )


def _row_item(
    row: Row,
    index: int,
    config: DataTableConfig,
    state: GridState,
    settings: MokkunSettings,
) -> RowItem:
    cells = []
    for column, span in resolve_row_cells(row, config.columns):
        value = row.get(column.field_key)
        cells.append(
            CellView(
                column_id=column.id,
                value=value,
                text=format_cell_value(value, column, settings),
                badge_class=status_badge_class(value, column),
                colspan=span.colspan,
                rowspan=span.rowspan,
                align=column.align,
            )
        )
    actions = [
        RowActionView(
            action_id=action.id,
            label=action.label,
            icon=action.icon,
            style_class=f"btn-{action.style}" if action.style else "btn-link",
            confirm=action.confirm,
        )
        for action in config.row_actions
    ]
    return RowItem(
        row_id=row["id"],
        index=index,
        selected=row["id"] in state.selected_row_ids,
        cells=cells,
        actions=actions,
    )


def _body_items(
    config: DataTableConfig,
    state: GridState,
    settings: MokkunSettings,
) -> list[RowItem | GroupHeaderItem]:
    rows = state.derived_data
    indices = {id(row): index for index, row in enumerate(rows)}

    if not config.grouping_enabled:
        return [_row_item(row, index, config, state, settings) for index, row in enumerate(rows)]

    grouping = config.grouping
    field = state.group_field
    totals: dict[str, int] = {}
    for row in filter_rows(
        state.original_data, state.filter_values, config.filter_fields, config.columns
    ):
        name = group_key(row, field)
        totals[name] = totals.get(name, 0) + 1

    items: list[RowItem | GroupHeaderItem] = []
    for name, members in group_rows(rows, field).items():
        collapsed = bool(name) and name in state.collapsed_groups
        if name:
            items.append(
                GroupHeaderItem(
                    name=name,
                    count=len(members),
                    total_count=totals.get(name, len(members)),
                    collapsed=collapsed,
                    collapsible=grouping.collapsible if grouping else True,
                    renderer=grouping.header_renderer if grouping else None,
                )
            )
        if not collapsed:
            items.extend(
                _row_item(row, indices[id(row)], config, state, settings) for row in members
            )
    return items


def _pagination(
    config: DataTableConfig,
    state: GridState,
    settings: MokkunSettings,
) -> PaginationView | None:
    if not config.pagination_enabled:
        return None
    pagination = config.pagination
    total = state.total_count
    size = state.page_size
    pages = page_count(total, size)
    start = state.current_page * size + 1 if total else 0
    end = min((state.current_page + 1) * size, total)
    return PaginationView(
        page=state.current_page,
        page_size=size,
        total_count=total,
        total_pages=pages,
        range_start=min(start, end) if total else 0,
        range_end=end,
        has_prev=state.current_page > 0,
        has_next=state.current_page < pages - 1,
        page_size_options=(
            (pagination.page_size_options if pagination else None)
            or list(settings.grid.page_size_options)
        ),
    )


def _filters(config: DataTableConfig, state: GridState) -> list[FilterFieldView]:
    return [
        FilterFieldView(
            filter_id=field.id,
            label=field.label,
            type=field.type,
            value=state.filter_values.get(field.id),
            placeholder=field.placeholder or "",
            options=[opt.model_dump() for opt in field.options or []],
        )
        for field in config.filter_fields
    ]


def build_view(
    config: DataTableConfig,
    state: GridState,
    settings: MokkunSettings | None = None,
) -> GridView:
    """Project a snapshot for rendering.

    Parameters
    ----------
    config : DataTableConfig
        The table definition.
    state : GridState
        The snapshot to draw.
    settings : MokkunSettings, optional
        Formatting and paging defaults.

    Returns
    -------
    GridView
        The render-ready projection.
    """
    settings = settings or get_settings()
    resize = config.resolved_resize()
    fixed_header = config.resolved_fixed_header()

    column_count = len(config.columns)
    if config.selection != "none":
        column_count += 1
    if config.row_actions:
        column_count += 1

    empty_state = None
    if not state.derived_data:
        declared = config.empty_state
        empty_state = EmptyStateView(
            title=(declared.title if declared else None) or DEFAULT_EMPTY_TITLE,
            description=(declared.description if declared else None) or "",
            icon=(declared.icon if declared else None) or DEFAULT_EMPTY_ICON,
            action=declared.action if declared else None,
        )

    return GridView(
        grid_id=config.id,
        label=config.label,
        description=config.description,
        classes=table_classes(config),
        height=config.height,
        fixed_header_offset=fixed_header.offset if fixed_header.enabled else None,
        column_count=column_count,
        header=[_header_cell(column, state, resize.enabled) for column in config.columns],
        items=_body_items(config, state, settings),
        selection=SelectionHeader(
            mode=config.selection,
            all_selected=config.selection == "multiple"
            and is_all_selected(state.selected_row_ids, visible_rows(state, config)),
            selected_count=len(state.selected_row_ids),
        ),
        filters=_filters(config, state),
        filter_layout=config.filters.layout if config.filters else "inline",
        pagination=_pagination(config, state, settings),
        empty_state=empty_state,
        is_loading=state.is_loading,
        is_resizing=state.is_resizing,
    )


def render_text(view: GridView) -> str:
    """Plain-text rendering of a view, for terminals and logs."""
    headers = [
        f"{cell.label or cell.column_id}{cell.sort_indicator}" for cell in view.header
    ]
    lines: list[list[str]] = []
    markers: list[str] = []
    for item in view.items:
        if isinstance(item, GroupHeaderItem):
            icon = "▶" if item.collapsed else "▼"
            markers.append(f"{icon} {item.name} ({item.count}/{item.total_count})")
            lines.append([])
            continue
        markers.append("*" if item.selected else " ")
        lines.append([cell.text for cell in item.cells])

    widths = [len(h) for h in headers]
    for cells in lines:
        for index, text in enumerate(cells[: len(widths)]):
            widths[index] = max(widths[index], len(text))

    def fmt(cells: list[str]) -> str:
        return " | ".join(text.ljust(widths[i]) for i, text in enumerate(cells[: len(widths)]))

    out = [f"  {fmt(headers)}", "  " + "-+-".join("-" * w for w in widths)]
    for marker, cells in zip(markers, lines):
        out.append(marker if not cells else f"{marker} {fmt(cells)}")

    if view.empty_state is not None:
        out.append(f"  {view.empty_state.icon} {view.empty_state.title}")
    if view.pagination is not None:
        p = view.pagination
        out.append(
            f"{p.total_count}件中 {p.range_start}-{p.range_end}件を表示 "
            f"({p.page + 1} / {max(p.total_pages, 1)})"
        )
    if view.is_loading:
        out.append("読み込み中...")
    return "\n".join(out)


class TextRenderAdapter:
    """Render adapter that draws plain-text frames.

    Parameters
    ----------
    stream : TextIO, optional
        Where each frame is written. Frames are only kept in ``frames``
        when omitted.
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        self.stream = stream
        self.frames: list[str] = []
        self.dispatch: Callable[[Any], Any] | None = None

    def bind(self, dispatch: Callable[[Any], Any]) -> None:
        """Keep the dispatch callable for forwarding gestures."""
        self.dispatch = dispatch

    def render(self, view: GridView) -> None:
        """Draw a frame."""
        frame = render_text(view)
        self.frames.append(frame)
        if self.stream is not None:
            print(frame, file=self.stream)

    @property
    def last_frame(self) -> str | None:
        """Most recent frame, if any."""
        return self.frames[-1] if self.frames else None
