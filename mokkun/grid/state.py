"""Grid state snapshots and the pipeline-driven transitions.

``GridState`` is immutable. Each transition returns a new snapshot whose
``derived_data`` has been rebuilt from scratch:

    original_data -> filter -> sort -> group blocks -> page slice

Selection, group collapse and column widths are changed by their own
modules (``selection``, ``grouping``, ``layout``) and do not rerun the
pipeline.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from typing import Any

from ..config import MokkunSettings, get_settings
from ..log import debug
from ..models import DataTableConfig, Row, RowId, SortConfig, SortDirection
from .grouping import collapse_all_groups, group_key, order_by_groups
from .layout import ResizeDrag, WidthBounds
from .pipeline import clamp_page, filter_rows, paginate_rows, sort_rows
from .selection import prune_selection


@dataclass(frozen=True)
class GridState:
    """Snapshot of one grid instance.

    Attributes
    ----------
    original_data : tuple of Row
        Authoritative rows, replaced wholesale by ``set_data``.
    derived_data : tuple of Row
        Rows of the current page after filter, sort and grouping.
    filter_values : mapping
        Filter id -> value as last applied.
    sort : SortConfig or None
        Active sort.
    selected_row_ids : frozenset
        Selected row identities.
    current_page : int
        0-based page index.
    page_size : int
        Rows per page.
    total_count : int
        Filtered, unpaginated row count (or the remote count).
    collapsed_groups : frozenset of str
        Names of collapsed groups.
    column_widths : mapping
        Committed column widths in px, already clamped.
    is_loading : bool
        Whether the data source is fetching.
    remote_total_count : int or None
        Server-side total; when set, rows are not paginated locally.
    group_field : str
        Row key used for grouping.
    resize : ResizeDrag or None
        In-progress column drag, None when idle.
    """

    original_data: tuple[Row, ...] = ()
    derived_data: tuple[Row, ...] = ()
    filter_values: Mapping[str, Any] = field(default_factory=dict)
    sort: SortConfig | None = None
    selected_row_ids: frozenset[RowId] = frozenset()
    current_page: int = 0
    page_size: int = 10
    total_count: int = 0
    collapsed_groups: frozenset[str] = frozenset()
    column_widths: Mapping[str, int | float] = field(default_factory=dict)
    is_loading: bool = False
    remote_total_count: int | None = None
    group_field: str = "_group"
    resize: ResizeDrag | None = None

    @property
    def is_resizing(self) -> bool:
        """Whether a column drag is in progress."""
        return self.resize is not None

    def find_row(self, row_id: Any) -> Row | None:
        """Find a row by id, matching wire strings against numeric ids."""
        for row in self.original_data:
            if row["id"] == row_id:
                return row
        text = str(row_id)
        return next((row for row in self.original_data if str(row["id"]) == text), None)


def resize_bounds(config: DataTableConfig, settings: MokkunSettings | None = None) -> WidthBounds:
    """Global column width bounds of a table."""
    settings = settings or get_settings()
    resize = config.resolved_resize(
        default_min=settings.grid.resize_min_width,
        default_max=settings.grid.resize_max_width,
    )
    return WidthBounds(min_width=resize.min_width, max_width=resize.max_width)


def derive(state: GridState, config: DataTableConfig) -> GridState:
    """Rebuild ``derived_data`` and ``total_count`` from the authoritative rows."""
    rows = filter_rows(state.original_data, state.filter_values, config.filter_fields, config.columns)
    rows = sort_rows(rows, state.sort, config.columns)
    if config.grouping_enabled:
        rows = order_by_groups(rows, state.group_field)

    if state.remote_total_count is not None:
        total = state.remote_total_count
    else:
        total = len(rows)
        if config.pagination_enabled:
            rows = paginate_rows(rows, state.current_page, state.page_size)

    debug(
        f"Derived {len(rows)} rows (total {total}, page {state.current_page}, "
        f"size {state.page_size})"
    )
    return replace(state, derived_data=tuple(rows), total_count=total)


def create_state(config: DataTableConfig, settings: MokkunSettings | None = None) -> GridState:
    """Initial snapshot of a table as declared."""
    settings = settings or get_settings()
    pagination = config.pagination
    rows = tuple(config.data)

    group_field = settings.grid.group_field
    collapsed: frozenset[str] = frozenset()
    if config.grouping is not None:
        group_field = config.grouping.field or group_field
        if config.grouping.enabled and not config.grouping.default_expanded:
            collapsed = collapse_all_groups(rows, group_field)

    page_size = (pagination.page_size if pagination else None) or settings.grid.page_size
    remote_total = pagination.total_count if pagination else None
    current_page = 0
    if pagination is not None:
        total = remote_total if remote_total is not None else len(rows)
        current_page = clamp_page(pagination.current_page, total, page_size)

    state = GridState(
        original_data=rows,
        sort=config.default_sort,
        current_page=current_page,
        page_size=page_size,
        remote_total_count=remote_total,
        collapsed_groups=collapsed,
        group_field=group_field,
    )
    return derive(state, config)


def set_data(
    state: GridState,
    config: DataTableConfig,
    rows: Iterable[Row],
    total_count: int | None = None,
    *,
    page: int = 0,
    keep_selection: bool = False,
) -> GridState:
    """Replace the dataset.

    Parameters
    ----------
    rows : iterable of Row
        The new authoritative rows.
    total_count : int, optional
        Remote full count. When given, ``rows`` is taken to be one page
        already sliced by a server and is not paginated again.
    page : int, optional
        Page the new rows belong to. Only used with ``total_count`` and
        clamped into its page range; local data always restarts at 0.
    keep_selection : bool, optional
        Keep selected ids that still exist in ``rows`` instead of
        clearing the selection.
    """
    new_rows = tuple(rows)
    selected = prune_selection(state.selected_row_ids, new_rows) if keep_selection else frozenset()
    current_page = 0
    if total_count is not None:
        current_page = clamp_page(page, total_count, state.page_size)
    return derive(
        replace(
            state,
            original_data=new_rows,
            remote_total_count=total_count,
            current_page=current_page,
            selected_row_ids=selected,
        ),
        config,
    )


def set_sort(
    state: GridState,
    config: DataTableConfig,
    column: str,
    direction: SortDirection = "asc",
) -> GridState:
    """Sort by one column and return to the first page."""
    sort = SortConfig(column=column, direction=direction)
    return derive(replace(state, sort=sort, current_page=0), config)


def set_filter_values(
    state: GridState,
    config: DataTableConfig,
    values: Mapping[str, Any],
) -> GridState:
    """Apply filter values and return to the first page."""
    return derive(replace(state, filter_values=dict(values), current_page=0), config)


def reset_filters(state: GridState, config: DataTableConfig) -> GridState:
    """Clear every filter value."""
    return set_filter_values(state, config, {})


def set_page(state: GridState, config: DataTableConfig, page: int) -> GridState:
    """Move to a page, clamped into the valid range."""
    clamped = clamp_page(page, state.total_count, state.page_size)
    if clamped != page:
        debug(f"Clamped page {page} to {clamped}")
    return derive(replace(state, current_page=clamped), config)


def set_page_size(state: GridState, config: DataTableConfig, page_size: int) -> GridState:
    """Change rows per page and return to the first page."""
    if isinstance(page_size, bool) or not isinstance(page_size, int) or page_size <= 0:
        debug(f"Ignoring invalid page size {page_size!r}")
        return state
    return derive(replace(state, page_size=page_size, current_page=0), config)


def set_loading(state: GridState, is_loading: bool) -> GridState:
    """Flag the grid as waiting on its data source."""
    return replace(state, is_loading=is_loading)


def visible_rows(state: GridState, config: DataTableConfig) -> list[Row]:
    """Rows of the page that are actually rendered (collapsed groups excluded)."""
    if not config.grouping_enabled or not state.collapsed_groups:
        return list(state.derived_data)
    return [
        row
        for row in state.derived_data
        if group_key(row, state.group_field) not in state.collapsed_groups
    ]
