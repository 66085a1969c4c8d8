"""Interaction controller for one data table instance.

The controller owns the current ``GridState`` snapshot, routes intents
to the pure transitions, and notifies listeners. Every handled intent
ends with a ``grid:render`` event carrying the new ``GridView``, except
``ResizeMove`` which only emits ``grid:resize-preview``.

Usage:
    from mokkun.grid import GridController, SortRequest

    grid = GridController(config)
    grid.on("grid:render", lambda data: adapter.render(data["view"]))
    grid.dispatch(SortRequest(column_id="name"))
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import replace
from typing import Any

from ..config import MokkunSettings, get_settings
from ..events import EventRegistry, Listener
from ..log import debug
from ..models import DataTableConfig, Row, RowId, SortDirection
from . import grouping, layout, selection
from . import state as transitions
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
from .state import GridState
from .view import GridView, build_view


class GridController:
    """Stateful façade over the grid transitions.

    Parameters
    ----------
    config : DataTableConfig
        The table definition.
    settings : MokkunSettings, optional
        Defaults for omitted options. Uses ``get_settings()`` when omitted.
    grid_id : str, optional
        Identifier used in events and logs. Defaults to ``config.id``.
    """

    def __init__(
        self,
        config: DataTableConfig,
        settings: MokkunSettings | None = None,
        grid_id: str | None = None,
    ) -> None:
        self.config = config
        self.settings = settings or get_settings()
        self.grid_id = grid_id or config.id
        self.events = EventRegistry(self.grid_id)
        self._resize = config.resolved_resize(
            default_min=self.settings.grid.resize_min_width,
            default_max=self.settings.grid.resize_max_width,
        )
        self._bounds = transitions.resize_bounds(config, self.settings)
        self._state = transitions.create_state(config, self.settings)
        self._handlers: dict[type[GridIntent], Callable[[Any], None]] = {
            SortRequest: self._on_sort,
            FilterApply: self._on_filter_apply,
            FilterReset: self._on_filter_reset,
            SelectRow: self._on_select_row,
            SelectAll: self._on_select_all,
            PageChange: self._on_page_change,
            PageSizeChange: self._on_page_size_change,
            GroupToggle: self._on_group_toggle,
            CollapseAllGroups: self._on_collapse_all,
            ExpandAllGroups: self._on_expand_all,
            ResizeStart: self._on_resize_start,
            ResizeMove: self._on_resize_move,
            ResizeEnd: self._on_resize_end,
            ResizeCancel: self._on_resize_cancel,
            SetColumnWidth: self._on_set_column_width,
            RowActionRequest: self._on_row_action,
            SetLoading: self._on_set_loading,
            SetData: self._on_set_data,
        }

    # --- Public API ---

    @property
    def state(self) -> GridState:
        """The current snapshot."""
        return self._state

    def on(self, event_type: str, listener: Listener) -> GridController:
        """Subscribe to a grid event.

        Parameters
        ----------
        event_type : str
            ``grid:render``, ``grid:sort-change``, ``grid:*`` or ``*``, etc.
        listener : Listener
            Receives ``(data)``, ``(data, event_type)`` or
            ``(data, event_type, grid_id)``.

        Returns
        -------
        GridController
            Self for method chaining.
        """
        self.events.register(event_type, listener)
        return self

    def off(self, event_type: str | None = None, listener: Listener | None = None) -> bool:
        """Unsubscribe listener(s). See ``EventRegistry.unregister``."""
        return self.events.unregister(event_type, listener)

    def dispatch(self, intent: GridIntent) -> GridState:
        """Apply one intent and notify listeners.

        Returns
        -------
        GridState
            The snapshot after the intent.
        """
        handler = self._handlers.get(type(intent))
        if handler is None:
            debug(f"Grid '{self.grid_id}' has no handler for {type(intent).__name__}")
            return self._state
        debug(f"Grid '{self.grid_id}' handling {intent.event_type}")
        handler(intent)
        if not isinstance(intent, ResizeMove):
            self._render()
        return self._state

    def handle_message(self, message: Mapping[str, Any]) -> GridState:
        """Decode a wire message and dispatch it.

        Raises
        ------
        IntentError
            If the message is not a valid intent.
        """
        return self.dispatch(parse_intent(message, grid_id=self.grid_id))

    def view(self) -> GridView:
        """Project the current snapshot for rendering."""
        return build_view(self.config, self._state, self.settings)

    def get_selected_rows(self) -> list[Row]:
        """Selected rows resolved against the full dataset."""
        return selection.selected_rows(self._state.original_data, self._state.selected_row_ids)

    # Programmatic shortcuts, equivalent to dispatching the intent.

    def set_data(
        self,
        rows: Iterable[Row],
        total_count: int | None = None,
        page: int = 0,
    ) -> GridState:
        """Replace the dataset (resets page and selection)."""
        return self.dispatch(SetData(rows=list(rows), total_count=total_count, page=page))

    def set_sort(self, column_id: str, direction: SortDirection | None = None) -> GridState:
        """Sort by a column."""
        return self.dispatch(SortRequest(column_id=column_id, direction=direction))

    def set_filter_values(self, values: Mapping[str, Any]) -> GridState:
        """Apply filter values."""
        return self.dispatch(FilterApply(values=dict(values)))

    def set_page(self, page: int) -> GridState:
        """Go to a page (clamped)."""
        return self.dispatch(PageChange(page=page))

    def set_page_size(self, page_size: int) -> GridState:
        """Change rows per page."""
        return self.dispatch(PageSizeChange(page_size=page_size))

    def set_loading(self, loading: bool) -> GridState:
        """Show or hide the loading overlay."""
        return self.dispatch(SetLoading(loading=loading))

    def set_column_width(self, column_id: str, width: float) -> GridState:
        """Commit a column width (clamped)."""
        return self.dispatch(SetColumnWidth(column_id=column_id, width=width))

    # --- Internals ---

    def _render(self) -> None:
        if self.events.listener_count() == 0:
            return
        self.events.emit("grid:render", {"grid_id": self.grid_id, "view": self.view()})

    def _emit(self, event_type: str, **data: Any) -> None:
        self.events.emit(event_type, {"grid_id": self.grid_id, **data})

    def _resolve_row_id(self, row_id: RowId) -> RowId | None:
        row = self._state.find_row(row_id)
        if row is None:
            debug(f"Grid '{self.grid_id}' has no row with id {row_id!r}")
            return None
        return row["id"]

    def _set_selection(self, selected: frozenset[RowId]) -> None:
        if selected == self._state.selected_row_ids:
            return
        self._state = replace(self._state, selected_row_ids=selected)
        self._emit(
            "grid:selection-change",
            selected_ids=sorted(selected, key=str),
            selected_rows=self.get_selected_rows(),
        )

    def _column_bounds(self, column_id: str) -> layout.WidthBounds:
        return self._bounds.for_column(self.config.column(column_id))

    # --- Sort / filter / paging ---

    def _on_sort(self, intent: SortRequest) -> None:
        column = self.config.column(intent.column_id)
        if column is not None and not column.sortable:
            debug(f"Ignoring sort on non-sortable column '{intent.column_id}'")
            return
        direction = intent.direction
        if direction is None:
            current = self._state.sort
            if current is not None and current.column == intent.column_id:
                direction = "desc" if current.direction == "asc" else "asc"
            else:
                direction = "asc"
        self._state = transitions.set_sort(self._state, self.config, intent.column_id, direction)
        self._emit("grid:sort-change", column=intent.column_id, direction=direction)

    def _on_filter_apply(self, intent: FilterApply) -> None:
        self._state = transitions.set_filter_values(self._state, self.config, intent.values)
        self._emit("grid:filter-change", values=dict(self._state.filter_values))

    def _on_filter_reset(self, intent: FilterReset) -> None:
        self._state = transitions.reset_filters(self._state, self.config)
        self._emit("grid:filter-change", values={})

    def _on_page_change(self, intent: PageChange) -> None:
        previous = self._state.current_page
        self._state = transitions.set_page(self._state, self.config, intent.page)
        if self._state.current_page != previous:
            self._emit(
                "grid:page-change",
                page=self._state.current_page,
                page_size=self._state.page_size,
            )

    def _on_page_size_change(self, intent: PageSizeChange) -> None:
        previous = self._state
        self._state = transitions.set_page_size(self._state, self.config, intent.page_size)
        if self._state is not previous:
            self._emit(
                "grid:page-size-change",
                page=self._state.current_page,
                page_size=self._state.page_size,
            )

    # --- Selection ---

    def _on_select_row(self, intent: SelectRow) -> None:
        row_id = self._resolve_row_id(intent.row_id)
        if row_id is None:
            return
        self._set_selection(
            selection.select_row(self._state.selected_row_ids, row_id, self.config.selection)
        )

    def _on_select_all(self, intent: SelectAll) -> None:
        page_rows = transitions.visible_rows(self._state, self.config)
        self._set_selection(
            selection.select_all(
                self._state.selected_row_ids, page_rows, intent.selected, self.config.selection
            )
        )

    # --- Grouping ---

    def _groups_collapsible(self) -> bool:
        grouping_config = self.config.grouping
        if grouping_config is None or not grouping_config.enabled:
            debug(f"Grid '{self.grid_id}' is not grouped")
            return False
        if not grouping_config.collapsible:
            debug(f"Groups of grid '{self.grid_id}' are not collapsible")
            return False
        return True

    def _on_group_toggle(self, intent: GroupToggle) -> None:
        if not self._groups_collapsible():
            return
        collapsed = grouping.toggle_group(self._state.collapsed_groups, intent.group)
        if collapsed == self._state.collapsed_groups:
            return
        self._state = replace(self._state, collapsed_groups=collapsed)
        self._emit("grid:group-toggle", group=intent.group, collapsed=intent.group in collapsed)

    def _on_collapse_all(self, intent: CollapseAllGroups) -> None:
        if self._groups_collapsible():
            self._state = replace(
                self._state,
                collapsed_groups=grouping.collapse_all_groups(
                    self._state.original_data, self._state.group_field
                ),
            )

    def _on_expand_all(self, intent: ExpandAllGroups) -> None:
        if self._groups_collapsible():
            self._state = replace(self._state, collapsed_groups=grouping.expand_all_groups())

    # --- Column resize ---

    def _on_resize_start(self, intent: ResizeStart) -> None:
        column = self.config.column(intent.column_id)
        if not self._resize.enabled:
            debug(f"Column resize is disabled on grid '{self.grid_id}'")
            return
        if column is None or not column.resizable:
            debug(f"Column '{intent.column_id}' cannot be resized")
            return
        if self._state.resize is not None:
            debug(f"Replacing stale resize of column '{self._state.resize.column_id}'")

        bounds = self._column_bounds(column.id)
        start_width = intent.start_width
        if start_width is None or not layout.is_valid_width(start_width):
            start_width = layout.start_width_for(column, self._state.column_widths, bounds)
        drag = layout.begin_resize(column.id, intent.pointer_x, start_width, bounds)
        self._state = replace(self._state, resize=drag)

    def _on_resize_move(self, intent: ResizeMove) -> None:
        drag = self._state.resize
        if drag is None:
            debug("Ignoring resize move outside of a drag")
            return
        drag = layout.preview_resize(drag, intent.pointer_x, self._column_bounds(drag.column_id))
        self._state = replace(self._state, resize=drag)
        self._emit("grid:resize-preview", column_id=drag.column_id, width=drag.preview_width)

    def _on_resize_end(self, intent: ResizeEnd) -> None:
        drag = self._state.resize
        if drag is None:
            debug("Ignoring resize end outside of a drag")
            return
        widths = layout.end_resize(
            drag,
            self._state.column_widths,
            self._column_bounds(drag.column_id),
            pointer_x=intent.pointer_x,
        )
        self._state = replace(self._state, column_widths=widths, resize=None)
        self._emit("grid:column-resize", column_id=drag.column_id, width=widths[drag.column_id])

    def _on_resize_cancel(self, intent: ResizeCancel) -> None:
        if self._state.resize is not None:
            debug(f"Cancelled resize of column '{self._state.resize.column_id}'")
            self._state = replace(self._state, resize=None)

    def _on_set_column_width(self, intent: SetColumnWidth) -> None:
        if self.config.column(intent.column_id) is None:
            debug(f"Ignoring width for unknown column '{intent.column_id}'")
            return
        widths = layout.set_column_width(
            self._state.column_widths,
            intent.column_id,
            intent.width,
            self._column_bounds(intent.column_id),
        )
        if widths is None:
            return
        self._state = replace(self._state, column_widths=widths)
        self._emit("grid:column-resize", column_id=intent.column_id, width=widths[intent.column_id])

    # --- Row actions / data source ---

    def _on_row_action(self, intent: RowActionRequest) -> None:
        action = self.config.row_action(intent.action_id)
        if action is None:
            debug(f"Unknown row action '{intent.action_id}'")
            return
        row = self._state.find_row(intent.row_id)
        if row is None:
            debug(f"Row action '{intent.action_id}' on unknown row {intent.row_id!r}")
            return
        self._emit(
            "grid:row-action",
            action_id=action.id,
            row_id=row["id"],
            row=row,
            handler=action.handler,
            confirm=action.confirm.model_dump() if action.confirm else None,
        )

    def _on_set_loading(self, intent: SetLoading) -> None:
        self._state = transitions.set_loading(self._state, intent.loading)

    def _on_set_data(self, intent: SetData) -> None:
        previous = self._state.selected_row_ids
        self._state = transitions.set_data(
            self._state,
            self.config,
            intent.rows,
            intent.total_count,
            page=intent.page,
        )
        if previous and not self._state.selected_row_ids:
            self._emit("grid:selection-change", selected_ids=[], selected_rows=[])
