"""Pydantic models for the ``data_table`` field of a mokkun screen.

These mirror the YAML schema one to one (snake_case keys, as written in
screen definitions). Rows are left as plain mappings: a row is an opaque
record whose ``id`` key is its identity.

Usage:
    from mokkun.models import DataTableConfig

    config = DataTableConfig.model_validate(
        {
            "id": "users",
            "type": "data_table",
            "columns": [{"id": "name", "label": "Name"}],
            "data": [{"id": 1, "name": "Bob"}],
        }
    )
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


RowId = str | int
Row = dict[str, Any]

SortDirection = Literal["asc", "desc"]
SelectionMode = Literal["none", "single", "multiple"]
ColumnFormat = Literal["text", "number", "date", "datetime", "currency", "status"]
ColumnAlign = Literal["left", "center", "right"]
FixedSide = Literal["left", "right"]
StatusColor = Literal["success", "warning", "danger", "info", "default"]
FilterKind = Literal["text", "select", "date_range", "number_range"]
ActionStyle = Literal["primary", "secondary", "danger", "link"]

#: Row key holding per-column cell merge directives.
CELL_MERGE_KEY = "_cellMerge"
#: Alternate snake_case spelling accepted for cell merge directives.
CELL_MERGE_KEY_ALT = "_cell_merge"


class SchemaModel(BaseModel):
    """Base model for schema objects; unknown YAML keys are kept."""

    model_config = ConfigDict(
        populate_by_name=True,
        extra="allow",
    )


class StatusInfo(SchemaModel):
    """Display label and badge color for one status value."""

    label: str
    color: StatusColor = "default"


class CurrencyFormat(SchemaModel):
    """Locale and ISO currency code for ``currency`` columns."""

    locale: str | None = None
    currency: str | None = None


class Column(SchemaModel):
    """Data table column definition.

    ``field`` defaults to ``id`` when omitted. ``width`` is the declared
    width as written in YAML ("120px", "20%", "auto" or a number).
    """

    id: str
    label: str = ""
    field: str | None = None
    width: str | int | float | None = None
    min_width: str | int | float | None = None
    max_width: str | int | float | None = None
    resizable: bool = True
    sortable: bool = True
    filterable: bool | None = None
    format: ColumnFormat = "text"
    status_map: dict[str, StatusInfo] | None = None
    currency_format: CurrencyFormat | None = None
    align: ColumnAlign | None = None
    fixed: FixedSide | None = None
    colspan: Any = None
    rowspan: Any = None

    @property
    def field_key(self) -> str:
        """Row key this column reads from."""
        return self.field or self.id


class ConfirmConfig(SchemaModel):
    """Confirmation gate shown before a row action runs."""

    title: str
    message: str = ""


class RowAction(SchemaModel):
    """Per-row action button."""

    id: str
    label: str
    icon: str | None = None
    style: ActionStyle | None = None
    confirm: ConfirmConfig | None = None
    handler: str | None = None


class SortConfig(SchemaModel):
    """Active sort column and direction."""

    column: str
    direction: SortDirection = "asc"


class PaginationConfig(SchemaModel):
    """Pagination settings. ``total_count`` supports server-side paging."""

    enabled: bool = False
    page_size: int | None = Field(default=None, ge=1)
    page_size_options: list[int] | None = None
    current_page: int = Field(default=0, ge=0)
    total_count: int | None = Field(default=None, ge=0)


class SelectOption(SchemaModel):
    """One choice of a ``select`` filter."""

    value: str | int | float | bool
    label: str


class FilterField(SchemaModel):
    """A filter input bound to one column."""

    id: str
    label: str = ""
    column: str
    type: FilterKind | str = "text"
    options: list[SelectOption] | None = None
    placeholder: str | None = None


class FilterConfig(SchemaModel):
    """Filter bar settings."""

    enabled: bool = True
    show_search: bool = False
    fields: list[FilterField] = Field(default_factory=list)
    layout: Literal["inline", "stacked"] = "inline"


class EmptyStateAction(SchemaModel):
    """Primary button of the empty state."""

    label: str
    handler: str


class EmptyState(SchemaModel):
    """Content shown when no rows survive the pipeline."""

    title: str | None = None
    description: str | None = None
    icon: str | None = None
    action: EmptyStateAction | None = None


class GroupConfig(SchemaModel):
    """Row grouping settings."""

    enabled: bool = False
    field: str | None = None
    header_renderer: str | None = None
    default_expanded: bool = True
    collapsible: bool = True


class FixedHeaderConfig(SchemaModel):
    """Sticky header settings."""

    enabled: bool = True
    offset: int = 0


class ResizeConfig(SchemaModel):
    """Column resize settings. Widths are pixels."""

    enabled: bool = True
    min_width: float | None = Field(default=None, ge=0)
    max_width: float | None = Field(default=None, ge=0)
    on_resize: str | None = None

    @model_validator(mode="after")
    def validate_width_bounds(self) -> ResizeConfig:
        """Validate the minimum width does not exceed the maximum."""
        if self.min_width is not None and self.max_width is not None:
            if self.min_width > self.max_width:
                raise ValueError(
                    f"min_width ({self.min_width}) cannot exceed max_width ({self.max_width})"
                )
        return self


class DataTableConfig(SchemaModel):
    """A ``data_table`` field as declared in a screen definition."""

    id: str
    type: Literal["data_table"] = "data_table"
    label: str = ""
    description: str | None = None
    required: bool = False
    columns: list[Column] = Field(default_factory=list)
    data: list[Row] = Field(default_factory=list)
    selection: SelectionMode = "none"
    row_actions: list[RowAction] = Field(default_factory=list)
    default_sort: SortConfig | None = None
    pagination: PaginationConfig | None = None
    filters: FilterConfig | None = None
    empty_state: EmptyState | None = None
    grouping: GroupConfig | None = None
    column_resize: bool | ResizeConfig | None = None
    fixed_header: bool | FixedHeaderConfig | None = None
    height: str | None = None
    striped: bool = False
    hoverable: bool = True
    bordered: bool = False
    compact: bool = False
    responsive: bool = True
    layout: Literal["auto", "fixed"] | None = None

    @field_validator("data", mode="before")
    @classmethod
    def validate_rows(cls, v: Any) -> Any:
        """Rows must be mappings carrying an ``id``."""
        if v is None:
            return []
        for index, row in enumerate(v):
            if not isinstance(row, dict):
                raise ValueError(f"Row {index} must be a mapping, got {type(row).__name__}")
            if "id" not in row:
                raise ValueError(f"Row {index} has no 'id' key")
        return v

    @property
    def filter_fields(self) -> list[FilterField]:
        """Active filter fields (empty when filters are disabled)."""
        if self.filters is None or not self.filters.enabled:
            return []
        return self.filters.fields

    @property
    def pagination_enabled(self) -> bool:
        """Whether the pipeline slices pages."""
        return self.pagination is not None and self.pagination.enabled

    @property
    def grouping_enabled(self) -> bool:
        """Whether rows are clustered into groups."""
        return self.grouping is not None and self.grouping.enabled

    def column(self, column_id: str) -> Column | None:
        """Look up a column by id."""
        return next((c for c in self.columns if c.id == column_id), None)

    def row_action(self, action_id: str) -> RowAction | None:
        """Look up a row action by id."""
        return next((a for a in self.row_actions if a.id == action_id), None)

    def resolved_resize(self, default_min: float = 50, default_max: float = 500) -> ResizeConfig:
        """Normalize ``column_resize`` (bool, object or absent) to a ResizeConfig."""
        resize = self.column_resize
        if isinstance(resize, ResizeConfig):
            # A single declared bound widens the default on the other side.
            min_width = resize.min_width
            max_width = resize.max_width
            if min_width is None:
                min_width = default_min if max_width is None else min(default_min, max_width)
            if max_width is None:
                max_width = max(default_max, min_width)
            return ResizeConfig(
                enabled=resize.enabled,
                min_width=min_width,
                max_width=max_width,
                on_resize=resize.on_resize,
            )
        return ResizeConfig(enabled=bool(resize), min_width=default_min, max_width=default_max)

    def resolved_fixed_header(self) -> FixedHeaderConfig:
        """Normalize ``fixed_header`` (bool, object or absent) to a FixedHeaderConfig."""
        header = self.fixed_header
        if isinstance(header, FixedHeaderConfig):
            return header
        return FixedHeaderConfig(enabled=bool(header), offset=0)
