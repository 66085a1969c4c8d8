"""Typed user intents and their wire decoding.

A render adapter turns user gestures into intents and hands them to
``GridController.dispatch``. Over a wire they travel as mappings whose
``type`` is ``grid:<name>``; field names may be snake_case or camelCase.

Usage:
    from mokkun.grid.intents import SortRequest, parse_intent

    intent = parse_intent({"type": "grid:sort", "columnId": "name"})
    assert intent == SortRequest(column_id="name")
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from ..exceptions import IntentError
from ..models import Row, RowId, SortDirection


class GridIntent(BaseModel):
    """Base class of every intent."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
        extra="ignore",
    )

    #: Wire name, without the ``grid:`` namespace.
    name: ClassVar[str] = ""

    @property
    def event_type(self) -> str:
        """Wire ``type`` of this intent."""
        return f"grid:{self.name}"


class SortRequest(GridIntent):
    """Sort by a column; toggles the direction when none is given."""

    name: ClassVar[str] = "sort"

    column_id: str
    direction: SortDirection | None = None


class FilterApply(GridIntent):
    """Apply the filter bar values."""

    name: ClassVar[str] = "filter-apply"

    values: dict[str, Any] = Field(default_factory=dict)


class FilterReset(GridIntent):
    """Clear every filter."""

    name: ClassVar[str] = "filter-reset"


class SelectRow(GridIntent):
    """Click on a row's selection control."""

    name: ClassVar[str] = "select-row"

    row_id: RowId


class SelectAll(GridIntent):
    """Header checkbox toggled."""

    name: ClassVar[str] = "select-all"

    selected: bool


class PageChange(GridIntent):
    """Go to a 0-based page."""

    name: ClassVar[str] = "page-change"

    page: int


class PageSizeChange(GridIntent):
    """Pick a different page size."""

    name: ClassVar[str] = "page-size-change"

    page_size: int


class GroupToggle(GridIntent):
    """Collapse or expand one group."""

    name: ClassVar[str] = "group-toggle"

    group: str


class CollapseAllGroups(GridIntent):
    """Collapse every group in the dataset."""

    name: ClassVar[str] = "collapse-all"


class ExpandAllGroups(GridIntent):
    """Expand every group."""

    name: ClassVar[str] = "expand-all"


class ResizeStart(GridIntent):
    """Pointer pressed on a column's resize handle.

    ``start_width`` is the rendered width measured by the adapter; when
    omitted the last known width of the column is used.
    """

    name: ClassVar[str] = "resize-start"

    column_id: str
    pointer_x: float
    start_width: float | None = None


class ResizeMove(GridIntent):
    """Pointer moved while resizing."""

    name: ClassVar[str] = "resize-move"

    pointer_x: float


class ResizeEnd(GridIntent):
    """Pointer released; commits the width."""

    name: ClassVar[str] = "resize-end"

    pointer_x: float | None = None


class ResizeCancel(GridIntent):
    """Abandon the drag without committing."""

    name: ClassVar[str] = "resize-cancel"


class SetColumnWidth(GridIntent):
    """Set a column width programmatically."""

    name: ClassVar[str] = "set-column-width"

    column_id: str
    width: float


class RowActionRequest(GridIntent):
    """Click on a row action button."""

    name: ClassVar[str] = "row-action"

    action_id: str
    row_id: RowId


class SetLoading(GridIntent):
    """Data source started or finished fetching."""

    name: ClassVar[str] = "set-loading"

    loading: bool


class SetData(GridIntent):
    """Replace the dataset.

    ``total_count`` switches to server-driven paging: ``rows`` is then a
    single page and ``page`` says which one.
    """

    name: ClassVar[str] = "set-data"

    rows: list[Row] = Field(default_factory=list)
    total_count: int | None = Field(default=None, ge=0)
    page: int = Field(default=0, ge=0)

    @field_validator("rows")
    @classmethod
    def validate_rows(cls, v: list[Row]) -> list[Row]:
        """Every row must carry an ``id``."""
        for index, row in enumerate(v):
            if "id" not in row:
                raise ValueError(f"Row {index} has no 'id' key")
        return v


INTENT_TYPES: dict[str, type[GridIntent]] = {
    f"grid:{cls.name}": cls
    for cls in (
        SortRequest,
        FilterApply,
        FilterReset,
        SelectRow,
        SelectAll,
        PageChange,
        PageSizeChange,
        GroupToggle,
        CollapseAllGroups,
        ExpandAllGroups,
        ResizeStart,
        ResizeMove,
        ResizeEnd,
        ResizeCancel,
        SetColumnWidth,
        RowActionRequest,
        SetLoading,
        SetData,
    )
}


def parse_intent(message: Mapping[str, Any], grid_id: str | None = None) -> GridIntent:
    """Decode a wire message into an intent.

    Parameters
    ----------
    message : Mapping
        ``{"type": "grid:<name>", ...fields}``. Fields may also be nested
        under ``data``.
    grid_id : str, optional
        Grid the message is addressed to, for error context.

    Returns
    -------
    GridIntent
        The decoded intent.

    Raises
    ------
    IntentError
        If the message has no type, an unknown type, or invalid fields.
    """
    if not isinstance(message, Mapping):
        raise IntentError(
            f"Intent message must be a mapping, got {type(message).__name__}",
            grid_id=grid_id,
        )

    intent_type = message.get("type")
    if not isinstance(intent_type, str) or not intent_type:
        raise IntentError("Intent message has no 'type'", grid_id=grid_id)

    cls = INTENT_TYPES.get(intent_type)
    if cls is None:
        raise IntentError(
            f"Unknown intent type '{intent_type}'",
            intent_type=intent_type,
            grid_id=grid_id,
        )

    payload = message.get("data")
    if not isinstance(payload, Mapping):
        payload = {k: v for k, v in message.items() if k != "type"}

    try:
        return cls.model_validate(dict(payload))
    except ValidationError as e:
        raise IntentError(
            f"Invalid payload for '{intent_type}': {e.error_count()} validation error(s)",
            intent_type=intent_type,
            grid_id=grid_id,
            errors=[err["msg"] for err in e.errors()],
        ) from e
