"""Column widths and the drag-to-resize state machine.

Idle --(resize start)--> Resizing --(resize end)--> Idle

While resizing, pointer moves only update a transient preview width on
the drag itself. Committed widths change on release or through
``set_column_width``, and every committed width is clamped into the
column's bounds.
"""

from __future__ import annotations

import math
import re

from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any

from ..log import debug
from ..models import Column


_PX_PATTERN = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(px)?\s*$")


def _tidy(width: float) -> int | float:
    return int(width) if float(width).is_integer() else width


def parse_px(value: Any) -> float | None:
    """Pixel value of a declared width ("120px", "120", 120); None otherwise."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) and value >= 0 else None
    if isinstance(value, str):
        match = _PX_PATTERN.match(value)
        if match:
            return float(match.group(1))
    return None


@dataclass(frozen=True)
class WidthBounds:
    """Inclusive pixel bounds for a column width."""

    min_width: float = 50
    max_width: float = 500

    def __post_init__(self) -> None:
        if self.min_width > self.max_width:
            raise ValueError(
                f"min_width ({self.min_width}) cannot exceed max_width ({self.max_width})"
            )

    def clamp(self, width: float) -> int | float:
        """Clamp ``width`` into the bounds."""
        return _tidy(max(self.min_width, min(self.max_width, width)))

    def for_column(self, column: Column | None) -> WidthBounds:
        """Narrow these bounds by a column's own min/max when they fit inside."""
        if column is None:
            return self
        low = parse_px(column.min_width)
        high = parse_px(column.max_width)
        min_width = max(self.min_width, low) if low is not None else self.min_width
        max_width = min(self.max_width, high) if high is not None else self.max_width
        if min_width > max_width:
            debug(f"Column '{column.id}' width bounds do not overlap the grid bounds")
            return self
        return WidthBounds(min_width=min_width, max_width=max_width)


@dataclass(frozen=True)
class ResizeDrag:
    """An in-progress drag on one column's resize handle."""

    column_id: str
    start_pointer_x: float
    start_width: float
    preview_width: int | float


def is_valid_width(width: Any) -> bool:
    """Whether a requested width may be committed at all."""
    if isinstance(width, bool) or not isinstance(width, (int, float)):
        return False
    return math.isfinite(width) and width >= 0


def set_column_width(
    widths: Mapping[str, int | float],
    column_id: str,
    width: Any,
    bounds: WidthBounds,
) -> dict[str, int | float] | None:
    """Commit one column width.

    Returns
    -------
    dict or None
        The new width map, or None when ``width`` is non-finite or
        negative and nothing was committed.
    """
    if not is_valid_width(width):
        debug(f"Rejected width {width!r} for column '{column_id}'")
        return None
    return {**widths, column_id: bounds.clamp(width)}


def begin_resize(
    column_id: str,
    pointer_x: float,
    start_width: float,
    bounds: WidthBounds,
) -> ResizeDrag:
    """Enter the Resizing state."""
    return ResizeDrag(
        column_id=column_id,
        start_pointer_x=pointer_x,
        start_width=start_width,
        preview_width=bounds.clamp(start_width),
    )


def preview_resize(drag: ResizeDrag, pointer_x: float, bounds: WidthBounds) -> ResizeDrag:
    """Move the transient width to follow the pointer."""
    width = drag.start_width + (pointer_x - drag.start_pointer_x)
    return replace(drag, preview_width=bounds.clamp(width))


def end_resize(
    drag: ResizeDrag,
    widths: Mapping[str, int | float],
    bounds: WidthBounds,
    pointer_x: float | None = None,
) -> dict[str, int | float]:
    """Leave the Resizing state, committing the final width.

    When the release carries a pointer position it wins over the last
    preview, so a release without a preceding move still resizes.
    """
    final = drag if pointer_x is None else preview_resize(drag, pointer_x, bounds)
    return {**widths, drag.column_id: final.preview_width}


def start_width_for(
    column: Column,
    widths: Mapping[str, int | float],
    bounds: WidthBounds,
) -> float:
    """Best known current width of a column when the adapter gives none."""
    committed = widths.get(column.id)
    if committed is not None:
        return committed
    declared = parse_px(column.width)
    if declared is not None:
        return declared
    return bounds.min_width


def effective_width(
    column: Column,
    widths: Mapping[str, int | float],
    drag: ResizeDrag | None = None,
) -> int | float | str | None:
    """Width to display: live preview, then committed, then declared."""
    if drag is not None and drag.column_id == column.id:
        return drag.preview_width
    committed = widths.get(column.id)
    if committed is not None:
        return committed
    return column.width
