"""Tests for column width bounds and the resize state machine."""

from __future__ import annotations

import math

import pytest

from mokkun.grid.layout import (
    WidthBounds,
    begin_resize,
    effective_width,
    end_resize,
    is_valid_width,
    parse_px,
    preview_resize,
    set_column_width,
    start_width_for,
)
from mokkun.models import Column


BOUNDS = WidthBounds(min_width=50, max_width=500)


class TestParsePx:
    """Tests for declared width parsing."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [("120px", 120.0), ("120", 120.0), (" 80.5px ", 80.5), (90, 90.0)],
    )
    def test_pixel_values(self, value, expected):
        """Pixel widths parse to floats."""
        assert parse_px(value) == expected

    @pytest.mark.parametrize("value", ["20%", "auto", None, True, -5, math.inf])
    def test_non_pixel_values(self, value):
        """Relative, keyword and invalid widths give None."""
        assert parse_px(value) is None


class TestWidthBounds:
    """Tests for WidthBounds."""

    def test_clamp(self):
        """Widths are clamped to [50, 500]."""
        assert BOUNDS.clamp(10) == 50
        assert BOUNDS.clamp(9999) == 500
        assert BOUNDS.clamp(120) == 120
        assert isinstance(BOUNDS.clamp(120.0), int)

    def test_inverted_bounds_are_rejected(self):
        """min_width above max_width cannot be constructed."""
        with pytest.raises(ValueError, match="cannot exceed"):
            WidthBounds(min_width=600, max_width=500)

    def test_column_bounds_narrow(self):
        """Column min/max inside the grid bounds narrow them."""
        bounds = BOUNDS.for_column(Column(id="c", min_width="100px", max_width=200))
        assert (bounds.min_width, bounds.max_width) == (100, 200)

    def test_column_bounds_outside_are_cut(self):
        """Column bounds never widen the grid bounds."""
        bounds = BOUNDS.for_column(Column(id="c", min_width=10, max_width=900))
        assert (bounds.min_width, bounds.max_width) == (50, 500)

    def test_disjoint_column_bounds_fall_back(self):
        """Column bounds that cannot be satisfied are ignored."""
        bounds = BOUNDS.for_column(Column(id="c", min_width=600))
        assert bounds == BOUNDS


class TestSetColumnWidth:
    """Tests for set_column_width()."""

    def test_commits_clamped_width(self):
        """A valid width is clamped and stored."""
        assert set_column_width({}, "c1", 10, BOUNDS) == {"c1": 50}
        assert set_column_width({}, "c1", 9999, BOUNDS) == {"c1": 500}

    def test_keeps_other_widths(self):
        """Other committed widths are untouched."""
        assert set_column_width({"c2": 80}, "c1", 100, BOUNDS) == {"c2": 80, "c1": 100}

    @pytest.mark.parametrize("width", [math.nan, math.inf, -1, "100", None, True])
    def test_invalid_widths_are_rejected(self, width):
        """Non-finite, negative and non-numeric widths commit nothing."""
        assert not is_valid_width(width)
        assert set_column_width({}, "c1", width, BOUNDS) is None


class TestResizeDrag:
    """Tests for the drag preview/commit split."""

    def test_preview_follows_pointer(self):
        """Moves change only the preview width."""
        drag = begin_resize("c1", 100, 120, BOUNDS)
        moved = preview_resize(drag, 130, BOUNDS)
        assert moved.preview_width == 150
        assert drag.preview_width == 120

    def test_preview_is_clamped(self):
        """The preview never leaves the bounds."""
        drag = begin_resize("c1", 100, 120, BOUNDS)
        assert preview_resize(drag, -1000, BOUNDS).preview_width == 50
        assert preview_resize(drag, 5000, BOUNDS).preview_width == 500

    def test_end_commits_last_preview(self):
        """Release without a position commits the last preview."""
        drag = preview_resize(begin_resize("c1", 0, 100, BOUNDS), 40, BOUNDS)
        assert end_resize(drag, {"c2": 70}, BOUNDS) == {"c2": 70, "c1": 140}

    def test_end_with_pointer_recomputes(self):
        """A release position wins over the last preview."""
        drag = begin_resize("c1", 0, 100, BOUNDS)
        assert end_resize(drag, {}, BOUNDS, pointer_x=25) == {"c1": 125}

    def test_start_width_fallbacks(self):
        """Committed, then declared px, then the minimum."""
        column = Column(id="c1", width="120px")
        assert start_width_for(column, {"c1": 200}, BOUNDS) == 200
        assert start_width_for(column, {}, BOUNDS) == 120
        assert start_width_for(Column(id="c2", width="20%"), {}, BOUNDS) == 50

    def test_effective_width_precedence(self):
        """Preview beats committed beats declared."""
        column = Column(id="c1", width="120px")
        drag = begin_resize("c1", 0, 300, BOUNDS)
        assert effective_width(column, {"c1": 200}, drag) == 300
        assert effective_width(column, {"c1": 200}) == 200
        assert effective_width(column, {}) == "120px"
