"""Tests for intent models and wire decoding."""

from __future__ import annotations

import pytest

from pydantic import ValidationError

from mokkun.exceptions import IntentError
from mokkun.grid.intents import (
    INTENT_TYPES,
    FilterReset,
    PageChange,
    ResizeStart,
    SelectRow,
    SetData,
    SortRequest,
    parse_intent,
)


class TestIntentModels:
    """Tests for the intent classes themselves."""

    def test_event_type(self):
        """Intents know their wire type."""
        assert SortRequest(column_id="name").event_type == "grid:sort"
        assert FilterReset().event_type == "grid:filter-reset"

    def test_intents_are_frozen(self):
        """Intents cannot be changed after creation."""
        intent = PageChange(page=1)
        with pytest.raises(ValidationError):
            intent.page = 2

    def test_every_type_is_registered(self):
        """Every wire name maps back to its class."""
        for event_type, cls in INTENT_TYPES.items():
            assert event_type == f"grid:{cls.name}"
        assert len(INTENT_TYPES) == 18

    def test_set_data_requires_ids(self):
        """Rows without an id are rejected."""
        with pytest.raises(ValidationError):
            SetData(rows=[{"name": "x"}])

    def test_set_data_rejects_negative_counts(self):
        """total_count and page cannot be negative."""
        with pytest.raises(ValidationError):
            SetData(rows=[], total_count=-1)
        with pytest.raises(ValidationError):
            SetData(rows=[], page=-1)


class TestParseIntent:
    """Tests for parse_intent()."""

    def test_camel_case_fields(self):
        """Wire messages may use camelCase field names."""
        intent = parse_intent({"type": "grid:sort", "columnId": "name", "direction": "desc"})
        assert intent == SortRequest(column_id="name", direction="desc")

    def test_snake_case_fields(self):
        """snake_case names work too."""
        intent = parse_intent({"type": "grid:resize-start", "column_id": "c1", "pointer_x": 10})
        assert intent == ResizeStart(column_id="c1", pointer_x=10)

    def test_nested_data_payload(self):
        """Fields may be nested under data."""
        intent = parse_intent({"type": "grid:select-row", "data": {"rowId": 3}})
        assert intent == SelectRow(row_id=3)

    def test_string_row_ids_are_kept(self):
        """Ids arrive as they were sent; the controller resolves them."""
        assert parse_intent({"type": "grid:select-row", "rowId": "3"}).row_id == "3"

    def test_unknown_fields_are_ignored(self):
        """Extra keys do not fail decoding."""
        intent = parse_intent({"type": "grid:filter-reset", "gridId": "users"})
        assert isinstance(intent, FilterReset)

    @pytest.mark.parametrize("message", [{}, {"type": ""}, {"type": 5}])
    def test_missing_type(self, message):
        """A message without a type is rejected."""
        with pytest.raises(IntentError, match="no 'type'"):
            parse_intent(message)

    def test_not_a_mapping(self):
        """Only mappings can be decoded."""
        with pytest.raises(IntentError, match="must be a mapping"):
            parse_intent(["grid:sort"], grid_id="users")

    def test_unknown_type(self):
        """Unknown types carry the type in the error."""
        with pytest.raises(IntentError) as exc_info:
            parse_intent({"type": "grid:explode"}, grid_id="users")
        assert exc_info.value.intent_type == "grid:explode"
        assert exc_info.value.grid_id == "users"

    def test_invalid_payload(self):
        """Validation errors become IntentError with the messages attached."""
        with pytest.raises(IntentError) as exc_info:
            parse_intent({"type": "grid:page-change", "page": "later"})
        error = exc_info.value
        assert error.intent_type == "grid:page-change"
        assert error.context["errors"]
        assert isinstance(error.__cause__, ValidationError)
