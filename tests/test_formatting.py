"""Tests for cell value formatting."""

from __future__ import annotations

import pytest

from mokkun.config import MokkunSettings
from mokkun.formatting import (
    format_cell_value,
    format_currency,
    format_date,
    format_number,
    status_badge_class,
)
from mokkun.models import Column


STATUS = Column(
    id="status",
    format="status",
    status_map={
        "active": {"label": "有効", "color": "success"},
        "locked": {"label": "ロック", "color": "danger"},
    },
)


class TestFormatNumber:
    """Tests for format_number()."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (1234.5, "1,234.5"),
            (1234567.891, "1,234,567.891"),
            (42, "42"),
            (0.12345, "0.123"),
            (-9876.5, "-9,876.5"),
            (-0.0001, "0"),
        ],
    )
    def test_default_locale(self, value, expected):
        """ja-JP groups by thousands with a dot for decimals."""
        assert format_number(value) == expected

    def test_comma_decimal_locale(self):
        """de-DE swaps the separators."""
        assert format_number(1234.5, "de-DE") == "1.234,5"

    def test_non_finite(self):
        """Infinity is written as plain text."""
        assert format_number(float("inf")) == "inf"


class TestFormatCurrency:
    """Tests for format_currency()."""

    def test_yen_in_japanese(self):
        """JPY has no minor unit and rounds half up."""
        assert format_currency(1234.5) == "￥1,235"

    def test_dollars(self):
        """USD keeps two fraction digits."""
        assert format_currency(1234.5, "USD", "en-US") == "$1,234.50"
        assert format_currency(-5, "USD", "en-US") == "-$5.00"

    def test_suffix_symbol_locale(self):
        """Euro in German goes after the amount."""
        assert format_currency(1234.5, "EUR", "de-DE") == "1.234,50 €"

    def test_unknown_currency_code(self):
        """Unknown codes are used as the prefix."""
        assert format_currency(10, "xyz", "en-US") == "XYZ 10.00"


class TestFormatDate:
    """Tests for format_date()."""

    def test_japanese_date(self):
        """ja-JP writes y/m/d without padding."""
        assert format_date("2024-01-05") == "2024/1/5"

    def test_japanese_datetime(self):
        """Times are appended for datetime columns."""
        assert format_date("2024-01-05T09:30:00", with_time=True) == "2024/1/5 9:30:00"

    def test_us_datetime(self):
        """en-US uses month first and a 12-hour clock."""
        assert format_date("2024-01-05T15:04:05", "en-US", with_time=True) == "1/5/2024, 3:04:05 PM"
        assert format_date("2024-01-05", "en-US") == "1/5/2024"

    def test_other_locales_use_iso(self):
        """Unlisted locales fall back to ISO 8601."""
        assert format_date("2024-01-05", "de-DE") == "2024-01-05"

    def test_unparseable(self):
        """Values that are not dates give None."""
        assert format_date("soon") is None


class TestFormatCellValue:
    """Tests for format_cell_value()."""

    def test_missing_value_placeholder(self, settings):
        """None renders as the configured placeholder."""
        assert format_cell_value(None, Column(id="x"), settings) == "-"

    def test_placeholder_is_configurable(self):
        """The placeholder comes from settings."""
        settings = MokkunSettings(format={"empty_placeholder": "n/a"})
        assert format_cell_value(None, Column(id="x"), settings) == "n/a"

    def test_number_column(self, settings):
        """Numeric strings are formatted too."""
        column = Column(id="n", format="number")
        assert format_cell_value("1234.5", column, settings) == "1,234.5"
        assert format_cell_value("abc", column, settings) == "abc"

    def test_currency_column(self, settings):
        """Currency uses settings unless the column overrides it."""
        assert format_cell_value(1000, Column(id="p", format="currency"), settings) == "￥1,000"
        column = Column(
            id="p", format="currency", currency_format={"currency": "USD", "locale": "en-US"}
        )
        assert format_cell_value(1000, column, settings) == "$1,000.00"

    def test_date_columns(self, settings):
        """Date and datetime columns format, bad values pass through."""
        assert format_cell_value("2024-03-09", Column(id="d", format="date"), settings) == "2024/3/9"
        assert format_cell_value("tbd", Column(id="d", format="date"), settings) == "tbd"

    def test_status_column(self, settings):
        """Mapped statuses show their label, others their raw value."""
        assert format_cell_value("active", STATUS, settings) == "有効"
        assert format_cell_value("pending", STATUS, settings) == "pending"

    def test_text_column(self, settings):
        """Text columns stringify."""
        assert format_cell_value(True, Column(id="t"), settings) == "true"
        assert format_cell_value(3.0, Column(id="t"), settings) == "3"


class TestStatusBadgeClass:
    """Tests for status_badge_class()."""

    def test_badge_classes(self):
        """Known statuses get their color, unknown ones the default."""
        assert status_badge_class("locked", STATUS) == "status-badge status-danger"
        assert status_badge_class("other", STATUS) == "status-badge status-default"

    def test_non_status_column(self):
        """Other formats have no badge."""
        assert status_badge_class("active", Column(id="x")) == ""
