"""Display formatting of cell values.

Columns declare a ``format`` (text, number, currency, date, datetime,
status). Formatting is locale-aware for the handful of locales screen
definitions use; anything else falls back to ISO dates and
``1,234.5`` style numbers.
"""

from __future__ import annotations

import math

from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Any

from .config import MokkunSettings, get_settings
from .grid.pipeline import parse_datetime, parse_number, stringify
from .models import Column


# --- Locale tables ---

# language -> (group separator, decimal separator)
_SEPARATORS: dict[str, tuple[str, str]] = {
    "de": (".", ","),
    "es": (".", ","),
    "it": (".", ","),
    "fr": ("\u202f", ","),
}

# currency -> (symbol, fraction digits)
_CURRENCIES: dict[str, tuple[str, int]] = {
    "JPY": ("¥", 0),
    "USD": ("$", 2),
    "EUR": ("€", 2),
    "GBP": ("£", 2),
    "KRW": ("₩", 0),
    "CNY": ("CN¥", 2),
}

# Languages that write the currency symbol after the amount
_SUFFIX_SYMBOL = frozenset({"de", "es", "it", "fr"})

STATUS_BADGE_CLASS = "status-badge"


def _language(locale: str) -> str:
    return locale.replace("_", "-").split("-", 1)[0].lower()


def _group_digits(number: Decimal, fraction_digits: int, locale: str, trim: bool) -> str:
    """Absolute value of ``number`` rounded and written with separators."""
    group_sep, decimal_sep = _SEPARATORS.get(_language(locale), (",", "."))
    with localcontext() as ctx:
        ctx.prec = 400
        rounded = abs(number).quantize(Decimal(1).scaleb(-fraction_digits), rounding=ROUND_HALF_UP)
    text = f"{rounded:,.{fraction_digits}f}"
    if trim and "." in text:
        text = text.rstrip("0").rstrip(".")
    integral, _, fraction = text.partition(".")
    integral = integral.replace(",", group_sep)
    return f"{integral}{decimal_sep}{fraction}" if fraction else integral


def _sign(number: Decimal, text: str) -> str:
    # -0.0001 rounds to "0" and is written without a sign
    return "-" if number < 0 and any(ch in "123456789" for ch in text) else ""


def format_number(value: float, locale: str = "ja-JP", max_fraction_digits: int = 3) -> str:
    """Format a number with grouping separators.

    Parameters
    ----------
    value : float
        The number.
    locale : str, optional
        BCP 47 locale tag ("ja-JP", "en-US", "de-DE", ...).
    max_fraction_digits : int, optional
        Fraction digits kept after rounding half away from zero.

    Returns
    -------
    str
        E.g. ``1234567.891`` -> ``"1,234,567.891"``.
    """
    if not math.isfinite(value):
        return stringify(value)
    number = Decimal(repr(float(value)))
    text = _group_digits(number, max_fraction_digits, locale, trim=True)
    return f"{_sign(number, text)}{text}"


def format_currency(value: float, currency: str = "JPY", locale: str = "ja-JP") -> str:
    """Format an amount of money.

    Parameters
    ----------
    value : float
        The amount.
    currency : str, optional
        ISO 4217 code. Unknown codes are written as a prefix.
    locale : str, optional
        BCP 47 locale tag.

    Returns
    -------
    str
        E.g. ``1234.5`` in JPY for ja-JP -> ``"￥1,235"``.
    """
    if not math.isfinite(value):
        return stringify(value)
    code = currency.upper()
    language = _language(locale)
    symbol, digits = _CURRENCIES.get(code, (f"{code} ", 2))
    if code == "JPY" and language == "ja":
        symbol = "￥"

    number = Decimal(repr(float(value)))
    amount = _group_digits(number, digits, locale, trim=False)
    sign = _sign(number, amount)
    if language in _SUFFIX_SYMBOL:
        return f"{sign}{amount} {symbol.strip()}"
    return f"{sign}{symbol}{amount}"


def format_date(value: Any, locale: str = "ja-JP", with_time: bool = False) -> str | None:
    """Format a date-like value; None when it does not parse."""
    parsed = parse_datetime(value)
    if parsed is None:
        return None
    moment, _ = parsed
    language = _language(locale)
    if language == "ja":
        text = f"{moment.year}/{moment.month}/{moment.day}"
        return f"{text} {moment.hour}:{moment:%M:%S}" if with_time else text
    if locale.replace("_", "-").lower() == "en-us":
        text = f"{moment.month}/{moment.day}/{moment.year}"
        if not with_time:
            return text
        hour = moment.hour % 12 or 12
        meridiem = "AM" if moment.hour < 12 else "PM"
        return f"{text}, {hour}:{moment:%M:%S} {meridiem}"
    if with_time:
        return moment.isoformat(sep=" ", timespec="seconds")
    return moment.date().isoformat()


def format_cell_value(
    value: Any,
    column: Column,
    settings: MokkunSettings | None = None,
) -> str:
    """Display text of one cell.

    Parameters
    ----------
    value : Any
        Raw cell value.
    column : Column
        The column, whose ``format`` picks the formatter.
    settings : MokkunSettings, optional
        Locale, currency and placeholder defaults.

    Returns
    -------
    str
        Formatted text. Missing values render as the placeholder and
        values a formatter cannot parse render as plain text.
    """
    settings = settings or get_settings()
    if value is None:
        return settings.format.empty_placeholder

    locale = settings.format.locale
    kind = column.format

    if kind in ("number", "currency"):
        number = parse_number(value)
        if number is None:
            return stringify(value)
        if kind == "number":
            return format_number(number, locale)
        currency_format = column.currency_format
        return format_currency(
            number,
            currency=(currency_format.currency if currency_format else None)
            or settings.format.currency,
            locale=(currency_format.locale if currency_format else None) or locale,
        )

    if kind in ("date", "datetime"):
        text = format_date(value, locale, with_time=kind == "datetime")
        return stringify(value) if text is None else text

    if kind == "status":
        info = (column.status_map or {}).get(stringify(value))
        return info.label if info is not None else stringify(value)

    return stringify(value)


def status_badge_class(value: Any, column: Column) -> str:
    """CSS classes of a status badge ("" for non-status columns)."""
    if column.format != "status" or not column.status_map:
        return ""
    info = column.status_map.get(stringify(value))
    if info is None:
        return f"{STATUS_BADGE_CLASS} status-default"
    return f"{STATUS_BADGE_CLASS} status-{info.color}"
