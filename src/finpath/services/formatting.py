"""Display helpers for money, dates and durations."""

from __future__ import annotations

from calendar import monthrange
from datetime import date

from ..models.plan import Currency

CURRENCY_SYMBOLS: dict[Currency, str] = {
    Currency.GBP: "£",
    Currency.EUR: "€",
    Currency.USD: "$",
    Currency.CUSTOM: "¤",
}


def format_currency(
    amount: float,
    currency: Currency | str = Currency.GBP,
    custom_fx_rate: float = 1.0,
) -> str:
    """Format an amount held in the base currency for display.

    Only ``CUSTOM`` applies ``custom_fx_rate``; every other currency is shown
    as entered. Negative values keep the sign in front of the symbol.
    """

    currency = Currency(currency)
    display_amount = amount * custom_fx_rate if currency is Currency.CUSTOM else amount
    symbol = CURRENCY_SYMBOLS[currency]
    sign = "-" if display_amount < 0 else ""
    return f"{sign}{symbol}{abs(display_amount):,.2f}"


def format_date(value: date) -> str:
    """Return e.g. ``5 March 2025``."""
    return f"{value.day} {value.strftime('%B %Y')}"


def format_month_year(value: date) -> str:
    return value.strftime("%b %Y")


def add_months(value: date, months: int) -> date:
    """Return ``value`` shifted by ``months`` calendar months.

    The day is clamped to the length of the target month, so 31 January plus
    one month is the last day of February.
    """

    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, monthrange(year, month)[1])
    return date(year, month, day)


def months_difference(start: date, end: date) -> int:
    months = (end.year - start.year) * 12 + (end.month - start.month)
    return max(0, months)


def format_percent(value: float, decimals: int = 2) -> str:
    return f"{value:.{decimals}f}%"


def format_months(months: int) -> str:
    """Describe a month count in years and months, e.g. ``2 years, 3 months``."""

    if months < 1:
        return "Less than 1 month"
    if months == 1:
        return "1 month"

    years, remaining = divmod(months, 12)
    if years == 0:
        return f"{months} months"

    year_str = "1 year" if years == 1 else f"{years} years"
    if remaining == 0:
        return year_str
    month_str = "1 month" if remaining == 1 else f"{remaining} months"
    return f"{year_str}, {month_str}"


__all__ = [
    "CURRENCY_SYMBOLS",
    "add_months",
    "format_currency",
    "format_date",
    "format_month_year",
    "format_months",
    "format_percent",
    "months_difference",
]
