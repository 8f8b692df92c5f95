"""
Display formatting for money, quantities and dates.

Used by the quote PDF and the JSON payloads; values are rounded here and
nowhere else.
"""
from decimal import Decimal, InvalidOperation
from datetime import date, datetime
from typing import Union, Optional

from bizhub.services.pricing import round_money


def money(value: Union[int, float, Decimal, str, None], symbol: Optional[str] = 'R') -> str:
    """
    Format a currency amount with thousands separators and exactly 2 decimals.

    Examples:
        money(1234.5) -> "R 1,234.50"
        money(37.575) -> "R 37.58"
        money(None) -> "R 0.00"
        money(10, symbol=None) -> "10.00"
    """
    formatted = f"{round_money(value):,.2f}"
    return f"{symbol} {formatted}" if symbol else formatted


def quantity(value: Union[int, float, Decimal, str, None]) -> str:
    """
    Format a quantity, dropping the decimals of whole numbers.

    Examples:
        quantity(2) -> "2"
        quantity('1.50') -> "1.5"
        quantity('abc') -> "0"
    """
    if value is None or value == '':
        return '0'
    try:
        num = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        return '0'
    if num == num.to_integral_value():
        return str(num.to_integral_value())
    return f"{num.normalize():f}"


def date_iso(value: Union[date, datetime, None]) -> str:
    """Format a date as YYYY-MM-DD ("-" when empty)."""
    if value is None:
        return '-'
    if isinstance(value, datetime):
        value = value.date()
    return value.strftime('%Y-%m-%d')


def date_long(value: Union[date, datetime, None]) -> str:
    """Format a date for documents, e.g. "19 October 2026"."""
    if value is None:
        return '-'
    return f"{value.day} {value.strftime('%B %Y')}"
