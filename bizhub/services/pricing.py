"""
Line item arithmetic shared by quotes and sales.

Totals are accumulated at full Decimal precision; rounding to cents only
happens when a value is presented (PDF, JSON payloads).
"""
import json
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Dict, Iterable, List, Optional, Union

DEFAULT_TAX_RATE = Decimal('15')  # South African VAT
CENT = Decimal('0.01')
RATE_PLACES = Decimal('0.0001')

Number = Union[int, float, Decimal, str, None]


def _to_decimal(value: Number) -> Decimal:
    """Parse user input into a non-negative Decimal; anything invalid becomes 0."""
    if value is None or isinstance(value, bool):
        return Decimal('0')
    try:
        if isinstance(value, float):
            number = Decimal(str(value))
        elif isinstance(value, str):
            cleaned = value.strip().replace(',', '.')
            number = Decimal(cleaned) if cleaned else Decimal('0')
        else:
            number = Decimal(value)
    except (InvalidOperation, ValueError, TypeError):
        return Decimal('0')

    if not number.is_finite() or number < 0:
        return Decimal('0')
    return number


def coerce_quantity(value: Number) -> Decimal:
    """Quantity multiplier; a bad keystroke counts as 0 instead of raising."""
    return _to_decimal(value)


def coerce_price(value: Number) -> Decimal:
    """Unit price in currency units; invalid or negative input counts as 0."""
    return _to_decimal(value)


def round_money(value: Number) -> Decimal:
    """Presentation rounding to 2 decimal places (half up)."""
    if value is None or value == '':
        return Decimal('0.00')
    try:
        number = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        return Decimal('0.00')
    return number.quantize(CENT, rounding=ROUND_HALF_UP)


def coerce_tax_rate(value: Number, default: Decimal = DEFAULT_TAX_RATE) -> Decimal:
    """Tax rate percentage; missing input falls back to the default rate."""
    if value is None or value == '':
        return Decimal(default)
    return _to_decimal(value)


def normalize_line_item(raw: Dict[str, Any], position: int) -> Dict[str, Any]:
    """
    Normalize one LineItem coming from a form or from storage.

    Accepts both `unit_price` and the shorter `price` key. The returned
    dict keeps numbers as strings so it can go straight into a JSON column.
    """
    raw = raw or {}
    item_id = raw.get('id')
    if item_id in (None, ''):
        item_id = f"item{position}"

    quantity = coerce_quantity(raw.get('quantity', raw.get('qty')))
    unit_price = coerce_price(raw.get('unit_price', raw.get('price')))

    return {
        'id': str(item_id),
        'name': (raw.get('name') or '').strip(),
        'description': (raw.get('description') or '').strip(),
        'quantity': str(quantity),
        'unit_price': str(unit_price),
    }


def normalize_line_items(raw_items: Union[str, Iterable[Dict[str, Any]], None]) -> List[Dict[str, Any]]:
    """
    Normalize an ordered list of line items.

    `raw_items` may be a list or the JSON-encoded array stored by older
    records. Order is preserved; synthetic ids are assigned by position.
    """
    if raw_items is None or raw_items == '':
        return []
    if isinstance(raw_items, str):
        try:
            raw_items = json.loads(raw_items)
        except ValueError:
            return []
    if not isinstance(raw_items, (list, tuple)):
        return []
    return [normalize_line_item(item, index) for index, item in enumerate(raw_items, start=1)]


def line_total(item: Dict[str, Any]) -> Decimal:
    """quantity * unit_price at full precision."""
    return coerce_quantity(item.get('quantity', item.get('qty'))) * coerce_price(item.get('unit_price', item.get('price')))


def calculate_subtotal(items: Iterable[Dict[str, Any]]) -> Decimal:
    return sum((line_total(item) for item in items), Decimal('0'))


def calculate_totals(items: Iterable[Dict[str, Any]], tax_rate: Number = None) -> Dict[str, Decimal]:
    """
    Compute quote totals from an ordered list of line items.

    Args:
        items: LineItem dicts (raw or normalized)
        tax_rate: Percentage (15 means 15%); defaults to DEFAULT_TAX_RATE

    Returns:
        dict with subtotal, tax_rate, tax_amount, total (unrounded Decimals)
    """
    rate = coerce_tax_rate(tax_rate)
    subtotal = calculate_subtotal(items)
    tax_amount = subtotal * rate / Decimal('100')
    return {
        'subtotal': subtotal,
        'tax_rate': rate,
        'tax_amount': tax_amount,
        'total': subtotal + tax_amount,
    }


def derive_tax_rate(subtotal: Number, vat: Number, default: Optional[Decimal] = None) -> Decimal:
    """
    Recover the tax rate of a stored quote from its subtotal and VAT columns.

    The rate is kept at full precision so recomputing VAT with it gives back
    the stored amount; only `present_totals` shortens it.
    """
    default = DEFAULT_TAX_RATE if default is None else Decimal(default)
    subtotal = _to_decimal(subtotal)
    vat = _to_decimal(vat)
    if subtotal == 0:
        return default
    return vat * Decimal('100') / subtotal


def present_rate(rate: Decimal) -> str:
    """Tax rate for labels: up to 4 decimals, trailing zeros dropped (15, 7.125)."""
    shown = Decimal(rate).quantize(RATE_PLACES, rounding=ROUND_HALF_UP).normalize()
    return f"{shown:f}"


def present_totals(totals: Dict[str, Decimal]) -> Dict[str, str]:
    """Totals rounded for display, as strings with exactly 2 decimals."""
    return {
        'subtotal': f"{round_money(totals['subtotal']):.2f}",
        'tax_rate': present_rate(totals['tax_rate']),
        'tax_amount': f"{round_money(totals['tax_amount']):.2f}",
        'total': f"{round_money(totals['total']):.2f}",
    }
