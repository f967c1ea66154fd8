"""
Order line calculator.

Pure helpers invoked by the order form on field-change events. Each
handler takes an immutable snapshot of the line and returns the field
updates to apply; nothing here touches the database.
"""

import secrets
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Dict, Iterable, NamedTuple, Optional

from backoffice.exceptions import BusinessLogicError, ValidationError

CENTS = Decimal('0.01')
ZERO = Decimal('0.00')

ORDER_NUMBER_PREFIX = 'OR-'
ORDER_NUMBER_MIN = 100000
ORDER_NUMBER_MAX = 9999999


class LineState(NamedTuple):
    """Snapshot of one repeater row as the form currently shows it."""
    product_id: Optional[int] = None
    quantity: int = 1
    unit_price: Decimal = ZERO


def _to_money(value) -> Decimal:
    """Non-negative amount rounded to cents; anything else counts as 0."""
    if value is None or value == '':
        return ZERO
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return ZERO
    if not amount.is_finite() or amount < 0:
        return ZERO
    return amount.quantize(CENTS)


def parse_unit_price(value) -> Decimal:
    """
    Validate a unit price sent back by the form.

    Blank means the line has no product yet (0).

    Raises:
        ValidationError: non-numeric, NaN/Infinity or negative input.
    """
    if value is None or value == '':
        return ZERO
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError({'unit_price': 'Precio unitario inválido.'})
    if not amount.is_finite():
        raise ValidationError({'unit_price': 'Precio unitario inválido.'})
    if amount < 0:
        raise ValidationError({'unit_price': 'El precio unitario no puede ser negativo.'})
    return amount.quantize(CENTS)


def line_total(quantity, unit_price) -> Decimal:
    """quantity * unit_price, rounded to cents. Missing values count as 0."""
    qty = int(quantity or 0)
    return (qty * _to_money(unit_price)).quantize(CENTS)


def parse_quantity(value) -> int:
    """
    Validate a quantity coming from the form.

    Accepts non-negative integers (or their string form, "3" / "3.0").
    There is no upper bound on order quantities.

    Raises:
        ValidationError: negative, fractional or non-numeric input.
    """
    if isinstance(value, bool):
        raise ValidationError({'quantity': 'La cantidad debe ser un número entero.'})
    try:
        number = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError({'quantity': 'La cantidad debe ser un número entero.'})

    if not number.is_finite() or number != number.to_integral_value():
        raise ValidationError({'quantity': 'La cantidad debe ser un número entero.'})
    if number < 0:
        raise ValidationError({'quantity': 'La cantidad no puede ser negativa.'})
    return int(number)


def on_product_selected(
    line: LineState,
    product_id: Optional[int],
    price_lookup: Callable[[int], Optional[Decimal]]
) -> Dict[str, Any]:
    """
    Snapshot the selected product's price into the line.

    The lookup runs once, here. Later price changes on the product must
    not reach lines that already hold a unit price.

    Args:
        line: Current row state
        product_id: Newly selected product (None/empty clears the row)
        price_lookup: Returns the product price, or None if it doesn't exist

    Returns:
        dict with product_id, unit_price and total_price
    """
    unit_price = ZERO
    if product_id:
        unit_price = _to_money(price_lookup(product_id))

    return {
        'product_id': product_id or None,
        'unit_price': unit_price,
        'total_price': line_total(line.quantity, unit_price),
    }


def on_quantity_changed(line: LineState, quantity) -> Dict[str, Any]:
    """Recompute the row total for a new quantity."""
    qty = parse_quantity(quantity)
    return {
        'quantity': qty,
        'total_price': line_total(qty, line.unit_price),
    }


def _line_values(line) -> tuple:
    if isinstance(line, dict):
        return line.get('quantity'), line.get('unit_price')
    return line.quantity, line.unit_price


def recompute_order_total(lines: Iterable) -> Decimal:
    """
    Order total: sum of every line total.

    Lines may be LineState tuples, OrderItem rows or dicts with quantity and
    unit_price. Rows without a product contribute 0.
    """
    total = ZERO
    for line in lines:
        quantity, unit_price = _line_values(line)
        total += line_total(quantity, unit_price)
    return total.quantize(CENTS)


def generate_order_number(exists: Optional[Callable[[str], bool]] = None, max_attempts: int = 10) -> str:
    """
    Generate an order number of the form OR-<6-7 digit integer>.

    Without `exists` the value is random but unchecked. With it, numbers
    already in use are skipped.

    Raises:
        BusinessLogicError: no free number found within max_attempts.
    """
    span = ORDER_NUMBER_MAX - ORDER_NUMBER_MIN + 1
    for _ in range(max(1, max_attempts)):
        number = f"{ORDER_NUMBER_PREFIX}{ORDER_NUMBER_MIN + secrets.randbelow(span)}"
        if exists is None or not exists(number):
            return number

    raise BusinessLogicError('No se pudo generar un número de pedido único. Intenta de nuevo.', status_code=409)
