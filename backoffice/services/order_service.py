"""
Order service - order entry and listing.

Line items are synchronised through the order line calculator so that
unit prices are snapshots taken when a product is selected on a line.
"""

import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

from flask import current_app
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import joinedload

from backoffice.models import Order, OrderItem, OrderStatus, Customer
from backoffice.exceptions import BusinessLogicError, ValidationError
from backoffice.services import order_line_service
from backoffice.services.order_line_service import LineState
from backoffice.services.product_service import get_product_price
from backoffice.services.validation_service import find_duplicate
from backoffice.services.trash_service import get_record_or_404
from backoffice.utils.query_helpers import apply_search, apply_sort

logger = logging.getLogger(__name__)

CENTS = Decimal('0.01')


def _max_number_attempts() -> int:
    try:
        return current_app.config.get('ORDER_NUMBER_MAX_ATTEMPTS', 10)
    except RuntimeError:
        # Outside an application context (CLI scripts, plain unit tests)
        return 10


def next_order_number(session) -> str:
    """Generate an order number not used by any order, trashed ones included."""
    return order_line_service.generate_order_number(
        exists=lambda number: find_duplicate(session, Order, 'number', number) is not None,
        max_attempts=_max_number_attempts()
    )


def _parse_status(value) -> OrderStatus:
    try:
        return OrderStatus(value or OrderStatus.PENDING.value)
    except ValueError:
        raise ValidationError({'status': 'Estado de pedido inválido'})


def _parse_shipping_price(value) -> Decimal:
    try:
        price = Decimal(str(value))
        if not price.is_finite():
            raise InvalidOperation
        price = price.quantize(CENTS)
    except (InvalidOperation, ValueError, TypeError):
        raise ValidationError({'shipping_price': 'Costo de envío inválido'})
    if price < 0:
        raise ValidationError({'shipping_price': 'El costo de envío no puede ser negativo'})
    return price


def _resolve_customer(session, customer_id) -> Customer:
    customer = None
    if customer_id:
        customer = session.query(Customer).filter(
            Customer.id == int(customer_id),
            Customer.deleted_at.is_(None)
        ).first()
    if not customer:
        raise ValidationError({'customer_id': 'El cliente es obligatorio'})
    return customer


def sync_order_items(session, order: Order, items_data: List[Dict[str, Any]]) -> None:
    """
    Apply the submitted repeater rows to order.items.

    - Rows with an id matching an existing line update it; a line keeps
      its unit_price unless its product changed.
    - Rows without id create new lines (price snapshot taken now).
    - Existing lines missing from the submission are removed.

    Raises:
        ValidationError: row without product, unknown product, bad quantity
            or the same existing line submitted twice
    """
    existing = {item.id: item for item in order.items if item.id is not None}
    kept = []
    seen_ids = set()
    errors = {}

    def price_lookup(product_id):
        return get_product_price(session, product_id)

    for index, row in enumerate(items_data):
        product_id = row.get('product_id')
        product_id = int(product_id) if product_id not in (None, '') else None

        try:
            quantity = order_line_service.parse_quantity(row.get('quantity', 1))
        except ValidationError:
            errors[f'items-{index}-quantity'] = 'La cantidad debe ser un entero no negativo'
            continue

        if product_id is None:
            errors[f'items-{index}-product_id'] = 'Selecciona un producto'
            continue

        item_id = row.get('id')
        item_id = int(item_id) if item_id not in (None, '') else None
        if item_id is not None:
            if item_id in seen_ids:
                errors[f'items-{index}-id'] = 'La línea está repetida'
                continue
            seen_ids.add(item_id)
        item = existing.get(item_id) if item_id is not None else None
        if item is None:
            item = OrderItem(quantity=quantity, unit_price=Decimal('0.00'))
            order.items.append(item)

        if item.product_id != product_id:
            price = price_lookup(product_id)
            if price is None:
                errors[f'items-{index}-product_id'] = 'El producto no existe'
                continue
            state = LineState(item.product_id, quantity, item.unit_price or Decimal('0.00'))
            updates = order_line_service.on_product_selected(state, product_id, lambda _: price)
            item.product_id = updates['product_id']
            item.unit_price = updates['unit_price']

        state = LineState(item.product_id, item.quantity, item.unit_price)
        item.quantity = order_line_service.on_quantity_changed(state, quantity)['quantity']
        kept.append(item)

    if errors:
        raise ValidationError(errors)

    for item in list(order.items):
        if item not in kept:
            order.items.remove(item)


def create_order(session, data: Dict[str, Any]) -> Order:
    """
    Create an order with its line items.

    The number is generated here and is never touched again; any number
    sent by the client is ignored.
    """
    order = Order(
        number=next_order_number(session),
        customer=_resolve_customer(session, data.get('customer_id')),
        status=_parse_status(data.get('status')),
        shipping_price=_parse_shipping_price(data.get('shipping_price', 0)),
        notes=data.get('notes'),
    )
    session.add(order)
    sync_order_items(session, order, data.get('items') or [])

    try:
        session.flush()
    except IntegrityError:
        session.rollback()
        raise BusinessLogicError('No se pudo crear el pedido.')

    logger.info(f"Order created: id={order.id} number={order.number} items={len(order.items)} total={order.total_price}")
    return order


def update_order(session, order_id: int, data: Dict[str, Any]) -> Order:
    """Update an order. The number is immutable."""
    order = get_order_or_404(session, order_id)

    if 'customer_id' in data:
        order.customer = _resolve_customer(session, data['customer_id'])
    if 'status' in data:
        order.status = _parse_status(data['status'])
    if 'shipping_price' in data:
        order.shipping_price = _parse_shipping_price(data['shipping_price'])
    if 'notes' in data:
        order.notes = data['notes']
    if 'items' in data:
        sync_order_items(session, order, data['items'] or [])

    session.flush()
    return order


def get_order_or_404(session, order_id: int, with_trashed: bool = False) -> Order:
    return get_record_or_404(session, Order, order_id, with_trashed=with_trashed, label='Pedido')


SORTABLE = {
    'number': Order.number,
    'customer': Customer.name,
    'status': Order.status,
    'created_at': Order.created_at,
}


def list_orders(
    session,
    search: Optional[str] = None,
    status: Optional[str] = None,
    sort: str = 'created_at',
    direction: str = 'desc',
    trashed: str = 'without'
) -> Dict[str, Any]:
    """
    Orders with their totals computed in SQL.

    Returns:
        dict with:
            - rows: list of (Order, total_price Decimal)
            - grand_total: sum of the listed order totals
    """
    totals = session.query(
        OrderItem.order_id.label('order_id'),
        func.sum(OrderItem.quantity * OrderItem.unit_price).label('total')
    ).group_by(OrderItem.order_id).subquery()

    query = session.query(
        Order,
        func.coalesce(totals.c.total, 0).label('total_price')
    ).join(
        Customer, Order.customer_id == Customer.id
    ).outerjoin(
        totals, totals.c.order_id == Order.id
    ).options(joinedload(Order.customer))

    query = Order.apply_trashed_filter(query, trashed)
    query = apply_search(query, [Order.number, Customer.name], search)
    if status:
        query = query.filter(Order.status == _parse_status(status))
    query = apply_sort(query, sort, direction, SORTABLE, default='created_at')

    rows = []
    grand_total = Decimal('0.00')
    for order, total in query.all():
        total = Decimal(str(total or 0)).quantize(CENTS)
        rows.append((order, total))
        grand_total += total

    return {'rows': rows, 'grand_total': grand_total.quantize(CENTS)}
