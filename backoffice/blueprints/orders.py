"""
Orders blueprint - order entry, listing and the live line-item endpoints.

The live endpoints are called by the order form while it is being filled:
they take the current line values and return the fields to update. Nothing
is persisted until the form is submitted.
"""
from flask import Blueprint, request, current_app
from typing import Any, Dict, Tuple
from backoffice.database import get_session
from backoffice.exceptions import BusinessLogicError, NotFoundError, ValidationError
from backoffice.forms.order_forms import OrderForm
from backoffice.models import Order, OrderStatus, TRASHED_FILTERS
from backoffice.services import order_service, trash_service
from backoffice.services.order_line_service import (
    LineState, on_product_selected, on_quantity_changed, parse_quantity, parse_unit_price,
    recompute_order_total, line_total
)
from backoffice.services.product_service import get_product_price
from backoffice.blueprints.metrics import orders_created_total
from backoffice.utils.serializers import money, order_to_dict

orders_bp = Blueprint('orders', __name__, url_prefix='/orders')


def _get_order_data_from_form(form: OrderForm) -> Dict[str, Any]:
    """Order details plus one dict per repeater row (id, product_id, quantity)."""
    return {
        'customer_id': form.customer_id.data,
        'status': form.status.data,
        'shipping_price': form.shipping_price.data,
        'notes': (form.notes.data or '').strip() or None,
        'items': [dict(entry.data) for entry in form.items.entries],
    }


def _validated_form() -> OrderForm:
    form = OrderForm()
    if not form.validate_on_submit():
        raise ValidationError(form.errors)
    return form


def _payload() -> Dict[str, Any]:
    return request.get_json(silent=True) or request.form.to_dict()


def _optional_id(value):
    try:
        return int(value) if value not in (None, '') else None
    except (TypeError, ValueError):
        return None


@orders_bp.route('/', methods=['GET'])
def list_orders() -> Dict[str, Any]:
    """
    List orders with per-order totals and the grand total of the listing.

    Query params: q, status, sort, direction, trashed.
    """
    session = get_session()
    trashed = request.args.get('trashed', 'without')
    listing = order_service.list_orders(
        session,
        search=request.args.get('q'),
        status=request.args.get('status') or None,
        sort=request.args.get('sort', 'created_at'),
        direction=request.args.get('direction', 'desc'),
        trashed=trashed if trashed in TRASHED_FILTERS else 'without'
    )
    return {
        'results': [order_to_dict(order, total_price=total, with_items=False) for order, total in listing['rows']],
        'grand_total': money(listing['grand_total']),
    }


@orders_bp.route('/statuses', methods=['GET'])
def list_statuses() -> Dict[str, Any]:
    return {'statuses': [status.value for status in OrderStatus]}


@orders_bp.route('/<int:order_id>', methods=['GET'])
def view_order(order_id: int) -> Dict[str, Any]:
    session = get_session()
    return order_to_dict(order_service.get_order_or_404(session, order_id, with_trashed=True))


@orders_bp.route('/new', methods=['POST'])
def create_order() -> Tuple[Dict[str, Any], int]:
    """Create an order; the number is generated server-side."""
    session = get_session()
    data = _get_order_data_from_form(_validated_form())

    try:
        order = order_service.create_order(session, data)
        session.commit()
        orders_created_total.inc()
        current_app.logger.info(f"Order {order.number} created with {len(order.items)} items")
        return order_to_dict(order), 201
    except (BusinessLogicError, NotFoundError) as e:
        session.rollback()
        raise e
    except Exception as e:
        session.rollback()
        current_app.logger.error(f"Error creating order: {e}")
        raise BusinessLogicError(f'Error al crear pedido: {str(e)}')


@orders_bp.route('/<int:order_id>/edit', methods=['POST'])
def update_order(order_id: int) -> Dict[str, Any]:
    """Update an order; the submitted rows replace the current items."""
    session = get_session()
    data = _get_order_data_from_form(_validated_form())

    try:
        order = order_service.update_order(session, order_id, data)
        session.commit()
        return order_to_dict(order)
    except (BusinessLogicError, NotFoundError) as e:
        session.rollback()
        raise e
    except Exception as e:
        session.rollback()
        current_app.logger.error(f"Error updating order {order_id}: {e}")
        raise BusinessLogicError(f'Error al actualizar pedido: {str(e)}')


@orders_bp.route('/<int:order_id>/delete', methods=['POST'])
def delete_order(order_id: int) -> Dict[str, Any]:
    session = get_session()
    order = trash_service.delete_record(session, Order, order_id, label='Pedido')
    session.commit()
    return order_to_dict(order)


@orders_bp.route('/<int:order_id>/restore', methods=['POST'])
def restore_order(order_id: int) -> Dict[str, Any]:
    session = get_session()
    order = trash_service.restore_record(session, Order, order_id, label='Pedido')
    session.commit()
    return order_to_dict(order)


@orders_bp.route('/bulk-delete', methods=['POST'])
def bulk_delete_orders() -> Dict[str, Any]:
    session = get_session()
    ids = request.form.getlist('ids', type=int) or (request.get_json(silent=True) or {}).get('ids', [])
    deleted = trash_service.bulk_delete(session, Order, ids)
    session.commit()
    return {'deleted': deleted}


# =====================================================
# LIVE LINE-ITEM ENDPOINTS
# =====================================================

@orders_bp.route('/items/product-selected', methods=['POST'])
def item_product_selected() -> Dict[str, Any]:
    """
    A product was picked on a line.

    Body: product_id, quantity (default 1).
    Returns the snapshotted unit_price and the new line total.
    """
    session = get_session()
    payload = _payload()
    line = LineState(quantity=parse_quantity(payload.get('quantity', 1)))

    updates = on_product_selected(
        line,
        _optional_id(payload.get('product_id')),
        lambda product_id: get_product_price(session, product_id)
    )
    return {
        'product_id': updates['product_id'],
        'unit_price': money(updates['unit_price']),
        'total_price': money(updates['total_price']),
    }


@orders_bp.route('/items/quantity-changed', methods=['POST'])
def item_quantity_changed() -> Dict[str, Any]:
    """
    The quantity of a line changed.

    Body: quantity, unit_price (the line's current snapshot).
    Responds 422 for negative or non-integer quantities and for unit
    prices that are not finite non-negative amounts.
    """
    payload = _payload()
    line = LineState(
        product_id=_optional_id(payload.get('product_id')),
        unit_price=parse_unit_price(payload.get('unit_price'))
    )
    updates = on_quantity_changed(line, payload.get('quantity'))
    return {
        'quantity': updates['quantity'],
        'total_price': money(updates['total_price']),
    }


@orders_bp.route('/summary', methods=['POST'])
def order_summary() -> Dict[str, Any]:
    """
    Totals for the lines currently on the form.

    Body: {"items": [{"quantity": ..., "unit_price": ...}, ...]}
    """
    payload = request.get_json(silent=True)
    items = payload.get('items') if isinstance(payload, dict) else None
    if items is None:
        items = []
    if not isinstance(items, list) or not all(isinstance(item, dict) for item in items):
        raise ValidationError({'items': 'Formato de ítems inválido'})

    lines = [
        {'quantity': parse_quantity(item.get('quantity', 1)), 'unit_price': parse_unit_price(item.get('unit_price'))}
        for item in items
    ]
    return {
        'line_totals': [money(line_total(line['quantity'], line['unit_price'])) for line in lines],
        'total_price': money(recompute_order_total(lines)),
    }
