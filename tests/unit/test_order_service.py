"""
Unit tests for order entry: numbering, price snapshots and item sync.
"""

import re
import pytest
from decimal import Decimal
from backoffice.exceptions import BusinessLogicError, ValidationError
from backoffice.models import Order, OrderItem, OrderStatus
from backoffice.services import order_service


@pytest.fixture
def order(session, customer, product, second_product):
    """Order with lines (2 x 10.00) and (1 x 5.50)."""
    order = order_service.create_order(session, {
        'customer_id': customer.id,
        'shipping_price': '4.99',
        'items': [
            {'product_id': product.id, 'quantity': 2},
            {'product_id': second_product.id, 'quantity': 1},
        ],
    })
    session.commit()
    return order


class TestCreateOrder:

    def test_number_and_totals(self, order):
        assert re.fullmatch(r'OR-\d{6,7}', order.number)
        assert order.status == OrderStatus.PENDING
        assert [item.unit_price for item in order.items] == [Decimal('10.00'), Decimal('5.50')]
        assert [item.total_price for item in order.items] == [Decimal('20.00'), Decimal('5.50')]
        assert order.total_price == Decimal('25.50')
        assert order.shipping_price == Decimal('4.99')

    def test_client_number_is_ignored(self, session, customer, product):
        order = order_service.create_order(session, {
            'customer_id': customer.id,
            'number': 'OR-1',
            'shipping_price': 0,
            'items': [{'product_id': product.id, 'quantity': 1}],
        })
        assert order.number != 'OR-1'

    def test_number_collision_is_retried(self, session, order, customer, monkeypatch):
        numbers = iter([order.number, 'OR-5555555'])
        monkeypatch.setattr(
            order_service.order_line_service.secrets, 'randbelow',
            lambda span: int(next(numbers)[3:]) - order_service.order_line_service.ORDER_NUMBER_MIN
        )

        second = order_service.create_order(session, {'customer_id': customer.id, 'shipping_price': 0})
        assert second.number == 'OR-5555555'

    def test_line_without_product(self, session, customer):
        with pytest.raises(ValidationError) as exc_info:
            order_service.create_order(session, {
                'customer_id': customer.id,
                'shipping_price': 0,
                'items': [{'product_id': None, 'quantity': 1}],
            })
        assert 'items-0-product_id' in exc_info.value.errors

    def test_unknown_product(self, session, customer):
        with pytest.raises(ValidationError) as exc_info:
            order_service.create_order(session, {
                'customer_id': customer.id,
                'shipping_price': 0,
                'items': [{'product_id': 999, 'quantity': 1}],
            })
        assert 'items-0-product_id' in exc_info.value.errors

    def test_customer_required(self, session):
        with pytest.raises(ValidationError) as exc_info:
            order_service.create_order(session, {'shipping_price': 0})
        assert 'customer_id' in exc_info.value.errors

    def test_negative_shipping(self, session, customer):
        with pytest.raises(ValidationError) as exc_info:
            order_service.create_order(session, {'customer_id': customer.id, 'shipping_price': '-1'})
        assert 'shipping_price' in exc_info.value.errors


class TestPriceSnapshot:

    def test_product_price_change_does_not_touch_lines(self, session, order, product):
        product.price = Decimal('99.00')
        session.commit()

        reloaded = session.get(Order, order.id)
        assert reloaded.items[0].unit_price == Decimal('10.00')
        assert reloaded.total_price == Decimal('25.50')

    def test_resubmitting_unchanged_lines_keeps_snapshot(self, session, order, product, second_product):
        product.price = Decimal('99.00')
        session.commit()

        items = [{'id': item.id, 'product_id': item.product_id, 'quantity': item.quantity} for item in order.items]
        order_service.update_order(session, order.id, {'items': items})
        session.commit()

        assert order.items[0].unit_price == Decimal('10.00')
        assert order.total_price == Decimal('25.50')

    def test_changing_product_takes_new_snapshot(self, session, order, product, second_product):
        first = order.items[0]
        second_product.price = Decimal('6.00')
        session.commit()

        order_service.update_order(session, order.id, {'items': [
            {'id': first.id, 'product_id': second_product.id, 'quantity': 2},
        ]})
        session.commit()

        assert len(order.items) == 1
        assert order.items[0].unit_price == Decimal('6.00')
        assert order.total_price == Decimal('12.00')


class TestUpdateOrder:

    def test_number_is_immutable(self, session, order):
        number = order.number
        order_service.update_order(session, order.id, {'number': 'OR-999999', 'status': 'processing'})
        session.commit()

        assert order.number == number
        assert order.status == OrderStatus.PROCESSING

    def test_removed_lines_are_deleted(self, session, order):
        keep = order.items[0]
        order_service.update_order(session, order.id, {'items': [
            {'id': keep.id, 'product_id': keep.product_id, 'quantity': 5},
        ]})
        session.commit()

        assert session.query(OrderItem).count() == 1
        assert order.total_price == Decimal('50.00')

    def test_invalid_status(self, session, order):
        with pytest.raises(ValidationError):
            order_service.update_order(session, order.id, {'status': 'shipped'})

    def test_same_line_twice_is_rejected(self, session, order):
        line = order.items[0]
        with pytest.raises(ValidationError) as exc:
            order_service.update_order(session, order.id, {'items': [
                {'id': line.id, 'product_id': line.product_id, 'quantity': 1},
                {'id': str(line.id), 'product_id': line.product_id, 'quantity': 7},
            ]})

        assert list(exc.value.errors) == ['items-1-id']

    @pytest.mark.parametrize('shipping_price', ['NaN', 'Infinity', '-1'])
    def test_invalid_shipping_price(self, session, order, shipping_price):
        with pytest.raises(ValidationError) as exc:
            order_service.update_order(session, order.id, {'shipping_price': shipping_price})
        assert 'shipping_price' in exc.value.errors


class TestListOrders:

    def test_totals_in_listing(self, session, order, customer, product):
        order_service.create_order(session, {
            'customer_id': customer.id,
            'shipping_price': 0,
            'items': [{'product_id': product.id, 'quantity': 3}],
        })
        session.commit()

        listing = order_service.list_orders(session)
        totals = sorted(total for _, total in listing['rows'])

        assert totals == [Decimal('25.50'), Decimal('30.00')]
        assert listing['grand_total'] == Decimal('55.50')

    def test_status_filter_and_search(self, session, order):
        assert order_service.list_orders(session, status='processing')['rows'] == []
        assert len(order_service.list_orders(session, search='ada')['rows']) == 1
        assert len(order_service.list_orders(session, search=order.number)['rows']) == 1

    def test_order_without_items(self, session, customer):
        order_service.create_order(session, {'customer_id': customer.id, 'shipping_price': 0})
        session.commit()

        listing = order_service.list_orders(session)
        assert listing['rows'][0][1] == Decimal('0.00')
