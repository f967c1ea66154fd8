"""
Unit tests for SQLAlchemy models.
"""

import pytest
from decimal import Decimal
from sqlalchemy.exc import IntegrityError
from backoffice.models import Brand, Category, Order, OrderItem, OrderStatus


class TestOrderModel:
    """Tests for Order / OrderItem."""

    def test_item_total_is_derived(self):
        item = OrderItem(quantity=3, unit_price=Decimal('2.50'))
        assert item.total_price == Decimal('7.50')

    def test_order_total_excludes_shipping(self, session, customer, product, second_product):
        order = Order(number='OR-123456', customer=customer, shipping_price=Decimal('9.99'))
        order.items.append(OrderItem(product=product, quantity=2, unit_price=Decimal('10.00')))
        order.items.append(OrderItem(product=second_product, quantity=1, unit_price=Decimal('5.50')))
        session.add(order)
        session.commit()

        assert order.status == OrderStatus.PENDING
        assert order.total_price == Decimal('25.50')

    def test_removing_an_item_deletes_it(self, session, customer, product):
        order = Order(number='OR-654321', customer=customer)
        order.items.append(OrderItem(product=product, quantity=1, unit_price=Decimal('10.00')))
        session.add(order)
        session.commit()

        order.items.clear()
        session.commit()

        assert session.query(OrderItem).count() == 0

    def test_order_number_unique(self, session, customer):
        session.add(Order(number='OR-100001', customer=customer))
        session.commit()

        session.add(Order(number='OR-100001', customer=customer))
        with pytest.raises(IntegrityError):
            session.commit()


class TestSoftDelete:

    def test_soft_delete_and_restore(self, session, brand):
        brand.soft_delete()
        session.commit()
        assert brand.is_trashed

        assert Brand.apply_trashed_filter(session.query(Brand), 'without').count() == 0
        assert Brand.apply_trashed_filter(session.query(Brand), 'only').count() == 1
        assert Brand.apply_trashed_filter(session.query(Brand), 'with').count() == 1

        brand.restore()
        session.commit()
        assert not brand.is_trashed


class TestCategoryModel:

    def test_parent_and_children(self, session, category):
        child = Category(name='Running', slug='running', parent=category)
        session.add(child)
        session.commit()

        assert child.parent_id == category.id
        assert category.children == [child]
