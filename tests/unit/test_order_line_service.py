"""
Unit tests for the order line calculator.
"""

import random
import re
import pytest
from decimal import Decimal

from backoffice.exceptions import BusinessLogicError, ValidationError
from backoffice.services.order_line_service import (
    LineState, line_total, parse_quantity, parse_unit_price, on_product_selected, on_quantity_changed,
    recompute_order_total, generate_order_number
)

PRICES = {1: Decimal('10.00'), 2: Decimal('5.50'), 3: Decimal('0.99'), 4: Decimal('999999.99')}


def lookup(product_id):
    return PRICES.get(product_id)


class TestProductSelected:
    """Tests for on_product_selected."""

    @pytest.mark.parametrize('product_id', sorted(PRICES))
    @pytest.mark.parametrize('quantity', [0, 1, 3, 250])
    def test_total_is_quantity_times_price(self, product_id, quantity):
        updates = on_product_selected(LineState(quantity=quantity), product_id, lookup)

        assert updates['unit_price'] == PRICES[product_id]
        assert updates['total_price'] == (quantity * PRICES[product_id]).quantize(Decimal('0.01'))

    def test_missing_product_gives_zero(self):
        updates = on_product_selected(LineState(quantity=4), 99, lookup)

        assert updates['unit_price'] == Decimal('0.00')
        assert updates['total_price'] == Decimal('0.00')

    def test_cleared_product(self):
        updates = on_product_selected(LineState(product_id=1, quantity=2, unit_price=Decimal('10.00')), None, lookup)

        assert updates == {'product_id': None, 'unit_price': Decimal('0.00'), 'total_price': Decimal('0.00')}

    def test_lookup_runs_once(self):
        calls = []

        def counting_lookup(product_id):
            calls.append(product_id)
            return Decimal('7.25')

        on_product_selected(LineState(quantity=2), 5, counting_lookup)
        assert calls == [5]


class TestQuantityChanged:
    """Tests for on_quantity_changed / parse_quantity."""

    def test_recomputes_total(self):
        line = LineState(product_id=1, quantity=1, unit_price=Decimal('10.00'))
        assert on_quantity_changed(line, 3) == {'quantity': 3, 'total_price': Decimal('30.00')}

    def test_string_quantity(self):
        line = LineState(product_id=2, quantity=1, unit_price=Decimal('5.50'))
        assert on_quantity_changed(line, '2')['total_price'] == Decimal('11.00')

    def test_no_upper_bound(self):
        line = LineState(product_id=1, quantity=1, unit_price=Decimal('10.00'))
        assert on_quantity_changed(line, 10000)['total_price'] == Decimal('100000.00')

    @pytest.mark.parametrize('value', [-1, '-3', '2.5', 'abc', '', None, True])
    def test_rejects_invalid_quantity(self, value):
        with pytest.raises(ValidationError) as exc_info:
            on_quantity_changed(LineState(unit_price=Decimal('1.00')), value)
        assert 'quantity' in exc_info.value.errors
        assert exc_info.value.status_code == 422

    def test_integral_decimal_string(self):
        assert parse_quantity('3.0') == 3


class TestOrderTotal:
    """Tests for recompute_order_total."""

    def test_two_lines_example(self):
        lines = [
            LineState(product_id=1, quantity=2, unit_price=Decimal('10.00')),
            LineState(product_id=2, quantity=1, unit_price=Decimal('5.50')),
        ]

        assert [line_total(line.quantity, line.unit_price) for line in lines] == [Decimal('20.00'), Decimal('5.50')]
        assert recompute_order_total(lines) == Decimal('25.50')

    def test_empty_order(self):
        assert recompute_order_total([]) == Decimal('0.00')

    def test_line_without_product_contributes_zero(self):
        lines = [LineState(), LineState(product_id=1, quantity=1, unit_price=Decimal('10.00'))]
        assert recompute_order_total(lines) == Decimal('10.00')

    def test_accepts_dicts(self):
        lines = [{'quantity': 2, 'unit_price': '1.25'}, {'quantity': 1, 'unit_price': None}]
        assert recompute_order_total(lines) == Decimal('2.50')

    @pytest.mark.parametrize('seed', range(20))
    def test_total_matches_line_sum_after_edits(self, seed):
        rng = random.Random(seed)
        lines = []

        for _ in range(40):
            action = rng.choice(['add', 'remove', 'select', 'quantity'])
            if action == 'add' or not lines:
                lines.append(LineState())
                continue

            index = rng.randrange(len(lines))
            line = lines[index]
            if action == 'remove':
                lines.pop(index)
            elif action == 'select':
                updates = on_product_selected(line, rng.choice([1, 2, 3, 4, 42]), lookup)
                lines[index] = line._replace(product_id=updates['product_id'], unit_price=updates['unit_price'])
            else:
                updates = on_quantity_changed(line, rng.randint(0, 500))
                lines[index] = line._replace(quantity=updates['quantity'])

        expected = sum((line.quantity * line.unit_price for line in lines), Decimal('0.00'))
        assert recompute_order_total(lines) == expected.quantize(Decimal('0.01'))

    @pytest.mark.parametrize('price', ['NaN', 'Infinity', '-Infinity', 'sNaN', '-5.00'])
    def test_unusable_price_counts_as_zero(self, price):
        assert line_total(2, price) == Decimal('0.00')

    def test_unusable_price_does_not_poison_total(self):
        lines = [{'quantity': 1, 'unit_price': 'NaN'}, {'quantity': 1, 'unit_price': '5.00'}]
        assert recompute_order_total(lines) == Decimal('5.00')


class TestUnitPrice:
    """Tests for parse_unit_price."""

    def test_blank_is_zero(self):
        assert parse_unit_price(None) == Decimal('0.00')
        assert parse_unit_price('') == Decimal('0.00')

    def test_rounds_to_cents(self):
        assert parse_unit_price('10.2') == Decimal('10.20')
        assert parse_unit_price(' 5.5 ') == Decimal('5.50')

    @pytest.mark.parametrize('value', ['NaN', 'Infinity', '-Infinity', 'abc', '-5.00', '-0.01'])
    def test_rejects_invalid_price(self, value):
        with pytest.raises(ValidationError) as exc:
            parse_unit_price(value)
        assert 'unit_price' in exc.value.errors


class TestOrderNumber:
    """Tests for generate_order_number."""

    def test_format_and_range(self):
        for _ in range(200):
            number = generate_order_number()
            assert re.fullmatch(r'OR-\d{6,7}', number)
            assert 100000 <= int(number[3:]) <= 9999999

    def test_skips_numbers_in_use(self):
        seen = []

        def exists(number):
            seen.append(number)
            return len(seen) < 3

        number = generate_order_number(exists=exists, max_attempts=5)

        assert len(seen) == 3
        assert number == seen[-1]

    def test_gives_up_after_max_attempts(self):
        with pytest.raises(BusinessLogicError) as exc_info:
            generate_order_number(exists=lambda number: True, max_attempts=3)
        assert exc_info.value.status_code == 409
