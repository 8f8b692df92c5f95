"""
Unit tests for line item arithmetic.
"""

from decimal import Decimal

from bizhub.services.pricing import (
    DEFAULT_TAX_RATE, calculate_totals, coerce_price, coerce_quantity, derive_tax_rate,
    line_total, normalize_line_item, normalize_line_items, present_rate, present_totals, round_money
)


class TestCoercion:
    """Invalid numeric input counts as zero instead of raising."""

    def test_valid_numbers(self):
        assert coerce_quantity('2') == Decimal('2')
        assert coerce_price(100.5) == Decimal('100.5')
        assert coerce_price(Decimal('50.50')) == Decimal('50.50')

    def test_comma_decimal_separator(self):
        assert coerce_price('12,5') == Decimal('12.5')

    def test_invalid_input_is_zero(self):
        for value in (None, '', 'abc', '1.2.3', [], 'NaN', 'Infinity', True):
            assert coerce_quantity(value) == Decimal('0')

    def test_negative_input_is_zero(self):
        assert coerce_quantity(-1) == Decimal('0')
        assert coerce_price('-20.00') == Decimal('0')


class TestLineItems:
    """Tests for line item normalization."""

    def test_missing_id_gets_position_id(self):
        item = normalize_line_item({'name': 'Paint', 'quantity': '3', 'unit_price': '10'}, 2)
        assert item['id'] == 'item2'
        assert item['name'] == 'Paint'
        assert item['description'] == ''

    def test_short_keys_are_accepted(self):
        item = normalize_line_item({'id': 'x', 'qty': 2, 'price': '9.99'}, 1)
        assert item['quantity'] == '2'
        assert item['unit_price'] == '9.99'

    def test_order_is_preserved(self):
        raw = [{'name': 'c'}, {'name': 'a'}, {'name': 'b'}]
        assert [item['name'] for item in normalize_line_items(raw)] == ['c', 'a', 'b']

    def test_json_string_input(self):
        items = normalize_line_items('[{"name": "Bricks", "quantity": 100, "unit_price": 2.5}]')
        assert len(items) == 1
        assert line_total(items[0]) == Decimal('250.0')

    def test_unparseable_input_gives_empty_list(self):
        assert normalize_line_items('not json') == []
        assert normalize_line_items(None) == []
        assert normalize_line_items({'name': 'x'}) == []


class TestTotals:
    """Tests for quote totals."""

    def test_vat_scenario(self):
        items = [{'quantity': 2, 'unit_price': '100.00'}, {'quantity': 1, 'unit_price': '50.50'}]
        totals = calculate_totals(items, 15)

        assert totals['subtotal'] == Decimal('250.50')
        assert totals['tax_amount'] == Decimal('37.575')
        assert totals['total'] == totals['subtotal'] + totals['tax_amount']
        assert round_money(totals['tax_amount']) == Decimal('37.58')
        assert round_money(totals['total']) == Decimal('288.08')

    def test_presented_totals(self):
        items = [{'quantity': 2, 'unit_price': '100.00'}, {'quantity': 1, 'unit_price': '50.50'}]
        shown = present_totals(calculate_totals(items, 15))
        assert shown == {'subtotal': '250.50', 'tax_rate': '15', 'tax_amount': '37.58', 'total': '288.08'}

    def test_empty_items(self):
        totals = calculate_totals([], 15)
        assert totals['subtotal'] == 0
        assert totals['tax_amount'] == 0
        assert totals['total'] == 0

    def test_default_rate(self):
        totals = calculate_totals([{'quantity': 1, 'unit_price': 100}])
        assert totals['tax_rate'] == DEFAULT_TAX_RATE
        assert totals['total'] == Decimal('115')

    def test_bad_lines_count_as_zero(self):
        items = [{'quantity': 'x', 'unit_price': 10}, {'quantity': 1, 'unit_price': -5}, {'quantity': 1, 'unit_price': 10}]
        assert calculate_totals(items, 0)['total'] == Decimal('10')


class TestDerivedTaxRate:

    def test_rate_recovered_from_stored_columns(self):
        assert derive_tax_rate(Decimal('250.5000'), Decimal('37.5750')) == Decimal('15.00')

    def test_zero_subtotal_uses_default(self):
        assert derive_tax_rate(0, 0) == DEFAULT_TAX_RATE
        assert derive_tax_rate(0, 0, default=Decimal('14')) == Decimal('14')

    def test_rate_with_three_decimals_is_not_rounded(self):
        stored = calculate_totals([{'quantity': 1, 'unit_price': 1000000}], '7.125')
        assert stored['tax_amount'] == Decimal('71250')

        rate = derive_tax_rate(stored['subtotal'], stored['tax_amount'])

        assert rate == Decimal('7.125')
        recomputed = calculate_totals([{'quantity': 1, 'unit_price': 1000000}], rate)
        assert recomputed['tax_amount'] == stored['tax_amount']
        assert recomputed['total'] == stored['total']

    def test_presented_rate(self):
        assert present_rate(Decimal('15.00')) == '15'
        assert present_rate(Decimal('7.125')) == '7.125'
        assert present_rate(Decimal('10')) == '10'
        assert present_rate(Decimal('100') / Decimal('3')) == '33.3333'


def test_round_money_half_up():
    assert round_money(Decimal('0.005')) == Decimal('0.01')
    assert round_money('2.675') == Decimal('2.68')
    assert round_money(None) == Decimal('0.00')
