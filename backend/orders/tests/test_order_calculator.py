"""
Order Total Calculator Tests

Subtotal/discount/total arithmetic, the settlement conversion and the
provider minimum check.

Run with: pytest backend/orders/tests/test_order_calculator.py -v
"""
import pytest
from decimal import Decimal

from core_backend.config import PaymentPolicy
from orders.calculators import CartLine, OrderTotalCalculator

USD = PaymentPolicy(
    display_currency="USD",
    settlement_currency="USD",
    exchange_rate=Decimal("1"),
    min_charge_minor=50,
)
PKR_TO_USD = PaymentPolicy(
    display_currency="PKR",
    settlement_currency="USD",
    exchange_rate=Decimal("0.0036"),
    min_charge_minor=50,
)


def lines(*pairs):
    return [
        CartLine(product_id=i, name=f"Item {i}", unit_price_cents=price, quantity=qty)
        for i, (price, qty) in enumerate(pairs, start=1)
    ]


class TestCartLine:

    def test_line_total(self):
        assert CartLine(1, "Burger", 4000, 3).line_total_cents == 12000

    def test_zero_quantity_rejected(self):
        with pytest.raises(ValueError):
            CartLine(1, "Burger", 4000, 0)

    def test_negative_price_rejected(self):
        with pytest.raises(ValueError):
            CartLine(1, "Burger", -1, 1)


class TestOrderTotalCalculator:

    def test_subtotal_is_sum_of_lines(self):
        calc = OrderTotalCalculator(lines((4000, 2), (1500, 1), (500, 3)), policy=USD)
        assert calc.calculate_subtotal() == 11000

    def test_total_is_subtotal_minus_discount(self):
        totals = OrderTotalCalculator(lines((4000, 3)), discount_cents=2400, policy=USD).calculate()

        assert totals.subtotal_cents == 12000
        assert totals.discount_cents == 2400
        assert totals.total_cents == 9600
        assert totals.settlement_amount_cents == 9600

    def test_discount_is_clamped_to_subtotal(self):
        totals = OrderTotalCalculator(lines((500, 1)), discount_cents=1000, policy=USD).calculate()

        assert totals.discount_cents == 500
        assert totals.total_cents == 0

    def test_negative_discount_rejected(self):
        with pytest.raises(ValueError):
            OrderTotalCalculator(lines((500, 1)), discount_cents=-1, policy=USD)

    def test_line_totals_follow_input_order(self):
        totals = OrderTotalCalculator(lines((100, 2), (250, 1)), policy=USD).calculate()
        assert totals.line_totals == [200, 250]

    def test_below_minimum_is_flagged_not_raised(self):
        """A 0.30 total against a 0.50 provider minimum."""
        totals = OrderTotalCalculator(lines((100, 1)), discount_cents=70, policy=USD).calculate()

        assert totals.total_cents == 30
        assert totals.meets_minimum is False

    def test_exactly_minimum_is_accepted(self):
        totals = OrderTotalCalculator(lines((50, 1)), policy=USD).calculate()
        assert totals.meets_minimum is True

    def test_settlement_conversion(self):
        """Rs 9,600.00 at 0.0036 settles as $34.56."""
        totals = OrderTotalCalculator(
            lines((400000, 3)), discount_cents=240000, policy=PKR_TO_USD
        ).calculate()

        assert totals.total_cents == 960000
        assert totals.display_currency == "PKR"
        assert totals.settlement_currency == "USD"
        assert totals.settlement_amount_cents == 3456

    def test_minimum_is_checked_in_settlement_currency(self):
        """Rs 120.00 is well above 50 paisa but only $0.43 once converted."""
        totals = OrderTotalCalculator(lines((12000, 1)), policy=PKR_TO_USD).calculate()

        assert totals.settlement_amount_cents == 43
        assert totals.meets_minimum is False

    def test_policy_comes_from_settings(self, settings):
        settings.DISPLAY_CURRENCY = "EUR"
        settings.SETTLEMENT_CURRENCY = "EUR"
        settings.SETTLEMENT_EXCHANGE_RATE = "1"

        totals = OrderTotalCalculator(lines((1000, 1))).calculate()

        assert totals.display_currency == "EUR"

    def test_as_dict(self):
        data = OrderTotalCalculator(lines((1000, 1)), discount_cents=100, policy=USD).calculate().as_dict()

        assert data == {
            "subtotal_cents": 1000,
            "discount_cents": 100,
            "total_cents": 900,
            "currency": "USD",
            "settlement_currency": "USD",
            "settlement_amount_cents": 900,
            "exchange_rate": "1",
            "meets_minimum": True,
        }
