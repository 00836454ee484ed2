"""
Order total calculation.

The same calculator prices the cart-voucher preview and the final checkout,
so the amount a customer is shown and the amount they are charged cannot
drift apart. Everything is integer arithmetic in minor units; the single
place a rate is applied is the display -> settlement conversion, which uses
the banker's rounding of ``payments.money``.

Usage:
    from orders.calculators import CartLine, OrderTotalCalculator
    totals = OrderTotalCalculator(lines, discount_cents=2400).calculate()
    if not totals.meets_minimum:
        ...  # refuse to open a payment session
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional, Sequence

from core_backend.config import PaymentPolicy, app_settings
from payments.money import convert_minor


@dataclass(frozen=True)
class CartLine:
    """One priced cart line. ``unit_price_cents`` comes from the catalog."""

    product_id: Optional[int]
    name: str
    unit_price_cents: int
    quantity: int
    category_id: Optional[int] = None
    notes: str = ""

    def __post_init__(self):
        if self.unit_price_cents < 0:
            raise ValueError(f"unit price must be non-negative, got {self.unit_price_cents}")
        if self.quantity < 1:
            raise ValueError(f"quantity must be at least 1, got {self.quantity}")

    @property
    def line_total_cents(self) -> int:
        return self.unit_price_cents * self.quantity


@dataclass(frozen=True)
class OrderTotals:
    subtotal_cents: int
    discount_cents: int
    total_cents: int
    line_totals: List[int]
    display_currency: str
    settlement_currency: str
    exchange_rate: Decimal
    settlement_amount_cents: int
    min_charge_cents: int

    @property
    def meets_minimum(self) -> bool:
        return self.settlement_amount_cents >= self.min_charge_cents

    def as_dict(self):
        return {
            "subtotal_cents": self.subtotal_cents,
            "discount_cents": self.discount_cents,
            "total_cents": self.total_cents,
            "currency": self.display_currency,
            "settlement_currency": self.settlement_currency,
            "settlement_amount_cents": self.settlement_amount_cents,
            "exchange_rate": str(self.exchange_rate),
            "meets_minimum": self.meets_minimum,
        }


class OrderTotalCalculator:
    """
    Turns cart lines plus an optional discount into subtotal/discount/total.

    - subtotal = sum(unit_price * quantity)
    - discount is clamped to [0, subtotal] before it is stored
    - total = max(0, subtotal - discount)
    - settlement amount = total converted once at the declared policy rate

    A total below the provider minimum is still calculated; the caller
    decides what to do with ``meets_minimum``.
    """

    def __init__(
        self,
        lines: Sequence[CartLine],
        discount_cents: int = 0,
        policy: Optional[PaymentPolicy] = None,
    ):
        if discount_cents < 0:
            raise ValueError("discount_cents must be non-negative")
        self.lines = list(lines)
        self.discount_cents = discount_cents
        self.policy = policy or app_settings.payment_policy()

    def calculate_subtotal(self) -> int:
        return sum(line.line_total_cents for line in self.lines)

    def calculate(self) -> OrderTotals:
        line_totals = [line.line_total_cents for line in self.lines]
        subtotal = sum(line_totals)
        discount = min(self.discount_cents, subtotal)
        total = max(0, subtotal - discount)

        settlement = convert_minor(
            total,
            self.policy.display_currency,
            self.policy.settlement_currency,
            self.policy.exchange_rate,
        )

        return OrderTotals(
            subtotal_cents=subtotal,
            discount_cents=discount,
            total_cents=total,
            line_totals=line_totals,
            display_currency=self.policy.display_currency,
            settlement_currency=self.policy.settlement_currency,
            exchange_rate=self.policy.exchange_rate,
            settlement_amount_cents=settlement,
            min_charge_cents=self.policy.min_charge_minor,
        )
