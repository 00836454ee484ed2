"""
Voucher discount evaluation.

The engine answers one question: given a voucher, a subtotal and a point in
time, does the voucher apply and how much does it take off? It performs no
writes. Incrementing ``used_count`` happens separately, once, when payment
is confirmed (see ``VoucherService.redeem``).

Eligibility is checked in a fixed order and stops at the first failure:

1. INACTIVE       voucher switched off by an admin
2. EXPIRED        ``now`` outside ``[valid_from, valid_until]`` (inclusive)
3. LIMIT_REACHED  ``used_count >= usage_limit``
4. BELOW_MINIMUM  subtotal below ``minimum_order_amount_cents``

An eligible voucher whose computed discount is zero is reported as
NO_EFFECT instead of being applied silently.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional

from django.db import models
from django.utils import timezone

from .factories import VoucherStrategyFactory
from .models import Voucher


class IneligibilityReason(models.TextChoices):
    NOT_FOUND = "NOT_FOUND", "This voucher code does not exist."
    INACTIVE = "INACTIVE", "This voucher is no longer active."
    EXPIRED = "EXPIRED", "This voucher has expired or is not valid yet."
    LIMIT_REACHED = "LIMIT_REACHED", "This voucher has reached its usage limit."
    BELOW_MINIMUM = "BELOW_MINIMUM", "Your order does not meet the minimum amount for this voucher."
    NO_EFFECT = "NO_EFFECT", "This voucher cannot be applied to the items in your order."

    @property
    def message(self):
        return self.label


@dataclass(frozen=True)
class DiscountDecision:
    code: str
    subtotal_cents: int
    eligible: bool
    discount_cents: int = 0
    reason: Optional[IneligibilityReason] = None

    @classmethod
    def rejected(cls, code, subtotal_cents, reason):
        return cls(code=code, subtotal_cents=subtotal_cents, eligible=False, reason=reason)

    @property
    def message(self):
        return self.reason.message if self.reason else "Voucher applied."

    def as_dict(self):
        data = {
            "code": self.code,
            "eligible": self.eligible,
            "subtotal_cents": self.subtotal_cents,
            "discount_cents": self.discount_cents,
            "message": self.message,
        }
        if self.reason:
            data["reason"] = self.reason.value
        return data


class DiscountEngine:

    @staticmethod
    def evaluate(
        voucher: Voucher,
        subtotal_cents: int,
        now: Optional[datetime] = None,
        lines: Optional[Iterable] = None,
    ) -> DiscountDecision:
        """
        Decide applicability and compute the discount.

        Args:
            voucher: the voucher record
            subtotal_cents: order subtotal in minor units (>= 0)
            now: evaluation time, defaults to the current time
            lines: optional cart lines (``product_id``, ``category_id``,
                ``line_total_cents``) used when the voucher is scoped to
                products or categories

        Returns:
            DiscountDecision with ``discount_cents`` in ``[0, subtotal_cents]``
        """
        if subtotal_cents < 0:
            raise ValueError("subtotal_cents must be non-negative")

        now = now or timezone.now()
        code = voucher.code

        if not voucher.is_active:
            return DiscountDecision.rejected(code, subtotal_cents, IneligibilityReason.INACTIVE)
        if not voucher.is_in_window(now):
            return DiscountDecision.rejected(code, subtotal_cents, IneligibilityReason.EXPIRED)
        if voucher.used_count >= voucher.usage_limit:
            return DiscountDecision.rejected(code, subtotal_cents, IneligibilityReason.LIMIT_REACHED)
        if subtotal_cents < voucher.minimum_order_amount_cents:
            return DiscountDecision.rejected(code, subtotal_cents, IneligibilityReason.BELOW_MINIMUM)

        base_cents = DiscountEngine._discountable_base(voucher, subtotal_cents, lines)
        strategy = VoucherStrategyFactory.get_strategy(voucher)
        discount = strategy.compute(base_cents, voucher)

        if voucher.maximum_discount_cents is not None:
            discount = min(discount, voucher.maximum_discount_cents)
        discount = max(0, min(discount, subtotal_cents))

        if discount == 0:
            return DiscountDecision.rejected(code, subtotal_cents, IneligibilityReason.NO_EFFECT)

        return DiscountDecision(
            code=code,
            subtotal_cents=subtotal_cents,
            eligible=True,
            discount_cents=discount,
        )

    @staticmethod
    def _discountable_base(voucher, subtotal_cents, lines):
        if lines is None or voucher.pk is None:
            return subtotal_cents

        product_ids = {p.id for p in voucher.applicable_products.all()}
        category_ids = {c.id for c in voucher.applicable_categories.all()}
        if not product_ids and not category_ids:
            return subtotal_cents

        return sum(
            line.line_total_cents
            for line in lines
            if line.product_id in product_ids
            or (line.category_id is not None and line.category_id in category_ids)
        )
