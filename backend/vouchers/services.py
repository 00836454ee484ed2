import logging
from datetime import timedelta
from typing import Optional

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from core_backend.errors import IneligibleVoucherError, NotFoundError, ValidationError
from core_backend.results import ServiceResult
from orders.calculators import OrderTotalCalculator
from products.services import ProductService
from .engine import DiscountDecision, DiscountEngine, IneligibilityReason
from .models import Voucher, normalize_code

logger = logging.getLogger(__name__)


DEFAULT_VOUCHERS = [
    {
        "code": "WELCOME20",
        "description": "Welcome discount - 20% off your first order",
        "discount_type": Voucher.DiscountType.PERCENTAGE,
        "discount_value": 20,
        "minimum_order_amount_cents": 2000,
        "maximum_discount_cents": 5000,
        "usage_limit": 1000,
        "days": 365,
    },
    {
        "code": "SAVE10",
        "description": "Save 10.00 on orders over 50.00",
        "discount_type": Voucher.DiscountType.FIXED_AMOUNT,
        "discount_value": 1000,
        "minimum_order_amount_cents": 5000,
        "usage_limit": 500,
        "days": 180,
    },
    {
        "code": "HALFOFF",
        "description": "50% off on orders over 100.00",
        "discount_type": Voucher.DiscountType.PERCENTAGE,
        "discount_value": 50,
        "minimum_order_amount_cents": 10000,
        "maximum_discount_cents": 2500,
        "usage_limit": 100,
        "days": 90,
    },
    {
        "code": "FREESHIP",
        "description": "8.00 off orders over 75.00",
        "discount_type": Voucher.DiscountType.FIXED_AMOUNT,
        "discount_value": 800,
        "minimum_order_amount_cents": 7500,
        "usage_limit": 200,
        "days": 120,
    },
    {
        "code": "NEWCUSTOMER",
        "description": "Special discount for new customers",
        "discount_type": Voucher.DiscountType.PERCENTAGE,
        "discount_value": 15,
        "minimum_order_amount_cents": 1500,
        "usage_limit": 300,
        "days": 60,
    },
]


class VoucherService:
    """
    Store-facing voucher operations. Eligibility and amounts come from
    ``DiscountEngine``; this class handles lookup, usage accounting and
    admin lifecycle.
    """

    @staticmethod
    def find_by_code(code) -> Optional[Voucher]:
        normalized = normalize_code(code)
        if not normalized:
            return None
        return (
            Voucher.objects.prefetch_related("applicable_products", "applicable_categories")
            .filter(code=normalized)
            .first()
        )

    @staticmethod
    def evaluate_code(code, subtotal_cents, lines=None, now=None) -> DiscountDecision:
        """Look up and evaluate a code; an unknown code is a NOT_FOUND decision."""
        voucher = VoucherService.find_by_code(code)
        if voucher is None:
            return DiscountDecision.rejected(
                normalize_code(code), subtotal_cents, IneligibilityReason.NOT_FOUND
            )
        return DiscountEngine.evaluate(voucher, subtotal_cents, now=now, lines=lines)

    @staticmethod
    def decision_error(decision: DiscountDecision):
        details = {"code": decision.code, "discount_cents": 0}
        if decision.reason == IneligibilityReason.NOT_FOUND:
            return NotFoundError(decision.message, details={**details, "reason": decision.reason.value})
        return IneligibleVoucherError(decision.reason, details=details)

    @staticmethod
    def validate_code(code, subtotal_cents, now=None) -> ServiceResult:
        """Check a code against a bare subtotal (no cart lines)."""
        if subtotal_cents is None or subtotal_cents < 0:
            return ServiceResult.failure(ValidationError("Subtotal must be a non-negative amount."))

        decision = VoucherService.evaluate_code(code, subtotal_cents, now=now)
        if not decision.eligible:
            logger.info(f"Voucher {decision.code} rejected: {decision.reason}")
            return ServiceResult.failure(VoucherService.decision_error(decision))
        return ServiceResult.success(decision)

    @staticmethod
    def preview_for_cart(code, items, now=None) -> ServiceResult:
        """
        Price a cart from the catalog and evaluate a voucher against it.
        Uses the same calculator as checkout, so the preview total is the
        total that will be charged.
        """
        try:
            lines = ProductService.price_cart(items)
        except ValidationError as e:
            return ServiceResult.failure(e)

        subtotal = OrderTotalCalculator(lines).calculate_subtotal()
        decision = VoucherService.evaluate_code(code, subtotal, lines=lines, now=now)
        if not decision.eligible:
            logger.info(f"Voucher {decision.code} rejected for cart: {decision.reason}")
            return ServiceResult.failure(VoucherService.decision_error(decision))

        totals = OrderTotalCalculator(lines, discount_cents=decision.discount_cents).calculate()
        return ServiceResult.success({**totals.as_dict(), "code": decision.code, "message": decision.message})

    @staticmethod
    def redeem(voucher_id) -> bool:
        """
        Consume one use of a voucher.

        Single conditional UPDATE: the row only changes while
        ``used_count < usage_limit``, so two concurrent redemptions of the
        last unit cannot both succeed.

        Returns:
            True if a use was consumed, False if the limit was already reached
        """
        updated = Voucher.objects.filter(
            pk=voucher_id, used_count__lt=F("usage_limit")
        ).update(used_count=F("used_count") + 1, updated_at=timezone.now())
        if not updated:
            logger.warning(f"Voucher {voucher_id} could not be redeemed: usage limit reached")
        return updated == 1

    @staticmethod
    def redeem_code(code) -> bool:
        normalized = normalize_code(code)
        voucher_id = Voucher.objects.filter(code=normalized).values_list("id", flat=True).first()
        if voucher_id is None:
            logger.warning(f"Voucher {normalized} not found at redemption time")
            return False
        return VoucherService.redeem(voucher_id)

    @staticmethod
    def deactivate(voucher: Voucher, user=None) -> Voucher:
        """Soft-deactivate; historical orders keep their code snapshot."""
        voucher.archive(archived_by=user)
        logger.info(f"Voucher {voucher.code} deactivated by {getattr(user, 'email', 'system')}")
        return voucher

    @staticmethod
    @transaction.atomic
    def seed_default_vouchers(now=None):
        """Create the demo vouchers that do not exist yet. Returns the created codes."""
        now = now or timezone.now()
        created = []
        for entry in DEFAULT_VOUCHERS:
            entry = dict(entry)
            days = entry.pop("days")
            _, was_created = Voucher.objects.get_or_create(
                code=entry["code"],
                defaults={**entry, "valid_from": now, "valid_until": now + timedelta(days=days)},
            )
            if was_created:
                created.append(entry["code"])
        logger.info(f"Seeded vouchers: {created or 'none (all present)'}")
        return created
