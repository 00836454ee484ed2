"""
Checkout orchestration.

One checkout attempt runs these steps strictly in order:

1. validate  customer lead exists, cart is non-empty, products are active
2. price     re-price from the catalog, re-evaluate the voucher, check the
             provider minimum (no order exists yet; failures leave no trace)
3. persist   create the order NEW/PENDING with the contact snapshot
4. session   open a hosted payment session whose metadata carries the order id
5. link      store the session id on the order
6. notify    tell the admin dashboard about the new order

From step 3 on the order is durable. A session failure returns
PaymentServiceError with the order id so the client can call
``resume_payment`` instead of creating a second order. A failed link or
notify still returns the payment URL; the result is marked degraded and the
pending-order sweep picks the order up later.
"""

from dataclasses import dataclass, field
from typing import Optional
import logging

from django.db import DatabaseError, transaction

from core_backend.config import app_settings
from core_backend.errors import (
    BelowMinimumTotalError,
    InternalError,
    PaymentServiceError,
    ServiceError,
    ValidationError,
)
from core_backend.results import ServiceResult
from customers.services import CustomerLeadService
from notifications.services import NotificationRelay
from orders.calculators import OrderTotalCalculator
from orders.models import Order, OrderItem
from payments.factories import PaymentGatewayFactory
from products.services import ProductService
from vouchers.services import VoucherService
from .notification_service import OrderNotificationService
from .order_service import OrderService

logger = logging.getLogger(__name__)

PAYMENT_REF_UNLINKED = "payment_ref_unlinked"
NOTIFICATION_FAILED = "notification_failed"
PREVIOUS_SESSION_OPEN = "previous_session_open"


@dataclass
class CheckoutOutcome:
    order_id: int
    checkout_url: Optional[str]
    session_id: str
    totals: dict = field(default_factory=dict)

    def as_dict(self):
        return {
            "order_id": self.order_id,
            "checkout_url": self.checkout_url,
            "session_id": self.session_id,
            **self.totals,
        }


class CheckoutService:

    def __init__(self, gateway=None, relay: NotificationRelay = None):
        self.gateway = gateway or PaymentGatewayFactory.get_gateway()
        self.notifications = OrderNotificationService(relay or NotificationRelay())

    def checkout(
        self,
        customer_lead_id,
        items,
        voucher_code: Optional[str] = None,
        order_notes: str = "",
    ) -> ServiceResult:
        """
        Run a checkout attempt.

        Args:
            customer_lead_id: id of the lead captured at session start
            items: list of ``{"product_id", "quantity", "notes"?}``
            voucher_code: optional voucher to apply
            order_notes: free-text note for the kitchen

        Returns:
            ServiceResult whose value is a ``CheckoutOutcome``
        """
        try:
            lead = CustomerLeadService.get_lead(customer_lead_id)
            lines = ProductService.price_cart(items)
            totals, applied_code = self._price(lines, voucher_code)
        except ServiceError as e:
            logger.info(f"Checkout rejected for lead {customer_lead_id}: {e.code} - {e.message}")
            return ServiceResult.failure(e)

        try:
            order = self._persist(lead, lines, totals, applied_code, order_notes)
        except DatabaseError as e:
            logger.exception(f"Could not persist order for lead {lead.id}")
            return ServiceResult.failure(InternalError(details={"_db_error": str(e)}))

        logger.info(
            f"Order {order.id} created for lead {lead.id}: total {order.total_cents} "
            f"{order.currency} (charge {order.settlement_amount_cents} {order.settlement_currency})"
        )
        return self._open_payment(order, announce=True)

    def resume_payment(self, order_id) -> ServiceResult:
        """
        Open a fresh payment session for a NEW/PENDING order. The order itself
        is reused, never duplicated.

        When the order already has a session, the provider is asked about it
        first: a paid one refuses the resume (confirmation is on its way), an
        open one is expired once the new session is linked so only one
        session can ever be paid.
        """
        try:
            order = OrderService.get_order(order_id)
        except ServiceError as e:
            return ServiceResult.failure(e)

        if order.payment_status != Order.PaymentStatus.PENDING or order.status != Order.OrderStatus.NEW:
            return ServiceResult.failure(
                ValidationError(
                    "This order is not awaiting payment.",
                    details={"order_id": order.id, "payment_status": order.payment_status},
                )
            )

        previous = None
        if order.payment_ref:
            try:
                previous = self.gateway.retrieve_session(order.payment_ref)
            except PaymentServiceError as e:
                e.details.update({"order_id": order.id, "retryable": True})
                logger.error(f"Could not check session {order.payment_ref} before resuming order {order.id}")
                return ServiceResult.failure(e)
            if previous.is_paid:
                logger.info(f"Resume refused for order {order.id}: session {previous.session_id} is paid")
                return ServiceResult.failure(
                    ValidationError(
                        "This order has already been paid; confirmation is on its way.",
                        details={"order_id": order.id},
                    )
                )

        result = self._open_payment(order, announce=False)

        # Expire only after the new session is linked: the old session's
        # expiry event then no longer matches the order's payment_ref.
        if (
            result.ok
            and previous is not None
            and previous.status == "open"
            and PAYMENT_REF_UNLINKED not in result.warnings
        ):
            try:
                self.gateway.expire_session(previous.session_id)
            except PaymentServiceError:
                logger.warning(
                    f"Previous session {previous.session_id} of order {order.id} is still open"
                )
                result.warnings.append(PREVIOUS_SESSION_OPEN)
        return result

    def _price(self, lines, voucher_code):
        subtotal = OrderTotalCalculator(lines).calculate_subtotal()

        discount = 0
        applied_code = None
        if voucher_code:
            decision = VoucherService.evaluate_code(voucher_code, subtotal, lines=lines)
            if not decision.eligible:
                raise VoucherService.decision_error(decision)
            discount = decision.discount_cents
            applied_code = decision.code

        totals = OrderTotalCalculator(lines, discount_cents=discount).calculate()
        if not totals.meets_minimum:
            raise BelowMinimumTotalError(
                details={
                    "total_cents": totals.total_cents,
                    "settlement_amount_cents": totals.settlement_amount_cents,
                    "minimum_cents": totals.min_charge_cents,
                    "settlement_currency": totals.settlement_currency,
                }
            )
        return totals, applied_code

    @transaction.atomic
    def _persist(self, lead, lines, totals, voucher_code, order_notes) -> Order:
        snapshot = lead.snapshot()
        order = Order.objects.create(
            customer=lead,
            customer_name=snapshot.name,
            customer_phone=snapshot.phone,
            customer_email=snapshot.email,
            table_number=snapshot.table_number,
            subtotal_cents=totals.subtotal_cents,
            discount_cents=totals.discount_cents,
            voucher_code=voucher_code,
            total_cents=totals.total_cents,
            currency=totals.display_currency,
            settlement_currency=totals.settlement_currency,
            settlement_amount_cents=totals.settlement_amount_cents,
            exchange_rate=totals.exchange_rate,
            payment_provider=app_settings.payment_provider,
            order_notes=order_notes or "",
        )
        OrderItem.objects.bulk_create(
            [
                OrderItem(
                    order=order,
                    product_id=line.product_id,
                    name=line.name,
                    unit_price_cents=line.unit_price_cents,
                    quantity=line.quantity,
                    line_total_cents=line_total,
                    notes=line.notes,
                )
                for line, line_total in zip(lines, totals.line_totals)
            ]
        )
        return order

    def _open_payment(self, order, announce) -> ServiceResult:
        base_url = app_settings.frontend_base_url
        success_url = f"{base_url}/order/{order.id}/confirm?session_id={{CHECKOUT_SESSION_ID}}"
        cancel_url = f"{base_url}/cart"

        try:
            session = self.gateway.create_session(order, success_url, cancel_url)
        except PaymentServiceError as e:
            e.details.update({"order_id": order.id, "retryable": True})
            logger.error(f"Payment session failed for order {order.id}; order left NEW/PENDING")
            return ServiceResult.failure(e)
        except Exception as e:
            logger.exception(f"Unexpected error opening payment session for order {order.id}")
            return ServiceResult.failure(
                PaymentServiceError(
                    details={"order_id": order.id, "retryable": True, "_provider_error": str(e)}
                )
            )

        warnings = []
        if not self._link_payment_ref(order, session.session_id):
            warnings.append(PAYMENT_REF_UNLINKED)

        if announce and not self.notifications.notify_new_order(order):
            warnings.append(NOTIFICATION_FAILED)

        outcome = CheckoutOutcome(
            order_id=order.id,
            checkout_url=session.redirect_url,
            session_id=session.session_id,
            totals={
                "subtotal_cents": order.subtotal_cents,
                "discount_cents": order.discount_cents,
                "total_cents": order.total_cents,
                "currency": order.currency,
                "settlement_amount_cents": order.settlement_amount_cents,
                "settlement_currency": order.settlement_currency,
            },
        )
        return ServiceResult.success(outcome, warnings=warnings)

    @staticmethod
    def _link_payment_ref(order, session_id) -> bool:
        try:
            updated = Order.objects.filter(
                pk=order.pk, payment_status=Order.PaymentStatus.PENDING
            ).update(payment_ref=session_id)
        except DatabaseError as e:
            logger.warning(
                f"Order {order.id} and payment session {session_id} are unlinked: {e}"
            )
            return False

        if not updated:
            logger.warning(f"Order {order.id} no longer pending; session {session_id} not linked")
            return False
        order.payment_ref = session_id
        return True
