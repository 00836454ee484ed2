"""
Payment confirmation reconciliation.

Two independent signals say an order may have been paid: the provider's
webhook and the customer's own confirmation page polling us. They arrive in
any order, possibly at the same time, possibly more than once. Both end up
in ``confirm_by_session``:

- the provider is asked for the session's authoritative state; the signal's
  own claim is never trusted
- PENDING -> PAID/CONFIRMED is a single conditional UPDATE, so only one
  caller can win
- only the winner redeems the voucher and broadcasts the three paid events

A provider lookup failure changes nothing. The other signal (or the
periodic sweep) simply tries again later.
"""

from dataclasses import dataclass, field
from typing import List
import logging

from django.utils import timezone

from core_backend.errors import (
    InternalError,
    PaymentServiceError,
    ServiceError,
    ValidationError,
)
from core_backend.results import ServiceResult
from notifications.services import NotificationRelay
from orders.models import Order
from orders.services import OrderNotificationService, OrderService
from vouchers.services import VoucherService
from .factories import PaymentGatewayFactory
from .strategies import CheckoutSession, _get

logger = logging.getLogger(__name__)

CONFIRMING_EVENTS = {
    "checkout.session.completed",
    "checkout.session.async_payment_succeeded",
}
FAILING_EVENTS = {
    "checkout.session.expired",
    "checkout.session.async_payment_failed",
}

VOUCHER_LIMIT_REACHED = "voucher_limit_reached"
NOTIFICATION_FAILED = "notification_failed"
DUPLICATE_PAYMENT = "duplicate_payment"


@dataclass
class ReconciliationOutcome:
    order_id: int
    payment_status: str
    order_status: str
    transitioned: bool = False
    broadcast: bool = False
    source: str = ""
    warnings: List[str] = field(default_factory=list)

    @property
    def already_paid(self) -> bool:
        return self.payment_status == Order.PaymentStatus.PAID and not self.transitioned

    def as_dict(self):
        return {
            "order_id": self.order_id,
            "payment_status": self.payment_status,
            "status": self.order_status,
            "transitioned": self.transitioned,
            "already_paid": self.already_paid,
        }


class PaymentReconciliationService:

    def __init__(self, gateway=None, relay: NotificationRelay = None):
        self.gateway = gateway or PaymentGatewayFactory.get_gateway()
        self.notifications = OrderNotificationService(relay or NotificationRelay())

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def confirm_by_session(self, session_id, source="poll") -> ServiceResult:
        """
        Reconcile the order behind a provider session.

        Returns:
            ServiceResult with a ``ReconciliationOutcome``. Failure results
            (provider down, unknown session) leave the order untouched.
        """
        try:
            session = self.gateway.retrieve_session(session_id)
        except PaymentServiceError as e:
            logger.warning(f"[{source}] provider lookup failed for session {session_id}; will retry")
            return ServiceResult.failure(e)

        try:
            order = self._resolve_order(session)
        except ServiceError as e:
            logger.error(f"[{source}] cannot reconcile session {session_id}: {e.message}")
            return ServiceResult.failure(e)

        if session.is_paid:
            return self._mark_paid(order, session, source)
        if session.status == "expired":
            return self._mark_failed(order, session, source)

        logger.debug(f"[{source}] session {session_id} for order {order.id} not paid yet")
        return ServiceResult.success(self._outcome(order, source=source))

    def check_payment(self, order_id=None, payment_ref=None) -> ServiceResult:
        """
        Client poll. Orders already settled locally are answered without a
        provider call; pending ones are reconciled against the provider.
        """
        try:
            if order_id is not None:
                order = OrderService.get_order(order_id)
            else:
                order = OrderService.find_by_payment_ref(payment_ref)
                if order is None:
                    # The reference may never have been linked; the session
                    # metadata can still lead us to the order.
                    return self.confirm_by_session(payment_ref, source="poll")
        except ServiceError as e:
            return ServiceResult.failure(e)

        if order.payment_status != Order.PaymentStatus.PENDING:
            return ServiceResult.success(self._outcome(order, source="poll"))

        session_id = payment_ref or order.payment_ref
        if not session_id:
            logger.warning(f"Order {order.id} polled but has no payment reference yet")
            return ServiceResult.success(self._outcome(order, source="poll"))
        return self.confirm_by_session(session_id, source="poll")

    def handle_event(self, event) -> ServiceResult:
        """
        Dispatch a verified webhook event. Unknown event types are logged
        and acknowledged so the provider stops retrying them.
        """
        event_type = _get(event, "type")
        obj = _get(_get(event, "data"), "object")

        if event_type in CONFIRMING_EVENTS:
            session = self.gateway.session_from_event_object(obj)
            return self.confirm_by_session(session.session_id, source="webhook")

        if event_type in FAILING_EVENTS:
            session = self.gateway.session_from_event_object(obj)
            try:
                order = self._resolve_order(session)
            except ServiceError as e:
                return ServiceResult.failure(e)
            return self._mark_failed(order, session, source="webhook")

        self._handle_unimplemented_event(event_type, obj)
        return ServiceResult.success(None)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def _mark_paid(self, order: Order, session: CheckoutSession, source) -> ServiceResult:
        transitioned = OrderService.transition_payment(
            order.id,
            Order.PaymentStatus.PAID,
            status=Order.OrderStatus.CONFIRMED,
            paid_at=timezone.now(),
            payment_ref=session.session_id,
        )
        order = OrderService.get_order(order.id)

        if not transitioned:
            if order.payment_status == Order.PaymentStatus.PAID:
                if order.payment_ref and order.payment_ref != session.session_id:
                    logger.error(
                        f"[{source}] order {order.id} was paid through session {order.payment_ref} "
                        f"and again through {session.session_id}; refund the duplicate"
                    )
                    return ServiceResult.success(
                        self._outcome(order, source=source, warnings=[DUPLICATE_PAYMENT]),
                        warnings=[DUPLICATE_PAYMENT],
                    )
                logger.info(f"[{source}] order {order.id} already paid; nothing to broadcast")
            else:
                logger.error(
                    f"[{source}] provider reports session {session.session_id} paid but "
                    f"order {order.id} is {order.payment_status}; needs manual review"
                )
            return ServiceResult.success(self._outcome(order, source=source))

        logger.info(f"[{source}] order {order.id} confirmed as paid")
        warnings = []

        if order.voucher_code and not VoucherService.redeem_code(order.voucher_code):
            warnings.append(VOUCHER_LIMIT_REACHED)

        try:
            broadcast = self.notifications.notify_order_paid(order)
        except Exception as e:
            logger.error(f"Paid notifications for order {order.id} raised: {e}")
            broadcast = False
        if not broadcast:
            warnings.append(NOTIFICATION_FAILED)

        outcome = self._outcome(
            order, source=source, transitioned=True, broadcast=broadcast, warnings=warnings
        )
        return ServiceResult.success(outcome, warnings=warnings)

    def _mark_failed(self, order: Order, session: CheckoutSession, source) -> ServiceResult:
        if order.payment_ref and order.payment_ref != session.session_id:
            # A replaced session; the order's current session decides
            logger.info(
                f"[{source}] ignoring failure of session {session.session_id}; "
                f"order {order.id} now pays through {order.payment_ref}"
            )
            return ServiceResult.success(self._outcome(order, source=source))

        transitioned = OrderService.transition_payment(order.id, Order.PaymentStatus.FAILED)
        order = OrderService.get_order(order.id)
        broadcast = False
        if transitioned:
            logger.info(f"[{source}] order {order.id} payment failed or session expired")
            broadcast = self.notifications.notify_payment_failed(order)
        return ServiceResult.success(
            self._outcome(order, source=source, transitioned=transitioned, broadcast=broadcast)
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _resolve_order(self, session: CheckoutSession) -> Order:
        """
        Find the order a session belongs to: by stored reference first, then
        by the order id in the session metadata. Both must agree.
        """
        order = OrderService.find_by_payment_ref(session.session_id)

        if order is None:
            if not session.order_id:
                raise ValidationError(
                    "Payment session carries no order reference.",
                    details={"session_id": session.session_id},
                )
            try:
                order = OrderService.get_order(int(session.order_id))
            except ValueError:
                raise ValidationError(
                    "Payment session carries an invalid order reference.",
                    details={"session_id": session.session_id},
                )
            logger.warning(
                f"Order {order.id} found through session metadata; payment reference was not linked"
            )
            return order

        if session.order_id and str(order.id) != str(session.order_id):
            raise InternalError(
                details={
                    "_reason": "session metadata does not match order",
                    "session_id": session.session_id,
                }
            )
        return order

    @staticmethod
    def _outcome(order, source="", transitioned=False, broadcast=False, warnings=None):
        return ReconciliationOutcome(
            order_id=order.id,
            payment_status=order.payment_status,
            order_status=order.status,
            transitioned=transitioned,
            broadcast=broadcast,
            source=source,
            warnings=list(warnings or []),
        )

    @staticmethod
    def _handle_unimplemented_event(event_type, obj):
        logger.info(f"Unhandled payment provider event type: {event_type}")
