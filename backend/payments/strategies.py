"""
Hosted checkout providers.

A strategy opens a hosted payment page for an order, reads back the
authoritative state of that page's session and verifies inbound webhooks.
The order id travels in the session metadata; it is the only link between
a provider session and an order, so every session must carry it.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional
import logging

import stripe
from django.conf import settings

from core_backend.errors import PaymentServiceError
from .money import allocate_minor, validate_minor_sum

logger = logging.getLogger(__name__)


def _get(obj, key, default=None):
    """Read a field from a provider object or a plain dict."""
    if obj is None:
        return default
    if isinstance(obj, dict):
        return obj.get(key, default)
    return getattr(obj, key, default)


@dataclass(frozen=True)
class CheckoutSession:
    session_id: str
    redirect_url: Optional[str] = None
    payment_status: Optional[str] = None
    status: Optional[str] = None
    order_id: Optional[str] = None
    amount_total: Optional[int] = None
    currency: Optional[str] = None

    @property
    def is_paid(self) -> bool:
        return self.payment_status == "paid"


class HostedCheckoutStrategy(ABC):
    """The interface for a hosted checkout provider."""

    @abstractmethod
    def create_session(self, order, success_url: str, cancel_url: str) -> CheckoutSession:
        pass

    @abstractmethod
    def retrieve_session(self, session_id: str) -> CheckoutSession:
        pass

    @abstractmethod
    def expire_session(self, session_id: str) -> CheckoutSession:
        """Close an open session so it can no longer be paid."""
        pass

    @abstractmethod
    def construct_event(self, payload: bytes, signature: str):
        pass

    @abstractmethod
    def session_from_event_object(self, obj) -> CheckoutSession:
        pass

    @staticmethod
    def build_line_items(order) -> List[dict]:
        """
        Spread the settlement amount over the order lines in proportion to
        their display totals. The provider then charges exactly
        ``order.settlement_amount_cents`` even when a discount or a currency
        conversion makes per-unit prices non-integral.
        """
        items = list(order.items.all())
        weights = [item.line_total_cents for item in items]
        allocations = allocate_minor(weights, order.settlement_amount_cents)
        validate_minor_sum(allocations, order.settlement_amount_cents, f"order {order.id}")

        return [
            {"name": f"{item.quantity} x {item.name}", "amount": amount}
            for item, amount in zip(items, allocations)
            if amount > 0
        ]


class StripeCheckoutStrategy(HostedCheckoutStrategy):
    """Stripe Checkout Sessions."""

    def __init__(self, api_key: Optional[str] = None, webhook_secret: Optional[str] = None):
        self.api_key = api_key or settings.STRIPE_SECRET_KEY
        self.webhook_secret = webhook_secret or settings.STRIPE_WEBHOOK_SECRET

    def create_session(self, order, success_url, cancel_url) -> CheckoutSession:
        stripe.api_key = self.api_key
        currency = order.settlement_currency.lower()
        line_items = [
            {
                "price_data": {
                    "currency": currency,
                    "product_data": {"name": line["name"]},
                    "unit_amount": line["amount"],
                },
                "quantity": 1,
            }
            for line in self.build_line_items(order)
        ]
        metadata = {
            "order_id": str(order.id),
            "customer_lead_id": str(order.customer_id),
            "display_currency": order.currency,
            "display_total_cents": str(order.total_cents),
            "exchange_rate": str(order.exchange_rate),
            "discount_cents": str(order.discount_cents),
            "voucher_code": order.voucher_code or "",
        }

        try:
            session = stripe.checkout.Session.create(
                mode="payment",
                line_items=line_items,
                success_url=success_url,
                cancel_url=cancel_url,
                client_reference_id=str(order.id),
                customer_email=order.customer_email or None,
                metadata=metadata,
                payment_intent_data={"metadata": {"order_id": str(order.id)}},
            )
        except stripe.StripeError as e:
            logger.error(f"Stripe session creation failed for order {order.id}: {e}")
            raise PaymentServiceError(
                details={"order_id": order.id, "_provider_error": str(e)}
            )

        logger.info(f"Created Stripe checkout session {session.id} for order {order.id}")
        return self._to_session(session)

    def retrieve_session(self, session_id) -> CheckoutSession:
        stripe.api_key = self.api_key
        try:
            session = stripe.checkout.Session.retrieve(session_id)
        except stripe.StripeError as e:
            logger.error(f"Stripe session lookup failed for {session_id}: {e}")
            raise PaymentServiceError(
                details={"session_id": session_id, "_provider_error": str(e)}
            )
        return self._to_session(session)

    def expire_session(self, session_id) -> CheckoutSession:
        stripe.api_key = self.api_key
        try:
            session = stripe.checkout.Session.expire(session_id)
        except stripe.StripeError as e:
            logger.error(f"Stripe session expiry failed for {session_id}: {e}")
            raise PaymentServiceError(
                details={"session_id": session_id, "_provider_error": str(e)}
            )
        logger.info(f"Expired Stripe checkout session {session_id}")
        return self._to_session(session)

    def construct_event(self, payload, signature):
        """
        Verify and parse a webhook payload.

        Raises:
            ValueError: malformed payload
            stripe.SignatureVerificationError: bad signature
        """
        return stripe.Webhook.construct_event(payload, signature, self.webhook_secret)

    def session_from_event_object(self, obj) -> CheckoutSession:
        return self._to_session(obj)

    @staticmethod
    def _to_session(obj) -> CheckoutSession:
        metadata = _get(obj, "metadata") or {}
        return CheckoutSession(
            session_id=_get(obj, "id"),
            redirect_url=_get(obj, "url"),
            payment_status=_get(obj, "payment_status"),
            status=_get(obj, "status"),
            order_id=_get(metadata, "order_id") or _get(obj, "client_reference_id"),
            amount_total=_get(obj, "amount_total"),
            currency=_get(obj, "currency"),
        )
