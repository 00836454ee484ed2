"""
Shared test fixtures for all backend tests.

This module provides reusable pytest fixtures for common test objects
like users, products, vouchers, plus in-memory stand-ins for the payment
provider and the notification relay.
"""
import itertools
import json

import pytest
from django.utils import timezone
from datetime import timedelta

from core_backend.errors import PaymentServiceError
from customers.models import CustomerLead
from payments.strategies import CheckoutSession, HostedCheckoutStrategy
from products.models import Category, Product
from users.models import User
from vouchers.models import Voucher


# ============================================================================
# PROVIDER / RELAY DOUBLES
# ============================================================================

class FakeCheckoutGateway(HostedCheckoutStrategy):
    """
    In-memory hosted checkout. Sessions start unpaid; tests flip them with
    ``pay()`` or ``expire()`` to play the provider's side.
    """

    def __init__(self):
        self.sessions = {}
        self.created = []
        self.retrieve_calls = []
        self.expired = []
        self.fail_create = False
        self.fail_retrieve = False
        self.fail_expire = False
        self._ids = itertools.count(1)

    def create_session(self, order, success_url, cancel_url):
        if self.fail_create:
            raise PaymentServiceError(details={"_provider_error": "provider unavailable"})
        session_id = f"cs_test_{next(self._ids)}"
        self.sessions[session_id] = {
            "id": session_id,
            "url": f"https://checkout.test/{session_id}",
            "payment_status": "unpaid",
            "status": "open",
            "metadata": {"order_id": str(order.id)},
            "amount_total": order.settlement_amount_cents,
            "currency": order.settlement_currency.lower(),
        }
        self.created.append(
            {
                "order_id": order.id,
                "success_url": success_url,
                "cancel_url": cancel_url,
                "line_items": self.build_line_items(order),
            }
        )
        return self.session_from_event_object(self.sessions[session_id])

    def retrieve_session(self, session_id):
        self.retrieve_calls.append(session_id)
        if self.fail_retrieve or session_id not in self.sessions:
            raise PaymentServiceError(details={"session_id": session_id})
        return self.session_from_event_object(self.sessions[session_id])

    def expire_session(self, session_id):
        # Like Stripe, only an open session can be expired
        session = self.sessions.get(session_id)
        if self.fail_expire or session is None or session["status"] != "open":
            raise PaymentServiceError(details={"session_id": session_id})
        self.expire(session_id)
        self.expired.append(session_id)
        return self.session_from_event_object(session)

    def construct_event(self, payload, signature):
        if signature != "valid":
            raise ValueError("bad signature")
        return json.loads(payload)

    def session_from_event_object(self, obj):
        return CheckoutSession(
            session_id=obj["id"],
            redirect_url=obj.get("url"),
            payment_status=obj.get("payment_status"),
            status=obj.get("status"),
            order_id=obj.get("metadata", {}).get("order_id"),
            amount_total=obj.get("amount_total"),
            currency=obj.get("currency"),
        )

    def pay(self, session_id):
        self.sessions[session_id].update(payment_status="paid", status="complete")

    def expire(self, session_id):
        self.sessions[session_id].update(status="expired")

    def event(self, event_type, session_id):
        return {"type": event_type, "data": {"object": dict(self.sessions[session_id])}}


class FakeRelay:
    """Records publishes instead of touching a channel layer."""

    def __init__(self, fail=False):
        self.fail = fail
        self.published = []

    def publish(self, channel, event, payload):
        if self.fail:
            return False
        self.published.append((channel, event, payload))
        return True

    def events(self):
        return [event for _, event, _ in self.published]


@pytest.fixture
def fake_gateway():
    return FakeCheckoutGateway()


@pytest.fixture
def fake_relay():
    return FakeRelay()


@pytest.fixture
def patch_gateway(monkeypatch, fake_gateway):
    """Make every service built by a view use the in-memory gateway."""
    from payments.factories import PaymentGatewayFactory

    monkeypatch.setattr(
        PaymentGatewayFactory, "get_gateway", staticmethod(lambda provider=None: fake_gateway)
    )
    return fake_gateway


@pytest.fixture
def patch_relay(monkeypatch, fake_relay):
    """Route relay publishes made inside views to ``fake_relay``."""
    from notifications.services import NotificationRelay

    monkeypatch.setattr(
        NotificationRelay,
        "publish",
        lambda self, channel, event, payload: fake_relay.publish(channel, event, payload),
    )
    return fake_relay


# ============================================================================
# USER FIXTURES
# ============================================================================

@pytest.fixture
def admin_user(db):
    return User.objects.create_user(
        email="admin@restaurant.test",
        password="password123",
        name="Admin",
        role=User.Role.ADMIN,
    )


@pytest.fixture
def staff_user(db):
    return User.objects.create_user(
        email="kitchen@restaurant.test",
        password="password123",
        name="Kitchen",
        role=User.Role.STAFF,
    )


# ============================================================================
# API CLIENT FIXTURES
# ============================================================================

@pytest.fixture
def api_client():
    from rest_framework.test import APIClient
    return APIClient()


def _bearer_client(user):
    from rest_framework.test import APIClient
    from rest_framework_simplejwt.tokens import RefreshToken

    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {RefreshToken.for_user(user).access_token}")
    return client


@pytest.fixture
def admin_client(admin_user):
    return _bearer_client(admin_user)


@pytest.fixture
def staff_client(staff_user):
    return _bearer_client(staff_user)


# ============================================================================
# CATALOG FIXTURES
# ============================================================================

@pytest.fixture
def category(db):
    return Category.objects.create(name="Mains")


@pytest.fixture
def drinks(db):
    return Category.objects.create(name="Drinks")


@pytest.fixture
def burger(category):
    return Product.objects.create(name="Burger", price_cents=4000, category=category)


@pytest.fixture
def fries(category):
    return Product.objects.create(name="Fries", price_cents=1500, category=category)


@pytest.fixture
def soda(drinks):
    return Product.objects.create(name="Soda", price_cents=500, category=drinks)


@pytest.fixture
def lead(db):
    return CustomerLead.objects.create_lead(
        name="Ada", phone="+15550100", email="ada@example.com", table_number="7"
    )


# ============================================================================
# VOUCHER FIXTURES
# ============================================================================

def make_voucher(**overrides):
    now = timezone.now()
    fields = {
        "code": "TEST",
        "discount_type": Voucher.DiscountType.PERCENTAGE,
        "discount_value": 10,
        "minimum_order_amount_cents": 0,
        "maximum_discount_cents": None,
        "usage_limit": 100,
        "valid_from": now - timedelta(days=1),
        "valid_until": now + timedelta(days=30),
    }
    fields.update(overrides)
    return Voucher.objects.create(**fields)


@pytest.fixture
def welcome20(db):
    return make_voucher(
        code="WELCOME20",
        discount_value=20,
        minimum_order_amount_cents=2000,
        maximum_discount_cents=5000,
        usage_limit=1000,
    )


@pytest.fixture
def save10(db):
    return make_voucher(
        code="SAVE10",
        discount_type=Voucher.DiscountType.FIXED_AMOUNT,
        discount_value=1000,
        usage_limit=500,
    )


@pytest.fixture
def single_use_voucher(db):
    return make_voucher(code="ONCE", discount_value=10, usage_limit=1)
