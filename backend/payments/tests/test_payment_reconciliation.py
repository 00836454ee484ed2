"""
Payment Confirmation Reconciler Tests

The webhook and the confirmation-page poll both drive the same conditional
PENDING -> PAID transition. These tests pin down that:

1. The provider's session state is authoritative, not the caller's claim
2. Exactly one caller wins; only the winner redeems and broadcasts
3. Provider outages change nothing and can be retried
4. Expired or failed sessions end as FAILED

Run with: pytest backend/payments/tests/test_payment_reconciliation.py -v
"""
import pytest
from unittest.mock import patch

from core_backend.errors import InternalError, PaymentServiceError, ValidationError
from orders.models import Order
from orders.services import OrderService
from orders.services.checkout_service import CheckoutService
from payments.services import (
    DUPLICATE_PAYMENT,
    NOTIFICATION_FAILED,
    VOUCHER_LIMIT_REACHED,
    PaymentReconciliationService,
)
from core_backend.tests.fixtures import FakeRelay


@pytest.fixture
def reconciler(fake_gateway, fake_relay):
    return PaymentReconciliationService(gateway=fake_gateway, relay=fake_relay)


@pytest.fixture
def pending_order(fake_gateway, lead, burger):
    """A NEW/PENDING order with a linked, unpaid session."""
    result = CheckoutService(gateway=fake_gateway, relay=FakeRelay()).checkout(
        lead.id, [{"product_id": burger.id, "quantity": 3}]
    )
    return Order.objects.get(pk=result.value.order_id)


@pytest.fixture
def voucher_order(fake_gateway, lead, burger, welcome20):
    result = CheckoutService(gateway=fake_gateway, relay=FakeRelay()).checkout(
        lead.id, [{"product_id": burger.id, "quantity": 3}], voucher_code="WELCOME20"
    )
    return Order.objects.get(pk=result.value.order_id)


def paid_events(relay):
    return [(channel, event) for channel, event, _ in relay.published]


# ============================================================================
# CONFIRMATION
# ============================================================================

@pytest.mark.django_db
class TestConfirmBySession:

    def test_paid_session_confirms_order(self, reconciler, fake_gateway, fake_relay, pending_order):
        fake_gateway.pay(pending_order.payment_ref)

        result = reconciler.confirm_by_session(pending_order.payment_ref, source="poll")

        assert result.ok
        assert result.value.transitioned is True
        pending_order.refresh_from_db()
        assert pending_order.payment_status == Order.PaymentStatus.PAID
        assert pending_order.status == Order.OrderStatus.CONFIRMED
        assert pending_order.paid_at is not None
        assert paid_events(fake_relay) == [
            ("kitchen", "kitchen.order_paid"),
            ("admin", "admin.order_paid"),
            (f"order-{pending_order.id}", "order.paid"),
        ]

    def test_kitchen_ticket_contents(self, reconciler, fake_gateway, fake_relay, pending_order):
        fake_gateway.pay(pending_order.payment_ref)

        reconciler.confirm_by_session(pending_order.payment_ref)

        ticket = fake_relay.published[0][2]
        assert ticket["order_id"] == pending_order.id
        assert ticket["table_number"] == "7"
        assert ticket["items"][0]["quantity"] == 3

    def test_unpaid_session_leaves_order_pending(self, reconciler, fake_relay, pending_order):
        result = reconciler.confirm_by_session(pending_order.payment_ref)

        assert result.ok
        assert result.value.transitioned is False
        assert result.value.payment_status == Order.PaymentStatus.PENDING
        assert fake_relay.published == []

    def test_expired_session_marks_failed(self, reconciler, fake_gateway, fake_relay, pending_order):
        fake_gateway.expire(pending_order.payment_ref)

        result = reconciler.confirm_by_session(pending_order.payment_ref)

        assert result.value.payment_status == Order.PaymentStatus.FAILED
        assert ("admin", "admin.order_payment_failed") in paid_events(fake_relay)

    def test_provider_outage_changes_nothing(self, reconciler, fake_gateway, fake_relay, pending_order):
        fake_gateway.pay(pending_order.payment_ref)
        fake_gateway.fail_retrieve = True

        result = reconciler.confirm_by_session(pending_order.payment_ref)

        assert isinstance(result.error, PaymentServiceError)
        pending_order.refresh_from_db()
        assert pending_order.payment_status == Order.PaymentStatus.PENDING
        assert fake_relay.published == []

        # A later retry succeeds
        fake_gateway.fail_retrieve = False
        assert reconciler.confirm_by_session(pending_order.payment_ref).value.transitioned

    def test_unlinked_order_found_through_metadata(self, reconciler, fake_gateway, pending_order):
        session_id = pending_order.payment_ref
        Order.objects.filter(pk=pending_order.pk).update(payment_ref=None)
        fake_gateway.pay(session_id)

        result = reconciler.confirm_by_session(session_id)

        assert result.value.transitioned is True
        pending_order.refresh_from_db()
        assert pending_order.payment_ref == session_id

    def test_metadata_mismatch_is_refused(self, reconciler, fake_gateway, pending_order):
        fake_gateway.sessions[pending_order.payment_ref]["metadata"]["order_id"] = "999"
        fake_gateway.pay(pending_order.payment_ref)

        result = reconciler.confirm_by_session(pending_order.payment_ref)

        assert isinstance(result.error, InternalError)
        pending_order.refresh_from_db()
        assert pending_order.payment_status == Order.PaymentStatus.PENDING

    def test_session_without_order_reference(self, reconciler, fake_gateway, pending_order):
        session_id = pending_order.payment_ref
        Order.objects.filter(pk=pending_order.pk).update(payment_ref=None)
        fake_gateway.sessions[session_id]["metadata"] = {}

        result = reconciler.confirm_by_session(session_id)

        assert isinstance(result.error, ValidationError)

    def test_paid_session_for_failed_order_is_not_resurrected(self, reconciler, fake_gateway, fake_relay, pending_order):
        OrderService.transition_payment(pending_order.id, Order.PaymentStatus.FAILED)
        fake_gateway.pay(pending_order.payment_ref)

        result = reconciler.confirm_by_session(pending_order.payment_ref)

        assert result.value.transitioned is False
        assert result.value.payment_status == Order.PaymentStatus.FAILED
        assert fake_relay.published == []


# ============================================================================
# IDEMPOTENCE
# ============================================================================

@pytest.mark.django_db
class TestIdempotentConfirmation:

    def test_webhook_and_poll_produce_one_transition(self, reconciler, fake_gateway, fake_relay, pending_order):
        """
        CRITICAL: Webhook and poll both report paid for the same order.

        Scenario:
        - Order PENDING, session paid
        - Webhook handled, then the confirmation page polls
        - Expected: one transition, exactly three broadcasts
        """
        fake_gateway.pay(pending_order.payment_ref)

        webhook = reconciler.handle_event(
            fake_gateway.event("checkout.session.completed", pending_order.payment_ref)
        )
        poll = reconciler.check_payment(order_id=pending_order.id)

        assert webhook.value.transitioned is True
        assert poll.value.transitioned is False
        assert poll.value.already_paid is True
        assert len(fake_relay.published) == 3

    def test_losing_caller_with_stale_order_does_not_broadcast(self, reconciler, fake_gateway, fake_relay, pending_order):
        """
        Two callers loaded the order while it was still PENDING. Whichever
        UPDATE lands second sees zero rows and must stay silent.
        """
        fake_gateway.pay(pending_order.payment_ref)
        session = fake_gateway.retrieve_session(pending_order.payment_ref)
        stale_a = Order.objects.get(pk=pending_order.pk)
        stale_b = Order.objects.get(pk=pending_order.pk)

        first = reconciler._mark_paid(stale_a, session, "webhook")
        second = reconciler._mark_paid(stale_b, session, "poll")

        assert first.value.transitioned is True
        assert second.value.transitioned is False
        assert len(fake_relay.published) == 3

    def test_repeated_webhook_deliveries(self, reconciler, fake_gateway, fake_relay, voucher_order, welcome20):
        fake_gateway.pay(voucher_order.payment_ref)
        event = fake_gateway.event("checkout.session.completed", voucher_order.payment_ref)

        for _ in range(3):
            assert reconciler.handle_event(event).ok

        welcome20.refresh_from_db()
        assert welcome20.used_count == 1
        assert len(fake_relay.published) == 3

    def test_poll_on_paid_order_skips_provider(self, reconciler, fake_gateway, pending_order):
        fake_gateway.pay(pending_order.payment_ref)
        reconciler.check_payment(order_id=pending_order.id)
        calls = len(fake_gateway.retrieve_calls)

        result = reconciler.check_payment(order_id=pending_order.id)

        assert result.value.payment_status == Order.PaymentStatus.PAID
        assert len(fake_gateway.retrieve_calls) == calls


# ============================================================================
# REPLACED SESSIONS (resume-payment)
# ============================================================================

@pytest.mark.django_db
class TestReplacedSessions:

    @pytest.fixture
    def resumed_order(self, fake_gateway, pending_order):
        """The order after resume-payment swapped cs_test_1 for cs_test_2."""
        result = CheckoutService(gateway=fake_gateway, relay=FakeRelay()).resume_payment(pending_order.id)
        assert result.ok, result.error
        pending_order.refresh_from_db()
        return pending_order

    def test_old_session_expiry_does_not_fail_order(self, reconciler, fake_gateway, fake_relay, resumed_order):
        """
        CRITICAL: The replaced session expires, then the customer pays the
        live one.

        Scenario:
        - checkout opens cs_test_1, resume-payment opens cs_test_2
        - checkout.session.expired arrives for cs_test_1
        - cs_test_2 is paid
        - Expected: order ends PAID/CONFIRMED and reaches the kitchen
        """
        old_session, live_session = "cs_test_1", "cs_test_2"
        assert resumed_order.payment_ref == live_session
        assert fake_gateway.sessions[old_session]["status"] == "expired"

        expired = reconciler.handle_event(fake_gateway.event("checkout.session.expired", old_session))

        assert expired.ok
        assert expired.value.transitioned is False
        resumed_order.refresh_from_db()
        assert resumed_order.payment_status == Order.PaymentStatus.PENDING
        assert fake_relay.published == []

        fake_gateway.pay(live_session)
        paid = reconciler.handle_event(fake_gateway.event("checkout.session.completed", live_session))

        assert paid.value.transitioned is True
        resumed_order.refresh_from_db()
        assert resumed_order.payment_status == Order.PaymentStatus.PAID
        assert resumed_order.status == Order.OrderStatus.CONFIRMED
        assert ("kitchen", "kitchen.order_paid") in paid_events(fake_relay)

    def test_old_session_polled_as_expired_does_not_fail_order(self, reconciler, resumed_order):
        result = reconciler.confirm_by_session("cs_test_1")

        assert result.value.payment_status == Order.PaymentStatus.PENDING

    def test_current_session_expiry_still_fails_order(self, reconciler, fake_gateway, resumed_order):
        fake_gateway.expire("cs_test_2")

        result = reconciler.handle_event(fake_gateway.event("checkout.session.expired", "cs_test_2"))

        assert result.value.payment_status == Order.PaymentStatus.FAILED

    def test_second_capture_is_flagged_for_refund(self, reconciler, fake_gateway, fake_relay, pending_order):
        """Both sessions got paid; the second confirmation must not look clean."""
        fake_gateway.fail_expire = True
        resumed = CheckoutService(gateway=fake_gateway, relay=FakeRelay()).resume_payment(pending_order.id)
        assert resumed.ok
        fake_gateway.pay("cs_test_1")
        fake_gateway.pay("cs_test_2")

        first = reconciler.confirm_by_session("cs_test_2")
        second = reconciler.confirm_by_session("cs_test_1")

        assert first.value.transitioned is True
        assert first.warnings == []
        assert second.ok
        assert second.value.transitioned is False
        assert second.warnings == [DUPLICATE_PAYMENT]
        assert len(fake_relay.published) == 3

    def test_redelivery_of_the_paying_session_is_not_a_duplicate(self, reconciler, fake_gateway, pending_order):
        fake_gateway.pay(pending_order.payment_ref)
        reconciler.confirm_by_session(pending_order.payment_ref)

        again = reconciler.confirm_by_session(pending_order.payment_ref)

        assert again.warnings == []
        assert again.value.already_paid is True


# ============================================================================
# SIDE EFFECTS OF THE WINNING TRANSITION
# ============================================================================

@pytest.mark.django_db
class TestConfirmationSideEffects:

    def test_voucher_redeemed_on_payment(self, reconciler, fake_gateway, voucher_order, welcome20):
        fake_gateway.pay(voucher_order.payment_ref)

        reconciler.confirm_by_session(voucher_order.payment_ref)

        welcome20.refresh_from_db()
        assert welcome20.used_count == 1

    def test_voucher_used_up_meanwhile_is_a_warning(self, reconciler, fake_gateway, voucher_order, welcome20):
        """The payment already happened; the order is confirmed regardless."""
        welcome20.used_count = welcome20.usage_limit
        welcome20.save()
        fake_gateway.pay(voucher_order.payment_ref)

        result = reconciler.confirm_by_session(voucher_order.payment_ref)

        assert result.ok
        assert result.degraded
        assert VOUCHER_LIMIT_REACHED in result.warnings
        assert result.value.payment_status == Order.PaymentStatus.PAID

    def test_broadcast_failure_keeps_payment(self, fake_gateway, pending_order):
        reconciler = PaymentReconciliationService(gateway=fake_gateway, relay=FakeRelay(fail=True))
        fake_gateway.pay(pending_order.payment_ref)

        result = reconciler.confirm_by_session(pending_order.payment_ref)

        assert result.ok
        assert result.warnings == [NOTIFICATION_FAILED]
        pending_order.refresh_from_db()
        assert pending_order.payment_status == Order.PaymentStatus.PAID

    def test_broadcast_exception_keeps_payment(self, reconciler, fake_gateway, pending_order):
        fake_gateway.pay(pending_order.payment_ref)

        with patch.object(
            reconciler.notifications, "notify_order_paid", side_effect=RuntimeError("layer down")
        ):
            result = reconciler.confirm_by_session(pending_order.payment_ref)

        assert result.ok
        assert NOTIFICATION_FAILED in result.warnings


# ============================================================================
# EVENTS AND POLLING
# ============================================================================

@pytest.mark.django_db
class TestEventsAndPolling:

    def test_webhook_claim_is_not_trusted(self, reconciler, fake_gateway, pending_order):
        """The event says paid but the provider says otherwise: stay PENDING."""
        event = fake_gateway.event("checkout.session.completed", pending_order.payment_ref)
        event["data"]["object"]["payment_status"] = "paid"

        result = reconciler.handle_event(event)

        assert result.value.transitioned is False
        pending_order.refresh_from_db()
        assert pending_order.payment_status == Order.PaymentStatus.PENDING

    def test_async_payment_failed_event(self, reconciler, fake_gateway, fake_relay, pending_order):
        result = reconciler.handle_event(
            fake_gateway.event("checkout.session.async_payment_failed", pending_order.payment_ref)
        )

        assert result.value.payment_status == Order.PaymentStatus.FAILED
        assert paid_events(fake_relay) == [
            ("admin", "admin.order_payment_failed"),
            (f"order-{pending_order.id}", "order.payment_failed"),
        ]

    def test_unhandled_event_is_acknowledged(self, reconciler):
        result = reconciler.handle_event({"type": "customer.created", "data": {"object": {}}})

        assert result.ok
        assert result.value is None

    def test_poll_by_payment_ref(self, reconciler, fake_gateway, pending_order):
        fake_gateway.pay(pending_order.payment_ref)

        result = reconciler.check_payment(payment_ref=pending_order.payment_ref)

        assert result.value.transitioned is True

    def test_poll_unknown_order(self, reconciler):
        result = reconciler.check_payment(order_id=424242)
        assert not result.ok
