import logging

from django.db.models import Prefetch
from django.utils import timezone

from core_backend.errors import NotFoundError
from orders.models import Order, OrderItem

logger = logging.getLogger(__name__)


class OrderService:
    """Order lookups and payment-state transitions."""

    # Payment status only moves forward out of PENDING
    VALID_PAYMENT_TRANSITIONS = {
        Order.PaymentStatus.PENDING: [
            Order.PaymentStatus.PAID,
            Order.PaymentStatus.FAILED,
        ],
        Order.PaymentStatus.PAID: [],
        Order.PaymentStatus.FAILED: [],
    }

    KITCHEN_QUEUE_LIMIT = 50

    @staticmethod
    def transition_payment(order_id, to_status, **fields) -> bool:
        """
        Move an order's payment status with a single conditional UPDATE.

        The WHERE clause only matches rows whose current status may move to
        ``to_status``, so concurrent callers racing on the same order get
        exactly one winner. Returns True for the caller whose update landed.
        """
        allowed_from = [
            current
            for current, targets in OrderService.VALID_PAYMENT_TRANSITIONS.items()
            if to_status in targets
        ]
        updated = Order.objects.filter(
            pk=order_id, payment_status__in=allowed_from
        ).update(payment_status=to_status, updated_at=timezone.now(), **fields)

        if updated:
            logger.info(f"Order {order_id} payment status -> {to_status}")
        return updated == 1

    @staticmethod
    def with_items(queryset=None):
        queryset = queryset if queryset is not None else Order.objects.all()
        return queryset.prefetch_related(
            Prefetch("items", queryset=OrderItem.objects.order_by("id"))
        )

    @staticmethod
    def get_order(order_id) -> Order:
        try:
            return OrderService.with_items().get(pk=order_id)
        except (Order.DoesNotExist, ValueError, TypeError):
            raise NotFoundError("Order not found.", details={"order_id": order_id})

    @staticmethod
    def find_by_payment_ref(payment_ref):
        if not payment_ref:
            return None
        return OrderService.with_items().filter(payment_ref=payment_ref).first()

    @staticmethod
    def kitchen_queue():
        """Paid orders the kitchen should prepare, newest first."""
        return OrderService.with_items(
            Order.objects.filter(
                payment_status=Order.PaymentStatus.PAID,
                status=Order.OrderStatus.CONFIRMED,
            )
        ).order_by("-paid_at", "-created_at")[: OrderService.KITCHEN_QUEUE_LIMIT]
