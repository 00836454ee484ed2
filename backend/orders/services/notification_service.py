import logging

from notifications.services import (
    ADMIN_CHANNEL,
    KITCHEN_CHANNEL,
    NotificationRelay,
    order_channel,
)

logger = logging.getLogger(__name__)


class OrderNotificationService:
    """
    Builds the order lifecycle events and hands them to the relay.

    Each method returns True only if every publish went through. A False
    result is informational; the order flow that called it has already
    committed and carries on.
    """

    def __init__(self, relay: NotificationRelay = None):
        self.relay = relay or NotificationRelay()

    def notify_new_order(self, order) -> bool:
        return self.relay.publish(
            ADMIN_CHANNEL,
            "admin.new_order",
            {
                "order_id": order.id,
                "customer_name": order.customer_name,
                "table_number": order.table_number,
                "total_cents": order.total_cents,
                "currency": order.currency,
                "status": order.status,
                "payment_status": order.payment_status,
                "created_at": order.created_at.isoformat(),
            },
        )

    def notify_order_paid(self, order) -> bool:
        """The three confirmation events: kitchen ticket, admin status, customer page."""
        results = [
            self.relay.publish(KITCHEN_CHANNEL, "kitchen.order_paid", self.kitchen_ticket(order)),
            self.relay.publish(
                ADMIN_CHANNEL,
                "admin.order_paid",
                {
                    "order_id": order.id,
                    "status": order.status,
                    "payment_status": order.payment_status,
                },
            ),
            self.relay.publish(
                order_channel(order.id),
                "order.paid",
                {"order_id": order.id, "status": order.payment_status},
            ),
        ]
        if not all(results):
            logger.warning(f"Some paid notifications for order {order.id} were not delivered")
        return all(results)

    def notify_payment_failed(self, order) -> bool:
        results = [
            self.relay.publish(
                ADMIN_CHANNEL,
                "admin.order_payment_failed",
                {"order_id": order.id, "payment_status": order.payment_status},
            ),
            self.relay.publish(
                order_channel(order.id),
                "order.payment_failed",
                {"order_id": order.id, "status": order.payment_status},
            ),
        ]
        return all(results)

    @staticmethod
    def kitchen_ticket(order) -> dict:
        return {
            "order_id": order.id,
            "customer_name": order.customer_name,
            "table_number": order.table_number,
            "phone": order.customer_phone,
            "email": order.customer_email,
            "items": [
                {
                    "name": item.name,
                    "quantity": item.quantity,
                    "unit_price_cents": item.unit_price_cents,
                    "line_total_cents": item.line_total_cents,
                    "notes": item.notes,
                }
                for item in order.items.all()
            ],
            "total_cents": order.total_cents,
            "currency": order.currency,
            "order_notes": order.order_notes,
            "created_at": order.created_at.isoformat(),
            "paid_at": order.paid_at.isoformat() if order.paid_at else None,
        }
