"""
Orders services package.

- OrderService: order lookups and conditional payment-state transitions
- OrderNotificationService: order lifecycle events for the relay
- CheckoutService: the checkout orchestrator (cart -> order -> payment session)
"""

from .order_service import OrderService
from .notification_service import OrderNotificationService

__all__ = [
    'OrderService',
    'OrderNotificationService',
]
