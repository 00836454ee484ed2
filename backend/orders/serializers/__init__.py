"""
Orders serializers package.
"""

from .order_item_serializers import OrderItemSerializer
from .order_serializers import (
    CheckoutRequestSerializer,
    OrderSerializer,
    PublicOrderSerializer,
)

__all__ = [
    "OrderItemSerializer",
    "CheckoutRequestSerializer",
    "OrderSerializer",
    "PublicOrderSerializer",
]
