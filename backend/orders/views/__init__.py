"""
Orders views package.
"""

from .checkout_views import CheckoutView, ResumePaymentView
from .order_views import AdminOrderViewSet, KitchenOrderListView, OrderDetailView

__all__ = [
    "CheckoutView",
    "ResumePaymentView",
    "AdminOrderViewSet",
    "KitchenOrderListView",
    "OrderDetailView",
]
