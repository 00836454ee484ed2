from rest_framework import generics
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from core_backend.base import ReadOnlyBaseViewSet
from orders.filters import OrderFilter
from orders.serializers import OrderSerializer, PublicOrderSerializer
from orders.services import OrderService
from users.permissions import IsStaffOrAdmin


class OrderDetailView(generics.GenericAPIView):
    """Order summary for the customer's confirmation page."""

    permission_classes = [AllowAny]
    authentication_classes = []
    serializer_class = PublicOrderSerializer

    def get(self, request, order_id, *args, **kwargs):
        order = OrderService.get_order(order_id)
        return Response(self.get_serializer(order).data)


class KitchenOrderListView(generics.ListAPIView):
    """
    Paid, confirmed orders for the kitchen display. Live updates arrive over
    the ``kitchen`` relay channel; this endpoint is the initial load.
    """

    permission_classes = [IsStaffOrAdmin]
    serializer_class = OrderSerializer
    pagination_class = None

    def get_queryset(self):
        return OrderService.kitchen_queue()


class AdminOrderViewSet(ReadOnlyBaseViewSet):
    permission_classes = [IsStaffOrAdmin]
    serializer_class = OrderSerializer
    filterset_class = OrderFilter
    search_fields = ["customer_name", "customer_phone", "customer_email", "payment_ref"]
    ordering_fields = ["created_at", "paid_at", "total_cents"]
    ordering = ["-created_at"]

    def get_queryset(self):
        return OrderService.with_items()
