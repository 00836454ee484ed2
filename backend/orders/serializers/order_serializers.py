from rest_framework import serializers

from core_backend.base import StrictSerializer, TimestampedSerializer
from orders.models import Order
from vouchers.serializers import CartItemSerializer
from .order_item_serializers import OrderItemSerializer


class CheckoutRequestSerializer(StrictSerializer):
    """
    Checkout request body. Only ids and quantities are accepted; prices are
    always taken from the catalog.
    """

    customer_lead_id = serializers.IntegerField(min_value=1)
    items = CartItemSerializer(many=True, allow_empty=False)
    voucher_code = serializers.CharField(
        max_length=50, required=False, allow_blank=True, allow_null=True
    )
    order_notes = serializers.CharField(max_length=500, required=False, allow_blank=True)


PUBLIC_ORDER_FIELDS = [
    "id",
    "status",
    "payment_status",
    "table_number",
    "customer_name",
    "subtotal_cents",
    "discount_cents",
    "voucher_code",
    "total_cents",
    "currency",
    "settlement_amount_cents",
    "settlement_currency",
    "order_notes",
    "paid_at",
    "items",
    "created_at",
]


class PublicOrderSerializer(serializers.ModelSerializer):
    """What the customer's confirmation page may see: no contact details."""

    items = OrderItemSerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = PUBLIC_ORDER_FIELDS
        read_only_fields = fields


class OrderSerializer(TimestampedSerializer):
    """Full order for the staff dashboards."""

    items = OrderItemSerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = PUBLIC_ORDER_FIELDS + [
            "customer",
            "customer_phone",
            "customer_email",
            "exchange_rate",
            "payment_provider",
            "payment_ref",
            "updated_at",
        ]
        read_only_fields = fields
