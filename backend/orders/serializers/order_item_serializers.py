from rest_framework import serializers

from orders.models import OrderItem


class OrderItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderItem
        fields = [
            "id",
            "product_id",
            "name",
            "unit_price_cents",
            "quantity",
            "line_total_cents",
            "notes",
        ]
        read_only_fields = fields
