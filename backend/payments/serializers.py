from rest_framework import serializers

from core_backend.base import StrictSerializer


class CheckPaymentSerializer(StrictSerializer):
    """Poll by order id, by payment reference, or both."""

    order_id = serializers.IntegerField(required=False, min_value=1)
    payment_ref = serializers.CharField(required=False, max_length=255)

    def validate(self, attrs):
        attrs = super().validate(attrs)
        if not attrs.get("order_id") and not attrs.get("payment_ref"):
            raise serializers.ValidationError("Provide an order_id or a payment_ref.")
        return attrs
