from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import serializers

from core_backend.base import StrictSerializer, TimestampedSerializer
from products.models import Category, Product
from .models import Voucher, normalize_code

MODEL_RULE_FIELDS = (
    "code",
    "discount_type",
    "discount_value",
    "minimum_order_amount_cents",
    "maximum_discount_cents",
    "usage_limit",
    "used_count",
    "valid_from",
    "valid_until",
)


class VoucherSerializer(TimestampedSerializer):
    code = serializers.CharField(max_length=50)
    applicable_product_ids = serializers.PrimaryKeyRelatedField(
        source="applicable_products",
        queryset=Product.objects.all(),
        many=True,
        required=False,
    )
    applicable_category_ids = serializers.PrimaryKeyRelatedField(
        source="applicable_categories",
        queryset=Category.objects.all(),
        many=True,
        required=False,
    )
    remaining_uses = serializers.IntegerField(read_only=True)

    class Meta:
        model = Voucher
        fields = [
            "id",
            "code",
            "description",
            "discount_type",
            "discount_value",
            "minimum_order_amount_cents",
            "maximum_discount_cents",
            "usage_limit",
            "used_count",
            "remaining_uses",
            "valid_from",
            "valid_until",
            "is_active",
            "applicable_product_ids",
            "applicable_category_ids",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "used_count"]

    def validate_code(self, value):
        code = normalize_code(value)
        if not code:
            raise serializers.ValidationError("Voucher code is required.")
        existing = Voucher.objects.filter(code=code)
        if self.instance is not None:
            existing = existing.exclude(pk=self.instance.pk)
        if existing.exists():
            raise serializers.ValidationError("Voucher code already exists.")
        return code

    def validate(self, attrs):
        attrs = super().validate(attrs)
        # Run the model rules against the merged (instance + incoming) state
        scalar = {
            k: v
            for k, v in attrs.items()
            if k not in ("applicable_products", "applicable_categories")
        }
        candidate = Voucher()
        if self.instance is not None:
            for field in MODEL_RULE_FIELDS:
                setattr(candidate, field, getattr(self.instance, field))
        for key, value in scalar.items():
            setattr(candidate, key, value)
        try:
            candidate.clean()
        except DjangoValidationError as e:
            raise serializers.ValidationError(e.message_dict)
        return attrs


class VoucherValidateSerializer(StrictSerializer):
    code = serializers.CharField(max_length=50)
    subtotal_cents = serializers.IntegerField(min_value=0)


class CartItemSerializer(StrictSerializer):
    product_id = serializers.IntegerField(min_value=1)
    quantity = serializers.IntegerField(min_value=1, max_value=99)
    notes = serializers.CharField(max_length=200, required=False, allow_blank=True)


class CartVoucherSerializer(StrictSerializer):
    code = serializers.CharField(max_length=50)
    items = CartItemSerializer(many=True, allow_empty=False)
