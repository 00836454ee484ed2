from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import F, Q
from django.utils import timezone

from core_backend.utils.archiving import SoftDeleteMixin
from products.models import Category, Product


def normalize_code(code):
    return (code or "").strip().upper()


class Voucher(SoftDeleteMixin):
    class DiscountType(models.TextChoices):
        PERCENTAGE = "PERCENTAGE", "Percentage"
        FIXED_AMOUNT = "FIXED_AMOUNT", "Fixed Amount"

    code = models.CharField(
        max_length=50,
        unique=True,
        help_text="Customer-facing code, stored upper-case.",
    )
    description = models.CharField(max_length=255, blank=True)
    discount_type = models.CharField(max_length=20, choices=DiscountType.choices)
    discount_value = models.PositiveIntegerField(
        help_text="Percentage points (0-100) or an amount in minor units.",
    )
    minimum_order_amount_cents = models.PositiveIntegerField(
        default=0,
        help_text="The minimum subtotal required for the voucher to apply.",
    )
    maximum_discount_cents = models.PositiveIntegerField(
        null=True,
        blank=True,
        help_text="Optional cap on the discount amount.",
    )
    usage_limit = models.PositiveIntegerField(
        default=1, validators=[MinValueValidator(1)]
    )
    used_count = models.PositiveIntegerField(default=0)
    valid_from = models.DateTimeField()
    valid_until = models.DateTimeField()

    # Optional scoping; empty means the whole order
    applicable_products = models.ManyToManyField(Product, blank=True)
    applicable_categories = models.ManyToManyField(Category, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=Q(used_count__lte=F("usage_limit")),
                name="voucher_used_count_within_limit",
            ),
            models.CheckConstraint(
                condition=Q(usage_limit__gte=1),
                name="voucher_usage_limit_positive",
            ),
            models.CheckConstraint(
                condition=Q(valid_from__lt=F("valid_until")),
                name="voucher_valid_window_ordered",
            ),
        ]
        indexes = [
            models.Index(
                fields=["is_active", "valid_from", "valid_until"],
                name="vouchers_vo_is_acti_8a3f5c_idx",
            ),
        ]

    def __str__(self):
        return f"{self.code} ({self.get_discount_type_display()} {self.discount_value})"

    def save(self, *args, **kwargs):
        self.code = normalize_code(self.code)
        super().save(*args, **kwargs)

    @property
    def remaining_uses(self):
        return max(0, self.usage_limit - self.used_count)

    def is_in_window(self, now=None):
        now = now or timezone.now()
        return self.valid_from <= now <= self.valid_until

    def clean(self):
        super().clean()
        errors = {}

        if self.discount_type == self.DiscountType.PERCENTAGE and self.discount_value > 100:
            errors["discount_value"] = "Percentage discount cannot exceed 100%."

        if self.valid_from and self.valid_until and self.valid_from >= self.valid_until:
            errors["valid_until"] = "Valid until must be after valid from."

        if (
            self.discount_type == self.DiscountType.FIXED_AMOUNT
            and self.maximum_discount_cents is not None
            and self.maximum_discount_cents < self.discount_value
        ):
            errors["maximum_discount_cents"] = (
                "Maximum discount cannot be less than the discount value."
            )

        if self.usage_limit is not None and self.used_count > self.usage_limit:
            errors["usage_limit"] = "Usage limit cannot be below the number of uses so far."

        if errors:
            raise ValidationError(errors)
