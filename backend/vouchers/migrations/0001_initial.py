import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("products", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Voucher",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "is_active",
                    models.BooleanField(
                        db_index=True,
                        default=True,
                        help_text="Inactive records are archived and cannot be ordered or redeemed.",
                    ),
                ),
                ("archived_at", models.DateTimeField(blank=True, null=True)),
                ("code", models.CharField(help_text="Customer-facing code, stored upper-case.", max_length=50, unique=True)),
                ("description", models.CharField(blank=True, max_length=255)),
                (
                    "discount_type",
                    models.CharField(
                        choices=[("PERCENTAGE", "Percentage"), ("FIXED_AMOUNT", "Fixed Amount")],
                        max_length=20,
                    ),
                ),
                (
                    "discount_value",
                    models.PositiveIntegerField(help_text="Percentage points (0-100) or an amount in minor units."),
                ),
                (
                    "minimum_order_amount_cents",
                    models.PositiveIntegerField(
                        default=0, help_text="The minimum subtotal required for the voucher to apply."
                    ),
                ),
                (
                    "maximum_discount_cents",
                    models.PositiveIntegerField(blank=True, help_text="Optional cap on the discount amount.", null=True),
                ),
                (
                    "usage_limit",
                    models.PositiveIntegerField(default=1, validators=[django.core.validators.MinValueValidator(1)]),
                ),
                ("used_count", models.PositiveIntegerField(default=0)),
                ("valid_from", models.DateTimeField()),
                ("valid_until", models.DateTimeField()),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("applicable_categories", models.ManyToManyField(blank=True, to="products.category")),
                ("applicable_products", models.ManyToManyField(blank=True, to="products.product")),
                (
                    "archived_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="vouchers_voucher_archived",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["is_active", "valid_from", "valid_until"], name="vouchers_vo_is_acti_8a3f5c_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("used_count__lte", models.F("usage_limit"))),
                        name="voucher_used_count_within_limit",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("usage_limit__gte", 1)),
                        name="voucher_usage_limit_positive",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("valid_from__lt", models.F("valid_until"))),
                        name="voucher_valid_window_ordered",
                    ),
                ],
            },
        ),
    ]
