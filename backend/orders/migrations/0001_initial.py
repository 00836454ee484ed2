import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("customers", "0001_initial"),
        ("products", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Order",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("customer_name", models.CharField(max_length=120)),
                ("customer_phone", models.CharField(blank=True, max_length=32, null=True)),
                ("customer_email", models.EmailField(blank=True, max_length=254, null=True)),
                ("table_number", models.CharField(max_length=16)),
                ("subtotal_cents", models.PositiveIntegerField()),
                ("discount_cents", models.PositiveIntegerField(default=0)),
                ("voucher_code", models.CharField(blank=True, max_length=50, null=True)),
                ("total_cents", models.PositiveIntegerField()),
                ("currency", models.CharField(default="USD", max_length=3)),
                ("settlement_currency", models.CharField(default="USD", max_length=3)),
                ("settlement_amount_cents", models.PositiveIntegerField()),
                ("exchange_rate", models.DecimalField(decimal_places=8, default=1, max_digits=18)),
                (
                    "status",
                    models.CharField(
                        choices=[("NEW", "New"), ("CONFIRMED", "Confirmed"), ("CANCELLED", "Cancelled")],
                        db_index=True,
                        default="NEW",
                        max_length=20,
                    ),
                ),
                (
                    "payment_status",
                    models.CharField(
                        choices=[("PENDING", "Pending"), ("PAID", "Paid"), ("FAILED", "Failed")],
                        db_index=True,
                        default="PENDING",
                        max_length=20,
                    ),
                ),
                (
                    "payment_provider",
                    models.CharField(choices=[("STRIPE", "Stripe")], default="STRIPE", max_length=20),
                ),
                (
                    "payment_ref",
                    models.CharField(
                        blank=True,
                        help_text="Provider checkout session id.",
                        max_length=255,
                        null=True,
                        unique=True,
                    ),
                ),
                ("order_notes", models.TextField(blank=True)),
                ("paid_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "customer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="orders",
                        to="customers.customerlead",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["payment_status", "status", "-created_at"], name="orders_orde_payment_1c9d42_idx"),
                    models.Index(fields=["payment_status", "created_at"], name="orders_orde_payment_6e0b17_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("discount_cents__lte", models.F("subtotal_cents"))),
                        name="order_discount_within_subtotal",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            ("total_cents", models.F("subtotal_cents") - models.F("discount_cents"))
                        ),
                        name="order_total_is_subtotal_minus_discount",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="OrderItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=200)),
                ("unit_price_cents", models.PositiveIntegerField()),
                (
                    "quantity",
                    models.PositiveIntegerField(validators=[django.core.validators.MinValueValidator(1)]),
                ),
                ("line_total_cents", models.PositiveIntegerField()),
                ("notes", models.CharField(blank=True, max_length=200)),
                (
                    "order",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="items",
                        to="orders.order",
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to="products.product",
                    ),
                ),
            ],
            options={
                "ordering": ["id"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("quantity__gte", 1)),
                        name="order_item_quantity_positive",
                    ),
                ],
            },
        ),
    ]
