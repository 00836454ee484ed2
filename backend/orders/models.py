from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import F, Q

from customers.models import CustomerLead
from products.models import Product


class Order(models.Model):
    class OrderStatus(models.TextChoices):
        NEW = "NEW", "New"
        CONFIRMED = "CONFIRMED", "Confirmed"
        CANCELLED = "CANCELLED", "Cancelled"

    class PaymentStatus(models.TextChoices):
        PENDING = "PENDING", "Pending"
        PAID = "PAID", "Paid"
        FAILED = "FAILED", "Failed"

    class PaymentProvider(models.TextChoices):
        STRIPE = "STRIPE", "Stripe"

    customer = models.ForeignKey(
        CustomerLead, on_delete=models.PROTECT, related_name="orders"
    )
    # Contact snapshot taken at checkout
    customer_name = models.CharField(max_length=120)
    customer_phone = models.CharField(max_length=32, null=True, blank=True)
    customer_email = models.EmailField(null=True, blank=True)
    table_number = models.CharField(max_length=16)

    subtotal_cents = models.PositiveIntegerField()
    discount_cents = models.PositiveIntegerField(default=0)
    voucher_code = models.CharField(max_length=50, null=True, blank=True)
    total_cents = models.PositiveIntegerField()
    currency = models.CharField(max_length=3, default="USD")

    # What the provider actually charges, fixed at checkout
    settlement_currency = models.CharField(max_length=3, default="USD")
    settlement_amount_cents = models.PositiveIntegerField()
    exchange_rate = models.DecimalField(max_digits=18, decimal_places=8, default=1)

    status = models.CharField(
        max_length=20, choices=OrderStatus.choices, default=OrderStatus.NEW, db_index=True
    )
    payment_status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING,
        db_index=True,
    )
    payment_provider = models.CharField(
        max_length=20, choices=PaymentProvider.choices, default=PaymentProvider.STRIPE
    )
    payment_ref = models.CharField(
        max_length=255,
        null=True,
        blank=True,
        unique=True,
        help_text="Provider checkout session id.",
    )
    order_notes = models.TextField(blank=True)
    paid_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=Q(discount_cents__lte=F("subtotal_cents")),
                name="order_discount_within_subtotal",
            ),
            models.CheckConstraint(
                condition=Q(total_cents=F("subtotal_cents") - F("discount_cents")),
                name="order_total_is_subtotal_minus_discount",
            ),
        ]
        indexes = [
            models.Index(
                fields=["payment_status", "status", "-created_at"],
                name="orders_orde_payment_1c9d42_idx",
            ),
            models.Index(
                fields=["payment_status", "created_at"],
                name="orders_orde_payment_6e0b17_idx",
            ),
        ]

    def __str__(self):
        return f"Order {self.id} - {self.customer_name} (table {self.table_number})"


class OrderItem(models.Model):
    order = models.ForeignKey(Order, related_name="items", on_delete=models.CASCADE)
    product = models.ForeignKey(
        Product, on_delete=models.SET_NULL, null=True, blank=True, related_name="+"
    )
    name = models.CharField(max_length=200)
    unit_price_cents = models.PositiveIntegerField()
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    line_total_cents = models.PositiveIntegerField()
    notes = models.CharField(max_length=200, blank=True)

    class Meta:
        ordering = ["id"]
        constraints = [
            models.CheckConstraint(
                condition=Q(quantity__gte=1), name="order_item_quantity_positive"
            ),
        ]

    def __str__(self):
        return f"{self.quantity} x {self.name}"
