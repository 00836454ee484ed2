from django.contrib import admin
from .models import Order, OrderItem


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    readonly_fields = ("name", "unit_price_cents", "quantity", "line_total_cents", "notes")
    fields = readonly_fields
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "customer_name",
        "table_number",
        "status",
        "payment_status",
        "total_cents",
        "currency",
        "voucher_code",
        "created_at",
    )
    list_filter = ("status", "payment_status", "payment_provider", "created_at")
    search_fields = ("id", "customer_name", "customer_phone", "customer_email", "payment_ref")
    # Payment state only changes through reconciliation
    readonly_fields = (
        "status",
        "payment_status",
        "payment_ref",
        "paid_at",
        "subtotal_cents",
        "discount_cents",
        "total_cents",
        "settlement_amount_cents",
        "exchange_rate",
        "created_at",
        "updated_at",
    )
    inlines = [OrderItemInline]
    date_hierarchy = "created_at"
