import django_filters

from core_backend.base.filters import BaseFilterSet, FlexibleDateTimeFilter
from .models import Order


class OrderFilter(BaseFilterSet):
    """Dashboard order filters. Date-only upper bounds cover the whole day."""

    paid_after = FlexibleDateTimeFilter(field_name="paid_at", lookup_expr="gte")
    paid_before = FlexibleDateTimeFilter(field_name="paid_at", lookup_expr="lte")
    voucher_code = django_filters.CharFilter(lookup_expr="iexact")

    class Meta:
        model = Order
        fields = ["status", "payment_status", "table_number", "voucher_code"]
