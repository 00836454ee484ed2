import django_filters
from django.db.models import F
from django.utils import timezone

from core_backend.base import ArchivingFilterSet
from .models import Voucher


class VoucherFilter(ArchivingFilterSet):
    code = django_filters.CharFilter(field_name="code", lookup_expr="icontains")
    redeemable = django_filters.BooleanFilter(method="filter_redeemable")

    class Meta:
        model = Voucher
        fields = {
            "discount_type": ["exact"],
            "is_active": ["exact"],
        }

    def filter_redeemable(self, queryset, name, value):
        now = timezone.now()
        redeemable = queryset.filter(
            is_active=True,
            valid_from__lte=now,
            valid_until__gte=now,
            used_count__lt=F("usage_limit"),
        )
        if value:
            return redeemable
        return queryset.exclude(pk__in=redeemable.values("pk"))
