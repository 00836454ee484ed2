import django_filters
from django.db import models
from django.utils import timezone
from datetime import datetime, time


class FlexibleDateTimeFilter(django_filters.DateTimeFilter):
    """
    DateTimeFilter that treats a date-only upper bound as the whole day.

    "?created_before=2025-11-11" includes orders placed at 23:59 that day;
    a full datetime is used exactly as given.
    """

    def filter(self, qs, value):
        if (
            isinstance(value, datetime)
            and value.time() == time(0, 0, 0)
            and self.lookup_expr in ["lte", "lt"]
        ):
            value = datetime.combine(value.date(), time.max)
            if timezone.is_naive(value):
                value = timezone.make_aware(value)
        return super().filter(qs, value)


class BaseFilterSet(django_filters.FilterSet):
    """Common created/updated range filters for dashboard lists."""

    created_after = FlexibleDateTimeFilter(field_name="created_at", lookup_expr="gte")
    created_before = FlexibleDateTimeFilter(field_name="created_at", lookup_expr="lte")

    @classmethod
    def filter_for_field(cls, field, field_name, lookup_expr="exact"):
        if isinstance(field, models.DateTimeField):
            return FlexibleDateTimeFilter(field_name=field_name, lookup_expr=lookup_expr)
        return super().filter_for_field(field, field_name, lookup_expr)


class ArchivingFilterSet(BaseFilterSet):
    """For soft-deletable models: ``?is_active=false`` lists archived rows."""

    is_active = django_filters.BooleanFilter()
