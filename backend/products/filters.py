from django_filters import rest_framework as filters
from core_backend.base import ArchivingFilterSet
from .models import Product


class ProductFilter(ArchivingFilterSet):
    category = filters.CharFilter(field_name="category__slug")
    min_price = filters.NumberFilter(field_name="price_cents", lookup_expr="gte")
    max_price = filters.NumberFilter(field_name="price_cents", lookup_expr="lte")

    class Meta:
        model = Product
        fields = ["category", "is_active"]
