from rest_framework import generics
from rest_framework.permissions import AllowAny

from core_backend.base import BaseViewSet
from users.permissions import IsAdminRole
from .filters import ProductFilter
from .models import Category, Product
from .serializers import CategorySerializer, MenuProductSerializer, ProductSerializer
from .services import ProductService


class MenuView(generics.ListAPIView):
    """Public menu: active products only."""

    permission_classes = [AllowAny]
    authentication_classes = []
    serializer_class = MenuProductSerializer
    filterset_class = ProductFilter

    def get_queryset(self):
        return ProductService.menu()


class AdminProductViewSet(BaseViewSet):
    """
    Product CRUD for admins. DELETE archives the product so historical
    orders keep their reference.
    """

    permission_classes = [IsAdminRole]
    serializer_class = ProductSerializer
    filterset_class = ProductFilter
    search_fields = ["name", "description"]
    ordering_fields = ["name", "price_cents", "created_at"]
    queryset = Product.objects.select_related("category").all()


class AdminCategoryViewSet(BaseViewSet):
    permission_classes = [IsAdminRole]
    serializer_class = CategorySerializer
    queryset = Category.objects.all()
    ordering = ["order", "name"]
