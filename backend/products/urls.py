from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import MenuView, AdminProductViewSet, AdminCategoryViewSet

app_name = "products"

router = DefaultRouter()
router.register(r"admin/products", AdminProductViewSet, basename="admin-product")
router.register(r"admin/categories", AdminCategoryViewSet, basename="admin-category")

urlpatterns = [
    path("products/menu/", MenuView.as_view(), name="menu"),
    path("", include(router.urls)),
]
