from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import ValidateVoucherView, ApplyCartVoucherView, AdminVoucherViewSet

app_name = "vouchers"

router = DefaultRouter()
router.register(r"admin/vouchers", AdminVoucherViewSet, basename="admin-voucher")

urlpatterns = [
    path("vouchers/validate/", ValidateVoucherView.as_view(), name="validate"),
    path("cart/apply-voucher/", ApplyCartVoucherView.as_view(), name="apply-cart-voucher"),
    path("", include(router.urls)),
]
