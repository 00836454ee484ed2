from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import (
    AdminOrderViewSet,
    CheckoutView,
    KitchenOrderListView,
    OrderDetailView,
    ResumePaymentView,
)

app_name = "orders"

router = DefaultRouter()
router.register(r"admin/orders", AdminOrderViewSet, basename="admin-order")

urlpatterns = [
    path("checkout/", CheckoutView.as_view(), name="checkout"),
    path("orders/<int:order_id>/", OrderDetailView.as_view(), name="order-detail"),
    path(
        "orders/<int:order_id>/resume-payment/",
        ResumePaymentView.as_view(),
        name="resume-payment",
    ),
    path("kitchen/orders/", KitchenOrderListView.as_view(), name="kitchen-orders"),
    path("", include(router.urls)),
]
