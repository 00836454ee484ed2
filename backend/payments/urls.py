from django.urls import path

from .views import CheckPaymentView, StripeWebhookView

app_name = "payments"

urlpatterns = [
    path("payments/check/", CheckPaymentView.as_view(), name="check-payment"),
    path("payments/webhooks/stripe/", StripeWebhookView.as_view(), name="stripe-webhook"),
]
