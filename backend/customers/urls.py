from django.urls import path
from .views import StartSessionView, AdminCustomerListView

app_name = "customers"

urlpatterns = [
    path("customers/start/", StartSessionView.as_view(), name="start-session"),
    path("admin/customers/", AdminCustomerListView.as_view(), name="admin-customer-list"),
]
