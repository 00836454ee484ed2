"""
URL configuration for core_backend project.

Public ordering endpoints, staff dashboards and the payment webhook all live
under ``/api/``; each app's urls.py carries its own path prefixes.
"""

from django.contrib import admin
from django.urls import path, include
from django.http import JsonResponse


def health_check(request):
    """Simple health check endpoint that doesn't require authentication"""
    return JsonResponse({"status": "ok", "message": "Backend is running"})


urlpatterns = [
    path("health/", health_check, name="health_check"),
    path("admin/", admin.site.urls),
    path("api/auth/", include("users.urls")),
    path("api/", include("customers.urls")),
    path("api/", include("products.urls")),
    path("api/", include("vouchers.urls")),
    path("api/", include("orders.urls")),
    path("api/", include("payments.urls")),
]
