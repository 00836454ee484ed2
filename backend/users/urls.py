from django.urls import path
from .views import StaffLoginView, StaffTokenRefreshView, CurrentUserView

app_name = "users"

urlpatterns = [
    path("token/", StaffLoginView.as_view(), name="token-obtain"),
    path("token/refresh/", StaffTokenRefreshView.as_view(), name="token-refresh"),
    path("me/", CurrentUserView.as_view(), name="me"),
]
