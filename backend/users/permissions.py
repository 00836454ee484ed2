from rest_framework import permissions
from .models import User


class IsAdminRole(permissions.BasePermission):
    """Voucher, product and account management."""

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.role == User.Role.ADMIN)


class IsStaffOrAdmin(permissions.BasePermission):
    """Kitchen display and order dashboards."""

    def has_permission(self, request, view):
        user = request.user
        return bool(
            user
            and user.is_authenticated
            and user.role in [User.Role.ADMIN, User.Role.STAFF]
        )
