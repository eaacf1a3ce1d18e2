from rest_framework.permissions import BasePermission, IsAuthenticated

ALLOWED_SUBSCRIPTION_STATUSES = ('ACTIVE', 'WAITING_APPROVAL')


def is_admin_user(user):
    """Check if user has the ADMIN role (superusers count as admins)"""
    return bool(user and user.is_authenticated and (user.role == 'ADMIN' or user.is_superuser))


class IsActiveAccount(IsAuthenticated):
    """
    Authenticated user whose subscription allows access.

    Blocked, inactive and cancelled accounts get 403; admins always pass.
    """
    message = 'Account access is restricted. Please contact the administrator.'

    def has_permission(self, request, view):
        if not super().has_permission(request, view):
            return False
        user = request.user
        if is_admin_user(user):
            return True
        return user.subscription_status in ALLOWED_SUBSCRIPTION_STATUSES


class IsAdminRole(BasePermission):
    """Only users with the ADMIN role"""
    message = 'Admin access required'

    def has_permission(self, request, view):
        return is_admin_user(request.user)
