from django.urls import path
from .views import (
    admin_users, admin_user_stats, admin_pending_users, admin_update_user_status, admin_update_user_role,
    admin_actions,
)

urlpatterns = [
    path('admin/users/', admin_users, name='admin-users'),
    path('admin/users/stats/', admin_user_stats, name='admin-user-stats'),
    path('admin/users/pending/', admin_pending_users, name='admin-pending-users'),
    path('admin/users/status/', admin_update_user_status, name='admin-user-status'),
    path('admin/users/role/', admin_update_user_role, name='admin-user-role'),
    path('admin/actions/', admin_actions, name='admin-actions'),
]
