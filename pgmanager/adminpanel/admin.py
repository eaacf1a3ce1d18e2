from django.contrib import admin
from .models import AdminAction


@admin.register(AdminAction)
class AdminActionAdmin(admin.ModelAdmin):
    list_display = ['action', 'admin', 'target_user', 'ip_address', 'created_at']
    list_filter = ['action', 'created_at']
    search_fields = ['admin__email', 'target_user__email']
    readonly_fields = ['admin', 'target_user', 'action', 'details', 'ip_address', 'user_agent', 'created_at']
