from django.contrib import admin
from .models import DashboardSettings


@admin.register(DashboardSettings)
class DashboardSettingsAdmin(admin.ModelAdmin):
    list_display = ['user', 'default_view', 'auto_refresh', 'refresh_interval', 'compact_mode', 'updated_at']
    search_fields = ['user__email']
