from django.contrib import admin
from .models import PropertySettings, UserSettings


@admin.register(PropertySettings)
class PropertySettingsAdmin(admin.ModelAdmin):
    list_display = ['property', 'updated_at']
    search_fields = ['property__name']


@admin.register(UserSettings)
class UserSettingsAdmin(admin.ModelAdmin):
    list_display = ['user', 'theme', 'language', 'timezone', 'currency', 'two_factor_enabled']
    list_filter = ['theme', 'two_factor_enabled']
    search_fields = ['user__email']
