from django.urls import path
from .views import property_settings, property_rules, user_settings, export_settings, reset_user_settings

urlpatterns = [
    path('settings/property/<int:property_id>/', property_settings, name='property-settings'),
    path('settings/property/<int:property_id>/rules/', property_rules, name='property-rules'),
    path('settings/user/', user_settings, name='user-settings'),
    path('settings/export/', export_settings, name='settings-export'),
    path('settings/reset/', reset_user_settings, name='settings-reset'),
]
