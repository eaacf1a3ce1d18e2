from django.conf import settings
from django.db import models


def default_favorite_charts():
    return ['occupancy', 'revenue']


def default_layout():
    return {
        'show_stats': True,
        'show_charts': True,
        'show_activities': True,
        'show_quick_actions': True,
    }


class DashboardSettings(models.Model):
    """Per-user dashboard display preferences"""
    VIEW_CHOICES = [
        ('cards', 'Cards'),
        ('list', 'List'),
        ('compact', 'Compact'),
    ]

    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='dashboard_settings')
    default_view = models.CharField(max_length=20, choices=VIEW_CHOICES, default='cards')
    show_notifications = models.BooleanField(default=True)
    auto_refresh = models.BooleanField(default=False)
    refresh_interval = models.PositiveIntegerField(default=30, help_text='Seconds')
    favorite_charts = models.JSONField(default=default_favorite_charts, blank=True)
    compact_mode = models.BooleanField(default=False)
    layout = models.JSONField(default=default_layout, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Dashboard settings for {self.user}"

    class Meta:
        db_table = 'dashboard_settings'
        verbose_name_plural = 'dashboard settings'
