from django.conf import settings
from django.db import models
from pgmanager.properties.models import Property

DEFAULT_RULES = [
    "The tenant agrees to pay rent on or before the 5th of every month.",
    "No smoking or consumption of alcohol is allowed on the premises.",
    "Visitors are allowed only between 9:00 AM to 9:00 PM.",
    "The tenant must maintain cleanliness in their room and common areas.",
    "Any damage to property will be charged from the security deposit.",
]

DEFAULT_AMENITIES = ['WiFi', 'Parking', 'Security', 'Power Backup']


def default_rules():
    return list(DEFAULT_RULES)


def default_amenities():
    return list(DEFAULT_AMENITIES)


def default_payment_settings():
    return {
        'rent_due_day': 5,
        'late_fee_days': 3,
        'late_fee_amount': 500,
        'accepted_methods': ['Cash', 'UPI', 'Bank Transfer'],
    }


def default_notification_settings():
    return {
        'email_notifications': True,
        'sms_notifications': False,
        'rent_reminders': True,
        'maintenance_alerts': True,
    }


class PropertySettings(models.Model):
    """House rules, amenities and payment terms of a property"""
    property = models.OneToOneField(Property, on_delete=models.CASCADE, related_name='settings')
    terms_and_conditions = models.TextField(blank=True, null=True)
    privacy_policy = models.TextField(blank=True, null=True)
    rules = models.JSONField(default=default_rules, blank=True)
    amenities = models.JSONField(default=default_amenities, blank=True)
    # {"phone", "email", "emergency_contact"}
    contact_info = models.JSONField(default=dict, blank=True)
    payment_settings = models.JSONField(default=default_payment_settings, blank=True)
    notification_settings = models.JSONField(default=default_notification_settings, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Settings for {self.property}"

    class Meta:
        db_table = 'property_settings'
        verbose_name_plural = 'property settings'


class UserSettings(models.Model):
    """Display, notification and security preferences of a user"""
    THEME_CHOICES = [
        ('light', 'Light'),
        ('dark', 'Dark'),
        ('system', 'System'),
    ]

    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='user_settings')
    theme = models.CharField(max_length=10, choices=THEME_CHOICES, default='light')
    language = models.CharField(max_length=10, default='en')
    timezone = models.CharField(max_length=50, default='Asia/Kolkata')
    date_format = models.CharField(max_length=20, default='DD/MM/YYYY')
    currency = models.CharField(max_length=3, default='INR')
    email_notifications = models.BooleanField(default=True)
    sms_notifications = models.BooleanField(default=False)
    push_notifications = models.BooleanField(default=True)
    rent_reminders = models.BooleanField(default=True)
    maintenance_alerts = models.BooleanField(default=True)
    new_tenant_alerts = models.BooleanField(default=True)
    payment_alerts = models.BooleanField(default=True)
    system_updates = models.BooleanField(default=False)
    two_factor_enabled = models.BooleanField(default=False)
    session_timeout = models.PositiveIntegerField(default=60, help_text='Minutes')
    login_notifications = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Settings for {self.user}"

    class Meta:
        db_table = 'user_settings'
        verbose_name_plural = 'user settings'
