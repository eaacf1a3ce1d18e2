from django.conf import settings
from django.db import models


class AdminAction(models.Model):
    """Record of an administrator acting on a user account"""
    ACTION_CHOICES = [
        ('USER_APPROVED', 'User Approved'),
        ('USER_BLOCKED', 'User Blocked'),
        ('USER_STATUS_CHANGED', 'User Status Changed'),
        ('USER_ROLE_CHANGED', 'User Role Changed'),
        ('USER_DELETED', 'User Deleted'),
    ]

    admin = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='admin_actions')
    # Kept after the target account is deleted
    target_user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='received_admin_actions'
    )
    action = models.CharField(max_length=30, choices=ACTION_CHOICES)
    details = models.JSONField(default=dict, blank=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    user_agent = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.action} by {self.admin_id}"

    class Meta:
        db_table = 'admin_actions'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['action'], name='admin_action_type_idx'),
            models.Index(fields=['-created_at'], name='admin_action_created_idx'),
        ]
