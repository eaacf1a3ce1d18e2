from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    """Account for property owners, managers and administrators"""
    ROLE_CHOICES = [
        ('OWNER', 'Owner'),
        ('MANAGER', 'Manager'),
        ('ADMIN', 'Admin'),
    ]

    SUBSCRIPTION_STATUS_CHOICES = [
        ('WAITING_APPROVAL', 'Waiting Approval'),
        ('ACTIVE', 'Active'),
        ('INACTIVE', 'Inactive'),
        ('BLOCKED', 'Blocked'),
        ('CANCELLED', 'Cancelled'),
    ]

    email = models.EmailField(unique=True)
    full_name = models.CharField(max_length=200, blank=True)
    phone = models.CharField(max_length=20, blank=True, null=True)
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default='OWNER')
    subscription_status = models.CharField(max_length=20, choices=SUBSCRIPTION_STATUS_CHOICES, default='WAITING_APPROVAL')
    is_active = models.BooleanField(default=True)
    approved_at = models.DateTimeField(null=True, blank=True)
    approved_by = models.ForeignKey('self', on_delete=models.SET_NULL, null=True, blank=True, related_name='approved_users')
    blocked_at = models.DateTimeField(null=True, blank=True)
    blocked_by = models.ForeignKey('self', on_delete=models.SET_NULL, null=True, blank=True, related_name='blocked_users')
    blocked_reason = models.TextField(blank=True, null=True)
    last_login_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['username']

    @property
    def is_admin_role(self):
        return self.role == 'ADMIN' or self.is_superuser

    def __str__(self):
        return self.full_name or self.email

    class Meta:
        db_table = 'users'


class AuditLog(models.Model):
    """Audit log for tenant, bed and payment operations"""
    ACTION_CHOICES = [
        ('create', 'Create'),
        ('update', 'Update'),
        ('delete', 'Delete'),
        ('tenant_create', 'Tenant Created'),
        ('tenant_update', 'Tenant Updated'),
        ('tenant_delete', 'Tenant Deleted'),
        ('tenant_vacate', 'Tenant Vacated'),
        ('bed_assign', 'Bed Assigned'),
        ('bed_unassign', 'Bed Unassigned'),
        ('tenant_relocate', 'Tenant Relocated'),
        ('payment_create', 'Payment Created'),
        ('payment_update', 'Payment Updated'),
        ('payment_delete', 'Payment Deleted'),
        ('payment_paid', 'Payment Marked Paid'),
        ('payment_bulk_create', 'Payments Generated'),
        ('notice_publish', 'Notice Published'),
        ('document_upload', 'Document Uploaded'),
    ]

    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, related_name='audit_logs')
    action = models.CharField(max_length=50, choices=ACTION_CHOICES)
    model_name = models.CharField(max_length=100)
    object_id = models.CharField(max_length=100)
    object_name = models.CharField(max_length=255, blank=True, null=True, help_text="Human-readable name of the object (e.g., tenant name, payment id)")
    property_id = models.CharField(max_length=100, blank=True, null=True)
    changes = models.JSONField(default=dict, blank=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'audit_logs'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['-created_at'], name='audit_created_idx'),
            models.Index(fields=['action'], name='audit_action_idx'),
            models.Index(fields=['model_name'], name='audit_model_idx'),
            models.Index(fields=['property_id'], name='audit_property_idx'),
        ]
