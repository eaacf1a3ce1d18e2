from django.conf import settings
from django.db import models
from pgmanager.properties.models import Property
from pgmanager.tenants.models import Tenant


def format_file_size(size):
    """Human readable size, e.g. 1536 -> '1.5 KB'"""
    if not size:
        return '0 Bytes'
    units = ['Bytes', 'KB', 'MB', 'GB']
    value = float(size)
    index = 0
    while value >= 1024 and index < len(units) - 1:
        value /= 1024
        index += 1
    if index == 0:
        return f"{int(value)} Bytes"
    return f"{round(value, 2):g} {units[index]}"


class Document(models.Model):
    """File stored for a property, optionally tied to a tenant"""
    TYPE_CHOICES = [
        ('AGREEMENT', 'Agreement'),
        ('ID_PROOF', 'ID Proof'),
        ('RECEIPT', 'Receipt'),
        ('POLICY', 'Policy'),
        ('MAINTENANCE', 'Maintenance'),
        ('LEGAL', 'Legal'),
        ('INSURANCE', 'Insurance'),
        ('OTHER', 'Other'),
    ]

    property = models.ForeignKey(Property, on_delete=models.CASCADE, related_name='documents')
    tenant = models.ForeignKey(Tenant, on_delete=models.SET_NULL, null=True, blank=True, related_name='documents')
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    document_type = models.CharField(max_length=20, choices=TYPE_CHOICES, default='OTHER')
    file = models.FileField(upload_to='documents/%Y/%m/')
    original_name = models.CharField(max_length=255)
    mime_type = models.CharField(max_length=100)
    file_size = models.PositiveIntegerField(default=0)
    tags = models.JSONField(default=list, blank=True)
    is_public = models.BooleanField(default=False)
    expiry_date = models.DateField(null=True, blank=True)
    uploaded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='uploaded_documents'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def file_size_display(self):
        return format_file_size(self.file_size)

    def __str__(self):
        return self.title

    class Meta:
        db_table = 'documents'
        ordering = ['-created_at']


class Notice(models.Model):
    """Announcement for the tenants of a property"""
    TYPE_CHOICES = [
        ('GENERAL', 'General'),
        ('MAINTENANCE', 'Maintenance'),
        ('PAYMENT_REMINDER', 'Payment Reminder'),
        ('RULE_UPDATE', 'Rule Update'),
        ('EVENT', 'Event'),
        ('EMERGENCY', 'Emergency'),
    ]

    PRIORITY_CHOICES = [
        ('LOW', 'Low'),
        ('MEDIUM', 'Medium'),
        ('HIGH', 'High'),
        ('URGENT', 'Urgent'),
    ]

    property = models.ForeignKey(Property, on_delete=models.CASCADE, related_name='notices')
    title = models.CharField(max_length=200)
    content = models.TextField()
    notice_type = models.CharField(max_length=20, choices=TYPE_CHOICES, default='GENERAL')
    priority = models.CharField(max_length=10, choices=PRIORITY_CHOICES, default='MEDIUM')
    is_published = models.BooleanField(default=False)
    publish_date = models.DateTimeField(null=True, blank=True)
    expiry_date = models.DateTimeField(null=True, blank=True)
    # Empty means the notice is for every tenant of the property
    target_tenants = models.ManyToManyField(Tenant, blank=True, related_name='notices')
    # [{"tenant_id": <pk>, "read_at": <iso datetime>}]
    read_by = models.JSONField(default=list, blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='created_notices'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def is_read_by(self, tenant_pk):
        return any(entry.get('tenant_id') == tenant_pk for entry in self.read_by)

    def __str__(self):
        return self.title

    class Meta:
        db_table = 'notices'
        ordering = ['-created_at']
