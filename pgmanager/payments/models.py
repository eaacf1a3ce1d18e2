from django.conf import settings
from django.db import models
from django.utils import timezone
from django.utils.crypto import get_random_string
from pgmanager.properties.models import Property, Bed
from pgmanager.tenants.models import Tenant

PAYMENT_ID_CHARS = 'ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789'


def generate_payment_id():
    """PAY + epoch milliseconds + 4 random characters"""
    return f"PAY{int(timezone.now().timestamp() * 1000)}{get_random_string(4, PAYMENT_ID_CHARS)}"


class Payment(models.Model):
    """Rent, deposit or other charge owed by a tenant"""
    TYPE_CHOICES = [
        ('RENT', 'Rent'),
        ('DEPOSIT', 'Security Deposit'),
        ('MAINTENANCE', 'Maintenance'),
        ('ELECTRICITY', 'Electricity'),
        ('LATE_FEE', 'Late Fee'),
        ('OTHER', 'Other'),
    ]

    METHOD_CHOICES = [
        ('CASH', 'Cash'),
        ('UPI', 'UPI'),
        ('BANK_TRANSFER', 'Bank Transfer'),
        ('CARD', 'Card'),
        ('CHEQUE', 'Cheque'),
    ]

    STATUS_CHOICES = [
        ('PENDING', 'Pending'),
        ('PAID', 'Paid'),
    ]

    payment_id = models.CharField(max_length=50, unique=True)
    tenant = models.ForeignKey(Tenant, on_delete=models.CASCADE, related_name='payments')
    bed = models.ForeignKey(Bed, on_delete=models.SET_NULL, null=True, blank=True, related_name='payments')
    property = models.ForeignKey(Property, on_delete=models.CASCADE, related_name='payments')
    amount = models.DecimalField(max_digits=10, decimal_places=2)
    payment_type = models.CharField(max_length=20, choices=TYPE_CHOICES, default='RENT')
    payment_method = models.CharField(max_length=20, choices=METHOD_CHOICES, default='CASH')
    due_date = models.DateField()
    paid_date = models.DateTimeField(null=True, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='PENDING')
    month = models.CharField(max_length=7, blank=True, help_text='YYYY-MM')
    year = models.PositiveIntegerField(null=True, blank=True)
    description = models.TextField(blank=True)
    late_fee = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    discount = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    transaction_id = models.CharField(max_length=100, blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='created_payments'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def save(self, *args, **kwargs):
        # Billing period follows the due date unless given explicitly
        if self.due_date:
            if not self.month:
                self.month = self.due_date.strftime('%Y-%m')
            if not self.year:
                self.year = self.due_date.year
        super().save(*args, **kwargs)

    def get_total_amount(self):
        return self.amount + self.late_fee - self.discount

    def is_overdue(self):
        return self.status == 'PENDING' and self.due_date < timezone.localdate()

    def __str__(self):
        return f"{self.payment_id} - {self.tenant.full_name} - {self.amount}"

    class Meta:
        db_table = 'payments'
        ordering = ['-due_date', '-created_at']
        indexes = [
            models.Index(fields=['property', 'status'], name='payment_property_status_idx'),
            models.Index(fields=['due_date'], name='payment_due_date_idx'),
            models.Index(fields=['month'], name='payment_month_idx'),
        ]
