from django.contrib import admin
from .models import Payment


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ['payment_id', 'tenant', 'property', 'amount', 'payment_type', 'status', 'due_date', 'paid_date']
    list_filter = ['status', 'payment_type', 'payment_method', 'property']
    search_fields = ['payment_id', 'tenant__full_name', 'tenant__tenant_id', 'transaction_id']
    readonly_fields = ['created_at', 'updated_at']
    ordering = ['-due_date']
    date_hierarchy = 'due_date'
