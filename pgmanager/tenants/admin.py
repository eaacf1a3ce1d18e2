from django.contrib import admin
from .models import Tenant


@admin.register(Tenant)
class TenantAdmin(admin.ModelAdmin):
    list_display = ['tenant_id', 'full_name', 'phone', 'property', 'bed', 'status', 'joining_date', 'leaving_date']
    list_filter = ['status', 'is_active', 'property', 'id_proof_type']
    search_fields = ['tenant_id', 'full_name', 'phone', 'email']
    readonly_fields = ['created_at', 'updated_at']
    ordering = ['-created_at']
    date_hierarchy = 'joining_date'
