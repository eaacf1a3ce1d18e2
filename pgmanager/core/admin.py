from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.contrib.auth.forms import UserCreationForm as BaseUserCreationForm
from .models import User, AuditLog


class UserCreationForm(BaseUserCreationForm):
    class Meta(BaseUserCreationForm.Meta):
        model = User
        fields = ('email', 'username', 'full_name', 'phone', 'role')


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    add_form = UserCreationForm
    list_display = ['email', 'full_name', 'role', 'subscription_status', 'is_active', 'created_at']
    list_filter = ['role', 'subscription_status', 'is_active', 'is_staff']
    search_fields = ['email', 'username', 'full_name', 'phone']
    ordering = ['-created_at']
    fieldsets = BaseUserAdmin.fieldsets + (
        ('PG Manager', {'fields': ('full_name', 'phone', 'role', 'subscription_status',
                                   'approved_at', 'approved_by', 'blocked_at', 'blocked_by',
                                   'blocked_reason', 'last_login_at')}),
    )
    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': ('email', 'username', 'full_name', 'phone', 'role', 'password1', 'password2'),
        }),
    )


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ['user', 'action', 'model_name', 'object_id', 'property_id', 'ip_address', 'created_at']
    list_filter = ['action', 'model_name', 'created_at']
    search_fields = ['user__email', 'model_name', 'object_id', 'object_name']
    ordering = ['-created_at']
    readonly_fields = ['user', 'action', 'model_name', 'object_id', 'object_name', 'property_id',
                       'changes', 'ip_address', 'created_at']
