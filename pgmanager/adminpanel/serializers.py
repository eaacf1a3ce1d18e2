from rest_framework import serializers
from pgmanager.core.models import User
from .models import AdminAction


class UserBriefSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ['id', 'full_name', 'email']


class AdminUserSerializer(serializers.ModelSerializer):
    """User row as shown to administrators, with ownership counts"""
    approver = UserBriefSerializer(source='approved_by', read_only=True)
    blocker = UserBriefSerializer(source='blocked_by', read_only=True)
    properties = serializers.SerializerMethodField()
    counts = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ['id', 'email', 'username', 'full_name', 'phone', 'role', 'subscription_status', 'is_active',
                  'approved_at', 'approver', 'blocked_at', 'blocker', 'blocked_reason', 'last_login_at',
                  'properties', 'counts', 'created_at', 'updated_at']

    def get_properties(self, obj):
        return list(obj.properties.values('id', 'name'))

    def get_counts(self, obj):
        return {
            'properties': obj.properties.count(),
            'tenants': obj.created_tenants.count(),
            'payments': obj.created_payments.count(),
        }


class UserStatusSerializer(serializers.Serializer):
    user_id = serializers.IntegerField()
    status = serializers.ChoiceField(choices=[choice for choice, _ in User.SUBSCRIPTION_STATUS_CHOICES])
    reason = serializers.CharField(required=False, allow_blank=True, allow_null=True)

    def to_internal_value(self, data):
        value = data.get('status')
        if isinstance(value, str) and value != value.upper():
            data = data.copy()
            data['status'] = value.upper()
        return super().to_internal_value(data)


class AdminActionSerializer(serializers.ModelSerializer):
    admin = UserBriefSerializer(read_only=True)
    target_user = UserBriefSerializer(read_only=True)

    class Meta:
        model = AdminAction
        fields = ['id', 'admin', 'target_user', 'action', 'details', 'ip_address', 'user_agent', 'created_at']


class UserRoleSerializer(serializers.Serializer):
    user_id = serializers.IntegerField()
    role = serializers.ChoiceField(choices=[choice for choice, _ in User.ROLE_CHOICES])

    def to_internal_value(self, data):
        value = data.get('role')
        if isinstance(value, str) and value != value.upper():
            data = data.copy()
            data['role'] = value.upper()
        return super().to_internal_value(data)
