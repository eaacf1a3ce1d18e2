from rest_framework import serializers
from .models import Tenant


class TenantSerializer(serializers.ModelSerializer):
    property_name = serializers.CharField(source='property.name', read_only=True)
    bed_info = serializers.SerializerMethodField()

    class Meta:
        model = Tenant
        fields = ['id', 'tenant_id', 'full_name', 'email', 'phone', 'alternate_phone', 'emergency_contact',
                  'address', 'id_proof_type', 'id_proof_number', 'occupation', 'company', 'monthly_income',
                  'joining_date', 'leaving_date', 'security_deposit', 'advance_rent', 'terms_accepted', 'notes',
                  'status', 'is_active', 'property', 'property_name', 'bed', 'bed_info', 'created_by',
                  'created_at', 'updated_at']
        read_only_fields = ['leaving_date', 'is_active', 'bed', 'created_by', 'created_at', 'updated_at']
        # tenant_id uniqueness is checked in the views
        extra_kwargs = {'tenant_id': {'validators': []}}

    def get_bed_info(self, obj):
        if obj.bed is None:
            return None
        return {
            'id': obj.bed.id,
            'bed_number': obj.bed.bed_number,
            'room_id': obj.bed.room_id,
            'room_number': obj.bed.room.room_number,
            'floor_name': obj.bed.room.floor.name,
        }

    def to_internal_value(self, data):
        value = data.get('id_proof_type')
        if isinstance(value, str) and value != value.upper():
            data = data.copy()
            data['id_proof_type'] = value.upper()
        return super().to_internal_value(data)

    def validate_status(self, value):
        if value == 'VACATED':
            raise serializers.ValidationError('Use the vacate endpoint to mark a tenant as vacated')
        return value

    def validate_emergency_contact(self, value):
        if value in (None, ''):
            return {}
        if not isinstance(value, dict):
            raise serializers.ValidationError('Emergency contact must be an object')
        return value


class VacateSerializer(serializers.Serializer):
    leaving_date = serializers.DateField()
    reason = serializers.CharField(required=False, allow_blank=True)
