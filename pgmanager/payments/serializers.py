from rest_framework import serializers
from .models import Payment


class PaymentSerializer(serializers.ModelSerializer):
    tenant_name = serializers.CharField(source='tenant.full_name', read_only=True)
    tenant_code = serializers.CharField(source='tenant.tenant_id', read_only=True)
    bed_number = serializers.CharField(source='bed.bed_number', read_only=True, default=None)
    total_amount = serializers.SerializerMethodField()
    is_overdue = serializers.SerializerMethodField()

    class Meta:
        model = Payment
        fields = ['id', 'payment_id', 'tenant', 'tenant_name', 'tenant_code', 'bed', 'bed_number', 'property',
                  'amount', 'payment_type', 'payment_method', 'due_date', 'paid_date', 'status', 'month', 'year',
                  'description', 'late_fee', 'discount', 'total_amount', 'transaction_id', 'is_overdue',
                  'created_by', 'created_at', 'updated_at']
        read_only_fields = ['status', 'paid_date', 'created_by', 'created_at', 'updated_at']
        # payment_id uniqueness is checked in the views
        extra_kwargs = {'payment_id': {'validators': []}}

    def get_total_amount(self, obj):
        return obj.get_total_amount()

    def get_is_overdue(self, obj):
        return obj.is_overdue()

    def to_internal_value(self, data):
        for field in ('payment_type', 'payment_method'):
            value = data.get(field)
            if isinstance(value, str) and value != value.upper():
                data = data.copy()
                data[field] = value.upper()
        return super().to_internal_value(data)

    def validate_amount(self, value):
        if value <= 0:
            raise serializers.ValidationError('Amount must be greater than zero')
        return value

    def validate_month(self, value):
        if value and (len(value) != 7 or value[4] != '-' or not value.replace('-', '').isdigit()):
            raise serializers.ValidationError('Month must be in YYYY-MM format')
        return value


class MarkPaidSerializer(serializers.Serializer):
    paid_date = serializers.DateTimeField(required=False)
    payment_method = serializers.ChoiceField(choices=Payment.METHOD_CHOICES, required=False)
    transaction_id = serializers.CharField(required=False, allow_blank=True, max_length=100)

    def to_internal_value(self, data):
        value = data.get('payment_method')
        if isinstance(value, str) and value != value.upper():
            data = data.copy()
            data['payment_method'] = value.upper()
        return super().to_internal_value(data)


class BulkPaymentSerializer(serializers.Serializer):
    """One pending charge per active tenant of a property for the due date's month"""
    property_id = serializers.IntegerField()
    tenant_ids = serializers.ListField(child=serializers.IntegerField(), required=False, allow_empty=True)
    payment_type = serializers.ChoiceField(choices=Payment.TYPE_CHOICES, default='RENT')
    # Defaults to each tenant's bed rent
    amount = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, allow_null=True)
    due_date = serializers.DateField()
    description = serializers.CharField(required=False, allow_blank=True)

    def to_internal_value(self, data):
        value = data.get('payment_type')
        if isinstance(value, str) and value != value.upper():
            data = data.copy()
            data['payment_type'] = value.upper()
        return super().to_internal_value(data)

    def validate_amount(self, value):
        if value is not None and value <= 0:
            raise serializers.ValidationError('Amount must be greater than zero')
        return value
