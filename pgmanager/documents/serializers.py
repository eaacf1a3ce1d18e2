from rest_framework import serializers
from .models import Document, Notice


def _upper(data, *fields):
    for field in fields:
        value = data.get(field)
        if isinstance(value, str) and value != value.upper():
            data = data.copy()
            data[field] = value.upper()
    return data


class DocumentSerializer(serializers.ModelSerializer):
    file_size_display = serializers.CharField(read_only=True)
    tenant_name = serializers.CharField(source='tenant.full_name', read_only=True, default=None)
    uploaded_by_name = serializers.CharField(source='uploaded_by.full_name', read_only=True, default=None)

    class Meta:
        model = Document
        fields = ['id', 'property', 'tenant', 'tenant_name', 'title', 'description', 'document_type', 'file',
                  'original_name', 'mime_type', 'file_size', 'file_size_display', 'tags', 'is_public',
                  'expiry_date', 'uploaded_by', 'uploaded_by_name', 'created_at', 'updated_at']
        read_only_fields = ['property', 'file', 'original_name', 'mime_type', 'file_size', 'uploaded_by',
                            'created_at', 'updated_at']

    def to_internal_value(self, data):
        return super().to_internal_value(_upper(data, 'document_type'))

    def validate_tags(self, value):
        if isinstance(value, str):
            value = [tag.strip() for tag in value.split(',')]
        if not isinstance(value, list) or not all(isinstance(tag, str) for tag in value):
            raise serializers.ValidationError('Tags must be a list of strings')
        return [tag for tag in value if tag]


class NoticeSerializer(serializers.ModelSerializer):
    target_tenants = serializers.PrimaryKeyRelatedField(many=True, read_only=True)
    stats = serializers.SerializerMethodField()

    class Meta:
        model = Notice
        fields = ['id', 'property', 'title', 'content', 'notice_type', 'priority', 'is_published', 'publish_date',
                  'expiry_date', 'target_tenants', 'read_by', 'stats', 'created_by', 'created_at', 'updated_at']
        read_only_fields = ['property', 'read_by', 'created_by', 'created_at', 'updated_at']

    def get_stats(self, obj):
        if obj.target_tenants.exists():
            total_targets = obj.target_tenants.count()
        else:
            total_targets = obj.property.tenants.filter(status='ACTIVE').count()
        read_count = len(obj.read_by or [])
        return {
            'total_targets': total_targets,
            'read_count': read_count,
            'read_rate': round((read_count / total_targets) * 100, 1) if total_targets else 0,
        }

    def to_internal_value(self, data):
        return super().to_internal_value(_upper(data, 'notice_type', 'priority'))
