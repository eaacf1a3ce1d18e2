from rest_framework import serializers
from .models import DashboardSettings, default_layout


class DashboardSettingsSerializer(serializers.ModelSerializer):
    class Meta:
        model = DashboardSettings
        fields = ['default_view', 'show_notifications', 'auto_refresh', 'refresh_interval', 'favorite_charts',
                  'compact_mode', 'layout', 'updated_at']
        read_only_fields = ['updated_at']

    def validate_refresh_interval(self, value):
        if value < 5:
            raise serializers.ValidationError('Refresh interval must be at least 5 seconds')
        return value

    def validate_favorite_charts(self, value):
        if not isinstance(value, list) or not all(isinstance(chart, str) for chart in value):
            raise serializers.ValidationError('favorite_charts must be a list of chart names')
        return value

    def validate_layout(self, value):
        if not isinstance(value, dict):
            raise serializers.ValidationError('layout must be an object')
        merged = default_layout()
        if self.instance is not None:
            merged.update(self.instance.layout or {})
        merged.update({key: bool(flag) for key, flag in value.items()})
        return merged
