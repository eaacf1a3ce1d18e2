from rest_framework import serializers
from .models import PropertySettings, UserSettings


def _string_list(value, label):
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise serializers.ValidationError(f'{label} must be a list of strings')
    return [item.strip() for item in value if item.strip()]


class PropertySettingsSerializer(serializers.ModelSerializer):
    class Meta:
        model = PropertySettings
        fields = ['id', 'property', 'terms_and_conditions', 'privacy_policy', 'rules', 'amenities', 'contact_info',
                  'payment_settings', 'notification_settings', 'created_at', 'updated_at']
        read_only_fields = ['property', 'created_at', 'updated_at']

    def validate_rules(self, value):
        return _string_list(value, 'Rules')

    def validate_amenities(self, value):
        return _string_list(value, 'Amenities')

    def _merge(self, field, value):
        if not isinstance(value, dict):
            raise serializers.ValidationError(f'{field} must be an object')
        merged = dict(getattr(self.instance, field, None) or {})
        merged.update(value)
        return merged

    def validate_contact_info(self, value):
        return self._merge('contact_info', value)

    def validate_notification_settings(self, value):
        return self._merge('notification_settings', value)

    def validate_payment_settings(self, value):
        merged = self._merge('payment_settings', value)
        due_day = merged.get('rent_due_day')
        if due_day is not None and (not isinstance(due_day, int) or not 1 <= due_day <= 28):
            raise serializers.ValidationError('rent_due_day must be a day between 1 and 28')
        return merged


class PropertyRulesSerializer(serializers.Serializer):
    rules = serializers.JSONField()

    def validate_rules(self, value):
        return _string_list(value, 'Rules')


class UserSettingsSerializer(serializers.ModelSerializer):
    class Meta:
        model = UserSettings
        exclude = ['id', 'user', 'created_at']
        read_only_fields = ['updated_at']

    def validate_session_timeout(self, value):
        if value < 5:
            raise serializers.ValidationError('Session timeout must be at least 5 minutes')
        return value


class ProfileSettingsSerializer(serializers.Serializer):
    full_name = serializers.CharField(max_length=200, required=False, allow_blank=True, allow_null=True)
    phone = serializers.CharField(max_length=20, required=False, allow_blank=True, allow_null=True)
    email = serializers.EmailField(required=False, allow_blank=True, allow_null=True)

    def validate_email(self, value):
        return value.strip().lower() if value else value
