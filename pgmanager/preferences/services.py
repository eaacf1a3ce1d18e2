"""Account export and settings reset"""
import logging
from django.utils import timezone
from pgmanager.core.serializers import UserSerializer
from pgmanager.dashboard.models import DashboardSettings
from pgmanager.dashboard.serializers import DashboardSettingsSerializer
from pgmanager.documents.serializers import NoticeSerializer
from pgmanager.payments.serializers import PaymentSerializer
from pgmanager.properties.serializers import PropertySerializer, FloorSerializer
from pgmanager.tenants.serializers import TenantSerializer
from .models import PropertySettings, UserSettings
from .serializers import PropertySettingsSerializer, UserSettingsSerializer

logger = logging.getLogger('pgmanager.preferences')

RESET_TARGETS = {
    'user': [UserSettings],
    'dashboard': [DashboardSettings],
    'all': [UserSettings, DashboardSettings],
}


def _settings_or_none(serializer_class, model, **lookup):
    instance = model.objects.filter(**lookup).first()
    return serializer_class(instance).data if instance is not None else None


def _export_property(prop):
    data = PropertySerializer(prop).data
    data['settings'] = _settings_or_none(PropertySettingsSerializer, PropertySettings, property=prop)
    data['floors'] = FloorSerializer(prop.floors.prefetch_related('rooms__beds__tenant'), many=True).data
    data['tenants'] = TenantSerializer(prop.tenants.select_related('bed__room'), many=True).data
    data['payments'] = PaymentSerializer(prop.payments.select_related('tenant', 'bed'), many=True).data
    data['notices'] = NoticeSerializer(prop.notices.prefetch_related('target_tenants'), many=True).data
    # File paths stay out of the export
    data['documents'] = list(prop.documents.values('id', 'title', 'document_type', 'created_at'))
    return data


def export_user_data(user):
    """Everything the account owns, nested property by property"""
    data = UserSerializer(user).data
    data['user_settings'] = _settings_or_none(UserSettingsSerializer, UserSettings, user=user)
    data['dashboard_settings'] = _settings_or_none(DashboardSettingsSerializer, DashboardSettings, user=user)
    data['properties'] = [_export_property(prop) for prop in user.properties.order_by('created_at')]
    logger.info(f"Exported account data of {user.email} ({len(data['properties'])} properties)")
    return {'exported_at': timezone.now().isoformat(), 'user': data}


def reset_to_defaults(instance):
    """Put every field that declares a default back to it"""
    for field in instance._meta.concrete_fields:
        if field.has_default():
            setattr(instance, field.attname, field.get_default())
    instance.save()
    return instance


def reset_settings(user, settings_type):
    """Reset the user and/or dashboard preferences; returns the fresh values keyed by kind"""
    result = {}
    for model in RESET_TARGETS[settings_type]:
        instance, _ = model.objects.get_or_create(user=user)
        reset_to_defaults(instance)
        if model is UserSettings:
            result['user_settings'] = UserSettingsSerializer(instance).data
        else:
            result['dashboard_settings'] = DashboardSettingsSerializer(instance).data
    logger.info(f"Reset {settings_type} settings of {user.email}")
    return result
