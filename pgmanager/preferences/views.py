import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from django.contrib.auth import get_user_model
from django.db import transaction
from pgmanager.core.permissions import IsActiveAccount
from pgmanager.core.responses import success_response, error_response, validation_error_response
from pgmanager.core.serializers import UserSerializer
from pgmanager.properties.access import get_owned_property
from .models import PropertySettings, UserSettings
from .services import export_user_data, reset_settings, RESET_TARGETS
from .serializers import (
    PropertySettingsSerializer, PropertyRulesSerializer, UserSettingsSerializer, ProfileSettingsSerializer
)

logger = logging.getLogger('pgmanager.preferences')

User = get_user_model()

PROFILE_FIELDS = ('full_name', 'phone', 'email')


def _property_settings(request, property_id):
    """Returns (settings, error_response); settings are created with defaults on first access"""
    prop = get_owned_property(request.user, property_id)
    if prop is None:
        return None, error_response('Property not found or access denied', status.HTTP_404_NOT_FOUND)
    settings_obj, created = PropertySettings.objects.get_or_create(
        property=prop,
        defaults={'contact_info': {
            'phone': request.user.phone or '',
            'email': request.user.email or '',
            'emergency_contact': '',
        }},
    )
    if created:
        logger.info(f"Created default settings for property {prop.id}")
    return settings_obj, None


@api_view(['GET', 'PUT', 'PATCH'])
@permission_classes([IsActiveAccount])
def property_settings(request, property_id):
    """Get or update rules, amenities, contact, payment and notification settings of a property"""
    settings_obj, error = _property_settings(request, property_id)
    if error:
        return error

    if request.method == 'GET':
        return success_response(PropertySettingsSerializer(settings_obj).data)

    serializer = PropertySettingsSerializer(settings_obj, data=request.data, partial=True)
    if not serializer.is_valid():
        return validation_error_response(serializer.errors)
    serializer.save()
    logger.info(f"Settings of property {property_id} updated by {request.user.email}")
    return success_response(serializer.data, message='Property settings updated successfully')


@api_view(['GET', 'PUT'])
@permission_classes([IsActiveAccount])
def property_rules(request, property_id):
    """Get or replace the house rules of a property"""
    settings_obj, error = _property_settings(request, property_id)
    if error:
        return error

    if request.method == 'GET':
        return success_response({'rules': settings_obj.rules or [], 'amenities': settings_obj.amenities or []})

    if 'rules' not in request.data:
        return error_response('Rules must be provided as a list')
    serializer = PropertyRulesSerializer(data=request.data)
    if not serializer.is_valid():
        return validation_error_response(serializer.errors)
    settings_obj.rules = serializer.validated_data['rules']
    settings_obj.save(update_fields=['rules', 'updated_at'])
    return success_response({'rules': settings_obj.rules}, message='Property rules updated successfully')


@api_view(['GET', 'PUT', 'PATCH'])
@permission_classes([IsActiveAccount])
def user_settings(request):
    """Profile plus display, notification and security preferences of the current user"""
    user = request.user
    settings_obj, _ = UserSettings.objects.get_or_create(user=user)

    if request.method == 'GET':
        data = UserSerializer(user).data
        data['properties'] = list(
            user.properties.values('id', 'name', 'address', 'city', 'total_floors', 'total_rooms', 'total_beds')
        )
        data['user_settings'] = UserSettingsSerializer(settings_obj).data
        return success_response(data)

    profile_data = {field: request.data[field] for field in PROFILE_FIELDS if field in request.data}
    profile = ProfileSettingsSerializer(data=profile_data)
    if not profile.is_valid():
        return validation_error_response(profile.errors)
    email = profile.validated_data.get('email')
    if email and User.objects.filter(email__iexact=email).exclude(pk=user.pk).exists():
        return error_response('Email already in use by another account')

    settings_data = {key: value for key, value in request.data.items() if key not in PROFILE_FIELDS}
    serializer = UserSettingsSerializer(settings_obj, data=settings_data, partial=True)
    if not serializer.is_valid():
        return validation_error_response(serializer.errors)

    with transaction.atomic():
        changed = [field for field in PROFILE_FIELDS if profile.validated_data.get(field)]
        for field in changed:
            setattr(user, field, profile.validated_data[field])
        if changed:
            user.save(update_fields=changed + ['updated_at'])
        serializer.save()

    data = UserSerializer(user).data
    data['user_settings'] = serializer.data
    return success_response(data, message='User profile and settings updated successfully')


@api_view(['GET'])
@permission_classes([IsActiveAccount])
def export_settings(request):
    """Download the account, its settings and every property with its floors, tenants and payments"""
    return success_response(export_user_data(request.user), message='User data exported successfully')


@api_view(['POST'])
@permission_classes([IsActiveAccount])
def reset_user_settings(request):
    """Reset user, dashboard or all preferences to their defaults"""
    settings_type = request.data.get('settings_type')
    if not isinstance(settings_type, str) or settings_type not in RESET_TARGETS:
        return error_response('Invalid settings type. Must be "user", "dashboard", or "all"')

    data = reset_settings(request.user, settings_type)
    label = 'All' if settings_type == 'all' else settings_type.capitalize()
    return success_response(data, message=f'{label} settings reset to default')
