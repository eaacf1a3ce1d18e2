import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from pgmanager.core.permissions import IsActiveAccount
from pgmanager.core.responses import success_response, error_response, validation_error_response
from pgmanager.properties.access import get_owned_property
from .models import DashboardSettings
from .serializers import DashboardSettingsSerializer
from .services import get_dashboard_stats, get_recent_activities, get_occupancy_trends, get_revenue_trends

logger = logging.getLogger('pgmanager.dashboard')

MAX_TREND_MONTHS = 24
MAX_ACTIVITIES = 100


def _int_param(request, name, default, maximum):
    try:
        value = int(request.query_params.get(name, default))
    except (TypeError, ValueError):
        value = default
    return min(max(value, 1), maximum)


def _property_scope(request):
    """Returns (property_id, error_response); property_id is None for all properties"""
    property_id = request.query_params.get('property_id')
    if not property_id:
        return None, None
    prop = get_owned_property(request.user, property_id)
    if prop is None:
        return None, error_response('Property not found or access denied', status.HTTP_404_NOT_FOUND)
    return prop.id, None


@api_view(['GET'])
@permission_classes([IsActiveAccount])
def dashboard_stats(request):
    """Room, bed, tenant, property and revenue totals"""
    property_id, error = _property_scope(request)
    if error:
        return error
    return success_response(get_dashboard_stats(request.user.id, property_id))


@api_view(['GET'])
@permission_classes([IsActiveAccount])
def dashboard_activities(request):
    """Recent tenant joins and received payments"""
    property_id, error = _property_scope(request)
    if error:
        return error
    limit = _int_param(request, 'limit', 20, MAX_ACTIVITIES)
    return success_response(get_recent_activities(request.user.id, property_id, limit=limit))


@api_view(['GET'])
@permission_classes([IsActiveAccount])
def occupancy_trends(request):
    property_id, error = _property_scope(request)
    if error:
        return error
    months = _int_param(request, 'months', 6, MAX_TREND_MONTHS)
    return success_response(get_occupancy_trends(request.user.id, months, property_id))


@api_view(['GET'])
@permission_classes([IsActiveAccount])
def revenue_trends(request):
    property_id, error = _property_scope(request)
    if error:
        return error
    months = _int_param(request, 'months', 6, MAX_TREND_MONTHS)
    return success_response(get_revenue_trends(request.user.id, months, property_id))


@api_view(['GET', 'PUT', 'PATCH'])
@permission_classes([IsActiveAccount])
def dashboard_user_settings(request):
    """Get or update the current user's dashboard preferences"""
    settings_obj, created = DashboardSettings.objects.get_or_create(user=request.user)
    if created:
        logger.debug(f"Created default dashboard settings for {request.user.email}")

    if request.method == 'GET':
        return success_response(DashboardSettingsSerializer(settings_obj).data)

    serializer = DashboardSettingsSerializer(settings_obj, data=request.data, partial=True)
    if not serializer.is_valid():
        return validation_error_response(serializer.errors)
    serializer.save()
    return success_response(serializer.data, message='Dashboard settings updated successfully')
