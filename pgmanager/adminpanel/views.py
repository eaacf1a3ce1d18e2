import logging
from datetime import timedelta
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from django.db.models import Count, Q
from django.utils import timezone
from pgmanager.core.models import User
from pgmanager.core.permissions import IsAdminRole
from pgmanager.core.responses import success_response, error_response, validation_error_response, paginate
from pgmanager.core.utils import get_client_ip
from .models import AdminAction
from .serializers import (
    AdminUserSerializer, UserStatusSerializer, UserRoleSerializer, AdminActionSerializer, UserBriefSerializer
)

logger = logging.getLogger('pgmanager.adminpanel')

RECENT_SIGNUP_DAYS = 7


def _record_action(request, action, target_user=None, **details):
    return AdminAction.objects.create(
        admin=request.user,
        target_user=target_user,
        action=action,
        details=details,
        ip_address=get_client_ip(request),
        user_agent=request.META.get('HTTP_USER_AGENT'),
    )


def _admin_pagination(pagination):
    return {
        'current_page': pagination['page'],
        'total_pages': pagination['pages'],
        'total_count': pagination['total'],
        'has_next': pagination['page'] < pagination['pages'],
        'has_prev': pagination['page'] > 1,
    }


def _list_users(request):
    users = User.objects.select_related('approved_by', 'blocked_by').order_by('-created_at')

    status_filter = request.query_params.get('status')
    if status_filter:
        users = users.filter(subscription_status=status_filter.upper())

    role = request.query_params.get('role')
    if role:
        users = users.filter(role=role.upper())

    search = request.query_params.get('search')
    if search:
        users = users.filter(
            Q(full_name__icontains=search) | Q(email__icontains=search) | Q(username__icontains=search)
        )

    items, pagination = paginate(users, request, default_limit=10)
    return success_response({
        'users': AdminUserSerializer(items, many=True).data,
        'pagination': _admin_pagination(pagination),
    })


def _delete_user(request):
    user_id = request.data.get('user_id')
    reason = request.data.get('reason')
    if not user_id or not reason:
        return error_response('user_id and reason are required')

    try:
        user = User.objects.filter(pk=user_id).first()
    except (TypeError, ValueError):
        user = None
    if user is None:
        return error_response('User not found', status.HTTP_404_NOT_FOUND)
    if user.pk == request.user.pk:
        return error_response('Cannot delete your own account')
    if user.role == 'ADMIN':
        return error_response('Cannot delete admin users')

    data_count = {
        'properties': user.properties.count(),
        'tenants': user.created_tenants.count(),
        'payments': user.created_payments.count(),
    }
    _record_action(request, 'USER_DELETED', target_user=user, user_email=user.email,
                   user_full_name=user.full_name, reason=reason, data_count=data_count)
    name = user.full_name or user.email
    user.delete()
    logger.warning(f"Admin {request.user.email} deleted user {name}: {reason}")
    return success_response(message=f"User {name} and all associated data deleted successfully")


@api_view(['GET', 'DELETE'])
@permission_classes([IsAuthenticated, IsAdminRole])
def admin_users(request):
    """List users (status, role, search) or delete one with a reason"""
    if request.method == 'GET':
        return _list_users(request)
    return _delete_user(request)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def admin_user_stats(request):
    """Account totals and role/status distributions"""
    since = timezone.now() - timedelta(days=RECENT_SIGNUP_DAYS)
    overview = User.objects.aggregate(
        total_users=Count('id'),
        active_users=Count('id', filter=Q(subscription_status='ACTIVE')),
        waiting_approval=Count('id', filter=Q(subscription_status='WAITING_APPROVAL')),
        blocked_users=Count('id', filter=Q(subscription_status='BLOCKED')),
        recent_signups=Count('id', filter=Q(created_at__gte=since)),
    )
    role_distribution = User.objects.values('role').annotate(count=Count('id')).order_by('role')
    status_distribution = User.objects.values('subscription_status').annotate(
        count=Count('id')
    ).order_by('subscription_status')

    return success_response({
        'overview': overview,
        'role_distribution': list(role_distribution),
        'status_distribution': list(status_distribution),
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def admin_pending_users(request):
    """Accounts waiting for approval, oldest first"""
    users = User.objects.filter(subscription_status='WAITING_APPROVAL').annotate(
        property_count=Count('properties')
    ).order_by('created_at')
    data = [
        {**UserBriefSerializer(user).data, 'phone': user.phone, 'created_at': user.created_at,
         'property_count': user.property_count}
        for user in users
    ]
    return success_response(data)


@api_view(['PUT', 'PATCH'])
@permission_classes([IsAuthenticated, IsAdminRole])
def admin_update_user_status(request):
    """Approve, block, deactivate or cancel an account"""
    if not request.data.get('user_id') or not request.data.get('status'):
        return error_response('user_id and status are required')

    serializer = UserStatusSerializer(data=request.data)
    if not serializer.is_valid():
        if 'status' in serializer.errors:
            return error_response('Invalid status', details=serializer.errors)
        return validation_error_response(serializer.errors)

    user = User.objects.filter(pk=serializer.validated_data['user_id']).first()
    if user is None:
        return error_response('User not found', status.HTTP_404_NOT_FOUND)

    new_status = serializer.validated_data['status']
    reason = serializer.validated_data.get('reason')
    previous_status = user.subscription_status
    now = timezone.now()

    user.subscription_status = new_status
    if new_status == 'ACTIVE':
        user.approved_at = now
        user.approved_by = request.user
        user.blocked_at = None
        user.blocked_by = None
        user.blocked_reason = None
        user.is_active = True
    elif new_status == 'BLOCKED':
        user.blocked_at = now
        user.blocked_by = request.user
        user.blocked_reason = reason
        user.is_active = False
    elif new_status in ('INACTIVE', 'CANCELLED'):
        user.is_active = False
    user.save()

    if new_status == 'ACTIVE':
        action = 'USER_APPROVED'
    elif new_status == 'BLOCKED':
        action = 'USER_BLOCKED'
    else:
        action = 'USER_STATUS_CHANGED'
    _record_action(request, action, target_user=user, previous_status=previous_status,
                   new_status=new_status, reason=reason)
    logger.info(f"Admin {request.user.email} changed {user.email} from {previous_status} to {new_status}")

    return success_response(AdminUserSerializer(user).data, message=f"User status updated to {new_status}")


@api_view(['PUT', 'PATCH'])
@permission_classes([IsAuthenticated, IsAdminRole])
def admin_update_user_role(request):
    """Change the role of another account"""
    serializer = UserRoleSerializer(data=request.data)
    if not serializer.is_valid():
        return validation_error_response(serializer.errors)

    user = User.objects.filter(pk=serializer.validated_data['user_id']).first()
    if user is None:
        return error_response('User not found', status.HTTP_404_NOT_FOUND)
    if user.pk == request.user.pk:
        return error_response('Cannot change your own role')

    new_role = serializer.validated_data['role']
    previous_role = user.role
    user.role = new_role
    user.save(update_fields=['role', 'updated_at'])

    _record_action(request, 'USER_ROLE_CHANGED', target_user=user, previous_role=previous_role, new_role=new_role)
    logger.info(f"Admin {request.user.email} changed role of {user.email} from {previous_role} to {new_role}")
    return success_response(AdminUserSerializer(user).data, message=f"User role updated to {new_role}")


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def admin_actions(request):
    """History of admin actions, newest first; filter by action or target_user_id"""
    actions = AdminAction.objects.select_related('admin', 'target_user')

    action = request.query_params.get('action')
    if action:
        actions = actions.filter(action=action.upper())

    target_user_id = request.query_params.get('target_user_id')
    if target_user_id:
        actions = actions.filter(target_user_id=target_user_id)

    items, pagination = paginate(actions, request, default_limit=20)
    return success_response({
        'actions': AdminActionSerializer(items, many=True).data,
        'pagination': _admin_pagination(pagination),
    })
