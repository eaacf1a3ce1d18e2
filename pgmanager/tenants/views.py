import logging
from decimal import Decimal
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from django.db import transaction
from django.db.models import Sum
from django.utils import timezone
from pgmanager.core.permissions import IsActiveAccount
from pgmanager.core.responses import success_response, error_response, validation_error_response, paginate
from pgmanager.core.utils import create_audit_log, log_business_event
from pgmanager.payments.models import Payment
from pgmanager.properties.access import get_owned_property, get_owned_bed
from pgmanager.properties.occupancy import occupy_bed, free_bed
from pgmanager.realtime import events
from pgmanager.realtime.server import broadcast_tenant_update, broadcast_activity
from .filters import TenantFilter
from .models import Tenant
from .serializers import TenantSerializer, VacateSerializer

logger = logging.getLogger('pgmanager.tenants')

TENANT_REQUIRED_FIELDS = [
    'tenant_id', 'full_name', 'phone', 'address', 'id_proof_type', 'id_proof_number', 'joining_date', 'property_id'
]


def _owned_tenants(user):
    return Tenant.objects.filter(property__owner=user).select_related('property', 'bed__room__floor')


def _get_owned_tenant(user, pk):
    try:
        return _owned_tenants(user).filter(pk=pk).first()
    except (TypeError, ValueError):
        return None


def _check_bed_free(bed, prop_id):
    """Return an error message when the bed cannot take a tenant, else None"""
    if bed is None or bed.property_id != prop_id:
        return 'Bed not found in this property'
    if bed.status == 'OCCUPIED' or getattr(bed, 'tenant', None) is not None:
        return f"Bed {bed.bed_number} is already occupied"
    if bed.status != 'AVAILABLE':
        return f"Bed {bed.bed_number} is not available (status: {bed.status})"
    return None


def _announce(tenant, action, message):
    data = TenantSerializer(tenant).data
    broadcast_tenant_update(tenant.property_id, data, action)
    broadcast_activity(tenant.property_id, {
        'type': f'tenant_{action}',
        'message': message,
        'tenant_id': tenant.tenant_id,
    })
    return data


@api_view(['GET', 'POST'])
@permission_classes([IsActiveAccount])
def tenant_list_create(request):
    """List tenants (property_id, status, bed_id, search) or create a tenant"""
    if request.method == 'GET':
        queryset = TenantFilter(request.query_params, queryset=_owned_tenants(request.user)).qs
        items, pagination = paginate(queryset, request, default_limit=20)
        return success_response({
            'tenants': TenantSerializer(items, many=True).data,
            'pagination': pagination,
        })

    missing = [field for field in TENANT_REQUIRED_FIELDS if not request.data.get(field)]
    if missing:
        return error_response(f"Missing required fields: {', '.join(missing)}", missing_fields=missing)

    prop = get_owned_property(request.user, request.data.get('property_id'))
    if prop is None:
        return error_response('Property not found or access denied', status.HTTP_404_NOT_FOUND)

    if Tenant.objects.filter(tenant_id=request.data.get('tenant_id')).exists():
        return error_response('Tenant with this ID already exists')

    bed = None
    bed_id = request.data.get('bed_id')
    if bed_id:
        bed = get_owned_bed(request.user, bed_id)
        bed_error = _check_bed_free(bed, prop.id)
        if bed_error:
            return error_response(bed_error)

    data = request.data.copy()
    data['property'] = prop.id
    serializer = TenantSerializer(data=data)
    if not serializer.is_valid():
        return validation_error_response(serializer.errors)

    try:
        with transaction.atomic():
            tenant = serializer.save(created_by=request.user, bed=bed)
            if bed is not None:
                occupy_bed(bed, tenant)
    except Exception as e:
        logger.error(f"Error creating tenant: {str(e)}", exc_info=True)
        return error_response('An unexpected error occurred', status.HTTP_500_INTERNAL_SERVER_ERROR)

    data = _announce(tenant, events.TENANT_CREATE, f"{tenant.full_name} joined {prop.name}")
    log_business_event('tenant_created', tenant_id=tenant.tenant_id, property_id=prop.id, bed_id=bed_id)
    create_audit_log(request, 'tenant_create', 'Tenant', tenant.id, object_name=tenant.full_name,
                     property_id=prop.id, changes={'tenant_id': tenant.tenant_id, 'bed_id': bed.id if bed else None})
    return success_response(data, message='Tenant created successfully', status_code=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsActiveAccount])
def tenant_detail(request, pk):
    """Retrieve, update or delete a tenant"""
    tenant = _get_owned_tenant(request.user, pk)
    if tenant is None:
        return error_response('Tenant not found or access denied', status.HTTP_404_NOT_FOUND)

    if request.method == 'GET':
        data = TenantSerializer(tenant).data
        payments = Payment.objects.filter(tenant=tenant)
        data['payment_summary'] = {
            'total_payments': payments.count(),
            'pending_payments': payments.filter(status='PENDING').count(),
            'total_paid': payments.filter(status='PAID').aggregate(total=Sum('amount'))['total'] or Decimal('0'),
        }
        return success_response(data)

    if request.method in ('PUT', 'PATCH'):
        data = request.data.copy()
        for key in ('property', 'property_id', 'bed', 'bed_id'):
            data.pop(key, None)
        new_tenant_id = data.get('tenant_id')
        if new_tenant_id and Tenant.objects.filter(tenant_id=new_tenant_id).exclude(pk=tenant.pk).exists():
            return error_response('Tenant with this ID already exists')

        serializer = TenantSerializer(tenant, data=data, partial=True)
        if not serializer.is_valid():
            return validation_error_response(serializer.errors)
        tenant = serializer.save()
        data = _announce(tenant, events.TENANT_UPDATE_TYPE, f"{tenant.full_name}'s details were updated")
        create_audit_log(request, 'tenant_update', 'Tenant', tenant.id, object_name=tenant.full_name,
                         property_id=tenant.property_id,
                         changes={key: str(value) for key, value in serializer.validated_data.items()})
        return success_response(data, message='Tenant updated successfully')

    pending_count = Payment.objects.filter(tenant=tenant, status='PENDING').count()
    if pending_count:
        return error_response(
            f"Cannot delete tenant with {pending_count} pending payment(s)",
            pending_payments=pending_count,
        )

    tenant_pk, property_id = tenant.id, tenant.property_id
    tenant_data = TenantSerializer(tenant).data
    bed = tenant.bed
    with transaction.atomic():
        tenant.delete()
        if bed is not None:
            free_bed(bed)

    broadcast_tenant_update(property_id, tenant_data, events.TENANT_DELETE)
    broadcast_activity(property_id, {
        'type': 'tenant_delete',
        'message': f"{tenant_data['full_name']} was removed",
        'tenant_id': tenant_data['tenant_id'],
    })
    logger.info(f"Tenant {tenant_data['tenant_id']} deleted by {request.user.email}")
    create_audit_log(request, 'tenant_delete', 'Tenant', tenant_pk, object_name=tenant_data['full_name'],
                     property_id=property_id, changes={'tenant_id': tenant_data['tenant_id']})
    return success_response(message='Tenant deleted successfully')


@api_view(['PUT', 'PATCH'])
@permission_classes([IsActiveAccount])
def tenant_assign_bed(request, pk):
    """Move a tenant to a free bed; the previous bed is released"""
    tenant = _get_owned_tenant(request.user, pk)
    if tenant is None:
        return error_response('Tenant not found or access denied', status.HTTP_404_NOT_FOUND)

    bed_id = request.data.get('bed_id')
    if not bed_id:
        return error_response('bed_id is required')
    if tenant.status == 'VACATED':
        return error_response('Cannot assign a bed to a vacated tenant')

    bed = get_owned_bed(request.user, bed_id)
    if bed is not None and tenant.bed_id == bed.id:
        return error_response('Tenant is already assigned to this bed')
    bed_error = _check_bed_free(bed, tenant.property_id)
    if bed_error:
        return error_response(bed_error)

    old_bed = tenant.bed
    try:
        with transaction.atomic():
            tenant.bed = bed
            if tenant.status == 'PENDING':
                tenant.status = 'ACTIVE'
            tenant.save(update_fields=['bed', 'status', 'updated_at'])
            if old_bed is not None:
                free_bed(old_bed)
            occupy_bed(bed, tenant)
    except Exception as e:
        logger.error(f"Error assigning bed {bed_id} to tenant {pk}: {str(e)}", exc_info=True)
        return error_response('An unexpected error occurred', status.HTTP_500_INTERNAL_SERVER_ERROR)

    data = _announce(tenant, events.TENANT_UPDATE_TYPE, f"{tenant.full_name} moved to bed {bed.bed_number}")
    action = 'tenant_relocate' if old_bed is not None else 'bed_assign'
    log_business_event(action, tenant_id=tenant.tenant_id, from_bed=old_bed.id if old_bed else None, to_bed=bed.id)
    create_audit_log(request, action, 'Tenant', tenant.id, object_name=tenant.full_name,
                     property_id=tenant.property_id,
                     changes={'from_bed': old_bed.id if old_bed else None, 'to_bed': bed.id})
    return success_response(data, message='Bed assigned successfully')


@api_view(['PUT', 'PATCH'])
@permission_classes([IsActiveAccount])
def tenant_vacate(request, pk):
    """
    Mark a tenant as vacated and release the bed.

    leaving_date is required and must fall between joining_date and today.
    The response reports the stay length, the freed bed and any payments
    still pending.
    """
    tenant = _get_owned_tenant(request.user, pk)
    if tenant is None:
        return error_response('Tenant not found or access denied', status.HTTP_404_NOT_FOUND)

    if not request.data.get('leaving_date'):
        return error_response('Leaving date is required')
    if tenant.status == 'VACATED':
        return error_response('Tenant has already vacated')

    serializer = VacateSerializer(data=request.data)
    if not serializer.is_valid():
        return validation_error_response(serializer.errors)

    leaving_date = serializer.validated_data['leaving_date']
    if leaving_date > timezone.localdate():
        return error_response('Leaving date cannot be in the future')
    if leaving_date < tenant.joining_date:
        return error_response('Leaving date cannot be before joining date')

    pending = Payment.objects.filter(tenant=tenant, status='PENDING')
    pending_summary = {
        'count': pending.count(),
        'amount': pending.aggregate(total=Sum('amount'))['total'] or Decimal('0'),
    }
    warnings = []
    if pending_summary['count']:
        warnings.append(
            f"Tenant has {pending_summary['count']} pending payment(s) totalling {pending_summary['amount']}"
        )

    bed = tenant.bed
    freed_bed = None
    with transaction.atomic():
        tenant.status = 'VACATED'
        tenant.is_active = False
        tenant.leaving_date = leaving_date
        tenant.bed = None
        tenant.save(update_fields=['status', 'is_active', 'leaving_date', 'bed', 'updated_at'])
        if bed is not None:
            free_bed(bed)
            freed_bed = {
                'id': bed.id,
                'bed_number': bed.bed_number,
                'room_number': bed.room.room_number,
                'room_status': bed.room.status,
            }

    total_stay_days = (leaving_date - tenant.joining_date).days
    data = _announce(tenant, events.TENANT_VACATE, f"{tenant.full_name} vacated after {total_stay_days} days")
    log_business_event('tenant_vacated', tenant_id=tenant.tenant_id, stay_days=total_stay_days,
                       pending_payments=pending_summary['count'])
    create_audit_log(request, 'tenant_vacate', 'Tenant', tenant.id, object_name=tenant.full_name,
                     property_id=tenant.property_id,
                     changes={'leaving_date': str(leaving_date), 'freed_bed': bed.id if bed else None,
                              'reason': serializer.validated_data.get('reason', '')})
    return success_response({
        'tenant': data,
        'total_stay_days': total_stay_days,
        'freed_bed': freed_bed,
        'pending_payments': pending_summary,
        'warnings': warnings,
    }, message='Tenant vacated successfully')
