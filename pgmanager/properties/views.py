import logging
from datetime import timedelta
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
from pgmanager.payments.serializers import PaymentSerializer
from pgmanager.realtime.server import broadcast_bed_update, broadcast_tenant_update
from pgmanager.realtime import events
from pgmanager.tenants.models import Tenant
from .access import get_owned_property, get_owned_floor, get_owned_room, get_owned_bed
from .capacity import (
    validate_capacity, validate_capacity_update, validate_room_bed_count, get_capacity_summary, percentage
)
from .filters import PropertyFilter, RoomFilter, BedFilter
from .models import Property, Floor, Room, Bed
from .occupancy import (
    refresh_room_status, occupy_bed, free_bed, bed_payload, available_beds_in_property
)
from .serializers import PropertySerializer, FloorSerializer, RoomSerializer, BedSerializer

logger = logging.getLogger('pgmanager.properties')

PROPERTY_REQUIRED_FIELDS = ['name', 'address', 'city', 'state', 'pincode']
BED_MANUAL_STATUSES = ('AVAILABLE', 'BLOCKED', 'MAINTENANCE')


def _flag(request, name):
    """Read a boolean flag from the body or the query string"""
    value = request.data.get(name, request.query_params.get(name))
    if isinstance(value, str):
        return value.lower() in ('1', 'true', 'yes')
    return bool(value)


def _copy_data(request):
    data = request.data.copy()
    for key in ('id', 'created_at', 'updated_at'):
        data.pop(key, None)
    return data


def _property_stats(prop):
    beds = Bed.objects.filter(room__floor__property=prop)
    total_beds = beds.count()
    occupied_beds = beds.filter(status='OCCUPIED').count()
    month = timezone.localdate().strftime('%Y-%m')
    monthly_revenue = Payment.objects.filter(
        property=prop, status='PAID', month=month
    ).aggregate(total=Sum('amount'))['total'] or Decimal('0')
    return {
        'total_beds': total_beds,
        'occupied_beds': occupied_beds,
        'available_beds': beds.filter(status='AVAILABLE').count(),
        'occupancy_rate': percentage(occupied_beds, total_beds),
        'active_tenants': Tenant.objects.filter(property=prop, status='ACTIVE').count(),
        'monthly_revenue': monthly_revenue,
    }


def _capacity_error(validation):
    return error_response(
        validation['errors'][0],
        errors=validation['errors'],
        warnings=validation['warnings'],
    )


def _tenant_brief(tenant):
    return {
        'id': tenant.id,
        'tenant_id': tenant.tenant_id,
        'full_name': tenant.full_name,
        'bed_id': tenant.bed_id,
        'bed_number': tenant.bed.bed_number if tenant.bed_id else None,
    }


# Property views
@api_view(['GET', 'POST'])
@permission_classes([IsActiveAccount])
def property_list_create(request):
    """List the user's properties with occupancy stats, or create a property"""
    if request.method == 'GET':
        queryset = Property.objects.filter(owner=request.user)
        queryset = PropertyFilter(request.query_params, queryset=queryset).qs
        items, pagination = paginate(queryset, request)
        properties = []
        for prop in items:
            data = PropertySerializer(prop).data
            data['stats'] = _property_stats(prop)
            properties.append(data)
        return success_response({'properties': properties, 'pagination': pagination})

    if any(not request.data.get(field) for field in PROPERTY_REQUIRED_FIELDS):
        return error_response('Name, address, city, state, and pincode are required')

    serializer = PropertySerializer(data=request.data)
    if not serializer.is_valid():
        return validation_error_response(serializer.errors)

    prop = serializer.save(owner=request.user)
    logger.info(f"Property '{prop.name}' created by {request.user.email}")
    log_business_event('property_created', property_id=prop.id, owner=request.user.email)
    create_audit_log(request, 'create', 'Property', prop.id, object_name=prop.name, property_id=prop.id,
                     changes={'name': prop.name, 'city': prop.city})
    return success_response(PropertySerializer(prop).data, message='Property created successfully',
                            status_code=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsActiveAccount])
def property_detail(request, pk):
    """Retrieve (with capacity summary), update or delete a property"""
    prop = get_owned_property(request.user, pk)
    if prop is None:
        return error_response('Property not found or access denied', status.HTTP_404_NOT_FOUND)

    if request.method == 'GET':
        data = PropertySerializer(prop).data
        data['stats'] = _property_stats(prop)
        data['capacity'] = get_capacity_summary(prop)
        return success_response(data)

    if request.method in ('PUT', 'PATCH'):
        serializer = PropertySerializer(prop, data=request.data, partial=True)
        if not serializer.is_valid():
            return validation_error_response(serializer.errors)

        validation = validate_capacity_update(prop, serializer.validated_data)
        if not validation['is_valid']:
            return _capacity_error(validation)

        prop = serializer.save()
        logger.info(f"Property {prop.id} updated by {request.user.email}")
        create_audit_log(request, 'update', 'Property', prop.id, object_name=prop.name, property_id=prop.id,
                         changes={key: str(value) for key, value in serializer.validated_data.items()})
        data = PropertySerializer(prop).data
        data['capacity'] = get_capacity_summary(prop)
        return success_response(data, message='Property updated successfully')

    active_tenants = Tenant.objects.filter(property=prop, status='ACTIVE').count()
    if active_tenants:
        return error_response(f"Cannot delete property with {active_tenants} active tenant(s)")

    prop_id, prop_name = prop.id, prop.name
    prop.delete()
    logger.info(f"Property {prop_id} deleted by {request.user.email}")
    create_audit_log(request, 'delete', 'Property', prop_id, object_name=prop_name, property_id=prop_id)
    return success_response(message='Property deleted successfully')


@api_view(['GET'])
@permission_classes([IsActiveAccount])
def property_dashboard(request, pk):
    """Pending and overdue payments, recent payments and upcoming dues for one property"""
    prop = get_owned_property(request.user, pk)
    if prop is None:
        return error_response('Property not found or access denied', status.HTTP_404_NOT_FOUND)

    today = timezone.localdate()
    payments = Payment.objects.filter(property=prop).select_related('tenant', 'bed')
    pending = payments.filter(status='PENDING')
    overdue = pending.filter(due_date__lt=today)
    upcoming = pending.filter(due_date__gte=today, due_date__lte=today + timedelta(days=7)).order_by('due_date')

    return success_response({
        'property': PropertySerializer(prop).data,
        'stats': _property_stats(prop),
        'capacity': get_capacity_summary(prop),
        'payments': {
            'pending_count': pending.count(),
            'pending_amount': pending.aggregate(total=Sum('amount'))['total'] or Decimal('0'),
            'overdue_count': overdue.count(),
            'overdue_amount': overdue.aggregate(total=Sum('amount'))['total'] or Decimal('0'),
        },
        'recent_payments': PaymentSerializer(payments.order_by('-created_at')[:5], many=True).data,
        'upcoming_payments': PaymentSerializer(upcoming, many=True).data,
    })


# Floor views
@api_view(['GET', 'POST'])
@permission_classes([IsActiveAccount])
def floor_list_create(request):
    """List floors of a property (property_id required) or create a floor"""
    if request.method == 'GET':
        property_id = request.query_params.get('property_id')
        if not property_id:
            return error_response('property_id is required')
        prop = get_owned_property(request.user, property_id)
        if prop is None:
            return error_response('Property not found or access denied', status.HTTP_404_NOT_FOUND)
        floors = Floor.objects.filter(property=prop).prefetch_related('rooms__beds__tenant')
        return success_response(FloorSerializer(floors, many=True).data)

    prop = get_owned_property(request.user, request.data.get('property_id') or request.data.get('property'))
    if prop is None:
        return error_response('Property not found or access denied', status.HTTP_404_NOT_FOUND)

    data = _copy_data(request)
    data['property'] = prop.id
    if not data.get('name') and data.get('floor_name'):
        data['name'] = data.get('floor_name')
    if not data.get('name') or data.get('floor_number') in (None, ''):
        return error_response('Floor name and floor number are required')

    serializer = FloorSerializer(data=data)
    if not serializer.is_valid():
        return validation_error_response(serializer.errors)

    floor_number = serializer.validated_data['floor_number']
    if Floor.objects.filter(property=prop, floor_number=floor_number).exists():
        return error_response(f"Floor number {floor_number} already exists in this property",
                              status.HTTP_409_CONFLICT)

    validation = validate_capacity(prop, 'floor')
    if not validation['is_valid']:
        return _capacity_error(validation)

    floor = serializer.save()
    logger.info(f"Floor {floor.floor_number} added to property {prop.id}")
    create_audit_log(request, 'create', 'Floor', floor.id, object_name=floor.name, property_id=prop.id)
    return success_response(FloorSerializer(floor).data, message='Floor created successfully',
                            status_code=status.HTTP_201_CREATED, warnings=validation['warnings'])


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsActiveAccount])
def floor_detail(request, pk):
    """Retrieve, update or delete a floor"""
    floor = get_owned_floor(request.user, pk)
    if floor is None:
        return error_response('Floor not found or access denied', status.HTTP_404_NOT_FOUND)

    if request.method == 'GET':
        return success_response(FloorSerializer(floor).data)

    if request.method in ('PUT', 'PATCH'):
        data = _copy_data(request)
        data.pop('property', None)
        if not data.get('name') and data.get('floor_name'):
            data['name'] = data.get('floor_name')
        serializer = FloorSerializer(floor, data=data, partial=True)
        if not serializer.is_valid():
            return validation_error_response(serializer.errors)

        floor_number = serializer.validated_data.get('floor_number')
        if floor_number is not None and Floor.objects.filter(
                property_id=floor.property_id, floor_number=floor_number).exclude(pk=floor.pk).exists():
            return error_response(f"Floor number {floor_number} already exists in this property",
                                  status.HTTP_409_CONFLICT)
        floor = serializer.save()
        create_audit_log(request, 'update', 'Floor', floor.id, object_name=floor.name,
                         property_id=floor.property_id)
        return success_response(FloorSerializer(floor).data, message='Floor updated successfully')

    active_tenants = Tenant.objects.filter(bed__room__floor=floor, status='ACTIVE').count()
    if active_tenants:
        return error_response(f"Cannot delete floor with {active_tenants} active tenant(s)")

    floor_id, property_id, floor_name = floor.id, floor.property_id, floor.name
    floor.delete()
    logger.info(f"Floor {floor_id} deleted from property {property_id}")
    create_audit_log(request, 'delete', 'Floor', floor_id, object_name=floor_name, property_id=property_id)
    return success_response(message='Floor deleted successfully')


# Room views
@api_view(['GET', 'POST'])
@permission_classes([IsActiveAccount])
def room_list_create(request):
    """List rooms (floor_id, property_id, status, type filters) or create a room"""
    if request.method == 'GET':
        queryset = Room.objects.filter(floor__property__owner=request.user).prefetch_related('beds__tenant')
        queryset = RoomFilter(request.query_params, queryset=queryset).qs
        return success_response(RoomSerializer(queryset, many=True).data)

    floor = get_owned_floor(request.user, request.data.get('floor_id') or request.data.get('floor'))
    if floor is None:
        return error_response('Floor not found or access denied', status.HTTP_404_NOT_FOUND)

    data = _copy_data(request)
    data['floor'] = floor.id
    room_number = data.get('room_number')
    if not room_number:
        return error_response('Room number is required')

    if Room.objects.filter(floor=floor, room_number=room_number).exists():
        return error_response(f"Room number {room_number} already exists on this floor",
                              status.HTTP_409_CONFLICT)

    serializer = RoomSerializer(data=data)
    if not serializer.is_valid():
        return validation_error_response(serializer.errors)

    validation = validate_capacity(floor.property, 'room')
    if not validation['is_valid']:
        return _capacity_error(validation)

    room = serializer.save()
    logger.info(f"Room {room.room_number} added to floor {floor.id}")
    create_audit_log(request, 'create', 'Room', room.id, object_name=f"Room {room.room_number}",
                     property_id=floor.property_id)
    return success_response(RoomSerializer(room).data, message='Room created successfully',
                            status_code=status.HTTP_201_CREATED, warnings=validation['warnings'])


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsActiveAccount])
def room_detail(request, pk):
    """Retrieve, update or delete a room; deleting occupied rooms needs relocation or force_delete"""
    room = get_owned_room(request.user, pk)
    if room is None:
        return error_response('Room not found or access denied', status.HTTP_404_NOT_FOUND)

    if request.method == 'GET':
        return success_response(RoomSerializer(room).data)

    if request.method in ('PUT', 'PATCH'):
        data = _copy_data(request)
        data.pop('floor', None)
        room_number = data.get('room_number')
        if room_number and Room.objects.filter(
                floor_id=room.floor_id, room_number=room_number).exclude(pk=room.pk).exists():
            return error_response(f"Room number {room_number} already exists on this floor",
                                  status.HTTP_409_CONFLICT)

        serializer = RoomSerializer(room, data=data, partial=True)
        if not serializer.is_valid():
            return validation_error_response(serializer.errors)

        new_capacity = serializer.validated_data.get('capacity')
        bed_count = room.beds.count()
        if new_capacity is not None and new_capacity < bed_count:
            return error_response(
                f"Cannot reduce capacity to {new_capacity}. Room already has {bed_count} beds."
            )

        room = serializer.save()
        if 'status' not in serializer.validated_data:
            refresh_room_status(room)
        create_audit_log(request, 'update', 'Room', room.id, object_name=f"Room {room.room_number}",
                         property_id=room.floor.property_id)
        return success_response(RoomSerializer(room).data, message='Room updated successfully')

    property_id = room.floor.property_id
    displaced = list(
        Tenant.objects.filter(bed__room=room).select_related('bed')
    )
    if displaced and not _flag(request, 'force_delete'):
        room_bed_ids = list(room.beds.values_list('id', flat=True))
        available = [bed for bed in available_beds_in_property(property_id) if bed['id'] not in room_bed_ids]
        return error_response(
            f"Cannot delete room with {len(displaced)} occupied bed(s). Please relocate tenants first.",
            tenants_to_relocate=[_tenant_brief(tenant) for tenant in displaced],
            available_beds=available,
            requires_action='RELOCATE_TENANTS',
        )

    try:
        with transaction.atomic():
            for tenant in displaced:
                tenant.bed = None
                tenant.status = 'PENDING'
                tenant.save(update_fields=['bed', 'status', 'updated_at'])
            room_id, room_number = room.id, room.room_number
            room.delete()
    except Exception as e:
        logger.error(f"Error deleting room {pk}: {str(e)}", exc_info=True)
        return error_response('An unexpected error occurred', status.HTTP_500_INTERNAL_SERVER_ERROR)

    for tenant in displaced:
        broadcast_tenant_update(property_id, _tenant_brief(tenant), events.TENANT_UPDATE_TYPE)
    logger.info(f"Room {room_id} deleted; {len(displaced)} tenant(s) set to PENDING")
    create_audit_log(request, 'delete', 'Room', room_id, object_name=f"Room {room_number}",
                     property_id=property_id,
                     changes={'displaced_tenants': [tenant.tenant_id for tenant in displaced]})
    return success_response(
        {'displaced_tenants': [tenant.tenant_id for tenant in displaced]},
        message='Room deleted successfully',
    )


@api_view(['GET'])
@permission_classes([IsActiveAccount])
def room_beds(request, pk):
    """Beds of a room with their tenants"""
    room = get_owned_room(request.user, pk)
    if room is None:
        return error_response('Room not found or access denied', status.HTTP_404_NOT_FOUND)
    beds = room.beds.select_related('room', 'tenant')
    return success_response(BedSerializer(beds, many=True).data)


# Bed views
@api_view(['GET', 'POST'])
@permission_classes([IsActiveAccount])
def bed_list_create(request):
    """List beds (room_id, floor_id, property_id, status filters) or create a bed"""
    if request.method == 'GET':
        queryset = Bed.objects.filter(room__floor__property__owner=request.user).select_related('room', 'tenant')
        queryset = BedFilter(request.query_params, queryset=queryset).qs
        return success_response(BedSerializer(queryset, many=True).data)

    room = get_owned_room(request.user, request.data.get('room_id') or request.data.get('room'))
    if room is None:
        return error_response('Room not found or access denied', status.HTTP_404_NOT_FOUND)

    data = _copy_data(request)
    data['room'] = room.id
    data.pop('status', None)
    bed_number = data.get('bed_number')
    if not bed_number:
        return error_response('Bed number is required')

    if Bed.objects.filter(room=room, bed_number=bed_number).exists():
        return error_response(f"Bed number {bed_number} already exists in this room", status.HTTP_409_CONFLICT)

    room_check = validate_room_bed_count(room)
    if not room_check['is_valid']:
        return _capacity_error(room_check)

    validation = validate_capacity(room.floor.property, 'bed')
    if not validation['is_valid']:
        return _capacity_error(validation)

    serializer = BedSerializer(data=data)
    if not serializer.is_valid():
        return validation_error_response(serializer.errors)
    bed = serializer.save()
    refresh_room_status(room)
    broadcast_bed_update(bed.property_id, bed_payload(bed))
    logger.info(f"Bed {bed.bed_number} added to room {room.room_number}")
    create_audit_log(request, 'create', 'Bed', bed.id, object_name=bed.location, property_id=bed.property_id)
    return success_response(BedSerializer(bed).data, message='Bed created successfully',
                            status_code=status.HTTP_201_CREATED, warnings=validation['warnings'])


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsActiveAccount])
def bed_detail(request, pk):
    """Retrieve, update or delete a bed; an occupied bed needs relocation or force_delete"""
    bed = get_owned_bed(request.user, pk)
    if bed is None:
        return error_response('Bed not found or access denied', status.HTTP_404_NOT_FOUND)

    if request.method == 'GET':
        return success_response(BedSerializer(bed).data)

    tenant = getattr(bed, 'tenant', None)

    if request.method in ('PUT', 'PATCH'):
        data = _copy_data(request)
        data.pop('room', None)
        new_status = data.pop('status', None)
        if isinstance(new_status, list):
            new_status = new_status[0] if new_status else None
        bed_number = data.get('bed_number')
        if bed_number and Bed.objects.filter(
                room_id=bed.room_id, bed_number=bed_number).exclude(pk=bed.pk).exists():
            return error_response(f"Bed number {bed_number} already exists in this room", status.HTTP_409_CONFLICT)

        if new_status:
            new_status = new_status.upper()
            if new_status == 'OCCUPIED' and bed.status != 'OCCUPIED':
                return error_response('Use the assign endpoint to occupy a bed')
            if new_status not in BED_MANUAL_STATUSES + ('OCCUPIED',):
                return error_response(f"Invalid bed status: {new_status}")
            if tenant is not None and new_status != 'OCCUPIED':
                return error_response('Cannot change status of an occupied bed. Unassign the tenant first.')

        serializer = BedSerializer(bed, data=data, partial=True)
        if not serializer.is_valid():
            return validation_error_response(serializer.errors)
        bed = serializer.save()
        if new_status and new_status != bed.status:
            bed.status = new_status
            bed.save(update_fields=['status', 'updated_at'])
            refresh_room_status(bed.room)
        broadcast_bed_update(bed.property_id, bed_payload(bed, tenant))
        create_audit_log(request, 'update', 'Bed', bed.id, object_name=bed.location, property_id=bed.property_id)
        return success_response(BedSerializer(bed).data, message='Bed updated successfully')

    # DELETE
    room = bed.room
    property_id = bed.property_id
    target_id = request.data.get('relocate_tenant_to_bed_id') or request.query_params.get('relocate_tenant_to_bed_id')
    force_delete = _flag(request, 'force_delete')
    target = None

    if tenant is not None:
        if target_id:
            target = get_owned_bed(request.user, target_id)
            if target is None or target.property_id != property_id or target.pk == bed.pk:
                return error_response('Target bed not found in this property', status.HTTP_404_NOT_FOUND)
            if target.status != 'AVAILABLE' or getattr(target, 'tenant', None) is not None:
                return error_response(f"Target bed {target.bed_number} is not available")
        elif not force_delete:
            return error_response(
                'Cannot delete an occupied bed. Please relocate the tenant first.',
                tenant=_tenant_brief(tenant),
                available_beds=available_beds_in_property(property_id, exclude_bed_id=bed.id),
                requires_action='RELOCATE_TENANT',
            )

    bed_id, location = bed.id, bed.location
    try:
        with transaction.atomic():
            if tenant is not None:
                tenant.bed = target
                if target is None:
                    tenant.status = 'PENDING'
                tenant.save(update_fields=['bed', 'status', 'updated_at'])
            bed.delete()
            if target is not None:
                occupy_bed(target, tenant)
            refresh_room_status(room)
    except Exception as e:
        logger.error(f"Error deleting bed {pk}: {str(e)}", exc_info=True)
        return error_response('An unexpected error occurred', status.HTTP_500_INTERNAL_SERVER_ERROR)

    broadcast_bed_update(property_id, {'id': bed_id, 'room_id': room.id, 'status': 'DELETED'})
    changes = {}
    if tenant is not None:
        changes = {'tenant_id': tenant.tenant_id, 'relocated_to': target.id if target else None}
        broadcast_tenant_update(property_id, _tenant_brief(tenant), events.TENANT_UPDATE_TYPE)
        if target is not None:
            create_audit_log(request, 'tenant_relocate', 'Tenant', tenant.id, object_name=tenant.full_name,
                             property_id=property_id, changes={'from_bed': bed_id, 'to_bed': target.id})
    logger.info(f"Bed {bed_id} deleted from room {room.room_number}")
    create_audit_log(request, 'delete', 'Bed', bed_id, object_name=location, property_id=property_id,
                     changes=changes)
    return success_response(changes or None, message='Bed deleted successfully')


@api_view(['PUT', 'PATCH'])
@permission_classes([IsActiveAccount])
def bed_assign(request, pk):
    """Assign a tenant to a free bed, releasing the tenant's previous bed"""
    bed = get_owned_bed(request.user, pk)
    if bed is None:
        return error_response('Bed not found or access denied', status.HTTP_404_NOT_FOUND)

    tenant_pk = request.data.get('tenant_id')
    if not tenant_pk:
        return error_response('tenant_id is required')
    try:
        tenant = Tenant.objects.select_related('bed__room').filter(
            pk=tenant_pk, property__owner=request.user
        ).first()
    except (TypeError, ValueError):
        tenant = None
    if tenant is None:
        return error_response('Tenant not found or access denied', status.HTTP_404_NOT_FOUND)

    if bed.status == 'OCCUPIED' or getattr(bed, 'tenant', None) is not None:
        return error_response('Bed is already occupied')
    if bed.status != 'AVAILABLE':
        return error_response(f"Bed is not available for assignment (status: {bed.status})")
    if tenant.property_id != bed.property_id:
        return error_response('Tenant and bed belong to different properties')

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
        logger.error(f"Error assigning bed {pk} to tenant {tenant_pk}: {str(e)}", exc_info=True)
        return error_response('An unexpected error occurred', status.HTTP_500_INTERNAL_SERVER_ERROR)

    broadcast_tenant_update(bed.property_id, _tenant_brief(tenant), events.TENANT_UPDATE_TYPE)
    log_business_event('bed_assigned', bed_id=bed.id, tenant_id=tenant.tenant_id)
    create_audit_log(request, 'bed_assign', 'Bed', bed.id, object_name=tenant.full_name,
                     property_id=bed.property_id,
                     changes={'tenant_id': tenant.tenant_id, 'previous_bed': old_bed.id if old_bed else None})
    bed.refresh_from_db()
    return success_response(BedSerializer(bed).data, message='Bed assigned successfully')


@api_view(['PUT', 'PATCH'])
@permission_classes([IsActiveAccount])
def bed_unassign(request, pk):
    """Detach the tenant from a bed and mark it AVAILABLE"""
    bed = get_owned_bed(request.user, pk)
    if bed is None:
        return error_response('Bed not found or access denied', status.HTTP_404_NOT_FOUND)

    tenant = getattr(bed, 'tenant', None)
    if tenant is None and bed.status != 'OCCUPIED':
        return error_response('Bed is not assigned to any tenant')

    with transaction.atomic():
        if tenant is not None:
            tenant.bed = None
            tenant.save(update_fields=['bed', 'updated_at'])
        free_bed(bed)

    if tenant is not None:
        broadcast_tenant_update(bed.property_id, _tenant_brief(tenant), events.TENANT_UPDATE_TYPE)
        log_business_event('bed_unassigned', bed_id=bed.id, tenant_id=tenant.tenant_id)
    create_audit_log(request, 'bed_unassign', 'Bed', bed.id, object_name=bed.location,
                     property_id=bed.property_id,
                     changes={'tenant_id': tenant.tenant_id if tenant else None})
    bed.refresh_from_db()
    return success_response(BedSerializer(bed).data, message='Bed unassigned successfully')
