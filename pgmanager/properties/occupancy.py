"""Bed and room occupancy transitions shared by bed and tenant views"""
import logging

from django.db import transaction
from pgmanager.realtime.server import broadcast_bed_update

logger = logging.getLogger('pgmanager.properties')


def refresh_room_status(room):
    """OCCUPIED when any bed is occupied, otherwise AVAILABLE; MAINTENANCE is kept"""
    if room.status == 'MAINTENANCE':
        return room.status
    new_status = 'OCCUPIED' if room.beds.filter(status='OCCUPIED').exists() else 'AVAILABLE'
    if new_status != room.status:
        room.status = new_status
        room.save(update_fields=['status', 'updated_at'])
        logger.debug(f"Room {room.room_number} status changed to {new_status}")
    return room.status


def bed_payload(bed, tenant=None):
    return {
        'id': bed.id,
        'bed_number': bed.bed_number,
        'room_id': bed.room_id,
        'status': bed.status,
        'tenant_id': tenant.id if tenant else None,
        'tenant': {'id': tenant.id, 'tenant_id': tenant.tenant_id, 'full_name': tenant.full_name} if tenant else None,
    }


def _broadcast_after_commit(bed, tenant=None):
    """Send the bed's new state once the surrounding transaction commits"""
    property_id, payload = bed.property_id, bed_payload(bed, tenant)
    transaction.on_commit(lambda: broadcast_bed_update(property_id, payload))


def occupy_bed(bed, tenant=None):
    bed.status = 'OCCUPIED'
    bed.save(update_fields=['status', 'updated_at'])
    refresh_room_status(bed.room)
    _broadcast_after_commit(bed, tenant)


def free_bed(bed):
    bed.status = 'AVAILABLE'
    bed.save(update_fields=['status', 'updated_at'])
    refresh_room_status(bed.room)
    _broadcast_after_commit(bed)


def available_beds_in_property(property_id, exclude_bed_id=None):
    from .models import Bed

    beds = Bed.objects.filter(
        room__floor__property_id=property_id, status='AVAILABLE'
    ).select_related('room__floor')
    if exclude_bed_id is not None:
        beds = beds.exclude(pk=exclude_bed_id)
    return [
        {
            'id': bed.id,
            'bed_number': bed.bed_number,
            'room_number': bed.room.room_number,
            'floor_name': bed.room.floor.name,
            'location': bed.location,
        }
        for bed in beds
    ]
