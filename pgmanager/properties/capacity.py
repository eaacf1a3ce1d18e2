"""
Capacity validation for properties.

Keeps floors, rooms and beds within the totals declared on a Property and
beds within their room's capacity. A declared total of 0 means no limit.
"""
from decimal import Decimal, ROUND_HALF_UP
from .models import Floor, Room, Bed

WARNING_THRESHOLD = 0.8

ITEM_TOTAL_FIELDS = {
    'floor': ('floors', 'total_floors'),
    'room': ('rooms', 'total_rooms'),
    'bed': ('beds', 'total_beds'),
}


def calculate_current_usage(property_obj):
    """Count floors, rooms, beds and occupied beds of a property"""
    if property_obj is None:
        return {'floors': 0, 'rooms': 0, 'beds': 0, 'occupied_beds': 0}
    beds = Bed.objects.filter(room__floor__property=property_obj)
    return {
        'floors': Floor.objects.filter(property=property_obj).count(),
        'rooms': Room.objects.filter(floor__property=property_obj).count(),
        'beds': beds.count(),
        'occupied_beds': beds.filter(status='OCCUPIED').count(),
    }


def validate_capacity(property_obj, item_type, usage=None):
    """
    Check whether one more floor/room/bed fits in the property.

    Returns {'is_valid', 'errors', 'warnings'}.
    """
    validation = {'is_valid': True, 'errors': [], 'warnings': []}
    if item_type not in ITEM_TOTAL_FIELDS:
        validation['is_valid'] = False
        validation['errors'].append('Invalid item type for capacity validation.')
        return validation

    usage = usage or calculate_current_usage(property_obj)
    usage_key, total_field = ITEM_TOTAL_FIELDS[item_type]
    current = usage[usage_key]
    total = getattr(property_obj, total_field)

    if not total:
        return validation

    if current >= total:
        validation['is_valid'] = False
        validation['errors'].append(
            f"Cannot add more {usage_key}. Property capacity is {total} {usage_key}."
        )
    if current >= total * WARNING_THRESHOLD:
        validation['warnings'].append(
            f"Approaching {item_type} capacity limit ({current}/{total})"
        )
    return validation


def percentage(current, total):
    """Whole percentage, halves rounded up"""
    if not total or total <= 0:
        return 0
    value = Decimal(current * 100) / Decimal(total)
    return int(value.quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def get_capacity_utilization(property_obj, usage=None):
    usage = usage or calculate_current_usage(property_obj)
    return {
        'floors': percentage(usage['floors'], property_obj.total_floors),
        'rooms': percentage(usage['rooms'], property_obj.total_rooms),
        'beds': percentage(usage['beds'], property_obj.total_beds),
        'occupied_beds': percentage(usage['occupied_beds'], property_obj.total_beds),
    }


def capacity_status(value):
    if value >= 100:
        return 'critical'
    if value >= 80:
        return 'warning'
    return 'good'


def get_capacity_status(property_obj, usage=None):
    utilization = get_capacity_utilization(property_obj, usage)
    return {
        'floors': capacity_status(utilization['floors']),
        'rooms': capacity_status(utilization['rooms']),
        'beds': capacity_status(utilization['beds']),
    }


def validate_capacity_update(property_obj, new_capacity, usage=None):
    """Declared totals may not drop below what is already built"""
    usage = usage or calculate_current_usage(property_obj)
    validation = {'is_valid': True, 'errors': [], 'warnings': []}
    for usage_key, total_field in ITEM_TOTAL_FIELDS.values():
        new_total = new_capacity.get(total_field)
        # 0 lifts the limit
        if new_total is None or new_total == 0:
            continue
        if new_total < usage[usage_key]:
            validation['is_valid'] = False
            validation['errors'].append(
                f"Cannot reduce {usage_key} to {new_total}. Currently using {usage[usage_key]} {usage_key}."
            )
    return validation


def get_capacity_summary(property_obj):
    usage = calculate_current_usage(property_obj)
    utilization = get_capacity_utilization(property_obj, usage)
    status = get_capacity_status(property_obj, usage)
    return {
        'floors': {
            'current': usage['floors'],
            'total': property_obj.total_floors,
            'percentage': utilization['floors'],
            'status': status['floors'],
        },
        'rooms': {
            'current': usage['rooms'],
            'total': property_obj.total_rooms,
            'percentage': utilization['rooms'],
            'status': status['rooms'],
        },
        'beds': {
            'current': usage['beds'],
            'total': property_obj.total_beds,
            'percentage': utilization['beds'],
            'status': status['beds'],
            'occupied': usage['occupied_beds'],
        },
    }


def validate_room_bed_count(room, adding=1):
    """Beds in a room never exceed its capacity; occupied never exceeds total"""
    bed_count = room.beds.count()
    occupied = room.beds.filter(status='OCCUPIED').count()
    errors = []
    if bed_count + adding > room.capacity:
        errors.append(f"Room is at full capacity ({room.capacity} beds). Cannot add more beds.")
    if occupied > bed_count:
        errors.append(f"Room {room.room_number} reports {occupied} occupied beds out of {bed_count}.")
    return {'is_valid': not errors, 'errors': errors, 'warnings': []}
