"""Owner-scoped lookups; anything outside the user's properties is treated as missing"""
from .models import Property, Floor, Room, Bed


def _first(queryset, pk):
    try:
        return queryset.filter(pk=pk).first()
    except (TypeError, ValueError):
        return None


def get_owned_property(user, pk):
    return _first(Property.objects.filter(owner=user), pk)


def get_owned_floor(user, pk):
    return _first(Floor.objects.select_related('property').filter(property__owner=user), pk)


def get_owned_room(user, pk):
    return _first(Room.objects.select_related('floor__property').filter(floor__property__owner=user), pk)


def get_owned_bed(user, pk):
    return _first(
        Bed.objects.select_related('room__floor__property').filter(room__floor__property__owner=user), pk
    )
