import django_filters
from django.db.models import Q
from .models import Property, Room, Bed


class PropertyFilter(django_filters.FilterSet):
    """Search properties by name, city or address"""
    search = django_filters.CharFilter(method='filter_search', label='Search')
    is_active = django_filters.BooleanFilter(field_name='is_active')

    class Meta:
        model = Property
        fields = ['search', 'is_active']

    def filter_search(self, queryset, name, value):
        if not value:
            return queryset
        return queryset.filter(
            Q(name__icontains=value) | Q(city__icontains=value) | Q(address__icontains=value)
        )


class RoomFilter(django_filters.FilterSet):
    floor_id = django_filters.NumberFilter(field_name='floor_id')
    property_id = django_filters.NumberFilter(field_name='floor__property_id')
    status = django_filters.CharFilter(method='filter_upper')
    type = django_filters.CharFilter(method='filter_upper')

    class Meta:
        model = Room
        fields = ['floor_id', 'property_id', 'status', 'type']

    def filter_upper(self, queryset, name, value):
        return queryset.filter(**{name: value.upper()})


class BedFilter(django_filters.FilterSet):
    room_id = django_filters.NumberFilter(field_name='room_id')
    floor_id = django_filters.NumberFilter(field_name='room__floor_id')
    property_id = django_filters.NumberFilter(field_name='room__floor__property_id')
    status = django_filters.CharFilter(method='filter_status')

    class Meta:
        model = Bed
        fields = ['room_id', 'floor_id', 'property_id', 'status']

    def filter_status(self, queryset, name, value):
        return queryset.filter(status=value.upper())
