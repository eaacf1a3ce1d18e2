import django_filters
from django.db.models import Q
from .models import Tenant


class TenantFilter(django_filters.FilterSet):
    """Filter tenants by property, status, bed and free-text search"""
    property_id = django_filters.NumberFilter(field_name='property_id')
    bed_id = django_filters.NumberFilter(field_name='bed_id')
    status = django_filters.CharFilter(method='filter_status')
    search = django_filters.CharFilter(method='filter_search', label='Search')

    class Meta:
        model = Tenant
        fields = ['property_id', 'bed_id', 'status', 'search']

    def filter_status(self, queryset, name, value):
        return queryset.filter(status=value.upper())

    def filter_search(self, queryset, name, value):
        if not value:
            return queryset
        return queryset.filter(
            Q(full_name__icontains=value) |
            Q(tenant_id__icontains=value) |
            Q(phone__icontains=value) |
            Q(email__icontains=value)
        )
