import django_filters
from .models import Payment


class PaymentFilter(django_filters.FilterSet):
    """Filter payments by property, tenant, status, type and billing period"""
    property_id = django_filters.NumberFilter(field_name='property_id')
    tenant_id = django_filters.NumberFilter(field_name='tenant_id')
    status = django_filters.CharFilter(method='filter_upper')
    payment_type = django_filters.CharFilter(method='filter_upper')
    month = django_filters.CharFilter(field_name='month')
    year = django_filters.NumberFilter(field_name='year')
    due_from = django_filters.DateFilter(field_name='due_date', lookup_expr='gte')
    due_to = django_filters.DateFilter(field_name='due_date', lookup_expr='lte')

    class Meta:
        model = Payment
        fields = ['property_id', 'tenant_id', 'status', 'payment_type', 'month', 'year']

    def filter_upper(self, queryset, name, value):
        return queryset.filter(**{name: value.upper()})
