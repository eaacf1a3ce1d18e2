import django_filters
from django.db.models import Q
from .models import Document, Notice


class DocumentFilter(django_filters.FilterSet):
    """Filter documents by property, tenant, type and free-text search"""
    property_id = django_filters.NumberFilter(field_name='property_id')
    tenant_id = django_filters.NumberFilter(field_name='tenant_id')
    document_type = django_filters.CharFilter(method='filter_upper')
    search = django_filters.CharFilter(method='filter_search', label='Search')

    class Meta:
        model = Document
        fields = ['property_id', 'tenant_id', 'document_type', 'search']

    def filter_upper(self, queryset, name, value):
        return queryset.filter(**{name: value.upper()})

    def filter_search(self, queryset, name, value):
        if not value:
            return queryset
        return queryset.filter(
            Q(title__icontains=value) |
            Q(description__icontains=value) |
            Q(original_name__icontains=value)
        )


class NoticeFilter(django_filters.FilterSet):
    """Filter notices by property, type, priority and published flag"""
    property_id = django_filters.NumberFilter(field_name='property_id')
    notice_type = django_filters.CharFilter(method='filter_upper')
    priority = django_filters.CharFilter(method='filter_upper')
    is_published = django_filters.CharFilter(method='filter_published')

    class Meta:
        model = Notice
        fields = ['property_id', 'notice_type', 'priority', 'is_published']

    def filter_upper(self, queryset, name, value):
        return queryset.filter(**{name: value.upper()})

    def filter_published(self, queryset, name, value):
        return queryset.filter(is_published=value.lower() in ('1', 'true', 'yes'))
