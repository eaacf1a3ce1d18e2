from django.contrib import admin
from .models import Document, Notice


@admin.register(Document)
class DocumentAdmin(admin.ModelAdmin):
    list_display = ['title', 'property', 'tenant', 'document_type', 'original_name', 'file_size', 'created_at']
    list_filter = ['document_type', 'is_public', 'property']
    search_fields = ['title', 'original_name', 'description']
    readonly_fields = ['mime_type', 'file_size', 'created_at', 'updated_at']
    ordering = ['-created_at']


@admin.register(Notice)
class NoticeAdmin(admin.ModelAdmin):
    list_display = ['title', 'property', 'notice_type', 'priority', 'is_published', 'publish_date']
    list_filter = ['notice_type', 'priority', 'is_published', 'property']
    search_fields = ['title', 'content']
    filter_horizontal = ['target_tenants']
    ordering = ['-created_at']
