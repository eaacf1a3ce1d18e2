import logging
import mimetypes
import os
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, parser_classes
from rest_framework.parsers import JSONParser, FormParser, MultiPartParser
from django.conf import settings
from django.http import FileResponse
from django.utils import timezone
from pgmanager.core.permissions import IsActiveAccount
from pgmanager.core.responses import success_response, error_response, validation_error_response, paginate
from pgmanager.core.utils import create_audit_log, log_business_event
from pgmanager.properties.access import get_owned_property
from pgmanager.realtime.server import emergency_broadcast, broadcast_activity
from pgmanager.tenants.models import Tenant
from .filters import DocumentFilter, NoticeFilter
from .models import Document, Notice, format_file_size
from .serializers import DocumentSerializer, NoticeSerializer

logger = logging.getLogger('pgmanager.documents')

ALLOWED_MIME_TYPES = {
    'application/pdf',
    'application/msword',
    'application/vnd.openxmlformats-officedocument.wordprocessingml.document',
    'image/jpeg',
    'image/jpg',
    'image/png',
    'text/plain',
}
ALLOWED_EXTENSIONS = {'.pdf', '.doc', '.docx', '.jpeg', '.jpg', '.png', '.txt'}
DOCUMENT_METADATA_FIELDS = ['title', 'description', 'document_type', 'tags', 'is_public', 'expiry_date']
NOTICE_FIELDS = ['title', 'content', 'notice_type', 'priority', 'is_published', 'publish_date', 'expiry_date']


def _max_upload_size():
    return getattr(settings, 'DOCUMENT_MAX_UPLOAD_SIZE', 10 * 1024 * 1024)


def _pick(data, fields):
    """Plain dict of the given keys; uploads make request.data impossible to copy"""
    return {field: data.get(field) for field in fields if field in data}


def _id_list(value):
    if value in (None, ''):
        return []
    if isinstance(value, str):
        value = [item for item in value.split(',') if item.strip()]
    if not isinstance(value, (list, tuple)):
        value = [value]
    return [int(item) for item in value]


def _tenant_in_property(tenant_pk, prop):
    try:
        return Tenant.objects.filter(pk=tenant_pk, property=prop).first()
    except (TypeError, ValueError):
        return None


def _get_owned(model, user, pk):
    try:
        return model.objects.select_related('property').filter(pk=pk, property__owner=user).first()
    except (TypeError, ValueError):
        return None


# Document views
@api_view(['GET', 'POST'])
@permission_classes([IsActiveAccount])
@parser_classes([MultiPartParser, FormParser, JSONParser])
def document_list_create(request):
    """List documents (property_id, document_type, tenant_id, search) or upload one"""
    if request.method == 'GET':
        documents = Document.objects.filter(property__owner=request.user).select_related('tenant', 'uploaded_by')
        documents = DocumentFilter(request.query_params, queryset=documents).qs
        items, pagination = paginate(documents, request, default_limit=20)
        return success_response({
            'documents': DocumentSerializer(items, many=True).data,
            'pagination': pagination,
        })

    upload = request.FILES.get('file')
    if upload is None:
        return error_response('No file uploaded')

    prop = get_owned_property(request.user, request.data.get('property_id'))
    if prop is None:
        return error_response('Property not found or access denied', status.HTTP_404_NOT_FOUND)

    extension = os.path.splitext(upload.name)[1].lower()
    mime_type = upload.content_type or mimetypes.guess_type(upload.name)[0] or ''
    if mime_type not in ALLOWED_MIME_TYPES or extension not in ALLOWED_EXTENSIONS:
        return error_response('Invalid file type. Only PDF, DOC, DOCX, JPG, PNG and TXT files are allowed.')
    if upload.size > _max_upload_size():
        return error_response(f"File too large. Maximum size is {format_file_size(_max_upload_size())}.")

    tenant = None
    if request.data.get('tenant_id'):
        tenant = _tenant_in_property(request.data.get('tenant_id'), prop)
        if tenant is None:
            return error_response('Tenant not found in this property')

    data = _pick(request.data, DOCUMENT_METADATA_FIELDS)
    data.setdefault('title', os.path.splitext(upload.name)[0])
    if not data['title']:
        data['title'] = os.path.splitext(upload.name)[0]
    serializer = DocumentSerializer(data=data)
    if not serializer.is_valid():
        return validation_error_response(serializer.errors)

    document = serializer.save(
        property=prop,
        tenant=tenant,
        file=upload,
        original_name=upload.name,
        mime_type=mime_type,
        file_size=upload.size,
        uploaded_by=request.user,
    )
    logger.info(f"Document '{document.title}' ({document.file_size_display()}) uploaded to property {prop.id}")
    create_audit_log(request, 'document_upload', 'Document', document.id, object_name=document.title,
                     property_id=prop.id, changes={'file': document.original_name, 'size': document.file_size})
    return success_response(DocumentSerializer(document).data, message='Document uploaded successfully',
                            status_code=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsActiveAccount])
def document_detail(request, pk):
    """Retrieve, update metadata of, or delete a document (and its file)"""
    document = _get_owned(Document, request.user, pk)
    if document is None:
        return error_response('Document not found or access denied', status.HTTP_404_NOT_FOUND)

    if request.method == 'GET':
        return success_response(DocumentSerializer(document).data)

    if request.method in ('PUT', 'PATCH'):
        data = _pick(request.data, DOCUMENT_METADATA_FIELDS)
        serializer = DocumentSerializer(document, data=data, partial=True)
        if not serializer.is_valid():
            return validation_error_response(serializer.errors)
        save_kwargs = {}
        if 'tenant_id' in request.data:
            tenant = None
            if request.data.get('tenant_id'):
                tenant = _tenant_in_property(request.data.get('tenant_id'), document.property)
                if tenant is None:
                    return error_response('Tenant not found in this property')
            save_kwargs['tenant'] = tenant
        document = serializer.save(**save_kwargs)
        create_audit_log(request, 'update', 'Document', document.id, object_name=document.title,
                         property_id=document.property_id)
        return success_response(DocumentSerializer(document).data, message='Document updated successfully')

    document_pk, title, property_id = document.id, document.title, document.property_id
    document.file.delete(save=False)
    document.delete()
    logger.info(f"Document {document_pk} deleted by {request.user.email}")
    create_audit_log(request, 'delete', 'Document', document_pk, object_name=title, property_id=property_id)
    return success_response(message='Document deleted successfully')


@api_view(['GET'])
@permission_classes([IsActiveAccount])
def document_download(request, pk):
    """Stream the stored file as an attachment"""
    document = _get_owned(Document, request.user, pk)
    if document is None:
        return error_response('Document not found or access denied', status.HTTP_404_NOT_FOUND)
    if not document.file or not document.file.storage.exists(document.file.name):
        logger.warning(f"File for document {document.id} is missing from storage")
        return error_response('File not found', status.HTTP_404_NOT_FOUND)

    response = FileResponse(document.file.open('rb'), as_attachment=True, filename=document.original_name)
    response['Content-Type'] = document.mime_type
    return response


# Notice views
def _notice_targets(request, prop):
    """Resolve target_tenant_ids; every target must be an ACTIVE tenant of the property"""
    try:
        ids = _id_list(request.data.get('target_tenant_ids', request.data.get('target_tenants')))
    except (TypeError, ValueError):
        return None, 'target_tenant_ids must be a list of tenant ids'
    if not ids:
        return [], None
    tenants = list(Tenant.objects.filter(pk__in=ids, property=prop, status='ACTIVE'))
    if len(tenants) != len(set(ids)):
        return None, 'All target tenants must be active tenants of this property'
    return tenants, None


def _on_publish(request, notice):
    if notice.notice_type == 'EMERGENCY':
        emergency_broadcast(notice.property_id, {
            'notice_id': notice.id,
            'title': notice.title,
            'message': notice.content,
        })
    broadcast_activity(notice.property_id, {
        'type': 'notice_published',
        'message': f"Notice published: {notice.title}",
        'notice_id': notice.id,
    })
    log_business_event('notice_published', notice_id=notice.id, notice_type=notice.notice_type,
                       priority=notice.priority)
    create_audit_log(request, 'notice_publish', 'Notice', notice.id, object_name=notice.title,
                     property_id=notice.property_id)


@api_view(['GET', 'POST'])
@permission_classes([IsActiveAccount])
def notice_list_create(request):
    """List notices (property_id, notice_type, priority, is_published) or create one"""
    if request.method == 'GET':
        notices = Notice.objects.filter(property__owner=request.user).select_related('property')
        notices = notices.prefetch_related('target_tenants')
        notices = NoticeFilter(request.query_params, queryset=notices).qs
        items, pagination = paginate(notices, request, default_limit=20)
        return success_response({
            'notices': NoticeSerializer(items, many=True).data,
            'pagination': pagination,
        })

    if not request.data.get('title') or not request.data.get('content'):
        return error_response('Title and content are required')
    prop = get_owned_property(request.user, request.data.get('property_id'))
    if prop is None:
        return error_response('Property not found or access denied', status.HTTP_404_NOT_FOUND)

    targets, target_error = _notice_targets(request, prop)
    if target_error:
        return error_response(target_error)

    serializer = NoticeSerializer(data=_pick(request.data, NOTICE_FIELDS))
    if not serializer.is_valid():
        return validation_error_response(serializer.errors)

    save_kwargs = {'property': prop, 'created_by': request.user}
    if serializer.validated_data.get('is_published') and not serializer.validated_data.get('publish_date'):
        save_kwargs['publish_date'] = timezone.now()
    notice = serializer.save(**save_kwargs)
    notice.target_tenants.set(targets)

    if notice.is_published:
        _on_publish(request, notice)
    logger.info(f"Notice '{notice.title}' created for property {prop.id}")
    return success_response(NoticeSerializer(notice).data, message='Notice created successfully',
                            status_code=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsActiveAccount])
def notice_detail(request, pk):
    """Retrieve, update or delete a notice"""
    notice = _get_owned(Notice, request.user, pk)
    if notice is None:
        return error_response('Notice not found or access denied', status.HTTP_404_NOT_FOUND)

    if request.method == 'GET':
        return success_response(NoticeSerializer(notice).data)

    if request.method in ('PUT', 'PATCH'):
        was_published = notice.is_published
        targets = None
        if 'target_tenant_ids' in request.data or 'target_tenants' in request.data:
            targets, target_error = _notice_targets(request, notice.property)
            if target_error:
                return error_response(target_error)

        serializer = NoticeSerializer(notice, data=_pick(request.data, NOTICE_FIELDS), partial=True)
        if not serializer.is_valid():
            return validation_error_response(serializer.errors)
        save_kwargs = {}
        if serializer.validated_data.get('is_published') and not was_published and not notice.publish_date:
            save_kwargs['publish_date'] = timezone.now()
        notice = serializer.save(**save_kwargs)
        if targets is not None:
            notice.target_tenants.set(targets)

        if notice.is_published and not was_published:
            _on_publish(request, notice)
        create_audit_log(request, 'update', 'Notice', notice.id, object_name=notice.title,
                         property_id=notice.property_id)
        return success_response(NoticeSerializer(notice).data, message='Notice updated successfully')

    notice_pk, title, property_id = notice.id, notice.title, notice.property_id
    notice.delete()
    create_audit_log(request, 'delete', 'Notice', notice_pk, object_name=title, property_id=property_id)
    return success_response(message='Notice deleted successfully')


@api_view(['POST'])
@permission_classes([IsActiveAccount])
def notice_mark_read(request, pk):
    """Record that a tenant has read a published notice"""
    notice = _get_owned(Notice, request.user, pk)
    if notice is None:
        return error_response('Notice not found or access denied', status.HTTP_404_NOT_FOUND)

    tenant_pk = request.data.get('tenant_id')
    if not tenant_pk:
        return error_response('tenant_id is required')
    if not notice.is_published:
        return error_response('Notice is not published')

    tenant = _tenant_in_property(tenant_pk, notice.property)
    if tenant is None:
        return error_response('Tenant not found in this property', status.HTTP_404_NOT_FOUND)
    if notice.target_tenants.exists() and not notice.target_tenants.filter(pk=tenant.pk).exists():
        return error_response('This notice is not targeted to the tenant', status.HTTP_403_FORBIDDEN)

    if not notice.is_read_by(tenant.pk):
        notice.read_by = list(notice.read_by or []) + [
            {'tenant_id': tenant.pk, 'read_at': timezone.now().isoformat()}
        ]
        notice.save(update_fields=['read_by', 'updated_at'])
    return success_response(NoticeSerializer(notice).data, message='Notice marked as read')
