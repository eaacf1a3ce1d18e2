"""
Test suite for documents and notices
Tests: upload validation, download, metadata updates, notice publishing and read tracking
"""
import shutil
import tempfile
from unittest.mock import patch
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase, override_settings
from rest_framework import status
from pgmanager.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from pgmanager.documents.models import Document, Notice, format_file_size


class FormatFileSizeTests(TestCase):

    def test_sizes(self):
        self.assertEqual(format_file_size(0), '0 Bytes')
        self.assertEqual(format_file_size(512), '512 Bytes')
        self.assertEqual(format_file_size(1536), '1.5 KB')
        self.assertEqual(format_file_size(10 * 1024 * 1024), '10 MB')


class DocumentAPITests(TestCase):
    """/api/documents/"""

    def setUp(self):
        self.media_root = tempfile.mkdtemp()
        self.override = override_settings(MEDIA_ROOT=self.media_root, DOCUMENT_MAX_UPLOAD_SIZE=1024)
        self.override.enable()
        self.owner = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.owner)
        self.prop = TestDataFactory.create_property(self.owner)
        self.tenant = TestDataFactory.create_tenant(self.prop, full_name='Nikhil Jain')

    def tearDown(self):
        self.override.disable()
        shutil.rmtree(self.media_root, ignore_errors=True)

    def upload(self, name='agreement.pdf', content=b'%PDF-1.4 test', content_type='application/pdf', **fields):
        data = {'file': SimpleUploadedFile(name, content, content_type=content_type), 'property_id': self.prop.id}
        data.update(fields)
        return self.client.post('/api/documents/', data, format='multipart')

    def test_upload_document(self):
        response = self.upload(document_type='agreement', tenant_id=self.tenant.id, description='Rental agreement')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        data = response.data['data']
        self.assertEqual(data['title'], 'agreement')
        self.assertEqual(data['document_type'], 'AGREEMENT')
        self.assertEqual(data['original_name'], 'agreement.pdf')
        self.assertEqual(data['mime_type'], 'application/pdf')
        self.assertEqual(data['file_size'], 13)
        self.assertEqual(data['tenant_name'], 'Nikhil Jain')
        self.assertEqual(Document.objects.get().uploaded_by, self.owner)

    def test_upload_requires_file(self):
        response = self.client.post('/api/documents/', {'property_id': self.prop.id}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error']['message'], 'No file uploaded')

    def test_upload_rejects_type(self):
        response = self.upload(name='script.exe', content_type='application/octet-stream')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertTrue(response.data['error']['message'].startswith('Invalid file type'))

    def test_upload_rejects_large_file(self):
        response = self.upload(name='notes.txt', content=b'x' * 2048, content_type='text/plain')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error']['message'], 'File too large. Maximum size is 1 KB.')

    def test_upload_to_foreign_property(self):
        foreign = TestDataFactory.create_property(TestDataFactory.create_user())
        response = self.upload(property_id=foreign.id)
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_upload_with_foreign_tenant(self):
        other = TestDataFactory.create_tenant(TestDataFactory.create_property(self.owner))
        response = self.upload(tenant_id=other.id)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error']['message'], 'Tenant not found in this property')

    def test_list_filters(self):
        self.upload(document_type='AGREEMENT', title='Lease 2024')
        self.upload(name='receipt.png', content=b'\x89PNG', content_type='image/png', document_type='RECEIPT')

        response = self.client.get('/api/documents/')
        self.assertEqual(response.data['data']['pagination']['total'], 2)
        response = self.client.get('/api/documents/', {'document_type': 'receipt'})
        self.assertEqual(len(response.data['data']['documents']), 1)
        response = self.client.get('/api/documents/', {'search': 'lease'})
        self.assertEqual(response.data['data']['documents'][0]['title'], 'Lease 2024')

    def test_list_ignores_non_numeric_ids(self):
        self.upload(title='Lease 2024')
        response = self.client.get('/api/documents/', {'property_id': 'abc', 'tenant_id': 'x1'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['pagination']['total'], 1)
        response = self.client.get('/api/documents/', {'property_id': self.prop.id + 1000})
        self.assertEqual(response.data['data']['pagination']['total'], 0)

    def test_download(self):
        document_id = self.upload().data['data']['id']
        response = self.client.get(f'/api/documents/{document_id}/download/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response['Content-Type'], 'application/pdf')
        self.assertIn('attachment', response['Content-Disposition'])
        self.assertEqual(b''.join(response.streaming_content), b'%PDF-1.4 test')
        response.close()

    def test_update_metadata_and_tenant(self):
        document_id = self.upload(tenant_id=self.tenant.id).data['data']['id']
        response = self.client.patch(f'/api/documents/{document_id}/', {
            'title': 'Signed agreement', 'tenant_id': '', 'tags': ['lease', 'signed'],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        document = Document.objects.get(pk=document_id)
        self.assertEqual(document.title, 'Signed agreement')
        self.assertIsNone(document.tenant)
        self.assertEqual(document.tags, ['lease', 'signed'])

    def test_delete_removes_file(self):
        document_id = self.upload().data['data']['id']
        document = Document.objects.get(pk=document_id)
        storage, name = document.file.storage, document.file.name
        self.assertTrue(storage.exists(name))

        response = self.client.delete(f'/api/documents/{document_id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Document.objects.filter(pk=document_id).exists())
        self.assertFalse(storage.exists(name))


class NoticeAPITests(TestCase):
    """/api/notices/"""

    def setUp(self):
        self.owner = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.owner)
        self.prop = TestDataFactory.create_property(self.owner)
        self.tenant_a = TestDataFactory.create_tenant(self.prop)
        self.tenant_b = TestDataFactory.create_tenant(self.prop)

    def create_notice(self, **fields):
        payload = {'title': 'Water supply', 'content': 'No water from 10 to 12', 'property_id': self.prop.id}
        payload.update(fields)
        return self.client.post('/api/notices/', payload, format='json')

    def test_create_draft(self):
        with patch('pgmanager.realtime.server.sio.emit') as mock_emit:
            response = self.create_notice(priority='high')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        data = response.data['data']
        self.assertEqual(data['priority'], 'HIGH')
        self.assertFalse(data['is_published'])
        self.assertIsNone(data['publish_date'])
        self.assertEqual(data['stats']['total_targets'], 2)
        mock_emit.assert_not_called()

    def test_title_and_content_required(self):
        response = self.create_notice(content='')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error']['message'], 'Title and content are required')

    def test_emergency_publish_broadcasts_alert(self):
        with patch('pgmanager.realtime.server.sio.emit') as mock_emit:
            response = self.create_notice(notice_type='emergency', is_published=True)
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIsNotNone(response.data['data']['publish_date'])
        alerts = [call for call in mock_emit.call_args_list if call[0][0] == 'emergency-alert']
        self.assertEqual(len(alerts), 1)
        self.assertEqual(alerts[0][0][1]['priority'], 'CRITICAL')
        self.assertEqual(alerts[0][1]['to'], f'property:{self.prop.id}')

    def test_targets_must_be_active_tenants(self):
        vacated = TestDataFactory.create_tenant(self.prop, status='VACATED')
        response = self.create_notice(target_tenant_ids=[self.tenant_a.id, vacated.id])
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.create_notice(target_tenant_ids=[self.tenant_a.id])
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['data']['target_tenants'], [self.tenant_a.id])
        self.assertEqual(response.data['data']['stats']['total_targets'], 1)

    def test_publishing_on_update(self):
        notice_id = self.create_notice().data['data']['id']
        with patch('pgmanager.realtime.server.sio.emit') as mock_emit:
            response = self.client.patch(f'/api/notices/{notice_id}/', {'is_published': True}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNotNone(Notice.objects.get(pk=notice_id).publish_date)
        self.assertIn('new-activity', [call[0][0] for call in mock_emit.call_args_list])

    def test_list_filters(self):
        self.create_notice(is_published=True, priority='URGENT')
        self.create_notice()
        response = self.client.get('/api/notices/', {'is_published': 'true'})
        self.assertEqual(len(response.data['data']['notices']), 1)
        response = self.client.get('/api/notices/', {'priority': 'urgent'})
        self.assertEqual(len(response.data['data']['notices']), 1)

    def test_list_ignores_non_numeric_property(self):
        self.create_notice()
        response = self.client.get('/api/notices/', {'property_id': 'abc'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['data']['notices']), 1)

    def test_mark_read(self):
        notice_id = self.create_notice(is_published=True).data['data']['id']
        url = f'/api/notices/{notice_id}/read/'
        response = self.client.post(url, {'tenant_id': self.tenant_a.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['stats']['read_count'], 1)
        self.assertEqual(response.data['data']['stats']['read_rate'], 50.0)

        # reading twice is recorded once
        self.client.post(url, {'tenant_id': self.tenant_a.id}, format='json')
        self.assertEqual(len(Notice.objects.get(pk=notice_id).read_by), 1)

    def test_mark_read_unpublished(self):
        notice_id = self.create_notice().data['data']['id']
        response = self.client.post(f'/api/notices/{notice_id}/read/', {'tenant_id': self.tenant_a.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error']['message'], 'Notice is not published')

    def test_mark_read_untargeted_tenant(self):
        notice_id = self.create_notice(is_published=True, target_tenant_ids=[self.tenant_a.id]).data['data']['id']
        response = self.client.post(f'/api/notices/{notice_id}/read/', {'tenant_id': self.tenant_b.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_delete(self):
        notice_id = self.create_notice().data['data']['id']
        response = self.client.delete(f'/api/notices/{notice_id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Notice.objects.filter(pk=notice_id).exists())
