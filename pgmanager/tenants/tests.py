"""
Test suite for tenants
Tests: creation with bed assignment, duplicate ids, bed moves, vacating and delete guards
"""
from datetime import timedelta
from decimal import Decimal
from unittest.mock import patch
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from pgmanager.core.models import AuditLog
from pgmanager.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from pgmanager.tenants.models import Tenant


class TenantTestMixin:

    def setUp(self):
        self.owner = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.owner)
        self.prop = TestDataFactory.create_property(self.owner, name='Maple PG')
        self.floor = TestDataFactory.create_floor(self.prop, 0)
        self.room = TestDataFactory.create_room(self.floor, capacity=3)
        self.bed = TestDataFactory.create_bed(self.room)

    def tenant_payload(self, **overrides):
        payload = {
            'tenant_id': 'T-1001',
            'full_name': 'Anjali Rao',
            'phone': '9812345678',
            'email': 'anjali@example.com',
            'address': '22 Lake Road, Mysuru',
            'id_proof_type': 'aadhar',
            'id_proof_number': '123412341234',
            'joining_date': (timezone.localdate() - timedelta(days=10)).isoformat(),
            'property_id': self.prop.id,
            'security_deposit': '10000',
            'emergency_contact': {'name': 'Ravi Rao', 'phone': '9800000000', 'relation': 'Father'},
        }
        payload.update(overrides)
        return payload


class TenantCreateTests(TenantTestMixin, TestCase):
    """POST /api/tenants/"""

    def test_create_tenant_with_bed(self):
        with patch('pgmanager.realtime.server.sio.emit') as mock_emit:
            with self.captureOnCommitCallbacks(execute=True):
                response = self.client.post('/api/tenants/', self.tenant_payload(bed_id=self.bed.id), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        data = response.data['data']
        self.assertEqual(data['id_proof_type'], 'AADHAR')
        self.assertEqual(data['bed_info']['bed_number'], self.bed.bed_number)
        self.assertEqual(data['property_name'], 'Maple PG')

        self.bed.refresh_from_db()
        self.room.refresh_from_db()
        self.assertEqual(self.bed.status, 'OCCUPIED')
        self.assertEqual(self.room.status, 'OCCUPIED')

        emitted = [call[0][0] for call in mock_emit.call_args_list]
        self.assertIn('tenant-update', emitted)
        self.assertIn('bed-update', emitted)
        self.assertIn('new-activity', emitted)
        self.assertTrue(AuditLog.objects.filter(action='tenant_create', object_name='Anjali Rao').exists())

    def test_create_tenant_without_bed(self):
        response = self.client.post('/api/tenants/', self.tenant_payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIsNone(response.data['data']['bed'])
        self.assertEqual(Tenant.objects.get(tenant_id='T-1001').created_by, self.owner)

    def test_missing_fields(self):
        response = self.client.post('/api/tenants/', {'full_name': 'No Id'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('tenant_id', response.data['error']['missing_fields'])
        self.assertTrue(response.data['error']['message'].startswith('Missing required fields:'))

    def test_duplicate_tenant_id(self):
        TestDataFactory.create_tenant(self.prop, tenant_id='T-1001')
        response = self.client.post('/api/tenants/', self.tenant_payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error']['message'], 'Tenant with this ID already exists')

    def test_occupied_bed_rejected(self):
        TestDataFactory.create_tenant(self.prop, bed=self.bed)
        response = self.client.post('/api/tenants/', self.tenant_payload(bed_id=self.bed.id), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error']['message'], f'Bed {self.bed.bed_number} is already occupied')

    def test_bed_from_other_property_rejected(self):
        other_bed = TestDataFactory.create_bed_in_new_property(self.owner)
        response = self.client.post('/api/tenants/', self.tenant_payload(bed_id=other_bed.id), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error']['message'], 'Bed not found in this property')

    def test_foreign_property_not_found(self):
        foreign = TestDataFactory.create_property(TestDataFactory.create_user())
        response = self.client.post('/api/tenants/', self.tenant_payload(property_id=foreign.id), format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_cannot_create_vacated_tenant(self):
        response = self.client.post('/api/tenants/', self.tenant_payload(status='VACATED'), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class TenantQueryTests(TenantTestMixin, TestCase):
    """List and detail"""

    def test_list_filters(self):
        TestDataFactory.create_tenant(self.prop, full_name='Kiran Kumar', bed=self.bed)
        TestDataFactory.create_tenant(self.prop, full_name='Leela Das', status='VACATED')
        TestDataFactory.create_tenant(TestDataFactory.create_property(TestDataFactory.create_user()))

        response = self.client.get('/api/tenants/')
        self.assertEqual(response.data['data']['pagination']['total'], 2)

        response = self.client.get('/api/tenants/', {'status': 'active'})
        self.assertEqual([t['full_name'] for t in response.data['data']['tenants']], ['Kiran Kumar'])

        response = self.client.get('/api/tenants/', {'search': 'leela'})
        self.assertEqual(len(response.data['data']['tenants']), 1)

        response = self.client.get('/api/tenants/', {'bed_id': self.bed.id})
        self.assertEqual(response.data['data']['tenants'][0]['full_name'], 'Kiran Kumar')

    def test_detail_includes_payment_summary(self):
        tenant = TestDataFactory.create_tenant(self.prop, bed=self.bed)
        TestDataFactory.create_payment(tenant, amount=Decimal('5000'), status='PAID')
        TestDataFactory.create_payment(tenant, amount=Decimal('5000'))
        response = self.client.get(f'/api/tenants/{tenant.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        summary = response.data['data']['payment_summary']
        self.assertEqual(summary['total_payments'], 2)
        self.assertEqual(summary['pending_payments'], 1)
        self.assertEqual(summary['total_paid'], Decimal('5000'))

    def test_detail_of_other_owner_not_found(self):
        tenant = TestDataFactory.create_tenant(TestDataFactory.create_property(TestDataFactory.create_user()))
        response = self.client.get(f'/api/tenants/{tenant.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class TenantUpdateDeleteTests(TenantTestMixin, TestCase):
    """PUT and DELETE /api/tenants/<id>/"""

    def test_update_ignores_bed_and_property(self):
        tenant = TestDataFactory.create_tenant(self.prop)
        other_prop = TestDataFactory.create_property(self.owner)
        response = self.client.patch(f'/api/tenants/{tenant.id}/', {
            'occupation': 'Engineer', 'property': other_prop.id, 'bed': self.bed.id,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        tenant.refresh_from_db()
        self.assertEqual(tenant.occupation, 'Engineer')
        self.assertEqual(tenant.property, self.prop)
        self.assertIsNone(tenant.bed)

    def test_update_duplicate_tenant_id(self):
        TestDataFactory.create_tenant(self.prop, tenant_id='T-1')
        tenant = TestDataFactory.create_tenant(self.prop, tenant_id='T-2')
        response = self.client.patch(f'/api/tenants/{tenant.id}/', {'tenant_id': 'T-1'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_delete_blocked_by_pending_payments(self):
        tenant = TestDataFactory.create_tenant(self.prop)
        TestDataFactory.create_payment(tenant)
        response = self.client.delete(f'/api/tenants/{tenant.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error']['message'], 'Cannot delete tenant with 1 pending payment(s)')

    def test_delete_frees_bed(self):
        tenant = TestDataFactory.create_tenant(self.prop, bed=self.bed)
        TestDataFactory.create_payment(tenant, status='PAID')
        response = self.client.delete(f'/api/tenants/{tenant.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Tenant.objects.filter(pk=tenant.id).exists())
        self.bed.refresh_from_db()
        self.assertEqual(self.bed.status, 'AVAILABLE')


class TenantAssignBedTests(TenantTestMixin, TestCase):
    """PUT /api/tenants/<id>/assign-bed/"""

    def test_move_to_new_bed(self):
        new_bed = TestDataFactory.create_bed(self.room)
        tenant = TestDataFactory.create_tenant(self.prop, bed=self.bed)
        response = self.client.put(f'/api/tenants/{tenant.id}/assign-bed/', {'bed_id': new_bed.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.bed.refresh_from_db()
        new_bed.refresh_from_db()
        self.assertEqual(self.bed.status, 'AVAILABLE')
        self.assertEqual(new_bed.status, 'OCCUPIED')
        self.assertTrue(AuditLog.objects.filter(action='tenant_relocate').exists())

    def test_pending_tenant_becomes_active(self):
        tenant = TestDataFactory.create_tenant(self.prop, status='PENDING')
        response = self.client.put(f'/api/tenants/{tenant.id}/assign-bed/', {'bed_id': self.bed.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        tenant.refresh_from_db()
        self.assertEqual(tenant.status, 'ACTIVE')

    def test_same_bed_rejected(self):
        tenant = TestDataFactory.create_tenant(self.prop, bed=self.bed)
        response = self.client.put(f'/api/tenants/{tenant.id}/assign-bed/', {'bed_id': self.bed.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error']['message'], 'Tenant is already assigned to this bed')

    def test_vacated_tenant_rejected(self):
        tenant = TestDataFactory.create_tenant(self.prop, status='VACATED')
        response = self.client.put(f'/api/tenants/{tenant.id}/assign-bed/', {'bed_id': self.bed.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error']['message'], 'Cannot assign a bed to a vacated tenant')

    def test_blocked_bed_rejected(self):
        blocked = TestDataFactory.create_bed(self.room, status='BLOCKED')
        tenant = TestDataFactory.create_tenant(self.prop)
        response = self.client.put(f'/api/tenants/{tenant.id}/assign-bed/', {'bed_id': blocked.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class TenantVacateTests(TenantTestMixin, TestCase):
    """PUT /api/tenants/<id>/vacate/"""

    def test_vacate_frees_bed_and_reports(self):
        joining = timezone.localdate() - timedelta(days=40)
        tenant = TestDataFactory.create_tenant(self.prop, bed=self.bed, joining_date=joining)
        TestDataFactory.create_payment(tenant, amount=Decimal('6000'))
        leaving = timezone.localdate()

        with patch('pgmanager.realtime.server.sio.emit') as mock_emit:
            response = self.client.put(f'/api/tenants/{tenant.id}/vacate/', {
                'leaving_date': leaving.isoformat(), 'reason': 'Job transfer',
            }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.data['data']
        self.assertEqual(data['total_stay_days'], 40)
        self.assertEqual(data['freed_bed']['id'], self.bed.id)
        self.assertEqual(data['freed_bed']['room_status'], 'AVAILABLE')
        self.assertEqual(data['pending_payments']['count'], 1)
        self.assertEqual(data['pending_payments']['amount'], Decimal('6000'))
        self.assertEqual(len(data['warnings']), 1)

        tenant.refresh_from_db()
        self.assertEqual(tenant.status, 'VACATED')
        self.assertFalse(tenant.is_active)
        self.assertEqual(tenant.leaving_date, leaving)
        self.assertIsNone(tenant.bed)
        self.bed.refresh_from_db()
        self.assertEqual(self.bed.status, 'AVAILABLE')

        tenant_events = [call for call in mock_emit.call_args_list if call[0][0] == 'tenant-update']
        self.assertEqual(tenant_events[0][0][1]['type'], 'vacate')

    def test_leaving_date_required(self):
        tenant = TestDataFactory.create_tenant(self.prop)
        response = self.client.put(f'/api/tenants/{tenant.id}/vacate/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error']['message'], 'Leaving date is required')

    def test_future_leaving_date(self):
        tenant = TestDataFactory.create_tenant(self.prop)
        tomorrow = timezone.localdate() + timedelta(days=1)
        response = self.client.put(f'/api/tenants/{tenant.id}/vacate/', {'leaving_date': tomorrow.isoformat()},
                                   format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error']['message'], 'Leaving date cannot be in the future')

    def test_leaving_before_joining(self):
        tenant = TestDataFactory.create_tenant(self.prop, joining_date=timezone.localdate() - timedelta(days=5))
        early = timezone.localdate() - timedelta(days=6)
        response = self.client.put(f'/api/tenants/{tenant.id}/vacate/', {'leaving_date': early.isoformat()},
                                   format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error']['message'], 'Leaving date cannot be before joining date')

    def test_already_vacated(self):
        tenant = TestDataFactory.create_tenant(self.prop, status='VACATED')
        response = self.client.put(f'/api/tenants/{tenant.id}/vacate/',
                                   {'leaving_date': timezone.localdate().isoformat()}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error']['message'], 'Tenant has already vacated')

    def test_room_stays_occupied_while_other_beds_taken(self):
        other_bed = TestDataFactory.create_bed(self.room)
        TestDataFactory.create_tenant(self.prop, bed=other_bed)
        tenant = TestDataFactory.create_tenant(self.prop, bed=self.bed)
        response = self.client.put(f'/api/tenants/{tenant.id}/vacate/',
                                   {'leaving_date': timezone.localdate().isoformat()}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['freed_bed']['room_status'], 'OCCUPIED')
