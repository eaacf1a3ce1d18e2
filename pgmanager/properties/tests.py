"""
Test suite for properties, floors, rooms and beds
Tests: capacity limits, duplicate detection, occupancy transitions and relocation on delete
"""
from datetime import timedelta
from decimal import Decimal
from unittest.mock import patch
from django.db import transaction
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from pgmanager.core.models import AuditLog
from pgmanager.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from pgmanager.properties.capacity import (
    calculate_current_usage, validate_capacity, get_capacity_utilization, get_capacity_status,
    capacity_status, validate_capacity_update, get_capacity_summary, validate_room_bed_count, percentage,
)
from pgmanager.properties.models import Property, Floor, Room, Bed
from pgmanager.properties.occupancy import refresh_room_status, occupy_bed, free_bed
from pgmanager.tenants.models import Tenant


class CapacityTests(TestCase):
    """Capacity helpers"""

    def setUp(self):
        self.owner = TestDataFactory.create_user()
        self.prop = TestDataFactory.create_property(self.owner, total_floors=2, total_rooms=5, total_beds=10)
        self.floor = TestDataFactory.create_floor(self.prop, 0)
        self.room = TestDataFactory.create_room(self.floor, capacity=2)

    def test_calculate_current_usage(self):
        TestDataFactory.create_bed(self.room)
        TestDataFactory.create_bed(self.room, status='OCCUPIED')
        usage = calculate_current_usage(self.prop)
        self.assertEqual(usage, {'floors': 1, 'rooms': 1, 'beds': 2, 'occupied_beds': 1})

    def test_calculate_current_usage_without_property(self):
        self.assertEqual(calculate_current_usage(None)['beds'], 0)

    def test_validate_capacity_allows_below_total(self):
        validation = validate_capacity(self.prop, 'room')
        self.assertTrue(validation['is_valid'])
        self.assertEqual(validation['warnings'], [])

    def test_validate_capacity_rejects_at_total_with_warning(self):
        TestDataFactory.create_floor(self.prop, 1)
        validation = validate_capacity(self.prop, 'floor')
        self.assertFalse(validation['is_valid'])
        self.assertEqual(validation['errors'], ['Cannot add more floors. Property capacity is 2 floors.'])
        self.assertEqual(len(validation['warnings']), 1)

    def test_validate_capacity_warns_at_eighty_percent(self):
        for number in range(3):
            TestDataFactory.create_room(self.floor, room_number=f'X{number}')
        validation = validate_capacity(self.prop, 'room')
        self.assertTrue(validation['is_valid'])
        self.assertEqual(validation['warnings'], ['Approaching room capacity limit (4/5)'])

    def test_zero_total_means_unlimited(self):
        prop = TestDataFactory.create_property(self.owner)
        TestDataFactory.create_floor(prop, 0)
        self.assertTrue(validate_capacity(prop, 'floor')['is_valid'])

    def test_invalid_item_type(self):
        validation = validate_capacity(self.prop, 'wing')
        self.assertFalse(validation['is_valid'])

    def test_utilization_and_status(self):
        for _ in range(2):
            TestDataFactory.create_bed(self.room)
        utilization = get_capacity_utilization(self.prop)
        self.assertEqual(utilization['floors'], 50)
        self.assertEqual(utilization['rooms'], 20)
        self.assertEqual(utilization['beds'], 20)
        self.assertEqual(get_capacity_status(self.prop)['floors'], 'good')

    def test_utilization_rounds_halves_up(self):
        prop = TestDataFactory.create_property(self.owner, total_beds=8)
        room = TestDataFactory.create_room(TestDataFactory.create_floor(prop, 0))
        TestDataFactory.create_bed(room)
        self.assertEqual(get_capacity_utilization(prop)['beds'], 13)

    def test_percentage(self):
        self.assertEqual(percentage(161, 200), 81)
        self.assertEqual(capacity_status(percentage(159, 200)), 'warning')
        self.assertEqual(percentage(1, 200), 1)
        self.assertEqual(percentage(1, 3), 33)
        self.assertEqual(percentage(5, 0), 0)

    def test_capacity_status_thresholds(self):
        self.assertEqual(capacity_status(100), 'critical')
        self.assertEqual(capacity_status(80), 'warning')
        self.assertEqual(capacity_status(79), 'good')

    def test_validate_capacity_update(self):
        TestDataFactory.create_floor(self.prop, 1)
        validation = validate_capacity_update(self.prop, {'total_floors': 1})
        self.assertFalse(validation['is_valid'])
        self.assertEqual(validation['errors'][0], 'Cannot reduce floors to 1. Currently using 2 floors.')
        self.assertTrue(validate_capacity_update(self.prop, {'total_floors': 0})['is_valid'])
        self.assertTrue(validate_capacity_update(self.prop, {'name': 'x'})['is_valid'])

    def test_capacity_summary(self):
        TestDataFactory.create_bed(self.room, status='OCCUPIED')
        summary = get_capacity_summary(self.prop)
        self.assertEqual(summary['beds']['current'], 1)
        self.assertEqual(summary['beds']['occupied'], 1)
        self.assertEqual(summary['floors']['total'], 2)

    def test_room_bed_count(self):
        self.assertTrue(validate_room_bed_count(self.room)['is_valid'])
        TestDataFactory.create_bed(self.room)
        TestDataFactory.create_bed(self.room)
        validation = validate_room_bed_count(self.room)
        self.assertFalse(validation['is_valid'])
        self.assertEqual(validation['errors'][0], 'Room is at full capacity (2 beds). Cannot add more beds.')


class OccupancyTests(TestCase):
    """Room status follows its beds"""

    def setUp(self):
        self.owner = TestDataFactory.create_user()
        self.bed = TestDataFactory.create_bed_in_new_property(self.owner)
        self.room = self.bed.room

    def test_occupy_and_free(self):
        occupy_bed(self.bed)
        self.room.refresh_from_db()
        self.assertEqual(self.room.status, 'OCCUPIED')
        free_bed(self.bed)
        self.room.refresh_from_db()
        self.assertEqual(self.room.status, 'AVAILABLE')

    def test_maintenance_room_is_preserved(self):
        self.room.status = 'MAINTENANCE'
        self.room.save()
        occupy_bed(self.bed)
        self.room.refresh_from_db()
        self.assertEqual(self.room.status, 'MAINTENANCE')

    def test_refresh_room_status_with_one_occupied_bed(self):
        TestDataFactory.create_bed(self.room)
        self.bed.status = 'OCCUPIED'
        self.bed.save()
        self.assertEqual(refresh_room_status(self.room), 'OCCUPIED')

    @patch('pgmanager.realtime.server.sio.emit')
    def test_occupy_broadcasts_bed_update(self, mock_emit):
        with self.captureOnCommitCallbacks(execute=True):
            occupy_bed(self.bed)
        event, payload = mock_emit.call_args[0][:2]
        self.assertEqual(event, 'bed-update')
        self.assertEqual(payload['data']['status'], 'OCCUPIED')
        self.assertEqual(mock_emit.call_args[1]['to'], f'beds:{self.room.floor.property_id}')

    @patch('pgmanager.realtime.server.sio.emit')
    def test_bed_update_waits_for_commit(self, mock_emit):
        with self.captureOnCommitCallbacks() as callbacks:
            occupy_bed(self.bed)
            mock_emit.assert_not_called()
        self.assertEqual(len(callbacks), 1)

    @patch('pgmanager.realtime.server.sio.emit')
    def test_rolled_back_change_is_not_broadcast(self, mock_emit):
        with self.captureOnCommitCallbacks(execute=True) as callbacks:
            with self.assertRaises(RuntimeError):
                with transaction.atomic():
                    free_bed(self.bed)
                    raise RuntimeError('rollback')
        self.assertEqual(callbacks, [])
        mock_emit.assert_not_called()

    def test_bed_location(self):
        self.assertIn(self.room.room_number, self.bed.location)
        self.assertEqual(self.bed.property_id, self.room.floor.property_id)


class PropertyAPITests(TestCase):
    """Property endpoints"""

    def setUp(self):
        self.owner = TestDataFactory.create_user()
        self.other = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.owner)

    def test_create_property(self):
        response = self.client.post('/api/properties/', {
            'name': 'Green Nest PG',
            'address': '5 MG Road',
            'city': 'Pune',
            'state': 'Maharashtra',
            'pincode': '411001',
            'total_floors': 3,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['data']['owner'], self.owner.id)
        self.assertTrue(AuditLog.objects.filter(model_name='Property', action='create').exists())

    def test_create_property_missing_fields(self):
        response = self.client.post('/api/properties/', {'name': 'Half'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error']['message'], 'Name, address, city, state, and pincode are required')

    def test_list_is_owner_scoped_with_stats(self):
        prop = TestDataFactory.create_property(self.owner, name='Mine')
        TestDataFactory.create_property(self.other, name='Theirs')
        room = TestDataFactory.create_room(TestDataFactory.create_floor(prop))
        bed = TestDataFactory.create_bed(room)
        TestDataFactory.create_bed(room)
        tenant = TestDataFactory.create_tenant(prop, bed=bed)
        TestDataFactory.create_payment(tenant, amount=Decimal('7000'), status='PAID')

        response = self.client.get('/api/properties/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        properties = response.data['data']['properties']
        self.assertEqual(len(properties), 1)
        stats = properties[0]['stats']
        self.assertEqual(stats['total_beds'], 2)
        self.assertEqual(stats['occupied_beds'], 1)
        self.assertEqual(stats['available_beds'], 1)
        self.assertEqual(stats['occupancy_rate'], 50)
        self.assertEqual(stats['active_tenants'], 1)
        self.assertEqual(stats['monthly_revenue'], Decimal('7000'))
        self.assertEqual(response.data['data']['pagination']['total'], 1)

    def test_list_search(self):
        TestDataFactory.create_property(self.owner, name='Lake View', city='Bhopal')
        TestDataFactory.create_property(self.owner, name='Hill Top', city='Shimla')
        response = self.client.get('/api/properties/', {'search': 'shimla'})
        self.assertEqual([p['name'] for p in response.data['data']['properties']], ['Hill Top'])

    def test_get_other_owners_property_is_not_found(self):
        prop = TestDataFactory.create_property(self.other)
        response = self.client.get(f'/api/properties/{prop.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error']['message'], 'Property not found or access denied')

    def test_get_includes_capacity(self):
        prop = TestDataFactory.create_property(self.owner, total_beds=4)
        response = self.client.get(f'/api/properties/{prop.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['capacity']['beds']['total'], 4)

    def test_update_cannot_drop_below_usage(self):
        prop = TestDataFactory.create_property(self.owner, total_floors=3)
        TestDataFactory.create_floor(prop, 0)
        TestDataFactory.create_floor(prop, 1)
        response = self.client.put(f'/api/properties/{prop.id}/', {'total_floors': 1}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error']['message'], 'Cannot reduce floors to 1. Currently using 2 floors.')

        response = self.client.put(f'/api/properties/{prop.id}/', {'total_floors': 2, 'name': 'Renamed'},
                                   format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        prop.refresh_from_db()
        self.assertEqual(prop.name, 'Renamed')

    def test_delete_blocked_by_active_tenants(self):
        prop = TestDataFactory.create_property(self.owner)
        TestDataFactory.create_tenant(prop)
        response = self.client.delete(f'/api/properties/{prop.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error']['message'], 'Cannot delete property with 1 active tenant(s)')

    def test_delete_property(self):
        prop = TestDataFactory.create_property(self.owner)
        TestDataFactory.create_tenant(prop, status='VACATED')
        response = self.client.delete(f'/api/properties/{prop.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Property.objects.filter(pk=prop.id).exists())

    def test_property_dashboard(self):
        prop = TestDataFactory.create_property(self.owner)
        tenant = TestDataFactory.create_tenant(prop)
        today = timezone.localdate()
        TestDataFactory.create_payment(tenant, amount=Decimal('1000'), due_date=today - timedelta(days=3))
        TestDataFactory.create_payment(tenant, amount=Decimal('2000'), due_date=today + timedelta(days=2))
        TestDataFactory.create_payment(tenant, amount=Decimal('4000'), due_date=today + timedelta(days=20))

        response = self.client.get(f'/api/properties/{prop.id}/dashboard/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        payments = response.data['data']['payments']
        self.assertEqual(payments['pending_count'], 3)
        self.assertEqual(payments['pending_amount'], Decimal('7000'))
        self.assertEqual(payments['overdue_count'], 1)
        self.assertEqual(payments['overdue_amount'], Decimal('1000'))
        self.assertEqual(len(response.data['data']['upcoming_payments']), 1)
        self.assertEqual(len(response.data['data']['recent_payments']), 3)


class FloorAPITests(TestCase):
    """Floor endpoints"""

    def setUp(self):
        self.owner = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.owner)
        self.prop = TestDataFactory.create_property(self.owner, total_floors=2)

    def test_list_requires_property_id(self):
        response = self.client.get('/api/floors/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error']['message'], 'property_id is required')

    def test_create_floor_with_floor_name(self):
        response = self.client.post('/api/floors/', {
            'property_id': self.prop.id, 'floor_number': 0, 'floor_name': 'Ground',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Floor.objects.get(property=self.prop).name, 'Ground')

        response = self.client.get('/api/floors/', {'property_id': self.prop.id})
        self.assertEqual(len(response.data['data']), 1)

    def test_duplicate_floor_number_conflicts(self):
        TestDataFactory.create_floor(self.prop, 1)
        response = self.client.post('/api/floors/', {
            'property_id': self.prop.id, 'floor_number': 1, 'name': 'First',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_floor_capacity_enforced(self):
        TestDataFactory.create_floor(self.prop, 0)
        TestDataFactory.create_floor(self.prop, 1)
        response = self.client.post('/api/floors/', {
            'property_id': self.prop.id, 'floor_number': 2, 'name': 'Second',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error']['message'], 'Cannot add more floors. Property capacity is 2 floors.')

    def test_create_floor_in_foreign_property(self):
        other_prop = TestDataFactory.create_property(TestDataFactory.create_user())
        response = self.client.post('/api/floors/', {
            'property_id': other_prop.id, 'floor_number': 0, 'name': 'Ground',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_update_floor_duplicate_number(self):
        TestDataFactory.create_floor(self.prop, 0)
        floor = TestDataFactory.create_floor(self.prop, 1)
        response = self.client.patch(f'/api/floors/{floor.id}/', {'floor_number': 0}, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_delete_floor_blocked_by_active_tenant(self):
        floor = TestDataFactory.create_floor(self.prop, 0)
        bed = TestDataFactory.create_bed(TestDataFactory.create_room(floor))
        TestDataFactory.create_tenant(self.prop, bed=bed)
        response = self.client.delete(f'/api/floors/{floor.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error']['message'], 'Cannot delete floor with 1 active tenant(s)')

    def test_delete_empty_floor(self):
        floor = TestDataFactory.create_floor(self.prop, 0)
        response = self.client.delete(f'/api/floors/{floor.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Floor.objects.filter(pk=floor.id).exists())


class RoomAPITests(TestCase):
    """Room endpoints"""

    def setUp(self):
        self.owner = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.owner)
        self.prop = TestDataFactory.create_property(self.owner, total_rooms=2)
        self.floor = TestDataFactory.create_floor(self.prop, 1)

    def test_create_room_normalizes_type(self):
        response = self.client.post('/api/rooms/', {
            'floor_id': self.floor.id, 'room_number': '101', 'capacity': 3, 'type': 'Shared', 'rent': '9000',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['data']['type'], 'SHARED')

    def test_duplicate_room_number_conflicts(self):
        TestDataFactory.create_room(self.floor, room_number='101')
        response = self.client.post('/api/rooms/', {
            'floor_id': self.floor.id, 'room_number': '101', 'capacity': 2,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_capacity_range(self):
        for capacity in (0, 13):
            response = self.client.post('/api/rooms/', {
                'floor_id': self.floor.id, 'room_number': f'R{capacity}', 'capacity': capacity,
            }, format='json')
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, capacity)

    def test_room_limit_enforced(self):
        TestDataFactory.create_room(self.floor, room_number='101')
        TestDataFactory.create_room(self.floor, room_number='102')
        response = self.client.post('/api/rooms/', {
            'floor_id': self.floor.id, 'room_number': '103', 'capacity': 2,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error']['message'], 'Cannot add more rooms. Property capacity is 2 rooms.')

    def test_list_rooms_filters(self):
        TestDataFactory.create_room(self.floor, room_number='101', type='SINGLE', capacity=1)
        TestDataFactory.create_room(self.floor, room_number='102', type='DORMITORY', capacity=8)
        response = self.client.get('/api/rooms/', {'property_id': self.prop.id, 'type': 'dormitory'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([room['room_number'] for room in response.data['data']], ['102'])

    def test_capacity_cannot_drop_below_bed_count(self):
        room = TestDataFactory.create_room(self.floor, capacity=3)
        TestDataFactory.create_bed(room)
        TestDataFactory.create_bed(room)
        response = self.client.patch(f'/api/rooms/{room.id}/', {'capacity': 1}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error']['message'], 'Cannot reduce capacity to 1. Room already has 2 beds.')

    def test_room_beds(self):
        room = TestDataFactory.create_room(self.floor)
        bed = TestDataFactory.create_bed(room)
        TestDataFactory.create_tenant(self.prop, bed=bed, full_name='Meera')
        response = self.client.get(f'/api/rooms/{room.id}/beds/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data'][0]['tenant']['full_name'], 'Meera')

    def test_delete_occupied_room_requires_relocation(self):
        room = TestDataFactory.create_room(self.floor, room_number='101')
        other_room = TestDataFactory.create_room(self.floor, room_number='102')
        free = TestDataFactory.create_bed(other_room)
        bed = TestDataFactory.create_bed(room)
        tenant = TestDataFactory.create_tenant(self.prop, bed=bed)

        response = self.client.delete(f'/api/rooms/{room.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        error = response.data['error']
        self.assertEqual(error['requires_action'], 'RELOCATE_TENANTS')
        self.assertEqual(error['tenants_to_relocate'][0]['tenant_id'], tenant.tenant_id)
        self.assertEqual([b['id'] for b in error['available_beds']], [free.id])

    def test_force_delete_room_sets_tenants_pending(self):
        room = TestDataFactory.create_room(self.floor)
        bed = TestDataFactory.create_bed(room)
        tenant = TestDataFactory.create_tenant(self.prop, bed=bed)

        response = self.client.delete(f'/api/rooms/{room.id}/', {'force_delete': True}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['displaced_tenants'], [tenant.tenant_id])
        tenant.refresh_from_db()
        self.assertEqual(tenant.status, 'PENDING')
        self.assertIsNone(tenant.bed)
        self.assertFalse(Room.objects.filter(pk=room.id).exists())


class BedAPITests(TestCase):
    """Bed endpoints"""

    def setUp(self):
        self.owner = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.owner)
        self.prop = TestDataFactory.create_property(self.owner, total_beds=3)
        self.floor = TestDataFactory.create_floor(self.prop, 0)
        self.room = TestDataFactory.create_room(self.floor, capacity=2)

    def test_create_bed(self):
        response = self.client.post('/api/beds/', {
            'room_id': self.room.id, 'bed_number': 'A', 'bed_type': 'bunk', 'status': 'OCCUPIED',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['data']['bed_type'], 'BUNK')
        self.assertEqual(response.data['data']['status'], 'AVAILABLE')

    def test_duplicate_bed_number_conflicts(self):
        TestDataFactory.create_bed(self.room, bed_number='A')
        response = self.client.post('/api/beds/', {'room_id': self.room.id, 'bed_number': 'A'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_room_capacity_enforced(self):
        TestDataFactory.create_bed(self.room)
        TestDataFactory.create_bed(self.room)
        response = self.client.post('/api/beds/', {'room_id': self.room.id, 'bed_number': 'Z'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error']['message'],
                         'Room is at full capacity (2 beds). Cannot add more beds.')

    def test_property_bed_limit_enforced(self):
        other_room = TestDataFactory.create_room(self.floor, capacity=4)
        for _ in range(3):
            TestDataFactory.create_bed(other_room)
        response = self.client.post('/api/beds/', {'room_id': self.room.id, 'bed_number': 'Z'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error']['message'], 'Cannot add more beds. Property capacity is 3 beds.')

    def test_list_beds_by_status(self):
        TestDataFactory.create_bed(self.room, status='BLOCKED')
        TestDataFactory.create_bed(self.room)
        response = self.client.get('/api/beds/', {'property_id': self.prop.id, 'status': 'blocked'})
        self.assertEqual(len(response.data['data']), 1)

    def test_manual_status_change(self):
        bed = TestDataFactory.create_bed(self.room)
        response = self.client.patch(f'/api/beds/{bed.id}/', {'status': 'maintenance'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        bed.refresh_from_db()
        self.assertEqual(bed.status, 'MAINTENANCE')

    def test_cannot_mark_occupied_manually(self):
        bed = TestDataFactory.create_bed(self.room)
        response = self.client.patch(f'/api/beds/{bed.id}/', {'status': 'OCCUPIED'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error']['message'], 'Use the assign endpoint to occupy a bed')

    def test_assign_and_unassign(self):
        old_bed = TestDataFactory.create_bed(self.room)
        new_bed = TestDataFactory.create_bed(self.room)
        tenant = TestDataFactory.create_tenant(self.prop, bed=old_bed)

        response = self.client.put(f'/api/beds/{new_bed.id}/assign/', {'tenant_id': tenant.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['tenant']['id'], tenant.id)
        old_bed.refresh_from_db()
        new_bed.refresh_from_db()
        self.assertEqual(old_bed.status, 'AVAILABLE')
        self.assertEqual(new_bed.status, 'OCCUPIED')
        self.assertTrue(AuditLog.objects.filter(action='bed_assign').exists())

        response = self.client.put(f'/api/beds/{new_bed.id}/unassign/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        tenant.refresh_from_db()
        self.assertIsNone(tenant.bed)
        self.room.refresh_from_db()
        self.assertEqual(self.room.status, 'AVAILABLE')

    def test_assign_occupied_bed_rejected(self):
        bed = TestDataFactory.create_bed(self.room)
        TestDataFactory.create_tenant(self.prop, bed=bed)
        newcomer = TestDataFactory.create_tenant(self.prop)
        response = self.client.put(f'/api/beds/{bed.id}/assign/', {'tenant_id': newcomer.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error']['message'], 'Bed is already occupied')

    def test_assign_requires_tenant_id(self):
        bed = TestDataFactory.create_bed(self.room)
        response = self.client.put(f'/api/beds/{bed.id}/assign/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_unassign_free_bed_rejected(self):
        bed = TestDataFactory.create_bed(self.room)
        response = self.client.put(f'/api/beds/{bed.id}/unassign/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_delete_occupied_bed_requires_action(self):
        bed = TestDataFactory.create_bed(self.room)
        TestDataFactory.create_tenant(self.prop, bed=bed)
        response = self.client.delete(f'/api/beds/{bed.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error']['requires_action'], 'RELOCATE_TENANT')

    def test_delete_with_relocation(self):
        bed = TestDataFactory.create_bed(self.room)
        target = TestDataFactory.create_bed(self.room)
        tenant = TestDataFactory.create_tenant(self.prop, bed=bed)
        response = self.client.delete(f'/api/beds/{bed.id}/', {'relocate_tenant_to_bed_id': target.id},
                                      format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        tenant.refresh_from_db()
        target.refresh_from_db()
        self.assertEqual(tenant.bed_id, target.id)
        self.assertEqual(target.status, 'OCCUPIED')
        self.assertFalse(Bed.objects.filter(pk=bed.id).exists())

    def test_delete_relocation_target_must_be_free(self):
        bed = TestDataFactory.create_bed(self.room)
        target = TestDataFactory.create_bed(self.room, status='BLOCKED')
        TestDataFactory.create_tenant(self.prop, bed=bed)
        response = self.client.delete(f'/api/beds/{bed.id}/', {'relocate_tenant_to_bed_id': target.id},
                                      format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_force_delete_bed(self):
        bed = TestDataFactory.create_bed(self.room)
        tenant = TestDataFactory.create_tenant(self.prop, bed=bed)
        response = self.client.delete(f'/api/beds/{bed.id}/?force_delete=true')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        tenant = Tenant.objects.get(pk=tenant.pk)
        self.assertEqual(tenant.status, 'PENDING')
        self.assertIsNone(tenant.bed_id)
