"""
Test utilities and factories for creating test data
"""
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from pgmanager.properties.models import Property, Floor, Room, Bed
from pgmanager.tenants.models import Tenant
from pgmanager.payments.models import Payment
from datetime import timedelta
from decimal import Decimal
from django.utils import timezone
import random
import string

User = get_user_model()

TEST_PASSWORD = 'Rooms&Beds2024'


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def create_user(username=None, email=None, password=TEST_PASSWORD, role='OWNER',
                    subscription_status='ACTIVE', full_name=None, is_superuser=False):
        """Create a test user (ACTIVE owner unless told otherwise)"""
        if not username:
            username = f'testuser_{TestDataFactory.random_string(6)}'
        if not email:
            email = f'{username.lower()}@test.com'
        return User.objects.create_user(
            username=username,
            email=email,
            password=password,
            full_name=full_name or f'Test {username}',
            phone='9876543210',
            role=role,
            subscription_status=subscription_status,
            is_superuser=is_superuser,
            is_staff=is_superuser,
        )

    @staticmethod
    def create_admin(**kwargs):
        kwargs.setdefault('role', 'ADMIN')
        return TestDataFactory.create_user(**kwargs)

    @staticmethod
    def create_property(owner, name=None, total_floors=0, total_rooms=0, total_beds=0, **fields):
        """Create a test property; totals of 0 mean no limit"""
        if not name:
            name = f'PG_{TestDataFactory.random_string(6)}'
        return Property.objects.create(
            owner=owner,
            name=name,
            address=fields.pop('address', f'12 Test Street, {name}'),
            city=fields.pop('city', 'Bengaluru'),
            state=fields.pop('state', 'Karnataka'),
            pincode=fields.pop('pincode', '560001'),
            total_floors=total_floors,
            total_rooms=total_rooms,
            total_beds=total_beds,
            **fields
        )

    @staticmethod
    def create_floor(prop, floor_number=None, name=None):
        """Create a test floor"""
        if floor_number is None:
            floor_number = prop.floors.count()
        return Floor.objects.create(
            property=prop,
            floor_number=floor_number,
            name=name or f'Floor {floor_number}'
        )

    @staticmethod
    def create_room(floor, room_number=None, capacity=3, type='SHARED', rent=None, **fields):
        """Create a test room"""
        if not room_number:
            room_number = f'{floor.floor_number}{floor.rooms.count() + 1:02d}'
        return Room.objects.create(
            floor=floor,
            room_number=room_number,
            capacity=capacity,
            type=type,
            rent=rent if rent is not None else Decimal('8000.00'),
            **fields
        )

    @staticmethod
    def create_bed(room, bed_number=None, status='AVAILABLE', bed_type='SINGLE'):
        """Create a test bed"""
        if not bed_number:
            bed_number = f'B{room.beds.count() + 1}'
        return Bed.objects.create(
            room=room,
            bed_number=bed_number,
            status=status,
            bed_type=bed_type,
            rent=room.rent
        )

    @staticmethod
    def create_bed_in_new_property(owner, **property_fields):
        """Property -> floor -> room -> bed chain, returns the bed"""
        prop = TestDataFactory.create_property(owner, **property_fields)
        floor = TestDataFactory.create_floor(prop)
        room = TestDataFactory.create_room(floor)
        return TestDataFactory.create_bed(room)

    @staticmethod
    def create_tenant(prop, bed=None, tenant_id=None, status='ACTIVE', joining_date=None, created_by=None,
                      **fields):
        """Create a test tenant; the bed, when given, is marked OCCUPIED"""
        if not tenant_id:
            tenant_id = f'T-{TestDataFactory.random_string(6).upper()}'
        tenant = Tenant.objects.create(
            tenant_id=tenant_id,
            full_name=fields.pop('full_name', f'Tenant {tenant_id}'),
            phone=fields.pop('phone', f'9{random.randint(100000000, 999999999)}'),
            address=fields.pop('address', 'Permanent address'),
            id_proof_type=fields.pop('id_proof_type', 'AADHAR'),
            id_proof_number=fields.pop('id_proof_number', f'{random.randint(10**11, 10**12 - 1)}'),
            joining_date=joining_date or timezone.localdate() - timedelta(days=30),
            status=status,
            is_active=status != 'VACATED',
            property=prop,
            bed=bed,
            created_by=created_by,
            **fields
        )
        if bed is not None:
            bed.status = 'OCCUPIED'
            bed.save(update_fields=['status'])
        return tenant

    @staticmethod
    def create_payment(tenant, amount=None, status='PENDING', due_date=None, payment_id=None,
                       payment_type='RENT', paid_date=None, created_by=None):
        """Create a test payment for a tenant"""
        if not payment_id:
            payment_id = f'PAY-{TestDataFactory.random_string(8).upper()}'
        if due_date is None:
            due_date = timezone.localdate()
        if status == 'PAID' and paid_date is None:
            paid_date = timezone.now()
        return Payment.objects.create(
            payment_id=payment_id,
            tenant=tenant,
            bed=tenant.bed,
            property=tenant.property,
            amount=amount if amount is not None else Decimal('8000.00'),
            payment_type=payment_type,
            due_date=due_date,
            paid_date=paid_date,
            status=status,
            created_by=created_by
        )


class AuthenticatedAPIClient(APIClient):
    """APIClient with authentication helper"""

    def authenticate_user(self, user):
        """Authenticate the client with a user"""
        refresh = RefreshToken.for_user(user)
        self.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return self

    def logout(self):
        """Remove authentication"""
        self.credentials()
