"""
Test suite for accounts, authentication, audit logs and shared helpers
"""
from io import StringIO
from django.core.cache import cache
from django.core.management import call_command
from django.test import TestCase, RequestFactory
from rest_framework import status
from rest_framework.test import APIRequestFactory
from rest_framework_simplejwt.tokens import RefreshToken
from pgmanager.core.cache_utils import (
    cached_query, make_cache_key, get_owner_cache_version, bump_owner_cache_version,
)
from pgmanager.core.cache_signals import suspend_cache_signals
from pgmanager.core.models import User, AuditLog
from pgmanager.core.responses import paginate
from pgmanager.core.test_utils import TestDataFactory, AuthenticatedAPIClient, TEST_PASSWORD
from pgmanager.core.utils import create_audit_log, get_client_ip


class RegisterTests(TestCase):
    """Self-registration of owners and managers"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()

    def test_register_creates_waiting_user_with_tokens(self):
        response = self.client.post('/api/auth/register/', {
            'email': 'Owner@Example.com',
            'password': TEST_PASSWORD,
            'full_name': 'Priya Sharma',
            'phone': '9876500000',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['success'])
        self.assertIn('access', response.data['data'])
        self.assertIn('refresh', response.data['data'])

        user = User.objects.get(email='owner@example.com')
        self.assertEqual(user.role, 'OWNER')
        self.assertEqual(user.subscription_status, 'WAITING_APPROVAL')
        self.assertEqual(response.data['data']['user']['email'], 'owner@example.com')

    def test_register_missing_fields(self):
        response = self.client.post('/api/auth/register/', {'email': 'a@b.com'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(response.data['success'])
        self.assertEqual(response.data['error']['message'], 'Email, password, full name, and phone are required')

    def test_register_duplicate_email(self):
        TestDataFactory.create_user(email='taken@example.com')
        response = self.client.post('/api/auth/register/', {
            'email': 'TAKEN@example.com',
            'password': TEST_PASSWORD,
            'full_name': 'Someone',
            'phone': '9876500001',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error']['message'], 'User with this email already exists')

    def test_register_cannot_choose_admin_role(self):
        response = self.client.post('/api/auth/register/', {
            'email': 'sneaky@example.com',
            'password': TEST_PASSWORD,
            'full_name': 'Sneaky',
            'phone': '9876500002',
            'role': 'ADMIN',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(User.objects.filter(email='sneaky@example.com').exists())

    def test_register_manager(self):
        response = self.client.post('/api/auth/register/', {
            'email': 'manager@example.com',
            'password': TEST_PASSWORD,
            'full_name': 'Ravi Manager',
            'phone': '9876500003',
            'role': 'MANAGER',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(User.objects.get(email='manager@example.com').role, 'MANAGER')


class LoginTests(TestCase):
    """Login, refresh, logout"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.user = TestDataFactory.create_user(email='login@example.com')

    def test_login_success_updates_last_login(self):
        response = self.client.post('/api/auth/login/', {
            'email': 'login@example.com', 'password': TEST_PASSWORD,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'Login successful')
        self.assertEqual(response.data['data']['user']['id'], self.user.id)
        self.user.refresh_from_db()
        self.assertIsNotNone(self.user.last_login_at)

    def test_login_email_is_case_insensitive(self):
        self.client.post('/api/auth/register/', {
            'email': 'Alice@Example.com',
            'password': TEST_PASSWORD,
            'full_name': 'Alice Fernandes',
            'phone': '9876500004',
        }, format='json')
        response = self.client.post('/api/auth/login/', {
            'email': 'Alice@Example.com', 'password': TEST_PASSWORD,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['user']['email'], 'alice@example.com')

    def test_login_wrong_password(self):
        response = self.client.post('/api/auth/login/', {
            'email': 'login@example.com', 'password': 'wrong-password',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertFalse(response.data['success'])
        self.assertEqual(response.data['error']['message'], 'Invalid credentials')

    def test_login_inactive_user_rejected(self):
        self.user.is_active = False
        self.user.save()
        response = self.client.post('/api/auth/login/', {
            'email': 'login@example.com', 'password': TEST_PASSWORD,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_refresh_returns_new_access_token(self):
        refresh = RefreshToken.for_user(self.user)
        response = self.client.post('/api/auth/refresh/', {'refresh': str(refresh)}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data['data'])

    def test_refresh_for_deleted_user_is_invalid(self):
        refresh = str(RefreshToken.for_user(self.user))
        self.user.delete()
        response = self.client.post('/api/auth/refresh/', {'refresh': refresh}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertFalse(response.data['success'])

    def test_logout_is_stateless(self):
        response = self.client.post('/api/auth/logout/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'Logout successful')


class ProfileTests(TestCase):
    """Current user profile and password change"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_me_includes_admin_flag_and_properties(self):
        prop = TestDataFactory.create_property(self.user, name='Sunrise PG')
        response = self.client.get('/api/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['data']['is_admin'])
        self.assertEqual(response.data['data']['properties'][0]['id'], prop.id)

    def test_me_requires_authentication(self):
        self.client.logout()
        response = self.client.get('/api/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertFalse(response.data['success'])

    def test_update_profile(self):
        response = self.client.put('/api/auth/profile/', {'full_name': 'New Name', 'phone': '9000000000'},
                                   format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertEqual(self.user.full_name, 'New Name')
        self.assertEqual(self.user.phone, '9000000000')

    def test_change_password(self):
        response = self.client.post('/api/auth/change-password/', {
            'current_password': TEST_PASSWORD, 'new_password': 'Another$Secret99',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password('Another$Secret99'))

    def test_change_password_wrong_current(self):
        response = self.client.post('/api/auth/change-password/', {
            'current_password': 'nope-nope', 'new_password': 'Another$Secret99',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error']['message'], 'Current password is incorrect')

    def test_change_password_requires_both(self):
        response = self.client.post('/api/auth/change-password/', {'new_password': 'x'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class AccountGateTests(TestCase):
    """IsActiveAccount keeps blocked and cancelled accounts out of domain endpoints"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()

    def test_waiting_approval_allowed(self):
        user = TestDataFactory.create_user(subscription_status='WAITING_APPROVAL')
        self.client.authenticate_user(user)
        response = self.client.get('/api/properties/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_inactive_subscription_forbidden(self):
        for subscription_status in ('INACTIVE', 'BLOCKED', 'CANCELLED'):
            user = TestDataFactory.create_user(subscription_status=subscription_status)
            self.client.authenticate_user(user)
            response = self.client.get('/api/properties/')
            self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN, subscription_status)
            self.assertFalse(response.data['success'])

    def test_admin_exempt(self):
        admin = TestDataFactory.create_admin(subscription_status='INACTIVE')
        self.client.authenticate_user(admin)
        response = self.client.get('/api/properties/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)


class AuditLogTests(TestCase):
    """Audit log helper and admin-only listing"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.owner = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()

    def test_create_audit_log_with_request(self):
        request = RequestFactory().post('/api/tenants/', HTTP_X_FORWARDED_FOR='10.0.0.1, 10.0.0.2')
        request.user = self.owner
        log = create_audit_log(request, 'tenant_create', 'Tenant', 5, changes={'a': 1},
                               object_name='Asha', property_id=3)
        self.assertEqual(log.user, self.owner)
        self.assertEqual(log.object_id, '5')
        self.assertEqual(log.property_id, '3')
        self.assertEqual(log.ip_address, '10.0.0.1')

    def test_create_audit_log_missing_fields_skipped(self):
        self.assertIsNone(create_audit_log(user=self.owner, action='tenant_create'))
        self.assertEqual(AuditLog.objects.count(), 0)

    def test_get_client_ip_without_request(self):
        self.assertIsNone(get_client_ip(None))

    def test_list_audit_logs_admin_only(self):
        create_audit_log(user=self.owner, action='payment_paid', model_name='Payment', object_id=1, property_id=7)
        create_audit_log(user=self.owner, action='tenant_vacate', model_name='Tenant', object_id=2, property_id=8)

        self.client.authenticate_user(self.owner)
        response = self.client.get('/api/audit-logs/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.authenticate_user(self.admin)
        response = self.client.get('/api/audit-logs/', {'action': 'payment_paid'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['pagination']['total'], 1)
        self.assertEqual(response.data['data']['logs'][0]['model_name'], 'Payment')

        response = self.client.get('/api/audit-logs/', {'property_id': 8})
        self.assertEqual(response.data['data']['pagination']['total'], 1)

    def test_audit_log_detail_not_found(self):
        self.client.authenticate_user(self.admin)
        response = self.client.get('/api/audit-logs/999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertFalse(response.data['success'])


class PaginateTests(TestCase):
    """?page= and ?limit= slicing"""

    def setUp(self):
        for _ in range(5):
            TestDataFactory.create_user()

    def _request(self, **params):
        from rest_framework.request import Request
        return Request(APIRequestFactory().get('/', params))

    def test_paginate_pages(self):
        items, pagination = paginate(User.objects.order_by('id'), self._request(page=2, limit=2))
        self.assertEqual(len(list(items)), 2)
        self.assertEqual(pagination, {'page': 2, 'limit': 2, 'total': 5, 'pages': 3})

    def test_paginate_bad_values_fall_back(self):
        _, pagination = paginate(User.objects.all(), self._request(page='x', limit='y'), default_limit=10)
        self.assertEqual(pagination['page'], 1)
        self.assertEqual(pagination['limit'], 10)

    def test_paginate_caps_limit(self):
        _, pagination = paginate(User.objects.all(), self._request(limit=5000), max_limit=100)
        self.assertEqual(pagination['limit'], 100)


class CacheUtilsTests(TestCase):
    """Per-owner cached queries and version invalidation"""

    def setUp(self):
        cache.clear()
        self.calls = []

        @cached_query(cache_ttl=60, key_prefix='test_stats')
        def stats(owner_id, property_id=None):
            self.calls.append((owner_id, property_id))
            return {'owner': owner_id, 'calls': len(self.calls)}

        self.stats = stats

    def test_make_cache_key_is_stable(self):
        self.assertEqual(make_cache_key('p', 1, a=2), make_cache_key('p', 1, a=2))
        self.assertNotEqual(make_cache_key('p', 1), make_cache_key('p', 2))

    def test_cached_until_version_bump(self):
        self.assertEqual(self.stats(1)['calls'], 1)
        self.assertEqual(self.stats(1)['calls'], 1)
        bump_owner_cache_version(1)
        self.assertEqual(self.stats(1)['calls'], 2)

    def test_versions_are_per_owner(self):
        self.stats(1)
        self.stats(2)
        bump_owner_cache_version(2)
        self.stats(1)
        self.assertEqual(len(self.calls), 2)
        self.assertEqual(get_owner_cache_version(1), 1)
        self.assertEqual(get_owner_cache_version(2), 2)

    def test_saving_property_bumps_owner_version(self):
        owner = TestDataFactory.create_user()
        before = get_owner_cache_version(owner.id)
        TestDataFactory.create_property(owner)
        self.assertGreater(get_owner_cache_version(owner.id), before)

    def test_suspended_signals_do_not_bump(self):
        owner = TestDataFactory.create_user()
        before = get_owner_cache_version(owner.id)
        with suspend_cache_signals():
            TestDataFactory.create_property(owner)
        self.assertEqual(get_owner_cache_version(owner.id), before)


class ManagementCommandTests(TestCase):
    """create_admin and check_cache"""

    def test_create_admin(self):
        out = StringIO()
        call_command('create_admin', email='Root@Example.com', password=TEST_PASSWORD, stdout=out)
        admin = User.objects.get(email='root@example.com')
        self.assertEqual(admin.role, 'ADMIN')
        self.assertEqual(admin.subscription_status, 'ACTIVE')
        self.assertTrue(admin.is_superuser)
        self.assertIn('Created admin user', out.getvalue())

    def test_create_admin_updates_existing(self):
        user = TestDataFactory.create_user(email='boss@example.com', subscription_status='BLOCKED')
        out = StringIO()
        call_command('create_admin', email='boss@example.com', stdout=out)
        user.refresh_from_db()
        self.assertEqual(user.role, 'ADMIN')
        self.assertEqual(user.subscription_status, 'ACTIVE')
        self.assertIn('Updated admin user', out.getvalue())

    def test_check_cache(self):
        out = StringIO()
        call_command('check_cache', stdout=out)
        self.assertIn('Cache is working', out.getvalue())
