"""
Test suite for the admin user management API
Tests: access control, user listing, approval/blocking, deletion and the action log
"""
from django.test import TestCase
from rest_framework import status
from pgmanager.adminpanel.models import AdminAction
from pgmanager.core.models import User
from pgmanager.core.test_utils import TestDataFactory, AuthenticatedAPIClient


class AdminTestMixin:

    def setUp(self):
        self.admin = TestDataFactory.create_admin(full_name='Site Admin')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)
        self.waiting = TestDataFactory.create_user(full_name='Waiting Owner', subscription_status='WAITING_APPROVAL')
        self.owner = TestDataFactory.create_user(full_name='Active Owner')


class AdminAccessTests(AdminTestMixin, TestCase):

    def test_owner_forbidden(self):
        self.client.authenticate_user(self.owner)
        for url in ('/api/admin/users/', '/api/admin/users/stats/', '/api/admin/users/pending/',
                    '/api/admin/actions/'):
            response = self.client.get(url)
            self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN, url)

    def test_anonymous_rejected(self):
        self.client.logout()
        response = self.client.get('/api/admin/users/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_superuser_counts_as_admin(self):
        superuser = TestDataFactory.create_user(is_superuser=True)
        self.client.authenticate_user(superuser)
        response = self.client.get('/api/admin/users/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)


class AdminUserListTests(AdminTestMixin, TestCase):
    """GET /api/admin/users/"""

    def test_list_with_counts(self):
        TestDataFactory.create_property(self.owner)
        response = self.client.get('/api/admin/users/', {'search': 'active owner'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        users = response.data['data']['users']
        self.assertEqual(len(users), 1)
        self.assertEqual(users[0]['counts']['properties'], 1)
        self.assertEqual(len(users[0]['properties']), 1)

    def test_filters_and_pagination(self):
        response = self.client.get('/api/admin/users/', {'status': 'waiting_approval'})
        self.assertEqual([u['email'] for u in response.data['data']['users']], [self.waiting.email])

        response = self.client.get('/api/admin/users/', {'role': 'admin'})
        self.assertEqual(len(response.data['data']['users']), 1)

        response = self.client.get('/api/admin/users/', {'limit': 2})
        pagination = response.data['data']['pagination']
        self.assertEqual(pagination['total_count'], 3)
        self.assertEqual(pagination['total_pages'], 2)
        self.assertTrue(pagination['has_next'])
        self.assertFalse(pagination['has_prev'])

    def test_stats(self):
        TestDataFactory.create_user(subscription_status='BLOCKED')
        response = self.client.get('/api/admin/users/stats/')
        overview = response.data['data']['overview']
        self.assertEqual(overview['total_users'], 4)
        self.assertEqual(overview['active_users'], 2)
        self.assertEqual(overview['waiting_approval'], 1)
        self.assertEqual(overview['blocked_users'], 1)
        self.assertEqual(overview['recent_signups'], 4)
        roles = {row['role']: row['count'] for row in response.data['data']['role_distribution']}
        self.assertEqual(roles, {'ADMIN': 1, 'OWNER': 3})

    def test_pending_users(self):
        TestDataFactory.create_property(self.waiting)
        response = self.client.get('/api/admin/users/pending/')
        self.assertEqual(len(response.data['data']), 1)
        self.assertEqual(response.data['data'][0]['id'], self.waiting.id)
        self.assertEqual(response.data['data'][0]['property_count'], 1)


class AdminUserStatusTests(AdminTestMixin, TestCase):
    """PUT /api/admin/users/status/"""

    def test_approve(self):
        response = self.client.put('/api/admin/users/status/', {
            'user_id': self.waiting.id, 'status': 'active',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'User status updated to ACTIVE')
        self.waiting.refresh_from_db()
        self.assertEqual(self.waiting.subscription_status, 'ACTIVE')
        self.assertEqual(self.waiting.approved_by, self.admin)
        self.assertIsNotNone(self.waiting.approved_at)

        action = AdminAction.objects.get(target_user=self.waiting)
        self.assertEqual(action.action, 'USER_APPROVED')
        self.assertEqual(action.details['previous_status'], 'WAITING_APPROVAL')

    def test_block_then_reactivate(self):
        response = self.client.put('/api/admin/users/status/', {
            'user_id': self.owner.id, 'status': 'BLOCKED', 'reason': 'Payment fraud',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.owner.refresh_from_db()
        self.assertFalse(self.owner.is_active)
        self.assertEqual(self.owner.blocked_reason, 'Payment fraud')
        self.assertEqual(self.owner.blocked_by, self.admin)

        self.client.put('/api/admin/users/status/', {'user_id': self.owner.id, 'status': 'ACTIVE'}, format='json')
        self.owner.refresh_from_db()
        self.assertTrue(self.owner.is_active)
        self.assertIsNone(self.owner.blocked_by)
        self.assertIsNone(self.owner.blocked_reason)

    def test_required_fields(self):
        response = self.client.put('/api/admin/users/status/', {'user_id': self.owner.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error']['message'], 'user_id and status are required')

    def test_invalid_status(self):
        response = self.client.put('/api/admin/users/status/', {
            'user_id': self.owner.id, 'status': 'SUSPENDED',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error']['message'], 'Invalid status')

    def test_unknown_user(self):
        response = self.client.put('/api/admin/users/status/', {'user_id': 99999, 'status': 'ACTIVE'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class AdminUserRoleTests(AdminTestMixin, TestCase):
    """PUT /api/admin/users/role/"""

    def test_change_role(self):
        response = self.client.put('/api/admin/users/role/', {
            'user_id': self.owner.id, 'role': 'manager',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'User role updated to MANAGER')
        self.owner.refresh_from_db()
        self.assertEqual(self.owner.role, 'MANAGER')

        action = AdminAction.objects.get(target_user=self.owner)
        self.assertEqual(action.action, 'USER_ROLE_CHANGED')
        self.assertEqual(action.details, {'previous_role': 'OWNER', 'new_role': 'MANAGER'})

    def test_own_role_unchanged(self):
        response = self.client.put('/api/admin/users/role/', {
            'user_id': self.admin.id, 'role': 'OWNER',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error']['message'], 'Cannot change your own role')
        self.admin.refresh_from_db()
        self.assertEqual(self.admin.role, 'ADMIN')

    def test_invalid_role_and_missing_user(self):
        response = self.client.put('/api/admin/users/role/', {
            'user_id': self.owner.id, 'role': 'STAFF',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.put('/api/admin/users/role/', {'user_id': 999999, 'role': 'OWNER'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertFalse(AdminAction.objects.exists())

    def test_owner_cannot_change_roles(self):
        self.client.authenticate_user(self.owner)
        response = self.client.put('/api/admin/users/role/', {
            'user_id': self.waiting.id, 'role': 'ADMIN',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class AdminUserDeleteTests(AdminTestMixin, TestCase):
    """DELETE /api/admin/users/"""

    def test_delete_user_and_data(self):
        prop = TestDataFactory.create_property(self.owner)
        TestDataFactory.create_tenant(prop, created_by=self.owner)
        response = self.client.delete('/api/admin/users/', {'user_id': self.owner.id, 'reason': 'Requested'},
                                      format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'User Active Owner and all associated data deleted successfully')
        self.assertFalse(User.objects.filter(pk=self.owner.id).exists())

        action = AdminAction.objects.get(action='USER_DELETED')
        self.assertIsNone(action.target_user)
        self.assertEqual(action.details['data_count'], {'properties': 1, 'tenants': 1, 'payments': 0})

    def test_reason_required(self):
        response = self.client.delete('/api/admin/users/', {'user_id': self.owner.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_cannot_delete_self_or_admin(self):
        response = self.client.delete('/api/admin/users/', {'user_id': self.admin.id, 'reason': 'x'}, format='json')
        self.assertEqual(response.data['error']['message'], 'Cannot delete your own account')

        other_admin = TestDataFactory.create_admin()
        response = self.client.delete('/api/admin/users/', {'user_id': other_admin.id, 'reason': 'x'}, format='json')
        self.assertEqual(response.data['error']['message'], 'Cannot delete admin users')


class AdminActionLogTests(AdminTestMixin, TestCase):
    """GET /api/admin/actions/"""

    def test_filter_actions(self):
        self.client.put('/api/admin/users/status/', {'user_id': self.waiting.id, 'status': 'ACTIVE'}, format='json')
        self.client.put('/api/admin/users/status/', {'user_id': self.owner.id, 'status': 'INACTIVE'}, format='json')

        response = self.client.get('/api/admin/actions/')
        self.assertEqual(response.data['data']['pagination']['total_count'], 2)

        response = self.client.get('/api/admin/actions/', {'action': 'user_status_changed'})
        actions = response.data['data']['actions']
        self.assertEqual(len(actions), 1)

        response = self.client.get('/api/admin/actions/', {'target_user_id': self.waiting.id})
        self.assertEqual(response.data['data']['actions'][0]['action'], 'USER_APPROVED')
