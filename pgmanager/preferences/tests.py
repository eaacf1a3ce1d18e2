"""
Test suite for property and user settings
"""
from django.test import TestCase
from rest_framework import status
from pgmanager.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from pgmanager.dashboard.models import DashboardSettings
from pgmanager.preferences.models import PropertySettings, UserSettings, DEFAULT_RULES


class PropertySettingsAPITests(TestCase):
    """/api/settings/property/<id>/"""

    def setUp(self):
        self.owner = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.owner)
        self.prop = TestDataFactory.create_property(self.owner)
        self.url = f'/api/settings/property/{self.prop.id}/'

    def test_defaults_on_first_access(self):
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.data['data']
        self.assertEqual(data['rules'], DEFAULT_RULES)
        self.assertEqual(data['payment_settings']['rent_due_day'], 5)
        self.assertEqual(data['contact_info']['email'], self.owner.email)
        self.assertEqual(PropertySettings.objects.filter(property=self.prop).count(), 1)

    def test_partial_update_merges_nested_settings(self):
        response = self.client.patch(self.url, {
            'payment_settings': {'rent_due_day': 10},
            'amenities': ['WiFi', ' Laundry ', ''],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.data['data']
        self.assertEqual(data['payment_settings']['rent_due_day'], 10)
        self.assertEqual(data['payment_settings']['late_fee_amount'], 500)
        self.assertEqual(data['amenities'], ['WiFi', 'Laundry'])

    def test_invalid_due_day(self):
        response = self.client.patch(self.url, {'payment_settings': {'rent_due_day': 31}}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_foreign_property(self):
        foreign = TestDataFactory.create_property(TestDataFactory.create_user())
        response = self.client.get(f'/api/settings/property/{foreign.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_replace_rules(self):
        url = f'{self.url}rules/'
        response = self.client.put(url, {'rules': ['Gate closes at 11 PM', 'No pets']}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        response = self.client.get(url)
        self.assertEqual(response.data['data']['rules'], ['Gate closes at 11 PM', 'No pets'])

    def test_rules_required(self):
        response = self.client.put(f'{self.url}rules/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error']['message'], 'Rules must be provided as a list')

    def test_rules_must_be_strings(self):
        response = self.client.put(f'{self.url}rules/', {'rules': 'No pets'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class UserSettingsAPITests(TestCase):
    """/api/settings/user/"""

    def setUp(self):
        self.owner = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.owner)
        TestDataFactory.create_property(self.owner, name='Oak PG')

    def test_get_includes_properties_and_settings(self):
        response = self.client.get('/api/settings/user/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.data['data']
        self.assertEqual(data['email'], self.owner.email)
        self.assertEqual([p['name'] for p in data['properties']], ['Oak PG'])
        self.assertEqual(data['user_settings']['theme'], 'light')

    def test_update_profile_and_preferences(self):
        response = self.client.put('/api/settings/user/', {
            'full_name': 'Priya Menon', 'theme': 'dark', 'session_timeout': 30,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.owner.refresh_from_db()
        self.assertEqual(self.owner.full_name, 'Priya Menon')
        settings_obj = UserSettings.objects.get(user=self.owner)
        self.assertEqual(settings_obj.theme, 'dark')
        self.assertEqual(settings_obj.session_timeout, 30)

    def test_email_taken(self):
        other = TestDataFactory.create_user()
        response = self.client.put('/api/settings/user/', {'email': other.email.upper()}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error']['message'], 'Email already in use by another account')

    def test_email_is_validated_and_lowercased(self):
        response = self.client.put('/api/settings/user/', {'email': 'not-an-email'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertTrue(response.data['error']['message'].startswith('email:'))

        response = self.client.put('/api/settings/user/', {'email': 'Priya.New@Example.com'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.owner.refresh_from_db()
        self.assertEqual(self.owner.email, 'priya.new@example.com')

    def test_short_session_timeout(self):
        response = self.client.put('/api/settings/user/', {'session_timeout': 1}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class SettingsExportTests(TestCase):
    """GET /api/settings/export/"""

    def setUp(self):
        self.owner = TestDataFactory.create_user(full_name='Export Owner')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.owner)
        self.prop = TestDataFactory.create_property(self.owner, name='Cedar PG')
        bed = TestDataFactory.create_bed_in_new_property(TestDataFactory.create_user())
        self.foreign_tenant = TestDataFactory.create_tenant(bed.room.floor.property)

    def test_export_nests_property_data(self):
        room = TestDataFactory.create_room(TestDataFactory.create_floor(self.prop))
        bed = TestDataFactory.create_bed(room)
        tenant = TestDataFactory.create_tenant(self.prop, bed=bed)
        TestDataFactory.create_payment(tenant)
        UserSettings.objects.create(user=self.owner, theme='dark')

        response = self.client.get('/api/settings/export/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'User data exported successfully')
        data = response.data['data']
        self.assertIn('exported_at', data)
        user = data['user']
        self.assertEqual(user['email'], self.owner.email)
        self.assertNotIn('password', user)
        self.assertEqual(user['user_settings']['theme'], 'dark')
        self.assertIsNone(user['dashboard_settings'])

        prop = user['properties'][0]
        self.assertEqual(prop['name'], 'Cedar PG')
        self.assertEqual(prop['floors'][0]['rooms'][0]['beds'][0]['id'], bed.id)
        self.assertEqual([t['id'] for t in prop['tenants']], [tenant.id])
        self.assertEqual(len(prop['payments']), 1)
        self.assertEqual(prop['documents'], [])

    def test_export_only_own_properties(self):
        response = self.client.get('/api/settings/export/')
        self.assertEqual(len(response.data['data']['user']['properties']), 1)


class SettingsResetTests(TestCase):
    """POST /api/settings/reset/"""

    def setUp(self):
        self.owner = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.owner)
        UserSettings.objects.create(user=self.owner, theme='dark', session_timeout=15, sms_notifications=True)
        DashboardSettings.objects.create(user=self.owner, default_view='list', refresh_interval=120)

    def test_reset_user_only(self):
        response = self.client.post('/api/settings/reset/', {'settings_type': 'user'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'User settings reset to default')
        settings_obj = UserSettings.objects.get(user=self.owner)
        self.assertEqual(settings_obj.theme, 'light')
        self.assertEqual(settings_obj.session_timeout, 60)
        self.assertFalse(settings_obj.sms_notifications)
        self.assertEqual(DashboardSettings.objects.get(user=self.owner).default_view, 'list')

    def test_reset_all(self):
        response = self.client.post('/api/settings/reset/', {'settings_type': 'all'}, format='json')
        self.assertEqual(response.data['message'], 'All settings reset to default')
        dashboard = DashboardSettings.objects.get(user=self.owner)
        self.assertEqual(dashboard.default_view, 'cards')
        self.assertEqual(dashboard.refresh_interval, 30)
        self.assertEqual(dashboard.favorite_charts, ['occupancy', 'revenue'])
        self.assertEqual(response.data['data']['user_settings']['theme'], 'light')

    def test_reset_creates_missing_settings(self):
        other = TestDataFactory.create_user()
        self.client.authenticate_user(other)
        response = self.client.post('/api/settings/reset/', {'settings_type': 'dashboard'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(DashboardSettings.objects.filter(user=other).exists())

    def test_invalid_type(self):
        response = self.client.post('/api/settings/reset/', {'settings_type': 'everything'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error']['message'],
                         'Invalid settings type. Must be "user", "dashboard", or "all"')
