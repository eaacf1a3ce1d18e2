"""
Test suite for dashboard
Tests: stats aggregation, cache invalidation, activities, trends and user settings
"""
from datetime import date, timedelta
from decimal import Decimal
from django.core.cache import cache
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from pgmanager.core.cache_signals import suspend_cache_signals
from pgmanager.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from pgmanager.dashboard.models import DashboardSettings
from pgmanager.dashboard.services import get_dashboard_stats, month_starts, month_end


class DashboardTestMixin:

    def setUp(self):
        cache.clear()
        self.owner = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.owner)
        self.prop = TestDataFactory.create_property(self.owner, name='Cedar PG')
        floor = TestDataFactory.create_floor(self.prop)
        self.room = TestDataFactory.create_room(floor, capacity=2)
        self.bed1 = TestDataFactory.create_bed(self.room)
        self.bed2 = TestDataFactory.create_bed(self.room)


class MonthHelperTests(TestCase):

    def test_month_starts_wrap_year(self):
        starts = month_starts(3, today=date(2024, 2, 14))
        self.assertEqual(starts, [date(2023, 12, 1), date(2024, 1, 1), date(2024, 2, 1)])

    def test_month_end_leap_year(self):
        self.assertEqual(month_end(date(2024, 2, 1)), date(2024, 2, 29))


class DashboardStatsTests(DashboardTestMixin, TestCase):
    """GET /api/dashboard/stats/"""

    def test_stats_counts(self):
        tenant = TestDataFactory.create_tenant(self.prop, bed=self.bed1)
        TestDataFactory.create_payment(tenant, amount=Decimal('6000'), status='PAID')
        TestDataFactory.create_payment(tenant, amount=Decimal('2500'),
                                       due_date=timezone.localdate() - timedelta(days=4))

        response = self.client.get('/api/dashboard/stats/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.data['data']
        self.assertEqual(data['beds']['total'], 2)
        self.assertEqual(data['beds']['occupied'], 1)
        self.assertEqual(data['beds']['occupancy_rate'], 50.0)
        self.assertEqual(data['tenants']['active'], 1)
        self.assertEqual(data['properties']['total'], 1)
        self.assertEqual(data['revenue']['monthly_revenue'], Decimal('6000'))
        self.assertEqual(data['revenue']['pending_amount'], Decimal('2500'))
        self.assertEqual(data['revenue']['overdue_payments'], 1)

    def test_stats_scoped_to_property(self):
        TestDataFactory.create_bed_in_new_property(self.owner)
        response = self.client.get('/api/dashboard/stats/', {'property_id': self.prop.id})
        self.assertEqual(response.data['data']['beds']['total'], 2)
        response = self.client.get('/api/dashboard/stats/')
        self.assertEqual(response.data['data']['beds']['total'], 3)

    def test_foreign_property(self):
        foreign = TestDataFactory.create_property(TestDataFactory.create_user())
        response = self.client.get('/api/dashboard/stats/', {'property_id': foreign.id})
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_cache_invalidated_on_save(self):
        self.assertEqual(get_dashboard_stats(self.owner.id)['tenants']['total'], 0)
        TestDataFactory.create_tenant(self.prop)
        self.assertEqual(get_dashboard_stats(self.owner.id)['tenants']['total'], 1)

    def test_suspended_signals_keep_cache(self):
        get_dashboard_stats(self.owner.id)
        with suspend_cache_signals():
            TestDataFactory.create_tenant(self.prop)
        self.assertEqual(get_dashboard_stats(self.owner.id)['tenants']['total'], 0)


class DashboardActivityTests(DashboardTestMixin, TestCase):
    """GET /api/dashboard/activities/"""

    def test_activities_merge_joins_and_payments(self):
        tenant = TestDataFactory.create_tenant(self.prop, bed=self.bed1, full_name='Sana Khan')
        TestDataFactory.create_payment(tenant, status='PAID', paid_date=timezone.now() + timedelta(minutes=5))
        TestDataFactory.create_payment(tenant)

        response = self.client.get('/api/dashboard/activities/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        activities = response.data['data']
        self.assertEqual([a['type'] for a in activities], ['payment_received', 'tenant_joined'])
        self.assertEqual(activities[1]['description'], 'Sana Khan joined Cedar PG')

    def test_limit(self):
        for _ in range(3):
            TestDataFactory.create_tenant(self.prop)
        response = self.client.get('/api/dashboard/activities/', {'limit': 2})
        self.assertEqual(len(response.data['data']), 2)


class DashboardTrendTests(DashboardTestMixin, TestCase):

    def test_occupancy_trends(self):
        TestDataFactory.create_tenant(self.prop, bed=self.bed1, joining_date=timezone.localdate().replace(day=1))
        response = self.client.get('/api/dashboard/occupancy-trends/', {'months': 3})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        trends = response.data['data']
        self.assertEqual(len(trends), 3)
        self.assertEqual(trends[-1]['occupied_beds'], 1)
        self.assertEqual(trends[-1]['occupancy_rate'], 50.0)
        self.assertEqual(trends[0]['occupied_beds'], 0)

    def test_revenue_trends(self):
        tenant = TestDataFactory.create_tenant(self.prop)
        TestDataFactory.create_payment(tenant, amount=Decimal('4000'), status='PAID')
        TestDataFactory.create_payment(tenant, amount=Decimal('1500'))
        response = self.client.get('/api/dashboard/revenue-trends/')
        trends = response.data['data']
        self.assertEqual(len(trends), 6)
        current = trends[-1]
        self.assertEqual(current['month_key'], timezone.localdate().strftime('%Y-%m'))
        self.assertEqual(current['revenue'], Decimal('4000'))
        self.assertEqual(current['pending'], Decimal('1500'))
        self.assertEqual(current['paid_count'], 1)

    def test_months_clamped(self):
        response = self.client.get('/api/dashboard/revenue-trends/', {'months': 100})
        self.assertEqual(len(response.data['data']), 24)


class DashboardSettingsTests(DashboardTestMixin, TestCase):
    """GET/PUT /api/dashboard/user-settings/"""

    def test_defaults_created_on_first_read(self):
        response = self.client.get('/api/dashboard/user-settings/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['default_view'], 'cards')
        self.assertEqual(response.data['data']['favorite_charts'], ['occupancy', 'revenue'])
        self.assertTrue(DashboardSettings.objects.filter(user=self.owner).exists())

    def test_partial_layout_update_merges(self):
        response = self.client.put('/api/dashboard/user-settings/', {
            'layout': {'show_charts': False}, 'auto_refresh': True,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        layout = response.data['data']['layout']
        self.assertFalse(layout['show_charts'])
        self.assertTrue(layout['show_stats'])
        self.assertTrue(response.data['data']['auto_refresh'])

    def test_refresh_interval_minimum(self):
        response = self.client.put('/api/dashboard/user-settings/', {'refresh_interval': 2}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
