"""
Test suite for payments
Tests: creation, filters, mark-paid, delete guard, yearly stats and rent reminders
"""
from datetime import date, timedelta
from decimal import Decimal
from io import StringIO
from unittest.mock import patch
from django.core.cache import cache
from django.core.management import call_command
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from pgmanager.core.models import AuditLog
from pgmanager.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from pgmanager.payments.models import Payment


class PaymentTestMixin:

    def setUp(self):
        cache.clear()
        self.owner = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.owner)
        self.prop = TestDataFactory.create_property(self.owner)
        self.bed = TestDataFactory.create_bed(TestDataFactory.create_room(TestDataFactory.create_floor(self.prop)))
        self.tenant = TestDataFactory.create_tenant(self.prop, bed=self.bed, full_name='Meera Iyer')


class PaymentModelTests(PaymentTestMixin, TestCase):

    def test_billing_period_follows_due_date(self):
        payment = TestDataFactory.create_payment(self.tenant, due_date=date(2024, 3, 5))
        self.assertEqual(payment.month, '2024-03')
        self.assertEqual(payment.year, 2024)

    def test_total_amount_and_overdue(self):
        payment = TestDataFactory.create_payment(self.tenant, amount=Decimal('7000'),
                                                 due_date=timezone.localdate() - timedelta(days=3))
        payment.late_fee = Decimal('200')
        payment.discount = Decimal('100')
        self.assertEqual(payment.get_total_amount(), Decimal('7100'))
        self.assertTrue(payment.is_overdue())
        payment.status = 'PAID'
        self.assertFalse(payment.is_overdue())


class PaymentCreateTests(PaymentTestMixin, TestCase):
    """POST /api/payments/"""

    def payload(self, **overrides):
        payload = {
            'payment_id': 'PAY-0001',
            'tenant_id': self.tenant.id,
            'property_id': self.prop.id,
            'amount': '8500.00',
            'due_date': timezone.localdate().isoformat(),
            'payment_type': 'rent',
            'payment_method': 'upi',
        }
        payload.update(overrides)
        return payload

    def test_create_payment(self):
        with patch('pgmanager.realtime.server.sio.emit') as mock_emit:
            response = self.client.post('/api/payments/', self.payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        data = response.data['data']
        self.assertEqual(data['status'], 'PENDING')
        self.assertEqual(data['payment_method'], 'UPI')
        self.assertEqual(data['bed'], self.bed.id)
        self.assertEqual(data['tenant_name'], 'Meera Iyer')
        self.assertEqual(data['month'], timezone.localdate().strftime('%Y-%m'))

        emitted = [call[0][0] for call in mock_emit.call_args_list]
        self.assertIn('payment-update', emitted)
        self.assertTrue(AuditLog.objects.filter(action='payment_create', object_name='PAY-0001').exists())

    def test_status_cannot_be_set_on_create(self):
        response = self.client.post('/api/payments/', self.payload(status='PAID'), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Payment.objects.get(payment_id='PAY-0001').status, 'PENDING')

    def test_missing_fields(self):
        response = self.client.post('/api/payments/', {'payment_id': 'PAY-1'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error']['missing_fields'], ['tenant_id', 'property_id', 'amount', 'due_date'])

    def test_duplicate_payment_id(self):
        TestDataFactory.create_payment(self.tenant, payment_id='PAY-0001')
        response = self.client.post('/api/payments/', self.payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error']['message'], 'Payment with this ID already exists')

    def test_tenant_from_other_property(self):
        other_tenant = TestDataFactory.create_tenant(TestDataFactory.create_property(self.owner))
        response = self.client.post('/api/payments/', self.payload(tenant_id=other_tenant.id), format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error']['message'], 'Tenant not found in this property')

    def test_bed_of_other_owner_rejected(self):
        foreign_bed = TestDataFactory.create_bed_in_new_property(TestDataFactory.create_user())
        response = self.client.post('/api/payments/', self.payload(bed=foreign_bed.id), format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error']['message'], 'Bed not found in this property')
        self.assertFalse(Payment.objects.exists())

    def test_bed_from_another_own_property_rejected(self):
        other_bed = TestDataFactory.create_bed_in_new_property(self.owner)
        response = self.client.post('/api/payments/', self.payload(bed_id=other_bed.id), format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_explicit_bed_in_property(self):
        room = self.bed.room
        spare_bed = TestDataFactory.create_bed(room)
        response = self.client.post('/api/payments/', self.payload(bed_id=spare_bed.id), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['data']['bed'], spare_bed.id)

    def test_non_positive_amount(self):
        response = self.client.post('/api/payments/', self.payload(amount='-10'), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_bad_month_format(self):
        response = self.client.post('/api/payments/', self.payload(month='03-2024'), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class PaymentQueryTests(PaymentTestMixin, TestCase):
    """GET /api/payments/ and detail"""

    def test_list_filters(self):
        TestDataFactory.create_payment(self.tenant, status='PAID', payment_type='DEPOSIT')
        TestDataFactory.create_payment(self.tenant)
        TestDataFactory.create_payment(self.tenant, due_date=date(2023, 6, 1))
        foreign_tenant = TestDataFactory.create_tenant(TestDataFactory.create_property(TestDataFactory.create_user()))
        TestDataFactory.create_payment(foreign_tenant)

        response = self.client.get('/api/payments/')
        self.assertEqual(response.data['data']['pagination']['total'], 3)

        response = self.client.get('/api/payments/', {'status': 'paid'})
        self.assertEqual(len(response.data['data']['payments']), 1)

        response = self.client.get('/api/payments/', {'payment_type': 'deposit'})
        self.assertEqual(len(response.data['data']['payments']), 1)

        response = self.client.get('/api/payments/', {'month': '2023-06'})
        self.assertEqual(len(response.data['data']['payments']), 1)

        response = self.client.get('/api/payments/', {'tenant_id': self.tenant.id, 'limit': 2})
        self.assertEqual(len(response.data['data']['payments']), 2)
        self.assertEqual(response.data['data']['pagination']['pages'], 2)

    def test_detail_of_other_owner(self):
        foreign_tenant = TestDataFactory.create_tenant(TestDataFactory.create_property(TestDataFactory.create_user()))
        payment = TestDataFactory.create_payment(foreign_tenant)
        response = self.client.get(f'/api/payments/{payment.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_update_keeps_tenant(self):
        payment = TestDataFactory.create_payment(self.tenant)
        other_tenant = TestDataFactory.create_tenant(self.prop)
        response = self.client.patch(f'/api/payments/{payment.id}/', {
            'amount': '9000', 'tenant': other_tenant.id,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        payment.refresh_from_db()
        self.assertEqual(payment.amount, Decimal('9000'))
        self.assertEqual(payment.tenant, self.tenant)

    def test_update_with_foreign_bed_rejected(self):
        payment = TestDataFactory.create_payment(self.tenant)
        foreign_bed = TestDataFactory.create_bed_in_new_property(TestDataFactory.create_user())
        response = self.client.patch(f'/api/payments/{payment.id}/', {'bed': foreign_bed.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        payment.refresh_from_db()
        self.assertEqual(payment.bed, self.bed)


class PaymentBulkCreateTests(PaymentTestMixin, TestCase):
    """POST /api/payments/bulk/"""

    def setUp(self):
        super().setUp()
        self.second = TestDataFactory.create_tenant(self.prop, full_name='Kabir Shah')
        TestDataFactory.create_tenant(self.prop, status='VACATED')

    def test_generate_month_for_active_tenants(self):
        with patch('pgmanager.realtime.server.sio.emit') as mock_emit:
            response = self.client.post('/api/payments/bulk/', {
                'property_id': self.prop.id, 'amount': '7500', 'due_date': '2024-05-05', 'payment_type': 'rent',
            }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['message'], '2 payment records created successfully')
        self.assertEqual(response.data['data']['created'], 2)
        self.assertEqual(response.data['data']['skipped'], 0)

        payments = Payment.objects.filter(month='2024-05')
        self.assertEqual(payments.count(), 2)
        self.assertTrue(all(p.status == 'PENDING' and p.amount == Decimal('7500') for p in payments))
        self.assertEqual(payments.get(tenant=self.tenant).bed, self.bed)
        self.assertTrue(all(p.payment_id.startswith('PAY') for p in payments))
        self.assertEqual(payments.first().description, 'rent payment for 2024-05')

        updates = [call for call in mock_emit.call_args_list if call[0][0] == 'payment-update']
        self.assertEqual(updates[0][0][1]['type'], 'bulk-create')
        self.assertTrue(AuditLog.objects.filter(action='payment_bulk_create').exists())

    def test_existing_charges_skipped(self):
        TestDataFactory.create_payment(self.tenant, due_date=date(2024, 5, 1))
        response = self.client.post('/api/payments/bulk/', {
            'property_id': self.prop.id, 'amount': '7500', 'due_date': '2024-05-05',
        }, format='json')
        self.assertEqual(response.data['data']['created'], 1)
        self.assertEqual(response.data['data']['skipped'], 1)
        self.assertEqual(Payment.objects.filter(tenant=self.tenant, month='2024-05').count(), 1)

    def test_amount_defaults_to_bed_rent(self):
        response = self.client.post('/api/payments/bulk/', {
            'property_id': self.prop.id, 'due_date': '2024-06-05',
        }, format='json')
        self.assertEqual(response.data['data']['created'], 1)
        payment = Payment.objects.get(month='2024-06')
        self.assertEqual(payment.tenant, self.tenant)
        self.assertEqual(payment.amount, self.bed.rent)

    def test_selected_tenants_only(self):
        response = self.client.post('/api/payments/bulk/', {
            'property_id': self.prop.id, 'amount': '6000', 'due_date': '2024-07-05', 'tenant_ids': [self.second.id],
        }, format='json')
        self.assertEqual(response.data['data']['created'], 1)
        self.assertEqual(Payment.objects.get(month='2024-07').tenant, self.second)

    def test_no_active_tenants(self):
        empty = TestDataFactory.create_property(self.owner)
        response = self.client.post('/api/payments/bulk/', {
            'property_id': empty.id, 'amount': '6000', 'due_date': '2024-07-05',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error']['message'], 'No active tenants found')

    def test_foreign_property(self):
        foreign = TestDataFactory.create_property(TestDataFactory.create_user())
        response = self.client.post('/api/payments/bulk/', {
            'property_id': foreign.id, 'amount': '6000', 'due_date': '2024-07-05',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_invalid_amount(self):
        response = self.client.post('/api/payments/bulk/', {
            'property_id': self.prop.id, 'amount': '0', 'due_date': '2024-07-05',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class PaymentMarkPaidTests(PaymentTestMixin, TestCase):
    """PUT /api/payments/<id>/mark-paid/"""

    def test_mark_paid_defaults_to_now(self):
        payment = TestDataFactory.create_payment(self.tenant)
        with patch('pgmanager.realtime.server.sio.emit') as mock_emit:
            response = self.client.put(f'/api/payments/{payment.id}/mark-paid/', {
                'payment_method': 'bank_transfer', 'transaction_id': 'UTR123',
            }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        payment.refresh_from_db()
        self.assertEqual(payment.status, 'PAID')
        self.assertEqual(payment.payment_method, 'BANK_TRANSFER')
        self.assertEqual(payment.transaction_id, 'UTR123')
        self.assertIsNotNone(payment.paid_date)

        updates = [call for call in mock_emit.call_args_list if call[0][0] == 'payment-update']
        self.assertEqual(updates[0][0][1]['type'], 'paid')

    def test_already_paid(self):
        payment = TestDataFactory.create_payment(self.tenant, status='PAID')
        response = self.client.put(f'/api/payments/{payment.id}/mark-paid/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error']['message'], 'Payment is already marked as paid')

    def test_paid_payment_cannot_be_deleted(self):
        payment = TestDataFactory.create_payment(self.tenant, status='PAID')
        response = self.client.delete(f'/api/payments/{payment.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertTrue(Payment.objects.filter(pk=payment.id).exists())

    def test_pending_payment_deleted(self):
        payment = TestDataFactory.create_payment(self.tenant)
        response = self.client.delete(f'/api/payments/{payment.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Payment.objects.filter(pk=payment.id).exists())


class PaymentStatsTests(PaymentTestMixin, TestCase):
    """GET /api/payments/stats/"""

    def test_yearly_stats(self):
        today = timezone.localdate()
        TestDataFactory.create_payment(self.tenant, amount=Decimal('5000'), status='PAID')
        TestDataFactory.create_payment(self.tenant, amount=Decimal('3000'))
        TestDataFactory.create_payment(self.tenant, amount=Decimal('1000'), payment_type='ELECTRICITY')
        TestDataFactory.create_payment(self.tenant, amount=Decimal('4000'),
                                       due_date=date(today.year - 1, 6, 1))

        response = self.client.get('/api/payments/stats/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.data['data']
        self.assertEqual(data['year'], today.year)
        self.assertEqual(data['total_payments'], 3)
        self.assertEqual(data['paid_payments'], 1)
        self.assertEqual(data['pending_payments'], 2)
        self.assertEqual(data['paid_revenue'], Decimal('5000'))
        self.assertEqual(data['pending_revenue'], Decimal('4000'))
        self.assertEqual({row['payment_type'] for row in data['by_type']}, {'RENT', 'ELECTRICITY'})

    def test_stats_refresh_after_new_payment(self):
        self.client.get('/api/payments/stats/')
        TestDataFactory.create_payment(self.tenant)
        response = self.client.get('/api/payments/stats/')
        self.assertEqual(response.data['data']['total_payments'], 1)

    def test_invalid_year(self):
        response = self.client.get('/api/payments/stats/', {'year': 'last'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_foreign_property(self):
        foreign = TestDataFactory.create_property(TestDataFactory.create_user())
        response = self.client.get('/api/payments/stats/', {'property_id': foreign.id})
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class RentReminderCommandTests(PaymentTestMixin, TestCase):
    """manage.py send_rent_reminders"""

    def test_reminders_and_overdue_alerts(self):
        today = timezone.localdate()
        TestDataFactory.create_payment(self.tenant, due_date=today - timedelta(days=2))
        TestDataFactory.create_payment(self.tenant, due_date=today - timedelta(days=20))
        TestDataFactory.create_payment(self.tenant, due_date=today + timedelta(days=5))
        TestDataFactory.create_payment(self.tenant, due_date=today - timedelta(days=9), status='PAID')

        out = StringIO()
        with patch('pgmanager.realtime.server.sio.emit') as mock_emit:
            call_command('send_rent_reminders', stdout=out)

        self.assertIn('Sent 2 notification(s): 1 rent reminder(s), 1 overdue alert(s)', out.getvalue())
        kinds = sorted(call[0][1]['type'] for call in mock_emit.call_args_list)
        self.assertEqual(kinds, ['payment_overdue', 'rent_reminder'])
        self.assertEqual(mock_emit.call_args_list[0][1]['to'], f'user:{self.owner.id}')

    def test_dry_run_sends_nothing(self):
        TestDataFactory.create_payment(self.tenant, due_date=timezone.localdate() - timedelta(days=1))
        out = StringIO()
        with patch('pgmanager.realtime.server.sio.emit') as mock_emit:
            call_command('send_rent_reminders', '--dry-run', stdout=out)
        mock_emit.assert_not_called()
        self.assertIn('[dry-run] rent_reminder', out.getvalue())
