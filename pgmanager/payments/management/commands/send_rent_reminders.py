"""
Notify owners about overdue rent.

Usage:
    python manage.py send_rent_reminders
    python manage.py send_rent_reminders --property 3 --dry-run
"""
import logging
from django.core.management.base import BaseCommand
from django.utils import timezone
from pgmanager.payments.models import Payment
from pgmanager.realtime.server import send_notification

logger = logging.getLogger('pgmanager.payments')

# Days past due after which a reminder becomes an overdue alert
OVERDUE_ALERT_DAYS = 7


class Command(BaseCommand):
    help = 'Send a realtime notification to the owner for every overdue pending payment'

    def add_arguments(self, parser):
        parser.add_argument('--property', type=int, help='Only payments of this property id')
        parser.add_argument('--dry-run', action='store_true', help='List reminders without sending them')

    def handle(self, *args, **options):
        today = timezone.localdate()
        payments = Payment.objects.filter(
            status='PENDING', due_date__lt=today
        ).select_related('tenant', 'property__owner').order_by('due_date')
        if options.get('property'):
            payments = payments.filter(property_id=options['property'])

        sent = {'rent_reminder': 0, 'payment_overdue': 0}
        failed = 0

        for payment in payments:
            days_overdue = (today - payment.due_date).days
            kind = 'payment_overdue' if days_overdue > OVERDUE_ALERT_DAYS else 'rent_reminder'
            notification = {
                'type': kind,
                'title': 'Payment overdue' if kind == 'payment_overdue' else 'Rent reminder',
                'message': (
                    f"{payment.tenant.full_name} owes {payment.amount} for {payment.month or payment.due_date}, "
                    f"{days_overdue} day(s) past due"
                ),
                'payment_id': payment.payment_id,
                'tenant_id': payment.tenant.tenant_id,
                'property_id': payment.property_id,
                'days_overdue': days_overdue,
            }

            if options.get('dry_run'):
                self.stdout.write(f"[dry-run] {kind}: {notification['message']}")
                sent[kind] += 1
                continue

            if send_notification(payment.property.owner_id, notification):
                sent[kind] += 1
            else:
                failed += 1

        total = sent['rent_reminder'] + sent['payment_overdue']
        logger.info(f"Rent reminders sent: {total} ({sent['payment_overdue']} overdue alerts), failed: {failed}")
        self.stdout.write(self.style.SUCCESS(
            f"Sent {total} notification(s): {sent['rent_reminder']} rent reminder(s), "
            f"{sent['payment_overdue']} overdue alert(s)"
        ))
        if failed:
            self.stdout.write(self.style.WARNING(f"{failed} notification(s) could not be delivered"))
