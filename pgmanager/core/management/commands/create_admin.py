"""
Create or update the seed administrator account.

Usage:
    python manage.py create_admin --email admin@pgmanager.com --password secret
    ADMIN_EMAIL=... ADMIN_PASSWORD=... python manage.py create_admin
"""
import os
from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone


class Command(BaseCommand):
    help = 'Create the ADMIN user, or reset its role, status and password if it already exists'

    def add_arguments(self, parser):
        parser.add_argument('--email', default=os.environ.get('ADMIN_EMAIL', 'admin@pgmanager.com'))
        parser.add_argument('--password', default=os.environ.get('ADMIN_PASSWORD'))
        parser.add_argument('--full-name', default=os.environ.get('ADMIN_FULL_NAME', 'System Administrator'))
        parser.add_argument('--phone', default=os.environ.get('ADMIN_PHONE', '9999999999'))

    def handle(self, *args, **options):
        User = get_user_model()
        email = options['email'].strip().lower()
        password = options['password']

        user = User.objects.filter(email__iexact=email).first()
        created = user is None
        if created:
            if not password:
                raise CommandError('A password is required to create the admin user (--password or ADMIN_PASSWORD)')
            user = User.objects.create_user(username=email, email=email, password=password)
        elif password:
            user.set_password(password)

        user.full_name = options['full_name']
        user.phone = options['phone']
        user.role = 'ADMIN'
        user.subscription_status = 'ACTIVE'
        user.is_active = True
        user.is_staff = True
        user.is_superuser = True
        user.approved_at = user.approved_at or timezone.now()
        user.blocked_at = None
        user.blocked_by = None
        user.blocked_reason = None
        user.save()

        if created:
            self.stdout.write(self.style.SUCCESS(f'✓ Created admin user: {email}'))
        else:
            self.stdout.write(self.style.SUCCESS(f'✓ Updated admin user: {email}'))
        self.stdout.write(f'  Role: {user.role}, status: {user.subscription_status}')
