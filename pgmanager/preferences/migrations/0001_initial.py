# Generated manually for PropertySettings and UserSettings

import django.db.models.deletion
import pgmanager.preferences.models
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('properties', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='PropertySettings',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('terms_and_conditions', models.TextField(blank=True, null=True)),
                ('privacy_policy', models.TextField(blank=True, null=True)),
                ('rules', models.JSONField(blank=True, default=pgmanager.preferences.models.default_rules)),
                ('amenities', models.JSONField(blank=True, default=pgmanager.preferences.models.default_amenities)),
                ('contact_info', models.JSONField(blank=True, default=dict)),
                ('payment_settings', models.JSONField(blank=True, default=pgmanager.preferences.models.default_payment_settings)),
                ('notification_settings', models.JSONField(blank=True, default=pgmanager.preferences.models.default_notification_settings)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('property', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='settings', to='properties.property')),
            ],
            options={
                'db_table': 'property_settings',
                'verbose_name_plural': 'property settings',
            },
        ),
        migrations.CreateModel(
            name='UserSettings',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('theme', models.CharField(choices=[('light', 'Light'), ('dark', 'Dark'), ('system', 'System')], default='light', max_length=10)),
                ('language', models.CharField(default='en', max_length=10)),
                ('timezone', models.CharField(default='Asia/Kolkata', max_length=50)),
                ('date_format', models.CharField(default='DD/MM/YYYY', max_length=20)),
                ('currency', models.CharField(default='INR', max_length=3)),
                ('email_notifications', models.BooleanField(default=True)),
                ('sms_notifications', models.BooleanField(default=False)),
                ('push_notifications', models.BooleanField(default=True)),
                ('rent_reminders', models.BooleanField(default=True)),
                ('maintenance_alerts', models.BooleanField(default=True)),
                ('new_tenant_alerts', models.BooleanField(default=True)),
                ('payment_alerts', models.BooleanField(default=True)),
                ('system_updates', models.BooleanField(default=False)),
                ('two_factor_enabled', models.BooleanField(default=False)),
                ('session_timeout', models.PositiveIntegerField(default=60, help_text='Minutes')),
                ('login_notifications', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='user_settings', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'user_settings',
                'verbose_name_plural': 'user settings',
            },
        ),
    ]
