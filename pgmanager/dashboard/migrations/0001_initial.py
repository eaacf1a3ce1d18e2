# Generated manually for DashboardSettings

import django.db.models.deletion
import pgmanager.dashboard.models
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='DashboardSettings',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('default_view', models.CharField(choices=[('cards', 'Cards'), ('list', 'List'), ('compact', 'Compact')], default='cards', max_length=20)),
                ('show_notifications', models.BooleanField(default=True)),
                ('auto_refresh', models.BooleanField(default=False)),
                ('refresh_interval', models.PositiveIntegerField(default=30, help_text='Seconds')),
                ('favorite_charts', models.JSONField(blank=True, default=pgmanager.dashboard.models.default_favorite_charts)),
                ('compact_mode', models.BooleanField(default=False)),
                ('layout', models.JSONField(blank=True, default=pgmanager.dashboard.models.default_layout)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='dashboard_settings', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'dashboard_settings',
                'verbose_name_plural': 'dashboard settings',
            },
        ),
    ]
