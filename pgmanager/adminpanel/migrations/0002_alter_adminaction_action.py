# Generated manually for the role change action

from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('adminpanel', '0001_initial'),
    ]

    operations = [
        migrations.AlterField(
            model_name='adminaction',
            name='action',
            field=models.CharField(choices=[('USER_APPROVED', 'User Approved'), ('USER_BLOCKED', 'User Blocked'), ('USER_STATUS_CHANGED', 'User Status Changed'), ('USER_ROLE_CHANGED', 'User Role Changed'), ('USER_DELETED', 'User Deleted')], max_length=30),
        ),
    ]
