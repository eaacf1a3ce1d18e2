# Generated manually for the bulk payment audit action

from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('core', '0001_initial'),
    ]

    operations = [
        migrations.AlterField(
            model_name='auditlog',
            name='action',
            field=models.CharField(choices=[('create', 'Create'), ('update', 'Update'), ('delete', 'Delete'), ('tenant_create', 'Tenant Created'), ('tenant_update', 'Tenant Updated'), ('tenant_delete', 'Tenant Deleted'), ('tenant_vacate', 'Tenant Vacated'), ('bed_assign', 'Bed Assigned'), ('bed_unassign', 'Bed Unassigned'), ('tenant_relocate', 'Tenant Relocated'), ('payment_create', 'Payment Created'), ('payment_update', 'Payment Updated'), ('payment_delete', 'Payment Deleted'), ('payment_paid', 'Payment Marked Paid'), ('payment_bulk_create', 'Payments Generated'), ('notice_publish', 'Notice Published'), ('document_upload', 'Document Uploaded')], max_length=50),
        ),
    ]
