"""
Initial migration for Restockman models.
"""

from decimal import Decimal
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    """Create Restockman models: Branch, InventoryPosition, Batch, Movement, RestockRecord."""

    initial = True

    dependencies = [
        ('contenttypes', '0002_remove_content_type_name'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Branch',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('code', models.SlugField(help_text='Unique identifier (e.g. main, cebu)', unique=True, verbose_name='Code')),
                ('name', models.CharField(max_length=100, verbose_name='Name')),
                ('address', models.CharField(blank=True, default='', max_length=255, verbose_name='Address')),
                ('is_active', models.BooleanField(default=True, verbose_name='Active')),
                ('is_default', models.BooleanField(default=False, help_text='Target branch when a restock does not name one.', verbose_name='Default branch')),
                ('metadata', models.JSONField(blank=True, default=dict, verbose_name='Metadata')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Branch',
                'verbose_name_plural': 'Branches',
                'ordering': ['code'],
            },
        ),
        migrations.CreateModel(
            name='InventoryPosition',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('object_id', models.PositiveIntegerField(verbose_name='Product ID')),
                ('quantity', models.IntegerField(default=0, verbose_name='On hand')),
                ('reserved_quantity', models.IntegerField(default=0, verbose_name='Reserved')),
                ('low_stock_threshold', models.IntegerField(default=10, verbose_name='Low stock threshold')),
                ('min_stock_level', models.IntegerField(default=10, verbose_name='Minimum stock level')),
                ('max_stock_level', models.IntegerField(blank=True, null=True, verbose_name='Maximum stock level')),
                ('cost_per_unit', models.DecimalField(decimal_places=2, default=Decimal('0'), help_text='Cost of the latest restock (or weighted average).', max_digits=12, verbose_name='Cost per unit')),
                ('last_restock_date', models.DateField(blank=True, null=True, verbose_name='Last restock')),
                ('location', models.CharField(blank=True, default='', max_length=100, verbose_name='Location')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('branch', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='positions', to='restockman.branch', verbose_name='Branch')),
                ('content_type', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, to='contenttypes.contenttype', verbose_name='Product type')),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL, verbose_name='Created by')),
                ('updated_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL, verbose_name='Updated by')),
            ],
            options={
                'verbose_name': 'Inventory',
                'verbose_name_plural': 'Inventory',
                'indexes': [
                    models.Index(fields=['content_type', 'object_id'], name='restockman_inv_product_idx'),
                    models.Index(fields=['branch'], name='restockman_inv_branch_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(fields=('content_type', 'object_id', 'branch'), name='unique_inventory_per_product_branch'),
                    models.CheckConstraint(condition=models.Q(('quantity__gte', 0)), name='inventory_quantity_non_negative'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Batch',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('batch_number', models.CharField(help_text='Unique lot identifier used for traceability.', max_length=100, unique=True, verbose_name='Batch number')),
                ('quantity', models.PositiveIntegerField(verbose_name='Quantity')),
                ('received_date', models.DateField(verbose_name='Received')),
                ('expiration_date', models.DateField(db_index=True, help_text='Last day the batch can be sold or used', verbose_name='Expires')),
                ('cost_per_unit', models.DecimalField(decimal_places=2, max_digits=12, verbose_name='Cost per unit')),
                ('supplier_name', models.CharField(max_length=255, verbose_name='Supplier')),
                ('supplier_contact', models.CharField(blank=True, default='', max_length=100, verbose_name='Supplier contact')),
                ('supplier_email', models.EmailField(blank=True, default='', max_length=254, verbose_name='Supplier email')),
                ('purchase_order_ref', models.CharField(blank=True, default='', max_length=100, verbose_name='Purchase order')),
                ('status', models.CharField(choices=[('active', 'Active'), ('removed', 'Removed')], default='active', max_length=20, verbose_name='Status')),
                ('is_active', models.BooleanField(default=True, verbose_name='Active')),
                ('retired_at', models.DateTimeField(blank=True, null=True, verbose_name='Retired at')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='Created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='Updated at')),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL, verbose_name='Created by')),
                ('inventory', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='batches', to='restockman.inventoryposition', verbose_name='Inventory')),
            ],
            options={
                'verbose_name': 'Batch',
                'verbose_name_plural': 'Batches',
                'ordering': ['expiration_date', 'created_at'],
                'permissions': [('retire_batch', 'Can retire expired batches')],
                'indexes': [
                    models.Index(fields=['inventory', 'is_active', 'expiration_date'], name='restockman_batch_fifo_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(('expiration_date__gt', models.F('received_date'))), name='batch_expires_after_received'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Movement',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('movement_type', models.CharField(choices=[('restock', 'Restock'), ('retire', 'Retire'), ('adjustment', 'Adjustment')], max_length=20, verbose_name='Type')),
                ('quantity_change', models.IntegerField(help_text='Positive = in, negative = out', verbose_name='Change')),
                ('quantity_before', models.IntegerField(verbose_name='Before')),
                ('quantity_after', models.IntegerField(verbose_name='After')),
                ('notes', models.TextField(blank=True, default='', verbose_name='Notes')),
                ('timestamp', models.DateTimeField(db_index=True, default=django.utils.timezone.now, verbose_name='Timestamp')),
                ('batch', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='movements', to='restockman.batch', verbose_name='Batch')),
                ('inventory', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='movements', to='restockman.inventoryposition', verbose_name='Inventory')),
                ('user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL, verbose_name='Performed by')),
            ],
            options={
                'verbose_name': 'Movement',
                'verbose_name_plural': 'Movements',
                'ordering': ['timestamp', 'pk'],
                'indexes': [
                    models.Index(fields=['inventory', 'timestamp'], name='restockman_move_inv_ts_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(('quantity_after', models.F('quantity_before') + models.F('quantity_change'))), name='movement_quantity_balances'),
                ],
            },
        ),
        migrations.CreateModel(
            name='RestockRecord',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('quantity', models.PositiveIntegerField(verbose_name='Quantity')),
                ('cost_per_unit', models.DecimalField(decimal_places=2, max_digits=12, verbose_name='Cost per unit')),
                ('supplier_name', models.CharField(max_length=255, verbose_name='Supplier')),
                ('supplier_contact', models.CharField(blank=True, default='', max_length=100)),
                ('supplier_email', models.EmailField(blank=True, default='', max_length=254)),
                ('purchase_order_ref', models.CharField(blank=True, default='', max_length=100, verbose_name='Purchase order')),
                ('received_date', models.DateField(verbose_name='Received')),
                ('notes', models.TextField(blank=True, default='', verbose_name='Notes')),
                ('timestamp', models.DateTimeField(db_index=True, default=django.utils.timezone.now, verbose_name='Timestamp')),
                ('batch', models.OneToOneField(on_delete=django.db.models.deletion.PROTECT, related_name='restock_record', to='restockman.batch', verbose_name='Batch')),
                ('inventory', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='restock_records', to='restockman.inventoryposition', verbose_name='Inventory')),
                ('user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL, verbose_name='Performed by')),
            ],
            options={
                'verbose_name': 'Restock record',
                'verbose_name_plural': 'Restock history',
                'ordering': ['timestamp', 'pk'],
            },
        ),
    ]
