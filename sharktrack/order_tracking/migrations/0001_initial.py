import django.core.serializers.json
import django.utils.timezone
import order_tracking.models.order
import uuid
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
    ]

    operations = [
        migrations.CreateModel(
            name='Order',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('shopify_order_id', models.CharField(help_text='Order identifier on the commerce platform', max_length=64, unique=True)),
                ('shopify_order_number', models.CharField(help_text='Human readable order number (e.g. #1001)', max_length=64)),
                ('shopify_order_link', models.URLField(help_text='Link to the order in the commerce platform admin', max_length=500)),
                ('payment_status', models.CharField(choices=[('authorized', 'Authorized'), ('paid', 'Paid'), ('partially_paid', 'Partially paid'), ('partially_refunded', 'Partially refunded'), ('pending', 'Pending'), ('refunded', 'Refunded'), ('voided', 'Voided')], default='pending', max_length=20)),
                ('order_type', models.CharField(choices=[('PRE_ORDER', 'Pre-Orden'), ('IMMEDIATE', 'Entrega Inmediata'), ('REPLACEMENT', 'Reemplazo'), ('UNDETERMINED', 'Desconocido')], default='UNDETERMINED', max_length=20)),
                ('location', models.CharField(default='UNDETERMINED', help_text='Classified location bucket of the order', max_length=50)),
                ('current_status', models.JSONField(default=dict, encoder=django.core.serializers.json.DjangoJSONEncoder, help_text='Snapshot of the last status history entry')),
                ('status_history', models.JSONField(default=list, encoder=django.core.serializers.json.DjangoJSONEncoder, help_text='Append-only list of order status entries')),
                ('order_details', models.JSONField(default=order_tracking.models.order.default_order_details, encoder=django.core.serializers.json.DjangoJSONEncoder, help_text='Products and aggregate metrics')),
                ('tracking_info', models.JSONField(default=order_tracking.models.order.default_tracking_info, encoder=django.core.serializers.json.DjangoJSONEncoder, help_text='Order-level tracking and inbound product trackings')),
                ('fulfillment_status', models.JSONField(default=order_tracking.models.order.default_fulfillment_status, encoder=django.core.serializers.json.DjangoJSONEncoder)),
                ('flags', models.JSONField(default=order_tracking.models.order.default_flags, encoder=django.core.serializers.json.DjangoJSONEncoder)),
                ('processing_time_in_dual', models.PositiveIntegerField(default=0, help_text='Days spent with the freight forwarder')),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now, help_text='Creation time on the commerce platform')),
                ('updated_at', models.DateTimeField(default=django.utils.timezone.now, help_text='Last write performed by this service')),
            ],
            options={
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['payment_status'], name='order_track_payment_7c1e0b_idx'),
                    models.Index(fields=['order_type'], name='order_track_order_t_3f9a2d_idx'),
                    models.Index(fields=['created_at'], name='order_track_created_a4b6e1_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Product',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('product_id', models.CharField(help_text='External product identifier', max_length=64, unique=True)),
                ('name', models.CharField(max_length=255)),
                ('weight', models.PositiveIntegerField(default=0, help_text='Weight in grams')),
                ('orders', models.JSONField(default=list, help_text='External ids of the orders containing this product')),
                ('tracking_numbers', models.JSONField(default=list, encoder=django.core.serializers.json.DjangoJSONEncoder, help_text='Shipments this product travelled under')),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='Status',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('kind', models.CharField(choices=[('PRODUCT', 'Product'), ('ORDER', 'Order')], help_text='Vocabulary the code belongs to', max_length=10)),
                ('internal_code', models.CharField(help_text='Operational status code stored on orders and products', max_length=50)),
                ('customer_label', models.CharField(help_text='Label shown to customers', max_length=100)),
                ('position', models.PositiveIntegerField(default=0, help_text='Definition order within the vocabulary')),
            ],
            options={
                'verbose_name_plural': 'statuses',
                'ordering': ['kind', 'position', 'id'],
                'constraints': [
                    models.UniqueConstraint(fields=('kind', 'internal_code'), name='unique_status_code_per_kind'),
                ],
            },
        ),
        migrations.CreateModel(
            name='SupplierPurchaseOrder',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('po_number', models.CharField(help_text='Purchase order number on the supplier side', max_length=100, unique=True)),
                ('supplier_name', models.CharField(choices=[('TEMU', 'TEMU'), ('AliExpress', 'AliExpress'), ('Alibaba', 'Alibaba')], max_length=20)),
                ('order_date', models.DateField()),
                ('status', models.CharField(choices=[('PENDING', 'Pendiente'), ('CONFIRMED', 'Confirmado'), ('IN_PROCESS', 'En Proceso'), ('RECEIVED', 'Recibido'), ('CANCELLED', 'Cancelado')], default='PENDING', max_length=20)),
                ('products', models.JSONField(blank=True, default=list, help_text='External product ids')),
                ('orders', models.JSONField(blank=True, default=list, help_text='External order ids')),
                ('tracking_numbers', models.JSONField(blank=True, default=list)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'ordering': ['-order_date', 'po_number'],
            },
        ),
        migrations.CreateModel(
            name='TrackingNumber',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('tracking_number', models.CharField(help_text='Carrier tracking number, or the sentinel for untracked carriers', max_length=100)),
                ('carrier', models.CharField(help_text='Carrier handling the shipment', max_length=100)),
                ('products', models.JSONField(default=list, help_text='Ordered {product_id, order_id, status} associations')),
                ('orders', models.JSONField(default=list, help_text='External ids of the orders in this shipment')),
                ('is_consolidated', models.BooleanField(default=False, help_text='Whether this shipment bundles several products')),
                ('consolidated_from', models.JSONField(default=list, help_text='Tracking numbers superseded by this shipment')),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['carrier', 'tracking_number'], name='order_track_carrier_5d2c8f_idx'),
                ],
            },
        ),
    ]
