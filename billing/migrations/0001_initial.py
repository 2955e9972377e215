from decimal import Decimal

import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='GramPanchayat',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=150, unique=True)),
                ('district', models.CharField(blank=True, max_length=100)),
                ('state', models.CharField(blank=True, max_length=100)),
                ('upi_id', models.CharField(blank=True, help_text='Payee VPA used in payment QR codes', max_length=100)),
                ('payee_name', models.CharField(blank=True, max_length=150)),
                ('bill_counter', models.PositiveIntegerField(default=0, help_text='Last issued bill sequence (row-locked on use)')),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'verbose_name': 'Gram Panchayat',
                'verbose_name_plural': 'Gram Panchayats',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='House',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('village', models.CharField(blank=True, max_length=100)),
                ('owner_name', models.CharField(max_length=150)),
                ('aadhaar_number', models.CharField(blank=True, max_length=12)),
                ('mobile_number', models.CharField(blank=True, max_length=15)),
                ('address', models.TextField(blank=True)),
                ('water_meter_number', models.CharField(max_length=50)),
                ('sequence_number', models.CharField(blank=True, max_length=20)),
                ('property_number', models.CharField(blank=True, max_length=50)),
                ('usage_type', models.CharField(choices=[('residential', 'Residential / Domestic'), ('institutional', 'Public / Private Institution'), ('commercial', 'Commercial Enterprise'), ('industrial', 'Industrial Enterprise')], default='residential', max_length=20)),
                ('previous_meter_reading', models.DecimalField(decimal_places=2, default=Decimal('0.00'), help_text='Reading at the last generated bill', max_digits=12)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('gram_panchayat', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='houses', to='billing.grampanchayat')),
            ],
            options={
                'ordering': ['village', 'sequence_number'],
                'unique_together': {('gram_panchayat', 'water_meter_number')},
            },
        ),
        migrations.CreateModel(
            name='MeterReading',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('month', models.CharField(help_text='Billing month name, e.g. January', max_length=20)),
                ('year', models.PositiveIntegerField()),
                ('current_reading', models.DecimalField(decimal_places=2, max_digits=12)),
                ('reading_date', models.DateField(default=django.utils.timezone.localdate)),
                ('reader_name', models.CharField(blank=True, max_length=100)),
                ('remarks', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('house', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='meter_readings', to='billing.house')),
            ],
            options={
                'ordering': ['-year', '-created_at'],
                'unique_together': {('house', 'month', 'year')},
            },
        ),
        migrations.CreateModel(
            name='WaterTariff',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('domestic_up_to_7', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10)),
                ('domestic_7_to_10', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10)),
                ('domestic_10_to_15', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10)),
                ('domestic_15_to_20', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10)),
                ('domestic_above_20', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10)),
                ('institutional_rate', models.DecimalField(decimal_places=2, default=Decimal('0.00'), help_text='Public / private institutions', max_digits=10)),
                ('commercial_rate', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10)),
                ('industrial_rate', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10)),
                ('effective_date', models.DateField(default=django.utils.timezone.localdate)),
                ('is_active', models.BooleanField(default=True)),
                ('approved_by', models.CharField(blank=True, max_length=100)),
                ('resolution', models.CharField(blank=True, help_text='Gram Sabha resolution number', max_length=50)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('gram_panchayat', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='tariffs', to='billing.grampanchayat')),
            ],
            options={
                'ordering': ['-effective_date', '-id'],
            },
        ),
        migrations.CreateModel(
            name='WaterBill',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('bill_number', models.CharField(max_length=20)),
                ('month', models.CharField(max_length=20)),
                ('year', models.PositiveIntegerField()),
                ('due_date', models.DateField()),
                ('previous_reading', models.DecimalField(decimal_places=2, max_digits=12)),
                ('current_reading', models.DecimalField(decimal_places=2, max_digits=12)),
                ('total_usage', models.DecimalField(decimal_places=2, max_digits=12)),
                ('current_demand', models.DecimalField(decimal_places=2, max_digits=12)),
                ('arrears', models.DecimalField(decimal_places=2, default=Decimal('0.00'), help_text='Unpaid balance carried from previous bills', max_digits=12)),
                ('interest', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('others', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('total_amount', models.DecimalField(decimal_places=2, max_digits=12)),
                ('paid_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('remaining_amount', models.DecimalField(decimal_places=2, max_digits=12)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('partial', 'Partially Paid'), ('paid', 'Paid in Full')], default='pending', max_length=10)),
                ('payment_mode', models.CharField(blank=True, max_length=20, null=True)),
                ('transaction_id', models.CharField(blank=True, max_length=100, null=True)),
                ('paid_date', models.DateTimeField(blank=True, null=True)),
                ('generated_by', models.CharField(default='System', max_length=100)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('gram_panchayat', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='bills', to='billing.grampanchayat')),
                ('house', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='bills', to='billing.house')),
                ('meter_reading', models.OneToOneField(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='bill', to='billing.meterreading')),
            ],
            options={
                'ordering': ['-year', '-created_at'],
                'unique_together': {('gram_panchayat', 'bill_number'), ('house', 'month', 'year')},
            },
        ),
        migrations.CreateModel(
            name='Payment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('bill_number', models.CharField(max_length=20)),
                ('amount', models.DecimalField(decimal_places=2, max_digits=12)),
                ('payment_mode', models.CharField(choices=[('cash', 'Cash'), ('upi', 'UPI'), ('online', 'Online'), ('pay_later', 'Pay Later')], max_length=20)),
                ('transaction_id', models.CharField(blank=True, max_length=100, null=True)),
                ('collected_by', models.CharField(max_length=100)),
                ('remarks', models.TextField(blank=True)),
                ('payment_date', models.DateTimeField(default=django.utils.timezone.now)),
                ('bill', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='payments', to='billing.waterbill')),
            ],
            options={
                'ordering': ['-payment_date', '-id'],
            },
        ),
    ]
