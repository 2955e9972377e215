#!/usr/bin/env python
"""
Setup script to populate the water billing system with initial data.
Run this after `python manage.py migrate`.
"""
import os
import django

# Setup Django environment
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'panchayat_water.settings')
django.setup()

from billing.models import GramPanchayat, House
from billing.services import update_tariff
from decimal import Decimal
from datetime import date


def create_gram_panchayat():
    """Create the sample gram panchayat"""
    print("🏛️  Creating gram panchayat...")
    gp, created = GramPanchayat.objects.get_or_create(
        name='Shirur Gram Panchayat',
        defaults={
            'district': 'Pune',
            'state': 'Maharashtra',
            'upi_id': 'shirurgp@sbi',
            'payee_name': 'Shirur Gram Panchayat',
        }
    )
    print(f"✅ {'Created' if created else 'Found'} {gp.name}")
    return gp


def create_water_tariff(gp):
    """Create initial water tariff"""
    print("\n🔧 Creating water tariff...")

    if gp.active_tariff() is not None:
        print("✅ Water tariff already exists")
        return gp.active_tariff()

    tariff = update_tariff(
        gp,
        effective_date     = date(2026, 4, 1),
        approved_by        = 'Gram Sabha',
        resolution         = 'GS-2026-004',
        domestic_up_to_7   = Decimal('5.00'),
        domestic_7_to_10   = Decimal('7.00'),
        domestic_10_to_15  = Decimal('10.00'),
        domestic_15_to_20  = Decimal('12.00'),
        domestic_above_20  = Decimal('15.00'),
        institutional_rate = Decimal('12.00'),
        commercial_rate    = Decimal('18.00'),
        industrial_rate    = Decimal('25.00'),
    )
    print("✅ Domestic slabs: 0-7 Rs.5, 7-10 Rs.7, 10-15 Rs.10, 15-20 Rs.12, 20+ Rs.15 per KL")
    print("✅ Non-domestic: institutional Rs.12, commercial Rs.18, industrial Rs.25 per KL")
    return tariff


def create_sample_houses(gp):
    """Create some sample houses"""
    print("\n🏠 Creating sample houses...")

    houses_data = [
        {
            'water_meter_number': 'MTR001',
            'owner_name': 'Sunita Pawar',
            'village': 'Shirur',
            'mobile_number': '9822000001',
            'address': 'Ward 1, Shirur',
            'sequence_number': '001',
            'property_number': 'P-101',
            'usage_type': House.RESIDENTIAL,
            'previous_meter_reading': Decimal('100.00'),
        },
        {
            'water_meter_number': 'MTR002',
            'owner_name': 'Shirur Kirana Stores',
            'village': 'Shirur',
            'mobile_number': '9822000002',
            'address': 'Market Road, Shirur',
            'sequence_number': '002',
            'property_number': 'P-214',
            'usage_type': House.COMMERCIAL,
            'previous_meter_reading': Decimal('40.00'),
        },
        {
            'water_meter_number': 'MTR003',
            'owner_name': 'Zilla Parishad School',
            'village': 'Karde',
            'mobile_number': '9822000003',
            'address': 'School Lane, Karde',
            'sequence_number': '003',
            'property_number': 'P-330',
            'usage_type': House.INSTITUTIONAL,
            'previous_meter_reading': Decimal('0.00'),
        },
    ]

    created_count = 0
    for data in houses_data:
        house, created = House.objects.get_or_create(
            gram_panchayat=gp,
            water_meter_number=data['water_meter_number'],
            defaults=data
        )
        if created:
            print(f"✅ Created house: {house.water_meter_number} - {house.owner_name} "
                  f"({house.get_usage_type_display()})")
            created_count += 1
        else:
            print(f"✅ House already exists: {house.water_meter_number}")

    print(f"\n📊 Summary: {created_count} new houses created")
    return House.objects.filter(gram_panchayat=gp)


def main():
    print("🚀 Setting up Gram Panchayat Water Billing...")
    print("=" * 50)

    gp = create_gram_panchayat()
    create_water_tariff(gp)
    create_sample_houses(gp)

    print("\n" + "=" * 50)
    print("🎉 Initial setup complete!")
    print("\nNext Steps:")
    print("1. Access admin panel at: http://127.0.0.1:8000/admin/")
    print("2. Record meter readings for the houses")
    print(f"3. Run billing command: python manage.py run_billing {gp.pk}")
    print(f"4. Check collections: python manage.py collection_report {gp.pk}")


if __name__ == '__main__':
    main()
