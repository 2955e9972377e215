from datetime import date
from decimal import Decimal

import pytest

from billing.models import GramPanchayat, House, WaterBill, WaterTariff


RATES = {
    'domestic_up_to_7':   Decimal('5.00'),
    'domestic_7_to_10':   Decimal('7.00'),
    'domestic_10_to_15':  Decimal('10.00'),
    'domestic_15_to_20':  Decimal('12.00'),
    'domestic_above_20':  Decimal('15.00'),
    'institutional_rate': Decimal('12.00'),
    'commercial_rate':    Decimal('18.00'),
    'industrial_rate':    Decimal('25.00'),
}

DUE_DATE = date(2026, 11, 15)


@pytest.fixture
def schedule():
    """Unsaved tariff; enough for the pure calculator."""
    return WaterTariff(**RATES)


@pytest.fixture
def gram_panchayat(db):
    return GramPanchayat.objects.create(name='Shirur', upi_id='shirurgp@sbi',
                                        payee_name='Shirur Gram Panchayat')


@pytest.fixture
def other_gram_panchayat(db):
    gp = GramPanchayat.objects.create(name='Karde')
    WaterTariff.objects.create(gram_panchayat=gp, **RATES)
    return gp


@pytest.fixture
def tariff(gram_panchayat):
    return WaterTariff.objects.create(gram_panchayat=gram_panchayat, **RATES)


@pytest.fixture
def make_house(gram_panchayat):
    counter = iter(range(1, 1000))

    def _make(previous=Decimal('100.00'), usage_type=House.RESIDENTIAL, gp=None):
        n = next(counter)
        return House.objects.create(
            gram_panchayat=gp or gram_panchayat,
            owner_name=f'Owner {n}',
            water_meter_number=f'MTR{n:03d}',
            usage_type=usage_type,
            previous_meter_reading=Decimal(previous),
        )
    return _make


@pytest.fixture
def house(make_house):
    return make_house()


@pytest.fixture
def make_bill(gram_panchayat):
    """Insert a bill directly, bypassing the ledger."""
    counter = iter(range(900001, 999999))

    def _make(house, total, paid=Decimal('0.00'), month='September', year=2026):
        bill = WaterBill(
            bill_number=f'OLD{next(counter)}',
            gram_panchayat=house.gram_panchayat,
            house=house,
            month=month,
            year=year,
            due_date=DUE_DATE,
            previous_reading=Decimal('0'),
            current_reading=Decimal('0'),
            total_usage=Decimal('0'),
            current_demand=Decimal(total),
            total_amount=Decimal(total),
            paid_amount=Decimal(paid),
        )
        bill.recompute_balance()
        bill.save()
        return bill
    return _make
