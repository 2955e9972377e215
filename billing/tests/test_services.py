from datetime import date
from decimal import Decimal
from io import StringIO

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError
from django.db import IntegrityError, OperationalError

from billing.exceptions import BillNotFound, ConcurrencyConflict, InvalidAmount, PaymentQRUnavailable
from billing.models import MeterReading, Payment, WaterBill, WaterTariff
from billing.persistence import atomic_with_retry
from billing.services import (
    apply_payment, collection_summary, delete_bill, generate_bill,
    payment_qr_payload, update_tariff,
)

from .conftest import DUE_DATE

pytestmark = pytest.mark.django_db


# ── Tariff updates ───────────────────────────────────────────
def test_update_tariff_supersedes_previous(gram_panchayat, tariff):
    new = update_tariff(gram_panchayat, effective_date=date(2027, 4, 1),
                        domestic_up_to_7='6', commercial_rate=20)

    tariff.refresh_from_db()
    assert not tariff.is_active
    assert gram_panchayat.active_tariff() == new
    assert new.domestic_up_to_7 == Decimal('6.00')
    assert new.commercial_rate == Decimal('20.00')
    # carried over
    assert new.domestic_7_to_10 == Decimal('7.00')
    assert WaterTariff.objects.filter(gram_panchayat=gram_panchayat).count() == 2


def test_first_tariff_defaults_to_zero(gram_panchayat):
    tariff = update_tariff(gram_panchayat, domestic_up_to_7=5)
    assert tariff.is_active
    assert tariff.industrial_rate == Decimal('0.00')


def test_update_tariff_rejects_bad_rates(gram_panchayat, tariff):
    with pytest.raises(InvalidAmount):
        update_tariff(gram_panchayat, industrial_rate='-3')
    with pytest.raises(TypeError):
        update_tariff(gram_panchayat, sewage_rate=4)

    tariff.refresh_from_db()
    assert tariff.is_active


def test_new_tariff_applies_to_next_bill(gram_panchayat, tariff, house):
    update_tariff(gram_panchayat, domestic_up_to_7=10)
    bill = generate_bill(gram_panchayat, house.pk, 105, 'October', 2026, DUE_DATE)
    assert bill.current_demand == Decimal('50.00')


# ── Admin deletion ───────────────────────────────────────────
def test_delete_bill_keeps_payments(gram_panchayat, house, make_bill):
    bill = make_bill(house, '100.00')
    apply_payment(gram_panchayat, bill.pk, 40, Payment.CASH)

    delete_bill(gram_panchayat, bill.pk)

    assert not WaterBill.objects.exists()
    payment = Payment.objects.get()
    assert payment.bill is None
    assert payment.bill_number == bill.bill_number


def test_delete_missing_bill(gram_panchayat, other_gram_panchayat, house, make_bill):
    bill = make_bill(house, '100.00')
    with pytest.raises(BillNotFound):
        delete_bill(other_gram_panchayat, bill.pk)
    assert WaterBill.objects.count() == 1


# ── Payment QR payload ───────────────────────────────────────
def test_qr_payload_for_outstanding_amount(gram_panchayat, house, make_bill):
    bill = make_bill(house, '126.00', paid='60.00')
    payload = payment_qr_payload(bill)

    assert payload == ('upi://pay?pa=shirurgp@sbi&pn=Shirur%20Gram%20Panchayat'
                       f'&am=66.00&cu=INR&tn=Bill%20Payment%20{bill.bill_number}')


def test_qr_payload_needs_upi_id(other_gram_panchayat, make_house, make_bill):
    bill = make_bill(make_house(gp=other_gram_panchayat), '10.00')
    with pytest.raises(PaymentQRUnavailable):
        payment_qr_payload(bill)


def test_qr_payload_for_settled_bill(house, make_bill):
    with pytest.raises(PaymentQRUnavailable):
        payment_qr_payload(make_bill(house, '10.00', paid='10.00'))


# ── Collection summary ───────────────────────────────────────
def test_collection_summary(gram_panchayat, house, make_house, make_bill):
    make_bill(house, '100.00', paid='100.00', month='October')
    make_bill(make_house(), '80.00', paid='30.00', month='October')
    make_bill(make_house(), '50.00', month='October')
    make_bill(make_house(), '999.00', month='September')

    summary = collection_summary(gram_panchayat, 'October', 2026)

    assert summary['bills'] == 3
    assert summary['billed'] == Decimal('230.00')
    assert summary['collected'] == Decimal('130.00')
    assert summary['outstanding'] == Decimal('100.00')
    assert (summary['paid'], summary['partial'], summary['pending']) == (1, 1, 1)


def test_collection_summary_empty_cycle(gram_panchayat):
    summary = collection_summary(gram_panchayat, 'March', 2020)
    assert summary['bills'] == 0
    assert summary['collected'] == Decimal('0.00')


# ── Management commands ──────────────────────────────────────
def test_run_billing_bills_pending_readings(gram_panchayat, tariff, house, make_house):
    MeterReading.objects.create(house=house, month='October', year=2026,
                                current_reading=Decimal('112'))
    broken = make_house(previous='500')
    MeterReading.objects.create(house=broken, month='October', year=2026,
                                current_reading=Decimal('400'))
    out = StringIO()

    call_command('run_billing', gram_panchayat.pk, month='October', year=2026, stdout=out)

    bill = WaterBill.objects.get()
    assert bill.house == house
    assert bill.meter_reading.current_reading == Decimal('112')
    assert bill.generated_by == 'Management Command'
    assert 'NegativeUsage' in out.getvalue()
    assert '1 bills generated. 1 errors.' in out.getvalue()

    # second run skips readings that already have a bill
    out = StringIO()
    call_command('run_billing', gram_panchayat.pk, month='October', year=2026, stdout=out)
    assert WaterBill.objects.count() == 1
    assert '0 bills generated. 1 errors.' in out.getvalue()


def test_run_billing_unknown_gram_panchayat(db):
    with pytest.raises(CommandError):
        call_command('run_billing', 999, stdout=StringIO())


def test_run_billing_continues_after_unexpected_error(gram_panchayat, tariff, house,
                                                     make_house, monkeypatch):
    from billing.management.commands import run_billing

    second = make_house()
    for h in (house, second):
        MeterReading.objects.create(house=h, month='October', year=2026,
                                    current_reading=Decimal('112'))
    real = run_billing.generate_bill

    def failing_first(**kwargs):
        if kwargs['house_id'] == house.pk:
            raise IntegrityError('duplicate key')
        return real(**kwargs)

    monkeypatch.setattr(run_billing, 'generate_bill', failing_first)
    out = StringIO()

    call_command('run_billing', gram_panchayat.pk, month='October', year=2026, stdout=out)

    assert WaterBill.objects.get().house == second
    assert 'duplicate key' in out.getvalue()
    assert '1 bills generated. 1 errors.' in out.getvalue()


def test_collection_report_command(gram_panchayat, house, make_bill):
    make_bill(house, '100.00', paid='40.00', month='October')
    out = StringIO()

    call_command('collection_report', gram_panchayat.pk, month='October', year=2026, stdout=out)

    assert 'Collected:    Rs.40.00' in out.getvalue()
    assert 'Outstanding:  Rs.60.00' in out.getvalue()


# ── Transaction retry ────────────────────────────────────────
@pytest.mark.django_db(transaction=True)
def test_retry_recovers_from_transient_failure(settings):
    settings.BILLING_TRANSACTION_RETRIES = 3
    calls = []

    @atomic_with_retry
    def flaky():
        calls.append(1)
        if len(calls) < 2:
            raise OperationalError('database is locked')
        return 'ok'

    assert flaky() == 'ok'
    assert len(calls) == 2


@pytest.mark.django_db(transaction=True)
def test_retry_exhausted_raises_conflict(settings, monkeypatch):
    settings.BILLING_TRANSACTION_RETRIES = 3
    settings.BILLING_RETRY_BACKOFF = 0.2
    sleeps = []
    monkeypatch.setattr('billing.persistence.time.sleep', sleeps.append)
    calls = []

    @atomic_with_retry
    def always_locked():
        calls.append(1)
        raise OperationalError('deadlock detected')

    with pytest.raises(ConcurrencyConflict) as exc:
        always_locked()
    assert len(calls) == 3
    assert exc.value.details['attempts'] == 3
    # backoff between attempts, none after the last
    assert len(sleeps) == 2
    assert 0 <= sleeps[0] <= 0.2
    assert 0 <= sleeps[1] <= 0.4


def test_no_retry_inside_outer_transaction(settings):
    settings.BILLING_TRANSACTION_RETRIES = 3
    calls = []

    @atomic_with_retry
    def always_locked():
        calls.append(1)
        raise OperationalError('deadlock detected')

    with pytest.raises(ConcurrencyConflict):
        always_locked()
    assert len(calls) == 1
