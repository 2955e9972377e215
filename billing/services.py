import logging
from decimal import Decimal, InvalidOperation
from urllib.parse import urlencode, quote

from django.conf import settings
from django.db import transaction
from django.db.models import Sum, Count, Q
from django.utils import timezone

from .exceptions import (
    BillAlreadyExists, BillNotFound, HouseholdNotFound, InvalidAmount,
    InvalidUsage, NegativeUsage, OverpaymentRejected, PaymentQRUnavailable,
    TariffNotConfigured, TransactionReferenceRequired,
)
from .models import GramPanchayat, House, WaterTariff, WaterBill, Payment
from .persistence import atomic_with_retry
from .tariff import compute_demand, quantize_money

logger = logging.getLogger(__name__)

ZERO = Decimal('0.00')


def to_money(value, field='amount'):
    try:
        amount = Decimal(str(value))
        if not amount.is_finite():
            raise ValueError(value)
        return quantize_money(amount)
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidAmount(f'{field} is not a valid amount: {value!r}', field=field)


# ══════════════════════════════════════════════════════════
#   FUNCTION 1 — compute_arrears
#   Sums remaining balances of the house's unsettled bills
#   Args: house, bill to leave out (the one being generated)
#   Returns: Decimal arrears
# ══════════════════════════════════════════════════════════
def compute_arrears(house, exclude_bill=None):
    unsettled = WaterBill.objects.filter(house=house, status__in=WaterBill.UNSETTLED)
    if exclude_bill is not None:
        unsettled = unsettled.exclude(pk=exclude_bill.pk)
    return unsettled.aggregate(Sum('remaining_amount'))['remaining_amount__sum'] or ZERO


# ══════════════════════════════════════════════════════════
#   FUNCTION 2 — next_bill_number
#   Locks the tenant row and issues the next bill sequence.
#   Must be called inside a transaction.
# ══════════════════════════════════════════════════════════
def next_bill_number(gram_panchayat):
    tenant = GramPanchayat.objects.select_for_update().get(pk=gram_panchayat.pk)
    tenant.bill_counter += 1
    tenant.save(update_fields=['bill_counter'])
    gram_panchayat.bill_counter = tenant.bill_counter
    return f'{settings.BILL_NUMBER_PREFIX}{tenant.bill_counter:0{settings.BILL_NUMBER_DIGITS}d}'


# ══════════════════════════════════════════════════════════
#   FUNCTION 3 — generate_bill
#   Creates a WaterBill and advances the house checkpoint in one
#   transaction. Returns: WaterBill instance
# ══════════════════════════════════════════════════════════
@atomic_with_retry
def generate_bill(gram_panchayat, house_id, current_reading, month, year, due_date,
                  generated_by='System', interest=ZERO, others=ZERO, meter_reading=None):
    try:
        house = House.objects.select_for_update().get(
            pk=house_id, gram_panchayat=gram_panchayat, is_active=True)
    except House.DoesNotExist:
        raise HouseholdNotFound(f'House {house_id} not found', house_id=house_id)

    try:
        reading = Decimal(str(current_reading))
        if not reading.is_finite():
            raise ValueError(current_reading)
        # Stored at two places; price what is stored.
        current_reading = quantize_money(reading)
    except (InvalidOperation, ValueError):
        raise InvalidUsage(f'Not a meter reading: {current_reading!r}',
                           current_reading=current_reading)
    previous        = house.previous_meter_reading
    if current_reading < previous:
        raise NegativeUsage(
            'Current reading cannot be less than previous reading',
            previous_reading=previous, current_reading=current_reading)

    if WaterBill.objects.filter(house=house, month=month, year=year).exists():
        raise BillAlreadyExists(
            f'A bill already exists for {house} for {month} {year}',
            house_id=house.pk, month=month, year=year)

    tariff = gram_panchayat.active_tariff()
    if tariff is None:
        raise TariffNotConfigured(
            f'No active water tariff for {gram_panchayat}',
            gram_panchayat_id=gram_panchayat.pk)

    interest = to_money(interest, 'interest')
    others   = to_money(others, 'others')
    if interest < 0 or others < 0:
        raise InvalidAmount('Interest and other charges cannot be negative',
                            interest=interest, others=others)

    usage   = current_reading - previous
    demand  = compute_demand(usage, tariff, house.usage_type)
    arrears = compute_arrears(house)

    bill = WaterBill(
        bill_number      = next_bill_number(gram_panchayat),
        gram_panchayat   = gram_panchayat,
        house            = house,
        meter_reading    = meter_reading,
        month            = month,
        year             = int(year),
        due_date         = due_date,
        previous_reading = previous,
        current_reading  = current_reading,
        total_usage      = usage,
        current_demand   = demand,
        arrears          = arrears,
        interest         = interest,
        others           = others,
        total_amount     = demand + arrears + interest + others,
        generated_by     = generated_by,
    )
    bill.recompute_balance()
    bill.save()

    house.previous_meter_reading = current_reading
    house.save(update_fields=['previous_meter_reading', 'updated_at'])

    logger.info('Generated %s for house %s (%s %s): demand=%s arrears=%s total=%s',
                bill.bill_number, house.pk, month, year, demand, arrears, bill.total_amount)
    return bill


# ══════════════════════════════════════════════════════════
#   FUNCTION 4 — apply_payment
#   Records a payment and, unless it is pay-later, credits the bill
#   Returns: (WaterBill, Payment)
# ══════════════════════════════════════════════════════════
@atomic_with_retry
def apply_payment(gram_panchayat, bill_id, amount, payment_mode,
                  transaction_id=None, remarks='', collected_by='System'):
    amount = to_money(amount)
    if amount <= 0:
        raise InvalidAmount('Payment amount must be positive', amount=amount)
    if payment_mode not in dict(Payment.MODE_CHOICES):
        raise InvalidAmount(f'Unknown payment mode: {payment_mode}', payment_mode=payment_mode)
    if payment_mode in Payment.REFERENCE_REQUIRED and not transaction_id:
        raise TransactionReferenceRequired(
            f'Transaction id is required for {payment_mode} payments',
            payment_mode=payment_mode)

    try:
        bill = WaterBill.objects.select_for_update().get(pk=bill_id, gram_panchayat=gram_panchayat)
    except WaterBill.DoesNotExist:
        raise BillNotFound(f'Bill {bill_id} not found', bill_id=bill_id)

    if amount > bill.remaining_amount:
        raise OverpaymentRejected(
            'Payment amount cannot exceed remaining amount',
            amount=amount, remaining_amount=bill.remaining_amount)

    payment = Payment.objects.create(
        bill           = bill,
        bill_number    = bill.bill_number,
        amount         = amount,
        payment_mode   = payment_mode,
        transaction_id = transaction_id,
        collected_by   = collected_by,
        remarks        = remarks or '',
    )

    # Pay-later only acknowledges the promise; balances stay untouched.
    if payment_mode != Payment.PAY_LATER:
        bill.paid_amount   += amount
        bill.recompute_balance()
        bill.payment_mode   = payment_mode
        bill.transaction_id = transaction_id
        bill.paid_date      = payment.payment_date
        bill.save(update_fields=['paid_amount', 'remaining_amount', 'status',
                                 'payment_mode', 'transaction_id', 'paid_date', 'updated_at'])

    logger.info('Payment %s of %s (%s) on %s by %s: remaining=%s status=%s',
                payment.pk, amount, payment_mode, bill.bill_number, collected_by,
                bill.remaining_amount, bill.status)
    return bill, payment


# ══════════════════════════════════════════════════════════
#   FUNCTION 5 — update_tariff
#   Supersedes the active tariff; rates not given are carried over
# ══════════════════════════════════════════════════════════
RATE_FIELDS = ([field for _, _, field in WaterTariff.DOMESTIC_BRACKETS]
               + list(WaterTariff.FLAT_RATE_FIELDS.values()))


@transaction.atomic
def update_tariff(gram_panchayat, effective_date=None, approved_by='', resolution='', **rates):
    unknown = set(rates) - set(RATE_FIELDS)
    if unknown:
        raise TypeError(f'Unknown tariff rates: {", ".join(sorted(unknown))}')

    current = gram_panchayat.active_tariff()
    values  = {field: (getattr(current, field) if current else ZERO) for field in RATE_FIELDS}
    for field, rate in rates.items():
        rate = to_money(rate, field)
        if rate < 0:
            raise InvalidAmount(f'{field} cannot be negative', field=field, rate=rate)
        values[field] = rate

    gram_panchayat.tariffs.filter(is_active=True).update(is_active=False)
    tariff = WaterTariff.objects.create(
        gram_panchayat = gram_panchayat,
        effective_date = effective_date or timezone.localdate(),
        approved_by    = approved_by,
        resolution     = resolution,
        is_active      = True,
        **values
    )
    logger.info('Tariff %s now active for %s', tariff.pk, gram_panchayat)
    return tariff


# ══════════════════════════════════════════════════════════
#   FUNCTION 6 — delete_bill
#   Administrative override; no balance or checkpoint is restored
# ══════════════════════════════════════════════════════════
@transaction.atomic
def delete_bill(gram_panchayat, bill_id):
    deleted, _ = WaterBill.objects.filter(pk=bill_id, gram_panchayat=gram_panchayat).delete()
    if not deleted:
        raise BillNotFound(f'Bill {bill_id} not found', bill_id=bill_id)
    logger.warning('Bill %s deleted by administrative override', bill_id)


# ══════════════════════════════════════════════════════════
#   FUNCTION 7 — payment_qr_payload
#   UPI deep link for the outstanding amount; QR rendering is external
# ══════════════════════════════════════════════════════════
def payment_qr_payload(bill):
    tenant = bill.gram_panchayat
    if not tenant.upi_id:
        raise PaymentQRUnavailable(f'UPI id not configured for {tenant}',
                                   gram_panchayat_id=tenant.pk)
    if bill.remaining_amount <= 0:
        raise PaymentQRUnavailable(f'{bill.bill_number} has nothing outstanding',
                                   bill_id=bill.pk)

    params = {
        'pa': tenant.upi_id,
        'pn': tenant.payee_name or tenant.name,
        'am': f'{bill.remaining_amount:.2f}',
        'cu': 'INR',
        'tn': f'Bill Payment {bill.bill_number}',
    }
    return 'upi://pay?' + urlencode(params, quote_via=quote, safe='@')


# ══════════════════════════════════════════════════════════
#   FUNCTION 8 — collection_summary
#   Dashboard numbers for one billing cycle
# ══════════════════════════════════════════════════════════
def collection_summary(gram_panchayat, month, year):
    totals = WaterBill.objects.filter(
        gram_panchayat=gram_panchayat, month=month, year=year,
    ).aggregate(
        bills       = Count('id'),
        billed      = Sum('total_amount'),
        collected   = Sum('paid_amount'),
        outstanding = Sum('remaining_amount'),
        paid        = Count('id', filter=Q(status=WaterBill.PAID)),
        partial     = Count('id', filter=Q(status=WaterBill.PARTIAL)),
        pending     = Count('id', filter=Q(status=WaterBill.PENDING)),
    )
    for key in ('billed', 'collected', 'outstanding'):
        totals[key] = totals[key] or ZERO
    return totals
