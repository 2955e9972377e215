from django.db import models
from django.utils import timezone
from decimal import Decimal


# ═══════════════════════════════════════════════════════════
#   MODEL 1 — GramPanchayat  (utility tenant)
# ═══════════════════════════════════════════════════════════
class GramPanchayat(models.Model):
    name            = models.CharField(max_length=150, unique=True)
    district        = models.CharField(max_length=100, blank=True)
    state           = models.CharField(max_length=100, blank=True)

#     ── Payment collection ────────────────────────────────────
    upi_id          = models.CharField(max_length=100, blank=True,
                          help_text='Payee VPA used in payment QR codes')
    payee_name      = models.CharField(max_length=150, blank=True)

#     ── Bill numbering ────────────────────────────────────────
    bill_counter    = models.PositiveIntegerField(default=0,
                          help_text='Last issued bill sequence (row-locked on use)')

    is_active       = models.BooleanField(default=True)
    created_at      = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['name']
        verbose_name        = 'Gram Panchayat'
        verbose_name_plural = 'Gram Panchayats'

    def __str__(self):
        return self.name

    def active_tariff(self):
        return self.tariffs.filter(is_active=True).order_by('-effective_date', '-id').first()


# ═══════════════════════════════════════════════════════════
#   MODEL 2 — WaterTariff  (tariff schedule, superseded never deleted)
# ═══════════════════════════════════════════════════════════
class WaterTariff(models.Model):
    # (lower KL, upper KL or None for open-ended, rate field)
    DOMESTIC_BRACKETS = [
        (Decimal('0'),  Decimal('7'),  'domestic_up_to_7'),
        (Decimal('7'),  Decimal('10'), 'domestic_7_to_10'),
        (Decimal('10'), Decimal('15'), 'domestic_10_to_15'),
        (Decimal('15'), Decimal('20'), 'domestic_15_to_20'),
        (Decimal('20'), None,          'domestic_above_20'),
    ]
    FLAT_RATE_FIELDS = {
        'institutional': 'institutional_rate',
        'commercial':    'commercial_rate',
        'industrial':    'industrial_rate',
    }

    gram_panchayat     = models.ForeignKey(GramPanchayat, on_delete=models.PROTECT,
                             related_name='tariffs')

#     ── Domestic (progressive, per KL) ────────────────────────
    domestic_up_to_7   = models.DecimalField(max_digits=10, decimal_places=2,
                             default=Decimal('0.00'))
    domestic_7_to_10   = models.DecimalField(max_digits=10, decimal_places=2,
                             default=Decimal('0.00'))
    domestic_10_to_15  = models.DecimalField(max_digits=10, decimal_places=2,
                             default=Decimal('0.00'))
    domestic_15_to_20  = models.DecimalField(max_digits=10, decimal_places=2,
                             default=Decimal('0.00'))
    domestic_above_20  = models.DecimalField(max_digits=10, decimal_places=2,
                             default=Decimal('0.00'))

#     ── Non-domestic (flat, per KL) ───────────────────────────
    institutional_rate = models.DecimalField(max_digits=10, decimal_places=2,
                             default=Decimal('0.00'),
                             help_text='Public / private institutions')
    commercial_rate    = models.DecimalField(max_digits=10, decimal_places=2,
                             default=Decimal('0.00'))
    industrial_rate    = models.DecimalField(max_digits=10, decimal_places=2,
                             default=Decimal('0.00'))

    effective_date     = models.DateField(default=timezone.localdate)
    is_active          = models.BooleanField(default=True)
    approved_by        = models.CharField(max_length=100, blank=True)
    resolution         = models.CharField(max_length=50, blank=True,
                             help_text='Gram Sabha resolution number')
    created_at         = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-effective_date', '-id']

    def __str__(self):
        state = 'active' if self.is_active else 'superseded'
        return f'{self.gram_panchayat} | from {self.effective_date} | {state}'

    def domestic_brackets(self):
        """Ordered (lower, upper, rate) triples; upper is None for the last bracket."""
        return [(lower, upper, getattr(self, field))
                for lower, upper, field in self.DOMESTIC_BRACKETS]

    def flat_rate(self, usage_type):
        return getattr(self, self.FLAT_RATE_FIELDS[usage_type])


# ═══════════════════════════════════════════════════════════
#   MODEL 3 — House  (billable water connection)
# ═══════════════════════════════════════════════════════════
class House(models.Model):
    RESIDENTIAL   = 'residential'
    INSTITUTIONAL = 'institutional'
    COMMERCIAL    = 'commercial'
    INDUSTRIAL    = 'industrial'
    USAGE_TYPE_CHOICES = [
        (RESIDENTIAL,   'Residential / Domestic'),
        (INSTITUTIONAL, 'Public / Private Institution'),
        (COMMERCIAL,    'Commercial Enterprise'),
        (INDUSTRIAL,    'Industrial Enterprise'),
    ]

    gram_panchayat     = models.ForeignKey(GramPanchayat, on_delete=models.PROTECT,
                             related_name='houses')
    village            = models.CharField(max_length=100, blank=True)

#     ── Owner ─────────────────────────────────────────────────
    owner_name         = models.CharField(max_length=150)
    aadhaar_number     = models.CharField(max_length=12, blank=True)
    mobile_number      = models.CharField(max_length=15, blank=True)
    address            = models.TextField(blank=True)

#     ── Connection ────────────────────────────────────────────
    water_meter_number = models.CharField(max_length=50)
    sequence_number    = models.CharField(max_length=20, blank=True)
    property_number    = models.CharField(max_length=50, blank=True)
    usage_type         = models.CharField(max_length=20, choices=USAGE_TYPE_CHOICES,
                             default=RESIDENTIAL)
    previous_meter_reading = models.DecimalField(max_digits=12, decimal_places=2,
                             default=Decimal('0.00'),
                             help_text='Reading at the last generated bill')

    is_active          = models.BooleanField(default=True)
    created_at         = models.DateTimeField(auto_now_add=True)
    updated_at         = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['village', 'sequence_number']
        unique_together = ['gram_panchayat', 'water_meter_number']

    def __str__(self):
        return f'{self.water_meter_number} - {self.owner_name}'


# ═══════════════════════════════════════════════════════════
#   MODEL 4 — MeterReading  (field reading awaiting billing)
# ═══════════════════════════════════════════════════════════
class MeterReading(models.Model):
    house           = models.ForeignKey(House, on_delete=models.CASCADE,
                          related_name='meter_readings')
    month           = models.CharField(max_length=20,
                          help_text='Billing month name, e.g. January')
    year            = models.PositiveIntegerField()
    current_reading = models.DecimalField(max_digits=12, decimal_places=2)
    reading_date    = models.DateField(default=timezone.localdate)
    reader_name     = models.CharField(max_length=100, blank=True)
    remarks         = models.TextField(blank=True)
    created_at      = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-year', '-created_at']
        unique_together = ['house', 'month', 'year']

    def __str__(self):
        return f'{self.house.water_meter_number} | {self.month} {self.year} | {self.current_reading}'


# ═══════════════════════════════════════════════════════════
#   MODEL 5 — WaterBill  (one billing cycle for a house)
# ═══════════════════════════════════════════════════════════
class WaterBill(models.Model):
    PENDING = 'pending'
    PARTIAL = 'partial'
    PAID    = 'paid'
    STATUS_CHOICES = [
        (PENDING, 'Pending'),
        (PARTIAL, 'Partially Paid'),
        (PAID,    'Paid in Full'),
    ]
    UNSETTLED = [PENDING, PARTIAL]

    bill_number      = models.CharField(max_length=20)
    gram_panchayat   = models.ForeignKey(GramPanchayat, on_delete=models.PROTECT,
                           related_name='bills')
    house            = models.ForeignKey(House, on_delete=models.CASCADE,
                           related_name='bills')
    meter_reading    = models.OneToOneField(MeterReading, on_delete=models.SET_NULL,
                           null=True, blank=True, related_name='bill')
    month            = models.CharField(max_length=20)
    year             = models.PositiveIntegerField()
    due_date         = models.DateField()

#     ── Reading ───────────────────────────────────────────────
    previous_reading = models.DecimalField(max_digits=12, decimal_places=2)
    current_reading  = models.DecimalField(max_digits=12, decimal_places=2)
    total_usage      = models.DecimalField(max_digits=12, decimal_places=2)

#     ── Charge Breakdown ──────────────────────────────────────
    current_demand   = models.DecimalField(max_digits=12, decimal_places=2)
    arrears          = models.DecimalField(max_digits=12, decimal_places=2,
                           default=Decimal('0.00'),
                           help_text='Unpaid balance carried from previous bills')
    interest         = models.DecimalField(max_digits=12, decimal_places=2,
                           default=Decimal('0.00'))
    others           = models.DecimalField(max_digits=12, decimal_places=2,
                           default=Decimal('0.00'))

#     ── Totals & Payment ──────────────────────────────────────
    total_amount     = models.DecimalField(max_digits=12, decimal_places=2)
    paid_amount      = models.DecimalField(max_digits=12, decimal_places=2,
                           default=Decimal('0.00'))
    remaining_amount = models.DecimalField(max_digits=12, decimal_places=2)
    status           = models.CharField(max_length=10, choices=STATUS_CHOICES,
                           default=PENDING)
    payment_mode     = models.CharField(max_length=20, null=True, blank=True)
    transaction_id   = models.CharField(max_length=100, null=True, blank=True)
    paid_date        = models.DateTimeField(null=True, blank=True)

#     ── Audit ─────────────────────────────────────────────────
    generated_by     = models.CharField(max_length=100, default='System')
    created_at       = models.DateTimeField(auto_now_add=True)
    updated_at       = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-year', '-created_at']
        unique_together = [
            ['gram_panchayat', 'bill_number'],
            ['house', 'month', 'year'],
        ]

    def __str__(self):
        return f'{self.bill_number} | {self.month} {self.year} | Rs.{self.total_amount}'

    def recompute_balance(self):
        """Derive remaining amount and status from total and paid amounts."""
        self.remaining_amount = self.total_amount - self.paid_amount
        if   self.remaining_amount == 0:  self.status = self.PAID
        elif self.paid_amount > 0:        self.status = self.PARTIAL
        else:                             self.status = self.PENDING


# ═══════════════════════════════════════════════════════════
#   MODEL 6 — Payment  (append-only payment event)
# ═══════════════════════════════════════════════════════════
class Payment(models.Model):
    CASH      = 'cash'
    UPI       = 'upi'
    ONLINE    = 'online'
    PAY_LATER = 'pay_later'
    MODE_CHOICES = [
        (CASH,      'Cash'),
        (UPI,       'UPI'),
        (ONLINE,    'Online'),
        (PAY_LATER, 'Pay Later'),
    ]
    REFERENCE_REQUIRED = [UPI, ONLINE]

    bill            = models.ForeignKey(WaterBill, on_delete=models.SET_NULL,
                          null=True, blank=True, related_name='payments')
    bill_number     = models.CharField(max_length=20)
    amount          = models.DecimalField(max_digits=12, decimal_places=2)
    payment_mode    = models.CharField(max_length=20, choices=MODE_CHOICES)
    transaction_id  = models.CharField(max_length=100, null=True, blank=True)
    collected_by    = models.CharField(max_length=100)
    remarks         = models.TextField(blank=True)
    payment_date    = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ['-payment_date', '-id']

    def __str__(self):
        return f'{self.bill_number} | {self.get_payment_mode_display()} | Rs.{self.amount}'

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError('Payments are immutable once recorded.')
        super().save(*args, **kwargs)
