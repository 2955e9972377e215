import logging
from datetime import timedelta

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone

from billing.exceptions import BillingError
from billing.models import GramPanchayat, MeterReading
from billing.services import generate_bill

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = 'Generate bills for all meter readings of a billing cycle that have no bill yet'

    def add_arguments(self, parser):
        parser.add_argument('gram_panchayat', type=int,
                            help='Gram Panchayat id')
        parser.add_argument('--month', type=str,
                            help='Billing month name, e.g. January (default: current month)')
        parser.add_argument('--year', type=int,
                            help='Billing year (default: current year)')
        parser.add_argument('--due-days', type=int, default=settings.BILLING_DEFAULT_DUE_DAYS,
                            help='Days from today to due date')

    def handle(self, *args, **options):
        try:
            gram_panchayat = GramPanchayat.objects.get(pk=options['gram_panchayat'], is_active=True)
        except GramPanchayat.DoesNotExist:
            raise CommandError(f'Gram Panchayat {options["gram_panchayat"]} not found')

        today    = timezone.localdate()
        month    = options['month'] or today.strftime('%B')
        year     = options['year'] or today.year
        due_date = today + timedelta(days=options['due_days'])

        readings_without_bill = MeterReading.objects.filter(
            house__gram_panchayat = gram_panchayat,
            month = month,
            year  = year,
            bill__isnull = True,
        ).select_related('house').order_by('created_at')

        count = 0
        errors = 0
        for reading in readings_without_bill:
            try:
                bill = generate_bill(
                    gram_panchayat  = gram_panchayat,
                    house_id        = reading.house_id,
                    current_reading = reading.current_reading,
                    month           = month,
                    year            = year,
                    due_date        = due_date,
                    generated_by    = 'Management Command',
                    meter_reading   = reading,
                )
                count += 1
                self.stdout.write(
                    self.style.SUCCESS(
                        f'Bill generated: {bill.bill_number} {reading.house} — Rs.{bill.total_amount}'
                    )
                )
            except BillingError as e:
                errors += 1
                logger.warning('Billing failed for reading %s: %s %s', reading.pk, e.code, e)
                self.stdout.write(
                    self.style.ERROR(f'ERROR for {reading.house}: {e.code}: {e}')
                )
            except Exception as e:
                errors += 1
                logger.exception('Unexpected error billing reading %s', reading.pk)
                self.stdout.write(
                    self.style.ERROR(f'ERROR for {reading.house}: {e}')
                )

        self.stdout.write(self.style.SUCCESS(
            f'Done. {count} bills generated. {errors} errors.'
        ))
