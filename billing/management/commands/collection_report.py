from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone

from billing.models import GramPanchayat
from billing.services import collection_summary


class Command(BaseCommand):
    help = 'Print billed, collected and outstanding totals for a billing cycle'

    def add_arguments(self, parser):
        parser.add_argument('gram_panchayat', type=int, help='Gram Panchayat id')
        parser.add_argument('--month', type=str, help='Billing month name (default: current month)')
        parser.add_argument('--year', type=int, help='Billing year (default: current year)')

    def handle(self, *args, **options):
        try:
            gram_panchayat = GramPanchayat.objects.get(pk=options['gram_panchayat'])
        except GramPanchayat.DoesNotExist:
            raise CommandError(f'Gram Panchayat {options["gram_panchayat"]} not found')

        today   = timezone.localdate()
        month   = options['month'] or today.strftime('%B')
        year    = options['year'] or today.year
        summary = collection_summary(gram_panchayat, month, year)

        self.stdout.write(f'{gram_panchayat} — {month} {year}')
        self.stdout.write(f'  Bills:        {summary["bills"]} '
                          f'(paid {summary["paid"]}, partial {summary["partial"]}, '
                          f'pending {summary["pending"]})')
        self.stdout.write(f'  Billed:       Rs.{summary["billed"]}')
        self.stdout.write(f'  Collected:    Rs.{summary["collected"]}')
        self.stdout.write(f'  Outstanding:  Rs.{summary["outstanding"]}')
