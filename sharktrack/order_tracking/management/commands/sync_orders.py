from django.conf import settings
from django.core.management import BaseCommand, CommandError

from order_tracking.adapters.order_source import get_order_source
from order_tracking.exceptions import BusinessException
from order_tracking.services import OrderSyncService, trailing_window
from order_tracking.services.status_registry import load_registry


class Command(BaseCommand):
    help = 'Synchronize orders from the commerce platform over the trailing N days.'

    def add_arguments(self, parser):
        parser.add_argument(
            '--days', type=int, default=settings.ORDER_SYNC_WINDOW_DAYS,
            help='Size of the trailing window in days.',
        )

    def handle(self, *args, **options):
        days = options['days']
        if days <= 0:
            raise CommandError('--days must be a positive number')

        try:
            registry = load_registry()
            created_at_min, created_at_max = trailing_window(days)
            summary = OrderSyncService.sync_window(created_at_min, created_at_max, get_order_source(), registry)
        except BusinessException as e:
            raise CommandError(f'[{e.code}] {e.message}') from e

        self.stdout.write(self.style.SUCCESS(
            f'{summary.processed} orders processed: {summary.created} created, '
            f'{summary.updated} updated, {summary.unchanged} unchanged, {summary.failed} failed '
            f'({summary.fetched} fetched over {summary.pages} pages)'
        ))
        if summary.stopped_at_page:
            self.stdout.write(self.style.WARNING(
                f'Paging stopped at page {summary.stopped_at_page}: {summary.stop_reason}'
            ))
