from django.core.management import BaseCommand
from django.db import transaction

from order_tracking.models import Status, DEFAULT_CUSTOMER_LABELS


def seed_statuses(overwrite_labels: bool = False):
    """
    Insert the default status vocabularies.

    Existing rows keep their customer label unless overwrite_labels is set.
    Returns (created, updated).
    """
    created_count = updated_count = 0
    with transaction.atomic():
        for kind, labels in DEFAULT_CUSTOMER_LABELS.items():
            for position, (code, label) in enumerate(labels.items()):
                status, created = Status.objects.get_or_create(
                    kind=kind,
                    internal_code=code,
                    defaults={'customer_label': label, 'position': position},
                )
                if created:
                    created_count += 1
                    continue
                status.position = position
                if overwrite_labels:
                    status.customer_label = label
                status.save(update_fields=['position', 'customer_label'])
                updated_count += 1
    return created_count, updated_count


class Command(BaseCommand):
    help = 'Seed the product and order status vocabularies with their customer labels.'

    def add_arguments(self, parser):
        parser.add_argument(
            '--overwrite-labels', action='store_true',
            help='Replace customer labels of statuses that already exist.',
        )

    def handle(self, *args, **options):
        created, updated = seed_statuses(options['overwrite_labels'])
        self.stdout.write(self.style.SUCCESS(f'Statuses seeded: {created} created, {updated} updated'))
