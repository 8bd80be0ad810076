"""
Management command to compare inventory quantities with their batches.

Usage:
    python manage.py reconcile_inventory
    python manage.py reconcile_inventory --fix
"""

from django.core.management.base import BaseCommand

from restockman import ledger
from restockman.models import InventoryPosition


class Command(BaseCommand):
    """Reconcile inventory command."""

    help = 'Reports (and optionally fixes) positions whose quantity differs from their active batches'

    def add_arguments(self, parser):
        parser.add_argument(
            '--fix',
            action='store_true',
            help='Set each drifting quantity to its batch total',
        )

    def handle(self, *args, **options):
        drifting = 0
        for position in InventoryPosition.objects.select_related('branch').order_by('pk'):
            report = ledger.reconcile(position, fix=options['fix'])
            if report.is_consistent:
                continue
            drifting += 1
            self.stdout.write(
                f'inventory {position.pk} [{position.branch.code}]: '
                f'on hand {report.on_hand}, batches {report.batch_total} ({report.drift:+d})'
            )

        if options['fix']:
            self.stdout.write(self.style.SUCCESS(f'{drifting} position(s) fixed'))
        else:
            self.stdout.write(f'{drifting} position(s) drifting')
