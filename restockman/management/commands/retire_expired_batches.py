"""
Management command to retire expired batches.

Usage:
    python manage.py retire_expired_batches --user admin
    python manage.py retire_expired_batches --user admin --branch main --reason "Monthly sweep"
    python manage.py retire_expired_batches --dry-run
"""

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError

from restockman import ledger
from restockman.exceptions import RestockError
from restockman.models import Branch


class Command(BaseCommand):
    """Retire expired batches command."""

    help = 'Retires active batches that are past their expiration date'

    def add_arguments(self, parser):
        parser.add_argument(
            '--user',
            help='Username recorded as the actor (required unless --dry-run)',
        )
        parser.add_argument(
            '--branch',
            help='Only batches held at this branch code',
        )
        parser.add_argument(
            '--reason',
            default='Expired batch removed',
            help='Notes recorded on each retire movement',
        )
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show what would be retired without changing anything',
        )

    def handle(self, *args, **options):
        branch = None
        if options['branch']:
            try:
                branch = Branch.objects.get(code=options['branch'])
            except Branch.DoesNotExist:
                raise CommandError(f"Unknown branch '{options['branch']}'")

        entries = ledger.expired(branch=branch)

        if options['dry_run']:
            for entry in entries:
                self.stdout.write(
                    f'{entry.batch.batch_number}: {entry.batch.quantity} unit(s), '
                    f'expired {entry.batch.expiration_date.isoformat()}'
                )
            self.stdout.write(f'{len(entries)} batch(es) would be retired')
            return

        if not options['user']:
            raise CommandError('--user is required to retire batches')
        User = get_user_model()
        try:
            user = User.objects.get(**{User.USERNAME_FIELD: options['user']})
        except User.DoesNotExist:
            raise CommandError(f"Unknown user '{options['user']}'")

        retired = 0
        for entry in entries:
            try:
                ledger.retire(entry.batch, user=user, reason=options['reason'])
            except RestockError as e:
                self.stderr.write(f'{entry.batch.batch_number}: {e}')
                continue
            retired += 1

        self.stdout.write(self.style.SUCCESS(f'{retired} batch(es) retired'))
