"""Management command to repair drift between quotas and stored files."""

import logging
from typing import Any

from django.core.management.base import BaseCommand, CommandError
from django.db.models import Sum

from server.apps.files.exceptions import UserNotFoundError
from server.apps.files.logic.quota_operations import recalculate_usage
from server.apps.files.models import UserQuota

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    """Recompute accounted usage from file records.

    Compensations after a failed upload or delete are best-effort. When
    one fails, ``storage_used`` no longer matches the sum of file sizes.
    This command finds such quotas and resets them.
    """

    help = 'Reconcile accounted storage usage with stored file sizes'

    def add_arguments(self, parser: Any) -> None:
        """Add command line arguments.

        Args:
            parser: Argument parser.
        """
        parser.add_argument(
            '--user',
            type=int,
            dest='user_id',
            help='Only reconcile the user with this ID',
        )
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show drift without fixing it',
        )

    def handle(self, *args: Any, **options: Any) -> None:
        """Execute the reconcile command.

        Args:
            args: Positional arguments (unused).
            options: Command options.

        Raises:
            CommandError: If ``--user`` names a user without a quota.
        """
        dry_run = options['dry_run']
        user_id = options['user_id']

        quotas = UserQuota.objects.annotate(
            actual_bytes=Sum('user__files__size_bytes'),
        ).order_by('user_id')
        if user_id is not None:
            quotas = quotas.filter(user_id=user_id)
            if not quotas.exists():
                raise CommandError(f'No quota for user ID={user_id}')

        drifted = 0
        failed = 0

        for quota in quotas:
            actual = quota.actual_bytes or 0
            if actual == quota.storage_used:
                continue

            drifted += 1
            self.stdout.write(
                f'User {quota.user_id}: accounted {quota.storage_used}, '
                f'stored {actual}',
            )
            if dry_run:
                continue

            try:
                recalculate_usage(quota.user_id)
            except UserNotFoundError as exc:
                # Account removed while the command was running
                self.stderr.write(f'Failed to reconcile {quota.user_id}: {exc}')
                logger.warning('Quota vanished for user ID=%d', quota.user_id)
                failed += 1

        if dry_run:
            self.stdout.write(
                self.style.SUCCESS(f'Would reconcile {drifted} quotas'),
            )
        else:
            self.stdout.write(
                self.style.SUCCESS(
                    f'Reconciled {drifted - failed} quotas, {failed} failed',
                ),
            )
