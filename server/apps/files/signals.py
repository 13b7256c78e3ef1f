"""Signal handlers for files app."""

import logging

from django.conf import settings
from django.db.models.signals import post_save
from django.dispatch import receiver

from server.apps.files.models import UserQuota

logger = logging.getLogger(__name__)


@receiver(post_save, sender=settings.AUTH_USER_MODEL)
def create_user_quota(
    sender: type,
    instance: object,
    created: bool,
    **kwargs: object,
) -> None:
    """Create the storage quota when a user account is created.

    The limit is taken from ``STORAGE_MAX_PER_USER`` at creation time
    and is not changed afterwards.

    Args:
        sender: The user model class.
        instance: The user instance that was saved.
        created: True if a new row was inserted.
        **kwargs: Additional signal arguments.
    """
    if not created or kwargs.get('raw'):
        return

    quota = UserQuota.objects.create(
        user=instance,
        storage_limit=settings.STORAGE_MAX_PER_USER,
    )
    logger.info(
        'Created quota for user %s: %d bytes',
        quota.user_id,
        quota.storage_limit,
    )
