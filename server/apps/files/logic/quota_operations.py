"""Business logic for storage quota operations.

The quota ledger. ``storage_used`` only changes through ``reserve``, which
performs the limit check and the increment in one conditional UPDATE so
that concurrent reservations for the same user cannot overshoot the limit.
"""

import logging
from dataclasses import dataclass
from typing import Final, final

from django.db import transaction
from django.db.models import BigIntegerField, F, Sum, Value  # noqa: WPS347
from django.db.models.functions import Greatest
from django.utils import timezone

from server.apps.files.exceptions import QuotaExceededError, UserNotFoundError
from server.apps.files.models import File, UserQuota

# Field name constants to avoid string literal over-use
_USED_FIELD: Final = 'storage_used'  # noqa: WPS226
_LIMIT_FIELD: Final = 'storage_limit'

logger = logging.getLogger(__name__)


@final
@dataclass(frozen=True, slots=True)
class StorageSummary:
    """Snapshot of a user's storage accounting, in bytes."""

    total: int
    used: int
    remaining: int


def get_quota(user_id: int) -> UserQuota:
    """Get the quota record for a user.

    Args:
        user_id: Owner's user ID.

    Returns:
        UserQuota instance.

    Raises:
        UserNotFoundError: If the user has no quota record.
    """
    try:
        return UserQuota.objects.get(user_id=user_id)
    except UserQuota.DoesNotExist as error:
        raise UserNotFoundError(f'No quota for user ID={user_id}') from error


def reserve(user_id: int, delta_bytes: int) -> int:
    """Atomically add ``delta_bytes`` to the user's accounted usage.

    Positive deltas are rejected when the result would exceed the limit.
    Negative deltas always succeed; usage is clamped at 0 when more is
    reclaimed than was recorded.

    Args:
        user_id: Owner's user ID.
        delta_bytes: Bytes to reserve (positive) or reclaim (negative).

    Returns:
        New ``storage_used`` value in bytes.

    Raises:
        UserNotFoundError: If the user has no quota record.
        QuotaExceededError: If a positive delta would exceed the limit.
    """
    with transaction.atomic():
        quotas = UserQuota.objects.filter(user_id=user_id)

        if delta_bytes > 0:
            # Check and increment in a single statement
            updated = quotas.filter(
                storage_used__lte=F(_LIMIT_FIELD) - delta_bytes,
            ).update(
                storage_used=F(_USED_FIELD) + delta_bytes,
                updated_at=timezone.now(),
            )
        else:
            updated = quotas.update(
                storage_used=Greatest(
                    F(_USED_FIELD) + delta_bytes,
                    Value(0),
                    output_field=BigIntegerField(),
                ),
                updated_at=timezone.now(),
            )

        if updated == 0:
            quota = get_quota(user_id)
            logger.warning(
                'Quota exceeded for user ID=%d: need %d, have %d available',
                user_id,
                delta_bytes,
                quota.available_bytes(),
            )
            raise QuotaExceededError(
                storage_limit=quota.storage_limit,
                storage_used=quota.storage_used,
                required_bytes=delta_bytes,
            )

        new_usage = quotas.values_list(_USED_FIELD, flat=True).get()

    logger.debug(
        'Reserved %d bytes for user ID=%d (new: %d)',
        delta_bytes,
        user_id,
        new_usage,
    )
    return new_usage


def release(user_id: int, size_bytes: int) -> int:
    """Reclaim ``size_bytes`` from the user's accounted usage.

    Args:
        user_id: Owner's user ID.
        size_bytes: Bytes to give back.

    Returns:
        New ``storage_used`` value in bytes.
    """
    return reserve(user_id, -size_bytes)


def get_storage_summary(user_id: int) -> StorageSummary:
    """Get total, used and remaining storage for a user.

    Args:
        user_id: Owner's user ID.

    Returns:
        StorageSummary with byte counts.
    """
    quota = get_quota(user_id)
    return StorageSummary(
        total=quota.storage_limit,
        used=quota.storage_used,
        remaining=quota.available_bytes(),
    )


def recalculate_usage(user_id: int) -> int:
    """Recalculate user's storage usage from actual files.

    Repairs drift between the ledger and the file records, for example
    after a compensation that could not be applied.

    Args:
        user_id: Owner's user ID.

    Returns:
        New calculated usage in bytes.

    Raises:
        UserNotFoundError: If the user has no quota record.
    """
    total = File.objects.filter(user_id=user_id).aggregate(
        total=Sum('size_bytes'),
    )['total'] or 0

    with transaction.atomic():
        try:
            quota = UserQuota.objects.select_for_update().get(user_id=user_id)
        except UserQuota.DoesNotExist as error:
            raise UserNotFoundError(
                f'No quota for user ID={user_id}',
            ) from error
        old_usage = quota.storage_used
        quota.storage_used = total
        quota.save(update_fields=[_USED_FIELD, 'updated_at'])

    logger.info(
        'Recalculated usage for user ID=%d: %d -> %d bytes',
        user_id,
        old_usage,
        total,
    )

    return total
