"""Database models for files app."""

from typing import Final, final, override

from django.conf import settings
from django.db import models

# Constants for field max lengths
_NAME_MAX_LENGTH: Final = 255
_BLOB_MAX_LENGTH: Final = 512  # username + '/' + name + storage suffix


@final
class File(models.Model):
    """File uploaded by a user.

    Content lives in the blob store under ``{username}/{name}``. The
    storage location is internal and never leaves the service; clients
    address files by ``id`` and see only ``name`` and ``size_bytes``.

    Records are created by a successful upload and removed by delete.
    They are never renamed or rewritten in place.
    """

    # Owner relationship
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='files',
        db_index=True,
    )

    name = models.CharField(
        max_length=_NAME_MAX_LENGTH,
        help_text='Display name, unique per owner',
    )

    # upload_to='' means we control the full path
    blob = models.FileField(
        upload_to='',
        max_length=_BLOB_MAX_LENGTH,
        help_text='Internal storage name: {username}/{name}',
    )

    size_bytes = models.BigIntegerField(
        help_text='Bytes actually persisted in the blob store',
    )

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        """Model metadata."""

        verbose_name = 'File'  # type: ignore[mutable-override]
        verbose_name_plural = 'Files'  # type: ignore[mutable-override]
        ordering = ['-created_at', '-id']

        indexes = [
            # Optimize paginated listing queries
            models.Index(
                fields=['user', '-created_at'],
                name='files_user_recent_idx',
            ),
        ]

        constraints = [
            # Prevent duplicate file names for the same user
            models.UniqueConstraint(
                fields=['user', 'name'],
                name='files_user_name_unique',
            ),
        ]

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.user_id}:{self.name}'


@final
class UserQuota(models.Model):
    """Storage quota for a user.

    Tracks user's storage limit and accounted usage. ``storage_limit`` is
    fixed when the account is created. ``storage_used`` is changed only
    through ``logic.quota_operations.reserve`` and always stays within
    ``[0, storage_limit]`` after a committed operation.
    """

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='quota',
        primary_key=True,
    )

    storage_limit = models.BigIntegerField(
        help_text='Storage quota limit in bytes',
    )

    storage_used = models.BigIntegerField(
        default=0,
        help_text='Currently accounted storage in bytes',
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        """Model metadata."""

        verbose_name = 'User Quota'  # type: ignore[mutable-override]
        verbose_name_plural = 'User Quotas'  # type: ignore[mutable-override]

        constraints = [
            models.CheckConstraint(
                condition=models.Q(storage_limit__gte=0),
                name='storage_limit_non_negative',
            ),
            models.CheckConstraint(
                condition=models.Q(storage_used__gte=0),
                name='storage_used_non_negative',
            ),
        ]

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.user_id}: {self.storage_used}/{self.storage_limit}'

    def available_bytes(self) -> int:
        """Get available storage space.

        Returns:
            Available bytes (never negative).
        """
        available = self.storage_limit - self.storage_used
        return max(0, available)
