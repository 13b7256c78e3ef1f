"""Blob store backends for user file content.

Each user owns a namespace keyed by username. The filesystem backend
maps it to a directory, the S3 backend to a key prefix.
"""

import logging
from pathlib import Path
from typing import Any, final, override

from django.core.files.storage import FileSystemStorage, Storage
from storages.backends.s3 import S3Storage

logger = logging.getLogger(__name__)


class BlobStorageMixin(Storage):
    """Blob store behaviour shared by all backends.

    Adds to a Django storage backend:
    - Logging around writes and deletes
    - Idempotent removal (missing content is not an error)
    - Best-effort rollback of uploads for failed metadata writes
    """

    def ensure_namespace(self, username: str) -> None:
        """Create the owner's namespace if the backend needs one.

        Args:
            username: Namespace key.
        """

    @override
    def save(  # noqa: WPS211
        self,
        name: str | None,
        content: Any,
        max_length: int | None = None,
    ) -> str:
        """Save file content with error handling and logging.

        Args:
            name: Storage path for the file.
            content: File content (file-like object).
            max_length: Optional maximum length for the filename.

        Returns:
            Actual storage path used (may differ from name if conflicts).

        Raises:
            Exception: If the write fails.
        """
        try:
            logger.info('Writing file to storage: %s', name)
            saved_name = super().save(name, content, max_length)
            logger.info('Successfully wrote file: %s', saved_name)
        except Exception:
            logger.exception('Failed to write file to storage: %s', name)
            raise
        else:
            return saved_name

    @override
    def delete(self, name: str) -> None:
        """Delete file with error handling and logging.

        Args:
            name: Storage path of file to delete.

        Raises:
            Exception: If the delete fails.
        """
        try:
            logger.info('Deleting file from storage: %s', name)
            super().delete(name)
            logger.info('Successfully deleted file: %s', name)
        except Exception:
            logger.exception('Failed to delete file from storage: %s', name)
            raise

    def remove(self, name: str) -> None:
        """Delete file content, treating missing content as success.

        Args:
            name: Storage path of file to delete.

        Raises:
            Exception: If the file exists but cannot be deleted.
        """
        if not self.exists(name):
            logger.warning(
                'File not found in storage (already deleted?): %s',
                name,
            )
            return
        self.delete(name)

    def rollback_upload(self, name: str) -> None:
        """Delete uploaded file for DB transaction rollback.

        This method is called when the metadata write fails after the
        content has been stored. It attempts to delete the file to
        maintain consistency.

        This is a best-effort operation - if deletion fails, the error
        is logged but not raised.

        Args:
            name: Storage path of file to delete.
        """
        try:
            logger.warning('Rolling back upload, deleting file: %s', name)
            self.remove(name)
            logger.info('Successfully rolled back file upload: %s', name)
        except Exception:
            # The file stays in storage without a record
            logger.exception(
                'Failed to rollback upload, orphaned file: %s',
                name,
            )


@final
class FileSystemBlobStorage(BlobStorageMixin, FileSystemStorage):
    """Local filesystem blob store, one directory per user."""

    @override
    def ensure_namespace(self, username: str) -> None:
        """Create the user's directory (idempotent).

        Args:
            username: Namespace key.
        """
        user_dir = Path(self.path(username))
        user_dir.mkdir(parents=True, exist_ok=True)
        logger.debug('Namespace ready: %s', user_dir)


@final
class S3BlobStorage(BlobStorageMixin, S3Storage):
    """S3-compatible blob store.

    Namespaces are key prefixes, which S3 creates implicitly on write.
    """
