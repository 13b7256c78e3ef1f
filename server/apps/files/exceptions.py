"""Exceptions for files app.

Every exception carries a client-facing ``message``. The string form
may hold more detail and is meant for logs only.
"""

from typing import ClassVar


class FileStorageError(Exception):
    """Base class for upload, download and delete failures."""

    message: ClassVar[str] = 'File operation failed'

    def __init__(self, detail: str | None = None) -> None:
        """Initialize FileStorageError.

        Args:
            detail: Optional log-oriented detail. Defaults to ``message``.
        """
        super().__init__(detail or self.message)


class UserNotFoundError(FileStorageError):
    """Raised when the owning user (or its quota record) does not exist."""

    message = 'User not found'


class FileRecordNotFoundError(FileStorageError):
    """Raised when a file is absent or owned by someone else."""

    message = 'File not found'


class DuplicateFileError(FileStorageError):
    """Raised when the owner already has a file with the same name."""

    message = 'File with the same name already exists'


class QuotaExceededError(FileStorageError):
    """Raised when upload would exceed user's storage quota."""

    message = 'Storage limit exceeded'

    def __init__(
        self,
        storage_limit: int,
        storage_used: int,
        required_bytes: int,
    ) -> None:
        """Initialize QuotaExceededError.

        Args:
            storage_limit: Total quota limit in bytes.
            storage_used: Currently used bytes.
            required_bytes: Bytes needed for the operation.
        """
        self.storage_limit = storage_limit
        self.storage_used = storage_used
        self.required_bytes = required_bytes

        available = storage_limit - storage_used
        super().__init__(
            f'Quota exceeded: need {required_bytes} bytes, '
            f'only {available} bytes available '
            f'(quota: {storage_limit}, used: {storage_used})',
        )


class BlobStorageError(FileStorageError):
    """Raised when file content cannot be spooled, written or opened."""

    message = 'Failed to store file content'


class MetadataError(FileStorageError):
    """Raised when the file record cannot be written or removed."""

    message = 'Failed to save file metadata'
