"""Business logic for file operations.

Upload is a pipeline of independent side effects:

    spool -> reserve quota -> write blob -> create record

Quota is reserved before the blob is written so that accounted usage never
under-counts stored bytes. Every failure after the reservation undoes the
steps already applied, in reverse order, before the error is raised.
Compensations are best-effort: their own failures are logged, never raised,
and leave drift that ``recalculate_usage`` can repair.
"""

import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, BinaryIO, Final, final

from django.contrib.auth import get_user_model
from django.core.exceptions import SuspiciousFileOperation
from django.core.files.base import File as DjangoFile
from django.core.files.storage import default_storage
from django.db import DatabaseError, IntegrityError, transaction

from server.apps.files.exceptions import (
    BlobStorageError,
    DuplicateFileError,
    FileRecordNotFoundError,
    MetadataError,
    UserNotFoundError,
)
from server.apps.files.infrastructure.metadata import (
    build_storage_path,
    spool_content,
    validate_file_name,
)
from server.apps.files.logic.quota_operations import release, reserve
from server.apps.files.models import File

if TYPE_CHECKING:
    from django.contrib.auth.models import AbstractBaseUser

    from server.apps.files.infrastructure.storage import BlobStorageMixin

logger = logging.getLogger(__name__)

_FIRST_PAGE: Final = 1


@final
@dataclass(frozen=True, slots=True)
class FilePage:
    """One page of a user's files, newest first."""

    files: list[File]
    total_items: int
    total_pages: int
    current_page: int
    page_size: int

    @property
    def has_next(self) -> bool:
        """Whether a later page exists."""
        return self.current_page < self.total_pages

    @property
    def has_prev(self) -> bool:
        """Whether an earlier page exists."""
        return self.current_page > _FIRST_PAGE


@final
class FileService:
    """Upload, download, list and delete files for a user.

    Constructed with the blob store it writes to. The metadata store is
    the Django ORM; the quota ledger is ``quota_operations``.
    """

    def __init__(self, storage: 'BlobStorageMixin') -> None:
        """Initialize the service.

        Args:
            storage: Blob store backend for file content.
        """
        self._storage = storage

    def upload_file(
        self,
        user_id: int,
        file_name: str,
        content: BinaryIO,
    ) -> File:
        """Store file content and create its record.

        Args:
            user_id: Owner's user ID.
            file_name: Client supplied name, unique per owner.
            content: Single-pass readable stream with the file content.

        Returns:
            Created File instance.

        Raises:
            ValidationError: If the file name is invalid.
            UserNotFoundError: If the owner does not exist.
            DuplicateFileError: If the owner already has a file with this name.
            QuotaExceededError: If the file does not fit in the quota.
            BlobStorageError: If the content cannot be read or written.
            MetadataError: If the quota or the file record cannot be written.
        """
        validate_file_name(file_name)
        username = self._get_user(user_id).get_username()

        if File.objects.filter(user_id=user_id, name=file_name).exists():
            logger.warning(
                'Duplicate file name for user ID=%d: %s',
                user_id,
                file_name,
            )
            raise DuplicateFileError

        try:
            storage_path = build_storage_path(username, file_name)
            self._storage.ensure_namespace(username)
            spool, file_size = spool_content(content)
        except (OSError, SuspiciousFileOperation) as error:
            logger.exception('Failed to spool upload for user ID=%d', user_id)
            raise BlobStorageError(f'Failed to read upload: {error}') from error

        with spool:
            logger.info(
                'Spooled upload %s: %d bytes',
                storage_path,
                file_size,
            )
            self._reserve(user_id, file_size)
            saved_name = self._write_blob(
                user_id,
                storage_path,
                spool,
                file_size,
            )

        return self._create_record(user_id, file_name, saved_name, file_size)

    def delete_file(self, file_id: int, user_id: int) -> None:
        """Delete file content, reclaim its quota and remove its record.

        Content is removed first. A quota failure afterwards is raised
        without restoring the content.

        Args:
            file_id: ID of file to delete.
            user_id: Owner's user ID.

        Raises:
            FileRecordNotFoundError: If no such file belongs to the user.
            BlobStorageError: If the content exists but cannot be deleted.
            UserNotFoundError: If the owner's quota record is gone.
            MetadataError: If the quota or record update fails.
        """
        file_instance = self.get_file(file_id, user_id)
        storage_name = file_instance.blob.name
        logger.info(
            'Deleting file: ID=%d, path=%s',
            file_id,
            storage_name,
        )

        try:
            self._storage.remove(storage_name)
        except Exception as error:
            raise BlobStorageError(
                f'Failed to delete file: {storage_name}',
            ) from error

        try:
            release(user_id, file_instance.size_bytes)
        except DatabaseError as error:
            logger.exception('Failed to release quota for file ID=%d', file_id)
            raise MetadataError from error

        try:
            with transaction.atomic():
                deleted, _ = File.objects.filter(
                    id=file_id,
                    user_id=user_id,
                ).delete()
        except DatabaseError as error:
            logger.exception('Failed to delete file from database: ID=%d', file_id)
            raise MetadataError from error

        if not deleted:
            # Removed concurrently between lookup and delete
            raise FileRecordNotFoundError(f'File ID={file_id} already deleted')

        logger.info('File record deleted from database: ID=%d', file_id)

    def open_file(self, file_id: int, user_id: int) -> tuple[str, BinaryIO]:
        """Open file content for download.

        Args:
            file_id: ID of file to open.
            user_id: Owner's user ID.

        Returns:
            Tuple of (display name, readable binary handle).

        Raises:
            FileRecordNotFoundError: If no such file belongs to the user.
            BlobStorageError: If the content cannot be opened.
        """
        file_instance = self.get_file(file_id, user_id)

        try:
            handle = self._storage.open(file_instance.blob.name, 'rb')
        except Exception as error:
            logger.exception(
                'Failed to open file: ID=%d, path=%s',
                file_id,
                file_instance.blob.name,
            )
            raise BlobStorageError(
                f'Failed to open file: ID={file_id}',
            ) from error

        return file_instance.name, handle

    def get_file(self, file_id: int, user_id: int) -> File:
        """Get a file owned by the user.

        Files owned by someone else are reported as missing.

        Args:
            file_id: ID of file.
            user_id: Owner's user ID.

        Returns:
            File instance.

        Raises:
            FileRecordNotFoundError: If no such file belongs to the user.
        """
        try:
            return File.objects.get(id=file_id, user_id=user_id)
        except File.DoesNotExist as error:
            logger.debug('File not found: ID=%d, user ID=%d', file_id, user_id)
            raise FileRecordNotFoundError(
                f'File ID={file_id} not found for user ID={user_id}',
            ) from error

    def list_files(self, user_id: int, page: int, page_size: int) -> FilePage:
        """List one page of the user's files, newest first.

        Pages past the end are empty.

        Args:
            user_id: Owner's user ID.
            page: 1-based page number.
            page_size: Files per page.

        Returns:
            FilePage with the files and pagination counters.
        """
        files = File.objects.filter(user_id=user_id)
        total_items = files.count()
        offset = (page - 1) * page_size

        return FilePage(
            files=list(files[offset:offset + page_size]),
            total_items=total_items,
            total_pages=math.ceil(total_items / page_size),
            current_page=page,
            page_size=page_size,
        )

    def _get_user(self, user_id: int) -> 'AbstractBaseUser':
        user_model = get_user_model()
        try:
            return user_model.objects.get(pk=user_id)
        except user_model.DoesNotExist as error:
            raise UserNotFoundError(f'User ID={user_id} not found') from error

    def _reserve(self, user_id: int, file_size: int) -> None:
        try:
            reserve(user_id, file_size)
        except DatabaseError as error:
            logger.exception('Failed to reserve quota for user ID=%d', user_id)
            raise MetadataError from error

    def _write_blob(
        self,
        user_id: int,
        storage_path: str,
        spool: BinaryIO,
        file_size: int,
    ) -> str:
        try:
            return self._storage.save(
                storage_path,
                DjangoFile(spool, name=storage_path),
            )
        except Exception as error:
            self._release_reservation(user_id, file_size)
            raise BlobStorageError(
                f'Failed to save file: {storage_path}',
            ) from error

    def _create_record(
        self,
        user_id: int,
        file_name: str,
        saved_name: str,
        file_size: int,
    ) -> File:
        try:
            with transaction.atomic():
                file_instance = File.objects.create(
                    user_id=user_id,
                    name=file_name,
                    blob=saved_name,  # Use actual saved name from storage
                    size_bytes=file_size,
                )
        except DatabaseError as error:
            logger.exception(
                'Database transaction failed, rolling back upload: %s',
                saved_name,
            )
            self._release_reservation(user_id, file_size)
            self._storage.rollback_upload(saved_name)
            if isinstance(error, IntegrityError):
                # Lost a race with a concurrent upload of the same name
                raise DuplicateFileError from error
            raise MetadataError from error

        logger.info(
            'File record created in database: %s (ID: %d)',
            saved_name,
            file_instance.id,
        )
        return file_instance

    def _release_reservation(self, user_id: int, file_size: int) -> None:
        try:
            release(user_id, file_size)
        except Exception:
            # Ledger now over-counts; recalculate_usage repairs it
            logger.exception(
                'Failed to release %d bytes for user ID=%d',
                file_size,
                user_id,
            )


def get_file_service() -> FileService:
    """Build a FileService on the configured default storage.

    Returns:
        FileService writing to ``default_storage``.
    """
    return FileService(storage=default_storage)  # type: ignore[arg-type]
