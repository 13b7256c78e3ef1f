"""API views for file management operations.

Endpoints (all require a bearer token):
    POST   /api/files                  - Upload a file (multipart field ``file``)
    GET    /api/files                  - List files (``page``, ``page_size``)
    GET    /api/files/{id}             - Get file details
    GET    /api/files/{id}/download    - Download file content
    DELETE /api/files/{id}             - Delete a file
    GET    /api/storage/remaining      - Get remaining storage
"""

import logging
import sys
from typing import Final

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import DatabaseError
from django.http import FileResponse
from rest_framework import status
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from server.apps.files.exceptions import (
    BlobStorageError,
    FileRecordNotFoundError,
    FileStorageError,
    UserNotFoundError,
)
from server.apps.files.logic.file_operations import get_file_service
from server.apps.files.logic.quota_operations import get_storage_summary
from server.apps.files.serializers import (
    FileSerializer,
    StorageSummarySerializer,
    serialize_file_page,
    with_unit,
)

logger = logging.getLogger(__name__)

_UPLOAD_FIELD: Final = 'file'
_FIRST_PAGE: Final = 1

MESSAGE_FILE_UPLOADED: Final = 'File uploaded successfully'
MESSAGE_FILE_DELETED: Final = 'File deleted successfully'
MESSAGE_NO_FILE: Final = 'No file provided'
MESSAGE_INVALID_FILE_ID: Final = 'Invalid file ID'
MESSAGE_LIST_FAILED: Final = 'Failed to list files'

# Errors with a fixed status; everything else uses the view's default
_ERROR_STATUS: Final = {
    UserNotFoundError: status.HTTP_404_NOT_FOUND,
    FileRecordNotFoundError: status.HTTP_404_NOT_FOUND,
}


def _error(message: str, status_code: int) -> Response:
    return Response({'error': message}, status=status_code)


def _storage_error(error: FileStorageError, default_status: int) -> Response:
    """Map a storage error to a response with its client-facing message.

    Args:
        error: Raised storage error.
        default_status: Status for errors without a fixed mapping.

    Returns:
        Error response. Internal details never leave the service.
    """
    status_code = _ERROR_STATUS.get(type(error), default_status)
    return _error(error.message, status_code)


def _parse_int(raw_value: str | None, default: int) -> int:
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _parse_file_id(raw_id: str) -> int | None:
    try:
        file_id = int(raw_id)
    except ValueError:
        return None
    if abs(file_id) > sys.maxsize:
        return None
    return file_id


class FileListCreateView(APIView):
    """Upload files and list the current user's files."""

    parser_classes = [MultiPartParser, FormParser]

    def get(self, request: Request) -> Response:
        """List the current user's files, newest first.

        Invalid or out of range ``page`` falls back to 1; ``page_size``
        outside ``1..FILES_MAX_PAGE_SIZE`` falls back to the default.
        """
        page_size = _parse_int(
            request.query_params.get('page_size'),
            settings.FILES_DEFAULT_PAGE_SIZE,
        )
        if not _FIRST_PAGE <= page_size <= settings.FILES_MAX_PAGE_SIZE:
            page_size = settings.FILES_DEFAULT_PAGE_SIZE

        # The row offset must fit in a signed 64-bit integer
        page = _parse_int(request.query_params.get('page'), _FIRST_PAGE)
        if not _FIRST_PAGE <= page <= sys.maxsize // page_size:
            page = _FIRST_PAGE

        try:
            file_page = get_file_service().list_files(
                request.user.id,
                page,
                page_size,
            )
        except DatabaseError:
            logger.exception('Failed to list files for user %s', request.user.id)
            return _error(
                MESSAGE_LIST_FAILED,
                status.HTTP_500_INTERNAL_SERVER_ERROR,
            )

        return Response(serialize_file_page(file_page))

    def post(self, request: Request) -> Response:
        """Upload a file from the multipart field ``file``."""
        upload = request.FILES.get(_UPLOAD_FIELD)
        if upload is None:
            return _error(MESSAGE_NO_FILE, status.HTTP_400_BAD_REQUEST)

        logger.info(
            'File upload requested by user %s: %s',
            request.user.id,
            upload.name,
        )

        try:
            file_instance = get_file_service().upload_file(
                request.user.id,
                upload.name,
                upload,
            )
        except ValidationError as error:
            return _error(' '.join(error.messages), status.HTTP_400_BAD_REQUEST)
        except FileStorageError as error:
            logger.warning('Upload rejected: %s', error)
            return _storage_error(error, status.HTTP_400_BAD_REQUEST)
        finally:
            upload.close()

        return Response(
            with_unit({
                'message': MESSAGE_FILE_UPLOADED,
                'file': FileSerializer(file_instance).data,
            }),
            status=status.HTTP_201_CREATED,
        )


class FileDetailView(APIView):
    """Show or delete one of the current user's files."""

    def get(self, request: Request, file_id: str) -> Response:
        """Get file details."""
        parsed_id = _parse_file_id(file_id)
        if parsed_id is None:
            return _error(MESSAGE_INVALID_FILE_ID, status.HTTP_400_BAD_REQUEST)

        try:
            file_instance = get_file_service().get_file(
                parsed_id,
                request.user.id,
            )
        except FileRecordNotFoundError as error:
            return _storage_error(error, status.HTTP_404_NOT_FOUND)

        return Response(with_unit({'file': FileSerializer(file_instance).data}))

    def delete(self, request: Request, file_id: str) -> Response:
        """Delete a file and reclaim its storage."""
        parsed_id = _parse_file_id(file_id)
        if parsed_id is None:
            return _error(MESSAGE_INVALID_FILE_ID, status.HTTP_400_BAD_REQUEST)

        logger.info(
            'File delete requested: %d by user %s',
            parsed_id,
            request.user.id,
        )

        try:
            get_file_service().delete_file(parsed_id, request.user.id)
        except FileStorageError as error:
            logger.warning('Delete failed for file %d: %s', parsed_id, error)
            return _storage_error(
                error,
                status.HTTP_500_INTERNAL_SERVER_ERROR,
            )

        return Response({'message': MESSAGE_FILE_DELETED})


class FileDownloadView(APIView):
    """Download file content as an attachment."""

    def get(self, request: Request, file_id: str) -> Response | FileResponse:
        """Stream the file content."""
        parsed_id = _parse_file_id(file_id)
        if parsed_id is None:
            return _error(MESSAGE_INVALID_FILE_ID, status.HTTP_400_BAD_REQUEST)

        try:
            file_name, handle = get_file_service().open_file(
                parsed_id,
                request.user.id,
            )
        except (FileRecordNotFoundError, BlobStorageError):
            return _error(
                FileRecordNotFoundError.message,
                status.HTTP_404_NOT_FOUND,
            )

        response = FileResponse(
            handle,
            content_type='application/octet-stream',
        )
        response['Content-Disposition'] = f'attachment; filename={file_name}'
        return response


class RemainingStorageView(APIView):
    """Report total, used and remaining storage for the current user."""

    def get(self, request: Request) -> Response:
        """Get the storage summary."""
        try:
            summary = get_storage_summary(request.user.id)
        except UserNotFoundError as error:
            return _storage_error(error, status.HTTP_404_NOT_FOUND)

        return Response(StorageSummarySerializer(summary).data)
