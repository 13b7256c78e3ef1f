"""Serializers for files API responses."""

from typing import Final

from django.conf import settings
from rest_framework import serializers

from server.apps.files.logic.file_operations import FilePage
from server.apps.files.logic.quota_operations import StorageSummary
from server.apps.files.models import File

_BYTES_PER_MB: Final = 1024 * 1024
_UNIT_MB: Final = 'MB'
_UNIT_BYTES: Final = 'bytes'


def display_in_mb() -> bool:
    """Whether sizes are reported in megabytes instead of bytes."""
    return settings.STORAGE_DISPLAY_IN_MB


def format_size(size_bytes: int) -> int | float:
    """Format a byte count for API output.

    Args:
        size_bytes: Size in bytes.

    Returns:
        Raw bytes, or megabytes rounded to 2 decimals when
        ``STORAGE_DISPLAY_IN_MB`` is enabled.
    """
    if display_in_mb():
        return round(size_bytes / _BYTES_PER_MB, 2)
    return size_bytes


class FileSerializer(serializers.ModelSerializer):
    """Public representation of a file.

    The storage location is never included.
    """

    user_id = serializers.IntegerField(read_only=True)
    file_name = serializers.CharField(source='name', read_only=True)
    size = serializers.SerializerMethodField()

    class Meta:
        """Serializer metadata."""

        model = File
        fields = [
            'id',
            'user_id',
            'file_name',
            'size',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def get_size(self, obj: File) -> int | float:
        """Size in the configured display unit."""
        return format_size(obj.size_bytes)


def with_unit(payload: dict[str, object]) -> dict[str, object]:
    """Add ``unit: MB`` to a payload when sizes are in megabytes.

    Args:
        payload: Response payload.

    Returns:
        The same payload, for chaining.
    """
    if display_in_mb():
        payload['unit'] = _UNIT_MB
    return payload


def serialize_file_page(page: FilePage) -> dict[str, object]:
    """Build the listing payload for a page of files.

    Args:
        page: Page returned by ``FileService.list_files``.

    Returns:
        Payload with ``files`` and ``pagination``.
    """
    return with_unit({
        'files': FileSerializer(page.files, many=True).data,
        'pagination': {
            'total_items': page.total_items,
            'total_pages': page.total_pages,
            'current_page': page.current_page,
            'page_size': page.page_size,
            'has_next': page.has_next,
            'has_prev': page.has_prev,
        },
    })


class StorageSummarySerializer(serializers.Serializer):
    """Remaining storage report for the current user."""

    total_storage = serializers.SerializerMethodField()
    storage_used = serializers.SerializerMethodField()
    remaining_storage = serializers.SerializerMethodField()
    unit = serializers.SerializerMethodField()

    def get_total_storage(self, obj: StorageSummary) -> int | float:
        return format_size(obj.total)

    def get_storage_used(self, obj: StorageSummary) -> int | float:
        return format_size(obj.used)

    def get_remaining_storage(self, obj: StorageSummary) -> int | float:
        return format_size(obj.remaining)

    def get_unit(self, obj: StorageSummary) -> str:
        return _UNIT_MB if display_in_mb() else _UNIT_BYTES
