"""Metadata helpers for uploaded content: name validation and spooling."""

import tempfile
from typing import BinaryIO, Final

from django.core.exceptions import SuspiciousFileOperation, ValidationError

_CHUNK_SIZE: Final = 8192  # 8KB chunks for spooling
_NAME_MAX_LENGTH: Final = 255
_RESERVED_NAMES: Final = frozenset(('.', '..'))
_FORBIDDEN_CHARACTERS: Final = ('/', '\\', '\x00')


def validate_file_name(file_name: str) -> None:
    """Validate a client supplied file name.

    The name becomes the last component of the storage path inside the
    owner's namespace, so it must not be able to escape that directory.

    Args:
        file_name: Name as sent by the client.

    Raises:
        ValidationError: If the name is empty, too long or path-like.
    """
    if not file_name or not file_name.strip():
        raise ValidationError('File name cannot be empty')

    if len(file_name) > _NAME_MAX_LENGTH:
        raise ValidationError(
            f'File name cannot exceed {_NAME_MAX_LENGTH} characters',
        )

    if file_name in _RESERVED_NAMES:
        raise ValidationError(f'Invalid file name: {file_name}')

    if any(char in file_name for char in _FORBIDDEN_CHARACTERS):
        raise ValidationError('File name cannot contain path separators')


def validate_namespace(username: str) -> None:
    """Validate a username for use as a blob namespace.

    Args:
        username: Username that names the namespace.

    Raises:
        ValidationError: If the name maps onto the storage root or above it.
    """
    if username in _RESERVED_NAMES:
        raise ValidationError(f'Invalid username: {username}')

    if any(char in username for char in _FORBIDDEN_CHARACTERS):
        raise ValidationError('Username cannot contain path separators')


def build_storage_path(username: str, file_name: str) -> str:
    """Build the storage path for a file in the owner's namespace.

    Args:
        username: Owner's username (namespace key).
        file_name: Validated file name.

    Returns:
        Storage path (e.g., 'alice/report.pdf').

    Raises:
        SuspiciousFileOperation: If the username cannot be a namespace.
    """
    try:
        validate_namespace(username)
    except ValidationError as error:
        raise SuspiciousFileOperation(
            f'Username is not a valid namespace: {username!r}',
        ) from error
    return f'{username}/{file_name}'


def spool_content(source: BinaryIO) -> tuple[BinaryIO, int]:
    """Spool a single-pass stream to a temporary file to learn its size.

    Reads the source in chunks. The caller owns the returned spool and
    must close it; closing removes the temporary file.

    Args:
        source: Readable file-like object. Read exactly once.

    Returns:
        Tuple of (spool positioned at the start, size in bytes).

    Raises:
        OSError: If reading the source or writing the spool fails.
    """
    spool = tempfile.TemporaryFile(prefix='upload-')
    size = 0
    try:
        for chunk in iter(lambda: source.read(_CHUNK_SIZE), b''):
            spool.write(chunk)
            size += len(chunk)
        spool.flush()
        spool.seek(0)
    except Exception:
        spool.close()
        raise
    return spool, size
