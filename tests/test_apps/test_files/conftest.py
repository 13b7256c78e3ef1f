"""Shared fixtures for files app tests."""

import boto3
import pytest
from django.contrib.auth import get_user_model
from django.core.files.base import ContentFile
from moto import mock_aws
from rest_framework.authtoken.models import Token
from rest_framework.test import APIClient

from server.apps.files.infrastructure.storage import FileSystemBlobStorage
from server.apps.files.logic.file_operations import FileService

User = get_user_model()

_BLOB_BACKEND = 'server.apps.files.infrastructure.storage.FileSystemBlobStorage'


@pytest.fixture
def user(db):
    """Create test user.

    The quota is created by the ``post_save`` handler.

    Returns:
        User instance for testing.
    """
    return User.objects.create_user(
        username='testuser',
        password='testpass123',
    )


@pytest.fixture
def other_user(db):
    """Create second test user for isolation tests.

    Returns:
        Second user instance.
    """
    return User.objects.create_user(
        username='otheruser',
        password='testpass123',
    )


@pytest.fixture
def blob_storage(tmp_path):
    """Filesystem blob store rooted in a temporary directory.

    Returns:
        FileSystemBlobStorage instance.
    """
    return FileSystemBlobStorage(location=str(tmp_path))


@pytest.fixture
def file_service(blob_storage):
    """File service writing to the temporary blob store.

    Returns:
        FileService instance.
    """
    return FileService(storage=blob_storage)


@pytest.fixture
def default_blob_storage(settings, tmp_path):
    """Point ``default_storage`` at a temporary directory.

    Changing ``STORAGES`` through the settings fixture resets the
    ``default_storage`` proxy.
    """
    settings.STORAGES = {
        'default': {
            'BACKEND': _BLOB_BACKEND,
            'OPTIONS': {'location': str(tmp_path)},
        },
        'staticfiles': {
            'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage',
        },
    }
    return tmp_path


@pytest.fixture
def api_client(user, default_blob_storage):
    """API client authenticated as ``user`` with a bearer token.

    Returns:
        APIClient instance.
    """
    token = Token.objects.create(user=user)
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {token.key}')
    return client


@pytest.fixture
def mock_s3():
    """Mock S3 service with file-storage bucket.

    Yields:
        boto3 S3 resource with file-storage bucket created.
    """
    with mock_aws():
        # Create S3 resource
        conn = boto3.resource('s3', region_name='us-east-1')

        # Create bucket
        conn.create_bucket(Bucket='file-storage')

        yield conn


@pytest.fixture
def sample_file_content():
    """1 KiB of test content named like an uploaded file.

    Returns:
        ContentFile with test data.
    """
    return ContentFile(b'x' * 1024, name='test-file.txt')
