"""Tests for files API views."""

from pathlib import Path

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile
from rest_framework.test import APIClient

from server.apps.files.infrastructure.storage import FileSystemBlobStorage
from server.apps.files.models import File, UserQuota


def _upload(client, name='test-file.txt', content=b'x' * 1024):
    return client.post(
        '/api/files',
        {'file': SimpleUploadedFile(name, content)},
        format='multipart',
    )


@pytest.mark.django_db
class TestUpload:
    """Tests for POST /api/files."""

    def test_upload_success(self, api_client, user, default_blob_storage):
        """Test upload returns the file and accounts its size."""
        response = _upload(api_client)

        assert response.status_code == 201
        assert response.data['message'] == 'File uploaded successfully'
        assert response.data['file']['file_name'] == 'test-file.txt'
        assert response.data['file']['size'] == 1024
        assert response.data['file']['user_id'] == user.id
        assert 'blob' not in response.data['file']
        assert 'unit' not in response.data
        assert Path(default_blob_storage, 'testuser', 'test-file.txt').exists()
        assert UserQuota.objects.get(user=user).storage_used == 1024

    def test_upload_without_file(self, api_client):
        """Test upload without the file field is rejected."""
        response = api_client.post('/api/files', {}, format='multipart')

        assert response.status_code == 400
        assert response.data == {'error': 'No file provided'}

    def test_upload_duplicate(self, api_client):
        """Test a second upload with the same name is rejected."""
        _upload(api_client)

        response = _upload(api_client)

        assert response.status_code == 400
        assert response.data == {
            'error': 'File with the same name already exists',
        }

    def test_upload_quota_exceeded(self, api_client, user):
        """Test an upload over the limit is rejected without side effects."""
        UserQuota.objects.filter(user=user).update(storage_limit=512)

        response = _upload(api_client)

        assert response.status_code == 400
        assert response.data == {'error': 'Storage limit exceeded'}
        assert UserQuota.objects.get(user=user).storage_used == 0
        assert File.objects.count() == 0

    def test_upload_store_failure_hides_details(self, api_client, monkeypatch):
        """Test store errors reach the client as a generic message."""
        def failing_save(self, name, content):
            raise OSError('/var/secret/path is read-only')

        monkeypatch.setattr(FileSystemBlobStorage, '_save', failing_save)

        response = _upload(api_client)

        assert response.status_code == 400
        assert response.data == {'error': 'Failed to store file content'}

    def test_upload_in_mb(self, api_client, settings):
        """Test MB display mode converts sizes and adds the unit."""
        settings.STORAGE_DISPLAY_IN_MB = True

        response = _upload(api_client, content=b'x' * 524288)

        assert response.status_code == 201
        assert response.data['file']['size'] == 0.5
        assert response.data['unit'] == 'MB'

    def test_upload_requires_auth(self, default_blob_storage, db):
        """Test anonymous uploads are rejected."""
        response = _upload(APIClient())

        assert response.status_code == 401

    def test_upload_with_invalid_token(self, default_blob_storage, db):
        """Test an unknown bearer token is rejected."""
        client = APIClient()
        client.credentials(HTTP_AUTHORIZATION='Bearer not-a-token')

        response = _upload(client)

        assert response.status_code == 401


@pytest.mark.django_db
class TestList:
    """Tests for GET /api/files."""

    def test_list_files(self, api_client, other_user, file_service):
        """Test listing returns only the caller's files with pagination."""
        _upload(api_client, name='a.txt')
        _upload(api_client, name='b.txt')
        file_service.upload_file(other_user.id, 'c.txt', SimpleUploadedFile(
            'c.txt',
            b'data',
        ))

        response = api_client.get('/api/files')

        assert response.status_code == 200
        names = [file['file_name'] for file in response.data['files']]
        assert names == ['b.txt', 'a.txt']
        assert response.data['pagination'] == {
            'total_items': 2,
            'total_pages': 1,
            'current_page': 1,
            'page_size': 10,
            'has_next': False,
            'has_prev': False,
        }

    def test_list_second_page(self, api_client):
        """Test page and page_size select a slice."""
        for name in ('a.txt', 'b.txt', 'c.txt'):
            _upload(api_client, name=name)

        response = api_client.get('/api/files', {'page': 2, 'page_size': 2})

        names = [file['file_name'] for file in response.data['files']]
        assert names == ['a.txt']
        assert response.data['pagination']['has_prev']
        assert not response.data['pagination']['has_next']

    @pytest.mark.parametrize(('query', 'page', 'page_size'), [
        ({'page': 'abc'}, 1, 10),
        ({'page': '0'}, 1, 10),
        ({'page': '99999999999999999999'}, 1, 10),
        ({'page': str(2 ** 62), 'page_size': '100'}, 1, 100),
        ({'page_size': '0'}, 1, 10),
        ({'page_size': '101'}, 1, 10),
        ({'page_size': 'many'}, 1, 10),
        ({'page_size': '100'}, 1, 100),
    ])
    def test_list_normalizes_paging(self, api_client, query, page, page_size):
        """Test invalid paging parameters fall back to defaults."""
        response = api_client.get('/api/files', query)

        assert response.status_code == 200
        assert response.data['pagination']['current_page'] == page
        assert response.data['pagination']['page_size'] == page_size

    def test_list_in_mb(self, api_client, settings):
        """Test MB display mode applies to listings."""
        settings.STORAGE_DISPLAY_IN_MB = True
        _upload(api_client, content=b'x' * 1048576)

        response = api_client.get('/api/files')

        assert response.data['files'][0]['size'] == 1.0
        assert response.data['unit'] == 'MB'


@pytest.mark.django_db
class TestDetail:
    """Tests for GET and DELETE /api/files/<id>."""

    def test_get_file(self, api_client):
        """Test file details are returned."""
        file_id = _upload(api_client).data['file']['id']

        response = api_client.get(f'/api/files/{file_id}')

        assert response.status_code == 200
        assert response.data['file']['id'] == file_id
        assert response.data['file']['file_name'] == 'test-file.txt'

    def test_get_file_invalid_id(self, api_client):
        """Test a malformed ID is rejected."""
        response = api_client.get('/api/files/not-a-number')

        assert response.status_code == 400
        assert response.data == {'error': 'Invalid file ID'}

    def test_get_file_id_out_of_range(self, api_client):
        """Test an ID too large for the database is rejected."""
        response = api_client.get('/api/files/99999999999999999999')

        assert response.status_code == 400
        assert response.data == {'error': 'Invalid file ID'}

    def test_get_file_not_found(self, api_client):
        """Test a missing file is reported as not found."""
        response = api_client.get('/api/files/999')

        assert response.status_code == 404
        assert response.data == {'error': 'File not found'}

    def test_get_file_of_other_user(self, api_client, other_user, file_service):
        """Test another user's file is reported as not found."""
        other_file = file_service.upload_file(
            other_user.id,
            'secret.txt',
            SimpleUploadedFile('secret.txt', b'data'),
        )

        response = api_client.get(f'/api/files/{other_file.id}')

        assert response.status_code == 404

    def test_delete_file(self, api_client, user, default_blob_storage):
        """Test delete removes content, record and usage."""
        file_id = _upload(api_client).data['file']['id']

        response = api_client.delete(f'/api/files/{file_id}')

        assert response.status_code == 200
        assert response.data == {'message': 'File deleted successfully'}
        assert not File.objects.filter(id=file_id).exists()
        assert UserQuota.objects.get(user=user).storage_used == 0
        assert not Path(default_blob_storage, 'testuser', 'test-file.txt').exists()

    def test_delete_file_not_found(self, api_client):
        """Test delete of a missing file is reported as not found."""
        response = api_client.delete('/api/files/999')

        assert response.status_code == 404
        assert response.data == {'error': 'File not found'}

    def test_delete_file_of_other_user(
        self,
        api_client,
        other_user,
        file_service,
    ):
        """Test another user's file cannot be deleted."""
        other_file = file_service.upload_file(
            other_user.id,
            'secret.txt',
            SimpleUploadedFile('secret.txt', b'data'),
        )

        response = api_client.delete(f'/api/files/{other_file.id}')

        assert response.status_code == 404
        assert File.objects.filter(id=other_file.id).exists()

    def test_delete_file_invalid_id(self, api_client):
        """Test a malformed ID is rejected."""
        response = api_client.delete('/api/files/abc')

        assert response.status_code == 400


@pytest.mark.django_db
class TestDownload:
    """Tests for GET /api/files/<id>/download."""

    def test_download(self, api_client):
        """Test content is streamed as an attachment."""
        file_id = _upload(api_client, content=b'hello world').data['file']['id']

        response = api_client.get(f'/api/files/{file_id}/download')

        assert response.status_code == 200
        assert response['Content-Type'] == 'application/octet-stream'
        assert response['Content-Disposition'] == (
            'attachment; filename=test-file.txt'
        )
        assert b''.join(response.streaming_content) == b'hello world'
        response.close()

    def test_download_not_found(self, api_client):
        """Test download of a missing file is reported as not found."""
        response = api_client.get('/api/files/999/download')

        assert response.status_code == 404
        assert response.json() == {'error': 'File not found'}

    def test_download_missing_content(self, api_client, user):
        """Test a record without content is reported as not found."""
        file_instance = File.objects.create(
            user=user,
            name='ghost.txt',
            blob='testuser/ghost.txt',
            size_bytes=10,
        )

        response = api_client.get(f'/api/files/{file_instance.id}/download')

        assert response.status_code == 404


@pytest.mark.django_db
class TestRemainingStorage:
    """Tests for GET /api/storage/remaining."""

    def test_remaining_storage_in_bytes(self, api_client):
        """Test the summary is reported in bytes by default."""
        _upload(api_client)

        response = api_client.get('/api/storage/remaining')

        assert response.status_code == 200
        assert response.data == {
            'total_storage': 104857600,
            'storage_used': 1024,
            'remaining_storage': 104857600 - 1024,
            'unit': 'bytes',
        }

    def test_remaining_storage_in_mb(self, api_client, settings):
        """Test the summary is reported in MB when configured."""
        settings.STORAGE_DISPLAY_IN_MB = True

        response = api_client.get('/api/storage/remaining')

        assert response.data == {
            'total_storage': 100.0,
            'storage_used': 0.0,
            'remaining_storage': 100.0,
            'unit': 'MB',
        }
