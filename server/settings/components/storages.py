"""Django storage configuration for user file content.

Two blob backends are supported:
- ``filesystem`` (default): one directory per user under ``STORAGE_PATH``
- ``s3``: any S3-compatible service (AWS, MinIO, R2) via django-storages

Both share the same blob store behaviour from
``server.apps.files.infrastructure.storage``.
"""

from typing import Any, Final

from server.settings.components import BASE_DIR, config

BLOB_STORAGE_BACKEND: Final = config(
    'BLOB_STORAGE_BACKEND',
    default='filesystem',
)

STORAGE_PATH: Final = config(
    'STORAGE_PATH',
    default=str(BASE_DIR.joinpath('storage')),
)

_default_storage: dict[str, Any]

if BLOB_STORAGE_BACKEND == 's3':
    _default_storage = {
        'BACKEND': 'server.apps.files.infrastructure.storage.S3BlobStorage',
        'OPTIONS': {
            'bucket_name': config(
                'AWS_STORAGE_BUCKET_NAME',
                default='file-storage',
            ),
            'access_key': config('AWS_ACCESS_KEY_ID', default=None),
            'secret_key': config('AWS_SECRET_ACCESS_KEY', default=None),
            'endpoint_url': config(
                'AWS_S3_ENDPOINT_URL',
                default=None,
            ),
            'region_name': config(
                'AWS_S3_REGION_NAME',
                default='auto',
            ),
            'file_overwrite': False,  # Prevent accidental overwrites
            'default_acl': None,  # Inherit bucket ACL
        },
    }
else:
    _default_storage = {
        'BACKEND': (
            'server.apps.files.infrastructure.storage.FileSystemBlobStorage'
        ),
        'OPTIONS': {
            'location': STORAGE_PATH,
        },
    }

STORAGES: Final[dict[str, dict[str, Any]]] = {
    'default': _default_storage,
    'staticfiles': {
        'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage',
    },
}
