"""Database configuration.

Every connection carries a bounded timeout so that a stalled database
fails the request instead of blocking it indefinitely.
"""

from typing import Any, Final

from server.settings.components import BASE_DIR, config

_ENGINE: Final = config('DJANGO_DATABASE_ENGINE', default='sqlite')
_TIMEOUT_SECONDS: Final = config(
    'DJANGO_DATABASE_TIMEOUT',
    cast=int,
    default=5,
)
_NAME: Final = config('DJANGO_DATABASE_NAME', default='file_storage_api')

_database: dict[str, Any]

if _ENGINE == 'postgresql':
    _database = {
        'ENGINE': 'django.db.backends.postgresql',
        'NAME': _NAME,
        'USER': config('DJANGO_DATABASE_USER', default='file_storage_api'),
        'PASSWORD': config('DJANGO_DATABASE_PASSWORD', default=''),
        'HOST': config('DJANGO_DATABASE_HOST', default='localhost'),
        'PORT': config('DJANGO_DATABASE_PORT', cast=int, default=5432),
        'CONN_MAX_AGE': config('CONN_MAX_AGE', cast=int, default=60),
        'OPTIONS': {
            'connect_timeout': _TIMEOUT_SECONDS,
            'options': f'-c statement_timeout={_TIMEOUT_SECONDS * 1000}',
        },
    }
else:
    _database = {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': BASE_DIR.joinpath(f'{_NAME}.sqlite3'),
        'OPTIONS': {
            'timeout': _TIMEOUT_SECONDS,
        },
    }

DATABASES = {
    'default': _database,
}
