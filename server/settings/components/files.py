"""File storage and quota settings."""

from server.settings.components import config

# Quota assigned to every new account, in bytes (100 MB)
STORAGE_MAX_PER_USER = config(
    'STORAGE_MAX_PER_USER',
    cast=int,
    default=104857600,
)

# Report sizes as megabytes (rounded to 2 decimals) instead of raw bytes
STORAGE_DISPLAY_IN_MB = config(
    'STORAGE_DISPLAY_IN_MB',
    cast=bool,
    default=False,
)

# Uploads larger than this are spooled to disk by Django before our own
# spooling pass runs
FILE_UPLOAD_MAX_MEMORY_SIZE = config(
    'FILES_MAX_UPLOAD_MEMORY',
    cast=int,
    default=32 * 1024 * 1024,
)

# Pagination for file listings
FILES_DEFAULT_PAGE_SIZE = 10
FILES_MAX_PAGE_SIZE = 100
