"""Main settings file for the project.

Settings are split into components with ``django-split-settings``.
Order matters: later components may override values from earlier ones.
Add ``server/settings/local.py`` for machine-specific overrides.
"""

from split_settings.tools import include, optional

base_settings = [
    'components/common.py',
    'components/database.py',
    'components/logging.py',
    'components/storages.py',
    'components/files.py',
    optional('local.py'),
]

include(*base_settings)
