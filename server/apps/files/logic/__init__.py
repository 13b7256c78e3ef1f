"""Business logic layer for files app.

This package contains the upload/delete pipeline and the quota ledger:
- ``file_operations``: upload, download, list and delete with compensation
- ``quota_operations``: atomic reservation and release of storage

Views call into this layer; it never touches HTTP request objects.
"""
