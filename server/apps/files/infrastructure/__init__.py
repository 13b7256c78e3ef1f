"""Infrastructure layer for files app.

This package contains integrations with external systems:
- Blob store backends (local filesystem, S3-compatible)
- Upload spooling and file name validation

Keep infrastructure concerns separate from business logic.
"""
