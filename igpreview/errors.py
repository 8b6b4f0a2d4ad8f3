"""
Error taxonomy for preview resolution and storage access.

Each preview error carries the HTTP status it maps to and a message that is safe
to show an unauthenticated caller.
"""

INVALID_PREVIEW_MESSAGE = 'Invalid or expired preview link'


class PreviewError(Exception):
    status_code = 500
    message = 'Internal server error'

    def __init__(self, message: str = None):
        super().__init__(message or self.message)
        if message:
            self.message = message


class PreviewNotFound(PreviewError):
    status_code = 404
    message = INVALID_PREVIEW_MESSAGE


class PreviewExpired(PreviewError):
    # same text as PreviewNotFound; only the status differs
    status_code = 410
    message = INVALID_PREVIEW_MESSAGE


class RecordStoreError(PreviewError):
    status_code = 500
    message = 'Failed to fetch photos'


class StorageError(Exception):
    """Raised when the object store rejects an upload, removal or signing request."""

    def __init__(self, key: str, reason: str):
        super().__init__(f'{key}: {reason}')
        self.key = key
        self.reason = reason
