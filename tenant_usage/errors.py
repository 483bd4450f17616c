"""Exceptions raised by the storage and database layers."""


class DataAccessError(RuntimeError):
    """Raised when a tenant query or result insert cannot be executed."""


class StorageProviderError(RuntimeError):
    """Raised when an S3 listing call fails."""

    def __init__(self, bucket: str, prefix: str | None, message: str):
        self.bucket = bucket
        self.prefix = prefix
        super().__init__(message)
