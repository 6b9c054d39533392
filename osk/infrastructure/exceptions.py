"""
Custom exceptions for the Infrastructure layer.
"""

from typing import Optional


class InfrastructureError(Exception):
    """Base class for exceptions in the infrastructure layer."""
    pass


class ConfigurationError(InfrastructureError):
    """Storage configuration is missing, malformed or rejected by the SDK."""
    pass


class InvalidArgumentError(InfrastructureError, ValueError):
    """A bucket name, object key or payload failed local validation."""
    pass


class StorageOperationError(InfrastructureError):
    """
    A call to the remote storage service failed.

    The SDK exception is kept on ``cause`` and is also chained as ``__cause__``
    when raised with ``raise ... from exc``.
    """

    def __init__(
        self,
        message: str,
        operation: str,
        bucket_name: Optional[str] = None,
        object_name: Optional[str] = None,
        cause: Optional[BaseException] = None
    ):
        super().__init__(message)
        self.operation = operation
        self.bucket_name = bucket_name
        self.object_name = object_name
        self.cause = cause


class BucketOperationError(StorageOperationError):
    """Remote failure while creating, deleting or listing buckets."""
    pass


class ObjectOperationError(StorageOperationError):
    """Remote failure while uploading, downloading, deleting or listing objects."""
    pass
