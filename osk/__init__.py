"""
Object Storage Kit

One client for S3 and MinIO object storage, with the backend picked from configuration.
"""

from osk.core.config import StorageConfig, StorageType
from osk.infrastructure.exceptions import (
    BucketOperationError,
    ConfigurationError,
    InfrastructureError,
    InvalidArgumentError,
    ObjectOperationError,
    StorageOperationError,
)
from osk.infrastructure.object_storage import ObjectStorageClient, StorageFactory

__all__ = [
    'StorageConfig',
    'StorageType',
    'ObjectStorageClient',
    'StorageFactory',
    'InfrastructureError',
    'ConfigurationError',
    'InvalidArgumentError',
    'StorageOperationError',
    'BucketOperationError',
    'ObjectOperationError',
]
