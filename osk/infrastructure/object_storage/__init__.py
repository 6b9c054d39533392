"""
Object Storage Infrastructure Module

Provides one bucket/object interface over S3 and MinIO, with the backend chosen from configuration.
"""

from .base import BucketOperations, ObjectOperations
from .client import ObjectStorageClient
from .factory import StorageFactory, get_default_client
from .minio_adapter import MinIOBucketOperations, MinIOObjectOperations
from .purge import PurgeResult, purge_bucket
from .s3_adapter import S3BucketOperations, S3ObjectOperations

__all__ = [
    'BucketOperations',
    'ObjectOperations',
    'ObjectStorageClient',
    'StorageFactory',
    'get_default_client',
    'MinIOBucketOperations',
    'MinIOObjectOperations',
    'S3BucketOperations',
    'S3ObjectOperations',
    'PurgeResult',
    'purge_bucket',
]
