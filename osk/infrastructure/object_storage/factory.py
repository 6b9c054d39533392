"""
Object Storage Factory

Selects the storage backend from configuration, once, and wires the client.
"""

import logging
from functools import lru_cache
from typing import Any, Callable, Dict, List, Optional, Tuple, Type

from osk.core.config import StorageConfig, StorageType, load_config
from .base import BucketOperations, ObjectOperations
from .client import ObjectStorageClient
from .minio_adapter import MinIOBucketOperations, MinIOObjectOperations
from .providers import build_minio_client, build_s3_client
from .s3_adapter import S3BucketOperations, S3ObjectOperations

logger = logging.getLogger(__name__)

ClientBuilder = Callable[[StorageConfig], Any]
Backend = Tuple[ClientBuilder, Type[BucketOperations], Type[ObjectOperations]]


class StorageFactory:
    """Factory for creating object storage clients"""

    _backends: Dict[StorageType, Backend] = {
        StorageType.S3: (build_s3_client, S3BucketOperations, S3ObjectOperations),
        StorageType.MINIO: (build_minio_client, MinIOBucketOperations, MinIOObjectOperations),
    }

    @classmethod
    def create_operations(cls, config: StorageConfig) -> Tuple[BucketOperations, ObjectOperations]:
        """
        Build one SDK client and bind both operation sets to it

        Args:
            config: Validated storage configuration

        Returns:
            (bucket operations, object operations) for the configured backend

        Raises:
            ValueError: No backend is registered for the storage type
            ConfigurationError: The SDK client could not be built
        """
        backend = cls._backends.get(config.storage_type)
        if backend is None:
            raise ValueError(f"Unsupported storage type: {config.storage_type}")

        build_client, bucket_cls, object_cls = backend
        sdk_client = build_client(config)
        return bucket_cls(sdk_client), object_cls(sdk_client)

    @classmethod
    def create_client(cls, config: Optional[StorageConfig] = None) -> ObjectStorageClient:
        """
        Create the storage client for the configured backend

        Args:
            config: Optional configuration; loaded from the environment if omitted

        Returns:
            ObjectStorageClient bound to the selected backend
        """
        if config is None:
            config = load_config()

        bucket_operations, object_operations = cls.create_operations(config)
        client = ObjectStorageClient(bucket_operations, object_operations)
        logger.info(f"对象存储客户端已创建, 后端: {config.storage_type.value}")

        if config.auto_create_bucket:
            logger.info(f"自动创建默认存储桶: {config.default_bucket}")
            client.create_bucket(config.default_bucket)

        return client

    @classmethod
    def register_backend(
        cls,
        storage_type: StorageType,
        client_builder: ClientBuilder,
        bucket_operations_class: Type[BucketOperations],
        object_operations_class: Type[ObjectOperations]
    ):
        """
        Register or replace the implementation used for a storage type

        Args:
            storage_type: Backend the implementation serves
            client_builder: Builds the SDK client from a StorageConfig
            bucket_operations_class: BucketOperations implementation
            object_operations_class: ObjectOperations implementation
        """
        if not (isinstance(bucket_operations_class, type)
                and issubclass(bucket_operations_class, BucketOperations)):
            raise ValueError("bucket_operations_class must implement BucketOperations")
        if not (isinstance(object_operations_class, type)
                and issubclass(object_operations_class, ObjectOperations)):
            raise ValueError("object_operations_class must implement ObjectOperations")

        cls._backends[StorageType(storage_type)] = (
            client_builder, bucket_operations_class, object_operations_class
        )
        logger.info(f"注册对象存储后端: {StorageType(storage_type).value}")

    @classmethod
    def get_supported_backends(cls) -> List[str]:
        """获取支持的存储后端类型列表"""
        return [storage_type.value for storage_type in cls._backends]


@lru_cache(maxsize=1)
def get_default_client() -> ObjectStorageClient:
    """Process-wide client built from the environment configuration"""
    return StorageFactory.create_client()
