"""
Object Storage Client

The single entry point application code uses. Every method delegates to the
bucket or object operations of the backend selected at startup.
"""

from typing import List, Optional

from .base import BucketOperations, ObjectOperations


class ObjectStorageClient:
    """Facade over one backend's bucket and object operations"""

    def __init__(self, bucket_operations: BucketOperations, object_operations: ObjectOperations):
        self._bucket_operations = bucket_operations
        self._object_operations = object_operations

    @property
    def bucket_operations(self) -> BucketOperations:
        return self._bucket_operations

    @property
    def object_operations(self) -> ObjectOperations:
        return self._object_operations

    @property
    def backend_name(self) -> str:
        return self._bucket_operations.backend_name

    # Bucket operations
    def create_bucket(self, bucket_name: str) -> bool:
        return self._bucket_operations.create(bucket_name)

    def delete_bucket(self, bucket_name: str) -> bool:
        return self._bucket_operations.delete(bucket_name)

    def list_buckets(self) -> List[str]:
        return list(self._bucket_operations.list_all())

    # Object operations
    def put_object(
        self,
        bucket_name: str,
        object_key: str,
        data: bytes,
        content_type: Optional[str] = None
    ) -> bool:
        return self._object_operations.upload(bucket_name, object_key, data, content_type)

    def get_object(self, bucket_name: str, object_key: str) -> Optional[bytes]:
        """Object content, or None when the key does not exist."""
        return self._object_operations.download(bucket_name, object_key)

    def delete_object(self, bucket_name: str, object_key: str) -> bool:
        return self._object_operations.delete(bucket_name, object_key)

    def list_objects(self, bucket_name: str) -> List[str]:
        return list(self._object_operations.list(bucket_name))
