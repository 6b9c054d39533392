"""
Object Storage Abstract Base Classes

Defines the bucket and object contracts that every storage backend
(AWS S3, MinIO) implements, plus the argument checks they share.
"""

from abc import ABC, abstractmethod
from typing import Any, List, Optional

from osk.infrastructure.exceptions import InvalidArgumentError


def validate_bucket_name(bucket_name: Any) -> str:
    """Reject missing or blank bucket names before any remote call."""
    if not isinstance(bucket_name, str) or not bucket_name.strip():
        raise InvalidArgumentError("Bucket name cannot be null or empty")
    return bucket_name


def validate_object_key(object_name: Any) -> str:
    """Reject missing or blank object keys before any remote call."""
    if not isinstance(object_name, str) or not object_name.strip():
        raise InvalidArgumentError("Object name cannot be null or empty")
    return object_name


def validate_payload(data: Any) -> bytes:
    """
    Accept any bytes-like payload, including an empty one.

    Returns:
        The payload as ``bytes``
    """
    if data is None:
        raise InvalidArgumentError("Data cannot be null")
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise InvalidArgumentError(f"Data must be bytes-like, got {type(data).__name__}")
    return bytes(data)


class BucketOperations(ABC):
    """
    Abstract interface for bucket operations

    Each call is a single operation against the backend. Create and delete
    are idempotent: an existing bucket is a successful create and a missing
    bucket is a successful delete.
    """

    backend_name: str = ""

    def __init__(self, client: Any):
        self.client = client

    @abstractmethod
    def create(self, bucket_name: str) -> bool:
        """
        Create a bucket unless it already exists

        Args:
            bucket_name: Name of the bucket

        Returns:
            True once the bucket exists

        Raises:
            InvalidArgumentError: Blank bucket name
            BucketOperationError: The backend rejected the request
        """
        pass

    @abstractmethod
    def delete(self, bucket_name: str) -> bool:
        """
        Delete a bucket together with every object in it

        Objects that fail to delete are logged and counted; the bucket
        removal is still attempted and its failure is raised.

        Args:
            bucket_name: Name of the bucket

        Returns:
            True once the bucket is gone

        Raises:
            InvalidArgumentError: Blank bucket name
            BucketOperationError: The backend rejected the request
        """
        pass

    @abstractmethod
    def list_all(self) -> List[str]:
        """
        List every bucket visible to the configured credentials

        Returns:
            Bucket names, all pages included
        """
        pass


class ObjectOperations(ABC):
    """
    Abstract interface for object operations within a bucket
    """

    backend_name: str = ""

    def __init__(self, client: Any):
        self.client = client

    @abstractmethod
    def upload(
        self,
        bucket_name: str,
        object_name: str,
        data: bytes,
        content_type: Optional[str] = None
    ) -> bool:
        """
        Upload a payload in a single call

        Args:
            bucket_name: Target bucket name
            object_name: Object key
            data: Payload, may be empty
            content_type: Optional MIME content type

        Returns:
            True if successful

        Raises:
            InvalidArgumentError: Blank name or key, or missing payload
            ObjectOperationError: The backend rejected the request
        """
        pass

    @abstractmethod
    def download(self, bucket_name: str, object_name: str) -> Optional[bytes]:
        """
        Download an object

        Args:
            bucket_name: Source bucket name
            object_name: Object key

        Returns:
            Object content, or None if the object does not exist

        Raises:
            InvalidArgumentError: Blank name or key
            ObjectOperationError: Any other backend failure
        """
        pass

    @abstractmethod
    def delete(self, bucket_name: str, object_name: str) -> bool:
        """
        Delete an object; deleting a missing key succeeds

        Args:
            bucket_name: Source bucket name
            object_name: Object key

        Returns:
            True if successful
        """
        pass

    @abstractmethod
    def list(self, bucket_name: str) -> List[str]:
        """
        List every object key in a bucket

        Args:
            bucket_name: Source bucket name

        Returns:
            Object keys, all pages included
        """
        pass
