"""Shared fixtures for the object storage tests."""

from types import SimpleNamespace
from unittest.mock import MagicMock

import boto3
import pytest
from minio import Minio
from minio.error import S3Error

from osk.core.config import StorageConfig, StorageType


def make_s3_error(code: str, message: str = "error") -> S3Error:
    """Build a MinIO S3Error the way the SDK raises it."""
    return S3Error(
        code=code,
        message=message,
        resource="/",
        request_id="request-id",
        host_id="host-id",
        response=MagicMock(status=404),
    )


class FakeMinio:
    """
    In-memory stand-in for the MinIO SDK client.

    Implements only the calls the MinIO adapter makes, with the same
    keyword arguments and the same error codes as a real server.
    """

    def __init__(self):
        self.buckets = {}
        self.failing_keys = set()

    def bucket_exists(self, bucket_name):
        return bucket_name in self.buckets

    def make_bucket(self, bucket_name):
        if bucket_name in self.buckets:
            raise make_s3_error("BucketAlreadyOwnedByYou")
        self.buckets[bucket_name] = {}

    def remove_bucket(self, bucket_name):
        if bucket_name not in self.buckets:
            raise make_s3_error("NoSuchBucket")
        if self.buckets[bucket_name]:
            raise make_s3_error("BucketNotEmpty")
        del self.buckets[bucket_name]

    def list_buckets(self):
        return [SimpleNamespace(name=name) for name in sorted(self.buckets)]

    def put_object(self, bucket_name, object_name, data, length, content_type="application/octet-stream"):
        objects = self._bucket(bucket_name)
        objects[object_name] = data.read(length)

    def get_object(self, bucket_name, object_name):
        objects = self._bucket(bucket_name)
        if object_name not in objects:
            raise make_s3_error("NoSuchKey")
        response = MagicMock()
        response.read.return_value = objects[object_name]
        return response

    def remove_object(self, bucket_name, object_name):
        self._bucket(bucket_name).pop(object_name, None)

    def list_objects(self, bucket_name, recursive=False):
        return iter([SimpleNamespace(object_name=key) for key in sorted(self._bucket(bucket_name))])

    def remove_objects(self, bucket_name, delete_object_list):
        objects = self._bucket(bucket_name)
        for item in delete_object_list:
            name = getattr(item, "name", None) or item._name
            if name in self.failing_keys:
                yield SimpleNamespace(name=name, code="AccessDenied")
            else:
                objects.pop(name, None)

    def _bucket(self, bucket_name):
        if bucket_name not in self.buckets:
            raise make_s3_error("NoSuchBucket")
        return self.buckets[bucket_name]


@pytest.fixture
def fake_minio():
    return FakeMinio()


@pytest.fixture
def minio_client_mock():
    """MagicMock restricted to the real Minio client's attributes."""
    return MagicMock(spec=Minio)


@pytest.fixture
def s3_client():
    """Real boto3 client; pair it with botocore's Stubber, never the network."""
    return boto3.client(
        "s3",
        region_name="us-east-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    )


@pytest.fixture
def minio_config():
    return StorageConfig(
        storage_type=StorageType.MINIO,
        endpoint="http://localhost:9000",
        access_key="minioadmin",
        secret_key="minioadmin",
        default_bucket="default-bucket",
        connection_timeout_millis=2000,
        socket_timeout_millis=5000,
        max_idle_connections=4,
    )


@pytest.fixture
def s3_config():
    return StorageConfig(
        storage_type=StorageType.S3,
        endpoint="http://localhost:4566",
        region="eu-west-1",
        path_style_access=True,
        access_key="testing",
        secret_key="testing",
        default_bucket="default-bucket",
        connection_timeout_millis=2000,
        socket_timeout_millis=5000,
        max_idle_connections=4,
    )
