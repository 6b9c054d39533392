"""End-to-end behaviour of ObjectStorageClient over an in-memory MinIO server."""

from unittest.mock import MagicMock

import pytest

from osk.infrastructure.exceptions import BucketOperationError, InvalidArgumentError
from osk.infrastructure.object_storage import (
    BucketOperations,
    MinIOBucketOperations,
    MinIOObjectOperations,
    ObjectOperations,
    ObjectStorageClient,
)


@pytest.fixture
def storage(fake_minio):
    return ObjectStorageClient(MinIOBucketOperations(fake_minio), MinIOObjectOperations(fake_minio))


class TestDelegation:

    @pytest.fixture
    def ops(self):
        return MagicMock(spec=BucketOperations), MagicMock(spec=ObjectOperations)

    def test_every_call_goes_to_the_bound_operations(self, ops):
        bucket_ops, object_ops = ops
        client = ObjectStorageClient(bucket_ops, object_ops)

        client.create_bucket("b")
        client.delete_bucket("b")
        client.put_object("b", "k", b"data", "text/plain")
        client.get_object("b", "k")
        client.delete_object("b", "k")

        bucket_ops.create.assert_called_once_with("b")
        bucket_ops.delete.assert_called_once_with("b")
        object_ops.upload.assert_called_once_with("b", "k", b"data", "text/plain")
        object_ops.download.assert_called_once_with("b", "k")
        object_ops.delete.assert_called_once_with("b", "k")

    def test_listings_are_returned_as_copies(self, ops):
        bucket_ops, object_ops = ops
        buckets, keys = ["a"], ["k"]
        bucket_ops.list_all.return_value = buckets
        object_ops.list.return_value = keys
        client = ObjectStorageClient(bucket_ops, object_ops)

        listed_buckets = client.list_buckets()
        listed_keys = client.list_objects("a")
        listed_buckets.append("b")
        listed_keys.append("k2")

        assert buckets == ["a"]
        assert keys == ["k"]

    def test_backend_name(self, storage):
        assert storage.backend_name == "minio"


class TestStorageProperties:

    def test_created_bucket_is_listed(self, storage):
        storage.create_bucket("reports")
        assert "reports" in storage.list_buckets()

    def test_create_twice_is_idempotent(self, storage):
        assert storage.create_bucket("reports") is True
        assert storage.create_bucket("reports") is True
        assert storage.list_buckets().count("reports") == 1

    def test_delete_missing_bucket_succeeds(self, storage):
        assert storage.delete_bucket("never-created") is True

    @pytest.mark.parametrize("data", [b"", b"x", b"\x00\xff" * 1024])
    def test_put_object_is_listed(self, storage, data):
        storage.create_bucket("b")
        storage.put_object("b", "key", data)

        assert storage.list_objects("b") == ["key"]
        assert storage.get_object("b", "key") == data

    def test_overwrite_keeps_single_entry(self, storage):
        storage.create_bucket("b")
        storage.put_object("b", "key", b"first")
        storage.put_object("b", "key", b"second version")

        assert storage.list_objects("b") == ["key"]
        assert storage.get_object("b", "key") == b"second version"

    @pytest.mark.parametrize("existed", [True, False])
    def test_deleted_object_not_listed(self, storage, existed):
        storage.create_bucket("b")
        if existed:
            storage.put_object("b", "key", b"data")

        assert storage.delete_object("b", "key") is True
        assert "key" not in storage.list_objects("b")

    def test_get_missing_object_returns_none(self, storage):
        storage.create_bucket("b")
        assert storage.get_object("b", "never-uploaded") is None

    def test_delete_bucket_with_objects(self, storage, fake_minio):
        storage.create_bucket("b")
        for key in ("a.txt", "dir/b.txt", "dir/nested/c.txt"):
            storage.put_object("b", key, b"data")

        assert storage.delete_bucket("b") is True
        assert "b" not in storage.list_buckets()
        assert "b" not in fake_minio.buckets

    def test_full_lifecycle(self, storage):
        storage.create_bucket("t1")
        storage.put_object("t1", "a.txt", b"hello")
        assert storage.list_objects("t1") == ["a.txt"]

        storage.delete_object("t1", "a.txt")
        assert storage.list_objects("t1") == []

        storage.delete_bucket("t1")
        assert "t1" not in storage.list_buckets()

    def test_invalid_arguments(self, storage):
        with pytest.raises(InvalidArgumentError):
            storage.create_bucket("")
        with pytest.raises(InvalidArgumentError):
            storage.put_object("b", "", b"data")
        with pytest.raises(InvalidArgumentError):
            storage.put_object("b", "k", None)

    def test_invalid_argument_is_a_value_error(self, storage):
        with pytest.raises(ValueError):
            storage.list_objects("  ")

    def test_undeletable_object_blocks_bucket_removal(self, storage, fake_minio):
        storage.create_bucket("b")
        storage.put_object("b", "locked.txt", b"data")
        storage.put_object("b", "free.txt", b"data")
        fake_minio.failing_keys.add("locked.txt")

        with pytest.raises(BucketOperationError) as exc_info:
            storage.delete_bucket("b")

        assert "1 object(s) could not be deleted" in str(exc_info.value)
        assert storage.list_objects("b") == ["locked.txt"]
