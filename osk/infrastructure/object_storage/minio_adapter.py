"""
MinIO Object Storage Adapter

Implements BucketOperations and ObjectOperations for a MinIO server.
This adapter wraps the MinIO client to provide a consistent interface.
"""

import io
import logging
from typing import List, Optional

from minio import Minio
from minio.deleteobjects import DeleteObject
from minio.error import S3Error

from osk.infrastructure.exceptions import BucketOperationError, ObjectOperationError
from .base import (
    BucketOperations,
    ObjectOperations,
    validate_bucket_name,
    validate_object_key,
    validate_payload,
)
from .purge import PurgeResult, purge_bucket

logger = logging.getLogger(__name__)

NOT_FOUND_CODES = ("NoSuchKey",)


class MinIOBucketOperations(BucketOperations):
    """
    MinIO implementation of BucketOperations
    """

    backend_name = "minio"

    def __init__(self, client: Minio):
        super().__init__(client)

    def create(self, bucket_name: str) -> bool:
        """Create bucket if it doesn't exist"""
        validate_bucket_name(bucket_name)
        logger.info(f"创建MinIO存储桶: {bucket_name}")
        try:
            if self.client.bucket_exists(bucket_name=bucket_name):
                logger.info(f"MinIO存储桶 '{bucket_name}' 已存在")
                return True
            self.client.make_bucket(bucket_name=bucket_name)
        except Exception as e:
            raise self._error("create", bucket_name, e) from e

        logger.info(f"✅ 创建存储桶 '{bucket_name}' 成功")
        return True

    def delete(self, bucket_name: str) -> bool:
        """Empty the bucket, then remove it"""
        validate_bucket_name(bucket_name)
        logger.info(f"删除MinIO存储桶: {bucket_name}")
        purged = None
        try:
            if not self.client.bucket_exists(bucket_name=bucket_name):
                logger.info(f"MinIO存储桶 '{bucket_name}' 不存在")
                return True

            purged = purge_bucket(bucket_name, self._iter_keys(bucket_name), self._remove_batch(bucket_name))

            self.client.remove_bucket(bucket_name=bucket_name)
        except Exception as e:
            raise self._error("delete", bucket_name, e, purged) from e

        logger.info(f"✅ 删除存储桶 '{bucket_name}' 成功")
        return True

    def list_all(self) -> List[str]:
        """List bucket names"""
        logger.debug("列出所有MinIO存储桶")
        try:
            buckets = self.client.list_buckets()
        except Exception as e:
            raise self._error("list", None, e) from e

        names = [bucket.name for bucket in buckets]
        logger.debug(f"共找到 {len(names)} 个MinIO存储桶")
        return names

    def _iter_keys(self, bucket_name: str):
        for obj in self.client.list_objects(bucket_name=bucket_name, recursive=True):
            yield obj.object_name

    def _remove_batch(self, bucket_name: str):
        def remove(keys: List[str]) -> List[str]:
            # remove_objects is lazy: errors only surface while iterating
            errors = self.client.remove_objects(
                bucket_name=bucket_name,
                delete_object_list=[DeleteObject(key) for key in keys],
            )
            return [error.name for error in errors]
        return remove

    @staticmethod
    def _error(
        operation: str,
        bucket_name: Optional[str],
        exc: Exception,
        purged: Optional[PurgeResult] = None
    ) -> BucketOperationError:
        target = f" '{bucket_name}'" if bucket_name else "s"
        leftover = purged.describe() if purged else ""
        detail = f" ({leftover})" if leftover else ""
        logger.error(f"❌ MinIO存储桶操作失败 ({operation}{target}){detail}: {exc}", exc_info=True)
        return BucketOperationError(
            f"Failed to {operation} MinIO bucket{target}{detail}",
            operation=operation,
            bucket_name=bucket_name,
            cause=exc,
        )


class MinIOObjectOperations(ObjectOperations):
    """
    MinIO implementation of ObjectOperations
    """

    backend_name = "minio"

    def __init__(self, client: Minio):
        super().__init__(client)

    def upload(
        self,
        bucket_name: str,
        object_name: str,
        data: bytes,
        content_type: Optional[str] = None
    ) -> bool:
        """Upload bytes to MinIO"""
        validate_bucket_name(bucket_name)
        validate_object_key(object_name)
        payload = validate_payload(data)

        logger.debug(f"正在上传对象: {bucket_name}/{object_name} (大小: {len(payload)}字节)")
        kwargs = {"content_type": content_type} if content_type else {}
        try:
            self.client.put_object(
                bucket_name=bucket_name,
                object_name=object_name,
                data=io.BytesIO(payload),
                length=len(payload),
                **kwargs
            )
        except Exception as e:
            raise self._error("upload", bucket_name, object_name, e) from e

        logger.info(f"✅ 文件对象上传成功: {bucket_name}/{object_name}")
        return True

    def download(self, bucket_name: str, object_name: str) -> Optional[bytes]:
        """Download object content, None if the key does not exist"""
        validate_bucket_name(bucket_name)
        validate_object_key(object_name)

        logger.debug(f"正在下载对象: {bucket_name}/{object_name}")
        response = None
        try:
            response = self.client.get_object(bucket_name=bucket_name, object_name=object_name)
            data = response.read()
        except S3Error as e:
            if e.code in NOT_FOUND_CODES:
                logger.warning(f"对象不存在: {bucket_name}/{object_name}")
                return None
            raise self._error("download", bucket_name, object_name, e) from e
        except Exception as e:
            raise self._error("download", bucket_name, object_name, e) from e
        finally:
            if response is not None:
                response.close()
                response.release_conn()

        logger.info(f"✅ 文件下载成功: {bucket_name}/{object_name} ({len(data)}字节)")
        return data

    def delete(self, bucket_name: str, object_name: str) -> bool:
        """Delete object from MinIO"""
        validate_bucket_name(bucket_name)
        validate_object_key(object_name)

        logger.debug(f"正在删除文件: {bucket_name}/{object_name}")
        try:
            self.client.remove_object(bucket_name=bucket_name, object_name=object_name)
        except Exception as e:
            raise self._error("delete", bucket_name, object_name, e) from e

        logger.info(f"✅ 文件删除成功: {bucket_name}/{object_name}")
        return True

    def list(self, bucket_name: str) -> List[str]:
        """List object keys; the SDK follows continuation markers itself"""
        validate_bucket_name(bucket_name)
        try:
            keys = [
                obj.object_name
                for obj in self.client.list_objects(bucket_name=bucket_name, recursive=True)
            ]
        except Exception as e:
            raise self._error("list", bucket_name, None, e) from e

        logger.debug(f"列出文件成功: {bucket_name} (共{len(keys)}个文件)")
        return keys

    @staticmethod
    def _error(
        operation: str,
        bucket_name: str,
        object_name: Optional[str],
        exc: Exception
    ) -> ObjectOperationError:
        target = f"{bucket_name}/{object_name}" if object_name else bucket_name
        logger.error(f"❌ MinIO对象操作失败 ({operation} {target}): {exc}", exc_info=True)
        return ObjectOperationError(
            f"Failed to {operation} MinIO object: {target}",
            operation=operation,
            bucket_name=bucket_name,
            object_name=object_name,
            cause=exc,
        )
