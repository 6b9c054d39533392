"""
AWS S3 Object Storage Adapter

Implements BucketOperations and ObjectOperations on a boto3 S3 client,
for AWS S3 and S3-compatible services.
"""

import logging
from typing import List, Optional

from botocore.exceptions import ClientError

from osk.infrastructure.exceptions import BucketOperationError, ObjectOperationError
from .base import (
    BucketOperations,
    ObjectOperations,
    validate_bucket_name,
    validate_object_key,
    validate_payload,
)
from .purge import DEFAULT_BATCH_SIZE, PurgeResult, purge_bucket

logger = logging.getLogger(__name__)

MISSING_BUCKET_CODES = ("404", "NoSuchBucket", "NotFound")
MISSING_KEY_CODES = ("404", "NoSuchKey", "NotFound")
# us-east-1 is the one region that rejects an explicit LocationConstraint
DEFAULT_REGION = "us-east-1"


def error_code(exc: ClientError) -> str:
    return str(exc.response.get("Error", {}).get("Code", ""))


class S3BucketOperations(BucketOperations):
    """
    S3 implementation of BucketOperations
    """

    backend_name = "s3"

    def create(self, bucket_name: str) -> bool:
        """Create bucket if it doesn't exist"""
        validate_bucket_name(bucket_name)
        logger.info(f"创建S3存储桶: {bucket_name}")
        try:
            if self._exists(bucket_name):
                logger.info(f"S3存储桶 '{bucket_name}' 已存在")
                return True

            kwargs = {"Bucket": bucket_name}
            region = self.client.meta.region_name
            if region and region != DEFAULT_REGION:
                kwargs["CreateBucketConfiguration"] = {"LocationConstraint": region}
            self.client.create_bucket(**kwargs)
        except ClientError as e:
            if error_code(e) == "BucketAlreadyOwnedByYou":
                logger.info(f"S3存储桶 '{bucket_name}' 已存在")
                return True
            raise self._error("create", bucket_name, e) from e
        except Exception as e:
            raise self._error("create", bucket_name, e) from e

        logger.info(f"✅ 创建存储桶 '{bucket_name}' 成功")
        return True

    def delete(self, bucket_name: str) -> bool:
        """Empty the bucket, then remove it"""
        validate_bucket_name(bucket_name)
        logger.info(f"删除S3存储桶: {bucket_name}")
        purged = None
        try:
            if not self._exists(bucket_name):
                logger.info(f"S3存储桶 '{bucket_name}' 不存在")
                return True

            purged = purge_bucket(
                bucket_name,
                self._iter_keys(bucket_name),
                self._delete_batch(bucket_name),
                batch_size=DEFAULT_BATCH_SIZE,
            )

            self.client.delete_bucket(Bucket=bucket_name)
        except Exception as e:
            raise self._error("delete", bucket_name, e, purged) from e

        logger.info(f"✅ 删除存储桶 '{bucket_name}' 成功")
        return True

    def list_all(self) -> List[str]:
        """List bucket names across all pages"""
        logger.debug("列出所有S3存储桶")
        names = []
        kwargs = {}
        try:
            while True:
                response = self.client.list_buckets(**kwargs)
                names.extend(bucket["Name"] for bucket in response.get("Buckets", []))
                token = response.get("ContinuationToken")
                if not token:
                    break
                kwargs["ContinuationToken"] = token
        except Exception as e:
            raise self._error("list", None, e) from e

        logger.debug(f"共找到 {len(names)} 个S3存储桶")
        return names

    def _exists(self, bucket_name: str) -> bool:
        try:
            self.client.head_bucket(Bucket=bucket_name)
            return True
        except ClientError as e:
            if error_code(e) in MISSING_BUCKET_CODES:
                return False
            raise

    def _iter_keys(self, bucket_name: str):
        paginator = self.client.get_paginator("list_objects_v2")
        for page in paginator.paginate(Bucket=bucket_name):
            for item in page.get("Contents", []):
                yield item["Key"]

    def _delete_batch(self, bucket_name: str):
        def delete(keys: List[str]) -> List[str]:
            response = self.client.delete_objects(
                Bucket=bucket_name,
                Delete={"Objects": [{"Key": key} for key in keys], "Quiet": True},
            )
            return [error["Key"] for error in response.get("Errors", [])]
        return delete

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
        logger.error(f"❌ S3存储桶操作失败 ({operation}{target}){detail}: {exc}", exc_info=True)
        return BucketOperationError(
            f"Failed to {operation} S3 bucket{target}{detail}",
            operation=operation,
            bucket_name=bucket_name,
            cause=exc,
        )


class S3ObjectOperations(ObjectOperations):
    """
    S3 implementation of ObjectOperations
    """

    backend_name = "s3"

    def upload(
        self,
        bucket_name: str,
        object_name: str,
        data: bytes,
        content_type: Optional[str] = None
    ) -> bool:
        """Upload bytes to S3"""
        validate_bucket_name(bucket_name)
        validate_object_key(object_name)
        payload = validate_payload(data)

        logger.debug(f"正在上传对象: {bucket_name}/{object_name} (大小: {len(payload)}字节)")
        kwargs = {"Bucket": bucket_name, "Key": object_name, "Body": payload}
        if content_type:
            kwargs["ContentType"] = content_type
        try:
            self.client.put_object(**kwargs)
        except Exception as e:
            raise self._error("upload", bucket_name, object_name, e) from e

        logger.info(f"✅ 文件对象上传成功: {bucket_name}/{object_name}")
        return True

    def download(self, bucket_name: str, object_name: str) -> Optional[bytes]:
        """Download object content, None if the key does not exist"""
        validate_bucket_name(bucket_name)
        validate_object_key(object_name)

        logger.debug(f"正在下载对象: {bucket_name}/{object_name}")
        try:
            response = self.client.get_object(Bucket=bucket_name, Key=object_name)
            body = response["Body"]
            try:
                data = body.read()
            finally:
                body.close()
        except ClientError as e:
            if error_code(e) in MISSING_KEY_CODES:
                logger.warning(f"对象不存在: {bucket_name}/{object_name}")
                return None
            raise self._error("download", bucket_name, object_name, e) from e
        except Exception as e:
            raise self._error("download", bucket_name, object_name, e) from e

        logger.info(f"✅ 文件下载成功: {bucket_name}/{object_name} ({len(data)}字节)")
        return data

    def delete(self, bucket_name: str, object_name: str) -> bool:
        """Delete object from S3"""
        validate_bucket_name(bucket_name)
        validate_object_key(object_name)

        logger.debug(f"正在删除文件: {bucket_name}/{object_name}")
        try:
            self.client.delete_object(Bucket=bucket_name, Key=object_name)
        except Exception as e:
            raise self._error("delete", bucket_name, object_name, e) from e

        logger.info(f"✅ 文件删除成功: {bucket_name}/{object_name}")
        return True

    def list(self, bucket_name: str) -> List[str]:
        """List object keys across all pages"""
        validate_bucket_name(bucket_name)
        keys = []
        try:
            paginator = self.client.get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=bucket_name):
                keys.extend(item["Key"] for item in page.get("Contents", []))
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
        logger.error(f"❌ S3对象操作失败 ({operation} {target}): {exc}", exc_info=True)
        return ObjectOperationError(
            f"Failed to {operation} S3 object: {target}",
            operation=operation,
            bucket_name=bucket_name,
            object_name=object_name,
            cause=exc,
        )
