"""
Bucket purge helper shared by the backends.

Buckets must be empty before they can be removed. Both backends list the
bucket page by page and delete in batches; only the two primitives differ.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional

logger = logging.getLogger(__name__)

# S3 DeleteObjects accepts at most 1000 keys per request
DEFAULT_BATCH_SIZE = 1000

DeleteBatch = Callable[[List[str]], List[str]]


@dataclass
class PurgeResult:
    """Outcome of emptying a bucket"""
    deleted: int = 0
    failed: int = 0
    failed_keys: List[str] = field(default_factory=list)
    listing_error: Optional[Exception] = None

    def describe(self) -> str:
        """What was left behind, empty if the purge was complete"""
        parts = []
        if self.failed:
            parts.append(f"{self.failed} object(s) could not be deleted")
        if self.listing_error is not None:
            parts.append(f"listing failed: {self.listing_error}")
        return "; ".join(parts)


def purge_bucket(
    bucket_name: str,
    keys: Iterable[str],
    delete_batch: DeleteBatch,
    batch_size: int = DEFAULT_BATCH_SIZE
) -> PurgeResult:
    """
    Delete every object yielded by ``keys`` without ever raising.

    Args:
        bucket_name: Bucket being emptied, for log context
        keys: Lazy, paginated listing of object keys
        delete_batch: Deletes the given keys and returns those that failed
        batch_size: Maximum keys per delete call

    Returns:
        PurgeResult with deleted and failed counts
    """
    result = PurgeResult()
    batch: List[str] = []

    def flush():
        try:
            failed = list(delete_batch(list(batch)))
        except Exception as e:
            logger.warning(f"删除对象批次失败 {bucket_name} ({len(batch)} 个对象): {e}")
            failed = list(batch)
        for key in failed:
            logger.warning(f"删除对象失败: {bucket_name}/{key}")
        result.failed += len(failed)
        result.failed_keys.extend(failed)
        result.deleted += len(batch) - len(failed)
        batch.clear()

    try:
        for key in keys:
            batch.append(key)
            if len(batch) >= batch_size:
                flush()
    except Exception as e:
        # listing broke mid-way; keys already collected are still deleted below
        logger.error(f"❌ 列出存储桶对象失败 {bucket_name}: {e}")
        result.listing_error = e

    if batch:
        flush()

    if result.deleted:
        logger.debug(f"已从存储桶 {bucket_name} 删除 {result.deleted} 个对象")
    else:
        logger.debug(f"存储桶 {bucket_name} 中没有需要删除的对象")
    if result.failed:
        logger.warning(f"存储桶 {bucket_name} 中有 {result.failed} 个对象删除失败")

    return result
