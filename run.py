#!/usr/bin/env python3
import logging
import os
import sys
from datetime import datetime

from osk.core.config import get_settings, load_config
from osk.infrastructure.exceptions import InfrastructureError
from osk.infrastructure.object_storage import StorageFactory


def configure_logging(level: str = "INFO", log_dir: str = "logs") -> str:
    """Console plus timestamped file logging; returns the log file path."""
    if not os.path.exists(log_dir):
        os.makedirs(log_dir)

    logger = logging.getLogger()
    logger.setLevel(level)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)

    # 按启动时间生成日志文件
    log_filename = os.path.join(log_dir, f"osk_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log")
    file_handler = logging.FileHandler(log_filename, encoding='utf-8')
    file_handler.setLevel(level)

    formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    console_handler.setFormatter(formatter)
    file_handler.setFormatter(formatter)

    # 清除可能已存在的处理器，然后添加新的处理器
    logger.handlers = []
    logger.addHandler(console_handler)
    logger.addHandler(file_handler)

    # 降低SDK日志级别
    for name in ("botocore", "boto3", "urllib3"):
        logging.getLogger(name).setLevel(logging.WARNING)

    return log_filename


def main() -> int:
    try:
        config = load_config()
    except InfrastructureError as e:
        logging.basicConfig(level=logging.INFO)
        logging.getLogger(__name__).error(f"❌ 存储配置无效: {e}")
        return 1

    settings = get_settings()
    log_filename = configure_logging(settings.LOG_LEVEL, settings.LOG_DIR)
    logger = logging.getLogger(__name__)
    logger.info(f"日志文件路径: {log_filename}")

    try:
        client = StorageFactory.create_client(config)
        buckets = client.list_buckets()
    except InfrastructureError as e:
        logger.error(f"❌ 连接对象存储失败: {e}")
        return 1

    logger.info(f"已连接到{client.backend_name}, 当前存在{len(buckets)}个存储桶")
    for name in buckets:
        logger.info(f"  - {name}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
