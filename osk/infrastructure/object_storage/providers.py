"""
Backend Client Providers

Build the long-lived SDK client for each backend from a validated StorageConfig.
Construction is in-memory only; the first network round trip happens on the
first storage call. Both SDK clients are safe to share across threads.
"""

import logging
import os
import socket
from typing import Tuple
from urllib.parse import urlsplit

import boto3
import certifi
import urllib3
from botocore.config import Config
from botocore.exceptions import BotoCoreError
from minio import Minio
from urllib3.connection import HTTPConnection

from osk.core.config import StorageConfig
from osk.infrastructure.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# retry only when the connection could not be established
CONNECT_RETRIES = 3
CONNECT_RETRY_BACKOFF = 0.2


def build_minio_client(config: StorageConfig) -> Minio:
    """
    Create a MinIO client with a bounded, keep-alive connection pool

    Args:
        config: Validated storage configuration

    Returns:
        Configured Minio client

    Raises:
        ConfigurationError: Endpoint or credentials are malformed
    """
    endpoint, secure = parse_minio_endpoint(config.endpoint)
    logger.info(f"初始化MinIO客户端, 终端: {endpoint}")

    try:
        client = Minio(
            endpoint=endpoint,
            access_key=config.access_key if config.has_credentials else None,
            secret_key=config.secret_key if config.has_credentials else None,
            session_token=config.session_token or None,
            secure=secure,
            region=config.region or None,
            http_client=build_http_client(config),
        )
        if config.user_agent_prefix and config.user_agent_suffix:
            client.set_app_info(config.user_agent_prefix, config.user_agent_suffix)
    except ValueError as e:
        raise ConfigurationError(f"Invalid MinIO configuration: {e}") from e

    logger.info(f"✅ MinIO客户端初始化完成: {endpoint}")
    return client


def build_http_client(config: StorageConfig) -> urllib3.PoolManager:
    """
    HTTP transport for the MinIO client.

    The total timeout is the larger of the connect and socket timeouts so a
    single call can never hang past it.
    """
    timeout = urllib3.Timeout(
        connect=config.connection_timeout_millis / 1000,
        read=config.socket_timeout_millis / 1000,
        total=config.call_timeout_millis / 1000,
    )
    retries = urllib3.Retry(
        total=CONNECT_RETRIES,
        connect=CONNECT_RETRIES,
        read=False,
        redirect=0,
        status=0,
        backoff_factor=CONNECT_RETRY_BACKOFF,
    )

    socket_options = list(HTTPConnection.default_socket_options)
    socket_options.append((socket.SOL_SOCKET, socket.SO_KEEPALIVE, 1))
    if hasattr(socket, "TCP_KEEPIDLE"):
        socket_options.append((socket.IPPROTO_TCP, socket.TCP_KEEPIDLE, config.keep_alive_minutes * 60))

    logger.debug(
        f"HTTP客户端配置: 连接超时 {config.connection_timeout_millis}ms, "
        f"读取超时 {config.socket_timeout_millis}ms, 连接池 {config.max_idle_connections}"
    )
    return urllib3.PoolManager(
        maxsize=config.max_idle_connections,
        timeout=timeout,
        retries=retries,
        socket_options=socket_options,
        cert_reqs="CERT_REQUIRED",
        ca_certs=os.environ.get("SSL_CERT_FILE") or certifi.where(),
    )


def parse_minio_endpoint(endpoint: str) -> Tuple[str, bool]:
    """
    Split an endpoint into the ``host[:port]`` form the MinIO SDK wants.

    ``http://`` and ``https://`` choose plain or TLS transport; an endpoint
    without a scheme uses TLS.

    Returns:
        (host[:port], secure)
    """
    if not endpoint or not endpoint.strip():
        raise ConfigurationError("MinIO endpoint is required")

    raw = endpoint.strip()
    if "://" not in raw:
        raw = f"https://{raw}"

    parts = urlsplit(raw)
    try:
        parts.port
    except ValueError as e:
        raise ConfigurationError(f"Invalid MinIO endpoint port: {endpoint!r}") from e

    if (parts.scheme not in ("http", "https") or not parts.hostname or parts.username
            or parts.path not in ("", "/") or parts.query or parts.fragment):
        raise ConfigurationError(f"Invalid MinIO endpoint: {endpoint!r}")

    return parts.netloc, parts.scheme == "https"


def build_s3_client(config: StorageConfig):
    """
    Create a boto3 S3 client

    Static credentials are used when configured; otherwise boto3 resolves
    credentials from the environment, shared config or instance profile.

    Args:
        config: Validated storage configuration

    Returns:
        boto3 S3 client

    Raises:
        ConfigurationError: Endpoint or region are malformed
    """
    endpoint_url = config.endpoint.strip() if config.endpoint and config.endpoint.strip() else None
    if endpoint_url is not None:
        parts = urlsplit(endpoint_url)
        if parts.scheme not in ("http", "https") or not parts.netloc:
            raise ConfigurationError(f"Invalid S3 endpoint: {config.endpoint!r}")

    session_kwargs = {"region_name": config.region or None}
    if config.has_credentials:
        session_kwargs["aws_access_key_id"] = config.access_key
        session_kwargs["aws_secret_access_key"] = config.secret_key
        if config.session_token:
            session_kwargs["aws_session_token"] = config.session_token
    else:
        logger.info("未配置S3访问密钥, 使用默认凭证链")

    try:
        session = boto3.session.Session(**session_kwargs)
        client = session.client("s3", endpoint_url=endpoint_url, config=build_s3_client_config(config))
    except (ValueError, BotoCoreError) as e:
        raise ConfigurationError(f"Invalid S3 configuration: {e}") from e

    logger.info(f"✅ S3客户端初始化完成: {endpoint_url or 'AWS默认终端'} ({config.region})")
    return client


def build_s3_client_config(config: StorageConfig) -> Config:
    """Transport and addressing options for the S3 client."""
    options = {
        "connect_timeout": config.connection_timeout_millis / 1000,
        "read_timeout": config.socket_timeout_millis / 1000,
        "max_pool_connections": config.max_idle_connections,
        "tcp_keepalive": True,
        "s3": {
            "addressing_style": "path" if config.path_style_access else "auto",
            "use_accelerate_endpoint": config.accelerate_mode_enabled,
            "use_dualstack_endpoint": config.dual_stack_enabled,
        },
    }
    if config.user_agent_prefix:
        options["user_agent_appid"] = config.user_agent_prefix
    if config.user_agent_suffix:
        options["user_agent_extra"] = config.user_agent_suffix
    return Config(**options)
