import os
from dataclasses import dataclass, fields
from enum import Enum
from functools import lru_cache
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from osk.infrastructure.exceptions import ConfigurationError

project_root = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
env_path = os.path.join(project_root, '.env')
load_dotenv(env_path)

MIB = 1024 * 1024


class StorageType(str, Enum):
    """Supported storage backends"""
    S3 = "s3"
    MINIO = "minio"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(case_sensitive=True, env_file=".env", extra="ignore")

    # 存储后端
    OSK_STORAGE_TYPE: StorageType

    # 连接设置
    OSK_ENDPOINT: Optional[str] = None
    OSK_REGION: str = "us-east-1"
    OSK_PATH_STYLE_ACCESS: bool = False

    # 认证
    OSK_ACCESS_KEY: Optional[str] = None
    OSK_SECRET_KEY: Optional[str] = None
    OSK_SESSION_TOKEN: Optional[str] = None

    # 默认存储桶
    OSK_DEFAULT_BUCKET: Optional[str] = None
    OSK_AUTO_CREATE_BUCKET: bool = False

    # 超时与连接池
    OSK_CONNECTION_TIMEOUT_MILLIS: int = 10000
    OSK_SOCKET_TIMEOUT_MILLIS: int = 50000
    OSK_MAX_IDLE_CONNECTIONS: int = 10
    OSK_KEEP_ALIVE_MINUTES: int = 5

    # S3 专用
    OSK_ACCELERATE_MODE_ENABLED: bool = False
    OSK_DUAL_STACK_ENABLED: bool = False
    OSK_USER_AGENT_PREFIX: Optional[str] = None
    OSK_USER_AGENT_SUFFIX: Optional[str] = None

    # 分片上传阈值（保留，当前未使用）
    OSK_MULTIPART_MIN_PART_SIZE: int = 5 * MIB
    OSK_MULTIPART_COPY_THRESHOLD: int = 5 * 1024 * MIB
    OSK_MULTIPART_COPY_PART_SIZE: int = 100 * MIB
    OSK_MINIMUM_UPLOAD_PART_SIZE: int = 5 * MIB

    # 日志
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = Field(default="logs")

    @field_validator("OSK_STORAGE_TYPE", mode="before")
    @classmethod
    def normalize_storage_type(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().lower()
        return v


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Build the environment-backed settings once per process."""
    return Settings()


@dataclass(frozen=True)
class StorageConfig:
    """
    Validated, immutable storage configuration handed to the client providers.

    Built once at startup, either directly or from ``Settings``.
    """
    storage_type: StorageType
    endpoint: Optional[str] = None
    region: Optional[str] = "us-east-1"
    path_style_access: bool = False

    access_key: Optional[str] = None
    secret_key: Optional[str] = None
    session_token: Optional[str] = None

    default_bucket: Optional[str] = None
    auto_create_bucket: bool = False

    connection_timeout_millis: int = 10000
    socket_timeout_millis: int = 50000
    max_idle_connections: int = 10
    keep_alive_minutes: int = 5

    accelerate_mode_enabled: bool = False
    dual_stack_enabled: bool = False
    user_agent_prefix: Optional[str] = None
    user_agent_suffix: Optional[str] = None

    multipart_min_part_size: int = 5 * MIB
    multipart_copy_threshold: int = 5 * 1024 * MIB
    multipart_copy_part_size: int = 100 * MIB
    minimum_upload_part_size: int = 5 * MIB

    def __post_init__(self):
        storage_type = self.storage_type
        if isinstance(storage_type, str) and not isinstance(storage_type, StorageType):
            storage_type = storage_type.strip().lower()
        try:
            object.__setattr__(self, "storage_type", StorageType(storage_type))
        except ValueError:
            supported = ", ".join(t.value for t in StorageType)
            raise ConfigurationError(
                f"Unsupported storage type: {self.storage_type!r} (expected one of: {supported})"
            )

        if self.storage_type == StorageType.MINIO and not _has_text(self.endpoint):
            raise ConfigurationError("MinIO storage requires an endpoint")

        if _has_text(self.access_key) != _has_text(self.secret_key):
            raise ConfigurationError("Access key and secret key must be configured together")
        if _has_text(self.session_token) and not _has_text(self.access_key):
            raise ConfigurationError("Session token requires an access key and secret key")

        for name in ("connection_timeout_millis", "socket_timeout_millis",
                     "max_idle_connections", "keep_alive_minutes"):
            if getattr(self, name) <= 0:
                raise ConfigurationError(f"{name} must be positive, got {getattr(self, name)}")

        if self.auto_create_bucket and not _has_text(self.default_bucket):
            raise ConfigurationError("auto_create_bucket requires default_bucket to be set")

    @property
    def has_credentials(self) -> bool:
        return _has_text(self.access_key) and _has_text(self.secret_key)

    @property
    def call_timeout_millis(self) -> int:
        """Upper bound for a whole call: the larger of the connect and socket timeouts."""
        return max(self.connection_timeout_millis, self.socket_timeout_millis)

    @classmethod
    def from_settings(cls, settings: Settings) -> "StorageConfig":
        """Map ``OSK_*`` settings onto the matching config fields."""
        values = {}
        for field in fields(cls):
            values[field.name] = getattr(settings, f"OSK_{field.name.upper()}")
        return cls(**values)


def load_config() -> StorageConfig:
    """
    Load the storage configuration from the environment.

    Raises:
        ConfigurationError: Settings are missing or fail validation
    """
    try:
        settings = get_settings()
    except ValidationError as e:
        raise ConfigurationError(f"Invalid storage settings: {e}") from e
    return StorageConfig.from_settings(settings)


def _has_text(value: Optional[str]) -> bool:
    return value is not None and bool(value.strip())
