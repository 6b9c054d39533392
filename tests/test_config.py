"""Tests for storage configuration loading and validation."""

import pytest
from pydantic import ValidationError

from osk.core.config import Settings, StorageConfig, StorageType, get_settings, load_config
from osk.infrastructure.exceptions import ConfigurationError


class TestStorageConfig:

    def test_storage_type_string_is_normalised(self):
        config = StorageConfig(storage_type=" MinIO ", endpoint="localhost:9000")
        assert config.storage_type is StorageType.MINIO

    def test_unknown_storage_type_rejected(self):
        with pytest.raises(ConfigurationError, match="Unsupported storage type"):
            StorageConfig(storage_type="gcs")

    def test_minio_requires_endpoint(self):
        with pytest.raises(ConfigurationError, match="endpoint"):
            StorageConfig(storage_type=StorageType.MINIO, endpoint="  ")

    def test_s3_endpoint_is_optional(self):
        config = StorageConfig(storage_type=StorageType.S3)
        assert config.endpoint is None
        assert config.has_credentials is False

    def test_half_configured_credentials_rejected(self):
        with pytest.raises(ConfigurationError, match="together"):
            StorageConfig(storage_type=StorageType.S3, access_key="key")

    def test_session_token_requires_keys(self):
        with pytest.raises(ConfigurationError, match="Session token"):
            StorageConfig(storage_type=StorageType.S3, session_token="token")

    @pytest.mark.parametrize("field", ["connection_timeout_millis", "socket_timeout_millis"])
    def test_non_positive_timeouts_rejected(self, field):
        with pytest.raises(ConfigurationError, match=field):
            StorageConfig(storage_type=StorageType.S3, **{field: 0})

    def test_auto_create_requires_default_bucket(self):
        with pytest.raises(ConfigurationError, match="default_bucket"):
            StorageConfig(storage_type=StorageType.S3, auto_create_bucket=True)

    def test_call_timeout_is_larger_timeout(self):
        config = StorageConfig(
            storage_type=StorageType.S3,
            connection_timeout_millis=30000,
            socket_timeout_millis=5000,
        )
        assert config.call_timeout_millis == 30000

    def test_config_is_immutable(self, s3_config):
        with pytest.raises(AttributeError):
            s3_config.region = "us-west-2"


class TestSettings:

    def test_from_settings_maps_every_field(self):
        settings = Settings(
            _env_file=None,
            OSK_STORAGE_TYPE=" S3 ",
            OSK_ENDPOINT="http://localhost:4566",
            OSK_REGION="ap-southeast-1",
            OSK_PATH_STYLE_ACCESS=True,
            OSK_ACCESS_KEY="key",
            OSK_SECRET_KEY="secret",
            OSK_SESSION_TOKEN="token",
            OSK_DEFAULT_BUCKET="reports",
            OSK_AUTO_CREATE_BUCKET=True,
            OSK_CONNECTION_TIMEOUT_MILLIS=1000,
            OSK_SOCKET_TIMEOUT_MILLIS=2000,
            OSK_DUAL_STACK_ENABLED=True,
            OSK_USER_AGENT_SUFFIX="reports-service",
        )

        config = StorageConfig.from_settings(settings)

        assert config.storage_type is StorageType.S3
        assert config.endpoint == "http://localhost:4566"
        assert config.region == "ap-southeast-1"
        assert config.path_style_access is True
        assert config.session_token == "token"
        assert config.default_bucket == "reports"
        assert config.auto_create_bucket is True
        assert config.call_timeout_millis == 2000
        assert config.dual_stack_enabled is True
        assert config.accelerate_mode_enabled is False
        assert config.user_agent_suffix == "reports-service"
        assert config.multipart_min_part_size == 5 * 1024 * 1024

    def test_unknown_storage_type_fails_validation(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, OSK_STORAGE_TYPE="azure")

    def test_load_config_reads_environment(self, monkeypatch):
        monkeypatch.setenv("OSK_STORAGE_TYPE", "minio")
        monkeypatch.setenv("OSK_ENDPOINT", "http://localhost:9000")
        monkeypatch.setenv("OSK_SOCKET_TIMEOUT_MILLIS", "7000")
        get_settings.cache_clear()
        try:
            config = load_config()
        finally:
            get_settings.cache_clear()

        assert config.storage_type is StorageType.MINIO
        assert config.endpoint == "http://localhost:9000"
        assert config.socket_timeout_millis == 7000

    def test_load_config_wraps_validation_errors(self, monkeypatch):
        monkeypatch.setenv("OSK_STORAGE_TYPE", "gcs")
        get_settings.cache_clear()
        try:
            with pytest.raises(ConfigurationError, match="Invalid storage settings"):
                load_config()
        finally:
            get_settings.cache_clear()
