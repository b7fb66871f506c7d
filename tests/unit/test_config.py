"""
Unit tests for configuration.

Tests cover:
- EntityConfig normalization and validation
- RedisConfig environment loading, validation and redaction
"""

import logging

import pytest

from redis_objects.config import EntityConfig, RedisConfig
from redis_objects.errors import UsageError
from redis_objects.marshal import Marshal


class TestEntityConfig:
    """Tests for EntityConfig."""

    def test_defaults(self):
        config = EntityConfig()

        assert config.marshal is None
        assert config.key_marshaller is None
        assert config.default is None
        assert config.max_length is None
        assert dict(config.marshal_keys) == {}

    def test_specs_are_resolved(self):
        config = EntityConfig(marshal=int, marshal_keys={"tags": True}, key_marshaller="string")

        assert config.marshal is Marshal.INTEGER
        assert config.marshal_keys["tags"] is Marshal.JSON
        assert config.key_marshaller is Marshal.STRING

    def test_marshal_keys_are_read_only(self):
        config = EntityConfig(marshal_keys={"a": int})

        with pytest.raises(TypeError):
            config.marshal_keys["b"] = float

    def test_field_marshal(self):
        config = EntityConfig(marshal_keys={"age": int})

        assert config.field_marshal("age") is Marshal.INTEGER
        assert config.field_marshal("name") is None
        assert config.field_marshal(["unhashable"]) is None

    @pytest.mark.parametrize("max_length", [0, -1, 2.5, True])
    def test_invalid_max_length(self, max_length):
        with pytest.raises(UsageError) as exc_info:
            EntityConfig(max_length=max_length)

        assert exc_info.value.argument == "max_length"

    def test_unknown_marshal(self):
        with pytest.raises(UsageError):
            EntityConfig(marshal="msgpack")

    def test_marshal_keys_must_be_mapping(self):
        with pytest.raises(UsageError):
            EntityConfig(marshal_keys=[("a", int)])


class TestRedisConfig:
    """Tests for RedisConfig."""

    def test_defaults(self):
        config = RedisConfig()

        assert config.url == "redis://localhost:6379/0"
        assert config.socket_timeout == 5.0
        assert config.max_connections == 10
        config.validate()

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("REDIS_URL", "rediss://cache.internal:6380/2")
        monkeypatch.setenv("REDIS_SOCKET_TIMEOUT", "none")
        monkeypatch.setenv("REDIS_CONNECT_TIMEOUT", "1.5")
        monkeypatch.setenv("REDIS_MAX_CONNECTIONS", "32")
        monkeypatch.setenv("REDIS_HEALTH_CHECK_INTERVAL", "30")
        monkeypatch.setenv("REDIS_CLIENT_NAME", "worker-1")

        config = RedisConfig.from_env()

        assert config.url == "rediss://cache.internal:6380/2"
        assert config.socket_timeout is None
        assert config.socket_connect_timeout == 1.5
        assert config.max_connections == 32
        assert config.health_check_interval == 30
        assert config.client_name == "worker-1"

    def test_from_env_validates(self, monkeypatch):
        monkeypatch.setenv("REDIS_URL", "http://localhost:6379")

        with pytest.raises(ValueError, match="scheme"):
            RedisConfig.from_env()

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"max_connections": 0},
            {"health_check_interval": -1},
            {"socket_timeout": 0},
            {"socket_connect_timeout": -2.0},
        ],
    )
    def test_validate_rejects(self, kwargs):
        with pytest.raises(ValueError):
            RedisConfig(**kwargs).validate()

    def test_redacted_url(self):
        config = RedisConfig(url="redis://app:s3cret@db:6379/0")

        assert config.redacted_url == "redis://app:***@db:6379/0"
        assert RedisConfig().redacted_url == "redis://localhost:6379/0"

    def test_log_config_redacts(self, caplog):
        config = RedisConfig(url="redis://:s3cret@db:6379/0")

        with caplog.at_level(logging.INFO, logger="redis_objects.config"):
            config.log_config()

        record = caplog.records[-1]
        assert record.redis_url == "redis://:***@db:6379/0"
        assert "s3cret" not in caplog.text
