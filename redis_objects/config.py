"""
Configuration for redis-objects.

Two kinds of configuration live here:
- EntityConfig: per-handle options (marshalling, defaults, list bounds)
- RedisConfig: connection settings for the production transport, loaded
  from environment variables

Invariants:
    - Both configs are immutable after construction
    - Marshal specs are validated when an EntityConfig is built, not per call
    - Secrets are never logged or exposed in error messages

How to change safely:
    - Add new settings with defaults that maintain backward compatibility
    - New EntityConfig fields must be optional; handles are built with none
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Optional
from urllib.parse import urlsplit, urlunsplit

from .errors import UsageError
from .marshal import MarshalSpec, resolve_marshal

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EntityConfig:
    """Options for one handle.

    Attributes:
        marshal: Collection-wide default marshal spec
        marshal_keys: Per-field marshal specs (hashes only)
        key_marshaller: Marshal spec for hash field names (defaults to String)
        default: Seed value written if the key is absent when the handle is built
        max_length: Lists are trimmed to their last max_length elements after
            every push, unshift and insert

    Marshal specs are accepted in any form resolve_marshal() understands and
    stored resolved.
    """

    marshal: MarshalSpec = None
    marshal_keys: Mapping[str, MarshalSpec] = field(default_factory=dict)
    key_marshaller: MarshalSpec = None
    default: Any = None
    max_length: Optional[int] = None

    def __post_init__(self) -> None:
        # frozen: normalize through object.__setattr__
        object.__setattr__(self, "marshal", resolve_marshal(self.marshal))
        object.__setattr__(self, "key_marshaller", resolve_marshal(self.key_marshaller))

        if not isinstance(self.marshal_keys, Mapping):
            raise UsageError("marshal_keys must be a mapping", argument="marshal_keys")
        object.__setattr__(
            self,
            "marshal_keys",
            MappingProxyType({k: resolve_marshal(v) for k, v in self.marshal_keys.items()}),
        )

        if self.max_length is not None:
            if (
                not isinstance(self.max_length, int)
                or isinstance(self.max_length, bool)
                or self.max_length <= 0
            ):
                raise UsageError(
                    f"max_length must be a positive integer, got {self.max_length!r}",
                    argument="max_length",
                )

    def field_marshal(self, field_name: Any) -> MarshalSpec:
        """Spec configured for a hash field, or None."""
        try:
            return self.marshal_keys.get(field_name)
        except TypeError:
            # unhashable field names never have a per-field spec
            return None


@dataclass(frozen=True)
class RedisConfig:
    """Connection settings for RedisTransport.

    Attributes:
        url: Redis connection URL (redis://, rediss:// or unix://)
        socket_timeout: Per-command socket timeout in seconds (None waits forever)
        socket_connect_timeout: Connect timeout in seconds
        max_connections: Connection pool size
        health_check_interval: Seconds between idle-connection health checks (0 disables)
        client_name: Name reported via CLIENT SETNAME
    """

    url: str = "redis://localhost:6379/0"
    socket_timeout: Optional[float] = 5.0
    socket_connect_timeout: Optional[float] = 5.0
    max_connections: int = 10
    health_check_interval: int = 0
    client_name: Optional[str] = None

    @classmethod
    def from_env(cls) -> RedisConfig:
        """Load configuration from environment variables."""
        config = cls(
            url=os.getenv("REDIS_URL", "redis://localhost:6379/0"),
            socket_timeout=_optional_float(os.getenv("REDIS_SOCKET_TIMEOUT", "5.0")),
            socket_connect_timeout=_optional_float(os.getenv("REDIS_CONNECT_TIMEOUT", "5.0")),
            max_connections=int(os.getenv("REDIS_MAX_CONNECTIONS", "10")),
            health_check_interval=int(os.getenv("REDIS_HEALTH_CHECK_INTERVAL", "0")),
            client_name=os.getenv("REDIS_CLIENT_NAME"),
        )
        config.validate()
        return config

    def validate(self) -> None:
        """Validate configuration consistency.

        Raises:
            ValueError: If configuration is invalid.
        """
        scheme = urlsplit(self.url).scheme
        if scheme not in ("redis", "rediss", "unix"):
            raise ValueError(
                f"Invalid REDIS_URL scheme '{scheme}'. Must be one of: redis, rediss, unix"
            )
        if self.max_connections < 1:
            raise ValueError("REDIS_MAX_CONNECTIONS must be at least 1")
        if self.health_check_interval < 0:
            raise ValueError("REDIS_HEALTH_CHECK_INTERVAL must be non-negative")
        for name, value in (
            ("REDIS_SOCKET_TIMEOUT", self.socket_timeout),
            ("REDIS_CONNECT_TIMEOUT", self.socket_connect_timeout),
        ):
            if value is not None and value <= 0:
                raise ValueError(f"{name} must be positive")

    @property
    def redacted_url(self) -> str:
        """URL with any password replaced by '***'."""
        parts = urlsplit(self.url)
        if parts.password is None:
            return self.url
        netloc = parts.netloc.replace(f":{parts.password}@", ":***@", 1)
        return urlunsplit(parts._replace(netloc=netloc))

    def log_config(self) -> None:
        """Log configuration (redacting secrets)."""
        logger.info(
            "Redis configuration loaded",
            extra={
                "redis_url": self.redacted_url,
                "socket_timeout": self.socket_timeout,
                "max_connections": self.max_connections,
                "client_name": self.client_name,
            },
        )


def _optional_float(raw: Optional[str]) -> Optional[float]:
    if raw is None or raw.strip().lower() in ("", "none"):
        return None
    return float(raw)
