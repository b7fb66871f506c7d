"""
Base protocol for the transport to a Redis-compatible store.

This module defines the Transport protocol that all backends must implement.
Each method is one primitive command operating on strings and integers;
typed marshalling happens strictly above this boundary.

Invariants:
    - One method call is one round trip (bulk variants are one batch)
    - Backend failures surface as TransportError, never as backend exceptions
    - ZRANGE-family methods return the raw flat reply; pairing WITHSCORES
      replies is the caller's job
    - Transports never retry

How to change safely:
    - Protocol changes require updating all implementations
    - Keep return shapes identical across backends; adapter tests run against
      InMemoryTransport and integration tests against RedisTransport
"""

from __future__ import annotations

import logging
from abc import abstractmethod
from typing import (
    TYPE_CHECKING,
    Any,
    Dict,
    List,
    Optional,
    Protocol,
    Sequence,
    Tuple,
    Union,
    runtime_checkable,
)

if TYPE_CHECKING:
    from ..config import RedisConfig

logger = logging.getLogger(__name__)

WireValue = Union[str, int, float]
Bound = Union[int, float, str]


@runtime_checkable
class Transport(Protocol):
    """Protocol for store backends.

    Example:
        >>> transport = RedisTransport(RedisConfig.from_env())
        >>> await transport.connect()
        >>> await transport.set("greeting", "hello")
        >>> await transport.get("greeting")
        'hello'
    """

    @property
    @abstractmethod
    def is_connected(self) -> bool:
        """Whether currently connected to the backend."""
        ...

    @abstractmethod
    async def connect(self) -> None:
        """Connect to the backend.

        Raises:
            TransportConnectionError: If connection fails
        """
        ...

    @abstractmethod
    async def close(self) -> None:
        """Close the connection and release resources."""
        ...

    # Keys

    @abstractmethod
    async def delete(self, key: str) -> int: ...

    @abstractmethod
    async def exists(self, key: str) -> int: ...

    @abstractmethod
    async def type(self, key: str) -> str: ...

    @abstractmethod
    async def rename(self, key: str, new_key: str) -> bool:
        """RENAME. Fails with TransportError if key does not exist."""
        ...

    @abstractmethod
    async def renamenx(self, key: str, new_key: str) -> bool:
        """RENAMENX. False if new_key already exists."""
        ...

    @abstractmethod
    async def expire(self, key: str, seconds: int) -> bool: ...

    @abstractmethod
    async def expireat(self, key: str, when: int) -> bool: ...

    @abstractmethod
    async def persist(self, key: str) -> bool: ...

    @abstractmethod
    async def ttl(self, key: str) -> int:
        """Seconds to live; -1 without expiry, -2 if the key is missing."""
        ...

    # Strings

    @abstractmethod
    async def get(self, key: str) -> Optional[str]: ...

    @abstractmethod
    async def set(self, key: str, value: WireValue) -> bool: ...

    @abstractmethod
    async def setnx(self, key: str, value: WireValue) -> bool: ...

    # Hashes

    @abstractmethod
    async def hset(self, key: str, field: WireValue, value: WireValue) -> int: ...

    @abstractmethod
    async def hsetnx(self, key: str, field: WireValue, value: WireValue) -> bool: ...

    @abstractmethod
    async def hsetnx_many(
        self, key: str, pairs: Sequence[Tuple[WireValue, WireValue]]
    ) -> List[bool]:
        """HSETNX for each pair, sent as one pipelined batch."""
        ...

    @abstractmethod
    async def hget(self, key: str, field: WireValue) -> Optional[str]: ...

    @abstractmethod
    async def hexists(self, key: str, field: WireValue) -> bool: ...

    @abstractmethod
    async def hdel(self, key: str, field: WireValue) -> int: ...

    @abstractmethod
    async def hkeys(self, key: str) -> List[str]: ...

    @abstractmethod
    async def hvals(self, key: str) -> List[str]: ...

    @abstractmethod
    async def hgetall(self, key: str) -> Dict[str, str]: ...

    @abstractmethod
    async def hlen(self, key: str) -> int: ...

    @abstractmethod
    async def hmset(self, key: str, pairs: Sequence[Tuple[WireValue, WireValue]]) -> int:
        """Set many fields at once. Returns the number of fields added."""
        ...

    @abstractmethod
    async def hmget(self, key: str, fields: Sequence[WireValue]) -> List[Optional[str]]: ...

    @abstractmethod
    async def hincrby(self, key: str, field: WireValue, amount: int) -> int: ...

    # Lists

    @abstractmethod
    async def rpush(self, key: str, *values: WireValue) -> int: ...

    @abstractmethod
    async def lpush(self, key: str, *values: WireValue) -> int: ...

    @abstractmethod
    async def rpop(self, key: str) -> Optional[str]: ...

    @abstractmethod
    async def lpop(self, key: str) -> Optional[str]: ...

    @abstractmethod
    async def lrange(self, key: str, start: int, stop: int) -> List[str]: ...

    @abstractmethod
    async def linsert(self, key: str, where: str, pivot: WireValue, value: WireValue) -> int: ...

    @abstractmethod
    async def lrem(self, key: str, count: int, value: WireValue) -> int: ...

    @abstractmethod
    async def lset(self, key: str, index: int, value: WireValue) -> bool: ...

    @abstractmethod
    async def lindex(self, key: str, index: int) -> Optional[str]: ...

    @abstractmethod
    async def llen(self, key: str) -> int: ...

    @abstractmethod
    async def ltrim(self, key: str, start: int, stop: int) -> bool: ...

    # Sets

    @abstractmethod
    async def sadd(self, key: str, *members: WireValue) -> int: ...

    @abstractmethod
    async def spop(self, key: str) -> Optional[str]: ...

    @abstractmethod
    async def smembers(self, key: str) -> List[str]: ...

    @abstractmethod
    async def sismember(self, key: str, member: WireValue) -> bool: ...

    @abstractmethod
    async def srem(self, key: str, member: WireValue) -> int: ...

    @abstractmethod
    async def scard(self, key: str) -> int: ...

    # Sorted sets

    @abstractmethod
    async def zadd(self, key: str, pairs: Sequence[Tuple[WireValue, float]]) -> int:
        """Upsert (member, score) pairs. Returns the number of new members."""
        ...

    @abstractmethod
    async def zscore(self, key: str, member: WireValue) -> Optional[Union[str, float]]: ...

    @abstractmethod
    async def zrank(self, key: str, member: WireValue) -> Optional[int]: ...

    @abstractmethod
    async def zrevrank(self, key: str, member: WireValue) -> Optional[int]: ...

    @abstractmethod
    async def zrange(
        self, key: str, start: int, stop: int, withscores: bool = False
    ) -> List[Any]: ...

    @abstractmethod
    async def zrevrange(
        self, key: str, start: int, stop: int, withscores: bool = False
    ) -> List[Any]: ...

    @abstractmethod
    async def zrangebyscore(
        self,
        key: str,
        min: Bound,
        max: Bound,
        withscores: bool = False,
        limit: Optional[Tuple[int, int]] = None,
    ) -> List[Any]: ...

    @abstractmethod
    async def zrevrangebyscore(
        self,
        key: str,
        max: Bound,
        min: Bound,
        withscores: bool = False,
        limit: Optional[Tuple[int, int]] = None,
    ) -> List[Any]: ...

    @abstractmethod
    async def zcount(self, key: str, min: Bound, max: Bound) -> int: ...

    @abstractmethod
    async def zrem(self, key: str, member: WireValue) -> int: ...

    @abstractmethod
    async def zremrangebyrank(self, key: str, start: int, stop: int) -> int: ...

    @abstractmethod
    async def zremrangebyscore(self, key: str, min: Bound, max: Bound) -> int: ...

    @abstractmethod
    async def zcard(self, key: str) -> int: ...

    @abstractmethod
    async def zincrby(self, key: str, amount: float, member: WireValue) -> Union[str, float]: ...


def create_transport(
    config: Optional["RedisConfig"] = None,
    backend: str = "redis",
) -> Transport:
    """Factory function to create a transport.

    Args:
        config: Connection settings (loaded from the environment if omitted)
        backend: "redis" for RedisTransport, "memory" for InMemoryTransport

    Returns:
        An unconnected Transport

    Raises:
        ValueError: If backend is not supported
    """
    from ..config import RedisConfig
    from .memory import InMemoryTransport
    from .redis_server import RedisTransport

    logger.debug("Creating transport", extra={"backend": backend})
    if backend == "redis":
        return RedisTransport(config or RedisConfig.from_env())
    elif backend == "memory":
        return InMemoryTransport()
    else:
        raise ValueError(f"Unsupported transport backend: {backend}")
