"""
Redis transport implementation.

This module provides the production backend for the Transport protocol,
built on redis-py's asyncio client. It works with:
- Redis
- Valkey
- Any server speaking the Redis protocol (RESP2)

Invariants:
    - Responses are decoded to str (decode_responses=True)
    - Every redis-py exception is re-raised as TransportError with the
      original chained as __cause__
    - ZRANGE-family commands go through execute_command so WITHSCORES
      replies stay flat; the range engine pairs them
    - Commands issued while disconnected raise TransportConnectionError

How to change safely:
    - Test against a real server (tests/integration) before releasing
    - Keep return types aligned with InMemoryTransport
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Tuple, TypeVar, Union

from redis.asyncio import Redis
from redis.exceptions import RedisError

from ..config import RedisConfig
from ..errors import TransportConnectionError, TransportError
from .base import Bound, WireValue

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RedisTransport:
    """redis-py implementation of the Transport protocol.

    Attributes:
        config: Connection settings

    A pre-built ``redis.asyncio.Redis`` client may be passed in; it must be
    created with ``decode_responses=True``. Such a client is not closed by
    close(), its owner keeps that responsibility.

    Example:
        >>> transport = RedisTransport(RedisConfig(url="redis://localhost:6379/0"))
        >>> await transport.connect()
        >>> await transport.rpush("jobs", "a", "b")
        2
    """

    def __init__(
        self,
        config: Optional[RedisConfig] = None,
        client: Optional[Redis] = None,
    ) -> None:
        """Initialize Redis transport.

        Args:
            config: RedisConfig with connection settings
            client: Optional externally managed client
        """
        self.config = config or RedisConfig()
        self._client: Optional[Redis] = client
        self._owns_client = client is None
        self._connected = False

    @property
    def is_connected(self) -> bool:
        """Whether connected to Redis."""
        return self._connected and self._client is not None

    async def connect(self) -> None:
        """Connect to Redis and verify the server answers PING.

        Raises:
            TransportConnectionError: If connection fails
        """
        if self._connected:
            return

        try:
            if self._client is None:
                self._client = Redis.from_url(
                    self.config.url,
                    decode_responses=True,
                    socket_timeout=self.config.socket_timeout,
                    socket_connect_timeout=self.config.socket_connect_timeout,
                    max_connections=self.config.max_connections,
                    health_check_interval=self.config.health_check_interval,
                    client_name=self.config.client_name,
                )
            await self._client.ping()
            self._connected = True

            logger.info(
                "Connected to Redis",
                extra={
                    "redis_url": self.config.redacted_url,
                    "max_connections": self.config.max_connections,
                },
            )

        except RedisError as e:
            self._connected = False
            raise TransportConnectionError(
                f"Failed to connect to Redis: {e}",
                address=self.config.redacted_url,
            ) from e

    async def close(self) -> None:
        """Close the connection pool (only if this transport created it)."""
        if self._client is not None and self._owns_client:
            try:
                await self._client.aclose()
            except RedisError as e:
                logger.warning(f"Error closing Redis client: {e}")
            self._client = None

        self._connected = False
        logger.info("Redis connection closed")

    async def _run(
        self,
        command: str,
        key: Optional[str],
        call: Callable[[Redis], Awaitable[T]],
    ) -> T:
        if not self.is_connected:
            raise TransportConnectionError("Not connected", address=self.config.redacted_url)

        try:
            result = await call(self._client)
        except RedisError as e:
            raise TransportError(f"{command} failed: {e}", command=command, key=key) from e

        logger.debug("Redis command executed", extra={"command": command, "key": key})
        return result

    # Keys

    async def delete(self, key: str) -> int:
        return await self._run("DEL", key, lambda c: c.delete(key))

    async def exists(self, key: str) -> int:
        return await self._run("EXISTS", key, lambda c: c.exists(key))

    async def type(self, key: str) -> str:
        return await self._run("TYPE", key, lambda c: c.type(key))

    async def rename(self, key: str, new_key: str) -> bool:
        return bool(await self._run("RENAME", key, lambda c: c.rename(key, new_key)))

    async def renamenx(self, key: str, new_key: str) -> bool:
        return bool(await self._run("RENAMENX", key, lambda c: c.renamenx(key, new_key)))

    async def expire(self, key: str, seconds: int) -> bool:
        return bool(await self._run("EXPIRE", key, lambda c: c.expire(key, seconds)))

    async def expireat(self, key: str, when: int) -> bool:
        return bool(await self._run("EXPIREAT", key, lambda c: c.expireat(key, when)))

    async def persist(self, key: str) -> bool:
        return bool(await self._run("PERSIST", key, lambda c: c.persist(key)))

    async def ttl(self, key: str) -> int:
        return await self._run("TTL", key, lambda c: c.ttl(key))

    # Strings

    async def get(self, key: str) -> Optional[str]:
        return await self._run("GET", key, lambda c: c.get(key))

    async def set(self, key: str, value: WireValue) -> bool:
        return bool(await self._run("SET", key, lambda c: c.set(key, value)))

    async def setnx(self, key: str, value: WireValue) -> bool:
        return bool(await self._run("SETNX", key, lambda c: c.setnx(key, value)))

    # Hashes

    async def hset(self, key: str, field: WireValue, value: WireValue) -> int:
        return await self._run("HSET", key, lambda c: c.hset(key, field, value))

    async def hsetnx(self, key: str, field: WireValue, value: WireValue) -> bool:
        return bool(await self._run("HSETNX", key, lambda c: c.hsetnx(key, field, value)))

    async def hsetnx_many(
        self, key: str, pairs: Sequence[Tuple[WireValue, WireValue]]
    ) -> List[bool]:
        async def pipelined(c: Redis) -> List[Any]:
            async with c.pipeline(transaction=False) as pipe:
                for field, value in pairs:
                    pipe.hsetnx(key, field, value)
                return await pipe.execute()

        return [bool(r) for r in await self._run("HSETNX", key, pipelined)]

    async def hget(self, key: str, field: WireValue) -> Optional[str]:
        return await self._run("HGET", key, lambda c: c.hget(key, field))

    async def hexists(self, key: str, field: WireValue) -> bool:
        return bool(await self._run("HEXISTS", key, lambda c: c.hexists(key, field)))

    async def hdel(self, key: str, field: WireValue) -> int:
        return await self._run("HDEL", key, lambda c: c.hdel(key, field))

    async def hkeys(self, key: str) -> List[str]:
        return await self._run("HKEYS", key, lambda c: c.hkeys(key))

    async def hvals(self, key: str) -> List[str]:
        return await self._run("HVALS", key, lambda c: c.hvals(key))

    async def hgetall(self, key: str) -> Dict[str, str]:
        return await self._run("HGETALL", key, lambda c: c.hgetall(key))

    async def hlen(self, key: str) -> int:
        return await self._run("HLEN", key, lambda c: c.hlen(key))

    async def hmset(self, key: str, pairs: Sequence[Tuple[WireValue, WireValue]]) -> int:
        # HMSET is deprecated server-side; multi-field HSET is equivalent
        return await self._run("HMSET", key, lambda c: c.hset(key, mapping=dict(pairs)))

    async def hmget(self, key: str, fields: Sequence[WireValue]) -> List[Optional[str]]:
        return await self._run("HMGET", key, lambda c: c.hmget(key, list(fields)))

    async def hincrby(self, key: str, field: WireValue, amount: int) -> int:
        return await self._run("HINCRBY", key, lambda c: c.hincrby(key, field, amount))

    # Lists

    async def rpush(self, key: str, *values: WireValue) -> int:
        return await self._run("RPUSH", key, lambda c: c.rpush(key, *values))

    async def lpush(self, key: str, *values: WireValue) -> int:
        return await self._run("LPUSH", key, lambda c: c.lpush(key, *values))

    async def rpop(self, key: str) -> Optional[str]:
        return await self._run("RPOP", key, lambda c: c.rpop(key))

    async def lpop(self, key: str) -> Optional[str]:
        return await self._run("LPOP", key, lambda c: c.lpop(key))

    async def lrange(self, key: str, start: int, stop: int) -> List[str]:
        return await self._run("LRANGE", key, lambda c: c.lrange(key, start, stop))

    async def linsert(self, key: str, where: str, pivot: WireValue, value: WireValue) -> int:
        return await self._run("LINSERT", key, lambda c: c.linsert(key, where, pivot, value))

    async def lrem(self, key: str, count: int, value: WireValue) -> int:
        return await self._run("LREM", key, lambda c: c.lrem(key, count, value))

    async def lset(self, key: str, index: int, value: WireValue) -> bool:
        return bool(await self._run("LSET", key, lambda c: c.lset(key, index, value)))

    async def lindex(self, key: str, index: int) -> Optional[str]:
        return await self._run("LINDEX", key, lambda c: c.lindex(key, index))

    async def llen(self, key: str) -> int:
        return await self._run("LLEN", key, lambda c: c.llen(key))

    async def ltrim(self, key: str, start: int, stop: int) -> bool:
        return bool(await self._run("LTRIM", key, lambda c: c.ltrim(key, start, stop)))

    # Sets

    async def sadd(self, key: str, *members: WireValue) -> int:
        return await self._run("SADD", key, lambda c: c.sadd(key, *members))

    async def spop(self, key: str) -> Optional[str]:
        return await self._run("SPOP", key, lambda c: c.spop(key))

    async def smembers(self, key: str) -> List[str]:
        return list(await self._run("SMEMBERS", key, lambda c: c.smembers(key)))

    async def sismember(self, key: str, member: WireValue) -> bool:
        return bool(await self._run("SISMEMBER", key, lambda c: c.sismember(key, member)))

    async def srem(self, key: str, member: WireValue) -> int:
        return await self._run("SREM", key, lambda c: c.srem(key, member))

    async def scard(self, key: str) -> int:
        return await self._run("SCARD", key, lambda c: c.scard(key))

    # Sorted sets

    async def zadd(self, key: str, pairs: Sequence[Tuple[WireValue, float]]) -> int:
        return await self._run("ZADD", key, lambda c: c.zadd(key, dict(pairs)))

    async def zscore(self, key: str, member: WireValue) -> Optional[Union[str, float]]:
        return await self._run("ZSCORE", key, lambda c: c.zscore(key, member))

    async def zrank(self, key: str, member: WireValue) -> Optional[int]:
        return await self._run("ZRANK", key, lambda c: c.zrank(key, member))

    async def zrevrank(self, key: str, member: WireValue) -> Optional[int]:
        return await self._run("ZREVRANK", key, lambda c: c.zrevrank(key, member))

    async def zrange(
        self, key: str, start: int, stop: int, withscores: bool = False
    ) -> List[Any]:
        args = _with_scores([key, start, stop], withscores)
        return await self._run("ZRANGE", key, lambda c: c.execute_command("ZRANGE", *args))

    async def zrevrange(
        self, key: str, start: int, stop: int, withscores: bool = False
    ) -> List[Any]:
        args = _with_scores([key, start, stop], withscores)
        return await self._run("ZREVRANGE", key, lambda c: c.execute_command("ZREVRANGE", *args))

    async def zrangebyscore(
        self,
        key: str,
        min: Bound,
        max: Bound,
        withscores: bool = False,
        limit: Optional[Tuple[int, int]] = None,
    ) -> List[Any]:
        args = _with_limit(_with_scores([key, min, max], withscores), limit)
        return await self._run(
            "ZRANGEBYSCORE", key, lambda c: c.execute_command("ZRANGEBYSCORE", *args)
        )

    async def zrevrangebyscore(
        self,
        key: str,
        max: Bound,
        min: Bound,
        withscores: bool = False,
        limit: Optional[Tuple[int, int]] = None,
    ) -> List[Any]:
        args = _with_limit(_with_scores([key, max, min], withscores), limit)
        return await self._run(
            "ZREVRANGEBYSCORE", key, lambda c: c.execute_command("ZREVRANGEBYSCORE", *args)
        )

    async def zcount(self, key: str, min: Bound, max: Bound) -> int:
        return await self._run("ZCOUNT", key, lambda c: c.zcount(key, min, max))

    async def zrem(self, key: str, member: WireValue) -> int:
        return await self._run("ZREM", key, lambda c: c.zrem(key, member))

    async def zremrangebyrank(self, key: str, start: int, stop: int) -> int:
        return await self._run(
            "ZREMRANGEBYRANK", key, lambda c: c.zremrangebyrank(key, start, stop)
        )

    async def zremrangebyscore(self, key: str, min: Bound, max: Bound) -> int:
        return await self._run(
            "ZREMRANGEBYSCORE", key, lambda c: c.zremrangebyscore(key, min, max)
        )

    async def zcard(self, key: str) -> int:
        return await self._run("ZCARD", key, lambda c: c.zcard(key))

    async def zincrby(self, key: str, amount: float, member: WireValue) -> Union[str, float]:
        return await self._run("ZINCRBY", key, lambda c: c.zincrby(key, amount, member))


def _with_scores(args: List[Any], withscores: bool) -> List[Any]:
    if withscores:
        args.append("WITHSCORES")
    return args


def _with_limit(args: List[Any], limit: Optional[Tuple[int, int]]) -> List[Any]:
    if limit is not None:
        args.extend(("LIMIT", limit[0], limit[1]))
    return args
