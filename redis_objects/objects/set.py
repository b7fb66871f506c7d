"""Set adapter. No ordering guarantee over members()."""

from __future__ import annotations

from typing import Any, Iterable, List

from .base import RedisObject


class RedisSet(RedisObject):
    """Handle to an unordered set.

    Example:
        >>> tags = RedisSet("post:1:tags", transport)
        >>> await tags.merge(["python", "redis"])
        2
        >>> await tags.is_member("redis")
        True
    """

    async def add(self, value: Any) -> int:
        """Add value unless already present. Redis: SADD"""
        return await self.transport.sadd(self.key, self.codec.to_wire(value))

    push = add

    async def pop(self) -> Any:
        """Remove and return an arbitrary member. Redis: SPOP"""
        return self.codec.from_wire(await self.transport.spop(self.key))

    async def merge(self, values: Iterable[Any]) -> int:
        """Add many values. Returns the number newly added. Redis: SADD"""
        wire = self.codec.all_to_wire(values)
        if not wire:
            return 0
        return await self.transport.sadd(self.key, *wire)

    async def members(self) -> List[Any]:
        """Redis: SMEMBERS"""
        return self.codec.all_from_wire(await self.transport.smembers(self.key))

    async def is_member(self, value: Any) -> bool:
        """Redis: SISMEMBER"""
        return await self.transport.sismember(self.key, self.codec.to_wire(value))

    ismember = is_member
    include = is_member
    contains = is_member

    async def delete(self, value: Any) -> int:
        """Remove value. Returns 1 if removed, 0 if absent. Redis: SREM"""
        return await self.transport.srem(self.key, self.codec.to_wire(value))

    async def length(self) -> int:
        """Redis: SCARD"""
        return await self.transport.scard(self.key)

    size = length
    count = length

    async def empty(self) -> bool:
        return await self.length() == 0

    is_empty = empty
