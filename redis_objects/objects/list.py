"""
List adapter.

Options:
    max_length: after every push, unshift and insert the list is trimmed to
        its last max_length elements; the caller still receives the result of
        the mutating command itself (e.g. the pre-trim length).
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, List, Optional

from ..errors import UsageError
from ..ranges import slice_bounds

from .base import RedisObject

logger = logging.getLogger(__name__)

INSERT_POSITIONS = ("BEFORE", "AFTER")


class RedisList(RedisObject):
    """Handle to a list.

    Example:
        >>> recent = RedisList("recent", transport, marshal=int, max_length=3)
        >>> for n in (1, 2, 3, 4):
        ...     await recent.push(n)
        >>> await recent.values()
        [2, 3, 4]
    """

    async def _trimmed(self, key: str, result: int) -> int:
        max_length = self.config.max_length
        if max_length:
            await self.transport.ltrim(key, -max_length, -1)
            logger.debug("List trimmed", extra={"key": key, "max_length": max_length})
        return result

    async def insert(self, where: str, pivot: Any, value: Any) -> int:
        """Insert value before or after the first occurrence of pivot.

        Args:
            where: "BEFORE" or "AFTER" (case-insensitive)

        Returns:
            New length, -1 if pivot was not found, 0 if the list is missing

        Redis: LINSERT
        """
        position = str(where).upper()
        if position not in INSERT_POSITIONS:
            raise UsageError(f"where must be BEFORE or AFTER, got {where!r}", argument="where")

        key = self.key
        result = await self.transport.linsert(
            key, position, self.codec.to_wire(pivot), self.codec.to_wire(value)
        )
        return await self._trimmed(key, result)

    async def push(self, value: Any) -> int:
        """Append a value. Redis: RPUSH"""
        key = self.key
        result = await self.transport.rpush(key, self.codec.to_wire(value))
        return await self._trimmed(key, result)

    async def push_all(self, values: Iterable[Any]) -> int:
        """Append many values in order. Redis: RPUSH"""
        wire = self.codec.all_to_wire(values)
        if not wire:
            return await self.length()
        key = self.key
        result = await self.transport.rpush(key, *wire)
        return await self._trimmed(key, result)

    pushall = push_all

    async def pop(self) -> Any:
        """Remove and return the last value. Redis: RPOP"""
        return self.codec.from_wire(await self.transport.rpop(self.key))

    async def unshift(self, value: Any) -> int:
        """Prepend a value. Redis: LPUSH"""
        key = self.key
        result = await self.transport.lpush(key, self.codec.to_wire(value))
        return await self._trimmed(key, result)

    async def unshift_all(self, values: Iterable[Any]) -> int:
        """Prepend many values; each is pushed to the head in turn, so the
        last value ends up first. Redis: LPUSH"""
        wire = self.codec.all_to_wire(values)
        if not wire:
            return await self.length()
        key = self.key
        result = await self.transport.lpush(key, *wire)
        return await self._trimmed(key, result)

    unshiftall = unshift_all

    async def shift(self) -> Any:
        """Remove and return the first value. Redis: LPOP"""
        return self.codec.from_wire(await self.transport.lpop(self.key))

    async def values(self) -> List[Any]:
        """All values. Redis: LRANGE 0 -1"""
        return await self.slice(0)

    async def slice(self, start: int, end: Optional[int] = None) -> List[Any]:
        """Values from start up to, not including, end.

        Mostly like a Python slice, so slice(0, -1) returns all but the last
        value; end=None reads through the last value. The exception is
        end=0, which also reads through the last value: slice(0, 0) is the
        whole list, not [].

        Redis: LRANGE
        """
        start, stop = slice_bounds(start, end)
        return self.codec.all_from_wire(await self.transport.lrange(self.key, start, stop))

    range = slice

    async def delete(self, value: Any, count: int = 0) -> int:
        """Remove occurrences of value.

        Args:
            count: 0 removes all; N > 0 the first N; N < 0 the last |N|

        Use clear() to delete the whole list.

        Redis: LREM
        """
        return await self.transport.lrem(self.key, count, self.codec.to_wire(value))

    async def set_at(self, index: int, value: Any) -> bool:
        """Redis: LSET"""
        return await self.transport.lset(self.key, index, self.codec.to_wire(value))

    setat = set_at

    async def at(self, index: int) -> Any:
        """Redis: LINDEX"""
        return self.codec.from_wire(await self.transport.lindex(self.key, index))

    async def first(self) -> Any:
        return await self.at(0)

    async def last(self) -> Any:
        return await self.at(-1)

    async def length(self) -> int:
        """Redis: LLEN"""
        return await self.transport.llen(self.key)

    size = length

    async def empty(self) -> bool:
        return await self.length() == 0

    is_empty = empty
