"""Scalar adapter: a single string-typed key."""

from __future__ import annotations

from typing import Any, Optional

from ..config import EntityConfig
from ..transport.base import Transport
from .base import RedisObject


class RedisValue(RedisObject):
    """Handle to a scalar value.

    If ``default`` is configured, SETNX is scheduled on construction and not
    awaited: a get() racing it may still see None. Await ``seeding`` to be
    sure the default is in place.

    Example:
        >>> hits = RedisValue("hits", transport, marshal=int, default=0)
        >>> await hits.seeding
        >>> await hits.get()
        0

    Redis: GET, SET, SETNX
    """

    def __init__(
        self,
        key: str,
        transport: Optional[Transport] = None,
        config: Optional[EntityConfig] = None,
        **options: Any,
    ) -> None:
        super().__init__(key, transport, config, **options)

        if self.config.default is not None:
            key, wire = self.key, self.codec.to_wire(self.config.default)
            self._seed(lambda: self.transport.setnx(key, wire))

    async def set(self, value: Any, marshal: Any = None) -> bool:
        return await self.transport.set(self.key, self.codec.to_wire(value, marshal))

    set_value = set

    async def get(self, marshal: Any = None) -> Any:
        """Current value, or None if the key does not exist."""
        return self.codec.from_wire(await self.transport.get(self.key), marshal)

    get_value = get

    async def delete(self) -> int:
        return await self.clear()
