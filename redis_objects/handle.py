"""
Entity handle: the key + config + transport triple addressing one entry.

The handle owns no data; the store is the system of record. It provides
the key-level operations every collection shares (existence, type, delete,
rename, expiry).

Invariants:
    - key changes only after a successful rename/renamenx with adopt=True
    - Every operation reads the key once, when it is issued, so a rename
      never redirects a call that is already in flight
    - Handles never delete their key implicitly
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Union

from .config import EntityConfig
from .errors import UsageError
from .transport.base import Transport

logger = logging.getLogger(__name__)


class EntityHandle:
    """Key-level operations on one store entry.

    Attributes:
        config: Immutable per-entity options
        transport: Shared transport reference

    Example:
        >>> handle = EntityHandle("session:42", transport, EntityConfig())
        >>> await handle.expire(3600)
        True
        >>> await handle.rename("session:43")
        True
        >>> handle.key
        'session:43'
    """

    def __init__(self, key: str, transport: Transport, config: EntityConfig) -> None:
        if not isinstance(key, str) or not key:
            raise UsageError(f"key must be a non-empty string, got {key!r}", argument="key")
        self._key = key
        self.config = config
        self.transport = transport

    @property
    def key(self) -> str:
        """Current key. Read-only; use rename()/renamenx() with adopt=True."""
        return self._key

    async def exists(self) -> bool:
        return bool(await self.transport.exists(self._key))

    async def type(self) -> str:
        """Store type name: none, string, hash, list, set or zset."""
        return await self.transport.type(self._key)

    async def delete(self) -> int:
        """Delete the whole entry. Returns the number of keys removed."""
        return await self.transport.delete(self._key)

    clear = delete

    async def rename(self, new_key: Union[str, Any], adopt: bool = True) -> bool:
        """Rename the entry, overwriting new_key if it exists.

        Args:
            new_key: Destination key, or another handle/adapter whose key to use
            adopt: Point this handle at the new key once the rename succeeded

        Raises:
            TransportError: If the entry does not exist
        """
        old_key, destination = self._key, key_of(new_key)
        renamed = await self.transport.rename(old_key, destination)
        if renamed and adopt:
            self._adopt(old_key, destination)
        return renamed

    async def renamenx(self, new_key: Union[str, Any], adopt: bool = True) -> bool:
        """Rename only if new_key does not exist.

        Returns:
            False (and leaves key untouched) if the destination existed
        """
        old_key, destination = self._key, key_of(new_key)
        renamed = await self.transport.renamenx(old_key, destination)
        if renamed and adopt:
            self._adopt(old_key, destination)
        return renamed

    def _adopt(self, old_key: str, new_key: str) -> None:
        self._key = new_key
        logger.debug("Handle adopted renamed key", extra={"old_key": old_key, "key": new_key})

    async def expire(self, seconds: int) -> bool:
        return await self.transport.expire(self._key, _whole_seconds(seconds, "seconds"))

    async def expire_at(self, when: Union[int, float, datetime]) -> bool:
        """Expire at a unix timestamp or datetime (naive datetimes are local time)."""
        if isinstance(when, datetime):
            when = when.timestamp()
        return await self.transport.expireat(self._key, _whole_seconds(when, "when"))

    expireat = expire_at

    async def persist(self) -> bool:
        return await self.transport.persist(self._key)

    async def ttl(self) -> int:
        """Seconds to live; -1 if the entry never expires, -2 if it is missing."""
        return await self.transport.ttl(self._key)

    def __repr__(self) -> str:
        return f"<EntityHandle key={self._key!r}>"


def key_of(target: Union[str, Any]) -> str:
    """Key named by a string, a handle, or an adapter."""
    if isinstance(target, str):
        return target
    key = getattr(target, "key", None)
    if isinstance(key, str):
        return key
    raise UsageError(f"Cannot use {target!r} as a key", argument="new_key")


def _whole_seconds(value: Any, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise UsageError(f"{name} must be a number, got {type(value).__name__}", argument=name)
    return int(value)
