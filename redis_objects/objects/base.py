"""
Shared plumbing for the collection adapters.

Every adapter embeds an EntityHandle (key-level operations) and a
ValueCodec bound to its config's marshal spec, and forwards the key-level
operations to the handle. Element-level operations live on the adapters.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any, Awaitable, Callable, List, Optional, Tuple, Union

from ..config import EntityConfig
from ..connection import resolve_transport
from ..errors import UsageError
from ..handle import EntityHandle
from ..marshal import ValueCodec
from ..transport.base import Transport

logger = logging.getLogger(__name__)


class RedisObject:
    """Base for all adapters.

    Args:
        key: Store key
        transport: Transport to use; the registered default when omitted
        config: EntityConfig; alternatively pass its fields as keyword options

    Attributes:
        handle: Embedded EntityHandle
        codec: Embedded ValueCodec
        seeding: Task writing config.default, or None (see RedisValue)
    """

    def __init__(
        self,
        key: str,
        transport: Optional[Transport] = None,
        config: Optional[EntityConfig] = None,
        **options: Any,
    ) -> None:
        if config is None:
            try:
                config = EntityConfig(**options)
            except TypeError as e:
                raise UsageError(f"Invalid option: {e}", argument="options") from e
        elif options:
            raise UsageError(
                "Pass either config or keyword options, not both",
                argument="config",
            )

        self.handle = EntityHandle(key, resolve_transport(transport), config)
        self.codec = ValueCodec(config.marshal)
        self.seeding: Optional[asyncio.Task] = None

    @property
    def key(self) -> str:
        return self.handle.key

    @property
    def config(self) -> EntityConfig:
        return self.handle.config

    @property
    def transport(self) -> Transport:
        return self.handle.transport

    # Key-level operations

    async def exists(self) -> bool:
        return await self.handle.exists()

    async def type(self) -> str:
        return await self.handle.type()

    async def clear(self) -> int:
        """Delete the whole entry."""
        return await self.handle.delete()

    async def rename(self, new_key: Union[str, Any], adopt: bool = True) -> bool:
        return await self.handle.rename(new_key, adopt=adopt)

    async def renamenx(self, new_key: Union[str, Any], adopt: bool = True) -> bool:
        return await self.handle.renamenx(new_key, adopt=adopt)

    async def expire(self, seconds: int) -> bool:
        return await self.handle.expire(seconds)

    async def expire_at(self, when: Union[int, float, datetime]) -> bool:
        return await self.handle.expire_at(when)

    expireat = expire_at

    async def persist(self) -> bool:
        return await self.handle.persist()

    async def ttl(self) -> int:
        return await self.handle.ttl()

    # Default seeding

    def _seed(self, write: Callable[[], Awaitable[Any]]) -> None:
        """Schedule a write of config.default without awaiting it.

        A read racing the seed may observe no value; await ``self.seeding``
        to sequence after it.
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            raise UsageError(
                "A default value can only be seeded from within a running event loop",
                argument="default",
            )

        self.seeding = loop.create_task(write())
        self.seeding.add_done_callback(self._seeded)

    def _seeded(self, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.warning(
                f"Failed to seed default value: {error}",
                extra={"key": self.key},
            )

    def __repr__(self) -> str:
        return f"<{type(self).__name__} key={self.key!r}>"


def pairs_of(values: Union[Mapping, Iterable[Tuple[Any, Any]]], argument: str) -> List[Tuple[Any, Any]]:
    """Normalize a mapping or an ordered sequence of 2-item pairs."""
    if isinstance(values, Mapping):
        return list(values.items())
    if isinstance(values, (str, bytes)) or not isinstance(values, Iterable):
        raise UsageError(
            f"{argument} must be a mapping or a sequence of pairs, got {type(values).__name__}",
            argument=argument,
        )

    pairs = []
    for item in values:
        try:
            if isinstance(item, (str, bytes)):
                raise ValueError(item)
            first, second = item
        except (TypeError, ValueError):
            raise UsageError(
                f"{argument} must be a mapping or a sequence of pairs, got item {item!r}",
                argument=argument,
            )
        pairs.append((first, second))
    return pairs
