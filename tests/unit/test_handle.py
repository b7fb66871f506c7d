"""
Unit tests for EntityHandle.

Tests cover:
- Existence, type and deletion
- Rename and renamenx, with and without adopting the new key
- Expiry operations
"""

import asyncio
from datetime import datetime

import pytest

from redis_objects.config import EntityConfig
from redis_objects.errors import TransportError, UsageError
from redis_objects.handle import EntityHandle
from redis_objects.objects import RedisValue
from redis_objects.transport.memory import InMemoryTransport


class HeldExistsTransport(InMemoryTransport):
    """EXISTS waits on an event after receiving its key."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.release = asyncio.Event()
        self.held_keys = []

    async def exists(self, key):
        self.held_keys.append(key)
        await self.release.wait()
        return await super().exists(key)


@pytest.fixture
def make_handle(transport):
    def make(key="entity"):
        return EntityHandle(key, transport, EntityConfig())

    return make


class TestEntityHandle:
    """Tests for key-level operations."""

    @pytest.mark.parametrize("key", ["", None, 42])
    @pytest.mark.asyncio
    async def test_key_must_be_non_empty_string(self, transport, key):
        with pytest.raises(UsageError):
            EntityHandle(key, transport, EntityConfig())

    @pytest.mark.asyncio
    async def test_key_is_read_only(self, make_handle):
        handle = make_handle()

        with pytest.raises(AttributeError):
            handle.key = "other"

    @pytest.mark.asyncio
    async def test_repr(self, make_handle):
        assert repr(make_handle("user:1")) == "<EntityHandle key='user:1'>"

    @pytest.mark.asyncio
    async def test_exists_type_delete(self, transport, make_handle):
        handle = make_handle()
        assert await handle.exists() is False
        assert await handle.type() == "none"

        await transport.hset("entity", "f", "v")
        assert await handle.exists() is True
        assert await handle.type() == "hash"

        assert await handle.delete() == 1
        assert await handle.clear() == 0

    @pytest.mark.asyncio
    async def test_rename_adopts_new_key(self, transport, make_handle):
        handle = make_handle("old")
        await transport.set("old", "v")

        assert await handle.rename("new") is True

        assert handle.key == "new"
        assert await transport.get("new") == "v"
        assert await transport.exists("old") == 0

    @pytest.mark.asyncio
    async def test_rename_does_not_redirect_in_flight_call(self, clock):
        transport = HeldExistsTransport(clock=clock)
        await transport.connect()
        await transport.set("old", "v")
        handle = EntityHandle("old", transport, EntityConfig())

        pending = asyncio.ensure_future(handle.exists())
        await asyncio.sleep(0)
        assert transport.held_keys == ["old"]

        assert await handle.rename("new") is True
        assert handle.key == "new"

        transport.release.set()

        assert await pending is False
        assert ("EXISTS", "old") in transport.command_log
        assert ("EXISTS", "new") not in transport.command_log

    @pytest.mark.asyncio
    async def test_rename_without_adopt(self, transport, make_handle):
        handle = make_handle("old")
        await transport.set("old", "v")

        await handle.rename("new", adopt=False)

        assert handle.key == "old"
        assert await handle.exists() is False

    @pytest.mark.asyncio
    async def test_failed_rename_keeps_key(self, make_handle):
        handle = make_handle("missing")

        with pytest.raises(TransportError):
            await handle.rename("new")

        assert handle.key == "missing"

    @pytest.mark.asyncio
    async def test_renamenx_onto_existing_key(self, transport, make_handle):
        handle = make_handle("a")
        await transport.set("a", "1")
        await transport.set("b", "2")

        assert await handle.renamenx("b") is False

        assert handle.key == "a"
        assert await transport.get("b") == "2"

    @pytest.mark.asyncio
    async def test_renamenx_success(self, transport, make_handle):
        handle = make_handle("a")
        await transport.set("a", "1")

        assert await handle.renamenx("c") is True
        assert handle.key == "c"

    @pytest.mark.asyncio
    async def test_rename_to_another_handle(self, transport, make_handle):
        source = make_handle("a")
        target = RedisValue("b", transport)
        await transport.set("a", "1")

        await source.rename(target)

        assert source.key == "b"
        assert await target.get() == "1"

    @pytest.mark.asyncio
    async def test_rename_to_unusable_target(self, make_handle):
        with pytest.raises(UsageError):
            await make_handle().rename(123)

    @pytest.mark.asyncio
    async def test_expire_ttl_persist(self, transport, make_handle):
        handle = make_handle()
        assert await handle.ttl() == -2
        assert await handle.expire(30) is False

        await transport.set("entity", "v")
        assert await handle.ttl() == -1
        assert await handle.expire(30) is True
        assert await handle.ttl() == 30

        assert await handle.persist() is True
        assert await handle.ttl() == -1

    @pytest.mark.asyncio
    async def test_expire_at_datetime(self, transport, clock, make_handle):
        handle = make_handle()
        await transport.set("entity", "v")

        when = datetime.fromtimestamp(clock.now + 120)
        assert await handle.expire_at(when) is True
        assert await handle.ttl() == 120

        assert await handle.expireat(clock.now + 60) is True
        assert await handle.ttl() == 60

    @pytest.mark.asyncio
    async def test_expire_rejects_non_numbers(self, make_handle):
        with pytest.raises(UsageError):
            await make_handle().expire("soon")
