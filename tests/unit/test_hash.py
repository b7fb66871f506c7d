"""
Unit tests for RedisHash.

Tests cover:
- Field operations with per-field marshalling
- Bulk set/get/fill from mappings and pair sequences
- Field-name marshalling
- Default seeding
"""

import pytest

from redis_objects.errors import TransportError, UsageError
from redis_objects.objects import RedisHash


@pytest.fixture
def user(transport):
    return RedisHash("user:1", transport, marshal_keys={"age": int, "tags": True})


class TestFieldOperations:
    """Single-field operations."""

    @pytest.mark.asyncio
    async def test_set_reports_new_fields(self, user):
        assert await user.set("name", "ada") == 1
        assert await user.put("name", "grace") == 0
        assert await user.fetch("name") == "grace"

    @pytest.mark.asyncio
    async def test_field_spec_applies(self, user, transport):
        await user.store("age", 36)
        await user.set("tags", ["math", "engines"])

        assert transport.dump("user:1") == {"age": "36", "tags": '["math", "engines"]'}
        assert await user.get("age") == 36
        assert await user.get("tags") == ["math", "engines"]

    @pytest.mark.asyncio
    async def test_explicit_marshal_wins(self, user):
        await user.set("age", 36)

        assert await user.get("age", marshal=str) == "36"

    @pytest.mark.asyncio
    async def test_explicit_false_reads_raw(self, transport):
        doc = RedisHash("doc", transport, marshal=True)
        await transport.hset("doc", "f", "plain")

        assert await doc.get("f", marshal=False) == "plain"

    @pytest.mark.asyncio
    async def test_missing_field(self, user):
        assert await user.get("age") is None
        assert await user.has_key("age") is False

    @pytest.mark.asyncio
    async def test_membership_and_delete(self, user):
        await user.set("name", "ada")

        assert await user.include("name") is True
        assert await user.contains("name") is True
        assert await user.delete("name") == 1
        assert await user.is_key("name") is False
        assert await user.delete("name") == 0

    @pytest.mark.asyncio
    async def test_incrby(self, user):
        assert await user.incrby("logins") == 1
        assert await user.incr("logins", 5) == 6
        assert await user.incrby("logins", -2) == 4

    @pytest.mark.asyncio
    async def test_incrby_rejects_non_integer(self, user):
        with pytest.raises(UsageError):
            await user.incrby("logins", 1.5)

    @pytest.mark.asyncio
    async def test_wrong_type(self, user, transport):
        await transport.rpush("user:1", "x")

        with pytest.raises(TransportError):
            await user.get("name")


class TestWholeHash:
    """Operations over every field."""

    @pytest.mark.asyncio
    async def test_keys_values_all(self, transport):
        h = RedisHash("h", transport, marshal=int)
        await h.bulk_set({"a": 1, "b": 2})

        assert sorted(await h.keys()) == ["a", "b"]
        assert sorted(await h.values()) == [1, 2]
        assert sorted(await h.vals()) == [1, 2]
        assert await h.all() == {"a": 1, "b": 2}

    @pytest.mark.asyncio
    async def test_all_uses_field_specs(self, user):
        await user.bulk_set({"name": "ada", "age": 36, "tags": []})

        assert await user.all() == {"name": "ada", "age": 36, "tags": []}

    @pytest.mark.asyncio
    async def test_size_and_empty(self, user):
        assert await user.empty() is True
        assert await user.size() == 0

        await user.set("name", "ada")

        assert await user.is_empty() is False
        assert await user.length() == 1
        assert await user.count() == 1

    @pytest.mark.asyncio
    async def test_key_marshaller(self, transport):
        h = RedisHash("h", transport, key_marshaller=int, marshal=True)

        await h.set(1, {"x": 1})
        await h.set(2, None)

        assert sorted(await h.keys()) == [1, 2]
        assert await h.all() == {1: {"x": 1}, 2: None}
        assert await h.get(1) == {"x": 1}


class TestBulkOperations:
    """Bulk set/get/fill."""

    @pytest.mark.asyncio
    async def test_bulk_set_then_bulk_get(self, user):
        assert await user.bulk_set({"name": "ada", "age": 36}) == 2

        assert await user.bulk_get(["name", "age"]) == {"name": "ada", "age": 36}

    @pytest.mark.asyncio
    async def test_bulk_get_preserves_order_and_missing(self, user):
        await user.update([("age", 36)])

        result = await user.bulk_get(["missing", "age"])

        assert list(result) == ["missing", "age"]
        assert result == {"missing": None, "age": 36}

    @pytest.mark.asyncio
    async def test_bulk_values(self, user):
        await user.bulk_set([("name", "ada"), ("age", 36)])

        assert await user.bulk_values(["age", "name", "nope"]) == [36, "ada", None]

    @pytest.mark.asyncio
    async def test_empty_input_issues_no_command(self, user, transport):
        assert await user.bulk_set({}) == 0
        assert await user.fill([]) == 0
        assert await user.bulk_get([]) == {}
        assert await user.bulk_values([]) == []

        assert transport.commands() == []

    @pytest.mark.asyncio
    async def test_fill_only_writes_absent_fields(self, user):
        await user.set("name", "ada")

        assert await user.fill({"name": "grace", "age": 36}) == 1

        assert await user.bulk_get(["name", "age"]) == {"name": "ada", "age": 36}

    @pytest.mark.asyncio
    async def test_rejects_malformed_pairs(self, user):
        with pytest.raises(UsageError):
            await user.bulk_set(["ab", "cd"])
        with pytest.raises(UsageError):
            await user.bulk_set([("a", 1, 2)])
        with pytest.raises(UsageError):
            await user.fill("ab")

    @pytest.mark.asyncio
    async def test_rejects_non_iterable_input(self, user, transport):
        with pytest.raises(UsageError) as exc_info:
            await user.bulk_set(None)
        assert exc_info.value.argument == "values"

        with pytest.raises(UsageError):
            await user.fill(5)

        assert transport.commands() == []


class TestDefaultSeeding:
    """Tests for the default fields written at construction."""

    @pytest.mark.asyncio
    async def test_fills_missing_fields(self, transport):
        await transport.hset("settings", "theme", "dark")

        settings = RedisHash(
            "settings",
            transport,
            marshal_keys={"volume": int},
            default={"theme": "light", "volume": 7},
        )
        await settings.seeding

        assert await settings.all() == {"theme": "dark", "volume": 7}

    @pytest.mark.asyncio
    async def test_scalar_default_rejected(self, transport):
        with pytest.raises(UsageError) as exc_info:
            RedisHash("settings", transport, default=5)

        assert exc_info.value.argument == "default"

    @pytest.mark.asyncio
    async def test_empty_default_schedules_nothing(self, transport):
        settings = RedisHash("settings", transport, default={})

        assert settings.seeding is None
