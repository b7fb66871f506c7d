"""
Integration test fixtures for redis-objects.

These tests need a live Redis-compatible server. They are skipped unless
REDIS_OBJECTS_INTEGRATION=1; the server is taken from REDIS_URL.
"""

import os
import uuid

import pytest
import pytest_asyncio

from redis_objects.config import RedisConfig
from redis_objects.transport import RedisTransport

INTEGRATION_ENABLED = os.environ.get("REDIS_OBJECTS_INTEGRATION", "0") == "1"


@pytest_asyncio.fixture
async def redis_transport():
    """Connected RedisTransport configured from REDIS_* env."""
    if not INTEGRATION_ENABLED:
        pytest.skip("Integration tests disabled. Set REDIS_OBJECTS_INTEGRATION=1 to enable.")

    transport = RedisTransport(RedisConfig.from_env())
    await transport.connect()
    yield transport
    await transport.close()


@pytest_asyncio.fixture
async def key(redis_transport):
    """Factory for unique key names, deleted after the test."""
    prefix = f"redis-objects-test:{uuid.uuid4().hex}"
    created = []

    def make(name: str) -> str:
        full = f"{prefix}:{name}"
        created.append(full)
        return full

    yield make

    for name in created:
        await redis_transport.delete(name)
