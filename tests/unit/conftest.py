"""
Shared fixtures for unit tests.

Every adapter test runs against a fresh, connected InMemoryTransport.
"""

import pytest
import pytest_asyncio

from redis_objects.transport.memory import InMemoryTransport


class FakeClock:
    """Settable time source for expiry tests."""

    def __init__(self, now: float = 1_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    """A clock frozen at a fixed unix time."""
    return FakeClock()


@pytest_asyncio.fixture
async def transport(clock):
    """Connected in-memory transport driven by the fake clock."""
    t = InMemoryTransport(clock=clock)
    await t.connect()
    yield t
    await t.close()
