"""
redis-objects Test Suite.

This package contains:
- unit/: Unit tests (no external dependencies, InMemoryTransport)
- integration/: Integration tests (live Redis, REDIS_OBJECTS_INTEGRATION=1)
"""
