"""
Transport abstraction for redis-objects.

This module provides a pluggable store backend interface supporting:
- Redis and protocol-compatible servers (production, via redis-py)
- In-memory (for testing)

The store is the system of record; handles built on a transport own no
data of their own.

Invariants:
    - One adapter operation maps to one transport call
    - Transports deal in strings and integers only
    - Failures surface as TransportError and are never retried here

How to change safely:
    - New backends must implement the Transport protocol
    - Run the adapter test-suite against any new backend
"""

from .base import (
    Transport,
    create_transport,
)
from .memory import InMemoryTransport
from .redis_server import RedisTransport

__all__ = [
    # Protocol
    "Transport",
    # Factory
    "create_transport",
    # Implementations
    "RedisTransport",
    "InMemoryTransport",
]
