"""
redis-objects - Typed async handles over a Redis-compatible store.

This package maps Python values onto the store's collection types:
- Handles for scalars, hashes, lists, sets and sorted sets
- Per-collection and per-field value marshalling (JSON, int, float, str, custom)
- Python-style slices and paginated score ranges over ordered collections
- A transport protocol with a redis-py backend and an in-memory backend

Example:
    >>> from redis_objects import RedisHash, RedisSortedSet, connect
    >>>
    >>> await connect()  # RedisTransport configured from REDIS_* env
    >>>
    >>> user = RedisHash("user:1", marshal_keys={"age": int})
    >>> await user.bulk_set({"name": "ada", "age": 36})
    >>>
    >>> board = RedisSortedSet("leaderboard")
    >>> await board.add("ada", 42)
    >>> await board.range_by_score(10, "+inf", count=10, with_scores=True)
    [('ada', 42.0)]

Invariants:
    - Handles own no data; the store is the system of record
    - Every operation is one coroutine and (except List trimming) one command
    - Store failures surface as TransportError and are never retried

Version: 1.0.0
"""

__version__ = "1.0.0"

from .config import EntityConfig, RedisConfig
from .connection import connect, disconnect, get_transport
from .errors import (
    MarshalError,
    RedisObjectsError,
    TransportConnectionError,
    TransportError,
    UsageError,
)
from .handle import EntityHandle
from .marshal import CustomMarshal, Marshal, ValueCodec, decode, encode
from .objects import (
    RedisHash,
    RedisList,
    RedisObject,
    RedisSet,
    RedisSortedSet,
    RedisValue,
)
from .ranges import Pagination, slice_bounds
from .transport import (
    InMemoryTransport,
    RedisTransport,
    Transport,
    create_transport,
)

__all__ = [
    # Version
    "__version__",
    # Handles
    "EntityHandle",
    "RedisObject",
    "RedisValue",
    "RedisHash",
    "RedisList",
    "RedisSet",
    "RedisSortedSet",
    # Marshalling
    "Marshal",
    "CustomMarshal",
    "ValueCodec",
    "encode",
    "decode",
    # Ranges
    "Pagination",
    "slice_bounds",
    # Configuration
    "EntityConfig",
    "RedisConfig",
    # Transports
    "Transport",
    "RedisTransport",
    "InMemoryTransport",
    "create_transport",
    # Default transport
    "connect",
    "disconnect",
    "get_transport",
    # Errors
    "RedisObjectsError",
    "TransportError",
    "TransportConnectionError",
    "MarshalError",
    "UsageError",
]
