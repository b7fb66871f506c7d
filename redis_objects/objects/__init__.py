"""
Typed handles over the store's collection types.

- RedisValue: a single scalar
- RedisHash: field/value maps with per-field marshalling
- RedisList: sequences, optionally capped with max_length
- RedisSet: unordered unique members
- RedisSortedSet: members ranked by score, with index and score ranges
"""

from .base import RedisObject
from .hash import RedisHash
from .list import RedisList
from .set import RedisSet
from .sorted_set import RedisSortedSet
from .value import RedisValue

__all__ = [
    "RedisObject",
    "RedisValue",
    "RedisHash",
    "RedisList",
    "RedisSet",
    "RedisSortedSet",
]
