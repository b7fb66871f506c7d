"""
In-memory transport implementation for testing.

This module provides a process-local stand-in for a Redis server for:
- Unit tests
- Local development without a running server

Invariants:
    - All data is lost on close() or process exit
    - Every primitive follows the Redis command semantics the adapters rely
      on (negative indexes, empty collections vanish, WRONGTYPE errors,
      lexicographic tie-breaking in sorted sets)
    - Values are stored as strings, exactly as the server would echo them
    - Expiry is evaluated lazily against an injectable clock

How to change safely:
    - This is test-only code, changes don't affect production
    - Keep return shapes identical to RedisTransport
    - Add features to help with testing scenarios
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from ..errors import TransportConnectionError, TransportError
from ..ranges import format_score
from .base import Bound, WireValue

logger = logging.getLogger(__name__)

WRONGTYPE = "WRONGTYPE Operation against a key holding the wrong kind of value"


@dataclass
class _Entry:
    """One stored key."""

    kind: str
    value: Any
    expires_at: Optional[float] = None


class InMemoryTransport:
    """In-memory implementation of the Transport protocol for testing.

    Attributes:
        command_log: (command, key) for every command issued, in order

    Thread safety:
        None needed; asyncio runs one command at a time and no command
        awaits internally, so each executes atomically like on a server.

    Example:
        >>> transport = InMemoryTransport()
        >>> await transport.connect()
        >>> await transport.zadd("board", [("alice", 3)])
        1
        >>> await transport.zrange("board", 0, -1, withscores=True)
        ['alice', '3']
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        """Initialize in-memory transport.

        Args:
            clock: Source of the current unix time, used for expiry
        """
        self._clock = clock
        self._data: Dict[str, _Entry] = {}
        self._connected = False
        self._failure: Optional[BaseException] = None
        self.command_log: List[Tuple[str, str]] = []

    @property
    def is_connected(self) -> bool:
        """Whether connected (always true after connect())."""
        return self._connected

    async def connect(self) -> None:
        """Connect (no-op for in-memory)."""
        self._connected = True
        logger.debug("InMemoryTransport connected")

    async def close(self) -> None:
        """Close and clear all data."""
        self._connected = False
        self._data.clear()
        self.command_log.clear()
        logger.debug("InMemoryTransport closed")

    # Plumbing

    def _begin(self, command: str, key: str) -> None:
        if not self._connected:
            raise TransportConnectionError("Not connected", address="memory")

        if self._failure is not None:
            failure, self._failure = self._failure, None
            if isinstance(failure, TransportError):
                raise failure
            raise TransportError(f"{command} failed: {failure}", command=command, key=key) from failure

        self.command_log.append((command, key))

    def _lookup(self, key: str, kind: Optional[str] = None) -> Optional[_Entry]:
        entry = self._data.get(key)
        if entry is None:
            return None
        if entry.expires_at is not None and entry.expires_at <= self._clock():
            del self._data[key]
            return None
        if kind is not None and entry.kind != kind:
            raise TransportError(WRONGTYPE, key=key)
        return entry

    def _container(self, key: str, kind: str, factory: Callable[[], Any]) -> Any:
        entry = self._lookup(key, kind)
        if entry is None:
            entry = self._data[key] = _Entry(kind, factory())
        return entry.value

    def _existing(self, key: str, kind: str) -> Any:
        entry = self._lookup(key, kind)
        return None if entry is None else entry.value

    def _vacuum(self, key: str) -> None:
        entry = self._data.get(key)
        if entry is not None and entry.kind != "string" and not entry.value:
            del self._data[key]

    # Keys

    async def delete(self, key: str) -> int:
        self._begin("DEL", key)
        if self._lookup(key) is None:
            return 0
        del self._data[key]
        return 1

    async def exists(self, key: str) -> int:
        self._begin("EXISTS", key)
        return 0 if self._lookup(key) is None else 1

    async def type(self, key: str) -> str:
        self._begin("TYPE", key)
        entry = self._lookup(key)
        return "none" if entry is None else entry.kind

    async def rename(self, key: str, new_key: str) -> bool:
        self._begin("RENAME", key)
        if self._lookup(key) is None:
            raise TransportError("ERR no such key", command="RENAME", key=key)
        if key != new_key:
            self._data[new_key] = self._data.pop(key)
        return True

    async def renamenx(self, key: str, new_key: str) -> bool:
        self._begin("RENAMENX", key)
        if self._lookup(key) is None:
            raise TransportError("ERR no such key", command="RENAMENX", key=key)
        if self._lookup(new_key) is not None:
            return False
        self._data[new_key] = self._data.pop(key)
        return True

    async def expire(self, key: str, seconds: int) -> bool:
        self._begin("EXPIRE", key)
        return self._expire_at(key, self._clock() + int(seconds))

    async def expireat(self, key: str, when: int) -> bool:
        self._begin("EXPIREAT", key)
        return self._expire_at(key, float(when))

    def _expire_at(self, key: str, when: float) -> bool:
        entry = self._lookup(key)
        if entry is None:
            return False
        if when <= self._clock():
            del self._data[key]
        else:
            entry.expires_at = when
        return True

    async def persist(self, key: str) -> bool:
        self._begin("PERSIST", key)
        entry = self._lookup(key)
        if entry is None or entry.expires_at is None:
            return False
        entry.expires_at = None
        return True

    async def ttl(self, key: str) -> int:
        self._begin("TTL", key)
        entry = self._lookup(key)
        if entry is None:
            return -2
        if entry.expires_at is None:
            return -1
        return max(0, int(round(entry.expires_at - self._clock())))

    # Strings

    async def get(self, key: str) -> Optional[str]:
        self._begin("GET", key)
        return self._existing(key, "string")

    async def set(self, key: str, value: WireValue) -> bool:
        self._begin("SET", key)
        self._data[key] = _Entry("string", _to_wire(value))
        return True

    async def setnx(self, key: str, value: WireValue) -> bool:
        self._begin("SETNX", key)
        if self._lookup(key) is not None:
            return False
        self._data[key] = _Entry("string", _to_wire(value))
        return True

    # Hashes

    async def hset(self, key: str, field: WireValue, value: WireValue) -> int:
        self._begin("HSET", key)
        return self._hset(key, [(field, value)])

    def _hset(self, key: str, pairs: Sequence[Tuple[WireValue, WireValue]]) -> int:
        if not pairs:
            raise TransportError("ERR wrong number of arguments for 'hset' command", key=key)
        h = self._container(key, "hash", dict)
        added = 0
        for field, value in pairs:
            f = _to_wire(field)
            added += f not in h
            h[f] = _to_wire(value)
        return added

    async def hsetnx(self, key: str, field: WireValue, value: WireValue) -> bool:
        self._begin("HSETNX", key)
        return self._hsetnx(key, field, value)

    def _hsetnx(self, key: str, field: WireValue, value: WireValue) -> bool:
        h = self._container(key, "hash", dict)
        f = _to_wire(field)
        if f in h:
            return False
        h[f] = _to_wire(value)
        return True

    async def hsetnx_many(
        self, key: str, pairs: Sequence[Tuple[WireValue, WireValue]]
    ) -> List[bool]:
        self._begin("HSETNX", key)
        return [self._hsetnx(key, field, value) for field, value in pairs]

    async def hget(self, key: str, field: WireValue) -> Optional[str]:
        self._begin("HGET", key)
        h = self._existing(key, "hash") or {}
        return h.get(_to_wire(field))

    async def hexists(self, key: str, field: WireValue) -> bool:
        self._begin("HEXISTS", key)
        h = self._existing(key, "hash") or {}
        return _to_wire(field) in h

    async def hdel(self, key: str, field: WireValue) -> int:
        self._begin("HDEL", key)
        h = self._existing(key, "hash")
        if not h or _to_wire(field) not in h:
            return 0
        del h[_to_wire(field)]
        self._vacuum(key)
        return 1

    async def hkeys(self, key: str) -> List[str]:
        self._begin("HKEYS", key)
        return list(self._existing(key, "hash") or {})

    async def hvals(self, key: str) -> List[str]:
        self._begin("HVALS", key)
        return list((self._existing(key, "hash") or {}).values())

    async def hgetall(self, key: str) -> Dict[str, str]:
        self._begin("HGETALL", key)
        return dict(self._existing(key, "hash") or {})

    async def hlen(self, key: str) -> int:
        self._begin("HLEN", key)
        return len(self._existing(key, "hash") or {})

    async def hmset(self, key: str, pairs: Sequence[Tuple[WireValue, WireValue]]) -> int:
        self._begin("HMSET", key)
        return self._hset(key, list(pairs))

    async def hmget(self, key: str, fields: Sequence[WireValue]) -> List[Optional[str]]:
        self._begin("HMGET", key)
        h = self._existing(key, "hash") or {}
        return [h.get(_to_wire(f)) for f in fields]

    async def hincrby(self, key: str, field: WireValue, amount: int) -> int:
        self._begin("HINCRBY", key)
        h = self._container(key, "hash", dict)
        f = _to_wire(field)
        result = _to_int(h.get(f, "0"), "hash value") + _to_int(amount, "increment")
        h[f] = str(result)
        return result

    # Lists

    async def rpush(self, key: str, *values: WireValue) -> int:
        self._begin("RPUSH", key)
        return self._push(key, values, left=False)

    async def lpush(self, key: str, *values: WireValue) -> int:
        self._begin("LPUSH", key)
        return self._push(key, values, left=True)

    def _push(self, key: str, values: Sequence[WireValue], left: bool) -> int:
        if not values:
            raise TransportError("ERR wrong number of arguments for push command", key=key)
        lst = self._container(key, "list", list)
        for value in values:
            if left:
                lst.insert(0, _to_wire(value))
            else:
                lst.append(_to_wire(value))
        return len(lst)

    async def rpop(self, key: str) -> Optional[str]:
        self._begin("RPOP", key)
        return self._pop(key, -1)

    async def lpop(self, key: str) -> Optional[str]:
        self._begin("LPOP", key)
        return self._pop(key, 0)

    def _pop(self, key: str, index: int) -> Optional[str]:
        lst = self._existing(key, "list")
        if not lst:
            return None
        value = lst.pop(index)
        self._vacuum(key)
        return value

    async def lrange(self, key: str, start: int, stop: int) -> List[str]:
        self._begin("LRANGE", key)
        lst = self._existing(key, "list") or []
        return _window(lst, start, stop)

    async def linsert(self, key: str, where: str, pivot: WireValue, value: WireValue) -> int:
        self._begin("LINSERT", key)
        where = str(where).upper()
        if where not in ("BEFORE", "AFTER"):
            raise TransportError("ERR syntax error", command="LINSERT", key=key)
        lst = self._existing(key, "list")
        if lst is None:
            return 0
        try:
            index = lst.index(_to_wire(pivot))
        except ValueError:
            return -1
        lst.insert(index if where == "BEFORE" else index + 1, _to_wire(value))
        return len(lst)

    async def lrem(self, key: str, count: int, value: WireValue) -> int:
        self._begin("LREM", key)
        lst = self._existing(key, "list")
        if not lst:
            return 0
        target = _to_wire(value)
        limit = abs(count) or len(lst)
        items = lst if count >= 0 else list(reversed(lst))
        kept: List[str] = []
        removed = 0
        for item in items:
            if item == target and removed < limit:
                removed += 1
            else:
                kept.append(item)
        if count < 0:
            kept.reverse()
        lst[:] = kept
        self._vacuum(key)
        return removed

    async def lset(self, key: str, index: int, value: WireValue) -> bool:
        self._begin("LSET", key)
        lst = self._existing(key, "list")
        if lst is None:
            raise TransportError("ERR no such key", command="LSET", key=key)
        position = index + len(lst) if index < 0 else index
        if not 0 <= position < len(lst):
            raise TransportError("ERR index out of range", command="LSET", key=key)
        lst[position] = _to_wire(value)
        return True

    async def lindex(self, key: str, index: int) -> Optional[str]:
        self._begin("LINDEX", key)
        lst = self._existing(key, "list") or []
        position = index + len(lst) if index < 0 else index
        if not 0 <= position < len(lst):
            return None
        return lst[position]

    async def llen(self, key: str) -> int:
        self._begin("LLEN", key)
        return len(self._existing(key, "list") or [])

    async def ltrim(self, key: str, start: int, stop: int) -> bool:
        self._begin("LTRIM", key)
        lst = self._existing(key, "list")
        if lst is not None:
            lst[:] = _window(lst, start, stop)
            self._vacuum(key)
        return True

    # Sets

    async def sadd(self, key: str, *members: WireValue) -> int:
        self._begin("SADD", key)
        if not members:
            raise TransportError("ERR wrong number of arguments for 'sadd' command", key=key)
        s = self._container(key, "set", set)
        before = len(s)
        s.update(_to_wire(m) for m in members)
        return len(s) - before

    async def spop(self, key: str) -> Optional[str]:
        self._begin("SPOP", key)
        s = self._existing(key, "set")
        if not s:
            return None
        member = s.pop()
        self._vacuum(key)
        return member

    async def smembers(self, key: str) -> List[str]:
        self._begin("SMEMBERS", key)
        return list(self._existing(key, "set") or ())

    async def sismember(self, key: str, member: WireValue) -> bool:
        self._begin("SISMEMBER", key)
        return _to_wire(member) in (self._existing(key, "set") or ())

    async def srem(self, key: str, member: WireValue) -> int:
        self._begin("SREM", key)
        s = self._existing(key, "set")
        m = _to_wire(member)
        if not s or m not in s:
            return 0
        s.discard(m)
        self._vacuum(key)
        return 1

    async def scard(self, key: str) -> int:
        self._begin("SCARD", key)
        return len(self._existing(key, "set") or ())

    # Sorted sets

    def _ordered(self, key: str) -> List[Tuple[str, float]]:
        z = self._existing(key, "zset") or {}
        return sorted(z.items(), key=lambda item: (item[1], item[0]))

    async def zadd(self, key: str, pairs: Sequence[Tuple[WireValue, float]]) -> int:
        self._begin("ZADD", key)
        if not pairs:
            raise TransportError("ERR wrong number of arguments for 'zadd' command", key=key)
        scored = [(_to_wire(member), _to_float(score)) for member, score in pairs]
        z = self._container(key, "zset", dict)
        added = 0
        for member, score in scored:
            added += member not in z
            z[member] = score
        return added

    async def zscore(self, key: str, member: WireValue) -> Optional[str]:
        self._begin("ZSCORE", key)
        z = self._existing(key, "zset") or {}
        score = z.get(_to_wire(member))
        return None if score is None else format_score(score)

    async def zrank(self, key: str, member: WireValue) -> Optional[int]:
        self._begin("ZRANK", key)
        return _rank_of(self._ordered(key), _to_wire(member))

    async def zrevrank(self, key: str, member: WireValue) -> Optional[int]:
        self._begin("ZREVRANK", key)
        return _rank_of(self._ordered(key)[::-1], _to_wire(member))

    async def zrange(
        self, key: str, start: int, stop: int, withscores: bool = False
    ) -> List[Any]:
        self._begin("ZRANGE", key)
        return _flatten(_window(self._ordered(key), start, stop), withscores)

    async def zrevrange(
        self, key: str, start: int, stop: int, withscores: bool = False
    ) -> List[Any]:
        self._begin("ZREVRANGE", key)
        return _flatten(_window(self._ordered(key)[::-1], start, stop), withscores)

    async def zrangebyscore(
        self,
        key: str,
        min: Bound,
        max: Bound,
        withscores: bool = False,
        limit: Optional[Tuple[int, int]] = None,
    ) -> List[Any]:
        self._begin("ZRANGEBYSCORE", key)
        items = _between(self._ordered(key), min, max)
        return _flatten(_paginate(items, limit), withscores)

    async def zrevrangebyscore(
        self,
        key: str,
        max: Bound,
        min: Bound,
        withscores: bool = False,
        limit: Optional[Tuple[int, int]] = None,
    ) -> List[Any]:
        self._begin("ZREVRANGEBYSCORE", key)
        items = _between(self._ordered(key), min, max)[::-1]
        return _flatten(_paginate(items, limit), withscores)

    async def zcount(self, key: str, min: Bound, max: Bound) -> int:
        self._begin("ZCOUNT", key)
        return len(_between(self._ordered(key), min, max))

    async def zrem(self, key: str, member: WireValue) -> int:
        self._begin("ZREM", key)
        return self._zremove(key, [_to_wire(member)])

    async def zremrangebyrank(self, key: str, start: int, stop: int) -> int:
        self._begin("ZREMRANGEBYRANK", key)
        doomed = _window(self._ordered(key), start, stop)
        return self._zremove(key, [member for member, _ in doomed])

    async def zremrangebyscore(self, key: str, min: Bound, max: Bound) -> int:
        self._begin("ZREMRANGEBYSCORE", key)
        doomed = _between(self._ordered(key), min, max)
        return self._zremove(key, [member for member, _ in doomed])

    def _zremove(self, key: str, members: List[str]) -> int:
        z = self._existing(key, "zset")
        if not z:
            return 0
        removed = 0
        for member in members:
            if z.pop(member, None) is not None:
                removed += 1
        self._vacuum(key)
        return removed

    async def zcard(self, key: str) -> int:
        self._begin("ZCARD", key)
        return len(self._existing(key, "zset") or {})

    async def zincrby(self, key: str, amount: float, member: WireValue) -> str:
        self._begin("ZINCRBY", key)
        delta = _to_float(amount)
        z = self._container(key, "zset", dict)
        m = _to_wire(member)
        z[m] = z.get(m, 0.0) + delta
        return format_score(z[m])

    # Testing helpers

    def keys(self) -> List[str]:
        """Live (unexpired) keys (testing helper)."""
        return [key for key in list(self._data) if self._lookup(key) is not None]

    def dump(self, key: str) -> Any:
        """Copy of the raw stored value, or None (testing helper)."""
        entry = self._lookup(key)
        if entry is None:
            return None
        if entry.kind == "zset":
            return dict(entry.value)
        return entry.value if entry.kind == "string" else type(entry.value)(entry.value)

    def inject_failure(self, exception: BaseException) -> None:
        """Make the next command fail with this exception (testing helper).

        Non-TransportError exceptions are wrapped the way RedisTransport
        wraps redis-py errors.
        """
        self._failure = exception

    def commands(self, name: Optional[str] = None) -> List[str]:
        """Issued command names, optionally filtered to one name (testing helper)."""
        return [cmd for cmd, _ in self.command_log if name is None or cmd == name]


def _to_wire(value: Any) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8")
    if isinstance(value, str):
        return value
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TransportError(
            f"Invalid input of type: '{type(value).__name__}'. "
            "Convert to a bytes, string, int or float first."
        )
    if isinstance(value, float):
        return repr(value)
    return str(value)


def _to_int(value: Any, what: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise TransportError(f"ERR {what} is not an integer or out of range")


def _to_float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        raise TransportError("ERR value is not a valid float")


def _window(items: List[Any], start: int, stop: int) -> List[Any]:
    """Inclusive start..stop with the server's negative-index rules."""
    n = len(items)
    if start < 0:
        start += n
    if stop < 0:
        stop += n
    start = max(start, 0)
    if start > stop or start >= n:
        return []
    return items[start:min(stop, n - 1) + 1]


def _parse_bound(bound: Bound) -> Tuple[float, bool]:
    """(value, exclusive) for a score bound such as 3, "(3" or "-inf"."""
    if isinstance(bound, str):
        text = bound.strip()
        exclusive = text.startswith("(")
        if exclusive:
            text = text[1:]
        try:
            return float(text), exclusive
        except ValueError:
            raise TransportError("ERR min or max is not a float")
    return float(bound), False


def _between(items: List[Tuple[str, float]], min: Bound, max: Bound) -> List[Tuple[str, float]]:
    low, low_open = _parse_bound(min)
    high, high_open = _parse_bound(max)
    return [
        (member, score)
        for member, score in items
        if (score > low if low_open else score >= low)
        and (score < high if high_open else score <= high)
    ]


def _paginate(items: List[Any], limit: Optional[Tuple[int, int]]) -> List[Any]:
    if limit is None:
        return items
    offset, count = limit
    if offset < 0:
        return []
    items = items[offset:]
    return items if count < 0 else items[:count]


def _flatten(items: List[Tuple[str, float]], withscores: bool) -> List[str]:
    if not withscores:
        return [member for member, _ in items]
    flat: List[str] = []
    for member, score in items:
        flat.extend((member, format_score(score)))
    return flat


def _rank_of(items: List[Tuple[str, float]], member: str) -> Optional[int]:
    for rank, (candidate, _) in enumerate(items):
        if candidate == member:
            return rank
    return None
