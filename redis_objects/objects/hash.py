"""
Hash adapter.

Values are marshalled per field: an explicit per-call spec wins, then
``marshal_keys[field]``, then the collection-wide ``marshal``. Field names
themselves go through ``key_marshaller`` (String unless configured).
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from ..config import EntityConfig
from ..errors import UsageError
from ..marshal import Marshal, MarshalSpec, decode, decode_all, encode
from ..transport.base import Transport
from .base import RedisObject, pairs_of

FieldValues = Union[Mapping, Iterable[Tuple[Any, Any]]]


class RedisHash(RedisObject):
    """Handle to a hash.

    If ``default`` is a mapping (or pair sequence), its fields are written
    with HSETNX on construction, fire-and-forget like RedisValue.

    Example:
        >>> user = RedisHash("user:1", transport, marshal_keys={"age": int})
        >>> await user.bulk_set({"name": "ada", "age": 36})
        2
        >>> await user.bulk_get(["name", "age"])
        {'name': 'ada', 'age': 36}
    """

    def __init__(
        self,
        key: str,
        transport: Optional[Transport] = None,
        config: Optional[EntityConfig] = None,
        **options: Any,
    ) -> None:
        super().__init__(key, transport, config, **options)

        if self.config.default is not None:
            key, pairs = self.key, self._encode_pairs(self.config.default, "default")
            if pairs:
                self._seed(lambda: self.transport.hsetnx_many(key, pairs))

    @property
    def key_marshal(self) -> MarshalSpec:
        return self.config.key_marshaller or Marshal.STRING

    def _field(self, field: Any) -> Any:
        return encode(field, self.key_marshal)

    def _encode(self, field: Any, value: Any, marshal: Any = None) -> Any:
        return self.codec.to_wire(value, marshal, self.config.field_marshal(field))

    def _decode(self, field: Any, raw: Any, marshal: Any = None) -> Any:
        return self.codec.from_wire(raw, marshal, self.config.field_marshal(field))

    def _encode_pairs(self, values: FieldValues, argument: str = "values") -> List[Tuple[Any, Any]]:
        return [
            (self._field(field), self._encode(field, value))
            for field, value in pairs_of(values, argument)
        ]

    async def set(self, field: Any, value: Any, marshal: Any = None) -> int:
        """Set a field. Returns 1 if the field is new, 0 if it was updated.

        Redis: HSET
        """
        return await self.transport.hset(self.key, self._field(field), self._encode(field, value, marshal))

    put = set
    store = set

    async def get(self, field: Any, marshal: Any = None) -> Any:
        """Field value, or None if absent.

        Redis: HGET
        """
        raw = await self.transport.hget(self.key, self._field(field))
        return self._decode(field, raw, marshal)

    fetch = get

    async def has_key(self, field: Any) -> bool:
        """Redis: HEXISTS"""
        return await self.transport.hexists(self.key, self._field(field))

    include = has_key
    is_key = has_key
    is_member = has_key
    contains = has_key

    async def delete(self, field: Any) -> int:
        """Redis: HDEL"""
        return await self.transport.hdel(self.key, self._field(field))

    async def keys(self) -> List[Any]:
        """All field names, decoded with key_marshaller.

        Redis: HKEYS
        """
        return decode_all(await self.transport.hkeys(self.key), self.key_marshal)

    async def values(self) -> List[Any]:
        """All values. Field-specific specs cannot apply here since the
        reply carries no field names; use all()/bulk_values() for those.

        Redis: HVALS
        """
        return self.codec.all_from_wire(await self.transport.hvals(self.key))

    vals = values

    async def all(self) -> Dict[Any, Any]:
        """Every field and value, each value decoded with its field's spec.

        Redis: HGETALL
        """
        result = {}
        for raw_field, raw in (await self.transport.hgetall(self.key) or {}).items():
            field = decode(raw_field, self.key_marshal)
            result[field] = self._decode(field, raw)
        return result

    async def size(self) -> int:
        """Redis: HLEN"""
        return await self.transport.hlen(self.key)

    length = size
    count = size

    async def empty(self) -> bool:
        return await self.size() == 0

    is_empty = empty

    async def bulk_set(self, values: FieldValues) -> int:
        """Set many fields from a mapping or (field, value) pairs.

        Returns the number of fields added; empty input issues no command.

        Redis: HMSET
        """
        pairs = self._encode_pairs(values)
        if not pairs:
            return 0
        return await self.transport.hmset(self.key, pairs)

    update = bulk_set

    async def fill(self, values: FieldValues) -> int:
        """Like bulk_set(), but only fields that do not exist yet are written.

        Returns the number of fields written.

        Redis: HSETNX (pipelined)
        """
        pairs = self._encode_pairs(values)
        if not pairs:
            return 0
        return sum(await self.transport.hsetnx_many(self.key, pairs))

    async def bulk_get(self, fields: Iterable[Any]) -> Dict[Any, Any]:
        """Mapping of field to decoded value, in input order (None if absent).

        Redis: HMGET
        """
        fields = list(fields)
        if not fields:
            return {}
        raw = await self.transport.hmget(self.key, [self._field(f) for f in fields])
        return {field: self._decode(field, value) for field, value in zip(fields, raw)}

    async def bulk_values(self, fields: Iterable[Any]) -> List[Any]:
        """Decoded values in the same order as fields.

        Redis: HMGET
        """
        fields = list(fields)
        if not fields:
            return []
        raw = await self.transport.hmget(self.key, [self._field(f) for f in fields])
        return [self._decode(field, value) for field, value in zip(fields, raw)]

    async def incrby(self, field: Any, delta: int = 1) -> int:
        """Atomically add delta to an integer field and return the result.

        Redis: HINCRBY
        """
        if isinstance(delta, bool) or not isinstance(delta, int):
            raise UsageError(f"delta must be an integer, got {delta!r}", argument="delta")
        return int(await self.transport.hincrby(self.key, self._field(field), delta))

    incr = incrby
