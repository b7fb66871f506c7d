"""
Sorted-set adapter.

Members are marshalled with the collection's spec; scores are always
floats on the way out. Index ranges follow the same end-exclusive slice
rules as RedisList, score ranges are inclusive unless a bound is given as
a string such as "(5".

Invariants:
    - with_scores results are lists of (member, score) tuples
    - Score-range queries only send LIMIT when offset, count or limit is set
    - rev_range_by_score takes (max, min), the same order as the store
"""

from __future__ import annotations

from typing import Any, List, Optional, Sequence, Union

from ..errors import UsageError
from ..ranges import (
    Pagination,
    ScoreBound,
    element_bounds,
    format_score_bound,
    parse_score_pairs,
    slice_bounds,
)
from .base import RedisObject, pairs_of

Score = Union[int, float]


def _score(value: Any, argument: str = "score") -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise UsageError(f"{argument} must be a number, got {value!r}", argument=argument)
    return float(value)


class RedisSortedSet(RedisObject):
    """Handle to a sorted set.

    Example:
        >>> board = RedisSortedSet("leaderboard", transport)
        >>> await board.add_all({"ada": 3, "bob": 1})
        2
        >>> await board.rev_range(0, 1, with_scores=True)
        [('ada', 3.0)]
    """

    def _rows(self, reply: Optional[Sequence[Any]], with_scores: bool) -> List[Any]:
        if with_scores:
            return parse_score_pairs(reply, self.codec.from_wire)
        return self.codec.all_from_wire(reply)

    async def add(self, member: Any, score: Score) -> int:
        """Add member or update its score. Returns 1 if it is new.

        Redis: ZADD
        """
        pair = (self.codec.to_wire(member), _score(score))
        return await self.transport.zadd(self.key, [pair])

    put = add
    set = add

    async def add_all(self, members: Any) -> int:
        """Add many members from a {member: score} mapping or (member, score)
        pairs. Returns the number of new members.

        Redis: ZADD
        """
        pairs = [
            (self.codec.to_wire(member), _score(score))
            for member, score in pairs_of(members, "members")
        ]
        if not pairs:
            return 0
        return await self.transport.zadd(self.key, pairs)

    put_all = add_all
    set_all = add_all

    async def score(self, member: Any) -> Optional[float]:
        """Redis: ZSCORE"""
        raw = await self.transport.zscore(self.key, self.codec.to_wire(member))
        return None if raw is None else float(raw)

    async def rank(self, member: Any) -> Optional[int]:
        """Zero-based position by ascending score, or None. Redis: ZRANK"""
        return await self.transport.zrank(self.key, self.codec.to_wire(member))

    async def revrank(self, member: Any) -> Optional[int]:
        """Redis: ZREVRANK"""
        return await self.transport.zrevrank(self.key, self.codec.to_wire(member))

    rev_rank = revrank

    async def members(self, with_scores: bool = False) -> List[Any]:
        """Every member in ascending score order."""
        return await self.range(0, with_scores=with_scores)

    async def range(
        self, start: int, end: Optional[int] = None, *, with_scores: bool = False
    ) -> List[Any]:
        """Members by ascending rank from start up to, not including, end.

        Redis: ZRANGE
        """
        start, stop = slice_bounds(start, end)
        reply = await self.transport.zrange(self.key, start, stop, withscores=with_scores)
        return self._rows(reply, with_scores)

    slice = range

    async def revrange(
        self, start: int, end: Optional[int] = None, *, with_scores: bool = False
    ) -> List[Any]:
        """Like range() but by descending score.

        Redis: ZREVRANGE
        """
        start, stop = slice_bounds(start, end)
        reply = await self.transport.zrevrange(self.key, start, stop, withscores=with_scores)
        return self._rows(reply, with_scores)

    rev_range = revrange

    async def range_size(self, min: ScoreBound, max: ScoreBound) -> int:
        """Number of members with min <= score <= max. Redis: ZCOUNT"""
        return await self.transport.zcount(
            self.key, format_score_bound(min), format_score_bound(max)
        )

    async def range_by_score(
        self,
        min: ScoreBound,
        max: ScoreBound,
        *,
        offset: Optional[int] = None,
        count: Optional[int] = None,
        limit: Optional[int] = None,
        with_scores: bool = False,
    ) -> List[Any]:
        """Members with a score between min and max, ascending.

        Args:
            min: Lower bound; "(" prefix for exclusive, "-inf" for unbounded
            max: Upper bound
            offset: Matches to skip
            count: Maximum matches to return (``limit`` is a synonym)
            with_scores: Return (member, score) tuples

        Raises:
            UsageError: For a negative offset or a non-numeric bound

        Redis: ZRANGEBYSCORE
        """
        window = Pagination.from_options(offset, count, limit)
        reply = await self.transport.zrangebyscore(
            self.key,
            format_score_bound(min),
            format_score_bound(max),
            withscores=with_scores,
            limit=window.limit_args(),
        )
        return self._rows(reply, with_scores)

    rangebyscore = range_by_score

    async def rev_range_by_score(
        self,
        max: ScoreBound,
        min: ScoreBound,
        *,
        offset: Optional[int] = None,
        count: Optional[int] = None,
        limit: Optional[int] = None,
        with_scores: bool = False,
    ) -> List[Any]:
        """Like range_by_score() but descending; note max comes first.

        Redis: ZREVRANGEBYSCORE
        """
        window = Pagination.from_options(offset, count, limit)
        reply = await self.transport.zrevrangebyscore(
            self.key,
            format_score_bound(max),
            format_score_bound(min),
            withscores=with_scores,
            limit=window.limit_args(),
        )
        return self._rows(reply, with_scores)

    revrangebyscore = rev_range_by_score

    async def rem_range_by_rank(self, start: int, stop: int) -> int:
        """Remove members ranked start through stop, both inclusive.

        Unlike range(), this is the store's own window: (0, -1) removes every
        member.

        Redis: ZREMRANGEBYRANK
        """
        for name, index in (("start", start), ("stop", stop)):
            if isinstance(index, bool) or not isinstance(index, int):
                raise UsageError(f"{name} must be an integer, got {index!r}", argument=name)
        return await self.transport.zremrangebyrank(self.key, start, stop)

    remrangebyrank = rem_range_by_rank

    async def rem_range_by_score(self, min: ScoreBound, max: ScoreBound) -> int:
        """Redis: ZREMRANGEBYSCORE"""
        return await self.transport.zremrangebyscore(
            self.key, format_score_bound(min), format_score_bound(max)
        )

    remrangebyscore = rem_range_by_score

    async def delete(self, member: Any) -> int:
        """Redis: ZREM"""
        return await self.transport.zrem(self.key, self.codec.to_wire(member))

    async def increment(self, member: Any, by: Score = 1) -> float:
        """Add by to member's score (creating it at 0) and return the new
        score.

        Redis: ZINCRBY
        """
        raw = await self.transport.zincrby(
            self.key, _score(by, "by"), self.codec.to_wire(member)
        )
        return float(raw)

    incr = increment
    incrby = increment

    async def decrement(self, member: Any, by: Score = 1) -> float:
        return await self.increment(member, -_score(by, "by"))

    decr = decrement
    decrby = decrement

    async def at(self, index: int) -> Any:
        """Member at rank index (negative counts from the top), or None."""
        start, stop = element_bounds(index)
        rows = self.codec.all_from_wire(await self.transport.zrange(self.key, start, stop))
        return rows[0] if rows else None

    async def first(self) -> Any:
        return await self.at(0)

    async def last(self) -> Any:
        return await self.at(-1)

    async def length(self) -> int:
        """Redis: ZCARD"""
        return await self.transport.zcard(self.key)

    size = length

    async def empty(self) -> bool:
        return await self.length() == 0

    is_empty = empty

    async def is_member(self, member: Any) -> bool:
        return await self.rank(member) is not None

    member = is_member
    include = is_member
    contains = is_member
