"""
Range and pagination engine for ordered collections.

Shared by the list and sorted-set adapters:
- slice_bounds: end-exclusive Python-style slices to inclusive store indexes
- element_bounds: the single-element window used by at()
- format_score_bound: score bounds as the store expects them
- Pagination: offset/count windows for score-range queries
- parse_score_pairs: WITHSCORES replies to (member, score) tuples

Invariants:
    - end=None always means "through the last element" (stop index -1)
    - Any other end translates to the inclusive stop end - 1
    - String score bounds ("(5", "-inf") pass through unmodified
    - LIMIT is only sent when an offset or count was requested
    - Scores in parsed pairs are always floats

How to change safely:
    - List and sorted-set adapters both depend on slice_bounds; test both
    - Keep the engine transport-agnostic, it only shapes arguments and replies
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Sequence, Tuple, Union

from .errors import TransportError, UsageError

ScoreBound = Union[int, float, str]


def slice_bounds(start: int, end: Optional[int] = None) -> Tuple[int, int]:
    """Translate an end-exclusive slice to the store's inclusive indexes.

    Args:
        start: First index (negative counts from the tail)
        end: Exclusive end index, or None for "through the last element"

    Returns:
        (start, stop) with stop inclusive

    end=0 is not an empty slice: its stop is -1, the last element, so
    (0, 0) reads the whole collection. element_bounds(-1) relies on this.

    Example:
        >>> slice_bounds(0, 1)
        (0, 0)
        >>> slice_bounds(0)
        (0, -1)
        >>> slice_bounds(0, -1)
        (0, -2)
    """
    _require_int(start, "start")
    if end is None:
        return start, -1
    _require_int(end, "end")
    return start, end - 1


def element_bounds(index: int) -> Tuple[int, int]:
    """Window holding exactly the element at index.

    Same as slice_bounds(index, index + 1); for index -1 that is (-1, -1).
    """
    return slice_bounds(index, index + 1)


def _require_int(value: Any, name: str) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise UsageError(f"{name} must be an integer, got {type(value).__name__}", argument=name)


def format_score_bound(bound: ScoreBound) -> str:
    """Render a score bound for ZRANGEBYSCORE/ZCOUNT/ZREMRANGEBYSCORE.

    Numbers are rendered as the store parses them, with infinities as
    "+inf"/"-inf". Strings carry store-level markers such as a leading "("
    for an exclusive bound and are passed through unmodified.
    """
    if isinstance(bound, str):
        return bound
    if isinstance(bound, bool) or not isinstance(bound, (int, float)):
        raise UsageError(
            f"Score bound must be a number or string, got {type(bound).__name__}",
            argument="bound",
        )
    if math.isinf(bound):
        return "+inf" if bound > 0 else "-inf"
    return format_score(bound)


def format_score(score: Union[int, float]) -> str:
    """Render a score the way the store echoes it back ("2" for 2.0)."""
    if isinstance(score, float):
        if math.isinf(score):
            return "inf" if score > 0 else "-inf"
        if score.is_integer():
            return str(int(score))
        return repr(score)
    return str(score)


@dataclass(frozen=True)
class Pagination:
    """Offset/count window over a score-range result.

    Attributes:
        offset: Results to skip (default 0 when a window is requested)
        count: Maximum results to return (None means all)
    """

    offset: Optional[int] = None
    count: Optional[int] = None

    def __post_init__(self) -> None:
        if self.offset is not None:
            _require_int(self.offset, "offset")
            if self.offset < 0:
                raise UsageError("offset must be non-negative", argument="offset")
        if self.count is not None:
            _require_int(self.count, "count")

    @classmethod
    def from_options(
        cls,
        offset: Optional[int] = None,
        count: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> Pagination:
        """Build from keyword options; ``limit`` is a synonym for ``count``."""
        if limit is not None:
            count = limit
        return cls(offset=offset, count=count)

    @property
    def requested(self) -> bool:
        """Whether a LIMIT clause should be sent at all."""
        return self.offset is not None or self.count is not None

    def limit_args(self) -> Optional[Tuple[int, int]]:
        """(offset, count) for the LIMIT clause, or None when unbounded."""
        if not self.requested:
            return None
        return (self.offset or 0, -1 if self.count is None else self.count)


def parse_score_pairs(
    reply: Optional[Sequence[Any]],
    decode_member: Callable[[Any], Any],
) -> List[Tuple[Any, float]]:
    """Fold a flat WITHSCORES reply into (member, score) tuples.

    Accepts the raw flat form [m1, s1, m2, s2, ...] as well as a reply that
    is already paired [(m1, s1), ...], since some clients pre-pair it.
    """
    if not reply:
        return []
    first = reply[0]
    if isinstance(first, (list, tuple)):
        return [(decode_member(m), float(s)) for m, s in reply]
    if len(reply) % 2:
        raise TransportError(f"Malformed WITHSCORES reply of odd length {len(reply)}")
    return [
        (decode_member(reply[i]), float(reply[i + 1]))
        for i in range(0, len(reply), 2)
    ]
