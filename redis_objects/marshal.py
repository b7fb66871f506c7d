"""
Value marshalling between Python values and the store's wire strings.

This module decides, per call, how a value is encoded before it is handed
to the transport and how a reply is decoded before it reaches the caller:
- Marshal: the built-in specs (JSON, INTEGER, FLOAT, STRING)
- CustomMarshal: a user-supplied stringify/parse pair
- encode/decode: pure single-value conversion
- encode_all/decode_all: element-wise batch conversion
- ValueCodec: a codec bound to a collection-wide default spec

Invariants:
    - A falsy spec is pass-through in both directions
    - decode(None, spec) is None for every spec
    - Aggregate replies (lists, dicts) are decoded element-wise
    - Resolution precedence: explicit > per-field > collection default > None
    - An explicit per-call spec of False is pass-through, not "unset"

How to change safely:
    - New built-in specs need both an encode and a decode branch
    - Keep encode/decode free of I/O; adapters rely on them being pure
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterable, List, Optional, Union

from .errors import MarshalError, UsageError


class Marshal(Enum):
    """Built-in marshal specs."""

    JSON = "json"
    INTEGER = "integer"
    FLOAT = "float"
    STRING = "string"


@dataclass(frozen=True)
class CustomMarshal:
    """User-supplied marshaller.

    Attributes:
        stringify: Converts a Python value to its wire string
        parse: Converts a wire string back to a Python value
        name: Label used in error messages
    """

    stringify: Callable[[Any], str]
    parse: Callable[[str], Any]
    name: str = "custom"


MarshalSpec = Union[Marshal, CustomMarshal, None]

_TEXT_MARSHALS = (Marshal.INTEGER, Marshal.FLOAT, Marshal.STRING)

_TYPE_ALIASES = {
    int: Marshal.INTEGER,
    float: Marshal.FLOAT,
    str: Marshal.STRING,
}


def resolve_marshal(spec: Any) -> MarshalSpec:
    """Normalize any accepted spec form to a Marshal, CustomMarshal or None.

    Accepted forms:
        - None or any falsy value: pass-through
        - True: JSON
        - int / float / str builtins: INTEGER / FLOAT / STRING
        - "json", "integer", "float", "string" (case-insensitive)
        - Marshal or CustomMarshal instances
        - Objects with stringify/parse or dumps/loads callables

    Raises:
        UsageError: If the spec is not recognized
    """
    if isinstance(spec, (Marshal, CustomMarshal)):
        return spec
    if spec is True:
        return Marshal.JSON
    if not spec:
        return None
    if isinstance(spec, type) and spec in _TYPE_ALIASES:
        return _TYPE_ALIASES[spec]
    if isinstance(spec, str):
        try:
            return Marshal(spec.lower())
        except ValueError:
            raise UsageError(f"Unknown marshal spec '{spec}'", argument="marshal")

    stringify = getattr(spec, "stringify", None)
    parse = getattr(spec, "parse", None)
    if callable(stringify) and callable(parse):
        return CustomMarshal(stringify, parse, name=_spec_label(spec))

    dumps = getattr(spec, "dumps", None)
    loads = getattr(spec, "loads", None)
    if callable(dumps) and callable(loads):
        return CustomMarshal(dumps, loads, name=_spec_label(spec))

    raise UsageError(f"Unknown marshal spec {spec!r}", argument="marshal")


def _spec_label(spec: Any) -> str:
    return getattr(spec, "__name__", None) or type(spec).__name__


def spec_name(marshal: MarshalSpec) -> str:
    """Human-readable name of a resolved spec."""
    if marshal is None:
        return "none"
    if isinstance(marshal, Marshal):
        return marshal.value
    return marshal.name


def encode(value: Any, spec: Any = None) -> Any:
    """Encode a single value to its wire form.

    Args:
        value: Python value
        spec: Marshal spec in any form accepted by resolve_marshal()

    Returns:
        Wire string, or the value unchanged for a pass-through spec

    Raises:
        MarshalError: If the value cannot be encoded
        UsageError: If the spec is not recognized
    """
    marshal = resolve_marshal(spec)
    if marshal is None:
        return value

    try:
        if marshal in _TEXT_MARSHALS:
            return "null" if value is None else str(value)
        if marshal is Marshal.JSON:
            return json.dumps(value)
        return marshal.stringify(value)
    except Exception as e:
        raise MarshalError(
            f"Failed to encode value with {spec_name(marshal)} marshal: {e}",
            spec=spec_name(marshal),
            value=value,
        ) from e


def decode(value: Any, spec: Any = None) -> Any:
    """Decode a wire reply to a Python value.

    Lists, tuples and dicts are decoded element-wise (dict values only),
    recursively, before the leaf conversion is applied.

    Raises:
        MarshalError: If the reply cannot be decoded
        UsageError: If the spec is not recognized
    """
    marshal = resolve_marshal(spec)
    if marshal is None:
        return value
    return _decode(value, marshal)


def _decode(value: Any, marshal: Union[Marshal, CustomMarshal]) -> Any:
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        return [_decode(v, marshal) for v in value]
    if isinstance(value, dict):
        return {k: _decode(v, marshal) for k, v in value.items()}
    if isinstance(value, bytes):
        value = value.decode("utf-8")

    try:
        if marshal is Marshal.STRING:
            return value
        if marshal is Marshal.INTEGER:
            return None if value == "null" else int(value)
        if marshal is Marshal.FLOAT:
            return None if value == "null" else float(value)
        if marshal is Marshal.JSON:
            return json.loads(value)
        return marshal.parse(value)
    except Exception as e:
        raise MarshalError(
            f"Failed to decode {str(value)[:64]!r} with {spec_name(marshal)} marshal: {e}",
            spec=spec_name(marshal),
            value=value,
        ) from e


def encode_all(values: Iterable[Any], spec: Any = None) -> List[Any]:
    """Encode a batch, preserving order. Fails on the first bad element."""
    marshal = resolve_marshal(spec)
    return [encode(v, marshal) for v in values]


def decode_all(values: Optional[Iterable[Any]], spec: Any = None) -> List[Any]:
    """Decode a batch, preserving order. A None reply decodes to []."""
    marshal = resolve_marshal(spec)
    return [decode(v, marshal) for v in (values or [])]


class ValueCodec:
    """Codec bound to a collection-wide default spec.

    Each adapter embeds one codec built from its config's ``marshal``.
    Per-call and per-field specs are layered on top via resolve().

    Example:
        >>> codec = ValueCodec(Marshal.JSON)
        >>> codec.to_wire({"a": 1})
        '{"a": 1}'
        >>> codec.from_wire("7", marshal=int)
        7
    """

    def __init__(self, default: Any = None) -> None:
        self.default = resolve_marshal(default)

    def resolve(self, explicit: Any = None, field_spec: Any = None) -> MarshalSpec:
        """Pick the effective spec: explicit > field_spec > default.

        Only None means "not given" for explicit; any other falsy spec
        (False, 0, "") selects pass-through even over a field spec or the
        default.
        """
        if explicit is not None:
            return resolve_marshal(explicit)
        marshal = resolve_marshal(field_spec)
        return self.default if marshal is None else marshal

    def to_wire(self, value: Any, marshal: Any = None, field_spec: Any = None) -> Any:
        return encode(value, self.resolve(marshal, field_spec))

    def all_to_wire(self, values: Iterable[Any], marshal: Any = None) -> List[Any]:
        return encode_all(values, self.resolve(marshal))

    def from_wire(self, value: Any, marshal: Any = None, field_spec: Any = None) -> Any:
        return decode(value, self.resolve(marshal, field_spec))

    def all_from_wire(self, values: Optional[Iterable[Any]], marshal: Any = None) -> List[Any]:
        return decode_all(values, self.resolve(marshal))

    def __repr__(self) -> str:
        return f"ValueCodec(default={spec_name(self.default)})"
