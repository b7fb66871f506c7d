"""
Unit tests for value marshalling.

Tests cover:
- Spec resolution from every accepted form
- Encoding and decoding per built-in spec
- Aggregate replies and the null literal
- Error wrapping
- ValueCodec precedence
"""

import json
from fractions import Fraction

import pytest

from redis_objects.errors import MarshalError, UsageError
from redis_objects.marshal import (
    CustomMarshal,
    Marshal,
    ValueCodec,
    decode,
    decode_all,
    encode,
    encode_all,
    resolve_marshal,
    spec_name,
)


class TestResolveMarshal:
    """Tests for resolve_marshal()."""

    @pytest.mark.parametrize("spec", [None, False, 0, ""])
    def test_falsy_is_pass_through(self, spec):
        assert resolve_marshal(spec) is None

    def test_true_means_json(self):
        assert resolve_marshal(True) is Marshal.JSON

    @pytest.mark.parametrize(
        "spec,expected",
        [
            (int, Marshal.INTEGER),
            (float, Marshal.FLOAT),
            (str, Marshal.STRING),
            ("json", Marshal.JSON),
            ("Integer", Marshal.INTEGER),
            (Marshal.FLOAT, Marshal.FLOAT),
        ],
    )
    def test_builtin_forms(self, spec, expected):
        assert resolve_marshal(spec) is expected

    def test_module_with_dumps_loads(self):
        """Objects exposing dumps/loads become custom marshals."""
        marshal = resolve_marshal(json)

        assert isinstance(marshal, CustomMarshal)
        assert marshal.name == "json"
        assert marshal.stringify([1]) == "[1]"

    def test_object_with_stringify_parse(self):
        class Upper:
            @staticmethod
            def stringify(value):
                return value.upper()

            @staticmethod
            def parse(value):
                return value.lower()

        marshal = resolve_marshal(Upper)

        assert encode("abc", marshal) == "ABC"
        assert decode("ABC", marshal) == "abc"
        assert spec_name(marshal) == "Upper"

    @pytest.mark.parametrize("spec", ["yaml", 42, object()])
    def test_unknown_spec_raises(self, spec):
        with pytest.raises(UsageError) as exc_info:
            resolve_marshal(spec)

        assert exc_info.value.argument == "marshal"


class TestEncode:
    """Tests for encode()."""

    def test_pass_through(self):
        value = {"not": "touched"}
        assert encode(value, None) is value

    def test_text_specs_stringify(self):
        assert encode(5, int) == "5"
        assert encode(2.5, float) == "2.5"
        assert encode("x", str) == "x"

    def test_none_becomes_null_literal(self):
        assert encode(None, int) == "null"
        assert encode(None, float) == "null"

    def test_json(self):
        assert encode({"a": [1, 2]}, True) == '{"a": [1, 2]}'

    def test_json_failure_is_marshal_error(self):
        with pytest.raises(MarshalError) as exc_info:
            encode({1, 2}, Marshal.JSON)

        assert exc_info.value.spec == "json"
        assert isinstance(exc_info.value.__cause__, TypeError)

    def test_custom_failure_is_marshal_error(self):
        def explode(value):
            raise RuntimeError("nope")

        marshal = CustomMarshal(explode, str, name="exploding")

        with pytest.raises(MarshalError) as exc_info:
            encode(1, marshal)

        assert exc_info.value.spec == "exploding"
        assert exc_info.value.code == "MARSHAL_ERROR"


class TestDecode:
    """Tests for decode()."""

    def test_none_reply_is_none_for_every_spec(self):
        for spec in (None, int, float, str, True):
            assert decode(None, spec) is None

    def test_numbers(self):
        assert decode("42", int) == 42
        assert decode("-0.5", float) == -0.5

    def test_null_literal_round_trips(self):
        assert decode(encode(None, int), int) is None
        assert decode(encode(None, float), float) is None

    def test_string_is_unchanged(self):
        assert decode("null", str) == "null"

    def test_bytes_are_decoded(self):
        assert decode(b"7", int) == 7

    def test_lists_decode_element_wise(self):
        assert decode(["1", None, ["2", "3"]], int) == [1, None, [2, 3]]

    def test_dicts_decode_values(self):
        assert decode({"a": "1", "b": "2"}, int) == {"a": 1, "b": 2}

    def test_custom(self):
        marshal = CustomMarshal(str, Fraction)
        assert decode(encode(Fraction(1, 3), marshal), marshal) == Fraction(1, 3)

    @pytest.mark.parametrize("wire,spec", [("abc", int), ("1.2.3", float), ("{", True)])
    def test_bad_wire_text_raises(self, wire, spec):
        with pytest.raises(MarshalError) as exc_info:
            decode(wire, spec)

        assert exc_info.value.value == wire
        assert exc_info.value.__cause__ is not None


class TestBatch:
    """Tests for encode_all()/decode_all()."""

    def test_order_is_preserved(self):
        assert encode_all([3, 1, 2], int) == ["3", "1", "2"]
        assert decode_all(["3", "1", "2"], int) == [3, 1, 2]

    def test_none_reply_decodes_to_empty_list(self):
        assert decode_all(None, int) == []

    def test_fails_fast(self):
        calls = []

        def parse(value):
            calls.append(value)
            return int(value)

        with pytest.raises(MarshalError):
            decode_all(["1", "x", "3"], CustomMarshal(str, parse))

        assert calls == ["1", "x"]


class TestValueCodec:
    """Tests for ValueCodec precedence."""

    def test_default_applies(self):
        codec = ValueCodec(int)
        assert codec.to_wire(4) == "4"
        assert codec.from_wire("4") == 4

    def test_field_spec_beats_default(self):
        codec = ValueCodec(True)
        assert codec.from_wire("4", field_spec=str) == "4"

    def test_explicit_beats_field_spec(self):
        codec = ValueCodec(True)
        assert codec.from_wire("4", marshal=float, field_spec=str) == 4.0

    def test_explicit_false_passes_through(self):
        codec = ValueCodec(True)

        assert codec.resolve(False, int) is None
        assert codec.from_wire("plain", marshal=False) == "plain"
        assert codec.to_wire({"a": 1}, marshal=False) == {"a": 1}
        assert codec.all_from_wire(["x", "y"], marshal=False) == ["x", "y"]

    def test_explicit_none_falls_back(self):
        codec = ValueCodec(int)

        assert codec.resolve(None, str) is Marshal.STRING
        assert codec.resolve(None) is Marshal.INTEGER

    def test_no_spec_passes_through(self):
        codec = ValueCodec()
        assert codec.resolve() is None
        assert codec.all_from_wire(["a", "b"]) == ["a", "b"]

    def test_repr(self):
        assert repr(ValueCodec(int)) == "ValueCodec(default=integer)"
