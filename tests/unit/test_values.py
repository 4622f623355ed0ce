"""Tests for JSON value conversion and value comparison."""

from __future__ import annotations

import math

import pytest

from wirecodec import TypeRegistry, UnionValue, ValueMismatch, describe
from wirecodec.conformance import from_json, to_json, values_equal


class TestFromJson:
    """Test JSON to in-memory conversion."""

    def test_big_integer_string(self) -> None:
        assert from_json(describe("u128"), "340282366920938463463374607431768211455") == 2**128 - 1
        assert from_json(describe("i64"), "-5") == -5

    def test_integer_rejects_other_strings(self) -> None:
        with pytest.raises(ValueMismatch):
            from_json(describe("u8"), "0x10")

    def test_special_floats(self) -> None:
        assert math.isnan(from_json(describe("f64"), "NaN"))
        assert from_json(describe("f32"), "-Infinity") == -math.inf
        assert from_json(describe("f64"), 2) == 2.0

    def test_bytes_forms(self) -> None:
        assert from_json(describe("bytes"), [1, 255]) == b"\x01\xff"
        assert from_json(describe("bytes"), "0x01ff") == b"\x01\xff"
        with pytest.raises(ValueMismatch):
            from_json(describe("bytes"), [256])
        with pytest.raises(ValueMismatch):
            from_json(describe("bytes"), "01ff")

    def test_union_forms(self, registry: TypeRegistry) -> None:
        shape = describe("Shape", registry)
        assert from_json(shape, "Empty") == UnionValue("Empty")
        assert from_json(shape, {"Circle": 3}) == UnionValue("Circle", 3)
        assert from_json(shape, {"Rect": {"x": 1, "y": 2}}) == UnionValue("Rect", {"x": 1, "y": 2})

    def test_union_errors(self, registry: TypeRegistry) -> None:
        shape = describe("Shape", registry)
        with pytest.raises(ValueMismatch, match="no variant"):
            from_json(shape, "Square")
        with pytest.raises(ValueMismatch, match="needs a payload"):
            from_json(shape, "Circle")
        with pytest.raises(ValueMismatch, match="single-key"):
            from_json(shape, {"Circle": 1, "Empty": None})

    def test_record_errors(self, registry: TypeRegistry) -> None:
        point = describe("Point", registry)
        with pytest.raises(ValueMismatch, match="missing field 'y'"):
            from_json(point, {"x": 1})
        with pytest.raises(ValueMismatch, match=r"\$\.y"):
            from_json(point, {"x": 1, "y": "one"})


class TestToJson:
    """Test in-memory to JSON conversion."""

    def test_round_trip(self, registry: TypeRegistry) -> None:
        shape = describe("vec<Shape>", registry)
        document = ["Empty", {"Circle": 3}, {"Rect": {"x": 1, "y": -2}}]
        assert to_json(shape, from_json(shape, document)) == document

    def test_big_integer_becomes_string(self) -> None:
        assert to_json(describe("u64"), 2**64 - 1) == "18446744073709551615"
        assert to_json(describe("u64"), 7) == 7

    def test_special_floats(self) -> None:
        assert to_json(describe("f64"), math.nan) == "NaN"
        assert to_json(describe("f64"), math.inf) == "Infinity"

    def test_bytes(self) -> None:
        assert to_json(describe("bytes"), b"\x01\x02") == [1, 2]


class TestValuesEqual:
    """Test structural comparison."""

    def test_nan_equals_nan(self) -> None:
        assert values_equal(describe("f64"), math.nan, math.nan)

    def test_signed_zero_differs(self) -> None:
        assert not values_equal(describe("f64"), 0.0, -0.0)

    def test_f32_compares_at_single_precision(self) -> None:
        decoded = 0.10000000149011612  # 0.1 rounded to f32
        assert values_equal(describe("f32"), 0.1, decoded)
        assert not values_equal(describe("f64"), 0.1, decoded)

    def test_bool_is_not_int(self) -> None:
        assert not values_equal(describe("u8"), 1, True)

    def test_option(self) -> None:
        model = describe("option<u8>")
        assert values_equal(model, None, None)
        assert not values_equal(model, None, 0)

    def test_union(self, registry: TypeRegistry) -> None:
        shape = describe("Shape", registry)
        assert values_equal(shape, "Empty", UnionValue("Empty"))
        assert not values_equal(shape, UnionValue("Circle", 1), UnionValue("Circle", 2))

    def test_sequence_length(self) -> None:
        assert not values_equal(describe("vec<u8>"), [1], [1, 2])
