"""Mapping between JSON vector values and in-memory codec values.

JSON conventions follow serde's externally tagged representation:

- integers are JSON numbers, or decimal strings for values beyond 2**53
- floats are numbers or the strings ``"NaN"``, ``"Infinity"``, ``"-Infinity"``
- ``bytes`` is an array of byte values or a ``"0x..."`` hex string
- optionals are ``null`` or the inner value
- records are objects keyed by field name
- unions are the variant name (unit variants) or ``{"Variant": payload}``
"""

from __future__ import annotations

import math
import re
import struct
from typing import Any

from pydantic import BaseModel, ValidationError

from ..codec.schema import (
    FixedArray,
    Option,
    Primitive,
    Record,
    Sequence,
    TaggedUnion,
    TypeNode,
    UnionValue,
    resolve,
)
from ..exceptions import ValueMismatch

_SPECIAL_FLOATS = {"NaN": math.nan, "Infinity": math.inf, "-Infinity": -math.inf}
_DECIMAL = re.compile(r"-?[0-9]+")


def _mismatch(path: str, message: str) -> ValueMismatch:
    return ValueMismatch(f"{path}: {message}")


def from_json(node: TypeNode, data: Any, path: str = "$") -> Any:
    """Convert a JSON value to the in-memory value for ``node``.

    Raises:
        ValueMismatch: If the JSON value cannot represent a value of the type
    """
    node = resolve(node)

    if isinstance(node, Primitive):
        return _primitive_from_json(node, data, path)

    if isinstance(node, (FixedArray, Sequence)):
        if not isinstance(data, list):
            raise _mismatch(path, f"expected an array for {node}, got {type(data).__name__}")
        return [from_json(node.element, item, f"{path}[{i}]") for i, item in enumerate(data)]

    if isinstance(node, Option):
        if data is None:
            return None
        return from_json(node.inner, data, path)

    if isinstance(node, Record):
        if not isinstance(data, dict):
            raise _mismatch(path, f"expected an object for {node.name}, got {type(data).__name__}")
        unknown = set(data) - {f.name for f in node.fields}
        if unknown:
            raise _mismatch(path, f"unknown fields for {node.name}: {', '.join(sorted(unknown))}")
        values = {}
        for f in node.fields:
            if f.name not in data:
                raise _mismatch(path, f"missing field {f.name!r} of {node.name}")
            values[f.name] = from_json(f.type, data[f.name], f"{path}.{f.name}")
        if node.model is None:
            return values
        try:
            return node.model(**values)
        except ValidationError as e:
            raise _mismatch(path, f"invalid {node.name}: {e}") from e

    if isinstance(node, TaggedUnion):
        return _union_from_json(node, data, path)

    raise TypeError(f"Not a TypeModel node: {node!r}")


def _primitive_from_json(node: Primitive, data: Any, path: str) -> Any:
    kind = node.kind

    if kind == "unit":
        if data is not None:
            raise _mismatch(path, f"expected null for unit, got {data!r}")
        return None

    if kind == "bool":
        if not isinstance(data, bool):
            raise _mismatch(path, f"expected a boolean, got {data!r}")
        return data

    if node.is_integer:
        if isinstance(data, str) and _DECIMAL.fullmatch(data):
            return int(data)
        if isinstance(data, bool) or not isinstance(data, int):
            raise _mismatch(path, f"expected an integer for {kind}, got {data!r}")
        return data

    if node.is_float:
        if isinstance(data, str) and data in _SPECIAL_FLOATS:
            return _SPECIAL_FLOATS[data]
        if isinstance(data, bool) or not isinstance(data, (int, float)):
            raise _mismatch(path, f"expected a number for {kind}, got {data!r}")
        return float(data)

    if kind == "string":
        if not isinstance(data, str):
            raise _mismatch(path, f"expected a string, got {data!r}")
        return data

    if kind == "bytes":
        if isinstance(data, str):
            if not data.startswith("0x"):
                raise _mismatch(path, "byte strings must be arrays or 0x-prefixed hex")
            try:
                return bytes.fromhex(data[2:])
            except ValueError as e:
                raise _mismatch(path, f"invalid hex: {e}") from e
        if not isinstance(data, list) or not all(
            isinstance(b, int) and not isinstance(b, bool) and 0 <= b <= 255 for b in data
        ):
            raise _mismatch(path, "expected an array of byte values")
        return bytes(data)

    raise _mismatch(path, f"unsupported primitive {kind}")


def _union_from_json(node: TaggedUnion, data: Any, path: str) -> Any:
    if isinstance(data, str):
        variant_name, payload_json, has_payload = data, None, False
    elif isinstance(data, dict) and len(data) == 1:
        ((variant_name, payload_json),) = data.items()
        has_payload = True
    else:
        raise _mismatch(
            path, f"expected a variant name or a single-key object for {node.name}, got {data!r}"
        )

    try:
        variant = node.variants[node.index_of(variant_name)]
    except KeyError:
        raise _mismatch(path, f"{node.name} has no variant {variant_name!r}") from None

    if variant.payload is None:
        if has_payload and payload_json is not None:
            raise _mismatch(path, f"unit variant {node.name}::{variant_name} takes no payload")
        payload = None
    else:
        if not has_payload:
            raise _mismatch(path, f"variant {node.name}::{variant_name} needs a payload")
        payload = from_json(variant.payload, payload_json, f"{path}::{variant_name}")

    if node.enum is not None:
        return node.enum[variant_name]
    return UnionValue(variant_name, payload)


def to_json(node: TypeNode, value: Any) -> Any:
    """Convert an in-memory value back to its JSON representation."""
    node = resolve(node)

    if isinstance(node, Primitive):
        if node.is_float and not math.isfinite(value):
            return "NaN" if math.isnan(value) else ("Infinity" if value > 0 else "-Infinity")
        if node.kind == "bytes":
            return list(value)
        if node.is_integer and abs(value) > 2**53:
            return str(value)
        return value

    if isinstance(node, (FixedArray, Sequence)):
        return [to_json(node.element, item) for item in value]

    if isinstance(node, Option):
        return None if value is None else to_json(node.inner, value)

    if isinstance(node, Record):
        return {f.name: to_json(f.type, _field(value, f.name)) for f in node.fields}

    if isinstance(node, TaggedUnion):
        if node.enum is not None or isinstance(value, str):
            return value if isinstance(value, str) else value.name
        variant = node.variants[node.index_of(value.variant)]
        if variant.payload is None:
            return value.variant
        return {value.variant: to_json(variant.payload, value.payload)}

    raise TypeError(f"Not a TypeModel node: {node!r}")


def _field(value: Any, name: str) -> Any:
    if isinstance(value, BaseModel):
        return getattr(value, name)
    return value[name]


def values_equal(node: TypeNode, left: Any, right: Any) -> bool:
    """Compare two in-memory values of ``node``.

    Floats compare by their encoded bits, so NaN equals NaN and 0.0 differs
    from -0.0.
    """
    node = resolve(node)

    if isinstance(node, Primitive):
        if node.is_float:
            if not isinstance(left, (int, float)) or not isinstance(right, (int, float)):
                return False
            fmt = "<f" if node.width == 4 else "<d"
            try:
                return struct.pack(fmt, left) == struct.pack(fmt, right)
            except (OverflowError, struct.error):
                return False
        if node.kind == "bytes":
            return bytes(left) == bytes(right)
        return type(left) is type(right) and left == right

    if isinstance(node, (FixedArray, Sequence)):
        return len(left) == len(right) and all(
            values_equal(node.element, a, b) for a, b in zip(left, right)
        )

    if isinstance(node, Option):
        if left is None or right is None:
            return left is None and right is None
        return values_equal(node.inner, left, right)

    if isinstance(node, Record):
        try:
            return all(
                values_equal(f.type, _field(left, f.name), _field(right, f.name))
                for f in node.fields
            )
        except (KeyError, AttributeError):
            return False

    if isinstance(node, TaggedUnion):
        if node.enum is not None:
            return left is right
        left_variant = left if isinstance(left, str) else left.variant
        right_variant = right if isinstance(right, str) else right.variant
        if left_variant != right_variant:
            return False
        variant = node.variants[node.index_of(left_variant)]
        if variant.payload is None:
            return True
        return values_equal(variant.payload, left.payload, right.payload)

    raise TypeError(f"Not a TypeModel node: {node!r}")
