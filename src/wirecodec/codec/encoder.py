"""Schema-driven binary encoder.

This module provides the encode() function that converts a value to the
fixed-layout or schema-tagged binary format by walking its TypeModel.
Fields are encoded in declaration order with no padding; all integers are
little-endian.
"""

from __future__ import annotations

import collections.abc
import enum
from typing import Any

from pydantic import BaseModel

from ..exceptions import SchemaError, UnrepresentableLength, ValueMismatch
from .buffer import ByteWriter
from .compact import encode_length
from .formats import MAX_NESTING_DEPTH, FormatLike, WireFormat, get_format
from .schema import (
    FixedArray,
    Option,
    Primitive,
    Record,
    Ref,
    Sequence,
    TaggedUnion,
    TypeNode,
    UnionValue,
)


def encode(model: TypeNode, value: Any, codec: FormatLike = "fixed") -> bytes:
    """Encode a value against its TypeModel.

    Args:
        model: TypeModel node describing the value
        value: Value to encode (int, str, list, dict, UnionValue, ...)
        codec: ``"fixed"`` (bincode style), ``"tagged"`` (borsh style) or a WireFormat

    Returns:
        Encoded bytes

    Raises:
        ValueMismatch: If the value's shape does not match the model, or it nests
            deeper than MAX_NESTING_DEPTH
        UnrepresentableLength: If a length does not fit the format's prefix
        SchemaError: If the model cannot be used with this format

    Examples:
        ```python
        from wirecodec import describe, encode

        encode(describe("u32"), 42)                       # b"*\\x00\\x00\\x00"
        encode(describe("option<u8>"), 5)                 # b"\\x01\\x05"
        encode(describe("vec<u16>"), [1, 2], "tagged")    # b"\\x02\\x00\\x00\\x00\\x01\\x00\\x02\\x00"
        ```
    """
    wire_format = get_format(codec)
    writer = ByteWriter()
    _encode_node(writer, model, value, wire_format, "$")
    return writer.to_bytes()


def _mismatch(wire_format: WireFormat, path: str, message: str) -> ValueMismatch:
    return ValueMismatch(f"{path}: {message}", codec=wire_format.name)


def _write_length(
    writer: ByteWriter, length: int, wire_format: WireFormat, compact: bool
) -> None:
    if compact:
        writer.write_bytes(encode_length(length))
        return
    if length > wire_format.max_length:
        raise UnrepresentableLength(length, wire_format.max_length, codec=wire_format.name)
    writer.write_uint(length, wire_format.length_width)


def _as_sequence(value: Any, wire_format: WireFormat, path: str) -> collections.abc.Sequence:
    if isinstance(value, (str, bytes, bytearray)) or not isinstance(
        value, collections.abc.Sequence
    ):
        raise _mismatch(wire_format, path, f"expected a sequence, got {type(value).__name__}")
    return value


def _encode_node(
    writer: ByteWriter,
    node: TypeNode,
    value: Any,
    wire_format: WireFormat,
    path: str,
    depth: int = 0,
) -> None:
    if depth > MAX_NESTING_DEPTH:
        raise _mismatch(wire_format, path, f"value nests deeper than {MAX_NESTING_DEPTH} levels")
    depth += 1

    while isinstance(node, Ref):
        node = node.resolve()

    if isinstance(node, Primitive):
        _encode_primitive(writer, node, value, wire_format, path)
        return

    if isinstance(node, FixedArray):
        items = _as_sequence(value, wire_format, path)
        if len(items) != node.length:
            raise _mismatch(
                wire_format, path, f"expected {node.length} elements, got {len(items)}"
            )
        for index, item in enumerate(items):
            _encode_node(writer, node.element, item, wire_format, f"{path}[{index}]", depth)
        return

    if isinstance(node, Sequence):
        items = _as_sequence(value, wire_format, path)
        # Length is checked before any element is touched.
        _write_length(writer, len(items), wire_format, node.compact)
        for index, item in enumerate(items):
            _encode_node(writer, node.element, item, wire_format, f"{path}[{index}]", depth)
        return

    if isinstance(node, Option):
        if value is None:
            writer.write_uint(0, 1)
        else:
            writer.write_uint(1, 1)
            _encode_node(writer, node.inner, value, wire_format, path, depth)
        return

    if isinstance(node, Record):
        _encode_record(writer, node, value, wire_format, path, depth)
        return

    if isinstance(node, TaggedUnion):
        _encode_union(writer, node, value, wire_format, path, depth)
        return

    raise TypeError(f"Not a TypeModel node: {node!r}")


def _encode_primitive(
    writer: ByteWriter, node: Primitive, value: Any, wire_format: WireFormat, path: str
) -> None:
    kind = node.kind

    if kind == "unit":
        if value is not None:
            raise _mismatch(wire_format, path, f"expected None for unit, got {value!r}")
        return

    if kind == "bool":
        if not isinstance(value, bool):
            raise _mismatch(wire_format, path, f"expected bool, got {type(value).__name__}")
        writer.write_bool(value)
        return

    if node.is_integer:
        if isinstance(value, bool) or not isinstance(value, int):
            raise _mismatch(wire_format, path, f"expected int, got {type(value).__name__}")
        try:
            if node.is_signed:
                writer.write_int(value, node.width)
            else:
                writer.write_uint(value, node.width)
        except ValueError as e:
            raise _mismatch(wire_format, path, f"{kind} value out of range: {e}") from e
        return

    if node.is_float:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise _mismatch(wire_format, path, f"expected float, got {type(value).__name__}")
        try:
            writer.write_float(float(value), node.width)
        except ValueError as e:
            raise _mismatch(wire_format, path, str(e)) from e
        return

    if kind == "string":
        if not isinstance(value, str):
            raise _mismatch(wire_format, path, f"expected str, got {type(value).__name__}")
        try:
            raw = value.encode("utf-8")
        except UnicodeEncodeError as e:
            raise _mismatch(wire_format, path, f"string is not encodable as UTF-8: {e}") from e
        _write_length(writer, len(raw), wire_format, compact=False)
        writer.write_bytes(raw)
        return

    if kind == "bytes":
        if not isinstance(value, (bytes, bytearray, memoryview)):
            raise _mismatch(wire_format, path, f"expected bytes, got {type(value).__name__}")
        raw = bytes(value)
        _write_length(writer, len(raw), wire_format, compact=False)
        writer.write_bytes(raw)
        return

    raise SchemaError(f"{path}: unsupported primitive {kind}")


def _encode_record(
    writer: ByteWriter,
    node: Record,
    value: Any,
    wire_format: WireFormat,
    path: str,
    depth: int,
) -> None:
    if isinstance(value, BaseModel):
        for f in node.fields:
            if not hasattr(value, f.name):
                raise _mismatch(wire_format, path, f"{node.name} value has no field {f.name!r}")
            _encode_node(
                writer, f.type, getattr(value, f.name), wire_format, f"{path}.{f.name}", depth
            )
        return

    if not isinstance(value, collections.abc.Mapping):
        raise _mismatch(
            wire_format, path, f"expected a mapping for {node.name}, got {type(value).__name__}"
        )

    unknown = set(value) - {f.name for f in node.fields}
    if unknown:
        raise _mismatch(
            wire_format, path, f"unknown fields for {node.name}: {', '.join(sorted(map(str, unknown)))}"
        )
    for f in node.fields:
        if f.name not in value:
            raise _mismatch(wire_format, path, f"missing field {f.name!r} of {node.name}")
        _encode_node(writer, f.type, value[f.name], wire_format, f"{path}.{f.name}", depth)


def _encode_union(
    writer: ByteWriter,
    node: TaggedUnion,
    value: Any,
    wire_format: WireFormat,
    path: str,
    depth: int,
) -> None:
    if len(node.variants) > wire_format.max_variants:
        raise SchemaError(
            f"{node.name} has {len(node.variants)} variants; the {wire_format.name} format "
            f"supports at most {wire_format.max_variants}"
        )

    if isinstance(value, UnionValue):
        variant_name, payload = value.variant, value.payload
    elif isinstance(value, enum.Enum):
        variant_name, payload = value.name, None
    elif isinstance(value, str):
        variant_name, payload = value, None
    else:
        raise _mismatch(
            wire_format, path, f"expected a UnionValue for {node.name}, got {type(value).__name__}"
        )

    try:
        index = node.index_of(variant_name)
    except KeyError:
        raise _mismatch(
            wire_format, path, f"{node.name} has no variant {variant_name!r}"
        ) from None

    writer.write_uint(index, wire_format.discriminant_width)

    variant = node.variants[index]
    if variant.payload is None:
        if payload is not None:
            raise _mismatch(
                wire_format, path, f"unit variant {node.name}::{variant_name} takes no payload"
            )
        return
    _encode_node(
        writer, variant.payload, payload, wire_format, f"{path}::{variant_name}", depth
    )
