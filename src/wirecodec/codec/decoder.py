"""Schema-driven binary decoder.

This module provides decode() and decode_exact(), which read a value back
from the fixed-layout or schema-tagged binary format by walking its TypeModel.
Decoding never reads past what the model requires.
"""

from __future__ import annotations

from typing import Any, Dict, Tuple

from pydantic import ValidationError

from ..exceptions import (
    DecodeError,
    ExcessiveLength,
    InvalidBool,
    InvalidDiscriminant,
    InvalidOptionalTag,
    InvalidUtf8,
    NestingTooDeep,
    SchemaError,
    TrailingBytes,
    UnexpectedEndOfInput,
)
from .buffer import ByteReader
from .compact import decode_length
from .formats import (
    MAX_NESTING_DEPTH,
    MAX_ZERO_SIZED_ELEMENTS,
    FormatLike,
    WireFormat,
    get_format,
    min_encoded_size,
)
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


def decode(model: TypeNode, data: bytes, codec: FormatLike = "fixed") -> Tuple[Any, int]:
    """Decode one value from the start of ``data``.

    Args:
        model: TypeModel node describing the value
        data: Binary data to decode
        codec: ``"fixed"`` (bincode style), ``"tagged"`` (borsh style) or a WireFormat

    Returns:
        Tuple of (value, bytes consumed). Unconsumed trailing input is left
        to the caller.

    Raises:
        UnexpectedEndOfInput: If data ends before the value is complete
        InvalidDiscriminant: If a union tag is not a declared variant index
        InvalidOptionalTag: If an optional tag byte is neither 0 nor 1
        NestingTooDeep: If the value nests deeper than MAX_NESTING_DEPTH
        DecodeError: For any other malformed input
    """
    wire_format = get_format(codec)
    reader = ByteReader(data, codec=wire_format.name)
    value = _decode_node(reader, model, wire_format)
    return value, reader.position()


def decode_exact(model: TypeNode, data: bytes, codec: FormatLike = "fixed") -> Any:
    """Decode a value that must span all of ``data``.

    Raises:
        TrailingBytes: If input remains after the value
    """
    wire_format = get_format(codec)
    value, consumed = decode(model, data, wire_format)
    if consumed != len(data):
        raise TrailingBytes(consumed, len(data), codec=wire_format.name)
    return value


def _read_length(reader: ByteReader, wire_format: WireFormat, compact: bool) -> int:
    if compact:
        start = reader.position()
        length, consumed = decode_length(reader.data, start)
        reader.skip(consumed)
        return length
    return reader.read_uint(wire_format.length_width)


def _check_count(
    reader: ByteReader, count: int, element: TypeNode, wire_format: WireFormat
) -> None:
    # Reject impossible counts before allocating anything.
    element_size = min_encoded_size(element, wire_format)
    if element_size == 0:
        if count > MAX_ZERO_SIZED_ELEMENTS:
            raise ExcessiveLength(
                count, MAX_ZERO_SIZED_ELEMENTS, codec=wire_format.name, offset=reader.position()
            )
        return
    if count * element_size > reader.bytes_remaining():
        raise UnexpectedEndOfInput(
            count * element_size,
            reader.bytes_remaining(),
            codec=wire_format.name,
            offset=reader.position(),
        )


def _decode_node(
    reader: ByteReader, node: TypeNode, wire_format: WireFormat, depth: int = 0
) -> Any:
    if depth > MAX_NESTING_DEPTH:
        raise NestingTooDeep(MAX_NESTING_DEPTH, codec=wire_format.name, offset=reader.position())
    depth += 1

    while isinstance(node, Ref):
        node = node.resolve()

    if isinstance(node, Primitive):
        return _decode_primitive(reader, node, wire_format)

    if isinstance(node, FixedArray):
        return [
            _decode_node(reader, node.element, wire_format, depth) for _ in range(node.length)
        ]

    if isinstance(node, Sequence):
        count = _read_length(reader, wire_format, node.compact)
        _check_count(reader, count, node.element, wire_format)
        return [_decode_node(reader, node.element, wire_format, depth) for _ in range(count)]

    if isinstance(node, Option):
        offset = reader.position()
        tag = reader.read_uint(1)
        if tag == 0:
            return None
        if tag != 1:
            raise InvalidOptionalTag(tag, codec=wire_format.name, offset=offset)
        return _decode_node(reader, node.inner, wire_format, depth)

    if isinstance(node, Record):
        return _decode_record(reader, node, wire_format, depth)

    if isinstance(node, TaggedUnion):
        return _decode_union(reader, node, wire_format, depth)

    raise TypeError(f"Not a TypeModel node: {node!r}")


def _decode_primitive(reader: ByteReader, node: Primitive, wire_format: WireFormat) -> Any:
    kind = node.kind

    if kind == "unit":
        return None

    if kind == "bool":
        offset = reader.position()
        byte = reader.read_uint(1)
        if byte > 1:
            raise InvalidBool(byte, codec=wire_format.name, offset=offset)
        return byte == 1

    if node.is_integer:
        if node.is_signed:
            return reader.read_int(node.width)
        return reader.read_uint(node.width)

    if node.is_float:
        return reader.read_float(node.width)

    if kind in ("string", "bytes"):
        length = reader.read_uint(wire_format.length_width)
        offset = reader.position()
        raw = reader.read_bytes(length)
        if kind == "bytes":
            return raw
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise InvalidUtf8(
                f"invalid UTF-8 in string: {e}", codec=wire_format.name, offset=offset
            ) from e

    raise SchemaError(f"unsupported primitive {kind}")


def _decode_record(
    reader: ByteReader, node: Record, wire_format: WireFormat, depth: int
) -> Any:
    field_values: Dict[str, Any] = {}
    for f in node.fields:
        field_values[f.name] = _decode_node(reader, f.type, wire_format, depth)

    if node.model is None:
        return field_values

    try:
        return node.model(**field_values)
    except ValidationError as e:
        raise DecodeError(
            f"Failed to construct {node.model.__name__}: {e}", codec=wire_format.name
        ) from e


def _decode_union(
    reader: ByteReader, node: TaggedUnion, wire_format: WireFormat, depth: int
) -> Any:
    if len(node.variants) > wire_format.max_variants:
        raise SchemaError(
            f"{node.name} has {len(node.variants)} variants; the {wire_format.name} format "
            f"supports at most {wire_format.max_variants}"
        )

    offset = reader.position()
    discriminant = reader.read_uint(wire_format.discriminant_width)
    if discriminant >= len(node.variants):
        raise InvalidDiscriminant(
            discriminant, len(node.variants), codec=wire_format.name, offset=offset
        )

    variant = node.variants[discriminant]
    payload = None
    if variant.payload is not None:
        payload = _decode_node(reader, variant.payload, wire_format, depth)

    if node.enum is not None:
        return node.enum[variant.name]
    return UnionValue(variant.name, payload)
