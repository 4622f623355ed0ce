"""Encoded size calculation utilities.

This module provides functions to calculate the encoded size of a type
without encoding a value, and the actual size of a given value.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel

from ..codec.encoder import encode
from ..codec.formats import FormatLike, WireFormat, get_format, min_encoded_size
from ..codec.schema import (
    FixedArray,
    Option,
    Primitive,
    Record,
    Sequence,
    TaggedUnion,
    TypeNode,
    resolve,
    schema_from_model,
)


def _as_node(model: TypeNode | type[BaseModel]) -> TypeNode:
    if isinstance(model, type) and issubclass(model, BaseModel):
        return schema_from_model(model)
    return model


def static_size(model: TypeNode | type[BaseModel], codec: FormatLike = "fixed") -> Optional[int]:
    """Return the encoded size in bytes if every value of the type has the same size.

    Args:
        model: TypeModel node or Pydantic model class
        codec: ``"fixed"`` or ``"tagged"``

    Returns:
        Size in bytes, or None for variable-size types (sequences, strings,
        optionals, unions with payloads of differing size)

    Example:
        >>> static_size(describe("[u32; 4]"))
        16
        >>> static_size(describe("vec<u8>")) is None
        True
    """
    return _static_size(_as_node(model), get_format(codec), frozenset())


def _static_size(node: TypeNode, wire_format: WireFormat, visiting: frozenset) -> Optional[int]:
    node = resolve(node)

    if isinstance(node, Primitive):
        return node.width
    if isinstance(node, FixedArray):
        element = _static_size(node.element, wire_format, visiting)
        return None if element is None else element * node.length
    if isinstance(node, (Sequence, Option)):
        return None
    if isinstance(node, Record):
        total = 0
        for f in node.fields:
            size = _static_size(f.type, wire_format, visiting)
            if size is None:
                return None
            total += size
        return total
    if isinstance(node, TaggedUnion):
        # A union that contains itself is never fixed-size.
        if node.name in visiting:
            return None
        visiting = visiting | {node.name}
        payload_sizes = set()
        for variant in node.variants:
            if variant.payload is None:
                payload_sizes.add(0)
                continue
            payload_sizes.add(_static_size(variant.payload, wire_format, visiting))
        if len(payload_sizes) != 1 or None in payload_sizes:
            return None
        return wire_format.discriminant_width + payload_sizes.pop()
    raise TypeError(f"Not a TypeModel node: {node!r}")


def min_size(model: TypeNode | type[BaseModel], codec: FormatLike = "fixed") -> int:
    """Return the smallest possible encoded size in bytes (unions count their tag only)."""
    return min_encoded_size(_as_node(model), get_format(codec))


def encoded_size(
    model: TypeNode | type[BaseModel], value: Any, codec: FormatLike = "fixed"
) -> int:
    """Return the encoded size of ``value`` in bytes.

    Raises:
        EncodeError: If the value does not match the model
    """
    return len(encode(_as_node(model), value, codec))


def field_sizes(
    model: Record | type[BaseModel], codec: FormatLike = "fixed"
) -> Dict[str, Optional[int]]:
    """Get the static size of each field of a record.

    Returns:
        Dictionary mapping field names to their size in bytes (None if variable)

    Example:
        >>> field_sizes(Record("Pair", [Field("a", Primitive("u8")), Field("b", Primitive("u32"))]))
        {'a': 1, 'b': 4}
    """
    node = resolve(_as_node(model))
    if not isinstance(node, Record):
        raise TypeError(f"field_sizes expects a record, got {node}")
    return {f.name: static_size(f.type, codec) for f in node.fields}
