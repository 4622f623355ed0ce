"""Wire format parameters.

The fixed-layout ("bincode" style) and schema-tagged ("borsh" style) formats
share every rule except the width of sequence length prefixes and of union
discriminants. Those differences are captured here so one encoder and one
decoder serve both.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from .schema import (
    FixedArray,
    Option,
    Primitive,
    Record,
    Ref,
    Sequence,
    TaggedUnion,
    TypeNode,
)


@dataclass(frozen=True)
class WireFormat:
    """Width parameters of a binary format.

    Attributes:
        name: Codec name used in vector files and error messages
        length_width: Bytes in a sequence/string length prefix
        discriminant_width: Bytes in a union discriminant
    """

    name: str
    length_width: int
    discriminant_width: int

    @property
    def max_length(self) -> int:
        return (1 << (8 * self.length_width)) - 1

    @property
    def max_variants(self) -> int:
        return 1 << (8 * self.discriminant_width)


FIXED_LAYOUT = WireFormat(name="fixed", length_width=8, discriminant_width=4)
SCHEMA_TAGGED = WireFormat(name="tagged", length_width=4, discriminant_width=1)

WIRE_FORMATS = {fmt.name: fmt for fmt in (FIXED_LAYOUT, SCHEMA_TAGGED)}

FormatLike = Union[str, WireFormat]

# Nested TypeModel levels a single value may span; keeps recursive types
# within the interpreter's stack.
MAX_NESTING_DEPTH = 256
# Sequences of zero-sized elements are not bounded by the input length.
MAX_ZERO_SIZED_ELEMENTS = 1 << 16


def get_format(codec: FormatLike) -> WireFormat:
    """Look up a wire format by name (``fixed`` or ``tagged``)."""
    if isinstance(codec, WireFormat):
        return codec
    try:
        return WIRE_FORMATS[codec]
    except KeyError:
        raise ValueError(
            f"Unknown binary codec {codec!r}. Must be one of: {', '.join(WIRE_FORMATS)}"
        ) from None


def min_encoded_size(node: TypeNode, wire_format: WireFormat) -> int:
    """Lower bound on the encoded size of any value of ``node``.

    Unions count only their discriminant so that recursion through a
    variant payload terminates.
    """
    while isinstance(node, Ref):
        node = node.resolve()
    if isinstance(node, Primitive):
        if node.width is not None:
            return node.width
        return wire_format.length_width
    if isinstance(node, FixedArray):
        return node.length * min_encoded_size(node.element, wire_format)
    if isinstance(node, Sequence):
        return 1 if node.compact else wire_format.length_width
    if isinstance(node, Option):
        return 1
    if isinstance(node, Record):
        return sum(min_encoded_size(f.type, wire_format) for f in node.fields)
    if isinstance(node, TaggedUnion):
        return wire_format.discriminant_width
    raise TypeError(f"Not a TypeModel node: {node!r}")
