"""Deterministic binary codecs for wirecodec.

This module provides the TypeModel, the fixed-layout (bincode style) and
schema-tagged (borsh style) encoders/decoders, and the compact u16 length
encoding.
"""

from __future__ import annotations

from .codecs import (
    CODECS,
    BinaryCodec,
    Codec,
    FixedLayoutCodec,
    SchemaTaggedCodec,
    get_codec,
)
from .compact import CompactLengthCodec, decode_length, encode_length
from .decoder import decode, decode_exact
from .encoder import encode
from .formats import FIXED_LAYOUT, SCHEMA_TAGGED, WireFormat, get_format
from .schema import (
    Field,
    FixedArray,
    Option,
    Primitive,
    Record,
    Ref,
    Sequence,
    TaggedUnion,
    TypeNode,
    TypeRegistry,
    UnionValue,
    Variant,
    describe,
    load_schema,
    schema_from_model,
)

__all__ = [
    "encode",
    "decode",
    "decode_exact",
    "encode_length",
    "decode_length",
    # Codecs
    "BinaryCodec",
    "Codec",
    "FixedLayoutCodec",
    "SchemaTaggedCodec",
    "CompactLengthCodec",
    "CODECS",
    "get_codec",
    "WireFormat",
    "FIXED_LAYOUT",
    "SCHEMA_TAGGED",
    "get_format",
    # TypeModel
    "TypeNode",
    "Primitive",
    "FixedArray",
    "Sequence",
    "Option",
    "Field",
    "Record",
    "Variant",
    "TaggedUnion",
    "Ref",
    "UnionValue",
    "TypeRegistry",
    "describe",
    "load_schema",
    "schema_from_model",
]
