"""wirecodec: Deterministic Binary Codec Conformance

A Python library for byte-exact binary serialization of typed records in two
schema-driven formats, plus a harness that checks encoders and decoders
against externally authored golden vectors.

Key Features:
- Fixed-layout ("bincode" style) format: 8-byte lengths, u32 discriminants
- Schema-tagged ("borsh" style) format: 4-byte lengths, u8 discriminants
- Compact u16 ("short-vec") length encoding
- Pydantic-based record modeling
- Golden-vector conformance runner with per-vector failure diagnostics

Quick Start:
    >>> from wirecodec import BaseRecord, U8, U32
    >>>
    >>> class Pair(BaseRecord):
    ...     a: U8
    ...     b: U32
    >>>
    >>> data = Pair(a=1, b=2).encode()
    >>> data
    b'\\x01\\x02\\x00\\x00\\x00'
    >>> Pair.decode(data)
    Pair(a=1, b=2)

Without a model class, describe a type by its tag:
    >>> from wirecodec import describe, encode
    >>> encode(describe("option<u8>"), 5)
    b'\\x01\\x05'
"""

from __future__ import annotations

from .codec import (
    CODECS,
    FIXED_LAYOUT,
    SCHEMA_TAGGED,
    BinaryCodec,
    CompactLengthCodec,
    Field,
    FixedArray,
    FixedLayoutCodec,
    Option,
    Primitive,
    Record,
    Ref,
    SchemaTaggedCodec,
    Sequence,
    TaggedUnion,
    TypeNode,
    TypeRegistry,
    UnionValue,
    Variant,
    decode,
    decode_exact,
    decode_length,
    describe,
    encode,
    encode_length,
    get_codec,
    load_schema,
    schema_from_model,
)
from .conformance import (
    ConformanceReport,
    HarnessConfig,
    Stage,
    TestVector,
    VectorResult,
    load_vectors,
    run_vectors,
    verify_file,
)
from .exceptions import (
    DecodeError,
    ExcessiveLength,
    EncodeError,
    HarnessError,
    InvalidBool,
    InvalidDiscriminant,
    InvalidOptionalTag,
    InvalidSchema,
    InvalidUtf8,
    NestingTooDeep,
    OverlongEncoding,
    SchemaError,
    TrailingBytes,
    UnexpectedEndOfInput,
    UnrepresentableLength,
    ValueMismatch,
    ValueOutOfRange,
    VectorLoadError,
    WirecodecError,
)
from .models import (
    F32,
    F64,
    I8,
    I16,
    I32,
    I64,
    I128,
    U8,
    U16,
    U32,
    U64,
    U128,
    BaseRecord,
    CompactLen,
    FixedLen,
    WireType,
)
from .utils import encoded_size, field_sizes, min_size, static_size

__version__ = "0.1.0"

__all__ = [
    # Core API
    "encode",
    "decode",
    "decode_exact",
    "describe",
    "encode_length",
    "decode_length",
    # Codecs
    "BinaryCodec",
    "FixedLayoutCodec",
    "SchemaTaggedCodec",
    "CompactLengthCodec",
    "CODECS",
    "FIXED_LAYOUT",
    "SCHEMA_TAGGED",
    "get_codec",
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
    "load_schema",
    "schema_from_model",
    # Record modeling
    "BaseRecord",
    "WireType",
    "FixedLen",
    "CompactLen",
    "U8",
    "U16",
    "U32",
    "U64",
    "U128",
    "I8",
    "I16",
    "I32",
    "I64",
    "I128",
    "F32",
    "F64",
    # Conformance
    "TestVector",
    "load_vectors",
    "run_vectors",
    "verify_file",
    "HarnessConfig",
    "ConformanceReport",
    "VectorResult",
    "Stage",
    # Exceptions
    "WirecodecError",
    "SchemaError",
    "InvalidSchema",
    "EncodeError",
    "UnrepresentableLength",
    "ValueMismatch",
    "DecodeError",
    "UnexpectedEndOfInput",
    "InvalidDiscriminant",
    "InvalidOptionalTag",
    "InvalidBool",
    "InvalidUtf8",
    "OverlongEncoding",
    "ValueOutOfRange",
    "TrailingBytes",
    "NestingTooDeep",
    "ExcessiveLength",
    "HarnessError",
    "VectorLoadError",
    # Sizing
    "static_size",
    "min_size",
    "encoded_size",
    "field_sizes",
    # Version
    "__version__",
]
