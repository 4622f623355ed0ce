"""Field type helpers and utilities.

This module provides annotation markers for declaring record fields with an
explicit wire width. Pydantic keeps these markers in ``FieldInfo.metadata``
where schema introspection picks them up.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated


@dataclass(frozen=True)
class WireType:
    """Primitive wire kind attached to an ``int``/``float`` annotation.

    Example:
        >>> class Header(BaseRecord):
        ...     version: Annotated[int, WireType("u16")]
    """

    kind: str


@dataclass(frozen=True)
class FixedLen:
    """Marks a ``list[T]`` field as a fixed array of ``length`` elements.

    Example:
        >>> class Account(BaseRecord):
        ...     owner: Annotated[list[U8], FixedLen(32)]
    """

    length: int


@dataclass(frozen=True)
class CompactLen:
    """Marks a ``list[T]`` field as a short-vec (compact length prefix)."""


U8 = Annotated[int, WireType("u8")]
U16 = Annotated[int, WireType("u16")]
U32 = Annotated[int, WireType("u32")]
U64 = Annotated[int, WireType("u64")]
U128 = Annotated[int, WireType("u128")]
I8 = Annotated[int, WireType("i8")]
I16 = Annotated[int, WireType("i16")]
I32 = Annotated[int, WireType("i32")]
I64 = Annotated[int, WireType("i64")]
I128 = Annotated[int, WireType("i128")]
F32 = Annotated[float, WireType("f32")]
F64 = Annotated[float, WireType("f64")]
