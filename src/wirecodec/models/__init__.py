"""Pydantic record modeling for wirecodec.

This module provides the BaseRecord class and field markers for declaring
wire records using Pydantic.
"""

from __future__ import annotations

from .base import BaseRecord
from .fields import (
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
    CompactLen,
    FixedLen,
    WireType,
)

__all__ = [
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
]
