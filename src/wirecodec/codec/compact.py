"""Compact ("short-vec") length encoding.

A u16 length is written as groups of 7 bits, least-significant group first.
Every byte but the last has its high (continuation) bit set, so the encoding
takes 1 to 3 bytes:

    0      -> [0x00]
    127    -> [0x7f]
    128    -> [0x80, 0x01]
    300    -> [0xac, 0x02]
    65535  -> [0xff, 0xff, 0x03]
"""

from __future__ import annotations

from typing import Any, Optional, Tuple

from ..exceptions import (
    OverlongEncoding,
    SchemaError,
    TrailingBytes,
    UnexpectedEndOfInput,
    UnrepresentableLength,
    ValueMismatch,
    ValueOutOfRange,
)
from .schema import Primitive, TypeNode, resolve

CODEC_NAME = "compact_len"
MAX_COMPACT_VALUE = 0xFFFF
MAX_COMPACT_BYTES = 3


def encode_length(value: int) -> bytes:
    """Encode a length in [0, 65535] as 1-3 compact bytes.

    Raises:
        UnrepresentableLength: If value is outside the u16 range
    """
    if value < 0 or value > MAX_COMPACT_VALUE:
        raise UnrepresentableLength(value, MAX_COMPACT_VALUE, codec=CODEC_NAME)

    result = bytearray()
    remaining = value
    while remaining >= 0x80:
        result.append((remaining & 0x7F) | 0x80)
        remaining >>= 7
    result.append(remaining & 0x7F)
    return bytes(result)


def decode_length(data: bytes, offset: int = 0) -> Tuple[int, int]:
    """Decode a compact length starting at ``offset``.

    Args:
        data: Buffer holding the encoding
        offset: Position of the first length byte

    Returns:
        Tuple of (value, bytes consumed)

    Raises:
        UnexpectedEndOfInput: If the buffer ends before a terminating byte
        OverlongEncoding: If three bytes pass without a terminating byte
        ValueOutOfRange: If the value does not fit in 16 bits
    """
    value = 0
    for index in range(MAX_COMPACT_BYTES):
        position = offset + index
        if position >= len(data):
            raise UnexpectedEndOfInput(1, 0, codec=CODEC_NAME, offset=position)
        byte = data[position]
        value |= (byte & 0x7F) << (7 * index)
        if not byte & 0x80:
            if value > MAX_COMPACT_VALUE:
                raise ValueOutOfRange(value, codec=CODEC_NAME, offset=offset)
            return value, index + 1

    raise OverlongEncoding(
        f"compact length continues past {MAX_COMPACT_BYTES} bytes",
        codec=CODEC_NAME,
        offset=offset,
    )


class CompactLengthCodec:
    """Codec facade over encode_length/decode_length.

    Exposes the same ``encode``/``decode``/``decode_exact`` surface as the
    binary codecs so the conformance harness drives all three uniformly. The
    model, when given, must describe a u16.
    """

    name = CODEC_NAME

    def _check_model(self, model: Optional[TypeNode]) -> None:
        if model is None:
            return
        node = resolve(model)
        if node != Primitive("u16"):
            raise SchemaError(f"compact lengths encode u16 values, not {node}")

    def encode(self, model: Optional[TypeNode], value: Any) -> bytes:
        self._check_model(model)
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueMismatch(
                f"expected int, got {type(value).__name__}", codec=CODEC_NAME
            )
        return encode_length(value)

    def decode(self, model: Optional[TypeNode], data: bytes) -> Tuple[int, int]:
        self._check_model(model)
        return decode_length(data)

    def decode_exact(self, model: Optional[TypeNode], data: bytes) -> int:
        value, consumed = self.decode(model, data)
        if consumed != len(data):
            raise TrailingBytes(consumed, len(data), codec=CODEC_NAME)
        return value
