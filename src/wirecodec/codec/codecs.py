"""Codec objects for the three wire encodings.

Each codec exposes ``encode(model, value)``, ``decode(model, data)`` and
``decode_exact(model, data)``. Codecs hold no mutable state, so the shared
instances returned by get_codec() are safe to use from any thread.
"""

from __future__ import annotations

from typing import Any, Dict, Tuple, Union

from .compact import CompactLengthCodec
from .decoder import decode, decode_exact
from .encoder import encode
from .formats import FIXED_LAYOUT, SCHEMA_TAGGED, WireFormat
from .schema import TypeNode


class BinaryCodec:
    """Encoder/decoder pair bound to one wire format."""

    def __init__(self, wire_format: WireFormat) -> None:
        self.wire_format = wire_format

    @property
    def name(self) -> str:
        return self.wire_format.name

    def encode(self, model: TypeNode, value: Any) -> bytes:
        return encode(model, value, self.wire_format)

    def decode(self, model: TypeNode, data: bytes) -> Tuple[Any, int]:
        return decode(model, data, self.wire_format)

    def decode_exact(self, model: TypeNode, data: bytes) -> Any:
        return decode_exact(model, data, self.wire_format)

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class FixedLayoutCodec(BinaryCodec):
    """Bincode-style format: 8-byte length prefixes, u32 discriminants.

    Example:
        >>> FixedLayoutCodec().encode(describe("u32"), 42)
        b'*\\x00\\x00\\x00'
    """

    def __init__(self) -> None:
        super().__init__(FIXED_LAYOUT)


class SchemaTaggedCodec(BinaryCodec):
    """Borsh-style format: 4-byte length prefixes, u8 discriminants.

    Example:
        >>> SchemaTaggedCodec().encode(describe("string"), "hi")
        b'\\x02\\x00\\x00\\x00hi'
    """

    def __init__(self) -> None:
        super().__init__(SCHEMA_TAGGED)


Codec = Union[BinaryCodec, CompactLengthCodec]

CODECS: Dict[str, Codec] = {
    "fixed": FixedLayoutCodec(),
    "tagged": SchemaTaggedCodec(),
    "compact_len": CompactLengthCodec(),
}


def get_codec(name: str) -> Codec:
    """Return the shared codec instance for ``fixed``, ``tagged`` or ``compact_len``."""
    try:
        return CODECS[name]
    except KeyError:
        raise ValueError(
            f"Unknown codec {name!r}. Must be one of: {', '.join(CODECS)}"
        ) from None
