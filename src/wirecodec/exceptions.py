"""Exception hierarchy for wirecodec.

This module defines all custom exceptions used throughout the package.
All exceptions inherit from WirecodecError for easy catching of any wirecodec-specific error.

Codec errors carry structured attributes (``codec``, ``offset`` and the offending
value where relevant) so the conformance harness can turn them into failure records.
"""

from __future__ import annotations

from typing import Optional


class WirecodecError(Exception):
    """Base exception for all wirecodec errors."""

    pass


class SchemaError(WirecodecError):
    """Raised when a type model is invalid or cannot be resolved.

    Examples:
        - Tagged union with no variants
        - Unknown type tag
        - Recursive type without an indirection that can terminate
    """

    pass


class InvalidSchema(SchemaError):
    """Raised when constructing a TypeModel node with inconsistent parameters."""

    pass


class EncodeError(WirecodecError):
    """Raised when encoding a value fails."""

    def __init__(self, message: str, *, codec: Optional[str] = None) -> None:
        super().__init__(message)
        self.codec = codec


class UnrepresentableLength(EncodeError):
    """Raised when a length does not fit the format's length prefix."""

    def __init__(self, length: int, limit: int, *, codec: Optional[str] = None) -> None:
        super().__init__(
            f"length {length} exceeds the maximum representable length {limit}", codec=codec
        )
        self.length = length
        self.limit = limit


class ValueMismatch(EncodeError):
    """Raised when a value's runtime shape does not match its type model.

    Examples:
        - Integer out of range for its width
        - Fixed array with the wrong number of elements
        - Record missing a field
        - Unknown union variant
    """

    pass


class DecodeError(WirecodecError):
    """Raised when decoding binary data fails."""

    def __init__(
        self, message: str, *, codec: Optional[str] = None, offset: Optional[int] = None
    ) -> None:
        if codec is not None:
            message = f"[{codec}] {message}"
        if offset is not None:
            message = f"{message} (at offset {offset})"
        super().__init__(message)
        self.codec = codec
        self.offset = offset


class UnexpectedEndOfInput(DecodeError):
    """Raised when fewer bytes remain than a construct requires."""

    def __init__(
        self,
        needed: int,
        available: int,
        *,
        codec: Optional[str] = None,
        offset: Optional[int] = None,
    ) -> None:
        super().__init__(
            f"unexpected end of input: need {needed} bytes, have {available}",
            codec=codec,
            offset=offset,
        )
        self.needed = needed
        self.available = available


class InvalidDiscriminant(DecodeError):
    """Raised when a union discriminant is not below the declared variant count."""

    def __init__(
        self,
        discriminant: int,
        variant_count: int,
        *,
        codec: Optional[str] = None,
        offset: Optional[int] = None,
    ) -> None:
        super().__init__(
            f"invalid discriminant {discriminant} (only {variant_count} variants)",
            codec=codec,
            offset=offset,
        )
        self.discriminant = discriminant
        self.variant_count = variant_count


class InvalidOptionalTag(DecodeError):
    """Raised when an optional's tag byte is neither 0 nor 1."""

    def __init__(
        self, tag: int, *, codec: Optional[str] = None, offset: Optional[int] = None
    ) -> None:
        super().__init__(f"invalid optional tag {tag}", codec=codec, offset=offset)
        self.tag = tag


class InvalidBool(DecodeError):
    """Raised when a bool byte is neither 0x00 nor 0x01."""

    def __init__(
        self, byte: int, *, codec: Optional[str] = None, offset: Optional[int] = None
    ) -> None:
        super().__init__(f"invalid bool byte 0x{byte:02x}", codec=codec, offset=offset)
        self.byte = byte


class InvalidUtf8(DecodeError):
    """Raised when a string's bytes are not valid UTF-8."""

    pass


class OverlongEncoding(DecodeError):
    """Raised when a compact length uses more than three bytes."""

    pass


class ValueOutOfRange(DecodeError):
    """Raised when a compact length decodes to a value above 0xFFFF."""

    def __init__(
        self, value: int, *, codec: Optional[str] = None, offset: Optional[int] = None
    ) -> None:
        super().__init__(
            f"compact length {value} exceeds the u16 range", codec=codec, offset=offset
        )
        self.value = value


class TrailingBytes(DecodeError):
    """Raised when input remains after decoding a top-level value."""

    def __init__(self, consumed: int, total: int, *, codec: Optional[str] = None) -> None:
        super().__init__(
            f"{total - consumed} trailing bytes after decoding ({consumed} of {total} consumed)",
            codec=codec,
        )
        self.consumed = consumed
        self.total = total


class NestingTooDeep(DecodeError):
    """Raised when decoded data nests deeper than the codec's depth limit."""

    def __init__(
        self, limit: int, *, codec: Optional[str] = None, offset: Optional[int] = None
    ) -> None:
        super().__init__(f"value nests deeper than {limit} levels", codec=codec, offset=offset)
        self.limit = limit


class ExcessiveLength(DecodeError):
    """Raised when a sequence of zero-sized elements declares too many elements."""

    def __init__(
        self,
        count: int,
        limit: int,
        *,
        codec: Optional[str] = None,
        offset: Optional[int] = None,
    ) -> None:
        super().__init__(
            f"{count} zero-sized elements exceed the limit of {limit}",
            codec=codec,
            offset=offset,
        )
        self.count = count
        self.limit = limit


class HarnessError(WirecodecError):
    """Raised when the conformance harness cannot run at all."""

    pass


class VectorLoadError(HarnessError):
    """Raised when a vector or schema file is unreadable or malformed.

    Examples:
        - File not found
        - Invalid JSON
        - Vector entry missing a required key
        - Unknown type tag
    """

    pass
