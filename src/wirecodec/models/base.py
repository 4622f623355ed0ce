"""Base record class and wirecodec-specific Pydantic configuration.

This module provides the BaseRecord class for declaring wire records as
Pydantic models. Field declaration order is the wire order.
"""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict

R = TypeVar("R", bound="BaseRecord")


class BaseRecord(BaseModel):
    """Base class for wire records declared with Pydantic.

    Integer and float fields carry a width marker from ``wirecodec.models``;
    the rest of the mapping follows the Python type (see ``schema_from_model``).

    Example:
        >>> from typing import Optional
        >>> from wirecodec.models import U8, U32
        >>> class Transfer(BaseRecord):
        ...     kind: U8
        ...     amount: U32
        ...     memo: Optional[str] = None
        >>> Transfer(kind=1, amount=2).encode()
        b'\\x01\\x02\\x00\\x00\\x00\\x00'
    """

    # ConfigDict for Pydantic v2
    model_config = ConfigDict(
        # Records are values: immutable and hashable where their fields are
        frozen=True,
        # Forbid extra fields not defined in schema
        extra="forbid",
        # Allow arbitrary types (e.g. UnionValue payloads)
        arbitrary_types_allowed=True,
    )

    @classmethod
    def wire_schema(cls) -> Any:
        """Return the Record node describing this model."""
        from ..codec.schema import schema_from_model

        return schema_from_model(cls)

    def encode(self, codec: str = "fixed") -> bytes:
        """Encode this record with the ``fixed`` or ``tagged`` format."""
        from ..codec.encoder import encode

        return encode(self.wire_schema(), self, codec)

    @classmethod
    def decode(cls: type[R], data: bytes, codec: str = "fixed") -> R:
        """Decode an instance that spans all of ``data``.

        Raises:
            DecodeError: If data is truncated, malformed or has trailing bytes
        """
        from ..codec.decoder import decode_exact

        return decode_exact(cls.wire_schema(), data, codec)
