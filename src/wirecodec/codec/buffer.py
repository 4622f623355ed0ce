"""Byte-level writing and reading utilities.

This module provides the low-level buffer primitives shared by both binary
formats. All multi-byte values are little-endian; there is no alignment or padding.
"""

from __future__ import annotations

import struct
from typing import Optional

from ..exceptions import UnexpectedEndOfInput

_FLOAT_FORMATS = {4: "<f", 8: "<d"}


class ByteWriter:
    """Appends little-endian primitives to a growing byte buffer.

    Example:
        >>> writer = ByteWriter()
        >>> writer.write_uint(42, 4)
        >>> writer.write_bool(True)
        >>> writer.to_bytes()
        b'*\\x00\\x00\\x00\\x01'
    """

    def __init__(self) -> None:
        """Initialize an empty writer."""
        self._buffer = bytearray()

    def write_bool(self, value: bool) -> None:
        """Write a boolean as a single 0x00/0x01 byte.

        Args:
            value: Boolean value to write
        """
        self._buffer.append(1 if value else 0)

    def write_uint(self, value: int, num_bytes: int) -> None:
        """Write an unsigned integer using the specified number of bytes.

        Args:
            value: Unsigned integer value to write (must be >= 0)
            num_bytes: Width of the encoding in bytes (1-16)

        Raises:
            ValueError: If value is negative or doesn't fit in num_bytes
        """
        if value < 0:
            raise ValueError(f"write_uint requires non-negative value, got {value}")
        if num_bytes < 1 or num_bytes > 16:
            raise ValueError(f"num_bytes must be 1-16, got {num_bytes}")

        max_value = (1 << (num_bytes * 8)) - 1
        if value > max_value:
            raise ValueError(
                f"Value {value} requires more than {num_bytes} bytes (max: {max_value})"
            )

        self._buffer.extend(value.to_bytes(num_bytes, "little"))

    def write_int(self, value: int, num_bytes: int) -> None:
        """Write a signed integer using two's complement encoding.

        Args:
            value: Signed integer value to write
            num_bytes: Width of the encoding in bytes (1-16)

        Raises:
            ValueError: If value doesn't fit in num_bytes using two's complement
        """
        if num_bytes < 1 or num_bytes > 16:
            raise ValueError(f"num_bytes must be 1-16, got {num_bytes}")

        num_bits = num_bytes * 8
        min_value = -(1 << (num_bits - 1))
        max_value = (1 << (num_bits - 1)) - 1

        if value < min_value or value > max_value:
            raise ValueError(
                f"Value {value} doesn't fit in {num_bytes} bytes (range: {min_value} to {max_value})"
            )

        self._buffer.extend(value.to_bytes(num_bytes, "little", signed=True))

    def write_float(self, value: float, num_bytes: int) -> None:
        """Write an IEEE-754 float of 4 or 8 bytes."""
        fmt = _FLOAT_FORMATS.get(num_bytes)
        if fmt is None:
            raise ValueError(f"float width must be 4 or 8 bytes, got {num_bytes}")
        try:
            self._buffer.extend(struct.pack(fmt, value))
        except OverflowError as e:
            raise ValueError(f"Value {value} doesn't fit in a {num_bytes}-byte float") from e

    def write_bytes(self, data: bytes) -> None:
        """Write raw bytes.

        Args:
            data: Bytes to write
        """
        self._buffer.extend(data)

    def byte_length(self) -> int:
        """Return the current number of bytes written."""
        return len(self._buffer)

    def to_bytes(self) -> bytes:
        """Return an immutable copy of the buffer."""
        return bytes(self._buffer)


class ByteReader:
    """Reads little-endian primitives from a byte buffer.

    Every read checks the remaining length first and raises
    UnexpectedEndOfInput instead of returning a short read.

    Example:
        >>> reader = ByteReader(b"*\\x00\\x00\\x00\\x01")
        >>> reader.read_uint(4)
        42
        >>> reader.read_uint(1)
        1
    """

    def __init__(self, data: bytes, *, codec: Optional[str] = None, offset: int = 0) -> None:
        """Initialize a reader over the given data.

        Args:
            data: Byte buffer to read
            codec: Codec name attached to raised errors
            offset: Position to start reading from
        """
        self._data = bytes(data)
        self._position = offset
        self.codec = codec

    def _require(self, num_bytes: int) -> None:
        available = len(self._data) - self._position
        if num_bytes > available:
            raise UnexpectedEndOfInput(
                num_bytes, available, codec=self.codec, offset=self._position
            )

    def read_uint(self, num_bytes: int) -> int:
        """Read an unsigned integer of the specified byte width.

        Raises:
            UnexpectedEndOfInput: If not enough bytes are available
        """
        self._require(num_bytes)
        start = self._position
        self._position += num_bytes
        return int.from_bytes(self._data[start : self._position], "little")

    def read_int(self, num_bytes: int) -> int:
        """Read a two's complement signed integer of the specified byte width.

        Raises:
            UnexpectedEndOfInput: If not enough bytes are available
        """
        self._require(num_bytes)
        start = self._position
        self._position += num_bytes
        return int.from_bytes(self._data[start : self._position], "little", signed=True)

    def read_float(self, num_bytes: int) -> float:
        """Read an IEEE-754 float of 4 or 8 bytes."""
        fmt = _FLOAT_FORMATS.get(num_bytes)
        if fmt is None:
            raise ValueError(f"float width must be 4 or 8 bytes, got {num_bytes}")
        self._require(num_bytes)
        start = self._position
        self._position += num_bytes
        return float(struct.unpack(fmt, self._data[start : self._position])[0])

    def read_bytes(self, num_bytes: int) -> bytes:
        """Read raw bytes.

        Raises:
            UnexpectedEndOfInput: If not enough bytes are available
        """
        self._require(num_bytes)
        start = self._position
        self._position += num_bytes
        return self._data[start : self._position]

    def peek_byte(self) -> int:
        """Return the next byte without consuming it."""
        self._require(1)
        return self._data[self._position]

    def skip(self, num_bytes: int) -> None:
        """Advance past bytes already inspected through another decoder."""
        self._require(num_bytes)
        self._position += num_bytes

    @property
    def data(self) -> bytes:
        return self._data

    def bytes_remaining(self) -> int:
        """Return the number of unread bytes."""
        return len(self._data) - self._position

    def position(self) -> int:
        """Return the current read position in bytes."""
        return self._position
