"""Tests for little-endian byte buffers."""

from __future__ import annotations

import math

import pytest

from wirecodec.codec.buffer import ByteReader, ByteWriter
from wirecodec.exceptions import UnexpectedEndOfInput


class TestByteWriter:
    """Test ByteWriter."""

    def test_write_uint_little_endian(self) -> None:
        """Multi-byte integers are written least-significant byte first."""
        writer = ByteWriter()
        writer.write_uint(0x01020304, 4)
        assert writer.to_bytes() == b"\x04\x03\x02\x01"

    def test_write_uint_128(self) -> None:
        writer = ByteWriter()
        writer.write_uint(2**128 - 1, 16)
        assert writer.to_bytes() == b"\xff" * 16

    def test_write_int_twos_complement(self) -> None:
        writer = ByteWriter()
        writer.write_int(-1, 2)
        writer.write_int(-128, 1)
        assert writer.to_bytes() == b"\xff\xff\x80"

    def test_write_uint_overflow(self) -> None:
        writer = ByteWriter()
        with pytest.raises(ValueError, match="requires more than"):
            writer.write_uint(256, 1)

    def test_write_uint_negative(self) -> None:
        writer = ByteWriter()
        with pytest.raises(ValueError, match="non-negative"):
            writer.write_uint(-1, 4)

    def test_write_int_overflow(self) -> None:
        writer = ByteWriter()
        with pytest.raises(ValueError, match="doesn't fit"):
            writer.write_int(128, 1)

    def test_invalid_width(self) -> None:
        writer = ByteWriter()
        with pytest.raises(ValueError, match="1-16"):
            writer.write_uint(0, 17)

    def test_write_float_overflow(self) -> None:
        """A double too large for f32 is rejected, not silently truncated."""
        writer = ByteWriter()
        with pytest.raises(ValueError):
            writer.write_float(1e300, 4)

    def test_byte_length(self) -> None:
        writer = ByteWriter()
        writer.write_bool(True)
        writer.write_bytes(b"abc")
        assert writer.byte_length() == 4


class TestByteReader:
    """Test ByteReader."""

    def test_read_back(self) -> None:
        reader = ByteReader(b"\x04\x03\x02\x01\xff")
        assert reader.read_uint(4) == 0x01020304
        assert reader.read_int(1) == -1
        assert reader.bytes_remaining() == 0

    def test_read_float(self) -> None:
        writer = ByteWriter()
        writer.write_float(math.inf, 8)
        reader = ByteReader(writer.to_bytes())
        assert reader.read_float(8) == math.inf

    def test_short_read_raises(self) -> None:
        """Reading past the end raises instead of returning a short value."""
        reader = ByteReader(b"\x01\x02", codec="fixed")
        with pytest.raises(UnexpectedEndOfInput) as exc_info:
            reader.read_uint(4)
        assert exc_info.value.needed == 4
        assert exc_info.value.available == 2
        assert exc_info.value.offset == 0
        assert "[fixed]" in str(exc_info.value)

    def test_failed_read_does_not_advance(self) -> None:
        reader = ByteReader(b"\x01")
        with pytest.raises(UnexpectedEndOfInput):
            reader.read_bytes(2)
        assert reader.position() == 0
        assert reader.read_uint(1) == 1

    def test_peek_and_skip(self) -> None:
        reader = ByteReader(b"\x07\x08")
        assert reader.peek_byte() == 7
        assert reader.position() == 0
        reader.skip(1)
        assert reader.read_uint(1) == 8

    def test_start_offset(self) -> None:
        reader = ByteReader(b"\x00\x00\x2a", offset=2)
        assert reader.read_uint(1) == 42
