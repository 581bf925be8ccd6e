"""
Tests for the TLV encoding underneath every certificate structure.
"""

import struct

import pytest

from bcdns.core.tlv import TLVReader, TLVWriter, encode_item
from bcdns.exceptions import MalformedEncoding


class TestTLVWriter:
    """Test TLV encoding."""

    def test_item_layout(self):
        """Tag and length are little-endian uint16/uint32 followed by the value."""
        data = TLVWriter().write_bytes(3, b"abc").getvalue()
        assert data == struct.pack('<HI', 3, 3) + b"abc"

    def test_integer_widths(self):
        data = (
            TLVWriter()
            .write_u8(0, 7)
            .write_u16(1, 0x0102)
            .write_u64(2, 2 ** 40)
            .getvalue()
        )
        assert data == (
            struct.pack('<HI', 0, 1) + b"\x07"
            + struct.pack('<HI', 1, 2) + b"\x02\x01"
            + struct.pack('<HI', 2, 8) + struct.pack('<Q', 2 ** 40)
        )

    def test_string_is_utf8(self):
        data = TLVWriter().write_string(0, "域名").getvalue()
        assert data[6:] == "域名".encode("utf-8")

    def test_tags_must_ascend(self):
        writer = TLVWriter().write_u8(2, 1)
        with pytest.raises(ValueError):
            writer.write_u8(1, 1)
        with pytest.raises(ValueError):
            writer.write_u8(2, 1)

    def test_integer_overflow_rejected(self):
        with pytest.raises(ValueError):
            TLVWriter().write_u8(0, 256)
        with pytest.raises(ValueError):
            TLVWriter().write_u64(0, -1)

    def test_deterministic(self):
        """Same values always give the same bytes."""
        first = TLVWriter().write_string(0, "x").write_bytes(1, b"\x00").getvalue()
        second = TLVWriter().write_string(0, "x").write_bytes(1, b"\x00").getvalue()
        assert first == second


class TestTLVReader:
    """Test TLV decoding and its rejection rules."""

    def test_read_fields(self):
        data = TLVWriter().write_u16(0, 1).write_string(1, "name").write_bytes(2, b"").getvalue()
        reader = TLVReader(data, "Test")
        assert reader.read_u16(0, "version") == 1
        assert reader.read_string(1, "name") == "name"
        assert reader.read_bytes(2, "extra") == b""
        reader.finish()

    def test_truncated_header(self):
        data = encode_item(0, b"abc")[:4]
        with pytest.raises(MalformedEncoding) as exc_info:
            TLVReader(data, "Test")
        assert "truncated" in str(exc_info.value)

    def test_truncated_value(self):
        data = encode_item(0, b"abcdef")[:-1]
        with pytest.raises(MalformedEncoding):
            TLVReader(data, "Test")

    def test_out_of_order_tags(self):
        data = encode_item(1, b"a") + encode_item(0, b"b")
        with pytest.raises(MalformedEncoding) as exc_info:
            TLVReader(data, "Test")
        assert "out of order" in str(exc_info.value)

    def test_duplicate_tags(self):
        data = encode_item(0, b"a") + encode_item(0, b"b")
        with pytest.raises(MalformedEncoding) as exc_info:
            TLVReader(data, "Test")
        assert "duplicate" in str(exc_info.value)

    def test_missing_field(self):
        reader = TLVReader(encode_item(0, b"\x01"), "Test")
        reader.read_u8(0, "a")
        with pytest.raises(MalformedEncoding) as exc_info:
            reader.read_bytes(1, "b")
        assert exc_info.value.field == "Test.b"

    def test_unexpected_tag(self):
        reader = TLVReader(encode_item(2, b"\x01"), "Test")
        with pytest.raises(MalformedEncoding):
            reader.read_u8(1, "a")

    def test_trailing_item_rejected(self):
        reader = TLVReader(encode_item(0, b"\x01") + encode_item(5, b""), "Test")
        reader.read_u8(0, "a")
        with pytest.raises(MalformedEncoding):
            reader.finish()

    def test_wrong_integer_width(self):
        reader = TLVReader(encode_item(0, b"\x01\x00\x00"), "Test")
        with pytest.raises(MalformedEncoding):
            reader.read_u16(0, "version")

    def test_invalid_utf8(self):
        reader = TLVReader(encode_item(0, b"\xff\xfe"), "Test")
        with pytest.raises(MalformedEncoding):
            reader.read_string(0, "name")

    def test_optional_field(self):
        reader = TLVReader(encode_item(0, b"\x01"), "Test")
        reader.read_u8(0, "a")
        assert reader.read_optional(7, "proof") is None
        reader.finish()
