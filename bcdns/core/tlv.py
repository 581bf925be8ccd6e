"""
Tag-length-value encoding used for every canonical certificate structure.

Format Structure:
- Item header (6 bytes): tag (uint16 LE), value length (uint32 LE)
- Value (length bytes)

Items of one structure are written in strictly ascending tag order and each
tag appears at most once, so a given set of field values has exactly one
encoding. Readers enforce the same rules and reject anything else.
"""

import io
import struct
from typing import List, Optional, Tuple

from ..exceptions import MalformedEncoding

ITEM_HEADER = struct.Struct('<HI')
ITEM_HEADER_SIZE = ITEM_HEADER.size

MAX_TAG = 0xFFFF
MAX_VALUE_LENGTH = 0xFFFFFFFF

_U8 = struct.Struct('<B')
_U16 = struct.Struct('<H')
_U64 = struct.Struct('<Q')


class TLVWriter:
    """Builds a TLV byte sequence. Tags must be written in ascending order."""

    def __init__(self):
        self._buffer = io.BytesIO()
        self._last_tag = -1

    def write_bytes(self, tag: int, value: bytes) -> "TLVWriter":
        if not 0 <= tag <= MAX_TAG:
            raise ValueError(f"TLV tag out of range: {tag}")
        if tag <= self._last_tag:
            raise ValueError(f"TLV tag {tag} written after tag {self._last_tag}")
        value = bytes(value)
        if len(value) > MAX_VALUE_LENGTH:
            raise ValueError(f"TLV value for tag {tag} too long: {len(value)} bytes")

        self._buffer.write(ITEM_HEADER.pack(tag, len(value)))
        self._buffer.write(value)
        self._last_tag = tag
        return self

    def write_u8(self, tag: int, value: int) -> "TLVWriter":
        return self.write_bytes(tag, _pack_int(_U8, value, tag))

    def write_u16(self, tag: int, value: int) -> "TLVWriter":
        return self.write_bytes(tag, _pack_int(_U16, value, tag))

    def write_u64(self, tag: int, value: int) -> "TLVWriter":
        return self.write_bytes(tag, _pack_int(_U64, value, tag))

    def write_string(self, tag: int, value: str) -> "TLVWriter":
        return self.write_bytes(tag, value.encode('utf-8'))

    def getvalue(self) -> bytes:
        return self._buffer.getvalue()


def _pack_int(fmt: struct.Struct, value: int, tag: int) -> bytes:
    try:
        return fmt.pack(value)
    except struct.error as e:
        raise ValueError(f"Integer for tag {tag} does not fit {fmt.size} bytes: {value!r} ({e})")


def encode_item(tag: int, value: bytes) -> bytes:
    """Encode a single TLV item."""
    return TLVWriter().write_bytes(tag, value).getvalue()


class TLVReader:
    """
    Reads fields out of a TLV byte sequence in ascending tag order.

    The whole buffer is split into items on construction, so truncation,
    ordering and duplicate-tag errors surface before any field is read.
    Call finish() once every expected field is consumed to reject
    unknown trailing items.
    """

    def __init__(self, data: bytes, context: str):
        self.context = context
        self._items = self._split(bytes(data), context)
        self._position = 0

    @staticmethod
    def _split(data: bytes, context: str) -> List[Tuple[int, bytes, int]]:
        items = []
        offset = 0
        last_tag = -1

        while offset < len(data):
            if len(data) - offset < ITEM_HEADER_SIZE:
                raise MalformedEncoding(context, "truncated item header", offset)

            tag, length = ITEM_HEADER.unpack_from(data, offset)
            if tag <= last_tag:
                reason = "duplicate tag" if tag == last_tag else "tags out of order"
                raise MalformedEncoding(context, f"{reason} ({tag} after {last_tag})", offset)

            start = offset + ITEM_HEADER_SIZE
            end = start + length
            if end > len(data):
                raise MalformedEncoding(
                    context,
                    f"value for tag {tag} needs {length} bytes, {len(data) - start} available",
                    offset,
                )

            items.append((tag, data[start:end], offset))
            last_tag = tag
            offset = end

        return items

    def peek_tag(self) -> Optional[int]:
        if self._position >= len(self._items):
            return None
        return self._items[self._position][0]

    def read_bytes(self, tag: int, field: str) -> bytes:
        if self._position >= len(self._items):
            raise MalformedEncoding(f"{self.context}.{field}", f"missing tag {tag}")

        item_tag, value, offset = self._items[self._position]
        if item_tag != tag:
            raise MalformedEncoding(
                f"{self.context}.{field}", f"expected tag {tag}, found tag {item_tag}", offset
            )

        self._position += 1
        return value

    def read_optional(self, tag: int, field: str) -> Optional[bytes]:
        if self.peek_tag() != tag:
            return None
        return self.read_bytes(tag, field)

    def read_u8(self, tag: int, field: str) -> int:
        return self._read_int(_U8, tag, field)

    def read_u16(self, tag: int, field: str) -> int:
        return self._read_int(_U16, tag, field)

    def read_u64(self, tag: int, field: str) -> int:
        return self._read_int(_U64, tag, field)

    def read_string(self, tag: int, field: str) -> str:
        value = self.read_bytes(tag, field)
        try:
            return value.decode('utf-8')
        except UnicodeDecodeError as e:
            raise MalformedEncoding(f"{self.context}.{field}", f"invalid UTF-8: {e}")

    def _read_int(self, fmt: struct.Struct, tag: int, field: str) -> int:
        value = self.read_bytes(tag, field)
        if len(value) != fmt.size:
            raise MalformedEncoding(
                f"{self.context}.{field}", f"expected {fmt.size} bytes, got {len(value)}"
            )
        return fmt.unpack(value)[0]

    def finish(self) -> None:
        if self._position < len(self._items):
            tag, _, offset = self._items[self._position]
            raise MalformedEncoding(self.context, f"unexpected tag {tag}", offset)


__all__ = [
    "TLVWriter",
    "TLVReader",
    "encode_item",
    "ITEM_HEADER_SIZE",
]
