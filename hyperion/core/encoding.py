"""Compact binary encoding used for hashing and storage.

Unsigned integers use a variable-length little-endian form: values below 251
take one byte; larger values are a marker byte (251, 252, 253, 254) followed
by 2, 4, 8 or 16 little-endian bytes. Byte strings and lists carry a
length prefix in the same integer form. Fixed-size arrays are written raw.
"""

from __future__ import annotations

from collections.abc import Iterable

from hyperion.core.errors import HyperionError

_SINGLE_BYTE_LIMIT = 251
_MARKER_WIDTHS = {251: 2, 252: 4, 253: 8, 254: 16}


class DecodeError(HyperionError):
    """The input is not a valid encoding."""


def encode_uint(value: int) -> bytes:
    """Encode a non-negative integer of up to 128 bits."""
    if value < 0:
        raise ValueError(f"cannot encode negative integer {value}")
    if value < _SINGLE_BYTE_LIMIT:
        return bytes([value])
    for marker, width in _MARKER_WIDTHS.items():
        if value < 1 << (8 * width):
            return bytes([marker]) + value.to_bytes(width, "little")
    raise ValueError(f"integer {value} does not fit in 128 bits")


def encode_bytes(data: bytes) -> bytes:
    """Encode a byte string with its length prefix."""
    data = bytes(data)
    return encode_uint(len(data)) + data


def encode_bytes_list(items: Iterable[bytes]) -> bytes:
    """Encode a list of byte strings with a count prefix."""
    items = list(items)
    return encode_uint(len(items)) + b"".join(encode_bytes(item) for item in items)


class Reader:
    """Sequential decoder over a byte string. Trailing bytes are ignored."""

    def __init__(self, data: bytes) -> None:
        self._data = bytes(data)
        self._pos = 0

    def read_fixed(self, size: int) -> bytes:
        """Read exactly ``size`` raw bytes."""
        available = len(self._data) - self._pos
        if size < 0 or size > available:
            raise DecodeError(
                f"unexpected end of input: needed {size} bytes at offset "
                f"{self._pos}, {available} available"
            )
        chunk = self._data[self._pos : self._pos + size]
        self._pos += size
        return chunk

    def read_uint(self, max_bits: int) -> int:
        """Read an integer whose type is at most ``max_bits`` wide."""
        first = self.read_fixed(1)[0]
        if first < _SINGLE_BYTE_LIMIT:
            return first
        width = _MARKER_WIDTHS.get(first)
        if width is None:
            raise DecodeError(f"invalid integer marker byte {first}")
        if width * 8 > max_bits:
            raise DecodeError(
                f"integer of {width * 8} bits does not fit a {max_bits}-bit field"
            )
        return int.from_bytes(self.read_fixed(width), "little")

    def read_bytes(self) -> bytes:
        """Read a length-prefixed byte string."""
        return self.read_fixed(self.read_uint(64))

    def read_bytes_list(self) -> list[bytes]:
        """Read a count-prefixed list of byte strings."""
        count = self.read_uint(64)
        return [self.read_bytes() for _ in range(count)]