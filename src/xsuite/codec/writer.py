"""
Binary writer for the nested encoding.

Nested values are written big-endian: fixed-width integers at their full
width, variable-length payloads (big integers, strings, buffers, lists)
behind a 4-byte length prefix.
"""

import struct
from typing import List


class BinaryWriter:
    """Append-only big-endian byte buffer."""

    def __init__(self):
        self._bb: List[int] = []

    def u8(self, v: int) -> None:
        self._bb.append(v & 0xFF)

    def u32be(self, v: int) -> None:
        """Write unsigned 32-bit integer in big-endian format."""
        self._bb.extend(struct.pack('>I', v & 0xFFFFFFFF))

    def uint(self, v: int, size: int) -> None:
        """
        Write an unsigned integer at a fixed byte width.

        Args:
            v: Value to write
            size: Width in bytes (1, 2, 4 or 8)
        """
        if v < 0 or v >= 1 << (8 * size):
            raise ValueError(f"{v} does not fit in {size} bytes")
        self._bb.extend(v.to_bytes(size, "big"))

    def bytes(self, v: bytes) -> None:
        """Write raw bytes without length prefix."""
        self._bb.extend(v)

    def len_prefixed_bytes(self, v: bytes) -> None:
        """Write bytes behind a 4-byte big-endian length prefix."""
        self.u32be(len(v))
        self.bytes(v)

    def to_bytes(self) -> bytes:
        return bytes(self._bb)


def top_uint_bytes(v: int) -> bytes:
    """Minimal big-endian representation; zero encodes to no bytes."""
    if v < 0:
        raise ValueError(f"Unsigned value cannot be negative: {v}")
    return v.to_bytes((v.bit_length() + 7) // 8, "big")


def top_int_bytes(v: int) -> bytes:
    """Minimal two's complement big-endian representation; zero encodes to no bytes."""
    if v == 0:
        return b""
    length = (v.bit_length() + 8) // 8
    data = v.to_bytes(length, "big", signed=True)
    # Drop redundant sign bytes
    while len(data) > 1 and (
        (data[0] == 0x00 and data[1] < 0x80) or (data[0] == 0xFF and data[1] >= 0x80)
    ):
        data = data[1:]
    return data
