from __future__ import annotations

import zlib
from typing import List


def split_packets(data: bytes, size: int) -> List[bytes]:
    """Split data into ordered chunks of at most `size` bytes."""
    if size <= 0:
        raise ValueError("packet size must be > 0")
    data = bytes(data)
    return [data[i : i + size] for i in range(0, len(data), size)]


def bytes_to_int(data: bytes) -> int:
    # Secure DFU encodes integers little-endian
    return int.from_bytes(bytes(data), "little")


def crc32(data: bytes, value: int = 0) -> int:
    """Running IEEE CRC32, continuing from `value`."""
    return zlib.crc32(data, value) & 0xFFFFFFFF
