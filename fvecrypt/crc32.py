"""CRC-32 checksum (polynomial 0xEDB88320, reflected) used in volume metadata."""

from __future__ import annotations

import zlib


def crc32(data) -> int:
    """Return the 32-bit CRC of a bytes-like object."""
    return zlib.crc32(bytes(data)) & 0xFFFFFFFF