"""Elephant diffusers A and B applied to sectors encrypted with AES-CBC."""

from __future__ import annotations

import struct

_MASK = 0xFFFFFFFF

_A_CYCLES = 5
_A_ROTATIONS = (9, 0, 13, 0)

_B_CYCLES = 3
_B_ROTATIONS = (0, 10, 0, 25)


def _rotl(value: int, shift: int) -> int:
    return ((value << shift) | (value >> (32 - shift))) & _MASK


def _split(sector) -> tuple[list[int], bytes]:
    data = bytes(sector)
    count = len(data) // 4
    words = list(struct.unpack_from(f"<{count}I", data))
    return words, data[4 * count:]


def _join(words: list[int], tail: bytes) -> bytes:
    return struct.pack(f"<{len(words)}I", *words) + tail


def diffuser_a_decrypt(sector) -> bytes:
    """Undo diffuser A on a sector and return the result."""
    d, tail = _split(sector)
    n = len(d)
    for _ in range(_A_CYCLES):
        for i in range(n):
            mix = d[(i - 2) % n] ^ _rotl(d[(i - 5) % n], _A_ROTATIONS[i % 4])
            d[i] = (d[i] + mix) & _MASK
    return _join(d, tail)


def diffuser_b_decrypt(sector) -> bytes:
    """Undo diffuser B on a sector and return the result."""
    d, tail = _split(sector)
    n = len(d)
    for _ in range(_B_CYCLES):
        for i in range(n):
            mix = d[(i + 2) % n] ^ _rotl(d[(i + 5) % n], _B_ROTATIONS[i % 4])
            d[i] = (d[i] + mix) & _MASK
    return _join(d, tail)


def diffuser_a_encrypt(sector) -> bytes:
    """Apply diffuser A to a sector and return the result."""
    d, tail = _split(sector)
    n = len(d)
    for _ in range(_A_CYCLES):
        for i in reversed(range(n)):
            mix = d[(i - 2) % n] ^ _rotl(d[(i - 5) % n], _A_ROTATIONS[i % 4])
            d[i] = (d[i] - mix) & _MASK
    return _join(d, tail)


def diffuser_b_encrypt(sector) -> bytes:
    """Apply diffuser B to a sector and return the result."""
    d, tail = _split(sector)
    n = len(d)
    for _ in range(_B_CYCLES):
        for i in reversed(range(n)):
            mix = d[(i + 2) % n] ^ _rotl(d[(i + 5) % n], _B_ROTATIONS[i % 4])
            d[i] = (d[i] - mix) & _MASK
    return _join(d, tail)