"""AES-XEX and AES-XTS (with ciphertext stealing) buffer encryption."""

from __future__ import annotations

from itertools import islice
from typing import Iterator

from fvecrypt.contexts import BLOCK_SIZE, AesContexts
from fvecrypt.errors import InvalidArgumentError

_MASK128 = (1 << 128) - 1
_REDUCTION = 0x87


def gf128_mul_x(tweak) -> bytes:
    """Multiply a little-endian 128-bit tweak by x in GF(2^128)."""
    tweak = bytes(tweak)
    if len(tweak) != BLOCK_SIZE:
        raise InvalidArgumentError(message=f"tweak must be {BLOCK_SIZE} bytes")
    value = int.from_bytes(tweak, "little")
    carry = value >> 127
    value = ((value << 1) & _MASK128) ^ (_REDUCTION if carry else 0)
    return value.to_bytes(BLOCK_SIZE, "little")


def _xor(a: bytes, b: bytes) -> bytes:
    return (int.from_bytes(a, "little") ^ int.from_bytes(b, "little")).to_bytes(
        len(a), "little"
    )


def _blocks(data: bytes) -> list[bytes]:
    return [data[offset:offset + BLOCK_SIZE] for offset in range(0, len(data), BLOCK_SIZE)]


def _tweak_sequence(first: bytes) -> Iterator[bytes]:
    tweak = first
    while True:
        yield tweak
        tweak = gf128_mul_x(tweak)


def _xex(ctx: AesContexts, encrypt, tweaks: list[bytes], blocks: list[bytes]) -> bytes:
    if not blocks:
        return b""
    whitened = b"".join(map(_xor, blocks, tweaks))
    crypted = ctx.fvek_ecb(whitened, encrypt)
    return b"".join(map(_xor, _blocks(crypted), tweaks))


def _prepare(crypt_key, tweak_key, iv, data) -> tuple[AesContexts, bytes, bytes]:
    iv = bytes(iv)
    if len(iv) != BLOCK_SIZE:
        raise InvalidArgumentError(message=f"IV must be {BLOCK_SIZE} bytes")
    ctx = AesContexts(crypt_key, tweak_key)
    return ctx, ctx.tweak_ecb(iv), bytes(data)


def aes_crypt_xex(crypt_key, tweak_key, encrypt, iv, data) -> bytes:
    """Encrypt or decrypt whole blocks in AES-XEX mode."""
    ctx, first, data = _prepare(crypt_key, tweak_key, iv, data)
    if not data or len(data) % BLOCK_SIZE:
        raise InvalidArgumentError(
            message=f"XEX input length {len(data)} is not a positive multiple of {BLOCK_SIZE}"
        )
    blocks = _blocks(data)
    tweaks = list(islice(_tweak_sequence(first), len(blocks)))
    return _xex(ctx, encrypt, tweaks, blocks)


def aes_crypt_xts(crypt_key, tweak_key, encrypt, iv, data) -> bytes:
    """Encrypt or decrypt data in AES-XTS mode, stealing ciphertext for a partial tail."""
    ctx, first, data = _prepare(crypt_key, tweak_key, iv, data)
    if len(data) < BLOCK_SIZE:
        raise InvalidArgumentError(
            message=f"XTS input must hold at least one {BLOCK_SIZE}-byte block"
        )
    full, remaining = divmod(len(data), BLOCK_SIZE)
    blocks = _blocks(data[:full * BLOCK_SIZE])
    tweaks = list(islice(_tweak_sequence(first), full + 1))

    if not remaining:
        return _xex(ctx, encrypt, tweaks[:full], blocks)

    partial = data[full * BLOCK_SIZE:]
    if encrypt:
        out = _xex(ctx, True, tweaks[:full], blocks)
        head, stolen = out[:-BLOCK_SIZE], out[-BLOCK_SIZE:]
        merged = partial + stolen[remaining:]
        last = _xex(ctx, True, [tweaks[full]], [merged])
        return head + last + stolen[:remaining]

    head = _xex(ctx, False, tweaks[:full - 1], blocks[:full - 1])
    stolen = _xex(ctx, False, [tweaks[full]], [blocks[-1]])
    merged = partial + stolen[remaining:]
    last = _xex(ctx, False, [tweaks[full - 1]], [merged])
    return head + last + stolen[:remaining]