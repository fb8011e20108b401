"""Sector encryption routines."""

from __future__ import annotations

from fvecrypt.aes_xts import aes_crypt_xts
from fvecrypt.contexts import AesContexts
from fvecrypt.diffuser import diffuser_a_encrypt, diffuser_b_encrypt
from fvecrypt.errors import InvalidArgumentError

_MAX_ADDRESS = 1 << 63
_SECTOR_KEY_LENGTH = 32


def _check_ctx(ctx) -> None:
    if ctx is None:
        raise InvalidArgumentError(message="ctx is missing")


def _sector_bytes(sector, sector_size) -> bytes:
    if sector is None:
        raise InvalidArgumentError(message="sector is missing")
    if sector_size <= 0:
        raise InvalidArgumentError(message="sector size must be positive")
    data = bytes(sector)
    if len(data) < sector_size:
        raise InvalidArgumentError(
            message=f"sector holds {len(data)} bytes, expected {sector_size}"
        )
    return data[:sector_size]


def _address_block(value: int) -> bytes:
    if not 0 <= value < _MAX_ADDRESS:
        raise InvalidArgumentError(message=f"invalid sector address {value}")
    return value.to_bytes(8, "little") + bytes(8)


def _apply_sector_key(data: bytes, ctx: AesContexts, sector_address: int) -> bytes:
    block = _address_block(sector_address)
    sector_key = ctx.tweak_ecb(block + block[:15] + b"\x80")
    repeated = sector_key * (len(data) // _SECTOR_KEY_LENGTH + 1)
    return bytes(x ^ y for x, y in zip(data, repeated))


def encrypt_cbc_without_diffuser(ctx, sector_size, sector, sector_address) -> bytes:
    """Encrypt a sector with plain AES-CBC."""
    _check_ctx(ctx)
    data = _sector_bytes(sector, sector_size)
    iv = ctx.fvek_ecb(_address_block(sector_address), True)
    return ctx.fvek_cbc(iv, data, True)


def encrypt_cbc_with_diffuser(ctx, sector_size, sector, sector_address) -> bytes:
    """Encrypt a sector with the Elephant diffuser followed by AES-CBC."""
    _check_ctx(ctx)
    data = _sector_bytes(sector, sector_size)
    mixed = _apply_sector_key(data, ctx, sector_address)
    mixed = diffuser_a_encrypt(mixed)
    mixed = diffuser_b_encrypt(mixed)
    return encrypt_cbc_without_diffuser(ctx, sector_size, mixed, sector_address)


def encrypt_xts(ctx, sector_size, sector, sector_address) -> bytes:
    """Encrypt a sector with AES-XTS."""
    _check_ctx(ctx)
    data = _sector_bytes(sector, sector_size)
    if sector_address < 0:
        raise InvalidArgumentError(message=f"invalid sector address {sector_address}")
    iv = _address_block(sector_address // sector_size)
    return aes_crypt_xts(ctx.fvek_key, ctx.tweak_key, True, iv, data)