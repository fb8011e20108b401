"""Key unwrapping (AES-CCM) and sector decryption routines."""

from __future__ import annotations

import hmac

from fvecrypt.aes_xts import aes_crypt_xts
from fvecrypt.contexts import BLOCK_SIZE, AesContexts
from fvecrypt.diffuser import diffuser_a_decrypt, diffuser_b_decrypt
from fvecrypt.errors import InvalidArgumentError, MacMismatchError

AUTHENTICATOR_LENGTH = 16
NONCE_LENGTH = 0xC

_MAX_NONCE_LENGTH = 0xE
_MASK128 = (1 << 128) - 1
_MAX_ADDRESS = 1 << 63
_SECTOR_KEY_LENGTH = 32


def _require(**values) -> None:
    for name, value in values.items():
        if value is None:
            raise InvalidArgumentError(message=f"{name} is missing")


def _xor(a: bytes, b: bytes) -> bytes:
    return bytes(x ^ y for x, y in zip(a, b))


def _check_nonce(nonce) -> bytes:
    nonce = bytes(nonce)
    if len(nonce) > _MAX_NONCE_LENGTH:
        raise InvalidArgumentError(
            message=f"nonce must be at most {_MAX_NONCE_LENGTH} bytes, got {len(nonce)}"
        )
    return nonce


def aes_ccm_crypt(key, nonce, data, mac) -> tuple[bytes, bytes]:
    """Run the CCM counter mode over data and MAC; return both transformed."""
    _require(key=key, nonce=nonce, data=data, mac=mac)
    nonce = _check_nonce(nonce)
    data, mac = bytes(data), bytes(mac)
    if len(mac) > AUTHENTICATOR_LENGTH:
        raise InvalidArgumentError(
            message=f"MAC must be at most {AUTHENTICATOR_LENGTH} bytes"
        )
    ctx = AesContexts(key)

    first = (
        bytes([BLOCK_SIZE - len(nonce) - 2])
        + nonce
        + bytes(BLOCK_SIZE - 1 - len(nonce))
    )
    base = int.from_bytes(first, "big")
    nblocks = -(-len(data) // BLOCK_SIZE)
    counters = b"".join(
        ((base + index) & _MASK128).to_bytes(BLOCK_SIZE, "big")
        for index in range(nblocks + 1)
    )
    stream = ctx.fvek_ecb(counters, True)
    return _xor(data, stream[BLOCK_SIZE:]), _xor(mac, stream[:BLOCK_SIZE])


def aes_ccm_tag(key, nonce, data) -> bytes:
    """Compute the unencrypted CCM authentication tag of data."""
    _require(key=key, nonce=nonce, data=data)
    nonce = _check_nonce(nonce)
    data = bytes(data)
    ctx = AesContexts(key)

    length_field = BLOCK_SIZE - 1 - len(nonce)
    flags = (_MAX_NONCE_LENGTH - len(nonce)) | (((AUTHENTICATOR_LENGTH - 2) & 0xFE) << 2)
    size = (len(data) & 0xFFFFFFFF) & ((1 << (8 * length_field)) - 1)
    state = ctx.fvek_ecb(
        bytes([flags]) + nonce + size.to_bytes(length_field, "big"), True
    )

    for offset in range(0, len(data), BLOCK_SIZE):
        chunk = data[offset:offset + BLOCK_SIZE].ljust(BLOCK_SIZE, b"\x00")
        state = ctx.fvek_ecb(_xor(state, chunk), True)
    return state


def decrypt_key(data, mac, nonce, key) -> bytes:
    """Decrypt an AES-CCM protected key and check its MAC."""
    _require(data=data, mac=mac, nonce=nonce, key=key)
    nonce, mac = bytes(nonce), bytes(mac)
    if len(nonce) != NONCE_LENGTH:
        raise InvalidArgumentError(message=f"nonce must be {NONCE_LENGTH} bytes")
    if len(mac) != AUTHENTICATOR_LENGTH:
        raise InvalidArgumentError(message=f"MAC must be {AUTHENTICATOR_LENGTH} bytes")

    plain, expected = aes_ccm_crypt(key, nonce, data, mac)
    computed = aes_ccm_tag(key, nonce, plain)
    if not hmac.compare_digest(expected, computed):
        raise MacMismatchError(message="The MACs don't match")
    return plain


def _sector_bytes(sector, sector_size) -> bytes:
    _require(sector=sector)
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


def _sector_key(ctx: AesContexts, sector_address: int) -> bytes:
    block = _address_block(sector_address)
    return ctx.tweak_ecb(block + block[:15] + b"\x80")


def _apply_sector_key(data: bytes, sector_key: bytes) -> bytes:
    repeats = len(data) // _SECTOR_KEY_LENGTH + 1
    return _xor(data, sector_key * repeats)


def decrypt_cbc_without_diffuser(ctx, sector_size, sector, sector_address) -> bytes:
    """Decrypt a sector encrypted with plain AES-CBC."""
    _require(ctx=ctx)
    data = _sector_bytes(sector, sector_size)
    iv = ctx.fvek_ecb(_address_block(sector_address), True)
    return ctx.fvek_cbc(iv, data, False)


def decrypt_cbc_with_diffuser(ctx, sector_size, sector, sector_address) -> bytes:
    """Decrypt a sector encrypted with AES-CBC and the Elephant diffuser."""
    _require(ctx=ctx)
    data = _sector_bytes(sector, sector_size)
    sector_key = _sector_key(ctx, sector_address)
    plain = decrypt_cbc_without_diffuser(ctx, sector_size, data, sector_address)
    plain = diffuser_b_decrypt(plain)
    plain = diffuser_a_decrypt(plain)
    return _apply_sector_key(plain, sector_key)


def decrypt_xts(ctx, sector_size, sector, sector_address) -> bytes:
    """Decrypt a sector encrypted with AES-XTS."""
    _require(ctx=ctx)
    data = _sector_bytes(sector, sector_size)
    if sector_address < 0:
        raise InvalidArgumentError(message=f"invalid sector address {sector_address}")
    iv = _address_block(sector_address // sector_size)
    return aes_crypt_xts(ctx.fvek_key, ctx.tweak_key, False, iv, data)