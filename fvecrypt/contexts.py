"""Cipher identifiers and the AES key contexts used for sector encryption."""

from __future__ import annotations

from enum import IntEnum

from cryptography.hazmat.primitives.ciphers import Cipher as _AesCipher
from cryptography.hazmat.primitives.ciphers import algorithms, modes

from fvecrypt.errors import InvalidArgumentError

BLOCK_SIZE = 16
_KEY_SIZES = (16, 32)


class Cipher(IntEnum):
    """Cipher identifiers found in volume metadata."""

    STRETCH_KEY = 0x1000
    AES_CCM_256_0 = 0x2000
    AES_CCM_256_1 = 0x2001
    EXTERN_KEY = 0x2002
    VMK = 0x2003
    AES_CCM_256_2 = 0x2004
    HASH_256 = 0x2005

    AES_128_DIFFUSER = 0x8000
    AES_256_DIFFUSER = 0x8001
    AES_128_NO_DIFFUSER = 0x8002
    AES_256_NO_DIFFUSER = 0x8003
    AES_XTS_128 = 0x8004
    AES_XTS_256 = 0x8005

    LOWEST_SUPPORTED = 0x8000
    HIGHEST_SUPPORTED = 0x8005

    @property
    def uses_diffuser(self) -> bool:
        """True for the AES-CBC ciphers combined with the Elephant diffuser."""
        return self in (Cipher.AES_128_DIFFUSER, Cipher.AES_256_DIFFUSER)

    @property
    def is_xts(self) -> bool:
        """True for the AES-XTS ciphers."""
        return self in (Cipher.AES_XTS_128, Cipher.AES_XTS_256)


def _check_key(key, name: str) -> bytes:
    if key is None:
        raise InvalidArgumentError(message=f"{name} is missing")
    key = bytes(key)
    if len(key) not in _KEY_SIZES:
        raise InvalidArgumentError(
            message=f"{name} must be 128 or 256 bits, got {len(key) * 8}"
        )
    return key


def _check_blocks(data, what: str) -> bytes:
    data = bytes(data)
    if len(data) % BLOCK_SIZE:
        raise InvalidArgumentError(
            message=f"{what} length {len(data)} is not a multiple of {BLOCK_SIZE}"
        )
    return data


def _check_iv(iv) -> bytes:
    iv = bytes(iv)
    if len(iv) != BLOCK_SIZE:
        raise InvalidArgumentError(message=f"IV must be {BLOCK_SIZE} bytes")
    return iv


class AesContexts:
    """AES keys for the full-volume encryption key and the tweak key."""

    def __init__(self, fvek_key, tweak_key=None):
        self.fvek_key = _check_key(fvek_key, "FVEK key")
        self.tweak_key = None if tweak_key is None else _check_key(tweak_key, "tweak key")
        self._fvek_ecb = _AesCipher(algorithms.AES(self.fvek_key), modes.ECB())
        self._tweak_ecb = (
            None
            if self.tweak_key is None
            else _AesCipher(algorithms.AES(self.tweak_key), modes.ECB())
        )

    def __repr__(self) -> str:
        tweak_bits = 0 if self.tweak_key is None else len(self.tweak_key) * 8
        return f"AesContexts(fvek_bits={len(self.fvek_key) * 8}, tweak_bits={tweak_bits})"

    def fvek_ecb(self, block, encrypt) -> bytes:
        """Encrypt or decrypt whole blocks in ECB mode with the FVEK key."""
        block = _check_blocks(block, "ECB input")
        op = self._fvek_ecb.encryptor() if encrypt else self._fvek_ecb.decryptor()
        return op.update(block) + op.finalize()

    def tweak_ecb(self, block) -> bytes:
        """Encrypt whole blocks in ECB mode with the tweak key."""
        if self._tweak_ecb is None:
            raise InvalidArgumentError(message="no tweak key is set")
        block = _check_blocks(block, "ECB input")
        op = self._tweak_ecb.encryptor()
        return op.update(block) + op.finalize()

    def fvek_cbc(self, iv, data, encrypt) -> bytes:
        """Encrypt or decrypt data in CBC mode with the FVEK key."""
        iv = _check_iv(iv)
        data = _check_blocks(data, "CBC input")
        cipher = _AesCipher(algorithms.AES(self.fvek_key), modes.CBC(iv))
        op = cipher.encryptor() if encrypt else cipher.decryptor()
        return op.update(data) + op.finalize()