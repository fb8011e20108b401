"""Sector-level encryption object tying a disk cipher to its key material."""

from __future__ import annotations

from typing import Callable, Optional

from fvecrypt.contexts import AesContexts, Cipher
from fvecrypt.decrypt import (
    decrypt_cbc_with_diffuser,
    decrypt_cbc_without_diffuser,
    decrypt_xts,
)
from fvecrypt.encrypt import (
    encrypt_cbc_with_diffuser,
    encrypt_cbc_without_diffuser,
    encrypt_xts,
)
from fvecrypt.errors import (
    DislockerError,
    ErrorCode,
    InvalidArgumentError,
    UnsupportedAlgorithmError,
)

_SectorFn = Callable[[AesContexts, int, bytes, int], bytes]

_MAX_SECTOR_SIZE = 0xFFFF

# algorithm -> (key bytes, offset of the tweak key or None)
_KEY_LAYOUT = {
    Cipher.AES_128_DIFFUSER: (16, 0x20),
    Cipher.AES_128_NO_DIFFUSER: (16, None),
    Cipher.AES_256_DIFFUSER: (32, 0x20),
    Cipher.AES_256_NO_DIFFUSER: (32, None),
    Cipher.AES_XTS_128: (16, 0x10),
    Cipher.AES_XTS_256: (32, 0x20),
}

_DIFFUSER_CIPHERS = (Cipher.AES_128_DIFFUSER, Cipher.AES_256_DIFFUSER)
_XTS_CIPHERS = (Cipher.AES_XTS_128, Cipher.AES_XTS_256)


def _supported(algorithm) -> Cipher:
    try:
        cipher = Cipher(int(algorithm))
    except (TypeError, ValueError):
        raise UnsupportedAlgorithmError(int(algorithm)) from None
    if cipher not in _KEY_LAYOUT:
        raise UnsupportedAlgorithmError(int(algorithm))
    return cipher


class SectorCrypt:
    """Encrypts and decrypts volume sectors with the cipher the disk uses."""

    def __init__(self, sector_size, disk_cipher):
        sector_size = int(sector_size)
        if not 0 < sector_size <= _MAX_SECTOR_SIZE:
            raise InvalidArgumentError(message=f"invalid sector size {sector_size}")
        self.sector_size = sector_size
        self.disk_cipher = int(disk_cipher)
        self.uses_diffuser = self.disk_cipher in _DIFFUSER_CIPHERS

        self._encrypt_fn: _SectorFn
        self._decrypt_fn: _SectorFn
        if self.uses_diffuser:
            self._encrypt_fn = encrypt_cbc_with_diffuser
            self._decrypt_fn = decrypt_cbc_with_diffuser
        elif self.disk_cipher in _XTS_CIPHERS:
            self._encrypt_fn = encrypt_xts
            self._decrypt_fn = decrypt_xts
        else:
            self._encrypt_fn = encrypt_cbc_without_diffuser
            self._decrypt_fn = decrypt_cbc_without_diffuser

        self.ctx: Optional[AesContexts] = None

    def __repr__(self) -> str:
        return (
            f"SectorCrypt(sector_size={self.sector_size}, "
            f"disk_cipher={self.disk_cipher:#x}, keyed={self.ctx is not None})"
        )

    def set_fvekey(self, algorithm, fvekey) -> None:
        """Load the full-volume encryption key laid out for the given algorithm."""
        if fvekey is None:
            raise InvalidArgumentError(message="fvekey is missing")
        cipher = _supported(algorithm)
        key = bytes(fvekey)
        key_len, tweak_offset = _KEY_LAYOUT[cipher]
        needed = key_len if tweak_offset is None else tweak_offset + key_len
        if len(key) < needed:
            raise InvalidArgumentError(
                message=f"fvekey holds {len(key)} bytes, {cipher.name} needs {needed}"
            )
        tweak = None if tweak_offset is None else key[tweak_offset:tweak_offset + key_len]
        self.ctx = AesContexts(key[:key_len], tweak)

    def _keyed(self) -> AesContexts:
        if self.ctx is None:
            raise DislockerError(ErrorCode.NOT_INITIALIZED, "no FVEK has been set")
        return self.ctx

    def decrypt_sector(self, sector, sector_address) -> bytes:
        """Decrypt one sector read at the given byte address."""
        if sector is None:
            raise InvalidArgumentError(message="sector is missing")
        return self._decrypt_fn(self._keyed(), self.sector_size, sector, sector_address)

    def encrypt_sector(self, sector, sector_address) -> bytes:
        """Encrypt one sector to be written at the given byte address."""
        if sector is None:
            raise InvalidArgumentError(message="sector is missing")
        return self._encrypt_fn(self._keyed(), self.sector_size, sector, sector_address)