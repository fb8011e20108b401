# fvecrypt

Cryptographic building blocks for reading and writing BitLocker-style
encrypted volumes:

- AES-CBC sector encryption, with or without the Elephant diffuser
- AES-XTS sector encryption, including ciphertext stealing
- AES-CCM unwrapping of key blobs such as the VMK and FVEK, with MAC
  verification
- the CRC-32 used in volume metadata

All functions take bytes-like input and return new `bytes`; nothing is
changed in place.

## Installation

```
pip install fvecrypt
```

The tests need the `test` extra:

```
pip install "fvecrypt[test]"
pytest
```

## Encrypting and decrypting sectors

`fvecrypt.encommon.SectorCrypt(sector_size, disk_cipher)` picks the sector
scheme from the disk cipher: the two diffuser ciphers use AES-CBC with the
Elephant diffuser, the two XTS ciphers use AES-XTS, and any other value uses
plain AES-CBC. The sector size must be between 1 and 65535 bytes. The key is
loaded with `set_fvekey`, after which sectors can be processed:

```python
from fvecrypt.contexts import Cipher
from fvecrypt.encommon import SectorCrypt

crypt = SectorCrypt(512, Cipher.AES_XTS_128)
crypt.set_fvekey(Cipher.AES_XTS_128, bytes(range(32)))

plain = bytes(512)
offset = 0x10000
encrypted = crypt.encrypt_sector(plain, offset)
assert crypt.decrypt_sector(encrypted, offset) == plain
```

The address is the sector's byte offset on the volume. For AES-XTS the tweak
is the address divided by the sector size; for AES-CBC the IV is derived from
the address itself. Only the first `sector_size` bytes of the input are
processed; a shorter input raises `InvalidArgumentError`. Calling
`encrypt_sector` or `decrypt_sector` before `set_fvekey` raises
`DislockerError` with code `ErrorCode.NOT_INITIALIZED`.

How the FVEK bytes are used depends on the algorithm passed to `set_fvekey`:

| Algorithm | Key material used |
|---|---|
| `AES_128_NO_DIFFUSER` / `AES_256_NO_DIFFUSER` | first 16 / 32 bytes |
| `AES_128_DIFFUSER` / `AES_256_DIFFUSER` | data key first, tweak key of the same size at offset 0x20 |
| `AES_XTS_128` | data key 16 bytes, tweak key at offset 0x10 |
| `AES_XTS_256` | data key 32 bytes, tweak key at offset 0x20 |

Any other algorithm raises `fvecrypt.errors.UnsupportedAlgorithmError`; key
material that is too short raises `InvalidArgumentError`.

The per-scheme functions can also be called directly with an
`fvecrypt.contexts.AesContexts`:

- `fvecrypt.encrypt`: `encrypt_cbc_without_diffuser`,
  `encrypt_cbc_with_diffuser`, `encrypt_xts`
- `fvecrypt.decrypt`: `decrypt_cbc_without_diffuser`,
  `decrypt_cbc_with_diffuser`, `decrypt_xts`

each taking `(ctx, sector_size, sector, sector_address)`.

## Unwrapping keys

`decrypt_key(data, mac, nonce, key)` decrypts an AES-CCM protected blob with
a 12-byte nonce and a 16-byte MAC, checks the MAC and returns the clear bytes:

```python
from fvecrypt.decrypt import decrypt_key
from fvecrypt.errors import MacMismatchError

try:
    clear = decrypt_key(encrypted_blob, mac, nonce, wrapping_key)
except MacMismatchError:
    ...  # wrong key, or the data is corrupt
```

`aes_ccm_crypt(key, nonce, data, mac)` runs the counter-mode transform and
returns the pair `(data, mac)` transformed; `aes_ccm_tag(key, nonce, data)`
returns the 16-byte CBC-MAC tag of clear data.

## Lower-level pieces

- `fvecrypt.crc32.crc32(data)`: the CRC-32 checksum, as an unsigned int
- `fvecrypt.diffuser`: `diffuser_a_encrypt`, `diffuser_a_decrypt`,
  `diffuser_b_encrypt`, `diffuser_b_decrypt`; they work on little-endian
  32-bit words and leave any trailing bytes unchanged
- `fvecrypt.aes_xts`: `aes_crypt_xex` (input a positive multiple of 16
  bytes), `aes_crypt_xts` (input at least 16 bytes, ciphertext stealing for a
  partial tail) and `gf128_mul_x`
- `fvecrypt.contexts`: the `Cipher` identifiers (with the `uses_diffuser` and
  `is_xts` properties) and `AesContexts(fvek_key, tweak_key=None)`, with
  `fvek_ecb`, `tweak_ecb` and `fvek_cbc`
- `fvecrypt.errors`: `ErrorCode` and the exceptions `DislockerError`,
  `UnsupportedAlgorithmError`, `InvalidArgumentError` (also a `ValueError`)
  and `MacMismatchError`

## What this package does not do

It provides the cryptography only. It does not open or read volumes, parse
volume headers or metadata, look up key protectors, derive keys from
passwords, recovery passwords or key files, or mount anything. The caller
supplies the sectors, addresses and key material.