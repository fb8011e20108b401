import pytest
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.ciphers.aead import AESCCM
from hypothesis import given, settings
from hypothesis import strategies as st

from fvecrypt.contexts import AesContexts
from fvecrypt.decrypt import (
    aes_ccm_crypt,
    aes_ccm_tag,
    decrypt_cbc_with_diffuser,
    decrypt_cbc_without_diffuser,
    decrypt_key,
    decrypt_xts,
)
from fvecrypt.encrypt import encrypt_cbc_with_diffuser, encrypt_cbc_without_diffuser
from fvecrypt.errors import ErrorCode, InvalidArgumentError, MacMismatchError

NONCE = bytes(range(0x40, 0x4C))
KEY_256 = bytes(range(32))
KEY_128 = bytes(range(16))
TWEAK = bytes(range(100, 132))
SECTOR = bytes((i * 7 + 3) & 0xFF for i in range(512))


def _ccm_reference(key, plaintext):
    out = AESCCM(key, tag_length=16).encrypt(NONCE, plaintext, None)
    return out[:-16], out[-16:]


@pytest.mark.parametrize("key", [KEY_128, KEY_256])
@pytest.mark.parametrize("length", [1, 16, 17, 44, 64])
def test_decrypt_key_accepts_standard_ccm(key, length):
    plaintext = bytes((i * 13) & 0xFF for i in range(length))
    ciphertext, tag = _ccm_reference(key, plaintext)
    assert decrypt_key(ciphertext, tag, NONCE, key) == plaintext


@pytest.mark.parametrize("length", [0, 5, 16, 48, 60])
def test_ccm_crypt_with_tag_matches_standard_ccm(length):
    plaintext = bytes((i * 31) & 0xFF for i in range(length))
    tag = aes_ccm_tag(KEY_256, NONCE, plaintext)
    assert aes_ccm_crypt(KEY_256, NONCE, plaintext, tag) == _ccm_reference(KEY_256, plaintext)


def test_decrypt_key_rejects_tampered_data():
    plaintext = bytes(range(44))
    ciphertext, tag = _ccm_reference(KEY_256, plaintext)
    tampered = bytes([ciphertext[0] ^ 1]) + ciphertext[1:]
    with pytest.raises(MacMismatchError) as info:
        decrypt_key(tampered, tag, NONCE, KEY_256)
    assert info.value.code == ErrorCode.ENCRYPTION_ERROR


def test_decrypt_key_rejects_wrong_key():
    ciphertext, tag = _ccm_reference(KEY_256, bytes(32))
    with pytest.raises(MacMismatchError):
        decrypt_key(ciphertext, tag, NONCE, bytes(32))


@settings(max_examples=30)
@given(data=st.binary(max_size=100), mac=st.binary(min_size=16, max_size=16))
def test_ccm_crypt_is_an_involution(data, mac):
    once = aes_ccm_crypt(KEY_128, NONCE, data, mac)
    assert aes_ccm_crypt(KEY_128, NONCE, once[0], once[1]) == (data, mac)


def test_ccm_rejects_long_nonce():
    with pytest.raises(InvalidArgumentError):
        aes_ccm_crypt(KEY_256, bytes(15), b"data", bytes(16))
    with pytest.raises(InvalidArgumentError):
        aes_ccm_tag(KEY_256, bytes(15), b"data")


def test_decrypt_key_argument_errors():
    with pytest.raises(InvalidArgumentError):
        decrypt_key(None, bytes(16), NONCE, KEY_256)
    with pytest.raises(InvalidArgumentError):
        decrypt_key(b"abc", bytes(16), bytes(8), KEY_256)
    with pytest.raises(InvalidArgumentError):
        decrypt_key(b"abc", bytes(8), NONCE, KEY_256)


@pytest.mark.parametrize("address", [0, 512, 0x10000])
def test_decrypt_xts_matches_standard_xts(address):
    data_key, tweak_key = bytes(range(16)), bytes(range(100, 116))
    tweak = (address // 512).to_bytes(16, "little")
    enc = Cipher(algorithms.AES(data_key + tweak_key), modes.XTS(tweak)).encryptor()
    ciphertext = enc.update(SECTOR) + enc.finalize()
    ctx = AesContexts(data_key, tweak_key)
    assert decrypt_xts(ctx, 512, ciphertext, address) == SECTOR


def test_decrypt_xts_needs_tweak_key():
    with pytest.raises(InvalidArgumentError):
        decrypt_xts(AesContexts(KEY_128), 512, SECTOR, 0)


def test_cbc_wrong_address_only_garbles_first_block():
    ctx = AesContexts(KEY_256, TWEAK)
    ciphertext = encrypt_cbc_without_diffuser(ctx, 512, SECTOR, 4096)
    wrong = decrypt_cbc_without_diffuser(ctx, 512, ciphertext, 8192)
    assert wrong[16:] == SECTOR[16:]
    assert wrong[:16] != SECTOR[:16]


def test_cbc_with_diffuser_round_trip():
    ctx = AesContexts(KEY_128, TWEAK[:16])
    ciphertext = encrypt_cbc_with_diffuser(ctx, 512, SECTOR, 1024)
    assert decrypt_cbc_with_diffuser(ctx, 512, ciphertext, 1024) == SECTOR


def test_cbc_with_diffuser_wrong_address_garbles_everything():
    ctx = AesContexts(KEY_128, TWEAK[:16])
    ciphertext = encrypt_cbc_with_diffuser(ctx, 512, SECTOR, 1024)
    wrong = decrypt_cbc_with_diffuser(ctx, 512, ciphertext, 1536)
    assert wrong[-16:] != SECTOR[-16:]


def test_short_sector_is_rejected():
    ctx = AesContexts(KEY_256, TWEAK)
    with pytest.raises(InvalidArgumentError):
        decrypt_cbc_without_diffuser(ctx, 512, SECTOR[:256], 0)