import pytest
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from hypothesis import given, settings
from hypothesis import strategies as st

from fvecrypt.contexts import AesContexts
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
from fvecrypt.errors import InvalidArgumentError

DATA_KEY = bytes(range(32))
TWEAK_KEY = bytes(range(100, 132))
CTX = AesContexts(DATA_KEY, TWEAK_KEY)
SECTOR = bytes((i * 5 + 1) & 0xFF for i in range(512))

PAIRS = [
    (encrypt_cbc_without_diffuser, decrypt_cbc_without_diffuser),
    (encrypt_cbc_with_diffuser, decrypt_cbc_with_diffuser),
    (encrypt_xts, decrypt_xts),
]


@pytest.mark.parametrize("address", [0, 512, 0x7E00])
def test_encrypt_xts_matches_standard_xts(address):
    tweak = (address // 512).to_bytes(16, "little")
    enc = Cipher(algorithms.AES(DATA_KEY + TWEAK_KEY), modes.XTS(tweak)).encryptor()
    expected = enc.update(SECTOR) + enc.finalize()
    assert encrypt_xts(CTX, 512, SECTOR, address) == expected


@pytest.mark.parametrize("encrypt, decrypt", PAIRS)
@settings(max_examples=15, deadline=None)
@given(
    sector=st.binary(min_size=512, max_size=512),
    block=st.integers(min_value=0, max_value=1 << 30),
)
def test_round_trip(encrypt, decrypt, sector, block):
    address = block * 512
    ciphertext = encrypt(CTX, 512, sector, address)
    assert len(ciphertext) == 512
    assert decrypt(CTX, 512, ciphertext, address) == sector


@pytest.mark.parametrize("encrypt, _decrypt", PAIRS)
def test_address_changes_ciphertext(encrypt, _decrypt):
    assert encrypt(CTX, 512, SECTOR, 0) != encrypt(CTX, 512, SECTOR, 512)


@pytest.mark.parametrize("encrypt, _decrypt", PAIRS)
def test_longer_input_is_cut_to_sector_size(encrypt, _decrypt):
    padded = SECTOR + b"\xff" * 32
    assert encrypt(CTX, 512, padded, 1024) == encrypt(CTX, 512, SECTOR, 1024)


def test_cbc_without_diffuser_keeps_changes_local():
    altered = SECTOR[:-1] + bytes([SECTOR[-1] ^ 0xFF])
    first = encrypt_cbc_without_diffuser(CTX, 512, SECTOR, 0)
    second = encrypt_cbc_without_diffuser(CTX, 512, altered, 0)
    assert first[:-16] == second[:-16]
    assert first[-16:] != second[-16:]


def test_diffuser_spreads_changes_over_the_sector():
    altered = SECTOR[:-1] + bytes([SECTOR[-1] ^ 0xFF])
    first = encrypt_cbc_with_diffuser(CTX, 512, SECTOR, 0)
    second = encrypt_cbc_with_diffuser(CTX, 512, altered, 0)
    assert first[:16] != second[:16]


def test_encrypt_errors():
    with pytest.raises(InvalidArgumentError):
        encrypt_cbc_without_diffuser(None, 512, SECTOR, 0)
    with pytest.raises(InvalidArgumentError):
        encrypt_cbc_without_diffuser(CTX, 512, SECTOR, -512)
    with pytest.raises(InvalidArgumentError):
        encrypt_xts(CTX, 512, SECTOR[:100], 0)
    with pytest.raises(InvalidArgumentError):
        encrypt_cbc_with_diffuser(AesContexts(DATA_KEY), 512, SECTOR, 0)