import pytest

from cronos_x402.errors import NonceGenerationError
from cronos_x402.nonce import generate_nonce, generate_nonce_hex, nonce_to_hex


def test_nonce_is_32_bytes():
    assert len(generate_nonce()) == 32


def test_nonces_do_not_repeat():
    seen = {generate_nonce() for _ in range(10_000)}
    assert len(seen) == 10_000


def test_injected_source_is_used():
    nonce = generate_nonce(lambda n: b"\x07" * n)
    assert nonce == b"\x07" * 32


@pytest.mark.parametrize("bad", [b"\x00" * 31, b"\x00" * 33, "0" * 32, None])
def test_bad_source_fails_loudly(bad):
    with pytest.raises(NonceGenerationError):
        generate_nonce(lambda n: bad)


def test_hex_form():
    encoded = generate_nonce_hex(lambda n: bytes(range(n)))
    assert encoded == "0x" + bytes(range(32)).hex()
    assert len(encoded) == 66


def test_nonce_to_hex_rejects_wrong_length():
    with pytest.raises(NonceGenerationError):
        nonce_to_hex(b"\x01" * 16)
