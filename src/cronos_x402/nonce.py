"""Replay-prevention nonces for EIP-3009 authorizations."""

from __future__ import annotations

import secrets
from typing import Callable, Optional

from .errors import NonceGenerationError

NONCE_SIZE = 32

RandomSource = Callable[[int], bytes]


def generate_nonce(source: Optional[RandomSource] = None) -> bytes:
    """Return 32 fresh random bytes.

    ``source`` is only meant for tests; production callers use the default,
    which draws from the operating system CSPRNG via :mod:`secrets`.
    """
    draw = source or secrets.token_bytes
    nonce = draw(NONCE_SIZE)
    if not isinstance(nonce, (bytes, bytearray)) or len(nonce) != NONCE_SIZE:
        raise NonceGenerationError(
            f"random source returned {type(nonce).__name__} of length "
            f"{len(nonce) if hasattr(nonce, '__len__') else 'n/a'}, expected {NONCE_SIZE} bytes"
        )
    return bytes(nonce)


def nonce_to_hex(nonce: bytes) -> str:
    if len(nonce) != NONCE_SIZE:
        raise NonceGenerationError(f"nonce must be {NONCE_SIZE} bytes, got {len(nonce)}")
    return "0x" + nonce.hex()


def generate_nonce_hex(source: Optional[RandomSource] = None) -> str:
    return nonce_to_hex(generate_nonce(source))
