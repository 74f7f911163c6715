"""EIP-712 ``TransferWithAuthorization`` construction and signing.

The domain, type schema and message built here must match, field for field,
what the facilitator and the token contract recompute when they check the
signature. Changing a name, a type or the field order invalidates every
signature produced by this module.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, Optional, Union

from .constants import DEFAULT_VALIDITY_SECONDS, CronosNetwork, get_network_config
from .errors import (
    InvalidValidityWindowError,
    MissingAssetError,
    SignerAddressUnresolvableError,
)
from .nonce import RandomSource, generate_nonce, nonce_to_hex
from .schemas import Eip3009Payload, parse_uint256
from .signer import TypedDataSigner, TypedDataTypes

logger = logging.getLogger(__name__)

PRIMARY_TYPE = "TransferWithAuthorization"

EIP712_DOMAIN_TYPE = [
    {"name": "name", "type": "string"},
    {"name": "version", "type": "string"},
    {"name": "chainId", "type": "uint256"},
    {"name": "verifyingContract", "type": "address"},
]

TRANSFER_WITH_AUTHORIZATION_TYPES: TypedDataTypes = {
    PRIMARY_TYPE: [
        {"name": "from", "type": "address"},
        {"name": "to", "type": "address"},
        {"name": "value", "type": "uint256"},
        {"name": "validAfter", "type": "uint256"},
        {"name": "validBefore", "type": "uint256"},
        {"name": "nonce", "type": "bytes32"},
    ],
}


def build_domain(network: Union[CronosNetwork, str], chain_id: int, asset: str) -> Dict[str, Any]:
    config = get_network_config(network)
    return {
        "name": config.domain_name,
        "version": config.domain_version,
        "chainId": chain_id,
        "verifyingContract": asset,
    }


def build_message(
    from_address: str,
    to: str,
    value: int,
    valid_after: int,
    valid_before: int,
    nonce: bytes,
) -> Dict[str, Any]:
    return {
        "from": from_address,
        "to": to,
        "value": value,
        "validAfter": valid_after,
        "validBefore": valid_before,
        "nonce": nonce,
    }


def build_typed_data(
    network: Union[CronosNetwork, str],
    chain_id: int,
    asset: str,
    message: Dict[str, Any],
) -> Dict[str, Any]:
    """Full EIP-712 document (``types``, ``primaryType``, ``domain``, ``message``)."""
    return {
        "types": {"EIP712Domain": EIP712_DOMAIN_TYPE, **TRANSFER_WITH_AUTHORIZATION_TYPES},
        "primaryType": PRIMARY_TYPE,
        "domain": build_domain(network, chain_id, asset),
        "message": message,
    }


def resolve_validity_window(
    valid_after: Optional[int] = None,
    valid_before: Optional[int] = None,
    now: Optional[int] = None,
) -> tuple[int, int]:
    after = 0 if valid_after is None else valid_after
    if valid_before is None:
        current = int(time.time()) if now is None else now
        before = current + DEFAULT_VALIDITY_SECONDS
    else:
        before = valid_before

    for bound in (after, before):
        if isinstance(bound, bool) or not isinstance(bound, int):
            raise InvalidValidityWindowError(after, before, "bounds must be integer unix timestamps")
    if after < 0:
        raise InvalidValidityWindowError(after, before, "validAfter must be non-negative")
    if before <= after:
        raise InvalidValidityWindowError(after, before, "validBefore must be greater than validAfter")
    return after, before


async def _resolve_signer_address(signer: TypedDataSigner, from_address: Optional[str]) -> str:
    try:
        address = await signer.get_address()
    except Exception as exc:
        raise SignerAddressUnresolvableError(f"Unable to resolve signer address: {exc}") from exc
    if not address or not isinstance(address, str):
        raise SignerAddressUnresolvableError("Unable to resolve signer address")
    if from_address is not None and from_address.lower() != address.lower():
        raise SignerAddressUnresolvableError(
            f"Signer address {address} does not match requested from address {from_address}"
        )
    return address


async def build_authorization(
    network: Union[CronosNetwork, str],
    to: str,
    value: Union[int, str],
    signer: TypedDataSigner,
    *,
    asset: Optional[str] = None,
    valid_after: Optional[int] = None,
    valid_before: Optional[int] = None,
    from_address: Optional[str] = None,
    nonce_source: Optional[RandomSource] = None,
    now: Optional[int] = None,
) -> Eip3009Payload:
    """Build and sign an EIP-3009 authorization for ``value`` base units of ``asset``.

    Every check that does not need the signer (network, amount, asset,
    validity window) runs before the signer is touched.
    """
    config = get_network_config(network)
    amount = parse_uint256(value)

    token_address = asset or config.asset
    if not token_address:
        raise MissingAssetError("Token asset address is required (no default configured)")

    after, before = resolve_validity_window(valid_after, valid_before, now)

    from_addr = await _resolve_signer_address(signer, from_address)
    chain_id = await signer.get_chain_id()

    nonce = generate_nonce(nonce_source)
    nonce_hex = nonce_to_hex(nonce)

    domain = build_domain(network, chain_id, token_address)
    message = build_message(from_addr, to, amount, after, before, nonce)

    logger.debug(
        "signing %s network=%s chain_id=%s from=%s to=%s value=%s nonce=%s",
        PRIMARY_TYPE,
        network,
        chain_id,
        from_addr,
        to,
        amount,
        nonce_hex,
    )
    signature = await signer.sign_typed_data(domain, TRANSFER_WITH_AUTHORIZATION_TYPES, message)

    return Eip3009Payload(
        from_address=from_addr,
        to=to,
        value=str(amount),
        valid_after=after,
        valid_before=before,
        nonce=nonce_hex,
        signature=signature,
        asset=token_address,
    )
