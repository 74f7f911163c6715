"""Payment header envelope and its Base64(JSON) transport encoding."""

from __future__ import annotations

import base64
import binascii
import json
from typing import Optional, Union

from .authorization import build_authorization
from .constants import CronosNetwork, resolve_network
from .errors import InvalidPaymentHeaderError, SchemaViolationError
from .guards import ROOT_FIELD, assert_payment_header
from .nonce import RandomSource
from .schemas import Eip3009Payload, PaymentHeader
from .signer import TypedDataSigner


def build_payment_header(payload: Eip3009Payload, network: Union[CronosNetwork, str]) -> PaymentHeader:
    return PaymentHeader(network=resolve_network(network), payload=payload)


def serialize_payment_header(header: PaymentHeader) -> str:
    """Compact JSON of the envelope; ``value`` stays a decimal string so no precision is lost."""
    return header.model_dump_json(by_alias=True)


def encode_payment_header(payload: Eip3009Payload, network: Union[CronosNetwork, str]) -> str:
    header = build_payment_header(payload, network)
    return base64.b64encode(serialize_payment_header(header).encode("utf-8")).decode("ascii")


def decode_payment_header(encoded: str) -> str:
    """Undo the Base64 transport encoding and return the JSON text.

    The result is not parsed or validated; use :func:`parse_payment_header`
    before trusting any field of it.
    """
    try:
        raw = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidPaymentHeaderError(f"payment header is not valid base64: {exc}") from exc
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise InvalidPaymentHeaderError(f"payment header is not valid UTF-8: {exc}") from exc


def parse_payment_header(encoded: str) -> PaymentHeader:
    text = decode_payment_header(encoded)
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise SchemaViolationError("PaymentHeader", ROOT_FIELD, f"not valid JSON: {exc.msg}") from exc
    return assert_payment_header(data)


async def generate_payment_header(
    network: Union[CronosNetwork, str],
    to: str,
    value: Union[int, str],
    signer: TypedDataSigner,
    *,
    asset: Optional[str] = None,
    valid_after: Optional[int] = None,
    valid_before: Optional[int] = None,
    nonce_source: Optional[RandomSource] = None,
) -> str:
    """Sign a fresh authorization and return it as an encoded payment header."""
    payload = await build_authorization(
        network,
        to,
        value,
        signer,
        asset=asset,
        valid_after=valid_after,
        valid_before=valid_before,
        nonce_source=nonce_source,
    )
    return encode_payment_header(payload, network)
