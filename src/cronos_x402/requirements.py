"""Payment requirements and verify/settle request bodies."""

from __future__ import annotations

from typing import Any, Dict, Optional, Union

from .constants import X402_VERSION, CronosNetwork, get_network_config, resolve_network
from .schemas import PaymentRequirements, VerifyRequest, X402OutputSchema, parse_uint256

DEFAULT_DESCRIPTION = "X402 payment request"
DEFAULT_MAX_AMOUNT_REQUIRED = "1000"
DEFAULT_MIME_TYPE = "application/json"
DEFAULT_MAX_TIMEOUT_SECONDS = 300


def generate_payment_requirements(
    network: Union[CronosNetwork, str],
    pay_to: str,
    *,
    asset: Optional[str] = None,
    description: str = DEFAULT_DESCRIPTION,
    max_amount_required: Union[str, int] = DEFAULT_MAX_AMOUNT_REQUIRED,
    mime_type: str = DEFAULT_MIME_TYPE,
    max_timeout_seconds: int = DEFAULT_MAX_TIMEOUT_SECONDS,
    resource: Optional[str] = None,
    extra: Optional[Dict[str, Any]] = None,
    output_schema: Optional[Union[X402OutputSchema, Dict[str, Any]]] = None,
) -> PaymentRequirements:
    config = get_network_config(network)
    amount = parse_uint256(max_amount_required)
    if isinstance(output_schema, dict):
        output_schema = X402OutputSchema.model_validate(output_schema)

    return PaymentRequirements(
        network=resolve_network(network),
        pay_to=pay_to,
        asset=asset or config.asset,
        description=description,
        mime_type=mime_type,
        max_amount_required=str(amount),
        max_timeout_seconds=max_timeout_seconds,
        resource=resource,
        extra=extra,
        output_schema=output_schema,
    )


def build_verify_request(payment_header: str, payment_requirements: PaymentRequirements) -> VerifyRequest:
    return VerifyRequest(
        x402_version=X402_VERSION,
        payment_header=payment_header,
        payment_requirements=payment_requirements,
    )
