"""Cronos x402 payment header and facilitator client package (Python)."""

from __future__ import annotations

from .authorization import (
    TRANSFER_WITH_AUTHORIZATION_TYPES,
    build_authorization,
    build_typed_data,
)
from .config import FacilitatorConfig, network_from_env
from .constants import (
    DEFAULT_FACILITATOR_URL,
    DEFAULT_RPC_URLS,
    NETWORK_REGISTRY,
    SUPPORTED_NETWORKS,
    Contract,
    CronosNetwork,
    NetworkConfig,
    Scheme,
    get_default_asset,
    get_network_config,
)
from .errors import (
    InvalidAmountError,
    InvalidPaymentHeaderError,
    InvalidValidityWindowError,
    MissingAssetError,
    NonceGenerationError,
    RemoteRejectedError,
    SchemaViolationError,
    SettlementSequenceError,
    SignerAddressUnresolvableError,
    TransportFailureError,
    UnsupportedNetworkError,
    X402Error,
)
from .facilitator import CronosFacilitatorClient, CronosFacilitatorClientSync
from .guards import (
    assert_payment_header,
    assert_settle_response,
    assert_supported_response,
    assert_verify_response,
)
from .header import (
    build_payment_header,
    decode_payment_header,
    encode_payment_header,
    generate_payment_header,
    parse_payment_header,
)
from .nonce import generate_nonce, generate_nonce_hex
from .requirements import build_verify_request, generate_payment_requirements
from .schemas import (
    Eip3009Payload,
    PaymentHeader,
    PaymentRequirements,
    VerifyRequest,
    X402EventType,
    X402Kind,
    X402OutputSchema,
    X402SettleResponse,
    X402SupportedResponse,
    X402VerifyResponse,
)
from .signer import EthAccountSigner, TypedDataSigner

__all__ = [
    "CronosFacilitatorClient",
    "CronosFacilitatorClientSync",
    "FacilitatorConfig",
    "network_from_env",
    "DEFAULT_FACILITATOR_URL",
    "DEFAULT_RPC_URLS",
    "NETWORK_REGISTRY",
    "SUPPORTED_NETWORKS",
    "Contract",
    "CronosNetwork",
    "NetworkConfig",
    "Scheme",
    "get_default_asset",
    "get_network_config",
    "TRANSFER_WITH_AUTHORIZATION_TYPES",
    "build_authorization",
    "build_typed_data",
    "build_payment_header",
    "decode_payment_header",
    "encode_payment_header",
    "generate_payment_header",
    "parse_payment_header",
    "generate_nonce",
    "generate_nonce_hex",
    "build_verify_request",
    "generate_payment_requirements",
    "assert_payment_header",
    "assert_settle_response",
    "assert_supported_response",
    "assert_verify_response",
    "Eip3009Payload",
    "PaymentHeader",
    "PaymentRequirements",
    "VerifyRequest",
    "X402EventType",
    "X402Kind",
    "X402OutputSchema",
    "X402SettleResponse",
    "X402SupportedResponse",
    "X402VerifyResponse",
    "EthAccountSigner",
    "TypedDataSigner",
    "X402Error",
    "InvalidAmountError",
    "InvalidPaymentHeaderError",
    "InvalidValidityWindowError",
    "MissingAssetError",
    "NonceGenerationError",
    "RemoteRejectedError",
    "SchemaViolationError",
    "SettlementSequenceError",
    "SignerAddressUnresolvableError",
    "TransportFailureError",
    "UnsupportedNetworkError",
]
