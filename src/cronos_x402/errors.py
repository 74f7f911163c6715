"""Error types raised by the Cronos x402 client."""

from __future__ import annotations

from typing import Any, Dict


class X402Error(Exception):
    """Base class for every error raised by this package."""


class UnsupportedNetworkError(X402Error, ValueError):
    """Raised when a network is not in the Cronos registry."""

    def __init__(self, network: Any) -> None:
        super().__init__(f"Unsupported network: {network}")
        self.network = network


class MissingAssetError(X402Error):
    """Raised when no token asset address is available for an authorization."""


class InvalidAmountError(X402Error, ValueError):
    def __init__(self, value: Any, reason: str) -> None:
        super().__init__(f"Invalid amount {value!r}: {reason}")
        self.value = value
        self.reason = reason


class InvalidValidityWindowError(X402Error, ValueError):
    """Raised when validBefore does not come strictly after validAfter."""

    def __init__(self, valid_after: Any, valid_before: Any, reason: str) -> None:
        super().__init__(f"Invalid validity window [{valid_after}, {valid_before}]: {reason}")
        self.reason = reason
        self.valid_after = valid_after
        self.valid_before = valid_before


class SignerAddressUnresolvableError(X402Error):
    """Raised when the signing capability cannot produce a usable address."""


class NonceGenerationError(X402Error):
    """Raised when the random source cannot produce a 32-byte nonce."""


class InvalidPaymentHeaderError(X402Error, ValueError):
    """Raised when a payment header string is not valid Base64/UTF-8."""


class SchemaViolationError(X402Error):
    """Raised when a value fails structural validation.

    ``field`` is the dotted path of the offending field (``"<root>"`` when the
    value itself has the wrong shape) and ``reason`` says what was expected.
    """

    def __init__(self, schema: str, field: str, reason: str) -> None:
        super().__init__(f"{schema}.{field}: {reason}")
        self.schema = schema
        self.field = field
        self.reason = reason


class RemoteRejectedError(X402Error):
    """Raised when the facilitator answers with a non-2xx status."""

    def __init__(self, operation: str, status: int, body: Dict[str, Any] | Any) -> None:
        super().__init__(f"{operation} failed with status {status}: {body}")
        self.operation = operation
        self.status = status
        self.body = body


class TransportFailureError(X402Error):
    """Raised when the HTTP transport fails before a response is received."""

    def __init__(self, operation: str, cause: BaseException) -> None:
        super().__init__(f"{operation} transport failure: {cause}")
        self.operation = operation
        self.cause = cause


class SettlementSequenceError(X402Error):
    """Raised in strict sequencing mode when settle is not preceded by a valid verify."""

    def __init__(self, nonce: str, reason: str) -> None:
        super().__init__(f"Cannot settle authorization {nonce}: {reason}")
        self.nonce = nonce
        self.reason = reason
