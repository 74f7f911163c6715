"""Wire models for the Cronos x402 facilitator protocol.

Every model serializes with camelCase aliases (``payTo``, ``maxAmountRequired``
...) and accepts both the alias and the snake_case attribute name on input.
Response models use strict scalar types: they are the validation boundary for
facilitator output and must not coerce ``"true"`` into ``True`` or ``1`` into
``"1"``.
"""

from __future__ import annotations

import math
import re
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PlainValidator,
    StrictBool,
    StrictInt,
    StrictStr,
    field_validator,
)
from pydantic.alias_generators import to_camel

from .constants import X402_VERSION, CronosNetwork, Scheme
from .errors import InvalidAmountError

UINT256_MAX = 2**256 - 1

_DECIMAL_RE = re.compile(r"^(0|[1-9][0-9]*)$")
_NONCE_RE = re.compile(r"^0x[0-9a-fA-F]{64}$")
_HEX_RE = re.compile(r"^0x[0-9a-fA-F]*$")


def parse_uint256(value: Any) -> int:
    """Parse a uint256 amount given as an int or a canonical decimal string.

    Floats and bools are refused outright: a float cannot carry every uint256
    exactly, and ``True`` is not an amount.
    """
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise InvalidAmountError(value, "expected an integer or a decimal string")
    if isinstance(value, str):
        if not _DECIMAL_RE.match(value):
            raise InvalidAmountError(value, "expected a decimal integer without sign or leading zeros")
        value = int(value, 10)
    if value < 0:
        raise InvalidAmountError(value, "must be non-negative")
    if value > UINT256_MAX:
        raise InvalidAmountError(value, "exceeds uint256")
    return value


def _finite_number(value: Any) -> Union[int, float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError("not a number")
    if isinstance(value, float) and not math.isfinite(value):
        raise ValueError("not a finite number")
    return value


FiniteNumber = Annotated[Union[int, float], PlainValidator(_finite_number)]


class BaseX402Model(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_payload(self) -> Dict[str, Any]:
        """JSON-ready dict with wire aliases and unset optionals dropped."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class X402EventType(str, Enum):
    PAYMENT_SETTLED = "payment.settled"
    PAYMENT_FAILED = "payment.failed"


# ---------------------------------------------------------------------------
# Outgoing
# ---------------------------------------------------------------------------


class Eip3009Payload(BaseX402Model):
    """Signed EIP-3009 ``TransferWithAuthorization`` plus the token it moves."""

    model_config = ConfigDict(frozen=True)

    from_address: StrictStr = Field(alias="from")
    to: StrictStr
    value: StrictStr
    valid_after: StrictInt = Field(ge=0)
    valid_before: StrictInt = Field(ge=0)
    nonce: StrictStr
    signature: StrictStr
    asset: StrictStr

    @field_validator("value")
    @classmethod
    def _check_value(cls, v: str) -> str:
        parse_uint256(v)
        return v

    @field_validator("nonce")
    @classmethod
    def _check_nonce(cls, v: str) -> str:
        if not _NONCE_RE.match(v):
            raise ValueError("nonce must be 0x followed by 64 hex characters")
        return v

    @field_validator("signature")
    @classmethod
    def _check_signature(cls, v: str) -> str:
        if not _HEX_RE.match(v):
            raise ValueError("signature must be a 0x-prefixed hex string")
        return v


class PaymentHeader(BaseX402Model):
    model_config = ConfigDict(frozen=True)

    x402_version: Literal[1] = X402_VERSION
    scheme: Scheme = Scheme.EXACT
    network: CronosNetwork
    payload: Eip3009Payload


class FieldDef(BaseX402Model):
    type: Optional[str] = None
    required: Optional[Union[bool, List[str]]] = None
    description: Optional[str] = None
    enum: Optional[List[str]] = None
    properties: Optional[Dict[str, "FieldDef"]] = None


class OutputSchemaInput(BaseX402Model):
    type: Literal["http"] = "http"
    method: Literal["GET", "POST"]
    body_type: Optional[Literal["json", "form-data", "multipart-form-data", "text", "binary"]] = None
    query_params: Optional[Dict[str, FieldDef]] = None
    body_fields: Optional[Dict[str, FieldDef]] = None
    header_fields: Optional[Dict[str, FieldDef]] = None


class X402OutputSchema(BaseX402Model):
    input: OutputSchemaInput
    output: Optional[Dict[str, Any]] = None


class PaymentRequirements(BaseX402Model):
    model_config = ConfigDict(frozen=True)

    scheme: Scheme = Scheme.EXACT
    network: CronosNetwork
    pay_to: str
    asset: str
    description: str
    mime_type: str
    max_amount_required: str
    max_timeout_seconds: int
    resource: Optional[str] = None
    extra: Optional[Dict[str, Any]] = None
    output_schema: Optional[X402OutputSchema] = None

    @field_validator("max_amount_required")
    @classmethod
    def _check_max_amount(cls, v: str) -> str:
        parse_uint256(v)
        return v


class VerifyRequest(BaseX402Model):
    """Body sent, unchanged, to both ``/verify`` and ``/settle``."""

    model_config = ConfigDict(frozen=True)

    x402_version: int = X402_VERSION
    payment_header: str
    payment_requirements: PaymentRequirements


# ---------------------------------------------------------------------------
# Incoming (validated in guards.py)
# ---------------------------------------------------------------------------


class _ResponseModel(BaseX402Model):
    # Unknown fields are kept so newer facilitators do not break older clients.
    # Wire names only: snake_case keys are not accepted in place of camelCase.
    model_config = ConfigDict(extra="allow", populate_by_name=False)


class X402Kind(_ResponseModel):
    x402_version: FiniteNumber
    scheme: StrictStr
    network: StrictStr


class X402SupportedResponse(_ResponseModel):
    kinds: List[X402Kind]


class X402VerifyResponse(_ResponseModel):
    is_valid: StrictBool
    # Required, but may be null.
    invalid_reason: Optional[StrictStr]


class X402SettleResponse(_ResponseModel):
    x402_version: FiniteNumber
    event: X402EventType
    network: StrictStr
    timestamp: StrictStr
    tx_hash: Optional[StrictStr] = None
    from_address: Optional[StrictStr] = Field(default=None, alias="from")
    to: Optional[StrictStr] = None
    value: Optional[StrictStr] = None
    block_number: Optional[FiniteNumber] = None
    error: Optional[StrictStr] = None

    @field_validator("tx_hash", "from_address", "to", "value", "block_number", "error", mode="before")
    @classmethod
    def _absent_not_null(cls, v: Any) -> Any:
        # Optional here means "may be omitted"; an explicit null is malformed.
        if v is None:
            raise ValueError("must be omitted or set, not null")
        return v

    @property
    def settled(self) -> bool:
        return self.event is X402EventType.PAYMENT_SETTLED


FieldDef.model_rebuild()
