"""Runtime schema guards for facilitator responses.

Every body returned by the facilitator is untrusted until it passes one of the
``assert_*`` functions below. They return the validated pydantic model, so
calling code only ever reads fields from a checked value.
"""

from __future__ import annotations

import logging
from typing import Any, Type, TypeVar

from pydantic import BaseModel, ValidationError

from .errors import SchemaViolationError
from .schemas import (
    PaymentHeader,
    X402SettleResponse,
    X402SupportedResponse,
    X402VerifyResponse,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

ROOT_FIELD = "<root>"


def _first_violation(schema: str, exc: ValidationError) -> SchemaViolationError:
    error = exc.errors(include_url=False)[0]
    field = ".".join(str(part) for part in error["loc"]) or ROOT_FIELD
    reason = error["msg"]
    if "input" in error and error["type"] != "missing":
        reason = f"{reason} (got {type(error['input']).__name__})"
    return SchemaViolationError(schema, field, reason)


def _validate(model: Type[ModelT], schema: str, value: Any) -> ModelT:
    # Only plain JSON objects are accepted: a model instance or arbitrary
    # object would skip the structural check.
    if not isinstance(value, dict):
        raise SchemaViolationError(schema, ROOT_FIELD, f"not an object (got {type(value).__name__})")
    try:
        return model.model_validate(value)
    except ValidationError as exc:
        violation = _first_violation(schema, exc)
        logger.warning("schema violation in %s: field=%s reason=%s", schema, violation.field, violation.reason)
        raise violation from exc


def assert_supported_response(value: Any) -> X402SupportedResponse:
    return _validate(X402SupportedResponse, "X402SupportedResponse", value)


def assert_verify_response(value: Any) -> X402VerifyResponse:
    return _validate(X402VerifyResponse, "X402VerifyResponse", value)


def assert_settle_response(value: Any) -> X402SettleResponse:
    return _validate(X402SettleResponse, "X402SettleResponse", value)


def assert_payment_header(value: Any) -> PaymentHeader:
    """Validate a decoded payment header envelope (the parsed JSON object)."""
    return _validate(PaymentHeader, "PaymentHeader", value)
