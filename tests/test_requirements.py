import pytest
from pydantic import ValidationError

from cronos_x402.constants import Contract, CronosNetwork
from cronos_x402.errors import InvalidAmountError, UnsupportedNetworkError
from cronos_x402.requirements import build_verify_request, generate_payment_requirements

PAY_TO = "0x" + "a" * 40


def test_defaults_applied():
    req = generate_payment_requirements("cronos-testnet", PAY_TO)
    assert req.to_payload() == {
        "scheme": "exact",
        "network": "cronos-testnet",
        "payTo": PAY_TO,
        "asset": Contract.DEV_USDCE.value,
        "description": "X402 payment request",
        "mimeType": "application/json",
        "maxAmountRequired": "1000",
        "maxTimeoutSeconds": 300,
    }


def test_overrides_and_optional_fields():
    req = generate_payment_requirements(
        CronosNetwork.CRONOS_MAINNET,
        PAY_TO,
        asset="0x" + "c" * 40,
        description="premium data",
        max_amount_required="1000000",
        mime_type="text/plain",
        max_timeout_seconds=60,
        resource="https://api.example.com/premium",
        extra={"tier": "gold"},
        output_schema={
            "input": {
                "type": "http",
                "method": "POST",
                "bodyType": "json",
                "bodyFields": {"query": {"type": "string", "required": True}},
            },
        },
    )
    payload = req.to_payload()
    assert payload["asset"] == "0x" + "c" * 40
    assert payload["maxAmountRequired"] == "1000000"
    assert payload["maxTimeoutSeconds"] == 60
    assert payload["resource"] == "https://api.example.com/premium"
    assert payload["extra"] == {"tier": "gold"}
    assert payload["outputSchema"] == {
        "input": {
            "type": "http",
            "method": "POST",
            "bodyType": "json",
            "bodyFields": {"query": {"type": "string", "required": True}},
        },
    }


def test_unsupported_network():
    with pytest.raises(UnsupportedNetworkError):
        generate_payment_requirements("base-sepolia", PAY_TO)


@pytest.mark.parametrize("amount", ["-5", "1e6", "01", 1.0])
def test_invalid_max_amount(amount):
    with pytest.raises(InvalidAmountError):
        generate_payment_requirements("cronos-testnet", PAY_TO, max_amount_required=amount)


def test_build_verify_request():
    req = generate_payment_requirements("cronos-testnet", PAY_TO)
    body = build_verify_request("aGVhZGVy", req)
    assert body.to_payload() == {
        "x402Version": 1,
        "paymentHeader": "aGVhZGVy",
        "paymentRequirements": req.to_payload(),
    }


def test_requirements_are_immutable():
    req = generate_payment_requirements("cronos-testnet", PAY_TO, max_amount_required="1000")
    with pytest.raises(ValidationError):
        req.max_amount_required = "-1"
    with pytest.raises(ValidationError):
        req.pay_to = "0x" + "b" * 40
    assert req.to_payload()["maxAmountRequired"] == "1000"
