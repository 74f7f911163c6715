import base64
import json

import pytest

from cronos_x402.constants import CronosNetwork
from cronos_x402.errors import InvalidPaymentHeaderError, SchemaViolationError
from cronos_x402.header import (
    build_payment_header,
    decode_payment_header,
    encode_payment_header,
    generate_payment_header,
    parse_payment_header,
)
from cronos_x402.schemas import Eip3009Payload, PaymentHeader

RECIPIENT = "0x" + "a" * 40


def _payload(**overrides):
    fields = {
        "from": "0x" + "b" * 40,
        "to": RECIPIENT,
        "value": "1000000",
        "validAfter": 0,
        "validBefore": 1_700_003_600,
        "nonce": "0x" + "11" * 32,
        "signature": "0x" + "22" * 65,
        "asset": "0xc01efAaF7C5C61bEbFAeb358E1161b537b8bC0e0",
    }
    fields.update(overrides)
    return Eip3009Payload.model_validate(fields)


class StubSigner:
    async def get_address(self):
        return "0x" + "b" * 40

    async def get_chain_id(self):
        return 338

    async def sign_typed_data(self, domain, types, message):
        return "0x" + "ab" * 65


def test_envelope_fields():
    header = build_payment_header(_payload(), "cronos-testnet")
    assert header.x402_version == 1
    assert header.scheme.value == "exact"
    assert header.network is CronosNetwork.CRONOS_TESTNET


def test_encoded_json_uses_wire_names():
    encoded = encode_payment_header(_payload(), "cronos-testnet")
    data = json.loads(base64.b64decode(encoded))
    assert data == {
        "x402Version": 1,
        "scheme": "exact",
        "network": "cronos-testnet",
        "payload": {
            "from": "0x" + "b" * 40,
            "to": RECIPIENT,
            "value": "1000000",
            "validAfter": 0,
            "validBefore": 1_700_003_600,
            "nonce": "0x" + "11" * 32,
            "signature": "0x" + "22" * 65,
            "asset": "0xc01efAaF7C5C61bEbFAeb358E1161b537b8bC0e0",
        },
    }


def test_decode_returns_exact_serialized_text():
    payload = _payload(value=str(2**255))
    encoded = encode_payment_header(payload, "cronos-mainnet")
    text = decode_payment_header(encoded)

    assert text == build_payment_header(payload, "cronos-mainnet").model_dump_json(by_alias=True)
    assert json.loads(text)["payload"]["value"] == str(2**255)
    assert parse_payment_header(encoded) == build_payment_header(payload, "cronos-mainnet")


def test_reencode_is_idempotent():
    encoded = encode_payment_header(_payload(), "cronos-testnet")
    header = parse_payment_header(encoded)
    assert encode_payment_header(header.payload, header.network) == encoded


@pytest.mark.parametrize("bad", ["not base64!", "YWJj=extra", "é"])
def test_decode_rejects_bad_base64(bad):
    with pytest.raises(InvalidPaymentHeaderError):
        decode_payment_header(bad)


def test_decode_rejects_non_utf8():
    with pytest.raises(InvalidPaymentHeaderError):
        decode_payment_header(base64.b64encode(b"\xff\xfe").decode())


def test_parse_rejects_non_json():
    with pytest.raises(SchemaViolationError) as err:
        parse_payment_header(base64.b64encode(b"hello").decode())
    assert err.value.field == "<root>"


def test_parse_rejects_bad_structure():
    text = json.dumps({"x402Version": 1, "scheme": "exact", "network": "cronos-testnet", "payload": {}})
    with pytest.raises(SchemaViolationError) as err:
        parse_payment_header(base64.b64encode(text.encode()).decode())
    assert err.value.field.startswith("payload.")


def test_parse_rejects_wrong_version():
    header = json.loads(decode_payment_header(encode_payment_header(_payload(), "cronos-testnet")))
    header["x402Version"] = 2
    with pytest.raises(SchemaViolationError) as err:
        parse_payment_header(base64.b64encode(json.dumps(header).encode()).decode())
    assert err.value.field == "x402Version"


@pytest.mark.asyncio
async def test_generate_payment_header_round_trips():
    encoded = await generate_payment_header(
        "cronos-testnet", RECIPIENT, "1000000", StubSigner(), valid_after=1, valid_before=2
    )
    header = parse_payment_header(encoded)
    assert isinstance(header, PaymentHeader)
    assert header.payload.value == "1000000"
    assert header.payload.to == RECIPIENT
    assert header.payload.signature == "0x" + "ab" * 65
    assert (header.payload.valid_after, header.payload.valid_before) == (1, 2)
