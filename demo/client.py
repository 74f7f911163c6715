"""Sign a payment header, verify it and settle it against the Cronos facilitator."""

import asyncio
import logging
import os

from dotenv import load_dotenv

from cronos_x402 import (
    CronosFacilitatorClient,
    EthAccountSigner,
    FacilitatorConfig,
    network_from_env,
)

load_dotenv()
logging.basicConfig(level=logging.INFO, format="cronos_x402 %(levelname)s: %(message)s")

PRIVATE_KEY = os.getenv("PRIVATE_KEY")
if not PRIVATE_KEY or not PRIVATE_KEY.startswith("0x"):
    raise SystemExit("PRIVATE_KEY env var must be set and start with 0x")

PAY_TO = os.getenv("PAY_TO")
if not PAY_TO:
    raise SystemExit("PAY_TO env var must be set")

AMOUNT = os.getenv("AMOUNT", "1000000")


async def main() -> None:
    network = network_from_env()
    signer = EthAccountSigner.for_network(PRIVATE_KEY, network)

    async with CronosFacilitatorClient(network, FacilitatorConfig.from_env()) as client:
        header = await client.generate_payment_header(PAY_TO, AMOUNT, signer)
        requirements = client.generate_payment_requirements(PAY_TO, max_amount_required=AMOUNT)
        request = client.build_verify_request(header, requirements)

        verified = await client.verify_payment(request)
        print("Verify:", verified.model_dump(by_alias=True))
        if not verified.is_valid:
            raise SystemExit(f"payment rejected: {verified.invalid_reason}")

        settled = await client.settle_payment(request)
        print("Settle:", settled.model_dump(by_alias=True, exclude_none=True))


if __name__ == "__main__":
    asyncio.run(main())
