"""Cronos x402 facilitator clients (async and sync)."""

from __future__ import annotations

import asyncio
import json
import logging
import threading
from concurrent.futures import Future
from typing import Any, Dict, Optional, Union

import httpx

from .config import FacilitatorConfig
from .constants import CronosNetwork, get_network_config, resolve_network
from .errors import (
    InvalidPaymentHeaderError,
    RemoteRejectedError,
    SchemaViolationError,
    SettlementSequenceError,
    TransportFailureError,
)
from .guards import assert_settle_response, assert_supported_response, assert_verify_response
from .header import generate_payment_header, parse_payment_header
from .requirements import build_verify_request, generate_payment_requirements
from .schemas import (
    PaymentRequirements,
    VerifyRequest,
    X402OutputSchema,
    X402SettleResponse,
    X402SupportedResponse,
    X402VerifyResponse,
)
from .signer import TypedDataSigner

logger = logging.getLogger(__name__)

SUPPORTED_PATH = "/v2/x402/supported"
VERIFY_PATH = "/v2/x402/verify"
SETTLE_PATH = "/v2/x402/settle"

DEFAULT_HEADERS = {
    "Content-Type": "application/json",
    "X402-Version": "1",
}


def _parse_body(text: str) -> Any:
    if not text:
        return {}
    try:
        return json.loads(text)
    except ValueError:
        return {"raw": text}


def _to_verify_request(request: Union[VerifyRequest, Dict[str, Any]]) -> VerifyRequest:
    if isinstance(request, VerifyRequest):
        return request
    if isinstance(request, dict):
        return VerifyRequest.model_validate(request)
    raise TypeError("request must be a VerifyRequest or dict")


def _nonce_of(request: VerifyRequest) -> Optional[str]:
    try:
        return parse_payment_header(request.payment_header).payload.nonce
    except (InvalidPaymentHeaderError, SchemaViolationError):
        return None


class _SequenceTracker:
    """Local verified/settling/settled bookkeeping keyed by authorization nonce.

    Only used when ``strict_sequencing`` is enabled. Shared by concurrent
    callers, so every access holds the lock. ``claim_settle`` moves an entry
    to SETTLING under the same lock that checks it, so at most one settle
    request per nonce is ever in flight.
    """

    VERIFIED = "verified"
    SETTLING = "settling"
    SETTLED = "settled"

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: Dict[str, tuple[str, Dict[str, Any]]] = {}

    def mark_verified(self, request: VerifyRequest, result: X402VerifyResponse) -> None:
        nonce = _nonce_of(request)
        if nonce is None or not result.is_valid:
            return
        with self._lock:
            current = self._entries.get(nonce)
            if current is not None and current[0] in (self.SETTLING, self.SETTLED):
                return
            self._entries[nonce] = (self.VERIFIED, request.to_payload())

    def claim_settle(self, request: VerifyRequest) -> str:
        nonce = _nonce_of(request)
        if nonce is None:
            raise SettlementSequenceError("<undecodable>", "payment header cannot be decoded")
        body = request.to_payload()
        with self._lock:
            entry = self._entries.get(nonce)
            if entry is None:
                raise SettlementSequenceError(nonce, "authorization was never verified as valid")
            state, verified_body = entry
            if state == self.SETTLED:
                raise SettlementSequenceError(nonce, "authorization was already settled")
            if state == self.SETTLING:
                raise SettlementSequenceError(nonce, "settlement is already in progress")
            if verified_body != body:
                raise SettlementSequenceError(nonce, "request body differs from the verified body")
            self._entries[nonce] = (self.SETTLING, verified_body)
        return nonce

    def finish_settle(self, nonce: str, result: X402SettleResponse) -> None:
        with self._lock:
            _, body = self._entries[nonce]
            self._entries[nonce] = (self.SETTLED if result.settled else self.VERIFIED, body)

    def release(self, nonce: str) -> None:
        """Return a SETTLING entry to VERIFIED after a failed settle call."""
        with self._lock:
            entry = self._entries.get(nonce)
            if entry is not None and entry[0] == self.SETTLING:
                self._entries[nonce] = (self.VERIFIED, entry[1])

    def state_of(self, nonce: str) -> Optional[str]:
        with self._lock:
            entry = self._entries.get(nonce)
        return entry[0] if entry else None


class _BaseFacilitatorClient:
    def __init__(
        self,
        network: Union[CronosNetwork, str] = CronosNetwork.CRONOS_TESTNET,
        config: FacilitatorConfig | dict[str, Any] | None = None,
    ) -> None:
        self._network = resolve_network(network)
        self._network_config = get_network_config(self._network)
        self._config = FacilitatorConfig.coerce(config)
        self._url = self._config.url.rstrip("/")
        self._tracker = _SequenceTracker() if self._config.strict_sequencing else None

    @property
    def network(self) -> CronosNetwork:
        return self._network

    @property
    def default_asset(self) -> str:
        return self._network_config.asset

    @property
    def rpc_url(self) -> str:
        return self._network_config.rpc_url

    @property
    def url(self) -> str:
        return self._url

    def settlement_state(self, nonce: str) -> Optional[str]:
        """Local sequencing state of ``nonce`` (None when untracked or not in strict mode)."""
        if self._tracker is None:
            return None
        return self._tracker.state_of(nonce)

    def _headers(self) -> Dict[str, str]:
        return {**DEFAULT_HEADERS, **self._config.headers}

    def _handle_response(self, operation: str, response: httpx.Response) -> Any:
        payload = _parse_body(response.text)
        if not response.is_success:
            logger.warning("%s rejected status=%s body=%s", operation, response.status_code, payload)
            raise RemoteRejectedError(operation, response.status_code, payload)
        logger.debug("%s succeeded status=%s", operation, response.status_code)
        return payload

    def generate_payment_requirements(
        self,
        pay_to: str,
        *,
        asset: Optional[str] = None,
        description: Optional[str] = None,
        max_amount_required: Optional[Union[str, int]] = None,
        mime_type: Optional[str] = None,
        max_timeout_seconds: Optional[int] = None,
        resource: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
        output_schema: Optional[Union[X402OutputSchema, Dict[str, Any]]] = None,
    ) -> PaymentRequirements:
        overrides: Dict[str, Any] = {
            "description": description,
            "max_amount_required": max_amount_required,
            "mime_type": mime_type,
            "max_timeout_seconds": max_timeout_seconds,
        }
        return generate_payment_requirements(
            self._network,
            pay_to,
            asset=asset or self.default_asset,
            resource=resource,
            extra=extra,
            output_schema=output_schema,
            **{key: value for key, value in overrides.items() if value is not None},
        )

    def build_verify_request(
        self,
        payment_header: str,
        payment_requirements: PaymentRequirements,
    ) -> VerifyRequest:
        return build_verify_request(payment_header, payment_requirements)

    def _before_settle(self, request: VerifyRequest) -> Optional[str]:
        if self._tracker is None:
            return None
        return self._tracker.claim_settle(request)

    def _abort_settle(self, nonce: Optional[str]) -> None:
        if self._tracker is not None and nonce is not None:
            self._tracker.release(nonce)

    def _after_verify(self, request: VerifyRequest, result: X402VerifyResponse) -> None:
        logger.info("verify result valid=%s reason=%s", result.is_valid, result.invalid_reason)
        if self._tracker is not None:
            self._tracker.mark_verified(request, result)

    def _after_settle(self, nonce: Optional[str], result: X402SettleResponse) -> None:
        logger.info(
            "settle result event=%s tx_hash=%s network=%s",
            result.event.value,
            result.tx_hash,
            result.network,
        )
        if self._tracker is not None and nonce is not None:
            self._tracker.finish_settle(nonce, result)


class CronosFacilitatorClient(_BaseFacilitatorClient):
    """Async client for the Cronos x402 facilitator."""

    def __init__(
        self,
        network: Union[CronosNetwork, str] = CronosNetwork.CRONOS_TESTNET,
        config: FacilitatorConfig | dict[str, Any] | None = None,
    ) -> None:
        super().__init__(network, config)
        http_client = self._config.http_client
        if http_client is not None and not isinstance(http_client, httpx.AsyncClient):
            raise TypeError("http_client must be an httpx.AsyncClient")
        self._client: Optional[httpx.AsyncClient] = http_client
        self._owns_client = http_client is None

    def _get_async_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._config.timeout)
        return self._client

    async def aclose(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "CronosFacilitatorClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def _request(self, operation: str, method: str, path: str, body: Optional[Dict[str, Any]] = None) -> Any:
        client = self._get_async_client()
        logger.debug("%s %s%s", method, self._url, path)
        try:
            response = await client.request(method, f"{self._url}{path}", headers=self._headers(), json=body)
        except httpx.HTTPError as exc:
            raise TransportFailureError(operation, exc) from exc
        return self._handle_response(operation, response)

    async def get_supported(self) -> X402SupportedResponse:
        payload = await self._request("getSupported", "GET", SUPPORTED_PATH)
        return assert_supported_response(payload)

    async def verify_payment(self, request: VerifyRequest | Dict[str, Any]) -> X402VerifyResponse:
        verify_request = _to_verify_request(request)
        payload = await self._request("verify", "POST", VERIFY_PATH, verify_request.to_payload())
        result = assert_verify_response(payload)
        self._after_verify(verify_request, result)
        return result

    async def settle_payment(self, request: VerifyRequest | Dict[str, Any]) -> X402SettleResponse:
        settle_request = _to_verify_request(request)
        nonce = self._before_settle(settle_request)
        try:
            payload = await self._request("settle", "POST", SETTLE_PATH, settle_request.to_payload())
            result = assert_settle_response(payload)
        except BaseException:
            self._abort_settle(nonce)
            raise
        self._after_settle(nonce, result)
        return result

    async def generate_payment_header(
        self,
        to: str,
        value: Union[int, str],
        signer: TypedDataSigner,
        *,
        asset: Optional[str] = None,
        valid_after: Optional[int] = None,
        valid_before: Optional[int] = None,
    ) -> str:
        return await generate_payment_header(
            self._network,
            to,
            value,
            signer,
            asset=asset or self.default_asset,
            valid_after=valid_after,
            valid_before=valid_before,
        )


class _AsyncRunner:
    """Runs coroutines on a private event loop thread for the sync client.

    Signers expose coroutines. The sync client drives them here so
    ``generate_payment_header`` works whether or not the calling thread
    already has a running event loop.
    """

    def __init__(self) -> None:
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._thread: Optional[threading.Thread] = None
        self._ready = threading.Event()
        self._start_lock = threading.Lock()

    def _ensure_thread(self) -> None:
        with self._start_lock:
            if self._thread and self._thread.is_alive():
                return

            def _run_loop() -> None:
                loop = asyncio.new_event_loop()
                asyncio.set_event_loop(loop)
                self._loop = loop
                self._ready.set()
                loop.run_forever()

            self._ready.clear()
            thread = threading.Thread(target=_run_loop, name="cronos-x402-signer", daemon=True)
            thread.start()
            self._thread = thread
            self._ready.wait()

    def run(self, coro):
        self._ensure_thread()
        loop = self._loop
        if loop is None:
            raise RuntimeError("async runner loop not initialized")
        future: Future = asyncio.run_coroutine_threadsafe(coro, loop)
        return future.result()


_ASYNC_RUNNER = _AsyncRunner()


class CronosFacilitatorClientSync(_BaseFacilitatorClient):
    """Sync client for the Cronos x402 facilitator."""

    def __init__(
        self,
        network: Union[CronosNetwork, str] = CronosNetwork.CRONOS_TESTNET,
        config: FacilitatorConfig | dict[str, Any] | None = None,
    ) -> None:
        super().__init__(network, config)
        http_client = self._config.http_client
        if http_client is not None and not isinstance(http_client, httpx.Client):
            raise TypeError("http_client must be an httpx.Client")
        self._client: Optional[httpx.Client] = http_client
        self._owns_client = http_client is None

    def _get_client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(timeout=self._config.timeout)
        return self._client

    def close(self) -> None:
        if self._owns_client and self._client is not None:
            self._client.close()
            self._client = None

    def __enter__(self) -> "CronosFacilitatorClientSync":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _request(self, operation: str, method: str, path: str, body: Optional[Dict[str, Any]] = None) -> Any:
        client = self._get_client()
        logger.debug("%s %s%s", method, self._url, path)
        try:
            response = client.request(method, f"{self._url}{path}", headers=self._headers(), json=body)
        except httpx.HTTPError as exc:
            raise TransportFailureError(operation, exc) from exc
        return self._handle_response(operation, response)

    def get_supported(self) -> X402SupportedResponse:
        return assert_supported_response(self._request("getSupported", "GET", SUPPORTED_PATH))

    def verify_payment(self, request: VerifyRequest | Dict[str, Any]) -> X402VerifyResponse:
        verify_request = _to_verify_request(request)
        payload = self._request("verify", "POST", VERIFY_PATH, verify_request.to_payload())
        result = assert_verify_response(payload)
        self._after_verify(verify_request, result)
        return result

    def settle_payment(self, request: VerifyRequest | Dict[str, Any]) -> X402SettleResponse:
        settle_request = _to_verify_request(request)
        nonce = self._before_settle(settle_request)
        try:
            payload = self._request("settle", "POST", SETTLE_PATH, settle_request.to_payload())
            result = assert_settle_response(payload)
        except BaseException:
            self._abort_settle(nonce)
            raise
        self._after_settle(nonce, result)
        return result

    def generate_payment_header(
        self,
        to: str,
        value: Union[int, str],
        signer: TypedDataSigner,
        *,
        asset: Optional[str] = None,
        valid_after: Optional[int] = None,
        valid_before: Optional[int] = None,
    ) -> str:
        return _ASYNC_RUNNER.run(
            generate_payment_header(
                self._network,
                to,
                value,
                signer,
                asset=asset or self.default_asset,
                valid_after=valid_after,
                valid_before=valid_before,
            )
        )
