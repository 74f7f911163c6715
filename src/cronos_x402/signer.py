"""Signing capability used to authorize EIP-3009 transfers."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Protocol, Union, runtime_checkable

import httpx
from eth_account import Account
from eth_account.signers.local import LocalAccount

from .constants import CronosNetwork, get_network_config

logger = logging.getLogger(__name__)

TypedDataTypes = Dict[str, List[Dict[str, str]]]


@runtime_checkable
class TypedDataSigner(Protocol):
    """What the client needs from a wallet: who it is, where it is, and an EIP-712 signature.

    Software keys, hardware wallets and remote signers all fit as long as they
    expose these three coroutines.
    """

    async def get_address(self) -> Optional[str]: ...

    async def get_chain_id(self) -> int: ...

    async def sign_typed_data(
        self,
        domain: Dict[str, Any],
        types: TypedDataTypes,
        message: Dict[str, Any],
    ) -> str: ...


class EthAccountSigner:
    """``TypedDataSigner`` backed by a local ``eth_account`` private key.

    The chain id is either pinned at construction or fetched once from
    ``rpc_url`` with ``eth_chainId``.
    """

    def __init__(
        self,
        private_key: str,
        *,
        chain_id: Optional[int] = None,
        rpc_url: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
    ) -> None:
        if chain_id is None and rpc_url is None:
            raise ValueError("either chain_id or rpc_url is required")
        self._account: LocalAccount = Account.from_key(private_key)
        self._chain_id = chain_id
        self._rpc_url = rpc_url
        self._http_client = http_client
        self._timeout = timeout

    @classmethod
    def for_network(
        cls,
        private_key: str,
        network: Union[CronosNetwork, str],
        **kwargs: Any,
    ) -> "EthAccountSigner":
        """Signer that resolves its chain id from the network's registered RPC endpoint."""
        kwargs.setdefault("rpc_url", get_network_config(network).rpc_url)
        return cls(private_key, **kwargs)

    @property
    def address(self) -> str:
        return self._account.address

    async def get_address(self) -> str:
        return self._account.address

    async def get_chain_id(self) -> int:
        if self._chain_id is None:
            self._chain_id = await self._fetch_chain_id()
        return self._chain_id

    async def _fetch_chain_id(self) -> int:
        body = {"jsonrpc": "2.0", "id": 1, "method": "eth_chainId", "params": []}
        logger.debug("resolving chain id from %s", self._rpc_url)
        if self._http_client is not None:
            response = await self._http_client.post(self._rpc_url, json=body)
        else:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.post(self._rpc_url, json=body)
        response.raise_for_status()
        payload = response.json()
        result = payload.get("result") if isinstance(payload, dict) else None
        if not isinstance(result, str):
            raise ValueError(f"eth_chainId returned no result: {payload}")
        return int(result, 16)

    async def sign_typed_data(
        self,
        domain: Dict[str, Any],
        types: TypedDataTypes,
        message: Dict[str, Any],
    ) -> str:
        signed = self._account.sign_typed_data(domain, types, message)
        return "0x" + bytes(signed.signature).hex()
