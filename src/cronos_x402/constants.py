"""Shared constants and the network registry for the Cronos x402 client."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Dict, List, Mapping, Union

from .errors import UnsupportedNetworkError

X402_VERSION = 1

DEFAULT_FACILITATOR_URL = "https://facilitator.cronoslabs.org"

# Seconds added to "now" when the caller gives no validBefore.
DEFAULT_VALIDITY_SECONDS = 3600

USDCE_DOMAIN_NAME = "Bridged USDC (Stargate)"


class CronosNetwork(str, Enum):
    CRONOS_MAINNET = "cronos-mainnet"
    CRONOS_TESTNET = "cronos-testnet"


class Contract(str, Enum):
    USDCE = "0xf951eC28187D9E5Ca673Da8FE6757E6f0Be5F77C"
    DEV_USDCE = "0xc01efAaF7C5C61bEbFAeb358E1161b537b8bC0e0"


class Scheme(str, Enum):
    EXACT = "exact"


@dataclass(frozen=True)
class NetworkConfig:
    asset: str
    domain_name: str
    domain_version: str
    rpc_url: str


NETWORK_REGISTRY: Mapping[CronosNetwork, NetworkConfig] = MappingProxyType(
    {
        CronosNetwork.CRONOS_MAINNET: NetworkConfig(
            asset=Contract.USDCE.value,
            domain_name=USDCE_DOMAIN_NAME,
            domain_version="2",
            rpc_url="https://evm.cronos.org",
        ),
        CronosNetwork.CRONOS_TESTNET: NetworkConfig(
            asset=Contract.DEV_USDCE.value,
            domain_name=USDCE_DOMAIN_NAME,
            domain_version="1",
            rpc_url="https://evm-t3.cronos.org",
        ),
    }
)

SUPPORTED_NETWORKS: List[str] = [network.value for network in NETWORK_REGISTRY]

DEFAULT_RPC_URLS: Dict[str, str] = {
    network.value: config.rpc_url for network, config in NETWORK_REGISTRY.items()
}


def resolve_network(network: Union[CronosNetwork, str]) -> CronosNetwork:
    """Coerce a network id (enum member or its string value) to ``CronosNetwork``."""
    try:
        return CronosNetwork(network)
    except ValueError as exc:
        raise UnsupportedNetworkError(network) from exc


def get_network_config(network: Union[CronosNetwork, str]) -> NetworkConfig:
    resolved = resolve_network(network)
    try:
        return NETWORK_REGISTRY[resolved]
    except KeyError as exc:
        raise UnsupportedNetworkError(network) from exc


def get_default_asset(network: Union[CronosNetwork, str]) -> str:
    return get_network_config(network).asset
