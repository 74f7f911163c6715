import pytest

from cronos_x402.constants import (
    DEFAULT_RPC_URLS,
    NETWORK_REGISTRY,
    SUPPORTED_NETWORKS,
    Contract,
    CronosNetwork,
    get_default_asset,
    get_network_config,
)
from cronos_x402.errors import UnsupportedNetworkError


def test_supported_networks_match_expected():
    assert SUPPORTED_NETWORKS == ["cronos-mainnet", "cronos-testnet"]


def test_default_rpc_urls_match_expected():
    assert DEFAULT_RPC_URLS["cronos-mainnet"] == "https://evm.cronos.org"
    assert DEFAULT_RPC_URLS["cronos-testnet"] == "https://evm-t3.cronos.org"


def test_default_assets_match_expected():
    assert get_default_asset("cronos-mainnet") == "0xf951eC28187D9E5Ca673Da8FE6757E6f0Be5F77C"
    assert get_default_asset(CronosNetwork.CRONOS_TESTNET) == Contract.DEV_USDCE.value


def test_domain_versions_per_network():
    assert get_network_config("cronos-mainnet").domain_version == "2"
    assert get_network_config("cronos-testnet").domain_version == "1"


def test_registry_is_read_only():
    with pytest.raises(TypeError):
        NETWORK_REGISTRY[CronosNetwork.CRONOS_MAINNET] = None  # type: ignore[index]

    config = get_network_config("cronos-mainnet")
    with pytest.raises(AttributeError):
        config.asset = "0x0"  # type: ignore[misc]


@pytest.mark.parametrize("network", ["eip155:1", "cronos", "", None])
def test_get_network_config_raises_on_unsupported_network(network):
    with pytest.raises(UnsupportedNetworkError):
        get_network_config(network)


def test_get_default_asset_raises_on_unsupported_network():
    with pytest.raises(UnsupportedNetworkError):
        get_default_asset("eip155:1")
