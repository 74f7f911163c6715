"""Client configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

import httpx
from dotenv import load_dotenv

from .constants import DEFAULT_FACILITATOR_URL, CronosNetwork, resolve_network

ENV_FACILITATOR_URL = "CRONOS_X402_FACILITATOR_URL"
ENV_TIMEOUT = "CRONOS_X402_TIMEOUT"
ENV_STRICT_SEQUENCING = "CRONOS_X402_STRICT_SEQUENCING"
ENV_NETWORK = "CRONOS_X402_NETWORK"

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass
class FacilitatorConfig:
    url: str = DEFAULT_FACILITATOR_URL
    timeout: float = 10.0
    # An injected client is used as-is and never closed by the facilitator client.
    http_client: Optional[Union[httpx.AsyncClient, httpx.Client]] = None
    headers: Dict[str, str] = field(default_factory=dict)
    strict_sequencing: bool = False

    @classmethod
    def from_env(cls, env_file: Optional[str] = None, **overrides: Any) -> "FacilitatorConfig":
        """Build a config from ``CRONOS_X402_*`` variables.

        When ``env_file`` is given it is loaded first; variables already set in
        the process environment win over the file.
        """
        if env_file is not None:
            load_dotenv(env_file, override=False)
        values: Dict[str, Any] = {}
        url = os.getenv(ENV_FACILITATOR_URL)
        if url:
            values["url"] = url
        timeout = os.getenv(ENV_TIMEOUT)
        if timeout:
            try:
                values["timeout"] = float(timeout)
            except ValueError as exc:
                raise ValueError(f"{ENV_TIMEOUT} must be a number, got {timeout!r}") from exc
        strict = os.getenv(ENV_STRICT_SEQUENCING)
        if strict:
            values["strict_sequencing"] = strict.strip().lower() in _TRUTHY
        values.update(overrides)
        return cls(**values)

    @classmethod
    def coerce(cls, config: Union["FacilitatorConfig", Dict[str, Any], None]) -> "FacilitatorConfig":
        if config is None:
            return cls()
        if isinstance(config, dict):
            return cls(**config)
        if config.url is None:
            config.url = DEFAULT_FACILITATOR_URL
        return config


def network_from_env(default: CronosNetwork = CronosNetwork.CRONOS_TESTNET) -> CronosNetwork:
    value = os.getenv(ENV_NETWORK)
    if not value:
        return default
    return resolve_network(value.strip())
