"""Settings resolution for the registrar.

Settings are assembled once, at process start, from explicit overrides first
and environment defaults second. The orchestrator receives the resulting
objects by reference and never reads the environment itself.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from eth_utils import is_address, to_checksum_address

from config import load_config

from .errors import MissingRpcEndpoint, MissingSigningKey, UnsupportedNetwork

SUPPORTED_NETWORKS = ("mainnet", "sepolia")
DEFAULT_NETWORK = "mainnet"

_NETWORK_KEYS = ("ENS_NETWORK", "NETWORK")
_RPC_KEYS = ("ENS_RPC_URL", "RPC_URL")
_KEY_KEYS = ("ENS_PRIVATE_KEY", "PRIVATE_KEY")


def _first_env(env: Mapping[str, str], keys: tuple[str, ...]) -> Optional[str]:
    for key in keys:
        raw = env.get(key)
        if raw and raw.strip():
            return raw.strip()
    return None


def _checksum(value: Any, field_name: str) -> str:
    if not isinstance(value, str) or not is_address(value.lower()):
        raise ValueError(f"{field_name} must be a 0x-prefixed 20-byte address")
    return to_checksum_address(value)


@dataclass
class NetworkProfile:
    """Protocol constants and operational knobs for one chain."""

    name: str
    chain_id: int
    controller: str
    public_resolver: str
    min_commitment_age: int
    max_commitment_age: int = 86_400
    safety_margin: int = 5
    value_buffer_pct: int = 10
    confirmation_timeout: int = 300
    min_registration_seconds: int = 2_419_200
    request_timeout: int = 30
    explorer_tx_url: Optional[str] = None

    def __post_init__(self) -> None:
        if not isinstance(self.chain_id, int) or self.chain_id <= 0:
            raise ValueError("chain_id must be a positive integer")
        self.controller = _checksum(self.controller, "controller")
        self.public_resolver = _checksum(self.public_resolver, "public_resolver")
        if not isinstance(self.min_commitment_age, int) or self.min_commitment_age < 0:
            raise ValueError("min_commitment_age must be a non-negative integer")
        if self.max_commitment_age <= self.min_commitment_age:
            raise ValueError("max_commitment_age must exceed min_commitment_age")
        if self.safety_margin < 0:
            raise ValueError("safety_margin must be non-negative")
        if not 0 <= self.value_buffer_pct <= 100:
            raise ValueError("value_buffer_pct must be between 0 and 100")
        if self.confirmation_timeout <= 0:
            raise ValueError("confirmation_timeout must be positive")

    @property
    def maturation_delay(self) -> int:
        """Seconds to wait between commit confirmation and the reveal."""

        return self.min_commitment_age + self.safety_margin

    def explorer_url(self, tx_hash: str) -> Optional[str]:
        if not self.explorer_tx_url:
            return None
        return self.explorer_tx_url.format(tx=tx_hash)

    @classmethod
    def from_mapping(cls, name: str, data: Dict[str, Any]) -> "NetworkProfile":
        def _resolve(*keys: str, default: Any = None) -> Any:
            for key in keys:
                if key in data:
                    return data[key]
            return default

        chain_id = _resolve("chainId", "chain_id")
        if chain_id is None:
            raise UnsupportedNetwork(f"No ENS configuration found for network {name!r}")
        return cls(
            name=name,
            chain_id=int(chain_id),
            controller=str(_resolve("controller", "registrarController")),
            public_resolver=str(_resolve("publicResolver", "public_resolver")),
            min_commitment_age=int(_resolve("minCommitmentAgeSeconds", "min_commitment_age", default=60)),
            max_commitment_age=int(_resolve("maxCommitmentAgeSeconds", "max_commitment_age", default=86_400)),
            safety_margin=int(_resolve("commitmentSafetyMarginSeconds", "safety_margin", default=5)),
            value_buffer_pct=int(_resolve("valueBufferPct", "value_buffer_pct", default=10)),
            confirmation_timeout=int(_resolve("confirmationTimeoutSeconds", "confirmation_timeout", default=300)),
            min_registration_seconds=int(_resolve("minRegistrationSeconds", default=2_419_200)),
            request_timeout=int(_resolve("requestTimeoutSeconds", default=30)),
            explorer_tx_url=_resolve("explorerTxUrl"),
        )


@dataclass
class RegistrarSettings:
    """Connection settings plus the network profile they target."""

    network: str
    rpc_url: str
    profile: NetworkProfile
    private_key: Optional[str] = field(default=None, repr=False)

    @property
    def can_sign(self) -> bool:
        return bool(self.private_key)


def load_network_profile(
    network: str,
    *,
    profile: Optional[str] = None,
    root: Optional[Path] = None,
) -> NetworkProfile:
    """Load the layered ``ens`` configuration for ``network``."""

    if network not in SUPPORTED_NETWORKS:
        raise UnsupportedNetwork(
            f"Unsupported network {network!r}; expected one of {', '.join(SUPPORTED_NETWORKS)}"
        )
    data = load_config("ens", network=network, profile=profile, root=root)
    try:
        return NetworkProfile.from_mapping(network, data)
    except ValueError as exc:
        raise UnsupportedNetwork(f"Invalid ENS configuration for {network}: {exc}") from exc


def resolve_settings(
    *,
    network: Optional[str] = None,
    rpc_url: Optional[str] = None,
    private_key: Optional[str] = None,
    require_signer: bool = True,
    env: Optional[Mapping[str, str]] = None,
    config_profile: Optional[str] = None,
    config_root: Optional[Path] = None,
) -> RegistrarSettings:
    """Assemble settings from explicit overrides, then the environment.

    There is no default endpoint or signing key. Read-only callers pass
    ``require_signer=False`` so a missing key is not an error for them.
    """

    source = os.environ if env is None else env
    chosen_network = (network or _first_env(source, _NETWORK_KEYS) or DEFAULT_NETWORK).strip().lower()
    endpoint = rpc_url or _first_env(source, _RPC_KEYS)
    if not endpoint:
        raise MissingRpcEndpoint("RPC endpoint is not configured")
    key = private_key or _first_env(source, _KEY_KEYS)
    if require_signer and not key:
        raise MissingSigningKey("PRIVATE_KEY is not configured; a signing key is required to register names")
    profile = load_network_profile(chosen_network, profile=config_profile, root=config_root)
    return RegistrarSettings(network=chosen_network, rpc_url=endpoint, profile=profile, private_key=key)


__all__ = [
    "DEFAULT_NETWORK",
    "NetworkProfile",
    "RegistrarSettings",
    "SUPPORTED_NETWORKS",
    "load_network_profile",
    "resolve_settings",
]
