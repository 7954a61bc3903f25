"""
Configuration for a Starknet x402 facilitator.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from eth_utils import add_0x_prefix

from .environment import FacilitatorEnvironment, build_environment
from .identity import IdentityState, resolve_identity
from .networks import (
    STARKNET_SEPOLIA,
    chain_id_for_network,
    is_valid_address,
    normalize_address,
)
from .settler import DEFAULT_MAX_WAIT_SECONDS, DEFAULT_POLL_INTERVAL_SECONDS

__all__ = [
    "ConfigError",
    "FacilitatorConfig",
    "load_facilitator_config",
]

DEFAULT_FACILITATOR_URL = "http://localhost:3001/api/facilitator"

_PARAMETER_TO_ENV_KEY = {
    "rpc_url": "STARKNET_RPC_URL",
    "network": "NETWORK",
    "account_address": "FACILITATOR_ACCOUNT_ADDRESS",
    "private_key": "FACILITATOR_PRIVATE_KEY",
    "facilitator_url": "FACILITATOR_URL",
    "processor_address": "PAYMENT_PROCESSOR_ADDRESS",
    "poll_interval_seconds": "SETTLE_POLL_INTERVAL_SECONDS",
    "max_wait_seconds": "SETTLE_MAX_WAIT_SECONDS",
}


class ConfigError(ValueError):
    """Raised when the supplied configuration is invalid."""


def _positive_seconds(raw: Optional[str], key: str, default: float) -> float:
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigError(f"{key} must be a number of seconds, got '{raw}'") from exc
    if value <= 0:
        raise ConfigError(f"{key} must be greater than zero")
    return value


def _normalize_url(raw: Optional[str], key: str) -> str:
    if not raw:
        raise ConfigError(f"{key} must be provided")
    if not raw.startswith(("http://", "https://")):
        raise ConfigError(f"{key} must be an http(s) URL, got '{raw}'")
    return raw.rstrip("/")


def _optional_address(raw: Optional[str], key: str) -> Optional[str]:
    if raw is None:
        return None
    value = add_0x_prefix(raw)
    if not is_valid_address(value):
        raise ConfigError(f"{key} is not a valid Starknet address")
    return normalize_address(value)


@dataclass(frozen=True)
class FacilitatorConfig:
    rpc_url: str
    network: str = STARKNET_SEPOLIA
    account_address: Optional[str] = None
    private_key: Optional[str] = field(default=None, repr=False)
    facilitator_url: str = DEFAULT_FACILITATOR_URL
    processor_address: Optional[str] = None
    poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS
    max_wait_seconds: float = DEFAULT_MAX_WAIT_SECONDS

    @property
    def chain_id(self) -> int:
        return chain_id_for_network(self.network)

    def identity_state(self) -> IdentityState:
        return resolve_identity(self.account_address, self.private_key)

    @classmethod
    def from_mapping(cls, values: Mapping[str, str]) -> "FacilitatorConfig":
        env = FacilitatorEnvironment(values)

        rpc_url = _normalize_url(env.get("STARKNET_RPC_URL"), "STARKNET_RPC_URL")
        facilitator_url = _normalize_url(
            env.get("FACILITATOR_URL", DEFAULT_FACILITATOR_URL), "FACILITATOR_URL"
        )

        return cls(
            rpc_url=rpc_url,
            network=env.get("NETWORK", STARKNET_SEPOLIA),
            # Identity problems are reported by identity_state(), not here.
            account_address=env.get("FACILITATOR_ACCOUNT_ADDRESS"),
            private_key=env.get("FACILITATOR_PRIVATE_KEY"),
            facilitator_url=facilitator_url,
            processor_address=_optional_address(
                env.get("PAYMENT_PROCESSOR_ADDRESS"), "PAYMENT_PROCESSOR_ADDRESS"
            ),
            poll_interval_seconds=_positive_seconds(
                env.get("SETTLE_POLL_INTERVAL_SECONDS"),
                "SETTLE_POLL_INTERVAL_SECONDS",
                DEFAULT_POLL_INTERVAL_SECONDS,
            ),
            max_wait_seconds=_positive_seconds(
                env.get("SETTLE_MAX_WAIT_SECONDS"),
                "SETTLE_MAX_WAIT_SECONDS",
                DEFAULT_MAX_WAIT_SECONDS,
            ),
        )

    @classmethod
    def from_env(
        cls,
        *,
        env_file: Optional[str] = ".env",
        overrides: Optional[Mapping[str, str]] = None,
        base: Optional[Mapping[str, str]] = None,
        **parameters: Any,
    ) -> "FacilitatorConfig":
        merged: Dict[str, str] = dict(overrides or {})
        for name, value in parameters.items():
            if value is None:
                continue
            try:
                env_key = _PARAMETER_TO_ENV_KEY[name]
            except KeyError as exc:
                raise TypeError(f"Unknown facilitator parameter '{name}'") from exc
            merged[env_key] = str(value)

        environment = build_environment(env_file=env_file, base=base, overrides=merged)
        return cls.from_mapping(environment.variables)


def load_facilitator_config(
    *,
    env_file: Optional[str] = ".env",
    overrides: Optional[Mapping[str, str]] = None,
    base: Optional[Mapping[str, str]] = None,
    rpc_url: Optional[str] = None,
    network: Optional[str] = None,
    account_address: Optional[str] = None,
    private_key: Optional[str] = None,
    facilitator_url: Optional[str] = None,
    processor_address: Optional[str] = None,
    poll_interval_seconds: Optional[float] = None,
    max_wait_seconds: Optional[float] = None,
) -> FacilitatorConfig:
    """
    Convenience wrapper that mirrors :meth:`FacilitatorConfig.from_env`.

    Keyword arguments take precedence over ``overrides``, which take
    precedence over the environment and the ``.env`` file.
    """
    return FacilitatorConfig.from_env(
        env_file=env_file,
        overrides=overrides,
        base=base,
        rpc_url=rpc_url,
        network=network,
        account_address=account_address,
        private_key=private_key,
        facilitator_url=facilitator_url,
        processor_address=processor_address,
        poll_interval_seconds=poll_interval_seconds,
        max_wait_seconds=max_wait_seconds,
    )
