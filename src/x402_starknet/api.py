"""
Public, high-level helpers for running an x402 Starknet facilitator.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Tuple

from .core.chain import ChainAccess
from .core.clock import Clock
from .core.config import ConfigError, FacilitatorConfig, load_facilitator_config
from .core.facilitator import Facilitator, parse_request
from .core.types import PayloadError, SettleResult, VerifyResult

__all__ = [
    "ConfigError",
    "create_facilitator",
    "process_payment",
]


def create_facilitator(
    *,
    config: Optional[FacilitatorConfig] = None,
    chain: Optional[ChainAccess] = None,
    clock: Optional[Clock] = None,
    env_file: Optional[str] = ".env",
    overrides: Optional[Mapping[str, str]] = None,
    base: Optional[Mapping[str, str]] = None,
    rpc_url: Optional[str] = None,
    network: Optional[str] = None,
    account_address: Optional[str] = None,
    private_key: Optional[str] = None,
) -> Facilitator:
    """
    Construct a :class:`Facilitator`.

    Callers can either supply a ready-made :class:`FacilitatorConfig` or let
    the helper assemble one from environment data.
    """
    if config is not None:
        extras = (overrides, base, rpc_url, network, account_address, private_key)
        if any(item is not None and item != {} for item in extras):
            raise ValueError(
                "Provide either a pre-built FacilitatorConfig or individual parameters, not both."
            )
        cfg = config
    else:
        cfg = load_facilitator_config(
            env_file=env_file,
            overrides=overrides,
            base=base,
            rpc_url=rpc_url,
            network=network,
            account_address=account_address,
            private_key=private_key,
        )
    return Facilitator.from_config(cfg, chain=chain, clock=clock)


async def process_payment(
    facilitator: Facilitator,
    body: Mapping[str, Any],
    *,
    verify_only: bool = False,
) -> Tuple[VerifyResult, Optional[SettleResult]]:
    """
    Verify a wire request and, unless ``verify_only``, settle it.
    """
    try:
        payload, requirements = parse_request(body)
    except PayloadError as exc:
        return VerifyResult.invalid(f"Malformed payment request: {exc}"), None

    if verify_only:
        return await facilitator.verify(payload, requirements), None
    return await facilitator.verify_and_settle(payload, requirements)
