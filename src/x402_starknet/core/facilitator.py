"""
The facilitator: verification and settlement behind one object.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional, Tuple

from .chain import ChainAccess, StarknetChainAccess
from .clock import Clock
from .config import FacilitatorConfig
from .identity import IdentityState
from .nonces import FormatNonceValidator, NonceValidator, ProcessorNonceValidator
from .settler import PaymentSettler
from .types import (
    X402_VERSION,
    PayloadError,
    PaymentPayload,
    PaymentRequirements,
    SettleResult,
    VerifyResult,
)
from .verifier import PaymentVerifier

__all__ = ["Facilitator", "SCHEME", "parse_request"]

SCHEME = "exact"


def parse_request(
    body: Mapping[str, Any],
) -> Tuple[PaymentPayload, PaymentRequirements]:
    """
    Split a ``{x402Version, paymentPayload, paymentRequirements}`` body.
    """
    if not isinstance(body, Mapping):
        raise PayloadError("Request body must be an object")
    version = body.get("x402Version", X402_VERSION)
    if version != X402_VERSION:
        raise PayloadError(f"Unsupported x402Version {version!r}")
    payload = PaymentPayload.from_dict(body.get("paymentPayload"))
    requirements = PaymentRequirements.from_dict(body.get("paymentRequirements"))
    return payload, requirements


class Facilitator:
    def __init__(
        self,
        verifier: PaymentVerifier,
        settler: PaymentSettler,
        *,
        network: str,
    ) -> None:
        self.verifier = verifier
        self.settler = settler
        self.network = network

    @classmethod
    def from_config(
        cls,
        config: FacilitatorConfig,
        *,
        chain: Optional[ChainAccess] = None,
        clock: Optional[Clock] = None,
        identity: Optional[IdentityState] = None,
    ) -> "Facilitator":
        if chain is None:
            chain = StarknetChainAccess(config.rpc_url, chain_id=config.chain_id)
        nonce_validator: NonceValidator
        if config.processor_address:
            nonce_validator = ProcessorNonceValidator(config.processor_address)
        else:
            nonce_validator = FormatNonceValidator()

        verifier = PaymentVerifier(chain, clock=clock, nonce_validator=nonce_validator)
        settler = PaymentSettler(
            chain,
            identity if identity is not None else config.identity_state(),
            clock=clock,
            poll_interval_seconds=config.poll_interval_seconds,
            max_wait_seconds=config.max_wait_seconds,
        )
        return cls(verifier, settler, network=config.network)

    @property
    def can_settle(self) -> bool:
        return self.settler.identity.available

    def supported(self) -> Dict[str, Any]:
        return {
            "kinds": [
                {
                    "x402Version": X402_VERSION,
                    "scheme": SCHEME,
                    "network": self.network,
                }
            ]
        }

    async def verify(
        self,
        payload: PaymentPayload,
        requirements: PaymentRequirements,
    ) -> VerifyResult:
        if requirements.scheme != SCHEME:
            return VerifyResult.invalid(
                f"Unsupported scheme '{requirements.scheme}'", payer=payload.from_
            )
        return await self.verifier.verify(payload, requirements)

    async def settle(
        self,
        payload: PaymentPayload,
        requirements: PaymentRequirements,
    ) -> SettleResult:
        return await self.settler.settle(payload, requirements)

    async def verify_and_settle(
        self,
        payload: PaymentPayload,
        requirements: PaymentRequirements,
    ) -> Tuple[VerifyResult, Optional[SettleResult]]:
        """Settle only when verification accepts the payload."""
        verification = await self.verify(payload, requirements)
        if not verification.is_valid:
            return verification, None
        return verification, await self.settle(payload, requirements)

    async def verify_request(self, body: Mapping[str, Any]) -> VerifyResult:
        try:
            payload, requirements = parse_request(body)
        except PayloadError as exc:
            logging.info("Rejecting malformed verify request: %s", exc)
            return VerifyResult.invalid(f"Malformed payment request: {exc}")
        return await self.verify(payload, requirements)

    async def settle_request(self, body: Mapping[str, Any]) -> SettleResult:
        try:
            payload, requirements = parse_request(body)
        except PayloadError as exc:
            logging.info("Rejecting malformed settle request: %s", exc)
            network = self.network
            if isinstance(body, Mapping):
                raw = body.get("paymentRequirements")
                if isinstance(raw, Mapping) and isinstance(raw.get("network"), str):
                    network = raw["network"]
            return SettleResult.failed(f"Malformed payment request: {exc}", network)
        return await self.settle(payload, requirements)
