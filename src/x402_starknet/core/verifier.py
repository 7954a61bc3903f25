"""
Off-chain verification of Starknet x402 payment payloads.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from .chain import ChainAccess, ContractCall
from .clock import Clock, SystemClock
from .networks import (
    chain_id_for_network,
    is_valid_address,
    same_address,
    to_felt,
    u256_from_words,
)
from .nonces import FormatNonceValidator, NonceValidator
from .signatures import SignatureValidator, default_validators, validate_signature
from .types import PaymentPayload, PaymentRequirements, VerifyResult

__all__ = ["PaymentVerifier"]


class PaymentVerifier:
    """
    Decide whether a payload satisfies a set of payment requirements.

    Checks run in a fixed order and stop at the first failure, so cheap local
    checks always run before any chain query. Only read-only queries are
    issued.
    """

    def __init__(
        self,
        chain: ChainAccess,
        *,
        clock: Optional[Clock] = None,
        signature_validators: Optional[Sequence[SignatureValidator]] = None,
        nonce_validator: Optional[NonceValidator] = None,
    ) -> None:
        self.chain = chain
        self.clock = clock or SystemClock()
        self.signature_validators = (
            tuple(signature_validators)
            if signature_validators is not None
            else tuple(default_validators())
        )
        self.nonce_validator = nonce_validator or FormatNonceValidator()

    async def verify(
        self,
        payload: PaymentPayload,
        requirements: PaymentRequirements,
    ) -> VerifyResult:
        try:
            reason = await self._first_failure(payload, requirements)
        except Exception as exc:  # noqa: BLE001
            logging.error("Error verifying payment: %s", exc)
            reason = str(exc) or "Verification error"

        if reason is not None:
            logging.info("Payment from %s rejected: %s", payload.from_, reason)
            return VerifyResult.invalid(reason, payer=payload.from_)
        return VerifyResult.valid(payer=payload.from_)

    async def _first_failure(
        self,
        payload: PaymentPayload,
        requirements: PaymentRequirements,
    ) -> Optional[str]:
        if not is_valid_address(payload.from_):
            return "Invalid sender address"
        if not is_valid_address(payload.to):
            return "Invalid recipient address"
        if not is_valid_address(payload.token):
            return "Invalid token address"

        if not same_address(payload.to, requirements.pay_to):
            return "Recipient address does not match requirements"
        if not same_address(payload.token, requirements.asset):
            return "Token address does not match requirements"

        amount = payload.amount
        if amount > requirements.max_amount_required:
            return f"Amount {amount} exceeds maximum {requirements.max_amount_required}"
        if amount <= 0:
            return "Amount must be greater than zero"

        now = int(self.clock.now())
        if payload.deadline <= now:
            return "Payment deadline has expired"
        if payload.deadline - now > requirements.max_timeout_seconds:
            return "Payment deadline exceeds maximum timeout"

        chain_id = chain_id_for_network(requirements.network)
        if not await validate_signature(
            self.chain, payload, chain_id, self.signature_validators
        ):
            return "Invalid signature"

        if not await self.nonce_validator.is_valid(self.chain, payload):
            return "Invalid or already used nonce"

        if not await self._has_balance(payload.from_, payload.token, amount):
            return "Insufficient token balance"
        return None

    async def _has_balance(self, address: str, token: str, amount: int) -> bool:
        # Advisory only: the balance may still change before settlement.
        try:
            result = await self.chain.call(
                ContractCall(
                    contract_address=token,
                    entrypoint="balanceOf",
                    calldata=(to_felt(address),),
                )
            )
        except Exception as exc:  # noqa: BLE001
            logging.warning("Balance check error for %s: %s", address, exc)
            return False

        if len(result) < 2:
            return False
        return u256_from_words(int(result[0]), int(result[1])) >= amount
