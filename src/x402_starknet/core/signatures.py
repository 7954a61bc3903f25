"""
Signature validation strategies for payment payloads.

Payers are Starknet accounts, so a payload signature is checked first by the
payer's own account contract (SNIP-6 ``is_valid_signature``). Accounts that
do not expose that entry point fall back to verifying the raw Stark-curve
signature against the key reported by ``get_public_key``.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional, Sequence

from .chain import ChainAccess, ContractCall
from .types import PaymentPayload

__all__ = [
    "AccountContractValidator",
    "PublicKeyValidator",
    "SignatureCheck",
    "SignatureValidator",
    "default_validators",
    "validate_signature",
]


class SignatureCheck(str, Enum):
    VALID = "valid"
    INVALID = "invalid"
    # The strategy cannot judge this account; try the next one.
    UNSUPPORTED = "unsupported"


class SignatureValidator(ABC):
    name: str = "validator"

    @abstractmethod
    async def check(
        self,
        chain: ChainAccess,
        payload: PaymentPayload,
        chain_id: int,
    ) -> SignatureCheck:
        ...


class AccountContractValidator(SignatureValidator):
    name = "account-contract"

    async def check(
        self,
        chain: ChainAccess,
        payload: PaymentPayload,
        chain_id: int,
    ) -> SignatureCheck:
        try:
            message_hash = chain.typed_message_hash(payload.message(), chain_id)
            result = await chain.call(
                ContractCall(
                    contract_address=payload.from_,
                    entrypoint="is_valid_signature",
                    calldata=(message_hash, 2, payload.signature.r, payload.signature.s),
                )
            )
        except Exception as exc:  # noqa: BLE001
            logging.info(
                "Account %s cannot validate signatures on-chain (%s); falling back",
                payload.from_,
                exc,
            )
            return SignatureCheck.UNSUPPORTED

        # SNIP-6 accounts answer the short string "VALID", older accounts answer 1.
        if result and int(result[0]) != 0:
            return SignatureCheck.VALID
        return SignatureCheck.INVALID


class PublicKeyValidator(SignatureValidator):
    name = "public-key"

    async def _public_key(self, chain: ChainAccess, address: str) -> Optional[int]:
        try:
            result = await chain.call(
                ContractCall(contract_address=address, entrypoint="get_public_key")
            )
        except Exception as exc:  # noqa: BLE001
            logging.warning("Error getting public key for %s: %s", address, exc)
            return None
        if result:
            return int(result[0])
        return None

    async def check(
        self,
        chain: ChainAccess,
        payload: PaymentPayload,
        chain_id: int,
    ) -> SignatureCheck:
        try:
            message_hash = chain.legacy_message_hash(payload.message())
            public_key = await self._public_key(chain, payload.from_)
            if not public_key:
                return SignatureCheck.INVALID
            ok = chain.verify_ec_signature(
                message_hash, payload.signature.as_list(), public_key
            )
        except Exception as exc:  # noqa: BLE001
            logging.error("Signature verification error: %s", exc)
            return SignatureCheck.INVALID
        return SignatureCheck.VALID if ok else SignatureCheck.INVALID


def default_validators() -> Sequence[SignatureValidator]:
    return (AccountContractValidator(), PublicKeyValidator())


async def validate_signature(
    chain: ChainAccess,
    payload: PaymentPayload,
    chain_id: int,
    validators: Sequence[SignatureValidator],
) -> bool:
    """
    Run ``validators`` in order until one reaches a verdict.

    An account no strategy can judge is treated as carrying a bad signature.
    """
    for validator in validators:
        outcome = await validator.check(chain, payload, chain_id)
        if outcome is SignatureCheck.UNSUPPORTED:
            continue
        logging.debug("Signature %s by %s validator", outcome.value, validator.name)
        return outcome is SignatureCheck.VALID
    return False
