"""
Nonce checks applied during verification.

:class:`FormatNonceValidator` is the default and only checks that the nonce
is a felt; it does not detect replays. :class:`ProcessorNonceValidator`
compares against the next nonce a payment-processor contract expects.
"""

from __future__ import annotations

import logging
from typing import Protocol

from .chain import ChainAccess, ContractCall
from .networks import FIELD_PRIME, to_felt, u256_from_words
from .types import PaymentPayload

__all__ = ["FormatNonceValidator", "NonceValidator", "ProcessorNonceValidator"]


class NonceValidator(Protocol):
    async def is_valid(self, chain: ChainAccess, payload: PaymentPayload) -> bool:
        ...


class FormatNonceValidator:
    async def is_valid(self, chain: ChainAccess, payload: PaymentPayload) -> bool:
        return 0 <= payload.nonce < FIELD_PRIME


class ProcessorNonceValidator:
    def __init__(self, processor_address: str) -> None:
        self.processor_address = processor_address

    async def is_valid(self, chain: ChainAccess, payload: PaymentPayload) -> bool:
        if not 0 <= payload.nonce < FIELD_PRIME:
            return False
        try:
            result = await chain.call(
                ContractCall(
                    contract_address=self.processor_address,
                    entrypoint="get_nonce",
                    calldata=(to_felt(payload.from_),),
                )
            )
        except Exception as exc:  # noqa: BLE001
            logging.error("Nonce verification error: %s", exc)
            return False

        if len(result) >= 2:
            expected = u256_from_words(int(result[0]), int(result[1]))
        elif result:
            expected = int(result[0])
        else:
            return False
        return payload.nonce == expected
