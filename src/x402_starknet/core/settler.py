"""
On-chain settlement of verified payments.
"""

from __future__ import annotations

import logging
from typing import Optional

from .chain import (
    ChainAccess,
    ContractCall,
    ExecutionStatus,
    TransactionNotFoundError,
)
from .clock import Clock, SystemClock
from .identity import IdentityState
from .networks import to_felt, u256_to_words
from .types import PaymentPayload, PaymentRequirements, SettleResult

__all__ = [
    "DEFAULT_GAS_ESTIMATE",
    "DEFAULT_GAS_PRICE",
    "DEFAULT_MAX_WAIT_SECONDS",
    "DEFAULT_POLL_INTERVAL_SECONDS",
    "PaymentSettler",
    "SettlementError",
]

DEFAULT_POLL_INTERVAL_SECONDS = 2.0
DEFAULT_MAX_WAIT_SECONDS = 60.0

DEFAULT_GAS_ESTIMATE = 100_000
DEFAULT_GAS_PRICE = 1_000_000_000


class SettlementError(Exception):
    """Raised inside the settler for failures reported as ``SettleResult``."""


class PaymentSettler:
    """
    Execute verified payments from the facilitator account.

    The settler trusts that the payload was verified. It pulls ``amount`` of
    ``token`` from the payer with ``transfer_from``, which requires the payer
    to have approved the facilitator account as spender beforehand.
    """

    def __init__(
        self,
        chain: ChainAccess,
        identity: IdentityState,
        *,
        clock: Optional[Clock] = None,
        poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS,
        max_wait_seconds: float = DEFAULT_MAX_WAIT_SECONDS,
    ) -> None:
        self.chain = chain
        self.identity = identity
        self.clock = clock or SystemClock()
        self.poll_interval_seconds = poll_interval_seconds
        self.max_wait_seconds = max_wait_seconds

    async def settle(
        self,
        payload: PaymentPayload,
        requirements: PaymentRequirements,
    ) -> SettleResult:
        network = requirements.network
        tx_hash: Optional[str] = None
        try:
            tx_hash = await self._submit(payload)
            await self._wait_for_transaction(tx_hash)
        except Exception as exc:  # noqa: BLE001
            logging.error("Settlement error: %s", exc)
            return SettleResult.failed(
                str(exc) or "Settlement failed", network, tx_hash=tx_hash
            )
        return SettleResult.settled(tx_hash, network)

    async def _submit(self, payload: PaymentPayload) -> str:
        identity = self.identity.identity
        if identity is None:
            raise SettlementError("Facilitator account not initialized")

        low, high = u256_to_words(payload.amount)
        call = ContractCall(
            contract_address=payload.token,
            entrypoint="transfer_from",
            calldata=(to_felt(payload.from_), to_felt(payload.to), low, high),
        )
        # Submitted exactly once; only confirmation is polled.
        tx_hash = await self.chain.execute(identity, call)
        logging.info("Settlement transaction submitted: %s", tx_hash)
        return tx_hash

    async def _wait_for_transaction(self, tx_hash: str) -> None:
        started = self.clock.now()
        while self.clock.now() - started < self.max_wait_seconds:
            try:
                receipt = await self.chain.get_transaction_receipt(tx_hash)
            except TransactionNotFoundError:
                await self.clock.sleep(self.poll_interval_seconds)
                continue

            if receipt.status is ExecutionStatus.SUCCEEDED:
                logging.info("Transaction %s confirmed", tx_hash)
                return
            if receipt.status is ExecutionStatus.REVERTED:
                raise SettlementError(
                    f"Transaction reverted: {receipt.revert_reason or 'Unknown reason'}"
                )
            await self.clock.sleep(self.poll_interval_seconds)

        raise SettlementError("Transaction confirmation timeout")

    async def estimate_gas(self, payload: PaymentPayload) -> int:
        return DEFAULT_GAS_ESTIMATE

    async def gas_price(self) -> int:
        return DEFAULT_GAS_PRICE
