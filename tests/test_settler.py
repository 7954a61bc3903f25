"""Tests for PaymentSettler."""

from dataclasses import replace

import pytest
from conftest import FACILITATOR, PAY_TO, PAYER, USDC, receipt

from x402_starknet.core.chain import ChainError, ExecutionStatus, TransactionNotFoundError
from x402_starknet.core.identity import IdentityState
from x402_starknet.core.settler import (
    DEFAULT_GAS_ESTIMATE,
    DEFAULT_GAS_PRICE,
    PaymentSettler,
)


@pytest.fixture
def settler(chain, identity, clock):
    return PaymentSettler(chain, identity, clock=clock)


@pytest.mark.asyncio
class TestSettle:
    async def test_successful_settlement(self, chain, settler, payload, requirements):
        chain.receipts = [receipt(ExecutionStatus.SUCCEEDED)]

        result = await settler.settle(payload, requirements)

        assert result.success is True
        assert result.tx_hash == "0x7a11ed"
        assert result.network_id == "starknet-sepolia"
        assert result.error is None

    async def test_transfer_from_is_executed_by_facilitator(
        self, chain, settler, payload, requirements
    ):
        chain.receipts = [receipt(ExecutionStatus.SUCCEEDED)]

        await settler.settle(payload, requirements)

        assert len(chain.executed) == 1
        identity, call = chain.executed[0]
        assert identity.address == FACILITATOR
        assert call.contract_address == USDC
        assert call.entrypoint == "transfer_from"
        assert call.calldata == (int(PAYER, 16), int(PAY_TO, 16), 5000, 0)

    async def test_amount_is_split_into_u256_words(self, chain, settler, payload, requirements):
        chain.receipts = [receipt(ExecutionStatus.SUCCEEDED)]

        await settler.settle(replace(payload, amount=(1 << 128) + 5), requirements)

        _, call = chain.executed[0]
        assert call.calldata[2:] == (5, 1)

    async def test_revert_reason_is_surfaced(self, chain, settler, payload, requirements):
        chain.receipts = [receipt(ExecutionStatus.REVERTED, "insufficient allowance")]

        result = await settler.settle(payload, requirements)

        assert result.success is False
        assert result.error == "Transaction reverted: insufficient allowance"
        assert result.tx_hash == "0x7a11ed"
        assert result.network_id == "starknet-sepolia"

    async def test_revert_without_reason(self, chain, settler, payload, requirements):
        chain.receipts = [receipt(ExecutionStatus.REVERTED)]

        result = await settler.settle(payload, requirements)

        assert result.error == "Transaction reverted: Unknown reason"

    async def test_not_found_is_retried(self, chain, clock, settler, payload, requirements):
        chain.receipts = [
            TransactionNotFoundError("0x7a11ed"),
            TransactionNotFoundError("0x7a11ed"),
            receipt(ExecutionStatus.SUCCEEDED),
        ]

        result = await settler.settle(payload, requirements)

        assert result.success is True
        assert chain.receipt_queries == 3
        assert clock.sleeps == [2.0, 2.0]

    async def test_pending_receipts_are_polled(self, chain, clock, settler, payload, requirements):
        chain.receipts = [
            receipt(ExecutionStatus.PENDING),
            receipt(ExecutionStatus.SUCCEEDED),
        ]

        result = await settler.settle(payload, requirements)

        assert result.success is True
        assert clock.sleeps == [2.0]

    async def test_confirmation_timeout(self, chain, clock, settler, payload, requirements):
        chain.receipts = [receipt(ExecutionStatus.PENDING)]

        result = await settler.settle(payload, requirements)

        assert result.success is False
        assert result.error == "Transaction confirmation timeout"
        assert result.tx_hash == "0x7a11ed"
        assert chain.receipt_queries == 30
        assert sum(clock.sleeps) == 60.0

    async def test_timeout_when_transaction_never_appears(
        self, chain, clock, identity, payload, requirements
    ):
        settler = PaymentSettler(
            chain, identity, clock=clock, poll_interval_seconds=5, max_wait_seconds=20
        )

        result = await settler.settle(payload, requirements)

        assert result.error == "Transaction confirmation timeout"
        assert chain.receipt_queries == 4

    async def test_other_receipt_errors_fail_settlement(self, chain, settler, payload, requirements):
        chain.receipts = [ChainError("rpc exploded")]

        result = await settler.settle(payload, requirements)

        assert result.success is False
        assert result.error == "rpc exploded"
        assert result.tx_hash == "0x7a11ed"
        assert chain.receipt_queries == 1

    async def test_submission_failure_is_not_retried(self, chain, settler, payload, requirements):
        chain.execute_error = ChainError("u256_sub Overflow")

        result = await settler.settle(payload, requirements)

        assert result.success is False
        assert result.error == "u256_sub Overflow"
        assert result.tx_hash is None
        assert len(chain.executed) == 1
        assert chain.receipt_queries == 0

    async def test_missing_identity_touches_no_chain(self, chain, clock, payload, requirements):
        settler = PaymentSettler(
            chain, IdentityState.unavailable("Facilitator account not configured"), clock=clock
        )

        result = await settler.settle(payload, requirements)

        assert result.success is False
        assert result.error == "Facilitator account not initialized"
        assert chain.executed == []
        assert chain.calls == []
        assert chain.receipt_queries == 0

    async def test_each_call_submits_again(self, chain, settler, payload, requirements):
        chain.receipts = [receipt(ExecutionStatus.SUCCEEDED)]

        await settler.settle(payload, requirements)
        await settler.settle(payload, requirements)

        assert len(chain.executed) == 2


@pytest.mark.asyncio
async def test_gas_placeholders(settler, payload):
    assert await settler.estimate_gas(payload) == DEFAULT_GAS_ESTIMATE
    assert await settler.gas_price() == DEFAULT_GAS_PRICE
