"""Shared pytest fixtures for x402_starknet tests."""

from typing import Dict, List, Optional, Set, Tuple, Union

import pytest
from starknet_py.hash.utils import private_to_stark_key

from x402_starknet.core.chain import (
    ChainAccess,
    ChainError,
    ContractCall,
    ExecutionStatus,
    TransactionNotFoundError,
    TransactionReceipt,
)
from x402_starknet.core.identity import FacilitatorIdentity, IdentityState
from x402_starknet.core.networks import normalize_address, to_felt, u256_to_words
from x402_starknet.core.payloads import build_payment_payload
from x402_starknet.core.types import PaymentRequirements

NOW = 1_760_000_000

PAYER = normalize_address("0xa11ce")
PAY_TO = normalize_address("0xb0b")
USDC = normalize_address("0x053c91253bc9682c04929ca02ed00b3e423f6710d2ee7e0d5ebb06f3ecf368a8")
FACILITATOR = normalize_address("0xfac")

PAYER_KEY = 0x2DCCCE1DE3D3C1B6D5E0B8F3F1C2A4B5C6D7E8F90A1B2C3D4E5F60718293A4B
FACILITATOR_KEY = 0x1F2E3D4C5B6A798897A6B5C4D3E2F1

# SNIP-6 magic value: short string "VALID".
SNIP6_VALID = 0x56414C4944


class FakeClock:
    def __init__(self, start: float = NOW) -> None:
        self.current = float(start)
        self.sleeps: List[float] = []

    def now(self) -> float:
        return self.current

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.current += seconds


ReceiptStep = Union[TransactionReceipt, Exception]


class FakeChain(ChainAccess):
    """
    Scripted chain: account contracts, public keys and balances are plain
    dictionaries; hashing and curve checks are the real ones.
    """

    def __init__(self) -> None:
        self.calls: List[ContractCall] = []
        self.public_keys: Dict[int, int] = {}
        self.snip6_accounts: Set[int] = set()
        self.balances: Dict[Tuple[int, int], int] = {}
        self.processor_nonces: Dict[int, int] = {}
        self.call_errors: Dict[str, Exception] = {}
        self.executed: List[Tuple[FacilitatorIdentity, ContractCall]] = []
        self.execute_error: Optional[Exception] = None
        self.tx_hash = "0x7a11ed"
        self.receipts: List[ReceiptStep] = []
        self.receipt_queries = 0

    def add_account(self, address: str, private_key: int, *, snip6: bool = True) -> None:
        felt = to_felt(address)
        self.public_keys[felt] = private_to_stark_key(private_key)
        if snip6:
            self.snip6_accounts.add(felt)

    def set_balance(self, token: str, owner: str, amount: int) -> None:
        self.balances[(to_felt(token), to_felt(owner))] = amount

    def entrypoints(self) -> List[str]:
        return [call.entrypoint for call in self.calls]

    async def call(self, call: ContractCall) -> List[int]:
        self.calls.append(call)
        if call.entrypoint in self.call_errors:
            raise self.call_errors[call.entrypoint]

        address = to_felt(call.contract_address)
        if call.entrypoint == "is_valid_signature":
            if address not in self.snip6_accounts:
                raise ChainError("Entry point is_valid_signature not found in contract")
            message_hash, _, r, s = call.calldata
            ok = self.verify_ec_signature(message_hash, [r, s], self.public_keys[address])
            return [SNIP6_VALID if ok else 0]
        if call.entrypoint == "get_public_key":
            if address not in self.public_keys:
                raise ChainError("Contract not found")
            return [self.public_keys[address]]
        if call.entrypoint == "balanceOf":
            low, high = u256_to_words(self.balances.get((address, call.calldata[0]), 0))
            return [low, high]
        if call.entrypoint == "get_nonce":
            low, high = u256_to_words(self.processor_nonces.get(call.calldata[0], 0))
            return [low, high]
        raise ChainError(f"Entry point {call.entrypoint} not found in contract")

    async def execute(self, identity: FacilitatorIdentity, call: ContractCall) -> str:
        self.executed.append((identity, call))
        if self.execute_error is not None:
            raise self.execute_error
        return self.tx_hash

    async def get_transaction_receipt(self, tx_hash: str) -> TransactionReceipt:
        self.receipt_queries += 1
        if not self.receipts:
            raise TransactionNotFoundError(tx_hash)
        step = self.receipts.pop(0) if len(self.receipts) > 1 else self.receipts[0]
        if isinstance(step, Exception):
            raise step
        return step


def receipt(status: ExecutionStatus, reason: Optional[str] = None) -> TransactionReceipt:
    return TransactionReceipt(tx_hash="0x7a11ed", status=status, revert_reason=reason)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def chain() -> FakeChain:
    fake = FakeChain()
    fake.add_account(PAYER, PAYER_KEY)
    fake.set_balance(USDC, PAYER, 10_000)
    return fake


@pytest.fixture
def requirements() -> PaymentRequirements:
    return PaymentRequirements(
        pay_to=PAY_TO,
        asset=USDC,
        max_amount_required=5000,
        max_timeout_seconds=300,
        network="starknet-sepolia",
        resource="https://api.example.com/chainstatus",
        description="Chain status",
        mime_type="application/json",
    )


@pytest.fixture
def payload(requirements):
    return build_payment_payload(
        requirements,
        payer_address=PAYER,
        payer_private_key=PAYER_KEY,
        amount=5000,
        now=NOW,
        nonce=1,
        timeout_seconds=60,
    )


@pytest.fixture
def identity() -> IdentityState:
    return IdentityState.ready(
        FacilitatorIdentity(address=FACILITATOR, private_key=FACILITATOR_KEY)
    )
