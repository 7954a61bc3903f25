"""
Chain access capability consumed by the verifier and the settler.

:class:`ChainAccess` splits into RPC operations, which subclasses provide,
and the pure hashing/curve operations, which every implementation shares.
:class:`StarknetChainAccess` is the production implementation on top of
``starknet-py``.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Mapping, Optional, Sequence, Tuple

from starknet_py.hash.selector import get_selector_from_name
from starknet_py.net.account.account import Account
from starknet_py.net.client_errors import ClientError
from starknet_py.net.client_models import Call, TransactionExecutionStatus
from starknet_py.net.full_node_client import FullNodeClient
from starknet_py.net.models import StarknetChainId

from .hashing import legacy_payment_hash, typed_payment_hash, verify_hash_signature
from .identity import FacilitatorIdentity
from .networks import SN_SEPOLIA, to_felt

__all__ = [
    "ChainAccess",
    "ChainError",
    "ContractCall",
    "ExecutionStatus",
    "StarknetChainAccess",
    "TransactionNotFoundError",
    "TransactionReceipt",
]

# JSON-RPC error code for TXN_HASH_NOT_FOUND.
_TXN_HASH_NOT_FOUND = 29


class ChainError(Exception):
    """Raised for chain-level failures the caller may want to tell apart."""


class TransactionNotFoundError(ChainError):
    """The queried node has not seen the transaction yet."""


class ExecutionStatus(str, Enum):
    SUCCEEDED = "SUCCEEDED"
    REVERTED = "REVERTED"
    PENDING = "PENDING"


@dataclass(frozen=True)
class ContractCall:
    contract_address: str
    entrypoint: str
    calldata: Tuple[int, ...] = ()


@dataclass(frozen=True)
class TransactionReceipt:
    tx_hash: str
    status: ExecutionStatus
    revert_reason: Optional[str] = None


class ChainAccess(ABC):
    @abstractmethod
    async def call(self, call: ContractCall) -> List[int]:
        """Run a read-only contract call and return the raw result words."""

    @abstractmethod
    async def execute(self, identity: FacilitatorIdentity, call: ContractCall) -> str:
        """Sign and submit ``call`` from ``identity``; return the tx hash."""

    @abstractmethod
    async def get_transaction_receipt(self, tx_hash: str) -> TransactionReceipt:
        """
        Look up the execution status of ``tx_hash``.

        Raises :class:`TransactionNotFoundError` while the transaction has not
        propagated to the node.
        """

    def typed_message_hash(self, message: Mapping[str, Any], chain_id: int) -> int:
        return typed_payment_hash(message, chain_id)

    def legacy_message_hash(self, message: Mapping[str, Any]) -> int:
        return legacy_payment_hash(message)

    def verify_ec_signature(
        self,
        message_hash: int,
        signature: Sequence[int],
        public_key: int,
    ) -> bool:
        return verify_hash_signature(message_hash, signature, public_key)


class StarknetChainAccess(ChainAccess):
    def __init__(
        self,
        rpc_url: Optional[str] = None,
        *,
        chain_id: int = SN_SEPOLIA,
        client: Optional[FullNodeClient] = None,
    ) -> None:
        if client is None:
            if not rpc_url:
                raise ValueError("Either rpc_url or client must be provided")
            client = FullNodeClient(node_url=rpc_url)
        self.client = client
        self.chain_id = chain_id

    @staticmethod
    def _to_rpc_call(call: ContractCall) -> Call:
        return Call(
            to_addr=to_felt(call.contract_address),
            selector=get_selector_from_name(call.entrypoint),
            calldata=list(call.calldata),
        )

    async def call(self, call: ContractCall) -> List[int]:
        return await self.client.call_contract(
            call=self._to_rpc_call(call), block_number="latest"
        )

    async def execute(self, identity: FacilitatorIdentity, call: ContractCall) -> str:
        account = Account(
            address=identity.address,
            client=self.client,
            key_pair=identity.key_pair(),
            chain=StarknetChainId(self.chain_id),
        )
        response = await account.execute_v3(
            calls=[self._to_rpc_call(call)], auto_estimate=True
        )
        tx_hash = response.transaction_hash
        if not tx_hash:
            raise ChainError(f"No transaction hash returned for {call.entrypoint}")
        return hex(tx_hash)

    async def get_transaction_receipt(self, tx_hash: str) -> TransactionReceipt:
        try:
            receipt = await self.client.get_transaction_receipt(tx_hash=int(tx_hash, 16))
        except ClientError as exc:
            if exc.code == _TXN_HASH_NOT_FOUND or "not found" in exc.message.lower():
                raise TransactionNotFoundError(tx_hash) from exc
            raise

        if receipt.execution_status == TransactionExecutionStatus.SUCCEEDED:
            status = ExecutionStatus.SUCCEEDED
        elif receipt.execution_status == TransactionExecutionStatus.REVERTED:
            status = ExecutionStatus.REVERTED
        else:
            status = ExecutionStatus.PENDING
        logging.debug("Receipt for %s: %s", tx_hash, status.value)
        return TransactionReceipt(
            tx_hash=tx_hash,
            status=status,
            revert_reason=receipt.revert_reason,
        )
