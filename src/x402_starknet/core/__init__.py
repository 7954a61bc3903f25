"""
Core primitives that implement x402 verification and settlement on Starknet.
"""

from .chain import (
    ChainAccess,
    ChainError,
    ContractCall,
    ExecutionStatus,
    StarknetChainAccess,
    TransactionNotFoundError,
    TransactionReceipt,
)
from .client import FacilitatorClient
from .clock import Clock, SystemClock
from .config import ConfigError, FacilitatorConfig, load_facilitator_config
from .environment import FacilitatorEnvironment, build_environment, read_env_file
from .facilitator import Facilitator, parse_request
from .identity import FacilitatorIdentity, IdentityState, resolve_identity
from .nonces import FormatNonceValidator, NonceValidator, ProcessorNonceValidator
from .payloads import build_payment_payload, build_payment_request
from .settler import PaymentSettler, SettlementError
from .signatures import (
    AccountContractValidator,
    PublicKeyValidator,
    SignatureCheck,
    SignatureValidator,
)
from .types import (
    PayloadError,
    PaymentPayload,
    PaymentRequirements,
    SettleResult,
    Signature,
    VerifyResult,
)
from .verifier import PaymentVerifier

__all__ = [
    "AccountContractValidator",
    "ChainAccess",
    "ChainError",
    "Clock",
    "ConfigError",
    "ContractCall",
    "ExecutionStatus",
    "Facilitator",
    "FacilitatorClient",
    "FacilitatorConfig",
    "FacilitatorEnvironment",
    "FacilitatorIdentity",
    "FormatNonceValidator",
    "IdentityState",
    "NonceValidator",
    "PayloadError",
    "PaymentPayload",
    "PaymentRequirements",
    "PaymentSettler",
    "PaymentVerifier",
    "ProcessorNonceValidator",
    "PublicKeyValidator",
    "SettleResult",
    "SettlementError",
    "Signature",
    "SignatureCheck",
    "SignatureValidator",
    "StarknetChainAccess",
    "SystemClock",
    "TransactionNotFoundError",
    "TransactionReceipt",
    "VerifyResult",
    "build_environment",
    "build_payment_payload",
    "build_payment_request",
    "load_facilitator_config",
    "parse_request",
    "read_env_file",
    "resolve_identity",
]
