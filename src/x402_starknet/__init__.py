"""
Public facade for the x402 Starknet facilitator package.

The module re-exports the most useful pieces for integrators so they can
``from x402_starknet import ...`` without navigating the package.
"""

from .api import create_facilitator, process_payment
from .core import (
    ChainAccess,
    ConfigError,
    Facilitator,
    FacilitatorClient,
    FacilitatorConfig,
    IdentityState,
    PayloadError,
    PaymentPayload,
    PaymentRequirements,
    PaymentSettler,
    PaymentVerifier,
    SettleResult,
    Signature,
    StarknetChainAccess,
    VerifyResult,
    build_payment_payload,
    build_payment_request,
    load_facilitator_config,
)

__all__ = (
    "ChainAccess",
    "ConfigError",
    "Facilitator",
    "FacilitatorClient",
    "FacilitatorConfig",
    "IdentityState",
    "PayloadError",
    "PaymentPayload",
    "PaymentRequirements",
    "PaymentSettler",
    "PaymentVerifier",
    "SettleResult",
    "Signature",
    "StarknetChainAccess",
    "VerifyResult",
    "build_payment_payload",
    "build_payment_request",
    "create_facilitator",
    "load_facilitator_config",
    "process_payment",
)
