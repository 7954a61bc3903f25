"""
Helpers for constructing signed payment payloads on the paying side.
"""

from __future__ import annotations

import secrets
import time
from typing import Any, Dict, Optional

from .hashing import legacy_payment_hash, sign_hash, typed_payment_hash
from .networks import FIELD_PRIME, chain_id_for_network, normalize_address
from .types import X402_VERSION, PaymentPayload, PaymentRequirements, Signature

__all__ = [
    "build_payment_payload",
    "build_payment_request",
]


def build_payment_payload(
    requirements: PaymentRequirements,
    *,
    payer_address: str,
    payer_private_key: int,
    amount: Optional[int] = None,
    now: Optional[int] = None,
    nonce: Optional[int] = None,
    timeout_seconds: Optional[int] = None,
    legacy_hash: bool = False,
) -> PaymentPayload:
    """
    Sign a ``Payment`` typed message answering ``requirements``.

    ``amount`` defaults to ``maxAmountRequired`` and the deadline to
    ``now + maxTimeoutSeconds``. With ``legacy_hash`` the signature covers the
    hash-on-elements digest expected by plain public-key accounts.
    """
    now = int(time.time()) if now is None else now
    nonce = secrets.randbelow(FIELD_PRIME) if nonce is None else nonce
    timeout = (
        requirements.max_timeout_seconds if timeout_seconds is None else timeout_seconds
    )

    message = {
        "from": normalize_address(payer_address),
        "to": normalize_address(requirements.pay_to),
        "token": normalize_address(requirements.asset),
        "amount": requirements.max_amount_required if amount is None else amount,
        "nonce": nonce,
        "deadline": now + timeout,
    }
    if legacy_hash:
        message_hash = legacy_payment_hash(message)
    else:
        message_hash = typed_payment_hash(
            message, chain_id_for_network(requirements.network)
        )
    r, s = sign_hash(message_hash, payer_private_key)

    return PaymentPayload(
        from_=message["from"],
        to=message["to"],
        token=message["token"],
        amount=message["amount"],
        nonce=message["nonce"],
        deadline=message["deadline"],
        signature=Signature(r=r, s=s),
    )


def build_payment_request(
    payload: PaymentPayload,
    requirements: PaymentRequirements,
) -> Dict[str, Any]:
    """Build the facilitator request body for ``/verify`` and ``/settle``."""
    return {
        "x402Version": X402_VERSION,
        "paymentPayload": payload.to_dict(),
        "paymentRequirements": requirements.to_dict(),
    }
