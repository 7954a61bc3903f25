"""
The facilitator's own signing account.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from starknet_py.net.signer.stark_curve_signer import KeyPair

from .networks import is_valid_address, normalize_address

__all__ = ["FacilitatorIdentity", "IdentityState", "resolve_identity"]


@dataclass(frozen=True)
class FacilitatorIdentity:
    address: str
    private_key: int = field(repr=False)

    def key_pair(self) -> KeyPair:
        return KeyPair.from_private_key(self.private_key)


@dataclass(frozen=True)
class IdentityState:
    """
    Either a ready :class:`FacilitatorIdentity` or the reason it is missing.
    """

    identity: Optional[FacilitatorIdentity] = None
    reason: Optional[str] = None

    @property
    def available(self) -> bool:
        return self.identity is not None

    @classmethod
    def ready(cls, identity: FacilitatorIdentity) -> "IdentityState":
        return cls(identity=identity)

    @classmethod
    def unavailable(cls, reason: str) -> "IdentityState":
        return cls(reason=reason)


def _parse_private_key(raw_key: str) -> Optional[int]:
    key = raw_key.strip()
    digits = key[2:] if key.lower().startswith("0x") else key
    if not digits or len(digits) > 64:
        return None
    try:
        value = int(digits, 16)
    except ValueError:
        return None
    return value or None


def resolve_identity(
    account_address: Optional[str],
    private_key: Optional[str],
) -> IdentityState:
    """
    Build the settlement identity once at startup.

    Missing or malformed credentials leave settlement unavailable; they never
    prevent verification from running.
    """
    if not account_address or not private_key:
        logging.warning(
            "Missing facilitator account address/private key; settlement will not be available"
        )
        return IdentityState.unavailable("Facilitator account not configured")

    if not is_valid_address(account_address):
        logging.warning("Facilitator account address %s is malformed", account_address)
        return IdentityState.unavailable("Facilitator account address is malformed")

    key = _parse_private_key(private_key)
    if key is None:
        logging.warning("Facilitator private key is malformed; settlement disabled")
        return IdentityState.unavailable("Facilitator private key is malformed")

    identity = FacilitatorIdentity(
        address=normalize_address(account_address),
        private_key=key,
    )
    logging.info("Facilitator account %s initialized", identity.address)
    return IdentityState.ready(identity)
