"""
Message hashing for x402 Starknet payments.

Two hashes exist for the same six fields: the SNIP-12 typed-data hash that
account contracts validate, and the legacy Pedersen hash-on-elements used by
plain public-key accounts.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Sequence, Tuple

from starknet_py.cairo.felt import encode_shortstring
from starknet_py.hash.utils import (
    compute_hash_on_elements,
    message_signature,
    verify_message_signature,
)
from starknet_py.utils.typed_data import TypedData

from .networks import to_felt

__all__ = [
    "DOMAIN_NAME",
    "DOMAIN_VERSION",
    "PAYMENT_FIELDS",
    "legacy_payment_hash",
    "payment_typed_data",
    "sign_hash",
    "typed_payment_hash",
    "verify_hash_signature",
]

DOMAIN_NAME = "x402 Payment"
DOMAIN_VERSION = "1"

PAYMENT_FIELDS = ("from", "to", "token", "amount", "nonce", "deadline")


def _message_felts(message: Mapping[str, Any]) -> Tuple[int, ...]:
    return (
        to_felt(message["from"]),
        to_felt(message["to"]),
        to_felt(message["token"]),
        int(message["amount"]),
        int(message["nonce"]),
        int(message["deadline"]),
    )


def payment_typed_data(message: Mapping[str, Any], chain_id: int) -> Dict[str, Any]:
    """
    Build the revision-0 typed-data document for a payment message.

    Every value is rendered as a hex felt so short strings and numeric
    strings cannot be confused during encoding.
    """
    felts = _message_felts(message)
    return {
        "types": {
            "StarkNetDomain": [
                {"name": "name", "type": "felt"},
                {"name": "version", "type": "felt"},
                {"name": "chainId", "type": "felt"},
            ],
            "Payment": [{"name": name, "type": "felt"} for name in PAYMENT_FIELDS],
        },
        "primaryType": "Payment",
        "domain": {
            "name": hex(encode_shortstring(DOMAIN_NAME)),
            "version": hex(encode_shortstring(DOMAIN_VERSION)),
            "chainId": hex(chain_id),
        },
        "message": {name: hex(value) for name, value in zip(PAYMENT_FIELDS, felts)},
    }


def typed_payment_hash(message: Mapping[str, Any], chain_id: int) -> int:
    typed = TypedData.from_dict(payment_typed_data(message, chain_id))
    return typed.message_hash(to_felt(message["from"]))


def legacy_payment_hash(message: Mapping[str, Any]) -> int:
    return compute_hash_on_elements(list(_message_felts(message)))


def sign_hash(message_hash: int, private_key: int) -> Tuple[int, int]:
    r, s = message_signature(message_hash, private_key)
    return r, s


def verify_hash_signature(
    message_hash: int,
    signature: Sequence[int],
    public_key: int,
) -> bool:
    return verify_message_signature(message_hash, list(signature), public_key)
