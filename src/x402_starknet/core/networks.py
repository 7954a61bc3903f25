"""
Starknet network identifiers and the felt helpers shared by the core.
"""

from __future__ import annotations

import re
from typing import Any, Optional, Tuple

from eth_utils import add_0x_prefix, remove_0x_prefix

__all__ = [
    "FIELD_PRIME",
    "MAX_U256",
    "SN_MAIN",
    "SN_SEPOLIA",
    "STARKNET_MAINNET",
    "STARKNET_SEPOLIA",
    "chain_id_for_network",
    "is_valid_address",
    "normalize_address",
    "same_address",
    "to_felt",
    "u256_from_words",
    "u256_to_words",
]

STARKNET_MAINNET = "starknet-mainnet"
STARKNET_SEPOLIA = "starknet-sepolia"

# Short-string encodings of "SN_MAIN" and "SN_SEPOLIA".
SN_MAIN = 0x534E5F4D41494E
SN_SEPOLIA = 0x534E5F5345504F4C4941

FIELD_PRIME = 2**251 + 17 * 2**192 + 1
MAX_U256 = 2**256 - 1

_HEX_DIGITS = re.compile(r"^[0-9a-fA-F]+$")
_U128_MASK = (1 << 128) - 1


def chain_id_for_network(network: str) -> int:
    if "main" in str(network).lower():
        return SN_MAIN
    return SN_SEPOLIA


def is_valid_address(address: Any) -> bool:
    """
    Format check only: up to 32 bytes of hex digits, optional ``0x`` prefix.
    """
    if not address or not isinstance(address, str):
        return False
    digits = remove_0x_prefix(address) if address.startswith("0x") else address
    if not _HEX_DIGITS.match(digits):
        return False
    return len(digits) <= 64


def to_felt(address: str) -> int:
    if not is_valid_address(address):
        raise ValueError(f"'{address}' is not a valid Starknet address")
    return int(address, 16)


def normalize_address(address: str) -> str:
    """Return the zero-padded, lowercase ``0x`` form of ``address``."""
    return add_0x_prefix(format(to_felt(address), "064x"))


def same_address(left: Optional[str], right: Optional[str]) -> bool:
    if not is_valid_address(left) or not is_valid_address(right):
        return False
    return to_felt(left) == to_felt(right)  # type: ignore[arg-type]


def u256_to_words(value: int) -> Tuple[int, int]:
    """Split ``value`` into the ``(low, high)`` u128 words Cairo expects."""
    if value < 0 or value > MAX_U256:
        raise ValueError(f"{value} does not fit in a u256")
    return value & _U128_MASK, value >> 128


def u256_from_words(low: int, high: int) -> int:
    return low + (high << 128)
