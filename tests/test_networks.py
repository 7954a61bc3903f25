"""Tests for address and network helpers."""

import pytest

from x402_starknet.core.networks import (
    MAX_U256,
    SN_MAIN,
    SN_SEPOLIA,
    chain_id_for_network,
    is_valid_address,
    normalize_address,
    same_address,
    u256_from_words,
    u256_to_words,
)


@pytest.mark.parametrize(
    "address",
    [
        "0x1",
        "0x" + "f" * 64,
        "abcdef",
        "0x049D36570D4e46f48e99674bd3fcc84644DdD6b96F7C741B1562B82f9e004dC7",
    ],
)
def test_valid_addresses(address):
    assert is_valid_address(address) is True


@pytest.mark.parametrize(
    "address",
    [None, "", "0x", "0x" + "f" * 65, "0xg1", "0x12 34", "0X12", 1234],
)
def test_invalid_addresses(address):
    assert is_valid_address(address) is False


def test_normalize_address_pads_and_lowercases():
    assert normalize_address("0xABC") == "0x" + "0" * 61 + "abc"


def test_same_address_compares_felt_values():
    assert same_address("0x0ABC", "0xabc") is True
    assert same_address("0xabc", "0xabd") is False
    assert same_address("0xabc", None) is False


@pytest.mark.parametrize(
    "network, chain_id",
    [
        ("starknet-mainnet", SN_MAIN),
        ("STARKNET-MAIN", SN_MAIN),
        ("starknet-sepolia", SN_SEPOLIA),
        ("anything-else", SN_SEPOLIA),
    ],
)
def test_chain_id_for_network(network, chain_id):
    assert chain_id_for_network(network) == chain_id


def test_u256_words():
    assert u256_to_words(5) == (5, 0)
    assert u256_to_words((3 << 128) + 7) == (7, 3)
    assert u256_from_words(7, 3) == (3 << 128) + 7


def test_u256_rejects_out_of_range():
    with pytest.raises(ValueError):
        u256_to_words(MAX_U256 + 1)
    with pytest.raises(ValueError):
        u256_to_words(-1)
