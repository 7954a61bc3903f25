"""Tests for payment message hashing."""

from conftest import PAY_TO, PAYER, PAYER_KEY, USDC
from starknet_py.hash.utils import compute_hash_on_elements, private_to_stark_key

from x402_starknet.core.hashing import (
    legacy_payment_hash,
    payment_typed_data,
    sign_hash,
    typed_payment_hash,
    verify_hash_signature,
)
from x402_starknet.core.networks import SN_MAIN, SN_SEPOLIA

MESSAGE = {
    "from": PAYER,
    "to": PAY_TO,
    "token": USDC,
    "amount": 5000,
    "nonce": 1,
    "deadline": 1_760_000_060,
}


def test_typed_data_document_shape():
    typed = payment_typed_data(MESSAGE, SN_SEPOLIA)

    assert typed["primaryType"] == "Payment"
    assert [f["name"] for f in typed["types"]["Payment"]] == [
        "from",
        "to",
        "token",
        "amount",
        "nonce",
        "deadline",
    ]
    assert typed["domain"]["name"] == hex(int.from_bytes(b"x402 Payment", "big"))
    assert typed["domain"]["version"] == "0x31"
    assert typed["domain"]["chainId"] == hex(SN_SEPOLIA)
    assert typed["message"]["amount"] == hex(5000)


def test_typed_hash_is_domain_separated():
    assert typed_payment_hash(MESSAGE, SN_SEPOLIA) != typed_payment_hash(MESSAGE, SN_MAIN)


def test_typed_hash_accepts_unpadded_addresses():
    loose = dict(MESSAGE, to="0xb0b")

    assert typed_payment_hash(loose, SN_SEPOLIA) == typed_payment_hash(MESSAGE, SN_SEPOLIA)


def test_legacy_hash_covers_fields_in_order():
    expected = compute_hash_on_elements(
        [int(PAYER, 16), int(PAY_TO, 16), int(USDC, 16), 5000, 1, 1_760_000_060]
    )

    assert legacy_payment_hash(MESSAGE) == expected


def test_sign_and_verify_hash():
    message_hash = typed_payment_hash(MESSAGE, SN_SEPOLIA)
    r, s = sign_hash(message_hash, PAYER_KEY)
    public_key = private_to_stark_key(PAYER_KEY)

    assert verify_hash_signature(message_hash, [r, s], public_key) is True
    assert verify_hash_signature(message_hash + 1, [r, s], public_key) is False
