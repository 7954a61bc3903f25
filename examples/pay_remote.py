"""
Minimal payer-side script: sign a Starknet payment and submit it to a remote
facilitator over HTTP.
"""

from __future__ import annotations

import argparse
import logging
import sys

from x402_starknet import (
    ConfigError,
    FacilitatorClient,
    PaymentRequirements,
    build_payment_payload,
    load_facilitator_config,
)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Send an x402 payment to a Starknet facilitator")
    parser.add_argument(
        "--env-file",
        default=".env",
        help="Path to the .env file containing STARKNET_RPC_URL and FACILITATOR_URL",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Python logging level (default: INFO)",
    )
    parser.add_argument(
        "--verify-only",
        action="store_true",
        help="Stop after facilitator verification (no on-chain settlement)",
    )
    parser.add_argument("--payer-address", required=True, help="Payer account contract address")
    parser.add_argument(
        "--payer-private-key",
        required=True,
        help="Payer signing key as a hex string",
    )
    parser.add_argument("--pay-to", required=True, help="Recipient account address")
    parser.add_argument("--asset", required=True, help="Token contract address")
    parser.add_argument("--amount", type=int, required=True, help="Amount in base units")
    parser.add_argument(
        "--timeout-seconds",
        type=int,
        default=300,
        help="Maximum payment timeout in seconds (default: 300)",
    )
    parser.add_argument(
        "--legacy-hash",
        action="store_true",
        help="Sign the hash-on-elements digest for accounts without is_valid_signature",
    )
    return parser.parse_args()


def main() -> int:
    args = parse_args()
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(message)s",
    )

    try:
        config = load_facilitator_config(env_file=args.env_file)
    except (ConfigError, ValueError) as exc:
        logging.error("Invalid configuration: %s", exc)
        return 1

    requirements = PaymentRequirements(
        pay_to=args.pay_to,
        asset=args.asset,
        max_amount_required=args.amount,
        max_timeout_seconds=args.timeout_seconds,
        network=config.network,
    )
    payload = build_payment_payload(
        requirements,
        payer_address=args.payer_address,
        payer_private_key=int(args.payer_private_key, 16),
        legacy_hash=args.legacy_hash,
    )
    client = FacilitatorClient(config.facilitator_url)
    logging.info("Submitting payment to %s", config.facilitator_url)

    try:
        verification = client.verify(payload, requirements)
    except Exception as exc:  # noqa: BLE001
        logging.error("Verification request failed: %s", exc)
        return 1

    if not verification.is_valid:
        logging.error("Payment rejected: %s", verification.invalid_reason)
        return 1

    logging.info("Facilitator accepted payment payload for payer %s", verification.payer)
    if args.verify_only:
        logging.info("Verification succeeded; skipping settlement.")
        return 0

    try:
        settlement = client.settle(payload, requirements)
    except Exception as exc:  # noqa: BLE001
        logging.error("Settlement request failed: %s", exc)
        return 1

    if settlement.success:
        logging.info(
            "Payment settled on %s. Transaction hash: %s",
            settlement.network_id,
            settlement.tx_hash,
        )
        return 0

    logging.error("Settlement failed: %s", settlement.error)
    return 1


if __name__ == "__main__":
    sys.exit(main())
