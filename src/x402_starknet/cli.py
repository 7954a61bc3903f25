"""
Command-line interface for running facilitator operations against Starknet.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Any, Dict, Iterable, Optional, Sequence, TextIO, Tuple

from .api import ConfigError, create_facilitator, process_payment
from .core.facilitator import Facilitator


def _configure_logging(level: str) -> None:
    # stdout is reserved for the JSON result.
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s x402-starknet: %(message)s",
        stream=sys.stderr,
    )


def _setting_override(value: str) -> Tuple[str, str]:
    name, sep, setting = value.partition("=")
    name = name.strip().upper()
    if not sep or not name:
        raise argparse.ArgumentTypeError(
            f"--set expects NAME=VALUE (e.g. NETWORK=starknet-mainnet), got '{value}'"
        )
    return name, setting


def _collect_overrides(pairs: Iterable[Tuple[str, str]]) -> Dict[str, str]:
    """Later ``--set`` flags for the same setting win."""
    return dict(pairs)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="x402-starknet",
        description="Verify and settle x402 payments on Starknet",
    )
    parser.add_argument(
        "--env-file",
        default=".env",
        help="Path to the .env file with STARKNET_RPC_URL and friends (default: .env)",
    )
    parser.add_argument(
        "--set",
        action="append",
        type=_setting_override,
        metavar="NAME=VALUE",
        default=None,
        help="Override a facilitator setting such as STARKNET_RPC_URL or NETWORK",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Python logging level (default: INFO)",
    )

    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("supported", help="Print the supported payment kinds")
    for name, text in (
        ("verify", "Verify a payment request without settling it"),
        ("settle", "Settle a payment request without verifying it first"),
        ("pay", "Verify a payment request and settle it if it is valid"),
    ):
        sub = commands.add_parser(name, help=text)
        sub.add_argument(
            "request",
            help="JSON file with x402Version/paymentPayload/paymentRequirements, or - for stdin",
        )
    return parser


def _read_request(source: str, stdin: TextIO) -> Dict[str, Any]:
    if source == "-":
        return json.load(stdin)
    with open(source, encoding="utf-8") as handle:
        return json.load(handle)


async def _run_command(
    facilitator: Facilitator,
    command: str,
    body: Dict[str, Any],
) -> Tuple[bool, Dict[str, Any]]:
    if command == "verify":
        result = await facilitator.verify_request(body)
        return result.is_valid, result.to_dict()
    if command == "settle":
        settlement = await facilitator.settle_request(body)
        return settlement.success, settlement.to_dict()

    verification, settlement = await process_payment(facilitator, body)
    output: Dict[str, Any] = {"verify": verification.to_dict(), "settle": None}
    if settlement is None:
        return False, output
    output["settle"] = settlement.to_dict()
    return settlement.success, output


def run_cli(
    argv: Sequence[str] | None = None,
    *,
    stdin: Optional[TextIO] = None,
    stdout: Optional[TextIO] = None,
) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout

    _configure_logging(args.log_level)
    overrides = _collect_overrides(args.set or ())

    try:
        facilitator = create_facilitator(env_file=args.env_file, overrides=overrides)
    except (KeyError, ConfigError, ValueError) as exc:
        logging.error("Invalid configuration: %s", exc)
        return 1

    if args.command == "supported":
        json.dump(facilitator.supported(), stdout, indent=2)
        stdout.write("\n")
        return 0

    try:
        body = _read_request(args.request, stdin)
    except (OSError, ValueError) as exc:
        logging.error("Could not read payment request: %s", exc)
        return 1

    ok, output = asyncio.run(_run_command(facilitator, args.command, body))
    json.dump(output, stdout, indent=2)
    stdout.write("\n")
    if not ok:
        logging.error("Payment %s failed", args.command)
        return 1
    return 0


def main() -> None:
    sys.exit(run_cli())


if __name__ == "__main__":
    main()
