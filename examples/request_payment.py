"""
Minimal script that uses the public API to collect one MoMo payment.
"""

from __future__ import annotations

import argparse
import logging
import sys

from momo_collections import (
    CollectionError,
    ConfigError,
    TransactionState,
    create_collection_client,
)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Request a MoMo payment using the SDK API")
    parser.add_argument("amount", help="Amount to collect, e.g. 100")
    parser.add_argument("phone", help="Payer MSISDN, e.g. 260971234567")
    parser.add_argument("reference", help="Merchant reference, e.g. INV-1")
    parser.add_argument(
        "--env-file",
        default=".env",
        help="Path to the .env file containing MTN_MOMO_ENV and friends",
    )
    parser.add_argument(
        "--mode",
        choices=("sandbox", "production"),
        help="Override MTN_MOMO_ENV",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Python logging level (default: INFO)",
    )
    return parser.parse_args()


def main() -> int:
    args = parse_args()
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(message)s",
    )

    try:
        client = create_collection_client(env_file=args.env_file, mode=args.mode)
    except ConfigError as exc:
        logging.error("Invalid configuration: %s", exc)
        return 1

    logging.info("Collecting from %s via %s", args.phone, client.config.base_url)
    try:
        outcome = client.process_payment(args.amount, args.phone, args.reference)
    except CollectionError as exc:
        logging.error("Stage %s failed: %s", exc.stage.value, exc)
        return 1

    if outcome.state is TransactionState.SUCCESSFUL:
        logging.info("Paid. Financial transaction id: %s", outcome.status_payload.get("financialTransactionId"))
        return 0
    if outcome.timed_out:
        logging.warning("Still pending; check %s later", outcome.correlation_id)
        return 2

    logging.error("Payment failed: %s", outcome.reason)
    return 1


if __name__ == "__main__":
    sys.exit(main())
