"""
Command-line interface for running a single MoMo collection.
"""

from __future__ import annotations

import argparse
import logging
import sys
from decimal import Decimal, InvalidOperation
from typing import Iterable, Sequence, Tuple

import requests

from .api import create_collection_client
from .core.config import ConfigError
from .core.errors import CollectionError, OperationCancelled, PaymentStage
from .core.transaction import PaymentOutcome, TransactionState

EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_TIMED_OUT = 2


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(message)s",
    )


def _env_override(value: str) -> Tuple[str, str]:
    if "=" not in value:
        raise argparse.ArgumentTypeError("Overrides must look like KEY=VALUE")
    key, val = value.split("=", 1)
    key = key.strip()
    if not key:
        raise argparse.ArgumentTypeError("Override key must not be empty")
    return key, val


def _amount(value: str) -> Decimal:
    try:
        parsed = Decimal(value)
    except InvalidOperation as exc:
        raise argparse.ArgumentTypeError(f"Invalid amount '{value}'") from exc
    if not parsed.is_finite() or parsed <= 0:
        raise argparse.ArgumentTypeError("Amount must be greater than zero")
    return parsed


def _collect_overrides(pairs: Iterable[Tuple[str, str]]) -> dict[str, str]:
    overrides: dict[str, str] = {}
    for key, value in pairs:
        overrides[key] = value
    return overrides


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="momo-collections",
        description="Collect a payment through MTN MoMo and wait for the outcome",
    )
    parser.add_argument("--amount", required=True, type=_amount, help="Amount to collect")
    parser.add_argument("--phone", required=True, help="Payer MSISDN, e.g. 260971234567")
    parser.add_argument(
        "--reference",
        required=True,
        help="Merchant reference shown to the payer (e.g. an invoice number)",
    )
    parser.add_argument(
        "--env-file",
        default=".env",
        help="Path to the .env file containing MoMo settings (default: .env)",
    )
    parser.add_argument(
        "--set",
        action="append",
        type=_env_override,
        metavar="KEY=VALUE",
        default=None,
        help="Override an environment variable without editing the .env file",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Python logging level (default: INFO)",
    )
    parser.add_argument(
        "--max-attempts",
        type=int,
        default=None,
        help="Status polls before giving up (default: DEFAULT_POLL_RETRIES)",
    )
    parser.add_argument(
        "--interval",
        type=float,
        default=None,
        help="Seconds between status polls (default: DEFAULT_POLL_DELAY_MS / 1000)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help=(
            "Abort the whole transaction after this many seconds. Running out of "
            "time while polling exits with the timed-out code"
        ),
    )
    return parser


def run_cli(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.log_level)
    overrides = _collect_overrides(args.set or ())

    try:
        client = create_collection_client(
            env_file=args.env_file,
            overrides=overrides,
            session=requests.Session(),
        )
    except (ConfigError, ValueError) as exc:
        logging.error("Invalid configuration: %s", exc)
        return EXIT_FAILURE

    try:
        outcome = client.process_payment(
            args.amount,
            args.phone,
            args.reference,
            max_attempts=args.max_attempts,
            interval=args.interval,
            timeout=args.timeout,
        )
    except CollectionError as exc:
        if isinstance(exc, OperationCancelled) and exc.stage is PaymentStage.POLLING:
            logging.warning("Payment %s has no final status before the deadline: %s", exc.correlation_id, exc)
            return EXIT_TIMED_OUT
        logging.error("Payment aborted during %s: %s", exc.stage.value, exc)
        return EXIT_FAILURE
    except ValueError as exc:
        logging.error("Invalid payment request: %s", exc)
        return EXIT_FAILURE

    return _handle_outcome(outcome)


def _handle_outcome(outcome: PaymentOutcome) -> int:
    if outcome.state is TransactionState.SUCCESSFUL:
        logging.info(
            "Payment %s succeeded. Provider payload: %s",
            outcome.correlation_id,
            outcome.status_payload,
        )
        return EXIT_SUCCESS

    if outcome.state is TransactionState.TIMED_OUT:
        logging.warning(
            "Payment %s has no final status yet. Last payload: %s",
            outcome.correlation_id,
            outcome.status_payload,
        )
        return EXIT_TIMED_OUT

    logging.error(
        "Payment %s failed (%s): %s",
        outcome.correlation_id,
        outcome.reason,
        outcome.status_payload,
    )
    return EXIT_FAILURE


def main() -> None:
    sys.exit(run_cli())
