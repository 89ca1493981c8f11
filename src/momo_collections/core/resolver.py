"""
Status resolution by bounded polling.

No callback receiver exists on this side, so polling the request-to-pay
resource is the only way an outcome is learned. The loop makes at most
``max_attempts`` lookups spaced by a constant ``interval``; a lookup that fails
at the transport level is logged and counted against the budget but does not
end the loop.
"""

from __future__ import annotations

import functools
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple

import requests

from .config import CollectionConfig
from .deadline import Deadline
from .errors import PaymentStage, PollingTimeoutError, PollingTransportError
from .tokens import BearerToken
from .transaction import TransactionState
from .transport import TRANSPORT_ERRORS, bearer_headers, parse_json, send_request

__all__ = [
    "ResolvedStatus",
    "classify_status",
    "fetch_status",
    "polling_budget",
    "resolve_status",
]

_TERMINAL_STATUSES = {
    "SUCCESSFUL": TransactionState.SUCCESSFUL,
    "FAILED": TransactionState.FAILED,
}


@dataclass(frozen=True)
class ResolvedStatus:
    state: TransactionState
    payload: Dict[str, Any]
    attempts: int


def classify_status(payload: Dict[str, Any]) -> Optional[TransactionState]:
    """Map a status payload to a terminal state, or ``None`` while pending."""
    raw = payload.get("status")
    if not isinstance(raw, str):
        return None
    return _TERMINAL_STATUSES.get(raw.strip().upper())


def polling_budget(
    config: CollectionConfig,
    max_attempts: Optional[int] = None,
    interval: Optional[float] = None,
) -> Tuple[int, float]:
    """Resolve the attempt count and spacing, falling back to configuration."""
    attempts = config.poll_attempts if max_attempts is None else max_attempts
    delay = config.poll_interval_seconds if interval is None else interval
    if attempts < 1:
        raise ValueError("max_attempts must be at least 1")
    if delay < 0:
        raise ValueError("interval must not be negative")
    return attempts, delay


def fetch_status(
    session: requests.Session,
    config: CollectionConfig,
    token: BearerToken,
    correlation_id: str,
    *,
    attempt: int = 1,
    deadline: Optional[Deadline] = None,
) -> Dict[str, Any]:
    url = config.url(f"collection/v1_0/requesttopay/{correlation_id}")
    logging.info("Fetching payment status, X-Reference-Id: %s", correlation_id)
    try:
        response = send_request(
            session,
            config,
            "GET",
            url,
            stage=PaymentStage.POLLING,
            headers=bearer_headers(config, token.authorization),
            deadline=deadline,
            correlation_id=correlation_id,
        )
        return parse_json(response, url)
    except TRANSPORT_ERRORS as exc:
        raise PollingTransportError(
            f"Status lookup failed: {exc}",
            attempt=attempt,
            cause=exc,
            correlation_id=correlation_id,
        ) from exc


def resolve_status(
    session: requests.Session,
    config: CollectionConfig,
    token: BearerToken,
    correlation_id: str,
    *,
    max_attempts: Optional[int] = None,
    interval: Optional[float] = None,
    deadline: Optional[Deadline] = None,
    sleep: Optional[Callable[[float], None]] = None,
) -> ResolvedStatus:
    """
    Poll until the provider reports SUCCESSFUL or FAILED.

    Raises :class:`PollingTimeoutError` after ``max_attempts`` lookups without
    a terminal status. ``sleep`` replaces the inter-attempt wait; by default the
    deadline's interruptible sleep is used.
    """
    attempts, delay = polling_budget(config, max_attempts, interval)

    if sleep is None:
        waiter = deadline if deadline is not None else Deadline()
        sleep = functools.partial(
            waiter.sleep, stage=PaymentStage.POLLING, correlation_id=correlation_id
        )

    logging.info("Starting polling for %s (%d attempts, %.1fs apart)", correlation_id, attempts, delay)
    last_payload: Optional[Dict[str, Any]] = None
    for attempt in range(1, attempts + 1):
        try:
            payload = fetch_status(
                session,
                config,
                token,
                correlation_id,
                attempt=attempt,
                deadline=deadline,
            )
        except PollingTransportError as exc:
            logging.warning("Polling error (attempt %d/%d): %s", attempt, attempts, exc)
        else:
            last_payload = payload
            state = classify_status(payload)
            if state is not None:
                logging.info("Final status for %s: %s", correlation_id, state.value)
                return ResolvedStatus(state=state, payload=payload, attempts=attempt)
            logging.info(
                "Status = %s, retrying in %.1fs (%d/%d)",
                payload.get("status"),
                delay,
                attempt,
                attempts,
            )

        if attempt < attempts:
            sleep(delay)

    logging.error("Polling timed out after %d attempts for %s", attempts, correlation_id)
    raise PollingTimeoutError(
        f"Payment status polling timed out after {attempts} attempts",
        attempts=attempts,
        last_payload=last_payload,
        correlation_id=correlation_id,
    )
