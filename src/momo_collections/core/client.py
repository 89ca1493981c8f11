"""
Orchestration of one collection: credentials, token, request-to-pay, polling.
"""

from __future__ import annotations

import logging
import uuid
from decimal import Decimal
from typing import Callable, Optional

import requests

from .config import CollectionConfig, Credentials
from .credentials import provision_credentials
from .deadline import Deadline
from .errors import PollingTimeoutError
from .payloads import format_amount
from .resolver import ResolvedStatus, polling_budget, resolve_status
from .submitter import SubmissionAck, submit_payment
from .tokens import BearerToken, acquire_token
from .transaction import PaymentOutcome, PaymentTransaction, TransactionState

__all__ = ["CollectionClient", "process_payment"]


def _new_reference_id() -> str:
    return str(uuid.uuid4())


class CollectionClient:
    """
    Runs collections against one resolved configuration.

    A client holds a ``requests.Session``; use one client per thread when
    running transactions concurrently. The configuration itself is immutable
    and can be shared freely.
    """

    def __init__(
        self,
        config: CollectionConfig,
        *,
        session: Optional[requests.Session] = None,
        id_factory: Optional[Callable[[], str]] = None,
        sleep: Optional[Callable[[float], None]] = None,
    ) -> None:
        self.config = config
        self.session = session or requests.Session()
        self.id_factory = id_factory or _new_reference_id
        self.sleep = sleep

    def provision_credentials(
        self,
        correlation_id: str,
        *,
        deadline: Optional[Deadline] = None,
    ) -> Credentials:
        return provision_credentials(self.session, self.config, correlation_id, deadline=deadline)

    def acquire_token(
        self,
        credentials: Credentials,
        *,
        deadline: Optional[Deadline] = None,
        correlation_id: Optional[str] = None,
    ) -> BearerToken:
        return acquire_token(
            self.session,
            self.config,
            credentials,
            deadline=deadline,
            correlation_id=correlation_id,
        )

    def submit(
        self,
        token: BearerToken,
        *,
        amount: Decimal | str | int | float,
        payer_phone: str,
        merchant_reference: str,
        correlation_id: str,
        deadline: Optional[Deadline] = None,
    ) -> SubmissionAck:
        return submit_payment(
            self.session,
            self.config,
            token,
            amount=amount,
            payer_phone=payer_phone,
            merchant_reference=merchant_reference,
            correlation_id=correlation_id,
            deadline=deadline,
        )

    def resolve(
        self,
        token: BearerToken,
        correlation_id: str,
        *,
        max_attempts: Optional[int] = None,
        interval: Optional[float] = None,
        deadline: Optional[Deadline] = None,
    ) -> ResolvedStatus:
        return resolve_status(
            self.session,
            self.config,
            token,
            correlation_id,
            max_attempts=max_attempts,
            interval=interval,
            deadline=deadline,
            sleep=self.sleep,
        )

    def process_payment(
        self,
        amount: Decimal | str | int | float,
        payer_phone: str,
        merchant_reference: str,
        *,
        max_attempts: Optional[int] = None,
        interval: Optional[float] = None,
        timeout: Optional[float] = None,
        deadline: Optional[Deadline] = None,
    ) -> PaymentOutcome:
        """
        Collect ``amount`` from ``payer_phone`` and wait for the outcome.

        Returns a terminal :class:`PaymentOutcome` (SUCCESSFUL, FAILED or
        TIMED_OUT). Any stage failure propagates as the matching
        :class:`~momo_collections.core.errors.CollectionError` subclass and
        no later stage is attempted.
        """
        if deadline is not None and timeout is not None:
            raise ValueError("Provide either a deadline or a timeout, not both.")
        if timeout is not None:
            deadline = Deadline(timeout)

        normalized_amount = Decimal(format_amount(amount))
        payer_phone = (payer_phone or "").strip()
        merchant_reference = (merchant_reference or "").strip()
        if not payer_phone:
            raise ValueError("payer_phone must not be empty")
        if not merchant_reference:
            raise ValueError("merchant_reference must not be empty")
        attempts, delay = polling_budget(self.config, max_attempts, interval)

        transaction = PaymentTransaction(
            amount=normalized_amount,
            currency=self.config.currency,
            payer_phone=payer_phone,
            merchant_reference=merchant_reference,
            correlation_id=self.id_factory(),
        )
        correlation_id = transaction.correlation_id
        logging.info(
            "Processing payment (%s): amount=%s %s, ref=%s, X-Reference-Id=%s",
            self.config.mode.value,
            normalized_amount,
            transaction.currency,
            merchant_reference,
            correlation_id,
        )
        logging.debug("Configuration: %s", self.config.describe())

        credentials = self.provision_credentials(correlation_id, deadline=deadline)
        token = self.acquire_token(credentials, deadline=deadline, correlation_id=correlation_id)
        self.submit(
            token,
            amount=normalized_amount,
            payer_phone=payer_phone,
            merchant_reference=merchant_reference,
            correlation_id=correlation_id,
            deadline=deadline,
        )
        transaction.advance(TransactionState.SUBMITTED)

        transaction.advance(TransactionState.POLLING)
        try:
            resolved = self.resolve(
                token,
                correlation_id,
                max_attempts=attempts,
                interval=delay,
                deadline=deadline,
            )
        except PollingTimeoutError as exc:
            transaction.advance(TransactionState.TIMED_OUT)
            logging.warning("Payment %s timed out after %d polls", correlation_id, exc.attempts)
            return transaction.outcome(exc.last_payload)

        transaction.advance(resolved.state)
        logging.info("Payment %s finished: %s", correlation_id, resolved.state.value)
        return transaction.outcome(resolved.payload)


def process_payment(
    config: CollectionConfig,
    amount: Decimal | str | int | float,
    payer_phone: str,
    merchant_reference: str,
    *,
    session: Optional[requests.Session] = None,
    max_attempts: Optional[int] = None,
    interval: Optional[float] = None,
    timeout: Optional[float] = None,
) -> PaymentOutcome:
    """
    High-level helper that runs one collection for the given configuration.
    """
    client = CollectionClient(config, session=session)
    return client.process_payment(
        amount,
        payer_phone,
        merchant_reference,
        max_attempts=max_attempts,
        interval=interval,
        timeout=timeout,
    )
