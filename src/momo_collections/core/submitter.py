"""
Request-to-pay submission.
"""

from __future__ import annotations

import json
import logging
import uuid
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

import requests

from .config import CollectionConfig
from .deadline import Deadline
from .errors import PaymentStage, SubmissionError
from .payloads import build_request_to_pay
from .tokens import BearerToken
from .transport import TRANSPORT_ERRORS, bearer_headers, log_http_failure, send_request

__all__ = ["SubmissionAck", "submit_payment"]


@dataclass(frozen=True)
class SubmissionAck:
    """
    The provider accepted the instruction for asynchronous processing.

    This says nothing about whether the payer approved the payment.
    """

    correlation_id: str
    external_id: str
    status_code: int


def submit_payment(
    session: requests.Session,
    config: CollectionConfig,
    token: BearerToken,
    *,
    amount: Decimal | str | int | float,
    payer_phone: str,
    merchant_reference: str,
    correlation_id: str,
    external_id: Optional[str] = None,
    deadline: Optional[Deadline] = None,
) -> SubmissionAck:
    url = config.url("collection/v1_0/requesttopay")
    external_id = external_id or str(uuid.uuid4())
    body = build_request_to_pay(
        config,
        amount=amount,
        payer_phone=payer_phone,
        merchant_reference=merchant_reference,
        external_id=external_id,
    )
    headers = bearer_headers(config, token.authorization)
    headers["X-Reference-Id"] = correlation_id
    if config.callback_host:
        headers["X-Callback-Url"] = config.callback_host

    logging.info("Requesting payment, X-Reference-Id: %s", correlation_id)
    logging.debug("Request-to-pay body: %s", json.dumps(body))
    try:
        response = send_request(
            session,
            config,
            "POST",
            url,
            stage=PaymentStage.SUBMISSION,
            headers=headers,
            body=body,
            deadline=deadline,
            correlation_id=correlation_id,
        )
    except TRANSPORT_ERRORS as exc:
        log_http_failure("submit_payment", exc)
        raise SubmissionError(
            f"Request to pay was not accepted: {exc}",
            cause=exc,
            correlation_id=correlation_id,
        ) from exc

    logging.info("Payment request accepted (HTTP %s)", response.status_code)
    return SubmissionAck(
        correlation_id=correlation_id,
        external_id=external_id,
        status_code=response.status_code,
    )
