"""
HTTP helpers shared by the pipeline stages.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests

from .config import CollectionConfig
from .deadline import Deadline
from .errors import PaymentStage, ProviderResponseError

__all__ = [
    "TRANSPORT_ERRORS",
    "bearer_headers",
    "log_http_failure",
    "parse_json",
    "send_request",
    "subscription_headers",
]

# Anything one of these raises means "this call did not produce a usable answer".
TRANSPORT_ERRORS = (requests.RequestException, ProviderResponseError, ValueError)


def subscription_headers(config: CollectionConfig) -> Dict[str, str]:
    return {"Ocp-Apim-Subscription-Key": config.subscription_key}


def bearer_headers(config: CollectionConfig, authorization: str) -> Dict[str, str]:
    headers = subscription_headers(config)
    headers["Authorization"] = authorization
    headers["X-Target-Environment"] = config.target_environment
    return headers


def log_http_failure(operation: str, exc: BaseException) -> None:
    if isinstance(exc, ProviderResponseError):
        logging.error(
            "%s failed: provider returned %s for %s: %s",
            operation,
            exc.status_code,
            exc.url,
            exc.body,
        )
    elif isinstance(exc, requests.RequestException):
        logging.error("%s failed: no usable response from provider: %s", operation, exc)
    else:
        logging.error("%s failed: %s", operation, exc)


def send_request(
    session: requests.Session,
    config: CollectionConfig,
    method: str,
    url: str,
    *,
    stage: PaymentStage,
    headers: Dict[str, str],
    body: Optional[Dict[str, Any]] = None,
    deadline: Optional[Deadline] = None,
    correlation_id: Optional[str] = None,
) -> requests.Response:
    """
    Perform one request and raise :class:`ProviderResponseError` on non-2xx.

    The deadline is checked before the call and bounds its timeout.
    """
    timeout = config.request_timeout_seconds
    if deadline is not None:
        deadline.check(stage, correlation_id)
        timeout = deadline.clamp(timeout)

    logging.debug("%s %s", method, url)
    response = session.request(method, url, headers=headers, json=body, timeout=timeout)
    if not 200 <= response.status_code < 300:
        raise ProviderResponseError(url, response.status_code, response.text)
    return response


def parse_json(response: requests.Response, url: str) -> Dict[str, Any]:
    """Decode a JSON object body; an empty body decodes to ``{}``."""
    if not (response.text or "").strip():
        return {}
    try:
        data = response.json()
    except ValueError as exc:
        raise ValueError(f"Failed to parse JSON from provider at {url}: {response.text}") from exc
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object from {url}, got {type(data).__name__}")
    return data
