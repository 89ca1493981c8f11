"""
Credential provisioning: sandbox API users are minted per transaction,
production credentials come straight from configuration.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests

from .config import CollectionConfig, Credentials
from .deadline import Deadline
from .errors import ConfigError, PaymentStage, ProvisioningError
from .transport import (
    TRANSPORT_ERRORS,
    log_http_failure,
    parse_json,
    send_request,
    subscription_headers,
)

__all__ = [
    "Credentials",
    "create_api_key",
    "create_api_user",
    "provision_credentials",
]


def create_api_user(
    session: requests.Session,
    config: CollectionConfig,
    reference_id: str,
    *,
    deadline: Optional[Deadline] = None,
) -> Dict[str, Any]:
    """
    Register a sandbox API user under ``reference_id``.

    The provider usually answers ``201`` with an empty body; whatever comes
    back is returned for logging only.
    """
    url = config.url("v1_0/apiuser")
    headers = subscription_headers(config)
    headers["X-Reference-Id"] = reference_id
    body = {"providerCallbackHost": config.callback_host or ""}

    logging.info("[sandbox] Creating API user %s", reference_id)
    try:
        response = send_request(
            session,
            config,
            "POST",
            url,
            stage=PaymentStage.PROVISIONING,
            headers=headers,
            body=body,
            deadline=deadline,
            correlation_id=reference_id,
        )
        data = parse_json(response, url)
    except TRANSPORT_ERRORS as exc:
        log_http_failure("create_api_user", exc)
        raise ProvisioningError(
            f"Could not create sandbox API user: {exc}",
            cause=exc,
            correlation_id=reference_id,
        ) from exc
    logging.info("[sandbox] API user created (HTTP %s): %s", response.status_code, data)
    return data


def create_api_key(
    session: requests.Session,
    config: CollectionConfig,
    reference_id: str,
    *,
    deadline: Optional[Deadline] = None,
) -> str:
    url = config.url(f"v1_0/apiuser/{reference_id}/apikey")

    logging.info("[sandbox] Creating API key for user %s", reference_id)
    try:
        response = send_request(
            session,
            config,
            "POST",
            url,
            stage=PaymentStage.PROVISIONING,
            headers=subscription_headers(config),
            deadline=deadline,
            correlation_id=reference_id,
        )
        data = parse_json(response, url)
    except TRANSPORT_ERRORS as exc:
        log_http_failure("create_api_key", exc)
        raise ProvisioningError(
            f"Could not create sandbox API key: {exc}",
            cause=exc,
            correlation_id=reference_id,
        ) from exc

    api_key = data.get("apiKey")
    if not isinstance(api_key, str) or not api_key:
        raise ProvisioningError(
            "Sandbox API key response did not contain 'apiKey'",
            correlation_id=reference_id,
        )
    logging.info("[sandbox] API key created")
    return api_key


def provision_credentials(
    session: requests.Session,
    config: CollectionConfig,
    correlation_id: str,
    *,
    deadline: Optional[Deadline] = None,
) -> Credentials:
    """
    Return the credentials used to request a bearer token.

    In sandbox mode this registers a fresh API user named after
    ``correlation_id`` and mints its key, so it must never be called twice with
    the same id. In production mode the static credentials are returned and
    no request is made.
    """
    if config.is_production:
        if config.static_credentials is None:
            raise ConfigError("Production mode requires API_USER_PRODUCTION and API_KEY_PRODUCTION")
        logging.info("Production mode: using configured API user")
        return config.static_credentials

    create_api_user(session, config, correlation_id, deadline=deadline)
    secret = create_api_key(session, config, correlation_id, deadline=deadline)
    return Credentials(principal=correlation_id, secret=secret)
