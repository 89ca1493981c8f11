"""
Bearer token exchange for the collection product.
"""

from __future__ import annotations

import base64
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import requests

from .config import CollectionConfig, Credentials
from .deadline import Deadline
from .errors import AuthenticationError, PaymentStage
from .transport import (
    TRANSPORT_ERRORS,
    log_http_failure,
    parse_json,
    send_request,
    subscription_headers,
)

__all__ = ["BearerToken", "acquire_token", "basic_authorization"]


@dataclass(frozen=True)
class BearerToken:
    access_token: str = field(repr=False)
    token_type: str = "access_token"
    expires_in: Optional[int] = None

    @property
    def authorization(self) -> str:
        return f"Bearer {self.access_token}"

    @classmethod
    def from_response(cls, payload: Dict[str, Any]) -> "BearerToken":
        access_token = payload.get("access_token")
        if not isinstance(access_token, str) or not access_token:
            raise ValueError("Token response did not contain 'access_token'")
        expires_in = payload.get("expires_in")
        try:
            expires = int(expires_in) if expires_in is not None else None
        except (TypeError, ValueError):
            expires = None
        return cls(
            access_token=access_token,
            token_type=str(payload.get("token_type") or "access_token"),
            expires_in=expires,
        )


def basic_authorization(credentials: Credentials) -> str:
    raw = f"{credentials.principal}:{credentials.secret}".encode("utf-8")
    return "Basic " + base64.b64encode(raw).decode("ascii")


def acquire_token(
    session: requests.Session,
    config: CollectionConfig,
    credentials: Credentials,
    *,
    deadline: Optional[Deadline] = None,
    correlation_id: Optional[str] = None,
) -> BearerToken:
    """
    Exchange ``credentials`` for a bearer token.

    A single attempt is made; any failure raises :class:`AuthenticationError`.
    """
    url = config.url("collection/token/")
    headers = subscription_headers(config)
    headers["Authorization"] = basic_authorization(credentials)
    headers["Content-Length"] = "0"

    logging.info("Requesting bearer token for API user %s", credentials.principal)
    try:
        response = send_request(
            session,
            config,
            "POST",
            url,
            stage=PaymentStage.AUTHENTICATION,
            headers=headers,
            deadline=deadline,
            correlation_id=correlation_id,
        )
        token = BearerToken.from_response(parse_json(response, url))
    except TRANSPORT_ERRORS as exc:
        log_http_failure("acquire_token", exc)
        raise AuthenticationError(
            f"Could not acquire bearer token: {exc}",
            cause=exc,
            correlation_id=correlation_id,
        ) from exc

    logging.info("Bearer token acquired (expires in %s s)", token.expires_in)
    return token
