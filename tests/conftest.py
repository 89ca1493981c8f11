"""Shared fixtures: a recording fake HTTP session and ready-made configs."""

import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
from unittest.mock import Mock

import pytest

from momo_collections.core.config import CollectionConfig

SANDBOX_ENV = {
    "MTN_MOMO_ENV": "sandbox",
    "MOMO_API_BASE_URL_SANDBOX": "https://sandbox.momo.test",
    "X_TARGET_ENVIRONMENT_SANDBOX": "sandbox",
    "SUBSCRIPTION_KEY_SANDBOX": "sandbox-sub-key",
    "PROVIDER_CALLBACK_HOST_SANDBOX": "https://merchant.example.com",
    "LOCAL_CURRENCY": "ZMW",
    "DEFAULT_POLL_RETRIES": "3",
    "DEFAULT_POLL_DELAY_MS": "0",
}

PRODUCTION_ENV = {
    "MTN_MOMO_ENV": "production",
    "MOMO_API_BASE_URL_PRODUCTION": "https://proxy.momo.test",
    "X_TARGET_ENVIRONMENT_PRODUCTION": "mtnzambia",
    "SUBSCRIPTION_KEY_PRODUCTION": "prod-sub-key",
    "PROVIDER_CALLBACK_HOST_PRODUCTION": "https://merchant.example.com/momo",
    "API_USER_PRODUCTION": "prod-user",
    "API_KEY_PRODUCTION": "prod-secret",
    "LOCAL_CURRENCY": "ZMW",
    "DEFAULT_POLL_RETRIES": "3",
    "DEFAULT_POLL_DELAY_MS": "0",
}


def mock_response(status_code: int = 200, json_data: Optional[Any] = None, text: str = "") -> Mock:
    """Return a mock requests.Response whose .json() returns json_data."""
    resp = Mock()
    resp.status_code = status_code
    if json_data is not None:
        resp.json.return_value = json_data
        resp.text = json.dumps(json_data)
    else:
        resp.json.side_effect = ValueError("No JSON object could be decoded")
        resp.text = text
    return resp


def status_response(status: str, **extra: Any) -> Mock:
    body = {
        "amount": "100",
        "currency": "ZMW",
        "externalId": "ext",
        "payer": {"partyIdType": "MSISDN", "partyId": "260971234567"},
        "status": status,
    }
    body.update(extra)
    return mock_response(200, body)


def token_response(token: str = "tok-1") -> Mock:
    return mock_response(200, {"access_token": token, "token_type": "access_token", "expires_in": 3600})


@dataclass
class Call:
    kind: str
    method: str
    url: str
    headers: Dict[str, str]
    json: Optional[Dict[str, Any]]
    timeout: Optional[float]


def classify(method: str, url: str) -> str:
    if url.endswith("/apikey"):
        return "apikey"
    if url.endswith("/v1_0/apiuser"):
        return "apiuser"
    if url.endswith("/collection/token/"):
        return "token"
    if method == "POST" and url.endswith("/collection/v1_0/requesttopay"):
        return "submit"
    if method == "GET" and "/collection/v1_0/requesttopay/" in url:
        return "status"
    raise AssertionError(f"Unexpected request {method} {url}")


class FakeSession:
    """
    Stand-in for ``requests.Session`` that routes by endpoint kind.

    Each kind has a queue of responses (or exceptions to raise); the last
    entry is reused once the queue is down to one item.
    """

    def __init__(self) -> None:
        self.queues: Dict[str, List[Any]] = {}
        self.calls: List[Call] = []

    def queue(self, kind: str, *results: Any) -> "FakeSession":
        self.queues.setdefault(kind, []).extend(results)
        return self

    def request(self, method, url, headers=None, json=None, timeout=None):
        kind = classify(method, url)
        self.calls.append(Call(kind, method, url, dict(headers or {}), json, timeout))
        queue = self.queues.get(kind)
        if not queue:
            raise AssertionError(f"No response queued for {kind}")
        result = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(result, BaseException):
            raise result
        return result

    def calls_for(self, kind: str) -> List[Call]:
        return [call for call in self.calls if call.kind == kind]

    def count(self, kind: str) -> int:
        return len(self.calls_for(kind))


def happy_sandbox_session(final_status: str = "SUCCESSFUL") -> FakeSession:
    return (
        FakeSession()
        .queue("apiuser", mock_response(201))
        .queue("apikey", mock_response(201, {"apiKey": "sandbox-secret"}))
        .queue("token", token_response())
        .queue("submit", mock_response(202))
        .queue("status", status_response(final_status))
    )


@pytest.fixture
def sandbox_config():
    return CollectionConfig.from_mapping(SANDBOX_ENV)


@pytest.fixture
def production_config():
    return CollectionConfig.from_mapping(PRODUCTION_ENV)


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def record_sleep(sleeps):
    return sleeps.append
