"""
Exception hierarchy for the collection pipeline.

Every error raised out of a pipeline stage is a :class:`CollectionError` tagged
with the :class:`PaymentStage` that produced it, so callers can tell a
provisioning failure from an authentication or submission failure without
parsing messages.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional

__all__ = [
    "AuthenticationError",
    "CollectionError",
    "ConfigError",
    "OperationCancelled",
    "PaymentStage",
    "PollingTimeoutError",
    "PollingTransportError",
    "ProviderResponseError",
    "ProvisioningError",
    "SubmissionError",
]


class PaymentStage(str, Enum):
    CONFIGURATION = "configuration"
    PROVISIONING = "provisioning"
    AUTHENTICATION = "authentication"
    SUBMISSION = "submission"
    POLLING = "polling"


class ProviderResponseError(Exception):
    """The provider answered with a non-2xx status code."""

    def __init__(self, url: str, status_code: int, body: str) -> None:
        super().__init__(f"Provider responded with {status_code} for {url}: {body}")
        self.url = url
        self.status_code = status_code
        self.body = body


class CollectionError(Exception):
    stage: PaymentStage = PaymentStage.CONFIGURATION

    def __init__(
        self,
        message: str,
        *,
        cause: Optional[BaseException] = None,
        correlation_id: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.cause = cause
        self.correlation_id = correlation_id

    @property
    def status_code(self) -> Optional[int]:
        """HTTP status of the underlying provider response, if there was one."""
        if isinstance(self.cause, ProviderResponseError):
            return self.cause.status_code
        return None


class ConfigError(CollectionError):
    """Raised when the supplied configuration is invalid."""

    stage = PaymentStage.CONFIGURATION


class ProvisioningError(CollectionError):
    stage = PaymentStage.PROVISIONING


class AuthenticationError(CollectionError):
    stage = PaymentStage.AUTHENTICATION


class SubmissionError(CollectionError):
    stage = PaymentStage.SUBMISSION


class PollingTransportError(CollectionError):
    """A single status lookup failed. The polling loop absorbs these."""

    stage = PaymentStage.POLLING

    def __init__(
        self,
        message: str,
        *,
        attempt: int,
        cause: Optional[BaseException] = None,
        correlation_id: Optional[str] = None,
    ) -> None:
        super().__init__(message, cause=cause, correlation_id=correlation_id)
        self.attempt = attempt


class PollingTimeoutError(CollectionError):
    """No terminal status was observed within the polling budget."""

    stage = PaymentStage.POLLING

    def __init__(
        self,
        message: str,
        *,
        attempts: int,
        last_payload: Optional[Dict[str, Any]] = None,
        correlation_id: Optional[str] = None,
    ) -> None:
        super().__init__(message, correlation_id=correlation_id)
        self.attempts = attempts
        self.last_payload = last_payload


class OperationCancelled(CollectionError):
    """The caller cancelled the transaction or its deadline elapsed."""

    def __init__(
        self,
        message: str,
        *,
        stage: PaymentStage,
        correlation_id: Optional[str] = None,
    ) -> None:
        super().__init__(message, correlation_id=correlation_id)
        self.stage = stage
