"""
Core primitives that implement the collection lifecycle.
"""

from .client import CollectionClient, process_payment
from .config import (
    CollectionConfig,
    CollectionParameters,
    Credentials,
    DeploymentMode,
    load_collection_config,
)
from .credentials import provision_credentials
from .deadline import Deadline
from .environment import CollectionEnvironment, build_environment
from .errors import (
    AuthenticationError,
    CollectionError,
    ConfigError,
    OperationCancelled,
    PaymentStage,
    PollingTimeoutError,
    PollingTransportError,
    ProviderResponseError,
    ProvisioningError,
    SubmissionError,
)
from .payloads import build_request_to_pay
from .resolver import ResolvedStatus, fetch_status, resolve_status
from .submitter import SubmissionAck, submit_payment
from .tokens import BearerToken, acquire_token
from .transaction import PaymentOutcome, PaymentTransaction, TransactionState

__all__ = [
    "AuthenticationError",
    "BearerToken",
    "CollectionClient",
    "CollectionConfig",
    "CollectionEnvironment",
    "CollectionError",
    "CollectionParameters",
    "ConfigError",
    "Credentials",
    "Deadline",
    "DeploymentMode",
    "OperationCancelled",
    "PaymentOutcome",
    "PaymentStage",
    "PaymentTransaction",
    "PollingTimeoutError",
    "PollingTransportError",
    "ProviderResponseError",
    "ProvisioningError",
    "ResolvedStatus",
    "SubmissionAck",
    "SubmissionError",
    "TransactionState",
    "acquire_token",
    "build_environment",
    "build_request_to_pay",
    "fetch_status",
    "load_collection_config",
    "process_payment",
    "provision_credentials",
    "resolve_status",
    "submit_payment",
]
