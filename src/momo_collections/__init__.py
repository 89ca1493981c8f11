"""
Public facade for the MoMo collections package.

The most useful pieces are re-exported here so integrators can
``from momo_collections import ...`` without navigating the package.
"""

from .api import create_collection_client, process_payment
from .core import (
    AuthenticationError,
    BearerToken,
    CollectionClient,
    CollectionConfig,
    CollectionError,
    CollectionParameters,
    ConfigError,
    Credentials,
    Deadline,
    DeploymentMode,
    OperationCancelled,
    PaymentOutcome,
    PaymentStage,
    PollingTimeoutError,
    PollingTransportError,
    ProvisioningError,
    SubmissionAck,
    SubmissionError,
    TransactionState,
    build_environment,
    load_collection_config,
)

__all__ = (
    "AuthenticationError",
    "BearerToken",
    "CollectionClient",
    "CollectionConfig",
    "CollectionError",
    "CollectionParameters",
    "ConfigError",
    "Credentials",
    "Deadline",
    "DeploymentMode",
    "OperationCancelled",
    "PaymentOutcome",
    "PaymentStage",
    "PollingTimeoutError",
    "PollingTransportError",
    "ProvisioningError",
    "SubmissionAck",
    "SubmissionError",
    "TransactionState",
    "build_environment",
    "create_collection_client",
    "load_collection_config",
    "process_payment",
)
