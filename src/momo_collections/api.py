"""
Public, high-level helpers for collecting payments through MTN MoMo.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Callable, Mapping, Optional

import requests

from .core.client import CollectionClient
from .core.config import (
    CollectionConfig,
    CollectionParameters,
    DeploymentMode,
    load_collection_config,
)
from .core.transaction import PaymentOutcome

__all__ = [
    "create_collection_client",
    "process_payment",
]


def _resolve_config(
    config: Optional[CollectionConfig],
    *,
    env_file: Optional[str],
    overrides: Optional[Mapping[str, str]],
    base: Optional[Mapping[str, str]],
    parameters: Optional[CollectionParameters],
    mode: Optional[DeploymentMode | str],
    currency: Optional[str],
) -> CollectionConfig:
    if config is not None:
        extras = (overrides, base, parameters, mode, currency)
        if any(item is not None and item != {} for item in extras):
            raise ValueError(
                "Provide either a pre-built CollectionConfig or individual parameters, not both."
            )
        return config
    return load_collection_config(
        env_file=env_file,
        overrides=overrides,
        base=base,
        parameters=parameters,
        mode=mode,
        currency=currency,
    )


def create_collection_client(
    *,
    config: Optional[CollectionConfig] = None,
    session: Optional[requests.Session] = None,
    env_file: Optional[str] = ".env",
    overrides: Optional[Mapping[str, str]] = None,
    base: Optional[Mapping[str, str]] = None,
    parameters: Optional[CollectionParameters] = None,
    mode: Optional[DeploymentMode | str] = None,
    currency: Optional[str] = None,
    id_factory: Optional[Callable[[], str]] = None,
) -> CollectionClient:
    """
    Construct a :class:`CollectionClient`.

    Callers can either supply a ready-made :class:`CollectionConfig` or let the
    helper assemble one from environment data. Configuration problems surface
    here, before any transaction starts.
    """
    cfg = _resolve_config(
        config,
        env_file=env_file,
        overrides=overrides,
        base=base,
        parameters=parameters,
        mode=mode,
        currency=currency,
    )
    return CollectionClient(cfg, session=session, id_factory=id_factory)


def process_payment(
    amount: Decimal | str | int | float,
    payer_phone: str,
    merchant_reference: str,
    *,
    config: Optional[CollectionConfig] = None,
    session: Optional[requests.Session] = None,
    env_file: Optional[str] = ".env",
    overrides: Optional[Mapping[str, str]] = None,
    base: Optional[Mapping[str, str]] = None,
    parameters: Optional[CollectionParameters] = None,
    mode: Optional[DeploymentMode | str] = None,
    currency: Optional[str] = None,
    max_attempts: Optional[int] = None,
    interval: Optional[float] = None,
    timeout: Optional[float] = None,
) -> PaymentOutcome:
    """
    High-level convenience wrapper: provision, authenticate, submit and poll.
    """
    client = create_collection_client(
        config=config,
        session=session,
        env_file=env_file,
        overrides=overrides,
        base=base,
        parameters=parameters,
        mode=mode,
        currency=currency,
    )
    return client.process_payment(
        amount,
        payer_phone,
        merchant_reference,
        max_attempts=max_attempts,
        interval=interval,
        timeout=timeout,
    )
