"""
Configuration objects and helpers for MoMo collections.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from .environment import build_environment
from .errors import ConfigError

__all__ = [
    "CollectionConfig",
    "CollectionParameters",
    "ConfigError",
    "Credentials",
    "DeploymentMode",
    "load_collection_config",
]

DEFAULT_SANDBOX_BASE_URL = "https://sandbox.momodeveloper.mtn.com"
DEFAULT_CURRENCY = "ZMW"
DEFAULT_PAYEE_NOTE = "Payment Initiated"

_PARAMETER_TO_ENV_KEY = {
    "mode": "MTN_MOMO_ENV",
    "currency": "LOCAL_CURRENCY",
    "poll_attempts": "DEFAULT_POLL_RETRIES",
    "poll_delay_ms": "DEFAULT_POLL_DELAY_MS",
    "request_timeout_seconds": "MOMO_REQUEST_TIMEOUT_SECONDS",
    "payee_note": "MOMO_PAYEE_NOTE",
}


def _stringify(value: Any) -> str:
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class DeploymentMode(str, Enum):
    SANDBOX = "sandbox"
    PRODUCTION = "production"

    @classmethod
    def parse(cls, raw: Optional[str]) -> "DeploymentMode":
        if raw is None or not raw.strip():
            raise ConfigError('MTN_MOMO_ENV is not set. Must be "sandbox" or "production".')
        try:
            return cls(raw.strip().lower())
        except ValueError as exc:
            raise ConfigError(
                f'Invalid MTN_MOMO_ENV "{raw}". Must be "sandbox" or "production".'
            ) from exc

    @property
    def env_suffix(self) -> str:
        return self.value.upper()


@dataclass(frozen=True)
class Credentials:
    """API user (principal) and API key (secret) pair."""

    principal: str
    secret: str = field(repr=False)


@dataclass(frozen=True)
class CollectionParameters:
    """
    Explicit parameter bundle for constructing :class:`CollectionConfig`.

    Callers can either instantiate this helper or pass the individual keyword
    arguments directly to :func:`load_collection_config`.
    """

    mode: Optional[DeploymentMode | str] = None
    currency: Optional[str] = None
    poll_attempts: Optional[int | str] = None
    poll_delay_ms: Optional[int | str] = None
    request_timeout_seconds: Optional[float | str] = None
    payee_note: Optional[str] = None

    def as_overrides(self) -> Dict[str, str]:
        overrides: Dict[str, str] = {}
        for field_name, env_key in _PARAMETER_TO_ENV_KEY.items():
            value = getattr(self, field_name)
            if value is None:
                continue
            overrides[env_key] = _stringify(value)
        return overrides


def _collect_parameter_overrides(
    parameters: Optional[CollectionParameters],
    explicit: Mapping[str, Any],
) -> Dict[str, str]:
    overrides: Dict[str, str] = {}
    if parameters is not None:
        overrides.update(parameters.as_overrides())

    for key, value in explicit.items():
        if value is None:
            continue
        try:
            env_key = _PARAMETER_TO_ENV_KEY[key]
        except KeyError as exc:  # pragma: no cover - callers pass known names
            raise TypeError(f"Unknown collection parameter '{key}'") from exc
        overrides[env_key] = _stringify(value)
    return overrides


def _require(values: Mapping[str, str], key: str) -> str:
    raw = values.get(key)
    if raw is None or not raw.strip():
        raise ConfigError(f"{key} must be provided")
    return raw.strip()


def _optional(values: Mapping[str, str], key: str) -> Optional[str]:
    raw = values.get(key)
    if raw is None or not raw.strip():
        return None
    return raw.strip()


def _positive_int(values: Mapping[str, str], key: str, default: str) -> int:
    raw = values.get(key) or default
    try:
        parsed = int(raw)
    except ValueError as exc:
        raise ConfigError(f"{key} must be an integer, got '{raw}'") from exc
    if parsed < 1:
        raise ConfigError(f"{key} must be at least 1")
    return parsed


def _non_negative_decimal(values: Mapping[str, str], key: str, default: str) -> Decimal:
    raw = values.get(key) or default
    try:
        parsed = Decimal(raw)
    except InvalidOperation as exc:
        raise ConfigError(f"{key} must be a number, got '{raw}'") from exc
    if not parsed.is_finite() or parsed < 0:
        raise ConfigError(f"{key} must be a non-negative number")
    return parsed


def _mask(value: Optional[str]) -> str:
    return "***SET***" if value else "***MISSING***"


@dataclass(frozen=True)
class CollectionConfig:
    """
    Resolved, immutable settings for one deployment mode.

    Only the active mode's base URL, target environment, subscription key and
    callback host are kept, so nothing downstream needs to branch on mode
    except credential provisioning.
    """

    mode: DeploymentMode
    base_url: str
    target_environment: str
    subscription_key: str = field(repr=False)
    callback_host: Optional[str] = None
    static_credentials: Optional[Credentials] = None
    currency: str = DEFAULT_CURRENCY
    poll_attempts: int = 3
    poll_interval_seconds: float = 5.0
    request_timeout_seconds: float = 30.0
    payee_note: str = DEFAULT_PAYEE_NOTE

    def __post_init__(self) -> None:
        if self.mode is DeploymentMode.PRODUCTION and self.static_credentials is None:
            raise ConfigError(
                "API_USER_PRODUCTION and API_KEY_PRODUCTION are required in production mode"
            )

    @property
    def is_production(self) -> bool:
        return self.mode is DeploymentMode.PRODUCTION

    def url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def describe(self) -> Dict[str, Any]:
        """Log-safe summary of the configuration."""
        return {
            "mode": self.mode.value,
            "baseUrl": self.base_url,
            "targetEnv": self.target_environment,
            "currency": self.currency,
            "subscriptionKey": _mask(self.subscription_key),
            "providerCallbackHost": _mask(self.callback_host),
            "apiUser": _mask(self.static_credentials and self.static_credentials.principal),
            "apiKey": _mask(self.static_credentials and self.static_credentials.secret),
            "pollAttempts": self.poll_attempts,
            "pollIntervalSeconds": self.poll_interval_seconds,
        }

    @classmethod
    def from_mapping(cls, values: Mapping[str, str]) -> "CollectionConfig":
        mode = DeploymentMode.parse(values.get("MTN_MOMO_ENV"))
        suffix = mode.env_suffix

        if mode is DeploymentMode.SANDBOX:
            base_url = values.get(f"MOMO_API_BASE_URL_{suffix}") or DEFAULT_SANDBOX_BASE_URL
            target_environment = values.get(f"X_TARGET_ENVIRONMENT_{suffix}") or "sandbox"
            static_credentials = None
        else:
            base_url = _require(values, f"MOMO_API_BASE_URL_{suffix}")
            target_environment = _require(values, f"X_TARGET_ENVIRONMENT_{suffix}")
            static_credentials = Credentials(
                principal=_require(values, "API_USER_PRODUCTION"),
                secret=_require(values, "API_KEY_PRODUCTION"),
            )

        base_url = base_url.strip().rstrip("/")
        if not base_url.startswith(("http://", "https://")):
            raise ConfigError(f"MOMO_API_BASE_URL_{suffix} must be an http(s) URL")

        currency = (values.get("LOCAL_CURRENCY") or DEFAULT_CURRENCY).strip().upper()
        if len(currency) != 3 or not currency.isalpha():
            raise ConfigError(f"LOCAL_CURRENCY must be an ISO 4217 code, got '{currency}'")

        poll_attempts = _positive_int(values, "DEFAULT_POLL_RETRIES", "3")
        poll_delay_ms = _non_negative_decimal(values, "DEFAULT_POLL_DELAY_MS", "5000")
        request_timeout = _non_negative_decimal(values, "MOMO_REQUEST_TIMEOUT_SECONDS", "30")
        if request_timeout == 0:
            raise ConfigError("MOMO_REQUEST_TIMEOUT_SECONDS must be greater than zero")

        return cls(
            mode=mode,
            base_url=base_url,
            target_environment=target_environment.strip(),
            subscription_key=_require(values, f"SUBSCRIPTION_KEY_{suffix}"),
            callback_host=_optional(values, f"PROVIDER_CALLBACK_HOST_{suffix}"),
            static_credentials=static_credentials,
            currency=currency,
            poll_attempts=poll_attempts,
            poll_interval_seconds=float(poll_delay_ms) / 1000.0,
            request_timeout_seconds=float(request_timeout),
            payee_note=values.get("MOMO_PAYEE_NOTE") or DEFAULT_PAYEE_NOTE,
        )

    @classmethod
    def from_env(
        cls,
        *,
        env_file: Optional[str] = ".env",
        overrides: Optional[Mapping[str, str]] = None,
        base: Optional[Mapping[str, str]] = None,
        parameters: Optional[CollectionParameters] = None,
        mode: Optional[DeploymentMode | str] = None,
        currency: Optional[str] = None,
        poll_attempts: Optional[int | str] = None,
        poll_delay_ms: Optional[int | str] = None,
        request_timeout_seconds: Optional[float | str] = None,
        payee_note: Optional[str] = None,
    ) -> "CollectionConfig":
        parameter_overrides = _collect_parameter_overrides(
            parameters,
            {
                "mode": mode,
                "currency": currency,
                "poll_attempts": poll_attempts,
                "poll_delay_ms": poll_delay_ms,
                "request_timeout_seconds": request_timeout_seconds,
                "payee_note": payee_note,
            },
        )
        merged_overrides = dict(overrides or {})
        merged_overrides.update(parameter_overrides)

        environment = build_environment(
            env_file=env_file,
            base=base,
            overrides=merged_overrides,
        )
        if environment.env_file is not None:
            logging.debug("Read MoMo settings from %s", environment.env_file)
        return cls.from_mapping(environment.variables)


def load_collection_config(
    *,
    env_file: Optional[str] = ".env",
    overrides: Optional[Mapping[str, str]] = None,
    base: Optional[Mapping[str, str]] = None,
    parameters: Optional[CollectionParameters] = None,
    mode: Optional[DeploymentMode | str] = None,
    currency: Optional[str] = None,
    poll_attempts: Optional[int | str] = None,
    poll_delay_ms: Optional[int | str] = None,
    request_timeout_seconds: Optional[float | str] = None,
    payee_note: Optional[str] = None,
) -> CollectionConfig:
    """
    Convenience wrapper that mirrors :meth:`CollectionConfig.from_env`.

    The configuration can be provided entirely through environment variables,
    a ``.env`` file, direct keyword arguments, or any combination of the three.
    """
    return CollectionConfig.from_env(
        env_file=env_file,
        overrides=overrides,
        base=base,
        parameters=parameters,
        mode=mode,
        currency=currency,
        poll_attempts=poll_attempts,
        poll_delay_ms=poll_delay_ms,
        request_timeout_seconds=request_timeout_seconds,
        payee_note=payee_note,
    )
