import dataclasses

import pytest

from conftest import PRODUCTION_ENV, SANDBOX_ENV
from momo_collections.core.config import (
    CollectionConfig,
    CollectionParameters,
    Credentials,
    DeploymentMode,
    load_collection_config,
)
from momo_collections.core.errors import ConfigError, PaymentStage


def test_sandbox_defaults_fill_base_url_and_target_environment():
    config = CollectionConfig.from_mapping(
        {"MTN_MOMO_ENV": "sandbox", "SUBSCRIPTION_KEY_SANDBOX": "key"}
    )

    assert config.mode is DeploymentMode.SANDBOX
    assert config.base_url == "https://sandbox.momodeveloper.mtn.com"
    assert config.target_environment == "sandbox"
    assert config.currency == "ZMW"
    assert config.poll_attempts == 3
    assert config.poll_interval_seconds == 5.0
    assert config.request_timeout_seconds == 30.0
    assert config.payee_note == "Payment Initiated"
    assert config.static_credentials is None
    assert config.callback_host is None


def test_production_resolves_only_production_values():
    values = dict(SANDBOX_ENV)
    values.update(PRODUCTION_ENV)

    config = CollectionConfig.from_mapping(values)

    assert config.is_production
    assert config.base_url == "https://proxy.momo.test"
    assert config.target_environment == "mtnzambia"
    assert config.subscription_key == "prod-sub-key"
    assert config.callback_host == "https://merchant.example.com/momo"
    assert config.static_credentials == Credentials("prod-user", "prod-secret")


@pytest.mark.parametrize("missing", ["API_USER_PRODUCTION", "API_KEY_PRODUCTION"])
def test_production_without_static_credentials_is_rejected(missing):
    values = dict(PRODUCTION_ENV)
    del values[missing]

    with pytest.raises(ConfigError) as excinfo:
        CollectionConfig.from_mapping(values)

    assert missing in str(excinfo.value)
    assert excinfo.value.stage is PaymentStage.CONFIGURATION


def test_production_config_cannot_be_built_without_credentials_directly():
    with pytest.raises(ConfigError):
        CollectionConfig(
            mode=DeploymentMode.PRODUCTION,
            base_url="https://proxy.momo.test",
            target_environment="mtnzambia",
            subscription_key="key",
        )


@pytest.mark.parametrize("raw", [None, "", "staging"])
def test_mode_must_be_sandbox_or_production(raw):
    values = dict(SANDBOX_ENV)
    if raw is None:
        del values["MTN_MOMO_ENV"]
    else:
        values["MTN_MOMO_ENV"] = raw

    with pytest.raises(ConfigError, match="MTN_MOMO_ENV"):
        CollectionConfig.from_mapping(values)


def test_mode_is_case_insensitive():
    values = dict(SANDBOX_ENV, MTN_MOMO_ENV=" Sandbox ")
    assert CollectionConfig.from_mapping(values).mode is DeploymentMode.SANDBOX


def test_missing_subscription_key_is_rejected():
    values = dict(SANDBOX_ENV)
    del values["SUBSCRIPTION_KEY_SANDBOX"]

    with pytest.raises(ConfigError, match="SUBSCRIPTION_KEY_SANDBOX"):
        CollectionConfig.from_mapping(values)


@pytest.mark.parametrize(
    "key,value",
    [
        ("DEFAULT_POLL_RETRIES", "0"),
        ("DEFAULT_POLL_RETRIES", "three"),
        ("DEFAULT_POLL_DELAY_MS", "-5"),
        ("DEFAULT_POLL_DELAY_MS", "soon"),
        ("LOCAL_CURRENCY", "KWACHA"),
        ("MOMO_REQUEST_TIMEOUT_SECONDS", "0"),
        ("MOMO_API_BASE_URL_SANDBOX", "ftp://momo.test"),
    ],
)
def test_invalid_values_raise_config_error(key, value):
    values = dict(SANDBOX_ENV, **{key: value})

    with pytest.raises(ConfigError):
        CollectionConfig.from_mapping(values)


def test_poll_delay_is_converted_from_milliseconds():
    config = CollectionConfig.from_mapping(dict(SANDBOX_ENV, DEFAULT_POLL_DELAY_MS="2500"))
    assert config.poll_interval_seconds == 2.5


def test_trailing_slash_is_stripped_from_base_url():
    config = CollectionConfig.from_mapping(
        dict(SANDBOX_ENV, MOMO_API_BASE_URL_SANDBOX="https://sandbox.momo.test/")
    )
    assert config.url("/collection/token/") == "https://sandbox.momo.test/collection/token/"


def test_config_is_immutable(sandbox_config):
    with pytest.raises(dataclasses.FrozenInstanceError):
        sandbox_config.base_url = "https://elsewhere.test"


def test_describe_masks_secrets(production_config):
    summary = production_config.describe()

    assert summary["subscriptionKey"] == "***SET***"
    assert summary["apiUser"] == "***SET***"
    assert summary["apiKey"] == "***SET***"
    assert "prod-secret" not in repr(summary)
    assert "prod-secret" not in repr(production_config)
    assert "prod-sub-key" not in repr(production_config)


def test_describe_reports_missing_values(sandbox_config):
    summary = sandbox_config.describe()
    assert summary["apiUser"] == "***MISSING***"
    assert summary["apiKey"] == "***MISSING***"


def test_load_collection_config_layers_env_file_and_overrides(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text(
        "\n".join(
            [
                "MTN_MOMO_ENV=sandbox",
                "SUBSCRIPTION_KEY_SANDBOX=from-file",
                "LOCAL_CURRENCY=EUR",
            ]
        ),
        encoding="utf-8",
    )

    config = load_collection_config(
        env_file=str(env_file),
        base={"LOCAL_CURRENCY": "UGX"},
        overrides={"DEFAULT_POLL_RETRIES": "7"},
    )

    assert config.subscription_key == "from-file"
    assert config.currency == "UGX"
    assert config.poll_attempts == 7


def test_keyword_parameters_override_environment():
    config = load_collection_config(
        env_file=None,
        base=PRODUCTION_ENV,
        parameters=CollectionParameters(poll_attempts=5),
        mode=DeploymentMode.SANDBOX,
        currency="eur",
        poll_delay_ms=100,
        payee_note="Thanks",
        overrides={"SUBSCRIPTION_KEY_SANDBOX": "sb"},
    )

    assert config.mode is DeploymentMode.SANDBOX
    assert config.currency == "EUR"
    assert config.poll_attempts == 5
    assert config.poll_interval_seconds == 0.1
    assert config.payee_note == "Thanks"


def test_parameters_as_overrides_skips_unset_fields():
    params = CollectionParameters(mode="production", request_timeout_seconds=12.5)
    assert params.as_overrides() == {
        "MTN_MOMO_ENV": "production",
        "MOMO_REQUEST_TIMEOUT_SECONDS": "12.5",
    }
