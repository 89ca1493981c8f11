import pytest

from conftest import PRODUCTION_ENV, SANDBOX_ENV, happy_sandbox_session
from momo_collections import (
    CollectionClient,
    ConfigError,
    DeploymentMode,
    TransactionState,
    create_collection_client,
    process_payment,
)


def test_create_client_from_environment_mapping():
    client = create_collection_client(env_file=None, base=PRODUCTION_ENV)

    assert isinstance(client, CollectionClient)
    assert client.config.mode is DeploymentMode.PRODUCTION


def test_mode_keyword_overrides_environment():
    values = dict(PRODUCTION_ENV, SUBSCRIPTION_KEY_SANDBOX="sb")
    client = create_collection_client(env_file=None, base=values, mode="sandbox")

    assert client.config.mode is DeploymentMode.SANDBOX


def test_config_errors_surface_before_any_transaction():
    with pytest.raises(ConfigError):
        create_collection_client(env_file=None, base={"MTN_MOMO_ENV": "production"})


def test_prebuilt_config_excludes_other_parameters(sandbox_config):
    with pytest.raises(ValueError, match="not both"):
        create_collection_client(config=sandbox_config, currency="EUR")


def test_process_payment_facade(sandbox_config):
    session = happy_sandbox_session()

    outcome = process_payment(100, "260971234567", "INV-1", config=sandbox_config, session=session)

    assert outcome.state is TransactionState.SUCCESSFUL
    assert session.count("submit") == 1


def test_process_payment_facade_loads_configuration():
    session = happy_sandbox_session()

    outcome = process_payment(
        100,
        "260971234567",
        "INV-1",
        env_file=None,
        base=SANDBOX_ENV,
        session=session,
    )

    assert outcome.succeeded
    assert session.calls_for("submit")[0].url.startswith("https://sandbox.momo.test/")
