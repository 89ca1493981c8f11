from decimal import Decimal

import pytest

from momo_collections.core.transaction import PaymentTransaction, TransactionState


def _transaction():
    return PaymentTransaction(
        amount=Decimal("100"),
        currency="ZMW",
        payer_phone="260971234567",
        merchant_reference="INV-1",
        correlation_id="ref-1",
    )


@pytest.mark.parametrize(
    "terminal",
    [TransactionState.SUCCESSFUL, TransactionState.FAILED, TransactionState.TIMED_OUT],
)
def test_happy_path_transitions(terminal):
    transaction = _transaction()
    assert transaction.state is TransactionState.INITIATED

    transaction.advance(TransactionState.SUBMITTED)
    transaction.advance(TransactionState.POLLING)
    transaction.advance(terminal)

    outcome = transaction.outcome({"status": terminal.value})
    assert outcome.state is terminal
    assert outcome.correlation_id == "ref-1"


def test_cannot_skip_submission():
    transaction = _transaction()
    with pytest.raises(ValueError):
        transaction.advance(TransactionState.POLLING)


def test_terminal_states_are_final():
    transaction = _transaction()
    transaction.advance(TransactionState.SUBMITTED)
    transaction.advance(TransactionState.POLLING)
    transaction.advance(TransactionState.FAILED)

    with pytest.raises(ValueError):
        transaction.advance(TransactionState.SUCCESSFUL)


def test_outcome_requires_terminal_state():
    transaction = _transaction()
    transaction.advance(TransactionState.SUBMITTED)

    with pytest.raises(ValueError):
        transaction.outcome(None)


def test_timed_out_outcome_has_no_reason_without_payload():
    transaction = _transaction()
    transaction.advance(TransactionState.SUBMITTED)
    transaction.advance(TransactionState.POLLING)
    transaction.advance(TransactionState.TIMED_OUT)

    outcome = transaction.outcome(None)

    assert outcome.timed_out
    assert outcome.reason is None
    assert not TransactionState.POLLING.is_terminal
    assert TransactionState.TIMED_OUT.is_terminal
