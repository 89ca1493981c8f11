"""
Per-transaction state tracking.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, FrozenSet, Mapping, Optional

__all__ = [
    "PaymentOutcome",
    "PaymentTransaction",
    "TERMINAL_STATES",
    "TransactionState",
]


class TransactionState(str, Enum):
    INITIATED = "INITIATED"
    SUBMITTED = "SUBMITTED"
    POLLING = "POLLING"
    SUCCESSFUL = "SUCCESSFUL"
    FAILED = "FAILED"
    TIMED_OUT = "TIMED_OUT"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATES


TERMINAL_STATES: FrozenSet[TransactionState] = frozenset(
    {TransactionState.SUCCESSFUL, TransactionState.FAILED, TransactionState.TIMED_OUT}
)

_ALLOWED: Mapping[TransactionState, FrozenSet[TransactionState]] = {
    TransactionState.INITIATED: frozenset({TransactionState.SUBMITTED}),
    TransactionState.SUBMITTED: frozenset({TransactionState.POLLING}),
    TransactionState.POLLING: TERMINAL_STATES,
}


@dataclass
class PaymentTransaction:
    amount: Decimal
    currency: str
    payer_phone: str
    merchant_reference: str
    correlation_id: str
    state: TransactionState = TransactionState.INITIATED

    def advance(self, state: TransactionState) -> None:
        if state not in _ALLOWED.get(self.state, frozenset()):
            raise ValueError(f"Cannot move transaction from {self.state.value} to {state.value}")
        self.state = state

    def outcome(self, status_payload: Optional[Dict[str, Any]]) -> "PaymentOutcome":
        if not self.state.is_terminal:
            raise ValueError(f"Transaction is still {self.state.value}")
        return PaymentOutcome(
            state=self.state,
            status_payload=status_payload,
            correlation_id=self.correlation_id,
        )


@dataclass(frozen=True)
class PaymentOutcome:
    """
    Terminal result of :func:`process_payment`.

    ``TIMED_OUT`` means the provider never answered with a final status within
    the polling budget, not that the payment was declined.
    """

    state: TransactionState
    status_payload: Optional[Dict[str, Any]]
    correlation_id: str

    @property
    def succeeded(self) -> bool:
        return self.state is TransactionState.SUCCESSFUL

    @property
    def timed_out(self) -> bool:
        return self.state is TransactionState.TIMED_OUT

    @property
    def reason(self) -> Optional[Any]:
        if not self.status_payload:
            return None
        return self.status_payload.get("reason")
