"""
Cancellation and deadline token threaded through every remote call.
"""

from __future__ import annotations

import threading
import time
from typing import Callable, Optional

from .errors import OperationCancelled, PaymentStage

__all__ = ["Deadline"]


class Deadline:
    """
    Cooperative cancellation token with an optional overall time limit.

    ``cancel()`` may be called from any thread. Blocking waits go through
    :meth:`sleep`, which wakes as soon as the token is cancelled.
    """

    def __init__(
        self,
        timeout: Optional[float] = None,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if timeout is not None and timeout < 0:
            raise ValueError("timeout must not be negative")
        self._clock = clock
        self._event = threading.Event()
        self._expires_at = None if timeout is None else clock() + float(timeout)

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def remaining(self) -> Optional[float]:
        if self._expires_at is None:
            return None
        return max(0.0, self._expires_at - self._clock())

    @property
    def expired(self) -> bool:
        remaining = self.remaining()
        return remaining is not None and remaining <= 0

    def check(self, stage: PaymentStage, correlation_id: Optional[str] = None) -> None:
        if self.cancelled:
            raise OperationCancelled(
                f"Transaction cancelled during {stage.value}",
                stage=stage,
                correlation_id=correlation_id,
            )
        if self.expired:
            raise OperationCancelled(
                f"Deadline exceeded during {stage.value}",
                stage=stage,
                correlation_id=correlation_id,
            )

    def clamp(self, timeout: float) -> float:
        """Bound a per-request timeout by the time left on the deadline."""
        remaining = self.remaining()
        if remaining is None:
            return timeout
        return min(timeout, remaining)

    def sleep(
        self,
        seconds: float,
        stage: PaymentStage = PaymentStage.POLLING,
        correlation_id: Optional[str] = None,
    ) -> None:
        self.check(stage, correlation_id)
        self._event.wait(self.clamp(seconds))
        self.check(stage, correlation_id)
