"""
Circuit breaker for order event publishing.

While Redis is unreachable the circuit is OPEN and publishing is skipped at
once, so order requests do not each sit through connection timeouts.
"""

from __future__ import annotations

import threading
import time
from enum import Enum
from typing import Callable

from shared.config.settings import settings
from shared.config.logging import get_logger

logger = get_logger(__name__)


class CircuitState(Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class EventCircuitBreaker:
    """
    Counts consecutive publish failures.

    After failure_threshold failures in a row the circuit opens. Once
    recovery_timeout seconds have passed, a single trial publish is let
    through: success closes the circuit, failure opens it again.
    """

    def __init__(
        self,
        failure_threshold: int | None = None,
        recovery_timeout: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._failure_threshold = max(
            1,
            failure_threshold
            if failure_threshold is not None
            else settings.order_event_circuit_threshold,
        )
        self._recovery_timeout = (
            recovery_timeout
            if recovery_timeout is not None
            else settings.order_event_circuit_recovery_seconds
        )
        self._clock = clock
        self._lock = threading.Lock()

        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._opened_at: float | None = None
        self._trial_in_flight = False
        self._skipped_count = 0

    @property
    def state(self) -> CircuitState:
        return self._state

    def can_execute(self) -> bool:
        """True when a publish may be attempted now."""
        with self._lock:
            if self._state is CircuitState.CLOSED:
                return True

            if self._state is CircuitState.OPEN:
                if self._clock() - self._opened_at < self._recovery_timeout:
                    self._skipped_count += 1
                    return False
                self._state = CircuitState.HALF_OPEN
                self._trial_in_flight = False
                logger.info("Order event circuit half-open, trying one publish")

            if self._trial_in_flight:
                self._skipped_count += 1
                return False
            self._trial_in_flight = True
            return True

    def record_failure(self) -> None:
        with self._lock:
            self._failure_count += 1
            if self._state is CircuitState.HALF_OPEN or (
                self._state is CircuitState.CLOSED
                and self._failure_count >= self._failure_threshold
            ):
                self._state = CircuitState.OPEN
                self._opened_at = self._clock()
                self._trial_in_flight = False
                logger.error(
                    "Order event circuit opened",
                    failure_count=self._failure_count,
                    threshold=self._failure_threshold,
                    retry_in_seconds=self._recovery_timeout,
                )

    def record_success(self) -> None:
        with self._lock:
            if self._state is not CircuitState.CLOSED:
                logger.info("Order event circuit closed", skipped_events=self._skipped_count)
            self._state = CircuitState.CLOSED
            self._failure_count = 0
            self._opened_at = None
            self._trial_in_flight = False

    def get_stats(self) -> dict:
        """Snapshot for the detailed health check."""
        with self._lock:
            retry_in = None
            if self._state is CircuitState.OPEN:
                retry_in = max(
                    0.0, self._recovery_timeout - (self._clock() - self._opened_at)
                )
            return {
                "state": self._state.value,
                "failure_count": self._failure_count,
                "failure_threshold": self._failure_threshold,
                "skipped_count": self._skipped_count,
                "retry_in_seconds": retry_in,
            }


_event_circuit_breaker: EventCircuitBreaker | None = None
_circuit_breaker_lock = threading.Lock()


def get_event_circuit_breaker() -> EventCircuitBreaker:
    """Process-wide breaker shared by every publisher."""
    global _event_circuit_breaker
    if _event_circuit_breaker is None:
        with _circuit_breaker_lock:
            if _event_circuit_breaker is None:
                _event_circuit_breaker = EventCircuitBreaker()
    return _event_circuit_breaker


def calculate_linear_retry_delay(attempt: int, base_delay: float = 1.0) -> float:
    """Delay after failed attempt N (1-indexed): N * base_delay."""
    return base_delay * max(attempt, 1)
