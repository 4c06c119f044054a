"""
Order Event Publishing with Retry.

Events are best-effort: a failed publish is retried with linear backoff,
logged, and then dropped. Nothing here raises to the caller.
"""

from __future__ import annotations

import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Protocol

from shared.config.settings import settings
from shared.config.logging import get_logger
from .event_types import MAX_EVENT_SIZE
from .event_schema import OrderEvent
from .circuit_breaker import (
    EventCircuitBreaker,
    get_event_circuit_breaker,
    calculate_linear_retry_delay,
)

logger = get_logger(__name__)


class PubSubClient(Protocol):
    """The slice of the redis.Redis API the publisher needs."""

    def publish(self, channel: str, message: str) -> int: ...


def _validate_event_size(event_json: str, event_type: str) -> None:
    """Raise ValueError when the serialized event is too large to publish."""
    size = len(event_json.encode("utf-8"))
    if size > MAX_EVENT_SIZE:
        raise ValueError(
            f"Event {event_type} exceeds max size: {size} > {MAX_EVENT_SIZE} bytes"
        )


class EventPublisher:
    """
    Publishes order events to a Redis channel.

    Usage:
        publisher = EventPublisher(get_redis_sync_client())

        # Blocking, returns number of subscribers (0 on failure)
        publisher.publish(event)

        # Fire-and-forget on the publisher's worker thread
        publisher.submit(event)
    """

    def __init__(
        self,
        client: PubSubClient,
        channel: str | None = None,
        max_attempts: int | None = None,
        retry_delay: float | None = None,
        circuit_breaker: EventCircuitBreaker | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._client = client
        self._channel = channel or settings.order_events_channel
        self._max_attempts = max(
            1, max_attempts if max_attempts is not None else settings.order_event_publish_retries
        )
        self._retry_delay = (
            retry_delay if retry_delay is not None else settings.order_event_retry_delay
        )
        self._circuit_breaker = circuit_breaker or get_event_circuit_breaker()
        self._sleep = sleep
        self._executor: ThreadPoolExecutor | None = None
        self._executor_lock = threading.Lock()

    @property
    def channel(self) -> str:
        return self._channel

    def publish(self, event: OrderEvent) -> int:
        """
        Publish an event, retrying with linear backoff.

        Returns the number of subscribers that received the message, or 0
        when the event was skipped or every attempt failed.
        """
        try:
            event_json = event.to_json()
            _validate_event_size(event_json, event.type)
        except ValueError as e:
            logger.error("Order event rejected", event_type=event.type, error=str(e))
            return 0

        if not self._circuit_breaker.can_execute():
            logger.warning(
                "Cannot publish event - circuit breaker open",
                event_type=event.type,
                order_id=event.order_id,
            )
            return 0

        for attempt in range(1, self._max_attempts + 1):
            try:
                result = self._client.publish(self._channel, event_json)
                self._circuit_breaker.record_success()
                return result
            except Exception as e:
                logger.error(
                    "Failed to publish order event",
                    event_type=event.type,
                    order_id=event.order_id,
                    attempt=attempt,
                    max_attempts=self._max_attempts,
                    error=str(e),
                )
                if attempt < self._max_attempts:
                    self._sleep(calculate_linear_retry_delay(attempt, self._retry_delay))

        self._circuit_breaker.record_failure()
        logger.error(
            "All publish attempts failed",
            event_type=event.type,
            order_id=event.order_id,
        )
        return 0

    def submit(self, event: OrderEvent) -> Future[int]:
        """
        Publish on the background worker so retries never delay the caller.

        One worker thread publishes events in submission order.
        """
        with self._executor_lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=1, thread_name_prefix="order-events"
                )
            return self._executor.submit(self.publish, event)

    def shutdown(self, wait: bool = True) -> None:
        """Stop the background worker, optionally draining queued events."""
        with self._executor_lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=wait)

