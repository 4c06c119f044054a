"""
Order event system over Redis pub/sub.

- circuit_breaker.py: Circuit breaker and retry delay for publishing
- event_types.py: Event type constants
- event_schema.py: OrderEvent dataclass with validation
- redis_pool.py: Connection pool management
- publisher.py: EventPublisher with bounded retries
"""

from .circuit_breaker import (
    CircuitState,
    EventCircuitBreaker,
    get_event_circuit_breaker,
    calculate_linear_retry_delay,
)
from .event_types import (
    ORDER_CREATED,
    STATUS_UPDATED,
    MAX_EVENT_SIZE,
)
from .event_schema import OrderEvent
from .redis_pool import (
    get_redis_sync_client,
    close_redis_sync_client,
)
from .publisher import EventPublisher, PubSubClient

__all__ = [
    # Circuit Breaker
    "CircuitState",
    "EventCircuitBreaker",
    "get_event_circuit_breaker",
    "calculate_linear_retry_delay",
    # Event Types
    "ORDER_CREATED",
    "STATUS_UPDATED",
    "MAX_EVENT_SIZE",
    # Event Schema
    "OrderEvent",
    # Redis Pool
    "get_redis_sync_client",
    "close_redis_sync_client",
    # Publishing
    "EventPublisher",
    "PubSubClient",
]
