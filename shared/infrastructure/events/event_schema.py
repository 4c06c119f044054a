"""
Event Schema.

Defines the OrderEvent dataclass published on the order events channel.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, asdict, field
from datetime import datetime, timezone
from typing import Any

from .event_types import ORDER_EVENT_TYPES


@dataclass
class OrderEvent:
    """
    Order event envelope.

    'data' holds the event-specific payload (order id, number, statuses...).
    'timestamp' is filled with the publish time when not given.
    """

    type: str
    order_id: int
    data: dict[str, Any] = field(default_factory=dict)
    timestamp: str | None = None
    v: int = 1  # Schema version for future compatibility

    def __post_init__(self) -> None:
        """Reject malformed events before they reach Redis."""
        if self.type not in ORDER_EVENT_TYPES:
            raise ValueError(f"Unknown order event type: {self.type!r}")

        if not isinstance(self.order_id, int) or self.order_id <= 0:
            raise ValueError("Event order_id must be a positive integer")

        if not isinstance(self.data, dict):
            raise ValueError("Event data must be a dict")

    def to_json(self) -> str:
        """Serialize event to a flat JSON object."""
        payload = asdict(self)
        data = payload.pop("data") or {}
        payload["timestamp"] = payload["timestamp"] or datetime.now(timezone.utc).isoformat()
        return json.dumps({**data, **payload}, ensure_ascii=False, default=str)

    @classmethod
    def from_json(cls, json_str: str) -> "OrderEvent":
        """Deserialize an event produced by to_json()."""
        payload = json.loads(json_str)
        event_type = payload.pop("type")
        order_id = payload.pop("order_id")
        timestamp = payload.pop("timestamp", None)
        version = payload.pop("v", 1)
        return cls(type=event_type, order_id=order_id, data=payload, timestamp=timestamp, v=version)
