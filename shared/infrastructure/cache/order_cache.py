"""
Order cache backed by Redis.

Holds two kinds of entries:
- order:{id}: snapshot of an active order, dropped on every status change
- idempotency:order:{key}: the createOrder result replayed for a repeated key

Values are pydantic JSON. The class raises on Redis errors; callers decide
whether a failure matters (order service wraps writes in best_effort).
"""

from __future__ import annotations

from typing import Protocol

from shared.config.settings import settings
from shared.infrastructure.redis.constants import (
    get_order_cache_key,
    get_order_idempotency_key,
)
from shared.utils.schemas import OrderOutput


class KeyValueStore(Protocol):
    """The slice of the redis.Redis API the cache needs."""

    def get(self, name: str) -> str | bytes | None: ...

    def setex(self, name: str, time: int, value: str) -> object: ...

    def delete(self, *names: str) -> int: ...


class OrderCache:
    """Redis-backed store for order snapshots and idempotency results."""

    def __init__(
        self,
        client: KeyValueStore,
        order_ttl: int | None = None,
        idempotency_ttl: int | None = None,
    ):
        self._client = client
        self._order_ttl = order_ttl if order_ttl is not None else settings.order_cache_ttl
        self._idempotency_ttl = (
            idempotency_ttl if idempotency_ttl is not None else settings.order_idempotency_ttl
        )

    # -------------------------------------------------------------------------
    # Order snapshots
    # -------------------------------------------------------------------------

    def set_order(self, order: OrderOutput) -> None:
        self._client.setex(get_order_cache_key(order.id), self._order_ttl, order.model_dump_json())

    def delete_order(self, order_id: int) -> None:
        self._client.delete(get_order_cache_key(order_id))

    # -------------------------------------------------------------------------
    # Idempotency results
    # -------------------------------------------------------------------------

    def get_idempotent_result(self, idempotency_key: str) -> OrderOutput | None:
        raw = self._client.get(get_order_idempotency_key(idempotency_key))
        return None if raw is None else OrderOutput.model_validate_json(raw)

    def store_idempotent_result(self, idempotency_key: str, order: OrderOutput) -> None:
        self._client.setex(
            get_order_idempotency_key(idempotency_key),
            self._idempotency_ttl,
            order.model_dump_json(),
        )
