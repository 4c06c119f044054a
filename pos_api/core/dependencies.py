"""
FastAPI dependencies for the order endpoints.

Wires the Redis-backed collaborators into OrderService. Tests override
get_order_cache, get_event_publisher and get_order_number_generator with
in-memory doubles through app.dependency_overrides.
"""

from functools import lru_cache

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from shared.config.constants import Limits
from shared.infrastructure.cache import OrderCache
from shared.infrastructure.db import get_db
from shared.infrastructure.events import EventPublisher, get_redis_sync_client
from shared.utils.exceptions import ValidationError
from shared.utils.schemas import StaffContext
from pos_api.services.domain import OrderNumberGenerator, OrderService


def current_staff(
    x_user_id: int | None = Header(default=None, alias="X-User-Id"),
    x_staff_id: int | None = Header(default=None, alias="X-Staff-Id"),
) -> StaffContext:
    """
    Acting user as forwarded by the authenticating gateway.

    X-User-Id is required. X-Staff-Id is present only for staff accounts.
    """
    if x_user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing acting user",
        )
    return StaffContext(user_id=x_user_id, staff_id=x_staff_id)


def get_idempotency_key(
    idempotency_key: str | None = Header(default=None, alias="Idempotency-Key"),
    x_idempotency_key: str | None = Header(default=None, alias="X-Idempotency-Key"),
) -> str | None:
    """Idempotency key from either accepted header."""
    key = (idempotency_key or x_idempotency_key or "").strip()
    if not key:
        return None
    if len(key) > Limits.MAX_IDEMPOTENCY_KEY_LENGTH:
        raise ValidationError(
            f"Idempotency key must be at most {Limits.MAX_IDEMPOTENCY_KEY_LENGTH} characters",
            field="idempotency_key",
        )
    return key


def get_order_cache() -> OrderCache:
    return OrderCache(get_redis_sync_client())


@lru_cache
def get_event_publisher() -> EventPublisher:
    """Process-wide publisher so its worker thread is shared."""
    return EventPublisher(get_redis_sync_client())


def get_order_number_generator() -> OrderNumberGenerator:
    return OrderNumberGenerator(get_redis_sync_client())


def get_order_service(
    db: Session = Depends(get_db),
    cache: OrderCache = Depends(get_order_cache),
    publisher: EventPublisher = Depends(get_event_publisher),
    number_generator: OrderNumberGenerator = Depends(get_order_number_generator),
) -> OrderService:
    return OrderService(db, cache, publisher, number_generator)
