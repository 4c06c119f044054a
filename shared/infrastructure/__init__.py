"""
Infrastructure module: Database, cache and events.

Provides:
- Database sessions and transactions (db.py)
- Order cache over Redis (cache/)
- Redis pub/sub for order events (events/)
- best_effort() wrapper for steps that must not fail an operation
"""

from shared.infrastructure.db import (
    engine,
    SessionLocal,
    get_db,
    get_db_context,
    atomic,
)
from shared.infrastructure.events import (
    get_redis_sync_client,
    close_redis_sync_client,
    EventPublisher,
)
from shared.infrastructure.best_effort import best_effort

__all__ = [
    # db
    "engine",
    "SessionLocal",
    "get_db",
    "get_db_context",
    "atomic",
    # events (Redis)
    "get_redis_sync_client",
    "close_redis_sync_client",
    "EventPublisher",
    # helpers
    "best_effort",
]
