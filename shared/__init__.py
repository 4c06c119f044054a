"""
Shared module for the POS API: configuration, infrastructure and utilities.

STRUCTURE:
- shared.config: Configuration
  - settings.py: Environment config (Pydantic)
  - logging.py: Structured logging
  - constants.py: OrderStatus, transitions, limits

- shared.infrastructure: Database, cache and messaging
  - db.py: SQLAlchemy sessions, atomic() transactions
  - cache/: Order snapshots and idempotency entries in Redis
  - events/: Redis pub/sub publisher with circuit breaker
  - best_effort.py: Wrapper for steps that must never fail an operation

- shared.utils: Utilities
  - exceptions.py: HTTP exceptions with auto-logging
  - schemas.py: Request and response Pydantic schemas

IMPORT EXAMPLES:
    from shared.infrastructure.db import get_db, atomic
    from shared.config.settings import settings
    from shared.config.constants import OrderStatus, ORDER_TRANSITIONS
    from shared.utils.exceptions import NotFoundError, ConflictError
"""
