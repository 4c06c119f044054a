"""
Database configuration and session management.
Uses SQLAlchemy 2.0 patterns.
"""

import os
from collections.abc import Generator
from contextlib import contextmanager

from sqlalchemy import create_engine, text
from sqlalchemy.exc import DBAPIError, OperationalError
from sqlalchemy.orm import sessionmaker, Session

from shared.config.settings import DATABASE_URL
from shared.config.logging import get_logger
from shared.utils.exceptions import ServiceUnavailableError

logger = get_logger(__name__)


def _calculate_pool_size() -> int:
    """
    Calculate pool size based on CPU cores.
    Formula: (2 * CPU cores) + 1, capped at 20.
    """
    cores = os.cpu_count() or 4
    return min(cores * 2 + 1, 20)


# Engine with connection pooling and timeouts
engine = create_engine(
    DATABASE_URL,
    pool_pre_ping=True,  # Verify connections before using
    pool_size=_calculate_pool_size(),
    max_overflow=15,
    pool_timeout=30,  # Wait max 30s for connection from pool
    pool_recycle=1800,  # Recycle connections after 30 minutes
    connect_args={"connect_timeout": 10},
    echo=False,
)

# Session factory
SessionLocal = sessionmaker(
    bind=engine,
    autoflush=False,
    autocommit=False,
)


def get_db() -> Generator[Session, None, None]:
    """
    FastAPI dependency for database sessions.

    Usage:
        @router.get("/orders/{order_id}")
        def get_order(order_id: int, db: Session = Depends(get_db)):
            ...

    The session is automatically closed after the request completes.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def get_db_context() -> Generator[Session, None, None]:
    """
    Context manager for database sessions outside of FastAPI.

    Usage:
        with get_db_context() as db:
            db.scalar(select(Order).where(Order.id == 1))
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def apply_transaction_timeouts(
    db: Session,
    statement_timeout_ms: int,
    lock_timeout_ms: int,
) -> None:
    """
    Bound the current transaction on PostgreSQL.

    SET LOCAL only lasts until the transaction ends, so this must run after
    the transaction has started. Other dialects have no equivalent and are
    left untouched.
    """
    if db.get_bind().dialect.name != "postgresql":
        return
    db.execute(text(f"SET LOCAL statement_timeout = {int(statement_timeout_ms)}"))
    db.execute(text(f"SET LOCAL lock_timeout = {int(lock_timeout_ms)}"))


@contextmanager
def atomic(
    db: Session,
    operation: str,
    statement_timeout_ms: int | None = None,
    lock_timeout_ms: int | None = None,
) -> Generator[Session, None, None]:
    """
    Run a block of writes as one all-or-nothing transaction.

    Commits when the block exits cleanly. Any exception rolls back. Driver
    level failures (timeouts, lock waits, lost connections) are re-raised as
    ServiceUnavailableError so callers can retry; business exceptions raised
    inside the block propagate unchanged.

    Usage:
        with atomic(db, "create order", statement_timeout_ms=10_000, lock_timeout_ms=5_000):
            db.add(order)
    """
    try:
        if statement_timeout_ms is not None and lock_timeout_ms is not None:
            apply_transaction_timeouts(db, statement_timeout_ms, lock_timeout_ms)
        yield db
        db.commit()
    except (OperationalError, DBAPIError) as e:
        db.rollback()
        logger.error(
            "Transaction failed",
            operation=operation,
            error=str(e.orig) if getattr(e, "orig", None) is not None else str(e),
        )
        raise ServiceUnavailableError(operation) from e
    except Exception:
        db.rollback()
        raise
