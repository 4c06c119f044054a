"""
Best-effort call wrapper.

Some steps of an order operation must never change its outcome: caching a
snapshot, dropping a stale cache entry, publishing an event. They run through
best_effort(), which logs any failure and hands back a default instead of
raising. Everything else propagates normally.
"""

from __future__ import annotations

from typing import Any, Callable, TypeVar

from shared.config.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


def best_effort(
    operation: str,
    fn: Callable[..., T],
    *args: Any,
    default: T | None = None,
    log_context: dict[str, Any] | None = None,
    **kwargs: Any,
) -> T | None:
    """
    Call fn(*args, **kwargs); on any exception log it and return default.

    Usage:
        best_effort("cache order", cache.set_order, order_out, log_context={"order_id": 1})
    """
    try:
        return fn(*args, **kwargs)
    except Exception as e:
        logger.error(
            f"Best-effort operation failed: {operation}",
            operation=operation,
            error=str(e),
            error_type=type(e).__name__,
            **(log_context or {}),
        )
        return default
