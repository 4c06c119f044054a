"""
Centralized HTTP exceptions for consistent error handling.

Business-rule failures (NotFound, InvalidInput, Conflict, InsufficientStock)
carry a message naming the offending field or entity. Infrastructure failures
carry a generic "temporarily unavailable" message and never leak internals.

Usage:
    from shared.utils.exceptions import NotFoundError, ConflictError, ValidationError

    raise NotFoundError("Table", table_id)
    raise ConflictError("Delivery area is not active")
    raise ValidationError("Order must contain at least one item")
"""

from typing import Any

from fastapi import HTTPException, status

from shared.config.logging import get_logger

logger = get_logger(__name__)


class AppException(HTTPException):
    """
    Base exception with automatic logging.

    All custom exceptions inherit from this class
    to ensure consistent logging and response format.
    """

    retryable: bool = False

    def __init__(
        self,
        status_code: int,
        detail: str,
        log_level: str = "warning",
        headers: dict[str, str] | None = None,
        **log_context: Any,
    ):
        log_fn = getattr(logger, log_level, logger.warning)
        log_fn(detail, status_code=status_code, **log_context)

        super().__init__(status_code=status_code, detail=detail, headers=headers)

    def __str__(self) -> str:
        return str(self.detail)


# =============================================================================
# 404 Not Found Errors
# =============================================================================


class NotFoundError(AppException):
    """
    Entity not found error (404). Soft-deleted rows count as absent.

    Usage:
        raise NotFoundError("Order", 123)
        raise NotFoundError("Recipe", recipe_id, item_type="recipe")
    """

    def __init__(self, entity: str, entity_id: int | str | None = None, **log_context: Any):
        if entity_id is not None:
            detail = f"{entity} with ID {entity_id} not found"
        else:
            detail = f"{entity} not found"

        self.entity = entity
        self.entity_id = entity_id
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            log_level="warning",
            entity=entity,
            entity_id=entity_id,
            **log_context,
        )


class OrderNotFoundError(NotFoundError):
    """Order not found."""

    def __init__(self, order_id: int | None = None, **log_context: Any):
        super().__init__("Order", order_id, **log_context)


# =============================================================================
# 400 Bad Request Errors
# =============================================================================


class ValidationError(AppException):
    """
    Invalid input error (400): malformed or missing fields, unknown enum values.

    Usage:
        raise ValidationError("Company ID required for company orders")
        raise ValidationError("Invalid item type: drink", field="item_type")
    """

    def __init__(self, detail: str, **log_context: Any):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            log_level="warning",
            **log_context,
        )


# =============================================================================
# 409 Conflict Errors
# =============================================================================


class ConflictError(AppException):
    """
    Resource conflict error (409): entity not available or not active,
    disallowed state transition.

    Usage:
        raise ConflictError("Table is occupied", table_id=5)
    """

    def __init__(self, detail: str, **log_context: Any):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
            log_level="warning",
            **log_context,
        )


class InsufficientStockError(ConflictError):
    """Requested quantity exceeds the tracked stock of an item."""

    def __init__(self, name: str, available: Any, requested: Any, **log_context: Any):
        self.available = available
        self.requested = requested
        super().__init__(
            f'Insufficient stock for "{name}". Available: {available}',
            available=available,
            requested=requested,
            **log_context,
        )


class InvalidTransitionError(ConflictError):
    """Status change not allowed from the current status."""

    def __init__(
        self,
        entity: str,
        from_status: str,
        to_status: str,
        allowed: list[str],
        **log_context: Any,
    ):
        self.from_status = from_status
        self.to_status = to_status
        self.allowed = list(allowed)
        allowed_str = ", ".join(allowed) or "none"
        detail = (
            f"Cannot change {entity} status from {from_status} to {to_status}. "
            f"Allowed transitions: {allowed_str}"
        )
        super().__init__(
            detail,
            entity=entity,
            from_status=from_status,
            to_status=to_status,
            **log_context,
        )


# =============================================================================
# 503 Service Unavailable
# =============================================================================


class ServiceUnavailableError(AppException):
    """
    Retryable infrastructure failure (503): transaction timeout, lock wait,
    persistence unavailable. The detail is generic on purpose; the operation
    name is only logged.
    """

    retryable = True

    def __init__(self, operation: str, retry_after: int = 1, **log_context: Any):
        super().__init__(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service temporarily unavailable. Please try again.",
            log_level="error",
            headers={"Retry-After": str(retry_after)},
            operation=operation,
            **log_context,
        )
