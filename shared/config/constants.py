"""
Centralized constants for the backend application.
Avoids magic strings and repeated constants.

Usage:
    from shared.config.constants import OrderStatus, ORDER_TRANSITIONS

    if new_status in ORDER_TRANSITIONS[order.status]:
        ...
"""

from typing import Final


# =============================================================================
# Entity Status Constants
# =============================================================================


class OrderStatus:
    """Order status constants."""

    PENDING: Final[str] = "PENDING"
    CONFIRMED: Final[str] = "CONFIRMED"
    PREPARING: Final[str] = "PREPARING"
    READY: Final[str] = "READY"
    SERVED: Final[str] = "SERVED"
    DELIVERED: Final[str] = "DELIVERED"
    CANCELLED: Final[str] = "CANCELLED"

    ALL: Final[list[str]] = [PENDING, CONFIRMED, PREPARING, READY, SERVED, DELIVERED, CANCELLED]
    # Statuses that release the order's table
    RELEASES_TABLE: Final[frozenset[str]] = frozenset({SERVED, DELIVERED, CANCELLED})
    # No remaining-time estimate is reported once the kitchen is done
    NO_REMAINING_TIME: Final[frozenset[str]] = frozenset({READY, SERVED, DELIVERED, CANCELLED})


class OrderItemStatus:
    """Per-line status, a subset of the order lifecycle."""

    PENDING: Final[str] = "PENDING"
    PREPARING: Final[str] = "PREPARING"
    READY: Final[str] = "READY"


class OrderType:
    """Order type constants."""

    DINE_IN: Final[str] = "DINE_IN"
    TAKEAWAY: Final[str] = "TAKEAWAY"
    DELIVERY: Final[str] = "DELIVERY"
    PARTY: Final[str] = "PARTY"
    OPEN_BUFFET: Final[str] = "OPEN_BUFFET"


class CustomerType:
    """Customer type constants."""

    INDIVIDUAL: Final[str] = "INDIVIDUAL"
    COMPANY: Final[str] = "COMPANY"


class TableStatus:
    """Table occupancy status constants."""

    AVAILABLE: Final[str] = "AVAILABLE"
    OCCUPIED: Final[str] = "OCCUPIED"
    RESERVED: Final[str] = "RESERVED"
    CLEANING: Final[str] = "CLEANING"


# =============================================================================
# Status Transitions
# =============================================================================

# Valid order status transitions (from -> [allowed to states])
# Flow: PENDING → CONFIRMED → PREPARING → READY → SERVED / DELIVERED
ORDER_TRANSITIONS: Final[dict[str, list[str]]] = {
    OrderStatus.PENDING: [OrderStatus.CONFIRMED, OrderStatus.CANCELLED],
    OrderStatus.CONFIRMED: [OrderStatus.PREPARING, OrderStatus.CANCELLED],
    OrderStatus.PREPARING: [OrderStatus.READY, OrderStatus.CANCELLED],
    OrderStatus.READY: [OrderStatus.SERVED, OrderStatus.DELIVERED],
    OrderStatus.SERVED: [],  # Terminal state
    OrderStatus.DELIVERED: [],  # Terminal state
    OrderStatus.CANCELLED: [],  # Terminal state
}

# Line-item cascade on order transitions: target -> (from item status, to item status)
ORDER_ITEM_CASCADE: Final[dict[str, tuple[str, str]]] = {
    OrderStatus.PREPARING: (OrderItemStatus.PENDING, OrderItemStatus.PREPARING),
    OrderStatus.READY: (OrderItemStatus.PREPARING, OrderItemStatus.READY),
}


# =============================================================================
# Preparation Time Defaults (minutes)
# =============================================================================


class PrepTime:
    """Default per-unit preparation times by catalog type."""

    ITEM: Final[int] = 5
    RECIPE: Final[int] = 15
    MEAL: Final[int] = 20


# =============================================================================
# Validation Constants
# =============================================================================


class Limits:
    """Validation limits."""

    MAX_ORDER_INSTRUCTIONS_LENGTH: Final[int] = 500
    MAX_LINE_INSTRUCTIONS_LENGTH: Final[int] = 200
    MAX_STATUS_NOTES_LENGTH: Final[int] = 200
    MAX_IDEMPOTENCY_KEY_LENGTH: Final[int] = 128
