"""
Order status state machine.

PENDING -> CONFIRMED -> PREPARING -> READY -> SERVED | DELIVERED
Any non-terminal status before READY may also go to CANCELLED.

This module only decides and mutates in memory. Locking, history rows and
committing belong to OrderService.update_order_status.
"""

from __future__ import annotations

from datetime import datetime

from pos_api.models import Order, OrderItem
from shared.config.constants import (
    ORDER_ITEM_CASCADE,
    ORDER_TRANSITIONS,
    OrderStatus,
    TableStatus,
)
from shared.utils.exceptions import InvalidTransitionError, ValidationError


def parse_order_status(raw: str) -> str:
    """Normalize a requested status; unknown values are invalid input."""
    candidate = str(raw).strip().upper()
    if candidate not in OrderStatus.ALL:
        raise ValidationError(
            f"Invalid order status: {raw}. Must be one of: {', '.join(OrderStatus.ALL)}",
            field="status",
        )
    return candidate


def allowed_transitions(current: str) -> list[str]:
    return list(ORDER_TRANSITIONS.get(current, []))


def can_transition(current: str, target: str) -> bool:
    return target in ORDER_TRANSITIONS.get(current, [])


def ensure_transition(current: str, target: str, **log_context) -> None:
    """Raise InvalidTransitionError unless current -> target is an edge."""
    if not can_transition(current, target):
        raise InvalidTransitionError(
            "order", current, target, allowed_transitions(current), **log_context
        )


def cascade_item_status(items: list[OrderItem], target: str) -> int:
    """
    Move the order's lines along with it.

    Returns the number of lines changed. Lines not in the expected source
    status are left alone.
    """
    rule = ORDER_ITEM_CASCADE.get(target)
    if rule is None:
        return 0
    from_status, to_status = rule
    changed = 0
    for item in items:
        if item.deleted_at is None and item.status == from_status:
            item.status = to_status
            changed += 1
    return changed


def apply_transition(
    order: Order,
    target: str,
    staff_id: int | None,
    now: datetime,
) -> None:
    """
    Set the new status and its side effects on an order already checked
    with ensure_transition().
    """
    order.status = target

    if target == OrderStatus.CONFIRMED:
        order.confirmed_at = now
        if staff_id is not None:
            order.kitchen_staff_id = staff_id
    elif target == OrderStatus.PREPARING:
        order.kitchen_start_at = now
    elif target == OrderStatus.READY:
        order.ready_at = now
    elif target == OrderStatus.SERVED:
        order.served_at = now
        if staff_id is not None:
            order.hall_manager_id = staff_id
    elif target == OrderStatus.DELIVERED:
        order.delivered_at = now
        if staff_id is not None:
            order.delivery_staff_id = staff_id

    cascade_item_status(order.items, target)

    if target in OrderStatus.RELEASES_TABLE and order.table is not None:
        order.table.status = TableStatus.AVAILABLE
