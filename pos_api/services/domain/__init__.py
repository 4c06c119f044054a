"""
Domain Services - Order lifecycle application layer.

Services contain business logic and orchestrate operations.

Structure:
    Router (thin controller)
        ↓
    Service (business logic)  ← YOU ARE HERE
        ↓
    Model (entity)

Usage:
    from pos_api.services.domain import OrderService

    # In router
    service = OrderService(db, cache, publisher, number_generator)
    order = service.get_order_by_id(order_id)
"""

from .catalog_lookup import CatalogLookup, CatalogType, CatalogEntry, CookingMethodEntry
from .order_item_validator import (
    OrderItemValidator,
    LineReference,
    ValidatedOrderLine,
    base_preparation_time,
)
from .order_totals import OrderTotals, calculate_order_totals
from .order_number import OrderNumberGenerator, AtomicCounter
from .order_status import (
    parse_order_status,
    allowed_transitions,
    can_transition,
    ensure_transition,
    apply_transition,
    cascade_item_status,
)
from .order_service import OrderService, EventSink

__all__ = [
    # Catalog
    "CatalogLookup",
    "CatalogType",
    "CatalogEntry",
    "CookingMethodEntry",
    # Line validation
    "OrderItemValidator",
    "LineReference",
    "ValidatedOrderLine",
    "base_preparation_time",
    # Totals
    "OrderTotals",
    "calculate_order_totals",
    # Order numbers
    "OrderNumberGenerator",
    "AtomicCounter",
    # State machine
    "parse_order_status",
    "allowed_transitions",
    "can_transition",
    "ensure_transition",
    "apply_transition",
    "cascade_item_status",
    # Orchestration
    "OrderService",
    "EventSink",
]
