"""
Services module for business logic.

- domain/: Order lifecycle services (catalog lookup, line validation,
  totals, order numbers, status state machine, OrderService)

Usage:
    from pos_api.services.domain import OrderService
    service = OrderService(db, cache, publisher, number_generator)
"""

from .domain import OrderService

__all__ = ["OrderService"]
