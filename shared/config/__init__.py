"""
Configuration module: Settings, logging, constants.
"""

from shared.config.settings import settings, DATABASE_URL
from shared.config.logging import get_logger, setup_logging
from shared.config.constants import (
    OrderStatus,
    OrderItemStatus,
    OrderType,
    CustomerType,
    TableStatus,
    ORDER_TRANSITIONS,
    Limits,
)

__all__ = [
    # settings
    "settings",
    "DATABASE_URL",
    # logging
    "get_logger",
    "setup_logging",
    # constants
    "OrderStatus",
    "OrderItemStatus",
    "OrderType",
    "CustomerType",
    "TableStatus",
    "ORDER_TRANSITIONS",
    "Limits",
]
