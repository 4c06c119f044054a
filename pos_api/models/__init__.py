"""
SQLAlchemy ORM Models Package.

All models are organized into domain-specific modules:
- base: Base class and AuditMixin
- customer: Customer, CompanyCustomer
- staff: Staff
- table: Table, DeliveryArea
- catalog: Item, Recipe, Meal, CookingMethod
- order: Order, OrderItem, OrderStatusHistory
"""

# Base classes
from .base import Base, AuditMixin

# Customers
from .customer import Customer, CompanyCustomer

# Staff
from .staff import Staff

# Tables and delivery zones
from .table import Table, DeliveryArea

# Catalog (sellable entries and modifiers)
from .catalog import Item, Recipe, Meal, CookingMethod

# Orders
from .order import Order, OrderItem, OrderStatusHistory

__all__ = [
    "Base",
    "AuditMixin",
    "Customer",
    "CompanyCustomer",
    "Staff",
    "Table",
    "DeliveryArea",
    "Item",
    "Recipe",
    "Meal",
    "CookingMethod",
    "Order",
    "OrderItem",
    "OrderStatusHistory",
]
