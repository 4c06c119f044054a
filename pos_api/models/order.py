"""
Order Models: Order, OrderItem, OrderStatusHistory.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Text,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import AuditMixin, Base, BigIntPK, Money

if TYPE_CHECKING:
    from .catalog import CookingMethod, Item, Meal, Recipe
    from .customer import CompanyCustomer, Customer
    from .staff import Staff
    from .table import DeliveryArea, Table


class Order(AuditMixin, Base):
    """
    Root aggregate of the order lifecycle.

    Status and the derived timestamps change only through the order status
    state machine. Orders are never deleted; CANCELLED is terminal.
    """

    # "order" is a reserved SQL keyword
    __tablename__ = "pos_order"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    order_number: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    order_type: Mapped[str] = mapped_column(Text, nullable=False)  # DINE_IN, TAKEAWAY, DELIVERY, PARTY, OPEN_BUFFET
    customer_type: Mapped[str] = mapped_column(Text, default="INDIVIDUAL", nullable=False)
    status: Mapped[str] = mapped_column(Text, default="PENDING", nullable=False, index=True)

    customer_id: Mapped[Optional[int]] = mapped_column(
        BigInteger, ForeignKey("customer.id"), index=True
    )
    company_id: Mapped[Optional[int]] = mapped_column(
        BigInteger, ForeignKey("company_customer.id"), index=True
    )
    table_id: Mapped[Optional[int]] = mapped_column(
        BigInteger, ForeignKey("restaurant_table.id"), index=True
    )
    delivery_area_id: Mapped[Optional[int]] = mapped_column(
        BigInteger, ForeignKey("delivery_area.id")
    )
    cashier_id: Mapped[Optional[int]] = mapped_column(BigInteger, ForeignKey("staff.id"))
    kitchen_staff_id: Mapped[Optional[int]] = mapped_column(BigInteger, ForeignKey("staff.id"))
    hall_manager_id: Mapped[Optional[int]] = mapped_column(BigInteger, ForeignKey("staff.id"))
    delivery_staff_id: Mapped[Optional[int]] = mapped_column(BigInteger, ForeignKey("staff.id"))

    subtotal: Mapped[Decimal] = mapped_column(Money, nullable=False)
    tax_amount: Mapped[Decimal] = mapped_column(Money, nullable=False)
    delivery_fee: Mapped[Decimal] = mapped_column(Money, default=Decimal("0"), nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(Money, nullable=False)

    special_instructions: Mapped[Optional[str]] = mapped_column(Text)
    is_paid: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    estimated_ready_time: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    # Each stamped once, in transition order
    confirmed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    kitchen_start_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    ready_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    served_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    delivered_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    # Relationships
    items: Mapped[list["OrderItem"]] = relationship(
        back_populates="order", order_by="OrderItem.id"
    )
    status_history: Mapped[list["OrderStatusHistory"]] = relationship(
        back_populates="order", order_by="OrderStatusHistory.id"
    )
    customer: Mapped[Optional["Customer"]] = relationship()
    company: Mapped[Optional["CompanyCustomer"]] = relationship()
    table: Mapped[Optional["Table"]] = relationship()
    delivery_area: Mapped[Optional["DeliveryArea"]] = relationship()
    cashier: Mapped[Optional["Staff"]] = relationship(foreign_keys=[cashier_id])
    kitchen_staff: Mapped[Optional["Staff"]] = relationship(foreign_keys=[kitchen_staff_id])
    hall_manager: Mapped[Optional["Staff"]] = relationship(foreign_keys=[hall_manager_id])
    delivery_staff: Mapped[Optional["Staff"]] = relationship(foreign_keys=[delivery_staff_id])

    __table_args__ = (
        CheckConstraint("subtotal >= 0", name="chk_order_subtotal_non_negative"),
        CheckConstraint("tax_amount >= 0", name="chk_order_tax_non_negative"),
        CheckConstraint("delivery_fee >= 0", name="chk_order_delivery_fee_non_negative"),
        CheckConstraint("total_amount >= 0", name="chk_order_total_non_negative"),
        Index("ix_order_status_created", "status", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Order(id={self.id}, order_number='{self.order_number}', status='{self.status}')>"


class OrderItem(AuditMixin, Base):
    """
    A single line of an order. Prices are captured at creation and never
    change afterwards. item_type decides which one of item_id, recipe_id and
    meal_id is set.
    """

    __tablename__ = "order_item"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    order_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("pos_order.id"), nullable=False, index=True
    )
    item_type: Mapped[str] = mapped_column(Text, nullable=False)  # ITEM, RECIPE, MEAL
    item_id: Mapped[Optional[int]] = mapped_column(BigInteger, ForeignKey("item.id"))
    recipe_id: Mapped[Optional[int]] = mapped_column(BigInteger, ForeignKey("recipe.id"))
    meal_id: Mapped[Optional[int]] = mapped_column(BigInteger, ForeignKey("meal.id"))
    cooking_method_id: Mapped[Optional[int]] = mapped_column(
        BigInteger, ForeignKey("cooking_method.id")
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Money, nullable=False)
    total_price: Mapped[Decimal] = mapped_column(Money, nullable=False)
    status: Mapped[str] = mapped_column(Text, default="PENDING", nullable=False)  # PENDING, PREPARING, READY
    special_instructions: Mapped[Optional[str]] = mapped_column(Text)

    __table_args__ = (
        CheckConstraint("quantity > 0", name="chk_order_item_qty_positive"),
        CheckConstraint("unit_price >= 0", name="chk_order_item_price_non_negative"),
        CheckConstraint(
            "(item_type = 'ITEM' AND item_id IS NOT NULL AND recipe_id IS NULL AND meal_id IS NULL)"
            " OR (item_type = 'RECIPE' AND recipe_id IS NOT NULL AND item_id IS NULL AND meal_id IS NULL)"
            " OR (item_type = 'MEAL' AND meal_id IS NOT NULL AND item_id IS NULL AND recipe_id IS NULL)",
            name="chk_order_item_single_reference",
        ),
        Index("ix_order_item_order_status", "order_id", "status"),
    )

    # Relationships
    order: Mapped["Order"] = relationship(back_populates="items")
    item: Mapped[Optional["Item"]] = relationship()
    recipe: Mapped[Optional["Recipe"]] = relationship()
    meal: Mapped[Optional["Meal"]] = relationship()
    cooking_method: Mapped[Optional["CookingMethod"]] = relationship()


class OrderStatusHistory(Base):
    """
    Append-only audit trail of an order's status changes.
    The first row of every order has old_status NULL and new_status PENDING.
    """

    __tablename__ = "order_status_history"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    order_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("pos_order.id"), nullable=False, index=True
    )
    old_status: Mapped[Optional[str]] = mapped_column(Text)
    new_status: Mapped[str] = mapped_column(Text, nullable=False)
    changed_by_staff_id: Mapped[Optional[int]] = mapped_column(BigInteger, ForeignKey("staff.id"))
    notes: Mapped[Optional[str]] = mapped_column(Text)
    changed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    # Relationships
    order: Mapped["Order"] = relationship(back_populates="status_history")
    changed_by_staff: Mapped[Optional["Staff"]] = relationship()
