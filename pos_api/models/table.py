"""
Table and Delivery Models: Table, DeliveryArea.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from sqlalchemy import Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import AuditMixin, Base, BigIntPK, Money


class Table(AuditMixin, Base):
    """
    Physical table in the restaurant.
    Order creation and status changes flip its status between
    AVAILABLE and OCCUPIED.
    """

    # "table" is a reserved SQL keyword
    __tablename__ = "restaurant_table"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    table_number: Mapped[str] = mapped_column(Text, nullable=False)
    table_type: Mapped[Optional[str]] = mapped_column(Text)  # INDOOR, OUTDOOR, VIP
    capacity: Mapped[int] = mapped_column(Integer, default=4)
    status: Mapped[str] = mapped_column(
        Text, default="AVAILABLE", nullable=False, index=True
    )  # AVAILABLE, OCCUPIED, RESERVED, CLEANING

    __table_args__ = (
        Index("ix_table_number", "table_number"),
    )


class DeliveryArea(AuditMixin, Base):
    """Delivery zone with its fee and typical travel time."""

    __tablename__ = "delivery_area"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    area_name: Mapped[str] = mapped_column(Text, nullable=False)
    delivery_fee: Mapped[Decimal] = mapped_column(Money, default=Decimal("0"), nullable=False)
    estimated_delivery_time: Mapped[Optional[int]] = mapped_column(Integer)  # minutes
