"""
Catalog Models: Item, Recipe, Meal, CookingMethod.

Everything a line of an order can point at, plus the cooking-method
modifier that adjusts a line's price and preparation time.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from sqlalchemy import Boolean, Integer, Numeric, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import AuditMixin, Base, BigIntPK, Money


class Item(AuditMixin, Base):
    """
    Inventory item sold as-is (drinks, packaged goods).
    current_stock is NULL for items whose stock is not tracked.
    """

    __tablename__ = "item"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    item_name_en: Mapped[str] = mapped_column(Text, nullable=False)
    item_name_ar: Mapped[Optional[str]] = mapped_column(Text)
    selling_price: Mapped[Decimal] = mapped_column(Money, nullable=False)
    is_available: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    current_stock: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 3))


class Recipe(AuditMixin, Base):
    """Dish prepared in the kitchen."""

    __tablename__ = "recipe"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    recipe_name_en: Mapped[str] = mapped_column(Text, nullable=False)
    recipe_name_ar: Mapped[Optional[str]] = mapped_column(Text)
    selling_price: Mapped[Decimal] = mapped_column(Money, nullable=False)
    is_available: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    preparation_time: Mapped[Optional[int]] = mapped_column(Integer)  # minutes


class Meal(AuditMixin, Base):
    """Combo of recipes and items sold at one price."""

    __tablename__ = "meal"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    meal_name_en: Mapped[str] = mapped_column(Text, nullable=False)
    meal_name_ar: Mapped[Optional[str]] = mapped_column(Text)
    selling_price: Mapped[Decimal] = mapped_column(Money, nullable=False)
    is_available: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    preparation_time: Mapped[Optional[int]] = mapped_column(Integer)  # minutes


class CookingMethod(AuditMixin, Base):
    """Modifier such as grilled or fried, with a surcharge and extra time."""

    __tablename__ = "cooking_method"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    method_name_en: Mapped[str] = mapped_column(Text, nullable=False)
    method_name_ar: Mapped[Optional[str]] = mapped_column(Text)
    additional_cost: Mapped[Decimal] = mapped_column(Money, default=Decimal("0"), nullable=False)
    is_available: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    cooking_time: Mapped[Optional[int]] = mapped_column(Integer)  # minutes
