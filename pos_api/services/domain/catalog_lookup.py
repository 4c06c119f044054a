"""
Catalog Lookup.

Resolves a menu reference (item / recipe / meal) or a cooking-method
modifier to the price, availability and timing data an order line needs.
Read-only: nothing here writes.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from sqlalchemy import select
from sqlalchemy.orm import Session

from pos_api.models import CookingMethod, Item, Meal, Recipe
from shared.utils.exceptions import NotFoundError, ValidationError


class CatalogType(str, Enum):
    """Kinds of catalog entries an order line can reference."""

    ITEM = "item"
    RECIPE = "recipe"
    MEAL = "meal"

    @classmethod
    def parse(cls, raw: str) -> "CatalogType":
        """Case-insensitive parse; unknown values are invalid input."""
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            raise ValidationError(f"Invalid item type: {raw}", field="item_type") from None

    @property
    def label(self) -> str:
        return self.value.capitalize()


@dataclass(frozen=True)
class CatalogEntry:
    """Resolved sellable entry."""

    catalog_type: CatalogType
    reference_id: int
    name: str
    base_price: Decimal
    is_available: bool
    # Items only; None when stock is not tracked
    current_stock: Decimal | None = None
    # Recipes and meals only; None when not configured
    preparation_time: int | None = None


@dataclass(frozen=True)
class CookingMethodEntry:
    """Resolved cooking-method modifier."""

    cooking_method_id: int
    name: str
    additional_cost: Decimal
    is_available: bool
    extra_time: int


class CatalogLookup:
    """Looks up catalog entries, treating soft-deleted rows as absent."""

    def __init__(self, db: Session):
        self._db = db

    def resolve(self, catalog_type: CatalogType, reference_id: int) -> CatalogEntry:
        """
        Resolve a catalog reference.

        Raises NotFoundError when the id is unknown or soft-deleted.
        """
        if catalog_type is CatalogType.ITEM:
            item = self._get_live(Item, reference_id, catalog_type.label)
            return CatalogEntry(
                catalog_type=catalog_type,
                reference_id=item.id,
                name=item.item_name_en,
                base_price=Decimal(item.selling_price),
                is_available=item.is_available,
                current_stock=(
                    Decimal(item.current_stock) if item.current_stock is not None else None
                ),
            )

        if catalog_type is CatalogType.RECIPE:
            recipe = self._get_live(Recipe, reference_id, catalog_type.label)
            return CatalogEntry(
                catalog_type=catalog_type,
                reference_id=recipe.id,
                name=recipe.recipe_name_en,
                base_price=Decimal(recipe.selling_price),
                is_available=recipe.is_available,
                preparation_time=recipe.preparation_time,
            )

        if catalog_type is CatalogType.MEAL:
            meal = self._get_live(Meal, reference_id, catalog_type.label)
            return CatalogEntry(
                catalog_type=catalog_type,
                reference_id=meal.id,
                name=meal.meal_name_en,
                base_price=Decimal(meal.selling_price),
                is_available=meal.is_available,
                preparation_time=meal.preparation_time,
            )

        raise ValidationError(f"Invalid item type: {catalog_type}", field="item_type")

    def resolve_cooking_method(self, cooking_method_id: int) -> CookingMethodEntry:
        """
        Resolve a cooking-method modifier.

        Raises NotFoundError when the id is unknown or soft-deleted.
        """
        method = self._get_live(CookingMethod, cooking_method_id, "Cooking method")
        return CookingMethodEntry(
            cooking_method_id=method.id,
            name=method.method_name_en,
            additional_cost=Decimal(method.additional_cost or 0),
            is_available=method.is_available,
            extra_time=method.cooking_time or 0,
        )

    def _get_live(self, model, entity_id: int, entity_label: str):
        row = self._db.scalar(
            select(model).where(model.id == entity_id, model.deleted_at.is_(None))
        )
        if row is None:
            raise NotFoundError(entity_label, entity_id)
        return row
