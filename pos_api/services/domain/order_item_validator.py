"""
Order Item Validator.

Turns a requested order line into a priced, timed line ready to persist.
Every check runs before anything is written, so a failing line leaves the
database untouched.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from shared.config.constants import PrepTime
from shared.config.logging import get_logger
from shared.utils.exceptions import ConflictError, InsufficientStockError, ValidationError
from shared.utils.schemas import OrderLineInput

from .catalog_lookup import CatalogEntry, CatalogLookup, CatalogType

logger = get_logger(__name__)


@dataclass(frozen=True)
class LineReference:
    """
    Which catalog row an order line points at.

    Maps onto exactly one of the order_item foreign keys.
    """

    catalog_type: CatalogType
    reference_id: int

    @property
    def item_type(self) -> str:
        """Value stored in order_item.item_type."""
        return self.catalog_type.value.upper()

    def foreign_keys(self) -> dict[str, int | None]:
        return {
            "item_id": self.reference_id if self.catalog_type is CatalogType.ITEM else None,
            "recipe_id": self.reference_id if self.catalog_type is CatalogType.RECIPE else None,
            "meal_id": self.reference_id if self.catalog_type is CatalogType.MEAL else None,
        }


@dataclass(frozen=True)
class ValidatedOrderLine:
    reference: LineReference
    quantity: int
    unit_price: Decimal
    total_price: Decimal
    estimated_time: int
    resolved_name: str
    cooking_method_id: int | None = None
    special_instructions: str | None = None


def base_preparation_time(entry: CatalogEntry) -> int:
    """Per-unit preparation minutes before any cooking method."""
    if entry.catalog_type is CatalogType.ITEM:
        return PrepTime.ITEM
    if entry.catalog_type is CatalogType.RECIPE:
        return entry.preparation_time or PrepTime.RECIPE
    return entry.preparation_time or PrepTime.MEAL


class OrderItemValidator:
    """Validates and prices order lines against the catalog."""

    def __init__(self, catalog: CatalogLookup):
        self._catalog = catalog

    def validate(self, line: OrderLineInput) -> ValidatedOrderLine:
        """
        Validate one line.

        Raises:
            ValidationError: Unknown item type or non-positive quantity
            NotFoundError: Catalog entry or cooking method missing
            ConflictError: Entry or cooking method not available
            InsufficientStockError: Tracked item stock below the quantity
        """
        catalog_type = CatalogType.parse(line.item_type)
        if line.quantity is None or line.quantity <= 0:
            raise ValidationError("Quantity must be a positive integer", field="quantity")

        entry = self._catalog.resolve(catalog_type, line.item_reference_id)
        if not entry.is_available:
            raise ConflictError(
                f'{catalog_type.label} "{entry.name}" is not available',
                item_type=catalog_type.value,
                reference_id=entry.reference_id,
            )

        if (
            catalog_type is CatalogType.ITEM
            and entry.current_stock is not None
            and entry.current_stock < line.quantity
        ):
            raise InsufficientStockError(
                entry.name,
                available=entry.current_stock,
                requested=line.quantity,
                item_id=entry.reference_id,
            )

        unit_price = entry.base_price
        unit_time = base_preparation_time(entry)

        if line.cooking_method_id is not None:
            method = self._catalog.resolve_cooking_method(line.cooking_method_id)
            if not method.is_available:
                raise ConflictError(
                    f'Cooking method "{method.name}" is not available',
                    cooking_method_id=method.cooking_method_id,
                )
            unit_price += method.additional_cost
            unit_time += method.extra_time

        return ValidatedOrderLine(
            reference=LineReference(catalog_type, entry.reference_id),
            quantity=line.quantity,
            unit_price=unit_price,
            total_price=unit_price * line.quantity,
            estimated_time=unit_time * line.quantity,
            resolved_name=entry.name,
            cooking_method_id=line.cooking_method_id,
            special_instructions=line.special_instructions,
        )

    def validate_all(self, lines: Iterable[OrderLineInput]) -> list[ValidatedOrderLine]:
        """Validate every line in order; the first failure aborts."""
        return [self.validate(line) for line in lines]
